from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Sequence

import altair as alt
import pandas as pd

from core.channels import CHANNELS, Channel, classify_channel
from core.charts import channel_color_scale, to_vega_spec
from core.fields import TOUCH_SLOTS, get_text
from core.filters import DashboardFilters
from core.pipeline import is_scheduled, last_touch_text


def _tally(channels: List[Channel]) -> List[Dict[str, Any]]:
    counts = {channel: 0 for channel in CHANNELS}
    for channel in channels:
        counts[channel] += 1
    return [{"channel": channel, "count": counts[channel]} for channel in CHANNELS]


def channel_volume(records: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Every touch that was sent, by channel."""
    sent = []
    for record in records:
        for slot in TOUCH_SLOTS:
            text = get_text(record, slot)
            if text:
                sent.append(classify_channel(text))
    return _tally(sent)


def channel_efficiency(records: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Scheduled meetings, by the channel of the touch that closed them (the last one sent)."""
    return _tally([classify_channel(last_touch_text(r)) for r in records if is_scheduled(r)])


def compute_channels(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: Sequence[Mapping[str, Any]] = ctx.get("filtered_records", []) or []
    volume = channel_volume(records)
    efficiency = channel_efficiency(records)

    charts: Dict[str, Any] = {}
    if records:
        volume_chart = (
            alt.Chart(pd.DataFrame(volume))
            .mark_bar(cornerRadiusEnd=4)
            .encode(
                x=alt.X("count:Q", title="Touches sent"),
                y=alt.Y("channel:N", title=None, sort=list(CHANNELS)),
                color=alt.Color("channel:N", scale=channel_color_scale(), legend=None),
                tooltip=[alt.Tooltip("channel:N", title="Channel"), alt.Tooltip("count:Q", title="Volume", format=",")],
            )
        )
        charts["channel_volume"] = to_vega_spec(volume_chart)

    if any(row["count"] for row in efficiency):
        eff_df = pd.DataFrame(efficiency)
        eff_df = eff_df[eff_df["count"] > 0]
        donut = (
            alt.Chart(eff_df)
            .mark_arc(innerRadius=60, outerRadius=90)
            .encode(
                theta=alt.Theta("count:Q"),
                color=alt.Color("channel:N", scale=channel_color_scale(), title="Channel"),
                tooltip=[alt.Tooltip("channel:N", title="Channel"), alt.Tooltip("count:Q", title="Meetings")],
            )
        )
        charts["channel_efficiency"] = to_vega_spec(donut)

    return {
        "filters": asdict(filters),
        "volume": volume,
        "efficiency": efficiency,
        "charts": charts,
    }
