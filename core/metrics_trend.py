from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Sequence

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.dates import format_date, parse_date
from core.fields import DATA_CONEXAO, DATA_RESPOSTA
from core.filters import DashboardFilters
from core.pipeline import has_response, is_scheduled


@dataclass(frozen=True)
class TrendPoint:
    bucket_label: str
    cumulative_connections: int
    cumulative_responses: int
    cumulative_meetings: int


def _bucket_key(label: str):
    day, month = (int(p) for p in label.split("/"))
    return month, day


def compute_cumulative_series(records: Sequence[Mapping[str, Any]]) -> List[TrendPoint]:
    """Running totals of connections, responses and meetings per calendar day.

    Buckets are "DD/MM" labels sorted by (month, day). The year is dropped, so
    a dataset spanning two years folds onto one calendar; this is a known
    limitation of the label format.
    """
    buckets: Dict[str, Dict[str, int]] = defaultdict(lambda: {"connections": 0, "responses": 0, "meetings": 0})
    for record in records:
        connected = parse_date(record.get(DATA_CONEXAO))
        if connected is not None:
            buckets[format_date(connected)[:5]]["connections"] += 1

        responded = parse_date(record.get(DATA_RESPOSTA))
        if responded is not None:
            bucket = buckets[format_date(responded)[:5]]
            if has_response(record):
                bucket["responses"] += 1
            if is_scheduled(record):
                bucket["meetings"] += 1

    points: List[TrendPoint] = []
    connections = responses = meetings = 0
    for label in sorted(buckets, key=_bucket_key):
        connections += buckets[label]["connections"]
        responses += buckets[label]["responses"]
        meetings += buckets[label]["meetings"]
        points.append(TrendPoint(label, connections, responses, meetings))
    return points


def compute_trend(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: Sequence[Mapping[str, Any]] = ctx.get("filtered_records", []) or []
    points = compute_cumulative_series(records)
    series = [asdict(p) for p in points]

    charts: Dict[str, Any] = {}
    if series:
        df = pd.DataFrame(series)
        order = df["bucket_label"].tolist()
        long_df = df.melt(
            id_vars="bucket_label",
            value_vars=["cumulative_connections", "cumulative_responses", "cumulative_meetings"],
            var_name="metric",
            value_name="count",
        )
        long_df["metric"] = long_df["metric"].map(
            {
                "cumulative_connections": "Total Contacts",
                "cumulative_responses": "Responses",
                "cumulative_meetings": "Meetings",
            }
        )
        hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
        area = (
            alt.Chart(long_df)
            .mark_area(line=True, opacity=0.25)
            .encode(
                x=alt.X("bucket_label:O", title="Day", sort=order),
                y=alt.Y("count:Q", title="Cumulative", stack=None),
                color=alt.Color(
                    "metric:N",
                    title="Metric",
                    scale=alt.Scale(
                        domain=["Total Contacts", "Responses", "Meetings"],
                        range=["#64748b", "#a855f7", "#2dd4bf"],
                    ),
                ),
                opacity=alt.condition(hover, alt.value(0.6), alt.value(0.15)),
                tooltip=[
                    alt.Tooltip("bucket_label:O", title="Day"),
                    alt.Tooltip("metric:N", title="Metric"),
                    alt.Tooltip("count:Q", title="Cumulative", format=","),
                ],
            )
            .add_params(hover)
        )
        charts["cumulative_trend"] = to_vega_spec(area)

    return {"filters": asdict(filters), "series": series, "charts": charts}
