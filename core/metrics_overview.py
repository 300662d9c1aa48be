from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

import altair as alt
import pandas as pd

from core.charts import to_vega_spec
from core.filters import DashboardFilters
from core.pipeline import STAGES, has_outcome, has_response, is_late, is_scheduled, stage_counts


@dataclass(frozen=True)
class Kpis:
    total: int
    prospecting: int
    responded: int
    active_conversations: int
    scheduled: int
    closed: int
    finished: int
    late: int
    response_rate: float
    schedule_from_response_rate: float
    schedule_from_total_rate: float


def _ratio(num: int, den: int) -> float:
    return num / den if den else 0.0


def compute_kpis(records: Sequence[Mapping[str, Any]], today: Optional[date] = None) -> Kpis:
    today = today or date.today()
    stages = stage_counts(records)
    total = len(records)
    responded = sum(1 for r in records if has_response(r))
    scheduled = sum(1 for r in records if is_scheduled(r))
    finished = sum(1 for r in records if has_outcome(r))
    # is_late already restricts to contacts with no response and no outcome
    late = sum(1 for r in records if is_late(r, today))
    return Kpis(
        total=total,
        prospecting=stages["Prospecting"],
        responded=responded,
        active_conversations=stages["Responded"],
        scheduled=scheduled,
        closed=stages["Closed"],
        finished=finished,
        late=late,
        response_rate=_ratio(responded, total),
        schedule_from_response_rate=_ratio(scheduled, responded),
        schedule_from_total_rate=_ratio(scheduled, total),
    )


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any], *, today: Optional[date] = None) -> Dict[str, Any]:
    records: Sequence[Mapping[str, Any]] = ctx.get("filtered_records", []) or []
    kpis = compute_kpis(records, today)
    counts = stage_counts(records)

    charts: Dict[str, Any] = {}
    if records:
        stage_df = pd.DataFrame({"stage": list(STAGES), "contacts": [counts[s] for s in STAGES]})
        stage_chart = (
            alt.Chart(stage_df)
            .mark_bar(cornerRadiusEnd=4)
            .encode(
                x=alt.X("contacts:Q", title="Contacts"),
                y=alt.Y("stage:N", title=None, sort=list(STAGES)),
                color=alt.Color("stage:N", legend=None, sort=list(STAGES)),
                tooltip=[alt.Tooltip("stage:N", title="Stage"), alt.Tooltip("contacts:Q", title="Contacts", format=",")],
            )
        )
        charts["stage_distribution"] = to_vega_spec(stage_chart)

    return {
        "filters": asdict(filters),
        "kpis": asdict(kpis),
        "stage_counts": dict(counts),
        "charts": charts,
    }
