from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.channels import classify_channel
from core.dates import format_date
from core.fields import CARGO, EMPRESA, RESPOSTA, RESULTADO, full_name, get_text
from core.filters import DashboardFilters
from core.pipeline import (
    STAGES,
    Stage,
    classify_stage,
    is_exhausted,
    is_late,
    last_touch,
    last_touch_text,
    next_pending_touch,
)

SNIPPET_LENGTH = 60

STAGE_CAPTIONS: Dict[Stage, str] = {
    "Prospecting": "AGUARDANDO",
    "Responded": "RESPONDIDO",
    "Scheduled": "META BATIDA",
    "Closed": "CONCLUÍDO",
}


def contact_card(record: Mapping[str, Any], stage: Stage, today: date) -> Dict[str, Any]:
    pending = next_pending_touch(record)
    response = get_text(record, RESPOSTA)
    snippet = response[:SNIPPET_LENGTH] + ("..." if len(response) > SNIPPET_LENGTH else "")
    return {
        "name": full_name(record),
        "company": get_text(record, EMPRESA),
        "title": get_text(record, CARGO),
        "stage": stage,
        "caption": STAGE_CAPTIONS[stage],
        "outcome": get_text(record, RESULTADO),
        "last_touch": last_touch(record),
        "last_channel": classify_channel(last_touch_text(record)),
        "pending": (
            {
                "label": pending.label,
                "num": pending.num,
                "date_str": pending.date_str,
                "date": format_date(pending.date),
            }
            if pending is not None
            else None
        ),
        "is_late": stage == "Prospecting" and is_late(record, today),
        # every touch sent and still nothing back: needs a manual follow-up
        "is_exhausted": is_exhausted(record),
        "response_snippet": snippet,
    }


def compute_kanban(filters: DashboardFilters, ctx: Dict[str, Any], *, today: Optional[date] = None) -> Dict[str, Any]:
    records: Sequence[Mapping[str, Any]] = ctx.get("filtered_records", []) or []
    today = today or date.today()

    columns: Dict[Stage, List[Dict[str, Any]]] = {stage: [] for stage in STAGES}
    for record in records:
        stage = classify_stage(record)
        columns[stage].append(contact_card(record, stage, today))

    return {
        "filters": asdict(filters),
        "today": format_date(today),
        "columns": [
            {"stage": stage, "caption": STAGE_CAPTIONS[stage], "count": len(columns[stage]), "cards": columns[stage]}
            for stage in STAGES
        ],
    }
