"""Per-contact pipeline derivation.

A contact's stage is never stored in the sheet: it is recomputed from the
``Resposta`` and ``Resultado`` cells every time, and every aggregate (KPI
tiles, kanban columns, channel efficiency) goes through ``classify_stage`` so
the views cannot disagree.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Literal, Mapping, Optional

from core.dates import parse_date
from core.fields import RESPOSTA, RESULTADO, TOUCH_SLOTS, get_lower, get_text


Stage = Literal["Prospecting", "Responded", "Scheduled", "Closed"]

STAGES: tuple[Stage, ...] = ("Prospecting", "Responded", "Scheduled", "Closed")

# "Agendado" in the source sheets, "Scheduled" in translated ones.
SCHEDULED_MARKERS = ("agend", "sched")

NO_DATE = "Data N/D"


@dataclass(frozen=True)
class TouchStep:
    slot: str
    date_field: str
    label: str
    num: int


# Touch 1 is never pending: an empty Touch 1 means the contact was never started.
TOUCH_SEQUENCE: tuple[TouchStep, ...] = (
    TouchStep("Touch 2", "Próximo Touch", "Touch 2", 2),
    TouchStep("Touch 3", "Terceiro Touch", "Touch 3", 3),
    TouchStep("Touch 4", "Quarto Touch", "Touch 4", 4),
    TouchStep("Touch 5", "Quinto Touch", "Touch 5", 5),
    TouchStep("Touch 6", "Sexto Touch", "Touch 6", 6),
    TouchStep("Touch 7", "Sétimo Touch", "Touch 7", 7),
)


@dataclass(frozen=True)
class PendingTouch:
    date: Optional[date]
    date_str: str
    label: str
    num: int


def has_response(record: Mapping[str, Any]) -> bool:
    return get_text(record, RESPOSTA) != ""


def has_outcome(record: Mapping[str, Any]) -> bool:
    return get_text(record, RESULTADO) != ""


def is_scheduled(record: Mapping[str, Any]) -> bool:
    outcome = get_lower(record, RESULTADO)
    return any(marker in outcome for marker in SCHEDULED_MARKERS)


def classify_stage(record: Mapping[str, Any]) -> Stage:
    if has_outcome(record):
        return "Scheduled" if is_scheduled(record) else "Closed"
    if has_response(record):
        return "Responded"
    return "Prospecting"


def stage_counts(records: Iterable[Mapping[str, Any]]) -> Dict[Stage, int]:
    counts: Dict[Stage, int] = {stage: 0 for stage in STAGES}
    for record in records:
        counts[classify_stage(record)] += 1
    return counts


def last_touch(record: Mapping[str, Any]) -> Optional[str]:
    """Label of the highest-numbered non-empty touch slot, or None if nothing was sent."""
    for slot in reversed(TOUCH_SLOTS):
        if get_text(record, slot):
            return slot
    return None


def last_touch_text(record: Mapping[str, Any]) -> str:
    slot = last_touch(record)
    return get_text(record, slot) if slot else ""


def next_pending_touch(record: Mapping[str, Any]) -> Optional[PendingTouch]:
    if has_response(record) or has_outcome(record):
        return None
    for step in TOUCH_SEQUENCE:
        if get_text(record, step.slot):
            continue
        raw = record.get(step.date_field)
        return PendingTouch(
            date=parse_date(raw),
            date_str=get_text(record, step.date_field) or NO_DATE,
            label=step.label,
            num=step.num,
        )
    return None


def is_late(record: Mapping[str, Any], today: Optional[date] = None) -> bool:
    """True when the next pending touch has a known date strictly before today.

    A pending touch without a usable date cannot be late.
    """
    pending = next_pending_touch(record)
    if pending is None or pending.date is None:
        return False
    return pending.date < (today or date.today())


def is_exhausted(record: Mapping[str, Any]) -> bool:
    """Prospecting contact with every touch sent and nothing left to schedule."""
    return classify_stage(record) == "Prospecting" and next_pending_touch(record) is None
