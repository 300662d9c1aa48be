from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.fields import EMPRESA, ORIGEM, TOUCH_VENCEDOR, as_text, get_text


@dataclass(frozen=True)
class DashboardFilters:
    company: str = ""
    winning_touch: str = ""
    source: str = ""


FILTER_FIELDS = {
    "company": EMPRESA,
    "winning_touch": TOUCH_VENCEDOR,
    "source": ORIGEM,
}


def normalize_filters(raw: Optional[Mapping[str, Any]]) -> DashboardFilters:
    raw = raw or {}
    return DashboardFilters(
        company=as_text(raw.get("company")),
        winning_touch=as_text(raw.get("winning_touch")),
        source=as_text(raw.get("source")),
    )


def apply_filters(records: Iterable[Mapping[str, Any]], filters: DashboardFilters) -> List[Mapping[str, Any]]:
    """Keep records matching every selected value; an empty selection matches all."""
    selected = {field: getattr(filters, attr) for attr, field in FILTER_FIELDS.items() if getattr(filters, attr)}
    if not selected:
        return list(records)
    return [r for r in records if all(get_text(r, field) == value for field, value in selected.items())]


def filter_options(records: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    seen: Dict[str, set] = {attr: set() for attr in FILTER_FIELDS}
    for record in records:
        for attr, field in FILTER_FIELDS.items():
            value = get_text(record, field)
            if value:
                seen[attr].add(value)
    return {attr: sorted(values) for attr, values in seen.items()}
