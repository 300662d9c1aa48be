from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from core.fields import CARGO, EMPRESA, NOME, RESULTADO, SOBRENOME, as_lower_text, full_name, get_lower, get_text
from core.pipeline import classify_stage, has_response

MIN_QUERY_LENGTH = 2
SEARCH_FIELDS = (NOME, SOBRENOME, EMPRESA, CARGO)


def status_label(record: Mapping[str, Any]) -> str:
    outcome = get_text(record, RESULTADO)
    if outcome:
        return outcome
    return "RESPONDIDO" if has_response(record) else "PROSPECTANDO"


def search_contacts(records: Sequence[Mapping[str, Any]], query: str, limit: int = 12) -> List[Dict[str, Any]]:
    q = as_lower_text(query)
    if len(q) < MIN_QUERY_LENGTH:
        return []
    hits = []
    for record in records:
        if not any(q in get_lower(record, field) for field in SEARCH_FIELDS):
            continue
        hits.append(
            {
                "name": full_name(record),
                "company": get_text(record, EMPRESA),
                "title": get_text(record, CARGO),
                "stage": classify_stage(record),
                "status": status_label(record),
            }
        )
        if len(hits) >= limit:
            break
    return hits


def compute_search(ctx: Dict[str, Any], *, q: str = "", limit: int = 12) -> Dict[str, Any]:
    # search always runs over the unfiltered sheet
    records = ctx.get("records", []) or []
    results = search_contacts(records, q, limit=limit)
    return {"query": q, "count": len(results), "results": results}
