from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Sequence

from core.filters import DashboardFilters
from core.pipeline import has_response, is_scheduled


@dataclass(frozen=True)
class GoalDefaults:
    goal: int = 20
    touches_per_cycle: int = 7
    working_days: int = 20
    # fallbacks while there is no history to derive conversion from
    schedule_from_response_rate: float = 0.2
    schedule_from_total_rate: float = 0.05


DEFAULTS = GoalDefaults()


def compute_goal_projection(
    records: Sequence[Mapping[str, Any]],
    goal: int = DEFAULTS.goal,
    touches_per_cycle: int = DEFAULTS.touches_per_cycle,
    working_days: int = DEFAULTS.working_days,
) -> Dict[str, Any]:
    """Project the effort needed to reach a meeting goal from the historical conversion rates."""
    goal = max(0, int(goal))
    touches_per_cycle = max(0, int(touches_per_cycle))
    working_days = max(1, int(working_days))

    total = len(records)
    scheduled = sum(1 for r in records if is_scheduled(r))
    responded = sum(1 for r in records if has_response(r))

    remaining = max(0, goal - scheduled)
    rate_resp = scheduled / responded if responded else DEFAULTS.schedule_from_response_rate
    rate_total = scheduled / total if total else DEFAULTS.schedule_from_total_rate

    responses_needed = math.ceil(remaining / rate_resp) if rate_resp > 0 else remaining * 5
    contacts_needed = math.ceil(remaining / rate_total) if rate_total > 0 else remaining * 20
    daily_new_contacts = math.ceil(contacts_needed / working_days)
    # average effort: half of the cycle is sent before a contact answers or drops
    total_touches = contacts_needed * touches_per_cycle / 2

    return {
        "goal": goal,
        "touches_per_cycle": touches_per_cycle,
        "working_days": working_days,
        "scheduled": scheduled,
        "remaining": remaining,
        "schedule_from_response_rate": rate_resp,
        "schedule_from_total_rate": rate_total,
        "responses_needed": responses_needed,
        "contacts_needed": contacts_needed,
        "daily_new_contacts": daily_new_contacts,
        "total_touches": total_touches,
    }


def compute_goal(
    filters: DashboardFilters,
    ctx: Dict[str, Any],
    *,
    goal: int = DEFAULTS.goal,
    touches_per_cycle: int = DEFAULTS.touches_per_cycle,
    working_days: int = DEFAULTS.working_days,
) -> Dict[str, Any]:
    records = ctx.get("filtered_records", []) or []
    projection = compute_goal_projection(records, goal, touches_per_cycle, working_days)
    return {"filters": asdict(filters), "projection": projection}
