from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    company: str = ""
    winning_touch: str = ""
    source: str = ""


class DashboardRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    filters: DashboardFiltersModel = Field(default_factory=DashboardFiltersModel)
