from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ErrorOut(BaseModel):
    error: str


class HealthOut(BaseModel):
    status: str = "ok"
    draft_exists: bool = False


class CalendarWeekOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    global_index: int
    block_id: str
    week_id: str
    week_start: Optional[str] = None
    markers: list[str] = []


class SeasonWeeksOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    season_id: str
    start_date: Optional[str] = None
    total_weeks: int
    weeks: list[CalendarWeekOut]


ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Invalid mutation or document"},
    404: {"model": ErrorOut, "description": "Draft, block, week or marker not found"},
    500: {"model": ErrorOut, "description": "Storage failure"},
}
