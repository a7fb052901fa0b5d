"""Season document validation and the pydantic argument models for every mutation entry point."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from core.errors import SeasonValidationError, ValidationIssue
from core.models import (
    DEFAULT_BLOCK_NAME,
    DayAssignment,
    DayKey,
    EventRole,
    FocusLabel,
    IntensityLabel,
    Season,
    SeasonStatus,
    parse_iso_date,
)
from core.services.season_index import total_weeks

MAX_WORKOUTS_PER_DAY = 2


def issues_from_pydantic(exc: ValidationError, root: str = "season") -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for err in exc.errors():
        path = root
        for part in err.get("loc", ()):
            path += f"[{part}]" if isinstance(part, int) else f".{part}"
        issues.append(ValidationIssue(path, err.get("msg", "invalid value")))
    return issues


def parse_season(data: Union[Season, Mapping[str, Any]]) -> Season:
    if isinstance(data, Season):
        return data
    try:
        return Season.model_validate(data)
    except ValidationError as exc:
        raise SeasonValidationError(issues_from_pydantic(exc)) from exc


def collect_issues(season: Season) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    # 1. block ids
    seen_blocks: dict[str, int] = {}
    for b_idx, block in enumerate(season.blocks):
        if block.block_id in seen_blocks:
            issues.append(
                ValidationIssue(
                    f"season.blocks[{b_idx}].blockId",
                    f"duplicate blockId {block.block_id!r} (first used at blocks[{seen_blocks[block.block_id]}])",
                )
            )
        else:
            seen_blocks[block.block_id] = b_idx

    # 2. week ids, unique across the whole season
    seen_weeks: dict[str, str] = {}
    for b_idx, block in enumerate(season.blocks):
        for w_idx, week in enumerate(block.weeks):
            path = f"season.blocks[{b_idx}].weeks[{w_idx}]"
            if week.week_id in seen_weeks:
                issues.append(
                    ValidationIssue(f"{path}.weekId", f"duplicate weekId {week.week_id!r} (first used at {seen_weeks[week.week_id]})")
                )
            else:
                seen_weeks[week.week_id] = path

    # 3. non-empty blocks, non-empty season
    for b_idx, block in enumerate(season.blocks):
        if len(block.weeks) < 1:
            issues.append(ValidationIssue(f"season.blocks[{b_idx}].weeks", "must contain at least one week"))
    if not season.blocks:
        issues.append(ValidationIssue("season.blocks", "must contain at least one block"))

    # 4. marker ids
    seen_markers: set[str] = set()
    for m_idx, marker in enumerate(season.season_markers):
        if marker.marker_id in seen_markers:
            issues.append(ValidationIssue(f"season.seasonMarkers[{m_idx}].markerId", f"duplicate markerId {marker.marker_id!r}"))
        seen_markers.add(marker.marker_id)

    # 5. marker positions
    weeks_total = total_weeks(season)
    for m_idx, marker in enumerate(season.season_markers):
        if weeks_total == 0:
            issues.append(ValidationIssue(f"season.seasonMarkers[{m_idx}].weekIndex", "season has no weeks to mark"))
        elif not 0 <= marker.week_index < weeks_total:
            issues.append(
                ValidationIssue(
                    f"season.seasonMarkers[{m_idx}].weekIndex",
                    f"{marker.week_index} is out of range [0, {weeks_total - 1}]",
                )
            )

    # 6. per-day workout references
    for b_idx, block in enumerate(season.blocks):
        for w_idx, week in enumerate(block.weeks):
            for day_key, assignment in week.days.items():
                if assignment.workout_ids is None:
                    continue
                path = f"season.blocks[{b_idx}].weeks[{w_idx}].days.{day_key}.workoutIds"
                if len(assignment.workout_ids) > MAX_WORKOUTS_PER_DAY:
                    issues.append(ValidationIssue(path, f"at most {MAX_WORKOUTS_PER_DAY} workouts per day"))
                if any(not str(w).strip() for w in assignment.workout_ids):
                    issues.append(ValidationIssue(path, "workout ids must not be blank"))

    return issues


def assert_season(data: Union[Season, Mapping[str, Any]]) -> Season:
    season = parse_season(data)
    issues = collect_issues(season)
    if issues:
        raise SeasonValidationError(issues)
    return season


def assert_season_for_save(data: Union[Season, Mapping[str, Any]], expected_status: Optional[SeasonStatus] = None) -> Season:
    season = assert_season(data)
    if expected_status and season.status != expected_status:
        raise SeasonValidationError(
            [ValidationIssue("season.status", f"must be {expected_status} when saving (got {season.status})")]
        )
    return season


# -- Mutation argument models --


class _Args(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class _Patch(_Args):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SeasonPatch(_Patch):
    start_date: Optional[str] = None

    @field_validator("start_date")
    @classmethod
    def valid_start_date(cls, v):
        if v is not None:
            parse_iso_date(v)
        return v


class BlockPatch(_Patch):
    name: Optional[str] = None
    tags: Optional[list[str]] = None
    race_anchor_id: Optional[str] = None


class WeekPatch(_Patch):
    focus: Optional[FocusLabel] = None
    stress: Optional[IntensityLabel] = None
    volume: Optional[IntensityLabel] = None
    intensity: Optional[IntensityLabel] = None
    days: Optional[dict[DayKey, DayAssignment]] = None
    event_ids: Optional[list[str]] = None
    event_roles: Optional[dict[str, EventRole]] = None

    @field_validator("stress", "volume", "intensity")
    @classmethod
    def scale_not_null(cls, v):
        if v is None:
            raise ValueError("intensity scale values cannot be null")
        return v


class WeekTemplate(_Patch):
    focus: Optional[FocusLabel] = None
    stress: IntensityLabel = "low"
    volume: IntensityLabel = "low"
    intensity: IntensityLabel = "low"
    days: Optional[dict[DayKey, DayAssignment]] = None
    event_ids: Optional[list[str]] = None
    event_roles: Optional[dict[str, EventRole]] = None


class BlockTemplate(_Patch):
    name: str = DEFAULT_BLOCK_NAME
    tags: list[str] = Field(default_factory=list)
    weeks: list[WeekTemplate] = Field(default_factory=list)
    race_anchor_id: Optional[str] = None


class UpdateSeasonArgs(_Args):
    partial_update: SeasonPatch = Field(default_factory=SeasonPatch)


class AddBlockAfterArgs(_Args):
    target_block_id: str
    block_template: Optional[BlockTemplate] = None


class RemoveBlockArgs(_Args):
    block_id: str


class MoveBlockArgs(_Args):
    block_id: str
    new_index: StrictInt


class AddWeekToBlockArgs(_Args):
    block_id: str
    position: Optional[StrictInt] = None


class RemoveWeekFromBlockArgs(_Args):
    block_id: str
    week_id: str


class UpdateBlockArgs(_Args):
    block_id: str
    partial_update: BlockPatch = Field(default_factory=BlockPatch)


class UpdateWeekArgs(_Args):
    block_id: str
    week_id: str
    partial_update: WeekPatch = Field(default_factory=WeekPatch)


class ExtendBlockArgs(_Args):
    block_id: str
    count: StrictInt = 1


class ShrinkBlockArgs(_Args):
    block_id: str
    count: StrictInt = 1


class AddSeasonMarkerArgs(_Args):
    week_index: StrictInt
    label: str


class MoveSeasonMarkerArgs(_Args):
    marker_id: str
    new_week_index: StrictInt


class RemoveSeasonMarkerArgs(_Args):
    marker_id: str
