"""Season planning document: the persisted JSON shape and its entity factories."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, ClassVar, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel

IntensityLabel = Literal["low", "low-med", "med", "med-high", "high", "very-high"]
FocusLabel = Literal["base", "deload", "speed", "hill-power", "mileage", "ultra", "heat", "taper"]
DayKey = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
SeasonStatus = Literal["draft", "published"]
EventRole = Literal["goal", "tuneup", "simulation", "social"]

INTENSITY_LABELS: tuple[str, ...] = ("low", "low-med", "med", "med-high", "high", "very-high")
FOCUS_LABELS: tuple[str, ...] = ("base", "deload", "speed", "hill-power", "mileage", "ultra", "heat", "taper")
DAY_KEYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DEFAULT_BLOCK_NAME = "Blank Block"
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def intensity_rank(label: str) -> int:
    return INTENSITY_LABELS.index(label)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


def _non_blank(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} must be a non-empty string")
    return value


class SeasonDocument(BaseModel):
    """Base for every persisted entity.

    Models are frozen; edits go through ``model_copy`` or a fresh
    ``model_validate`` so an existing document is never changed in place.
    Fields listed in ``omit_if_none`` are left out of the JSON when unset.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")

    omit_if_none: ClassVar[tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _drop_unset_optionals(self, handler) -> dict[str, Any]:
        data = handler(self)
        for name in self.omit_if_none:
            for key in (name, to_camel(name)):
                if key in data and data[key] is None:
                    del data[key]
        return data

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DayAssignment(SeasonDocument):
    omit_if_none: ClassVar[tuple[str, ...]] = ("workout_id", "workout_ids", "notes")

    workout_id: Optional[str] = None
    workout_ids: Optional[list[str]] = None
    notes: Optional[str] = None

    @field_validator("workout_id")
    @classmethod
    def _workout_id_not_blank(cls, v):
        if v is not None:
            _non_blank(v, "workoutId")
        return v

    @property
    def is_empty(self) -> bool:
        return not (self.workout_id or self.workout_ids or self.notes)


def empty_days() -> dict[str, DayAssignment]:
    return {key: DayAssignment() for key in DAY_KEYS}


class Week(SeasonDocument):
    omit_if_none: ClassVar[tuple[str, ...]] = ("event_ids", "event_roles")

    week_id: str
    focus: Optional[FocusLabel] = None
    stress: IntensityLabel = "low"
    volume: IntensityLabel = "low"
    intensity: IntensityLabel = "low"
    days: dict[DayKey, DayAssignment] = Field(default_factory=empty_days)
    event_ids: Optional[list[str]] = None
    event_roles: Optional[dict[str, EventRole]] = None

    @field_validator("week_id")
    @classmethod
    def _week_id_not_blank(cls, v):
        return _non_blank(v, "weekId")

    @field_validator("days", mode="before")
    @classmethod
    def _fill_missing_days(cls, v):
        if v is None:
            return empty_days()
        if not isinstance(v, dict):
            return v
        filled = dict(v)
        for key in DAY_KEYS:
            if filled.get(key) is None:
                filled[key] = {}
        return filled


class Block(SeasonDocument):
    omit_if_none: ClassVar[tuple[str, ...]] = ("race_anchor_id",)

    block_id: str
    name: str = DEFAULT_BLOCK_NAME
    tags: list[str] = Field(default_factory=list)
    weeks: list[Week] = Field(default_factory=list)
    race_anchor_id: Optional[str] = None

    @field_validator("block_id")
    @classmethod
    def _block_id_not_blank(cls, v):
        return _non_blank(v, "blockId")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        return _non_blank(v, "name")

    @field_validator("tags")
    @classmethod
    def _tags_not_blank(cls, v):
        for idx, tag in enumerate(v):
            _non_blank(tag, f"tags[{idx}]")
        return v

    @field_validator("race_anchor_id")
    @classmethod
    def _race_anchor_not_blank(cls, v):
        if v is not None:
            _non_blank(v, "raceAnchorId")
        return v


class SeasonMarker(SeasonDocument):
    marker_id: str
    label: str
    week_index: int = Field(ge=0)

    @field_validator("marker_id")
    @classmethod
    def _marker_id_not_blank(cls, v):
        return _non_blank(v, "markerId")

    @field_validator("label")
    @classmethod
    def _label_not_blank(cls, v):
        return _non_blank(v, "label")


def parse_iso_date(value: str) -> date:
    """Strict YYYY-MM-DD parsing; impossible dates such as Feb 30 are rejected."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError(f'Invalid date format: "{value}". Expected YYYY-MM-DD')
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {value}") from exc


class Season(SeasonDocument):
    season_id: str
    status: SeasonStatus = "draft"
    start_date: Optional[str] = None
    blocks: list[Block] = Field(default_factory=list)
    season_markers: list[SeasonMarker] = Field(default_factory=list)

    @field_validator("season_id")
    @classmethod
    def _season_id_not_blank(cls, v):
        return _non_blank(v, "seasonId")

    @field_validator("start_date")
    @classmethod
    def _start_date_iso(cls, v):
        if v is not None:
            parse_iso_date(v)
        return v

    @property
    def start(self) -> Optional[date]:
        return parse_iso_date(self.start_date) if self.start_date else None


def default_week() -> Week:
    return Week(week_id=new_id("week"), focus=None, stress="low", volume="low", intensity="low", days=empty_days())


def default_block() -> Block:
    return Block(block_id=new_id("block"), name=DEFAULT_BLOCK_NAME, tags=[], weeks=[default_week()])


def new_draft_season() -> Season:
    return Season(season_id=new_id("season"), status="draft", start_date=None, blocks=[default_block()], season_markers=[])
