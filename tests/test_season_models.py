"""Tests for the season document models and their JSON shape."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.models import (
    DAY_KEYS,
    Block,
    DayAssignment,
    Season,
    Week,
    default_block,
    default_week,
    intensity_rank,
    new_draft_season,
    parse_iso_date,
)


def test_week_fills_missing_day_keys():
    week = Week.model_validate({"weekId": "week-1", "focus": "base", "days": {"mon": {"workoutId": "workout-easy"}}})
    assert list(week.days) == list(DAY_KEYS)
    assert week.days["mon"].workout_id == "workout-easy"
    assert week.days["sun"].is_empty


def test_week_without_days_gets_empty_map():
    week = Week.model_validate({"weekId": "week-1"})
    assert set(week.days) == set(DAY_KEYS)
    assert all(a.is_empty for a in week.days.values())


def test_week_rejects_unknown_focus_and_scale():
    with pytest.raises(ValidationError):
        Week.model_validate({"weekId": "week-1", "focus": "sprint"})
    with pytest.raises(ValidationError):
        Week.model_validate({"weekId": "week-1", "stress": "extreme"})


def test_json_uses_wire_names_and_omits_unset_optionals():
    data = default_block().to_json_dict()
    assert set(data) == {"blockId", "name", "tags", "weeks"}
    week = data["weeks"][0]
    assert week["focus"] is None
    assert "eventIds" not in week
    assert week["days"]["wed"] == {}


def test_season_json_keeps_null_start_date():
    data = new_draft_season().to_json_dict()
    assert data["startDate"] is None
    assert data["status"] == "draft"
    assert data["seasonMarkers"] == []
    assert len(data["blocks"]) == 1


def test_day_assignment_round_trips_workout_ids():
    a = DayAssignment.model_validate({"workoutIds": ["workout-a", "workout-b"], "notes": "double"})
    assert a.to_json_dict() == {"workoutIds": ["workout-a", "workout-b"], "notes": "double"}


def test_blank_workout_id_rejected():
    with pytest.raises(ValidationError):
        DayAssignment.model_validate({"workoutId": "  "})


def test_models_are_frozen():
    week = default_week()
    with pytest.raises(ValidationError):
        week.stress = "high"


def test_default_week_shape():
    week = default_week()
    assert week.week_id.startswith("week-")
    assert week.focus is None
    assert (week.stress, week.volume, week.intensity) == ("low", "low", "low")


def test_block_name_must_not_be_blank():
    with pytest.raises(ValidationError):
        Block.model_validate({"blockId": "block-1", "name": " ", "tags": [], "weeks": []})


def test_start_date_is_strict_iso():
    Season.model_validate({"seasonId": "s", "startDate": "2026-01-05"})
    with pytest.raises(ValidationError):
        Season.model_validate({"seasonId": "s", "startDate": "2026-02-30"})
    with pytest.raises(ValidationError):
        Season.model_validate({"seasonId": "s", "startDate": "05/01/2026"})


def test_parse_iso_date_messages():
    with pytest.raises(ValueError, match="Expected YYYY-MM-DD"):
        parse_iso_date("2026-1-5")
    with pytest.raises(ValueError, match="Invalid calendar date"):
        parse_iso_date("2026-13-01")


def test_intensity_rank_is_ordered():
    assert intensity_rank("low") < intensity_rank("low-med") < intensity_rank("med")
    assert intensity_rank("med-high") < intensity_rank("high") < intensity_rank("very-high")


def test_unknown_fields_are_dropped():
    season = Season.model_validate({"seasonId": "s", "legacyField": 1})
    assert "legacyField" not in season.to_json_dict()
