"""Tests for structural season validation."""

from __future__ import annotations

import pytest

from conftest import make_block, make_season, make_week

from core.errors import SeasonValidationError
from core.validators import assert_season, assert_season_for_save, collect_issues


def _paths(exc: SeasonValidationError) -> list[str]:
    return [issue.path for issue in exc.issues]


def test_valid_season_passes(two_block_season):
    assert assert_season(two_block_season) is two_block_season


def test_accepts_raw_json_dict():
    season = assert_season(
        {"seasonId": "s", "status": "draft", "blocks": [make_block("block-1", ["week-1"])], "seasonMarkers": []}
    )
    assert season.blocks[0].block_id == "block-1"


def test_duplicate_block_ids():
    season = make_season([make_block("block-1", ["week-1"]), make_block("block-1", ["week-2"])])
    with pytest.raises(SeasonValidationError) as exc:
        assert_season(season)
    assert _paths(exc.value) == ["season.blocks[1].blockId"]


def test_week_ids_unique_across_blocks():
    season = make_season([make_block("block-1", ["week-1"]), make_block("block-2", ["week-1"])])
    with pytest.raises(SeasonValidationError) as exc:
        assert_season(season)
    assert "season.blocks[1].weeks[0].weekId" in _paths(exc.value)


def test_empty_block_rejected():
    season = make_season([make_block("block-1", ["week-1"]), make_block("block-2", [])])
    with pytest.raises(SeasonValidationError, match="at least one week"):
        assert_season(season)


def test_season_without_blocks_rejected():
    with pytest.raises(SeasonValidationError, match="at least one block"):
        assert_season(make_season([]))


def test_duplicate_marker_ids():
    markers = [
        {"markerId": "marker-1", "label": "A", "weekIndex": 0},
        {"markerId": "marker-1", "label": "B", "weekIndex": 0},
    ]
    season = make_season([make_block("block-1", ["week-1"])], markers=markers)
    with pytest.raises(SeasonValidationError, match="duplicate markerId"):
        assert_season(season)


def test_marker_index_must_be_inside_total_weeks():
    season = make_season(
        [make_block("block-1", ["week-1", "week-2"])],
        markers=[{"markerId": "marker-1", "label": "Race", "weekIndex": 2}],
    )
    with pytest.raises(SeasonValidationError, match=r"out of range \[0, 1\]"):
        assert_season(season)


def test_markers_not_allowed_without_weeks():
    season = make_season([], markers=[{"markerId": "marker-1", "label": "Race", "weekIndex": 0}])
    issues = collect_issues(season)
    assert any(i.reason == "season has no weeks to mark" for i in issues)


def test_workout_ids_limits():
    days = {"mon": {"workoutIds": ["workout-a", "workout-b", "workout-c"]}, "tue": {"workoutIds": ["workout-a", " "]}}
    season = make_season([{"blockId": "block-1", "name": "B", "tags": [], "weeks": [make_week("week-1", days=days)]}])
    with pytest.raises(SeasonValidationError) as exc:
        assert_season(season)
    reasons = [i.reason for i in exc.value.issues]
    assert "at most 2 workouts per day" in reasons
    assert "workout ids must not be blank" in reasons


def test_issues_are_aggregated_in_check_order():
    season = make_season(
        [make_block("block-1", ["week-1"]), make_block("block-1", ["week-1"])],
        markers=[{"markerId": "marker-1", "label": "Race", "weekIndex": 9}],
    )
    with pytest.raises(SeasonValidationError) as exc:
        assert_season(season)
    assert _paths(exc.value) == [
        "season.blocks[1].blockId",
        "season.blocks[1].weeks[0].weekId",
        "season.seasonMarkers[0].weekIndex",
    ]
    assert str(exc.value).count(";") == 2


def test_malformed_document_reports_field_path():
    with pytest.raises(SeasonValidationError) as exc:
        assert_season({"seasonId": "s", "blocks": [{"blockId": "block-1", "name": "B", "weeks": [{"weekId": "w", "stress": "max"}]}]})
    assert exc.value.issues[0].path.startswith("season.blocks[0].weeks[0].stress")


def test_save_requires_expected_status(two_block_season):
    assert_season_for_save(two_block_season, "draft")
    with pytest.raises(SeasonValidationError, match="must be published"):
        assert_season_for_save(two_block_season, "published")
