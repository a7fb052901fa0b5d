from __future__ import annotations

from datetime import date

from conftest import make_block, make_season

from core.services.season_index import calendar, flatten, global_index_of, total_weeks, week_start


def test_flatten_orders_blocks_then_weeks(two_block_season):
    rows = flatten(two_block_season)
    assert [r.week_id for r in rows] == ["week-a1", "week-a2", "week-b1", "week-b2", "week-b3"]
    assert [r.global_index for r in rows] == [0, 1, 2, 3, 4]
    assert [r.block_id for r in rows] == ["block-a", "block-a", "block-b", "block-b", "block-b"]


def test_total_weeks_matches_flatten(two_block_season):
    assert total_weeks(two_block_season) == len(flatten(two_block_season)) == 5


def test_empty_season_flattens_to_nothing():
    season = make_season([])
    assert flatten(season) == []
    assert total_weeks(season) == 0


def test_global_index_of(two_block_season):
    assert global_index_of(two_block_season, "week-b1") == 2
    assert global_index_of(two_block_season, "week-missing") is None


def test_week_start_requires_start_date(two_block_season):
    assert week_start(two_block_season, 0) is None
    dated = two_block_season.model_copy(update={"start_date": "2026-01-05"})
    assert week_start(dated, 0) == date(2026, 1, 5)
    assert week_start(dated, 3) == date(2026, 1, 26)


def test_calendar_lists_markers_on_their_week():
    season = make_season(
        [make_block("block-a", ["week-1", "week-2"])],
        markers=[{"markerId": "marker-1", "label": "Race Week", "weekIndex": 1}],
        startDate="2026-03-02",
    )
    rows = calendar(season)
    assert rows[0] == {"globalIndex": 0, "blockId": "block-a", "weekId": "week-1", "weekStart": "2026-03-02", "markers": []}
    assert rows[1]["markers"] == ["Race Week"]
    assert rows[1]["weekStart"] == "2026-03-09"
