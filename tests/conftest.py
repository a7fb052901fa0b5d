from __future__ import annotations

import os
import tempfile

# Settings are read at import time by the API modules.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SEASON_DATA_ROOT", tempfile.mkdtemp(prefix="season-planner-tests-"))

import pytest  # noqa: E402

from core.models import Season  # noqa: E402
from core.services.draft_store import DraftStore  # noqa: E402


def make_week(week_id: str, **fields) -> dict:
    week = {"weekId": week_id, "focus": None, "stress": "low", "volume": "low", "intensity": "low"}
    week.update(fields)
    return week


def make_block(block_id: str, week_ids: list[str], name: str | None = None, **fields) -> dict:
    block = {"blockId": block_id, "name": name or block_id, "tags": [], "weeks": [make_week(w) for w in week_ids]}
    block.update(fields)
    return block


def make_season(blocks: list[dict], markers: list[dict] | None = None, **fields) -> Season:
    data = {
        "seasonId": "season-test",
        "status": "draft",
        "startDate": None,
        "blocks": blocks,
        "seasonMarkers": markers or [],
    }
    data.update(fields)
    return Season.model_validate(data)


@pytest.fixture
def two_block_season() -> Season:
    """Block A has two weeks, block B has three."""
    return make_season(
        [
            make_block("block-a", ["week-a1", "week-a2"], name="Base"),
            make_block("block-b", ["week-b1", "week-b2", "week-b3"], name="Build"),
        ]
    )


@pytest.fixture
def store(tmp_path) -> DraftStore:
    root = tmp_path / "seasons"
    return DraftStore(root / "season.draft.json", root / "season.published.json", root / "seasons.master.json")
