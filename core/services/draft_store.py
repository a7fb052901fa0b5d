"""File-backed storage for the single season draft and its published snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from core.config import Settings, get_settings
from core.errors import DraftNotFoundError, PublishPreconditionError, SeasonError, StorageError
from core.models import Season, new_draft_season
from core.validators import assert_season_for_save

logger = logging.getLogger(__name__)

JSON_INDENT = 2
MASTER_VERSION = 1


def _read_json(path: Path) -> Optional[Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"Failed to read JSON: {path} ({exc})") from exc
    return json.loads(raw)


def _write_json_atomic(path: Path, data: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.tmp-", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(data, indent=JSON_INDENT) + "\n")
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise StorageError(f"Failed to write JSON: {path} ({exc})") from exc


class DraftStore:
    """Owns ``season.draft.json``, ``season.published.json`` and ``seasons.master.json``.

    There is exactly one draft at a time and every save replaces it whole.
    A draft file that cannot be parsed or fails validation reads as missing
    so a fresh draft can be created over it.
    """

    def __init__(self, draft_path: Path, published_path: Path, master_path: Path):
        self.draft_path = Path(draft_path)
        self.published_path = Path(published_path)
        self.master_path = Path(master_path)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DraftStore":
        settings = settings or get_settings()
        return cls(settings.draft_path, settings.published_path, settings.master_path)

    def _load(self, path: Path, status: str) -> Optional[Season]:
        try:
            data = _read_json(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("season_document_unreadable", extra={"path": str(path), "status": status, "reason": str(exc)})
            return None
        if data is None:
            return None
        try:
            return assert_season_for_save(data, status)
        except SeasonError as exc:
            logger.warning("season_document_unreadable", extra={"path": str(path), "status": status, "reason": str(exc)})
            return None

    def load_draft(self) -> Optional[Season]:
        return self._load(self.draft_path, "draft")

    def load_published(self) -> Optional[Season]:
        return self._load(self.published_path, "published")

    def require_draft(self) -> Season:
        draft = self.load_draft()
        if draft is None:
            raise DraftNotFoundError()
        return draft

    def save_draft(self, season: Season) -> Season:
        season = assert_season_for_save(season, "draft")
        _write_json_atomic(self.draft_path, season.to_json_dict())
        return season

    def create_draft(self) -> Season:
        season = new_draft_season()
        self.save_draft(season)
        logger.info("season_draft_created", extra={"season_id": season.season_id, "seeded_from": None})
        return season

    def ensure_draft(self) -> tuple[Season, bool]:
        """Return ``(draft, created)``: the current draft, else one seeded from the published season, else a new one."""
        draft = self.load_draft()
        if draft is not None:
            return draft, False
        published = self.load_published()
        if published is not None:
            seeded = published.model_copy(update={"status": "draft"})
            self.save_draft(seeded)
            logger.info("season_draft_created", extra={"season_id": seeded.season_id, "seeded_from": "published"})
            return seeded, True
        return self.create_draft(), True

    def publish_draft(self) -> Season:
        draft = self.load_draft()
        if draft is None:
            raise DraftNotFoundError("No draft season exists to publish.")
        if not draft.start_date:
            raise PublishPreconditionError("Season startDate must be set before publish.")

        published = assert_season_for_save(draft.model_copy(update={"status": "published"}), "published")
        _write_json_atomic(self.published_path, published.to_json_dict())
        self._upsert_master(published)
        try:
            self.draft_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove draft: {self.draft_path} ({exc})") from exc
        logger.info(
            "season_published",
            extra={"season_id": published.season_id, "blocks": len(published.blocks), "start_date": published.start_date},
        )
        return published

    def load_master(self) -> dict[str, Any]:
        try:
            master = _read_json(self.master_path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("season_master_unreadable", extra={"path": str(self.master_path), "reason": str(exc)})
            master = None
        if not isinstance(master, dict):
            master = {}
        seasons = master.get("seasons")
        version = master.get("version")
        return {
            "version": version if isinstance(version, int) else MASTER_VERSION,
            "seasons": list(seasons) if isinstance(seasons, list) else [],
        }

    def _upsert_master(self, published: Season) -> None:
        master = self.load_master()
        seasons = master["seasons"]
        entry = published.to_json_dict()
        for idx, existing in enumerate(seasons):
            if isinstance(existing, dict) and existing.get("seasonId") == published.season_id:
                seasons[idx] = entry
                break
        else:
            seasons.append(entry)
        _write_json_atomic(self.master_path, {"version": master["version"], "seasons": seasons})
        logger.info("season_master_updated", extra={"path": str(self.master_path), "seasons": len(seasons)})


def get_draft_store() -> DraftStore:
    return DraftStore.from_settings()
