"""Structural edits to a season document.

Every command takes a ``Season`` and returns a new one; the input is never
modified. Each result passes ``assert_season`` before it is returned, so a
command either yields a valid document or raises and leaves the caller's
document as it was.

Markers follow the week they were placed on: after any command that inserts,
removes or reorders weeks, ``reconcile_markers`` moves each marker to its
week's new global index. A marker whose week was removed is re-pinned to the
next surviving week (or the previous one when nothing follows).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from core.errors import (
    BlockNotFoundError,
    MarkerNotFoundError,
    MutationArgumentError,
    SeasonValidationError,
    WeekNotFoundError,
)
from core.models import Block, Season, SeasonDocument, SeasonMarker, Week, default_block, default_week, empty_days, new_id
from core.services.season_index import total_weeks, week_ids_in_order
from core.validators import (
    BlockPatch,
    BlockTemplate,
    SeasonPatch,
    WeekPatch,
    assert_season,
    issues_from_pydantic,
)

logger = logging.getLogger(__name__)


# -- helpers --


def _require_block_index(season: Season, block_id: str) -> int:
    for idx, block in enumerate(season.blocks):
        if block.block_id == block_id:
            return idx
    raise BlockNotFoundError(block_id)


def _require_week_index(block: Block, week_id: str) -> int:
    for idx, week in enumerate(block.weeks):
        if week.week_id == week_id:
            return idx
    raise WeekNotFoundError(week_id)


def _require_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MutationArgumentError(f"{label} must be an integer.")
    return value


def _require_positive_int(value: Any, label: str) -> int:
    value = _require_int(value, label)
    if value < 1:
        raise MutationArgumentError(f"{label} must be a positive integer.")
    return value


def _require_label(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MutationArgumentError(f"{label} must be a non-empty string.")
    return value


def _require_week_index_in_range(season: Season, value: Any, label: str) -> int:
    value = _require_int(value, label)
    weeks_total = total_weeks(season)
    if not 0 <= value < weeks_total:
        if weeks_total == 0:
            raise MutationArgumentError(f"{label} {value} is out of range: season has no weeks.")
        raise MutationArgumentError(f"{label} {value} is out of range [0, {weeks_total - 1}].")
    return value


def _patched(model: SeasonDocument, changes: dict[str, Any], path: str):
    if not changes:
        return model
    data = model.model_dump()
    data.update(changes)
    try:
        return type(model).model_validate(data)
    except ValidationError as exc:
        raise SeasonValidationError(issues_from_pydantic(exc, root=path)) from exc


def _as_model(cls, value):
    if value is None or isinstance(value, cls):
        return value
    if isinstance(value, SeasonDocument):
        value = value.model_dump()
    try:
        return cls.model_validate(value)
    except ValidationError as exc:
        raise SeasonValidationError(issues_from_pydantic(exc, root=cls.__name__)) from exc


def _with_block(season: Season, index: int, block: Block) -> Season:
    blocks = list(season.blocks)
    blocks[index] = block
    return season.model_copy(update={"blocks": blocks})


def _follow_week(old_index: int, old_order: list[str], new_positions: dict[str, int]) -> Optional[int]:
    if not 0 <= old_index < len(old_order):
        return old_index
    anchor = old_order[old_index]
    if anchor in new_positions:
        return new_positions[anchor]
    for week_id in old_order[old_index + 1 :]:
        if week_id in new_positions:
            return new_positions[week_id]
    for week_id in reversed(old_order[:old_index]):
        if week_id in new_positions:
            return new_positions[week_id]
    return None


def reconcile_markers(before: Season, after: Season) -> Season:
    if not after.season_markers:
        return after
    old_order = week_ids_in_order(before)
    new_positions = {week_id: idx for idx, week_id in enumerate(week_ids_in_order(after))}

    markers: list[SeasonMarker] = []
    changed = False
    for marker in after.season_markers:
        new_index = _follow_week(marker.week_index, old_order, new_positions)
        if new_index is None:
            logger.warning("season_marker_dropped", extra={"marker_id": marker.marker_id, "week_index": marker.week_index})
            changed = True
            continue
        if new_index == marker.week_index:
            markers.append(marker)
            continue
        anchor = old_order[marker.week_index]
        if anchor not in new_positions:
            logger.info(
                "season_marker_repinned",
                extra={"marker_id": marker.marker_id, "from_index": marker.week_index, "to_index": new_index},
            )
        markers.append(marker.model_copy(update={"week_index": new_index}))
        changed = True

    if not changed:
        return after
    return after.model_copy(update={"season_markers": markers})


def _finish(before: Season, after: Season) -> Season:
    return assert_season(reconcile_markers(before, after))


def _week_from_template(template) -> Week:
    return Week(
        week_id=new_id("week"),
        focus=template.focus,
        stress=template.stress,
        volume=template.volume,
        intensity=template.intensity,
        days=template.days or empty_days(),
        event_ids=list(template.event_ids) if template.event_ids is not None else None,
        event_roles=dict(template.event_roles) if template.event_roles is not None else None,
    )


def _block_from_template(template: Optional[BlockTemplate]) -> Block:
    if template is None:
        return default_block()
    try:
        return Block(
            block_id=new_id("block"),
            name=template.name,
            tags=list(template.tags),
            weeks=[_week_from_template(w) for w in template.weeks],
            race_anchor_id=template.race_anchor_id,
        )
    except ValidationError as exc:
        raise SeasonValidationError(issues_from_pydantic(exc, root="blockTemplate")) from exc


# -- commands --


def update_season(season: Season, patch: Union[SeasonPatch, Mapping[str, Any], None] = None) -> Season:
    patch = _as_model(SeasonPatch, patch) or SeasonPatch()
    changes = patch.model_dump(exclude_unset=True)
    return assert_season(_patched(season, changes, "season"))


def add_block_after(
    season: Season,
    target_block_id: str,
    block_template: Union[BlockTemplate, Block, Mapping[str, Any], None] = None,
) -> Season:
    index = _require_block_index(season, target_block_id)
    new_block = _block_from_template(_as_model(BlockTemplate, block_template))
    blocks = list(season.blocks)
    blocks.insert(index + 1, new_block)
    return _finish(season, season.model_copy(update={"blocks": blocks}))


def remove_block(season: Season, block_id: str) -> Season:
    index = _require_block_index(season, block_id)
    blocks = list(season.blocks)
    del blocks[index]
    return _finish(season, season.model_copy(update={"blocks": blocks}))


def move_block(season: Season, block_id: str, new_index: int) -> Season:
    new_index = _require_int(new_index, "newIndex")
    current = _require_block_index(season, block_id)
    target = max(0, min(new_index, len(season.blocks) - 1))
    if target == current:
        return assert_season(season)
    blocks = list(season.blocks)
    block = blocks.pop(current)
    blocks.insert(target, block)
    return _finish(season, season.model_copy(update={"blocks": blocks}))


def add_week_to_block(season: Season, block_id: str, position: Optional[int] = None) -> Season:
    block_index = _require_block_index(season, block_id)
    block = season.blocks[block_index]
    weeks = list(block.weeks)
    insert_at = len(weeks) if position is None else _require_int(position, "position")
    if not 0 <= insert_at <= len(weeks):
        raise MutationArgumentError(f"position {insert_at} out of range [0, {len(weeks)}].")
    weeks.insert(insert_at, default_week())
    return _finish(season, _with_block(season, block_index, block.model_copy(update={"weeks": weeks})))


def remove_week_from_block(season: Season, block_id: str, week_id: str) -> Season:
    block_index = _require_block_index(season, block_id)
    block = season.blocks[block_index]
    week_index = _require_week_index(block, week_id)
    weeks = list(block.weeks)
    del weeks[week_index]
    # a block emptied here is rejected by assert_season
    return _finish(season, _with_block(season, block_index, block.model_copy(update={"weeks": weeks})))


def update_block(season: Season, block_id: str, patch: Union[BlockPatch, Mapping[str, Any], None] = None) -> Season:
    block_index = _require_block_index(season, block_id)
    patch = _as_model(BlockPatch, patch) or BlockPatch()
    changes = patch.model_dump(exclude_unset=True)
    updated = _patched(season.blocks[block_index], changes, f"season.blocks[{block_index}]")
    return assert_season(_with_block(season, block_index, updated))


def update_week(
    season: Season,
    block_id: str,
    week_id: str,
    patch: Union[WeekPatch, Mapping[str, Any], None] = None,
) -> Season:
    block_index = _require_block_index(season, block_id)
    block = season.blocks[block_index]
    week_index = _require_week_index(block, week_id)
    patch = _as_model(WeekPatch, patch) or WeekPatch()
    changes = patch.model_dump(exclude_unset=True)
    updated = _patched(block.weeks[week_index], changes, f"season.blocks[{block_index}].weeks[{week_index}]")
    weeks = list(block.weeks)
    weeks[week_index] = updated
    return assert_season(_with_block(season, block_index, block.model_copy(update={"weeks": weeks})))


def extend_block(season: Season, block_id: str, count: int = 1) -> Season:
    count = _require_positive_int(count, "count")
    block_index = _require_block_index(season, block_id)
    block = season.blocks[block_index]
    last = block.weeks[-1] if block.weeks else default_week()
    added = [
        Week(
            week_id=new_id("week"),
            focus=last.focus,
            stress=last.stress,
            volume=last.volume,
            intensity=last.intensity,
            days=empty_days(),
        )
        for _ in range(count)
    ]
    weeks = list(block.weeks) + added
    return _finish(season, _with_block(season, block_index, block.model_copy(update={"weeks": weeks})))


def shrink_block(season: Season, block_id: str, count: int = 1) -> Season:
    count = _require_positive_int(count, "count")
    block_index = _require_block_index(season, block_id)
    block = season.blocks[block_index]
    if len(block.weeks) - count < 1:
        raise MutationArgumentError(
            f"Cannot shrink block below one week ({len(block.weeks)} weeks, asked to remove {count})."
        )
    weeks = list(block.weeks[: len(block.weeks) - count])
    return _finish(season, _with_block(season, block_index, block.model_copy(update={"weeks": weeks})))


def add_season_marker(season: Season, week_index: int, label: str) -> Season:
    week_index = _require_week_index_in_range(season, week_index, "weekIndex")
    label = _require_label(label, "label")
    marker = SeasonMarker(marker_id=new_id("marker"), label=label, week_index=week_index)
    markers = list(season.season_markers) + [marker]
    return assert_season(season.model_copy(update={"season_markers": markers}))


def move_season_marker(season: Season, marker_id: str, new_week_index: int) -> Season:
    if not any(m.marker_id == marker_id for m in season.season_markers):
        raise MarkerNotFoundError(marker_id)
    new_week_index = _require_week_index_in_range(season, new_week_index, "newWeekIndex")
    markers = [
        m.model_copy(update={"week_index": new_week_index}) if m.marker_id == marker_id else m
        for m in season.season_markers
    ]
    return assert_season(season.model_copy(update={"season_markers": markers}))


def remove_season_marker(season: Season, marker_id: str) -> Season:
    markers = [m for m in season.season_markers if m.marker_id != marker_id]
    if len(markers) == len(season.season_markers):
        raise MarkerNotFoundError(marker_id)
    return assert_season(season.model_copy(update={"season_markers": markers}))
