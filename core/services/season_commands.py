from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from core.errors import SeasonError, SeasonValidationError
from core.models import Season
from core.services import season_mutations as mutations
from core.validators import (
    AddBlockAfterArgs,
    AddSeasonMarkerArgs,
    AddWeekToBlockArgs,
    ExtendBlockArgs,
    MoveBlockArgs,
    MoveSeasonMarkerArgs,
    RemoveBlockArgs,
    RemoveSeasonMarkerArgs,
    RemoveWeekFromBlockArgs,
    ShrinkBlockArgs,
    UpdateBlockArgs,
    UpdateSeasonArgs,
    UpdateWeekArgs,
    issues_from_pydantic,
)

logger = logging.getLogger(__name__)


class MutationAction(str, Enum):
    UPDATE_SEASON = "updateSeason"
    ADD_BLOCK_AFTER = "addBlockAfter"
    REMOVE_BLOCK = "removeBlock"
    MOVE_BLOCK = "moveBlock"
    ADD_WEEK_TO_BLOCK = "addWeekToBlock"
    REMOVE_WEEK_FROM_BLOCK = "removeWeekFromBlock"
    UPDATE_BLOCK = "updateBlock"
    UPDATE_WEEK = "updateWeek"
    EXTEND_BLOCK = "extendBlock"
    SHRINK_BLOCK = "shrinkBlock"
    ADD_SEASON_MARKER = "addSeasonMarker"
    MOVE_SEASON_MARKER = "moveSeasonMarker"
    REMOVE_SEASON_MARKER = "removeSeasonMarker"


class MutationCommand(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def apply(self, season: Season) -> Season:
        raise NotImplementedError


class UpdateSeason(MutationCommand):
    action: Literal[MutationAction.UPDATE_SEASON]
    args: UpdateSeasonArgs = Field(default_factory=UpdateSeasonArgs)

    def apply(self, season: Season) -> Season:
        return mutations.update_season(season, self.args.partial_update)


class AddBlockAfter(MutationCommand):
    action: Literal[MutationAction.ADD_BLOCK_AFTER]
    args: AddBlockAfterArgs

    def apply(self, season: Season) -> Season:
        return mutations.add_block_after(season, self.args.target_block_id, self.args.block_template)


class RemoveBlock(MutationCommand):
    action: Literal[MutationAction.REMOVE_BLOCK]
    args: RemoveBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.remove_block(season, self.args.block_id)


class MoveBlock(MutationCommand):
    action: Literal[MutationAction.MOVE_BLOCK]
    args: MoveBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.move_block(season, self.args.block_id, self.args.new_index)


class AddWeekToBlock(MutationCommand):
    action: Literal[MutationAction.ADD_WEEK_TO_BLOCK]
    args: AddWeekToBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.add_week_to_block(season, self.args.block_id, self.args.position)


class RemoveWeekFromBlock(MutationCommand):
    action: Literal[MutationAction.REMOVE_WEEK_FROM_BLOCK]
    args: RemoveWeekFromBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.remove_week_from_block(season, self.args.block_id, self.args.week_id)


class UpdateBlock(MutationCommand):
    action: Literal[MutationAction.UPDATE_BLOCK]
    args: UpdateBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.update_block(season, self.args.block_id, self.args.partial_update)


class UpdateWeek(MutationCommand):
    action: Literal[MutationAction.UPDATE_WEEK]
    args: UpdateWeekArgs

    def apply(self, season: Season) -> Season:
        return mutations.update_week(season, self.args.block_id, self.args.week_id, self.args.partial_update)


class ExtendBlock(MutationCommand):
    action: Literal[MutationAction.EXTEND_BLOCK]
    args: ExtendBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.extend_block(season, self.args.block_id, self.args.count)


class ShrinkBlock(MutationCommand):
    action: Literal[MutationAction.SHRINK_BLOCK]
    args: ShrinkBlockArgs

    def apply(self, season: Season) -> Season:
        return mutations.shrink_block(season, self.args.block_id, self.args.count)


class AddSeasonMarker(MutationCommand):
    action: Literal[MutationAction.ADD_SEASON_MARKER]
    args: AddSeasonMarkerArgs

    def apply(self, season: Season) -> Season:
        return mutations.add_season_marker(season, self.args.week_index, self.args.label)


class MoveSeasonMarker(MutationCommand):
    action: Literal[MutationAction.MOVE_SEASON_MARKER]
    args: MoveSeasonMarkerArgs

    def apply(self, season: Season) -> Season:
        return mutations.move_season_marker(season, self.args.marker_id, self.args.new_week_index)


class RemoveSeasonMarker(MutationCommand):
    action: Literal[MutationAction.REMOVE_SEASON_MARKER]
    args: RemoveSeasonMarkerArgs

    def apply(self, season: Season) -> Season:
        return mutations.remove_season_marker(season, self.args.marker_id)


MutationRequest = Annotated[
    Union[
        UpdateSeason,
        AddBlockAfter,
        RemoveBlock,
        MoveBlock,
        AddWeekToBlock,
        RemoveWeekFromBlock,
        UpdateBlock,
        UpdateWeek,
        ExtendBlock,
        ShrinkBlock,
        AddSeasonMarker,
        MoveSeasonMarker,
        RemoveSeasonMarker,
    ],
    Field(discriminator="action"),
]

_request_adapter: TypeAdapter = TypeAdapter(MutationRequest)


def command_types() -> dict[str, type[MutationCommand]]:
    """Map each action name to its command model."""
    out: dict[str, type[MutationCommand]] = {}
    for cls in MutationCommand.__subclasses__():
        action = cls.model_fields["action"].annotation.__args__[0]
        out[MutationAction(action).value] = cls
    return out


def action_name(command: MutationCommand) -> str:
    return MutationAction(command.action).value


def parse_mutation(body: Mapping[str, Any]) -> MutationCommand:
    """Resolve ``{action, args}`` to exactly one command, before any document is loaded."""
    try:
        return _request_adapter.validate_python(body)
    except ValidationError as exc:
        raise SeasonValidationError(issues_from_pydantic(exc, root="mutation")) from exc


def apply_mutation(season: Season, command: MutationCommand) -> Season:
    action = action_name(command)
    try:
        candidate = command.apply(season)
    except SeasonError as exc:
        logger.info("season_mutation_rejected", extra={"action": action, "reason": str(exc), "season_id": season.season_id})
        raise
    logger.info(
        "season_mutation_applied",
        extra={
            "action": action,
            "season_id": candidate.season_id,
            "blocks": len(candidate.blocks),
            "markers": len(candidate.season_markers),
        },
    )
    return candidate
