from __future__ import annotations

from dataclasses import dataclass


class SeasonError(ValueError):
    pass


class NotFoundError(SeasonError):
    pass


class BlockNotFoundError(NotFoundError):
    def __init__(self, block_id: str):
        super().__init__(f"Block not found: {block_id}")
        self.block_id = block_id


class WeekNotFoundError(NotFoundError):
    def __init__(self, week_id: str):
        super().__init__(f"Week not found: {week_id}")
        self.week_id = week_id


class MarkerNotFoundError(NotFoundError):
    def __init__(self, marker_id: str):
        super().__init__(f"Season marker not found: {marker_id}")
        self.marker_id = marker_id


class DraftNotFoundError(NotFoundError):
    def __init__(self, message: str = "Season draft not found"):
        super().__init__(message)


class MutationArgumentError(SeasonError):
    pass


class PublishPreconditionError(SeasonError):
    pass


class StorageError(SeasonError):
    pass


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class SeasonValidationError(SeasonError):
    """Aggregated structural failures for one candidate document."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = list(issues)
        super().__init__("; ".join(str(issue) for issue in self.issues) or "Season is invalid")
