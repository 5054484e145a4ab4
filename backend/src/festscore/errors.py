from __future__ import annotations


class FestScoreError(Exception):
    """Base exception for the scoring engine."""


class ValidationError(FestScoreError):
    """Snapshot data the engine refuses to score.

    Raised for unparseable result values, rejected duplicates and unknown
    genders. The offending ids are kept on the exception so callers can point
    at the exact record.
    """

    def __init__(
        self,
        message: str,
        *,
        result_id: str | None = None,
        child_id: str | None = None,
        result_ids: tuple[str, ...] = (),
    ) -> None:
        self.result_id = result_id
        self.child_id = child_id
        self.result_ids = result_ids
        super().__init__(message)


class GroupNotFoundError(FestScoreError, LookupError):
    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"group not found: {group_id}")


class SnapshotUnavailableError(FestScoreError):
    """The snapshot provider could not deliver data for this view."""
