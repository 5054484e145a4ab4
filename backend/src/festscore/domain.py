from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .errors import ValidationError

LOWER_IS_BETTER_TAGS = frozenset({"ZEIT_MIN_STRAFE", "NIEDRIG-BESSER", "LOWER_IS_BETTER"})


class ScoringDirection(str, Enum):
    HIGHER_IS_BETTER = "HigherIsBetter"
    LOWER_IS_BETTER = "LowerIsBetter"


class Gender(str, Enum):
    BOY = "Boy"
    GIRL = "Girl"


class CompletionStatus(str, Enum):
    COMPLETE = "Complete"
    INCOMPLETE = "Incomplete"


class MatrixStatus(str, Enum):
    NOT_ASSIGNED = "NotAssigned"
    OPEN = "Open"
    PARTIAL = "Partial"
    COMPLETE = "Complete"


class AggregationMode(str, Enum):
    RANK_POINTS = "rank_points"
    # Legacy approximation: sums raw measurements instead of rank points.
    RAW_VALUE_SUM = "raw_value_sum"


class DuplicatePolicy(str, Enum):
    BEST = "best"
    LATEST = "latest"
    REJECT = "reject"


def direction_for_scoring_type(scoring_type: str) -> ScoringDirection:
    if scoring_type.strip().upper() in LOWER_IS_BETTER_TAGS:
        return ScoringDirection.LOWER_IS_BETTER
    return ScoringDirection.HIGHER_IS_BETTER


def _canonical_id(v: object) -> str:
    if isinstance(v, bool) or v is None:
        raise ValueError("id must be a string or an integer")
    if isinstance(v, (str, int)):
        s = str(v).strip()
        if not s:
            raise ValueError("id must not be blank")
        return s
    raise ValueError("id must be a string or an integer")


def parse_result_value(result_id: str, raw: object) -> float:
    """Parse a measured value, accepting numbers and numeric strings.

    A German decimal comma ("12,5") is accepted. Anything else raises
    ``ValidationError`` naming the result; nothing is coerced to zero.
    """

    if isinstance(raw, bool) or raw is None:
        raise ValidationError(f"result {result_id}: missing or non-numeric value {raw!r}", result_id=result_id)
    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip().replace(",", ".")
        try:
            value = float(text)
        except ValueError:
            raise ValidationError(
                f"result {result_id}: value {raw!r} is not a number", result_id=result_id
            ) from None
    else:
        raise ValidationError(f"result {result_id}: unsupported value type {type(raw).__name__}", result_id=result_id)

    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"result {result_id}: value {raw!r} is not finite", result_id=result_id)
    return value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Game(_Frozen):
    id: str
    name: str
    scoring_type: str = ""
    unit: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _canonical_ids(cls, v: object) -> str:
        return _canonical_id(v)

    @property
    def direction(self) -> ScoringDirection:
        return direction_for_scoring_type(self.scoring_type)


class Group(_Frozen):
    id: str
    name: str
    class_label: str

    @field_validator("id", "class_label", mode="before")
    @classmethod
    def _canonical_ids(cls, v: object) -> str:
        return _canonical_id(v)


class Child(_Frozen):
    id: str
    name: str
    # Stored as delivered; normalised to Gender when crowns are selected.
    gender: str
    class_label: str
    group_id: str | None = None

    @field_validator("id", "class_label", mode="before")
    @classmethod
    def _canonical_ids(cls, v: object) -> str:
        return _canonical_id(v)

    @field_validator("group_id", mode="before")
    @classmethod
    def _group_id(cls, v: object) -> str | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return _canonical_id(v)


class ClassGameAssignment(_Frozen):
    class_label: str
    game_id: str

    @field_validator("class_label", "game_id", mode="before")
    @classmethod
    def _canonical_ids(cls, v: object) -> str:
        return _canonical_id(v)


class Result(_Frozen):
    id: str
    child_id: str
    game_id: str
    group_id: str
    value: float
    recorded_at: datetime | None = None

    @field_validator("id", "child_id", "game_id", "group_id", mode="before")
    @classmethod
    def _canonical_ids(cls, v: object) -> str:
        return _canonical_id(v)

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, v: object, info: ValidationInfo) -> float:
        return parse_result_value(str(info.data.get("id", "?")), v)


class Snapshot(_Frozen):
    """Read-only view of everything the engine needs for one pass."""

    games: tuple[Game, ...] = ()
    groups: tuple[Group, ...] = ()
    children: tuple[Child, ...] = ()
    assignments: tuple[ClassGameAssignment, ...] = ()
    results: tuple[Result, ...] = ()

    @model_validator(mode="after")
    def _unique_result_ids(self) -> Snapshot:
        seen: set[str] = set()
        for r in self.results:
            if r.id in seen:
                raise ValidationError(f"duplicate result id {r.id}", result_id=r.id, child_id=r.child_id)
            seen.add(r.id)
        return self

    def game(self, game_id: str) -> Game | None:
        return next((g for g in self.games if g.id == game_id), None)

    def group(self, group_id: str) -> Group | None:
        return next((g for g in self.groups if g.id == group_id), None)

    def class_labels(self) -> list[str]:
        labels = {g.class_label for g in self.groups} | {c.class_label for c in self.children}
        return sorted(labels)


class RankedResult(_Frozen):
    result_id: str
    child_id: str
    game_id: str
    group_id: str
    value: float
    rank: int = Field(ge=1)
    points: int = Field(ge=0, le=10)


class AggregatedScore(_Frozen):
    child_id: str
    total_points: int | float
    games_participated: int
    games_expected: int
    status: CompletionStatus
    mode: AggregationMode = AggregationMode.RANK_POINTS
    rank: int | None = None


class Crown(_Frozen):
    class_label: str
    gender: Gender
    title: str
    child_id: str
    points: int | float


class ClassRankingRow(_Frozen):
    rank: int
    child_id: str
    child_name: str
    gender: Gender
    group_name: str | None
    total_points: int | float
    games_participated: int
    games_expected: int
    status: CompletionStatus
    crown: str | None = None


class ClassRanking(_Frozen):
    class_label: str
    game_ids: tuple[str, ...]
    rows: tuple[ClassRankingRow, ...]
    koenig: Crown | None = None
    koenigin: Crown | None = None
    all_complete: bool
    mode: AggregationMode


class StandingsRow(_Frozen):
    position: int
    child_id: str
    child_name: str
    points: int | float
    games_participated: int
    games_expected: int


class GroupProgress(_Frozen):
    completed_games: int
    expected_games: int


class LiveStandings(_Frozen):
    group_id: str
    group_name: str
    class_label: str
    rows: tuple[StandingsRow, ...]
    progress: GroupProgress


class MatrixCell(_Frozen):
    group_id: str
    group_name: str
    class_label: str
    game_id: str
    game_name: str
    status: MatrixStatus
    result_count: int
    group_size: int


class ResultDetail(_Frozen):
    result_id: str
    child_id: str
    child_name: str
    game_id: str
    game_name: str
    value: float
    unit: str | None
    direction: ScoringDirection
    comparison: str
    rank: int | None
    points: int
    explanation: str


class ClassValueStats(_Frozen):
    class_label: str
    count: int
    mean: float
    minimum: float
    maximum: float


class GameStatistics(_Frozen):
    game_id: str
    game_name: str
    unit: str | None
    direction: ScoringDirection
    count: int
    mean: float
    minimum: float
    maximum: float
    best: float | None
    per_class: tuple[ClassValueStats, ...]
