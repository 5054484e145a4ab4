from __future__ import annotations

from .errors import ValidationError

MAX_POINTS = 10
SCORING_CUTOFF = 11


def points_for_rank(rank: int) -> int:
    """Rank 1 earns 10 points, rank 10 earns 1, rank 11 and worse earn nothing."""

    if rank < 1:
        raise ValidationError(f"rank must be >= 1, got {rank}")
    if rank >= SCORING_CUTOFF:
        return 0
    return SCORING_CUTOFF - rank


def explain_points(rank: int | None) -> str:
    if rank is None:
        return "No rank available"
    points = points_for_rank(rank)
    if points == 0:
        return f"Rank {rank} -> 0 points (rank {SCORING_CUTOFF} or worse)"
    return f"Rank {rank} -> {SCORING_CUTOFF} - {rank} = {points} points"
