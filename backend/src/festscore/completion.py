from __future__ import annotations

from typing import Iterable

from .domain import AggregatedScore, CompletionStatus


def evaluate_completion(games_participated: int, games_expected: int) -> CompletionStatus:
    if games_expected == 0 or games_participated >= games_expected:
        return CompletionStatus.COMPLETE
    return CompletionStatus.INCOMPLETE


def all_complete(scores: Iterable[AggregatedScore]) -> bool:
    return all(s.status is CompletionStatus.COMPLETE for s in scores)
