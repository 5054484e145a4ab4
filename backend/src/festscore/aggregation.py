from __future__ import annotations

from typing import Iterable

from loguru import logger

from .completion import evaluate_completion
from .domain import AggregatedScore, AggregationMode, Child, Game, RankedResult, Result, ScoringDirection
from .ranking import competition_rank


def aggregate_child(
    child: Child,
    relevant_games: tuple[Game, ...],
    ranked: Iterable[RankedResult],
    results: Iterable[Result],
    mode: AggregationMode = AggregationMode.RANK_POINTS,
) -> AggregatedScore:
    """Total one child's score over the games relevant to their class.

    ``ranked`` holds ranked results after duplicate collapse, so each game
    contributes at most once. ``results`` are the raw results used for the
    participation count, which does not depend on a rank being available.
    In ``RAW_VALUE_SUM`` mode the ranked values are summed instead of their
    points; that total is an approximation and is flagged on the score.
    """

    game_ids = {g.id for g in relevant_games}
    own_ranked = [rr for rr in ranked if rr.child_id == child.id and rr.game_id in game_ids]

    if mode is AggregationMode.RAW_VALUE_SUM:
        total: int | float = sum(rr.value for rr in own_ranked)
    else:
        total = sum(rr.points for rr in own_ranked)

    participated = len({r.game_id for r in results if r.child_id == child.id and r.game_id in game_ids})
    expected = len(relevant_games)

    return AggregatedScore(
        child_id=child.id,
        total_points=total,
        games_participated=participated,
        games_expected=expected,
        status=evaluate_completion(participated, expected),
        mode=mode,
    )


def aggregate_children(
    children: Iterable[Child],
    relevant_games: tuple[Game, ...],
    ranked: list[RankedResult],
    results: list[Result],
    mode: AggregationMode = AggregationMode.RANK_POINTS,
) -> list[AggregatedScore]:
    if mode is AggregationMode.RAW_VALUE_SUM:
        logger.warning("aggregating raw values instead of rank points; totals are approximate")
    return [aggregate_child(c, relevant_games, ranked, results, mode) for c in children]


def ranking_order(
    children: list[Child], scores: list[AggregatedScore]
) -> list[tuple[Child, AggregatedScore]]:
    """Sort children by points, then games played, then their original order."""

    paired = list(zip(children, scores))
    return sorted(paired, key=lambda cs: (-cs[1].total_points, -cs[1].games_participated))


def rank_scores(ordered: list[tuple[Child, AggregatedScore]]) -> list[tuple[Child, AggregatedScore]]:
    """Stamp each score with its competition rank on total points."""

    ranks = competition_rank(
        [(child.id, score.total_points) for child, score in ordered],
        ScoringDirection.HIGHER_IS_BETTER,
    )
    return [(child, score.model_copy(update={"rank": ranks[child.id]})) for child, score in ordered]
