from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Hashable, Iterable

from loguru import logger

from .domain import DuplicatePolicy, RankedResult, Result, ScoringDirection, Snapshot
from .errors import ValidationError
from .points import points_for_rank

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(direction: ScoringDirection):
    if direction is ScoringDirection.LOWER_IS_BETTER:
        return lambda pair: (pair[1], pair[0])
    return lambda pair: (-pair[1], pair[0])


def competition_rank(
    pairs: list[tuple[Hashable, float]], direction: ScoringDirection
) -> dict[Hashable, int]:
    """Rank (key, value) pairs, best first.

    Equal values share a rank and consume its slots, so three results with
    values 8, 8, 5 rank 1, 1, 3. Each rank equals one plus the number of
    strictly better values.
    """

    ranks: dict[Hashable, int] = {}
    last_value: float | None = None
    current_rank = 0

    for index, (key, value) in enumerate(sorted(pairs, key=_sort_key(direction))):
        if last_value is None or value != last_value:
            current_rank = index + 1
            last_value = value
        ranks[key] = current_rank

    return ranks


def _is_better(a: float, b: float, direction: ScoringDirection) -> bool:
    if direction is ScoringDirection.LOWER_IS_BETTER:
        return a < b
    return a > b


def _recorded(result: Result) -> datetime:
    if result.recorded_at is None:
        return _OLDEST
    if result.recorded_at.tzinfo is None:
        return result.recorded_at.replace(tzinfo=timezone.utc)
    return result.recorded_at


def _pick(candidates: list[Result], direction: ScoringDirection, policy: DuplicatePolicy) -> Result:
    by_id = sorted(candidates, key=lambda r: r.id)
    if policy is DuplicatePolicy.LATEST:
        return max(by_id, key=_recorded)
    best = by_id[0]
    for r in by_id[1:]:
        if _is_better(r.value, best.value, direction):
            best = r
    return best


def collapse_duplicates(
    results: Iterable[Result],
    snapshot: Snapshot,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
) -> list[Result]:
    """Keep one result per (child, game) according to ``policy``.

    Results for games missing from the snapshot are dropped. Output keeps the
    input order of the surviving results.
    """

    buckets: dict[tuple[str, str], list[int]] = defaultdict(list)
    ordered: list[Result] = []
    for r in results:
        if snapshot.game(r.game_id) is None:
            logger.warning(f"result {r.id}: unknown game {r.game_id}, ignored")
            continue
        buckets[(r.child_id, r.game_id)].append(len(ordered))
        ordered.append(r)

    # Positions into ``ordered``; result ids may repeat.
    kept: set[int] = set()
    for (child_id, game_id), positions in buckets.items():
        if len(positions) == 1:
            kept.add(positions[0])
            continue
        candidates = [ordered[i] for i in positions]
        ids = tuple(sorted(r.id for r in candidates))
        if policy is DuplicatePolicy.REJECT:
            raise ValidationError(
                f"child {child_id} has {len(ids)} results for game {game_id}: {', '.join(ids)}",
                child_id=child_id,
                result_ids=ids,
            )
        game = snapshot.game(game_id)
        chosen = _pick(candidates, game.direction, policy)
        logger.warning(
            f"child {child_id}, game {game_id}: {len(ids)} results, kept {chosen.id} ({policy.value})"
        )
        kept.add(next(i for i in positions if ordered[i] is chosen))

    return [r for i, r in enumerate(ordered) if i in kept]


def rank_results(results: list[Result], direction: ScoringDirection) -> list[RankedResult]:
    """Rank the results of one (game, group) pair. One result per child is expected."""

    ranks = competition_rank([(i, r.value) for i, r in enumerate(results)], direction)
    ranked = [
        RankedResult(
            result_id=r.id,
            child_id=r.child_id,
            game_id=r.game_id,
            group_id=r.group_id,
            value=r.value,
            rank=ranks[i],
            points=points_for_rank(ranks[i]),
        )
        for i, r in enumerate(results)
    ]
    return sorted(ranked, key=lambda rr: (rr.rank, rr.child_id))


def rank_snapshot(
    snapshot: Snapshot,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
    results: Iterable[Result] | None = None,
) -> list[RankedResult]:
    """Collapse duplicates, then rank every (game, group) pair independently."""

    source = snapshot.results if results is None else results
    by_pair: dict[tuple[str, str], list[Result]] = defaultdict(list)
    for r in collapse_duplicates(source, snapshot, policy):
        by_pair[(r.game_id, r.group_id)].append(r)

    ranked: list[RankedResult] = []
    for (game_id, group_id), pair_results in sorted(by_pair.items()):
        game = snapshot.game(game_id)
        ranked.extend(rank_results(pair_results, game.direction))
        logger.debug(f"ranked game {game_id} in group {group_id}: {len(pair_results)} results")
    return ranked
