from __future__ import annotations

from loguru import logger

from .aggregation import aggregate_children, rank_scores, ranking_order
from .assignment import resolve_relevant_games
from .domain import (
    AggregationMode,
    Child,
    DuplicatePolicy,
    Group,
    GroupProgress,
    LiveStandings,
    Snapshot,
    StandingsRow,
)
from .errors import GroupNotFoundError
from .ranking import rank_snapshot


def group_members(snapshot: Snapshot, group: Group) -> list[Child]:
    """Children of a group in snapshot order.

    Explicit membership comes from ``Child.group_id``. A child without any
    group who has results recorded against this group is counted as a member
    too; a child assigned to another group is not.
    """

    with_results = {r.child_id for r in snapshot.results if r.group_id == group.id}
    return [
        c
        for c in snapshot.children
        if c.group_id == group.id or (c.group_id is None and c.id in with_results)
    ]


def compose_live_standings(
    snapshot: Snapshot,
    group_id: str,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
    mode: AggregationMode = AggregationMode.RANK_POINTS,
) -> LiveStandings:
    group = snapshot.group(group_id)
    if group is None:
        raise GroupNotFoundError(group_id)

    relevant = resolve_relevant_games(group.class_label, snapshot)
    relevant_ids = {g.id for g in relevant}
    group_results = [r for r in snapshot.results if r.group_id == group.id]

    ranked = rank_snapshot(snapshot, policy, results=group_results)
    members = group_members(snapshot, group)
    scores = aggregate_children(members, relevant, ranked, group_results, mode)
    ordered = rank_scores(ranking_order(members, scores))

    rows = tuple(
        StandingsRow(
            position=score.rank,
            child_id=child.id,
            child_name=child.name,
            points=score.total_points,
            games_participated=score.games_participated,
            games_expected=score.games_expected,
        )
        for child, score in ordered
    )

    played = {rr.game_id for rr in ranked}
    progress = GroupProgress(
        completed_games=len(played & relevant_ids),
        expected_games=len(relevant),
    )
    logger.debug(
        f"live standings for group {group.id}: {len(rows)} children, "
        f"{progress.completed_games}/{progress.expected_games} games"
    )
    return LiveStandings(
        group_id=group.id,
        group_name=group.name,
        class_label=group.class_label,
        rows=rows,
        progress=progress,
    )
