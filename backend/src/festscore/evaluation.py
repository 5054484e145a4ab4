from __future__ import annotations

from loguru import logger

from .aggregation import aggregate_children, rank_scores, ranking_order
from .assignment import resolve_all_classes, resolve_relevant_games
from .completion import all_complete
from .crowns import normalize_gender, select_crowns
from .domain import (
    AggregationMode,
    ClassRanking,
    ClassRankingRow,
    DuplicatePolicy,
    Game,
    Gender,
    MatrixCell,
    MatrixStatus,
    RankedResult,
    ResultDetail,
    ScoringDirection,
    Snapshot,
)
from .errors import GroupNotFoundError
from .points import explain_points
from .ranking import rank_snapshot
from .standings import group_members


def _class_ranking(
    snapshot: Snapshot,
    class_label: str,
    relevant: tuple[Game, ...],
    ranked: list[RankedResult],
    mode: AggregationMode,
) -> ClassRanking:
    children = [c for c in snapshot.children if c.class_label == class_label]
    # Participation counts results for games the snapshot knows.
    known = [r for r in snapshot.results if snapshot.game(r.game_id) is not None]
    scores = aggregate_children(children, relevant, ranked, known, mode)
    ordered = rank_scores(ranking_order(children, scores))
    crowns = select_crowns(class_label, ordered)

    crowned = {crown.child_id: crown.title for crown in crowns.values()}
    group_names = {g.id: g.name for g in snapshot.groups}

    rows = tuple(
        ClassRankingRow(
            rank=score.rank,
            child_id=child.id,
            child_name=child.name,
            gender=normalize_gender(child),
            group_name=group_names.get(child.group_id) if child.group_id else None,
            total_points=score.total_points,
            games_participated=score.games_participated,
            games_expected=score.games_expected,
            status=score.status,
            crown=crowned.get(child.id),
        )
        for child, score in ordered
    )
    return ClassRanking(
        class_label=class_label,
        game_ids=tuple(g.id for g in relevant),
        rows=rows,
        koenig=crowns.get(Gender.BOY),
        koenigin=crowns.get(Gender.GIRL),
        all_complete=all_complete([score for _, score in ordered]),
        mode=mode,
    )


def compute_class_ranking(
    snapshot: Snapshot,
    class_label: str,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
    mode: AggregationMode = AggregationMode.RANK_POINTS,
) -> ClassRanking:
    relevant = resolve_relevant_games(class_label, snapshot)
    ranked = rank_snapshot(snapshot, policy)
    return _class_ranking(snapshot, class_label, relevant, ranked, mode)


def compute_all_class_rankings(
    snapshot: Snapshot,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
    mode: AggregationMode = AggregationMode.RANK_POINTS,
) -> list[ClassRanking]:
    games_by_class = resolve_all_classes(snapshot)
    ranked = rank_snapshot(snapshot, policy)
    rankings = [
        _class_ranking(snapshot, label, relevant, ranked, mode)
        for label, relevant in games_by_class.items()
    ]
    logger.info(f"computed rankings for {len(rankings)} classes")
    return rankings


def _matrix_status(relevant: bool, result_count: int, group_size: int) -> MatrixStatus:
    if not relevant:
        return MatrixStatus.NOT_ASSIGNED
    if result_count == 0:
        return MatrixStatus.OPEN
    if result_count < group_size:
        return MatrixStatus.PARTIAL
    return MatrixStatus.COMPLETE


def compute_completion_matrix(snapshot: Snapshot) -> list[MatrixCell]:
    """One cell per (group, game) describing how far that game has been played.

    The result count is the number of distinct group members with a result,
    so neither duplicates nor guests from other groups make a game look
    complete.
    """

    games_by_class = resolve_all_classes(snapshot)
    cells: list[MatrixCell] = []
    for group in snapshot.groups:
        relevant_ids = {g.id for g in games_by_class.get(group.class_label, ())}
        member_ids = {c.id for c in group_members(snapshot, group)}
        size = len(member_ids)
        for game in snapshot.games:
            children_with_result = {
                r.child_id for r in snapshot.results if r.group_id == group.id and r.game_id == game.id
            } & member_ids
            cells.append(
                MatrixCell(
                    group_id=group.id,
                    group_name=group.name,
                    class_label=group.class_label,
                    game_id=game.id,
                    game_name=game.name,
                    status=_matrix_status(game.id in relevant_ids, len(children_with_result), size),
                    result_count=len(children_with_result),
                    group_size=size,
                )
            )
    return cells


def compute_result_details(
    snapshot: Snapshot,
    group_id: str,
    game_id: str | None = None,
    policy: DuplicatePolicy = DuplicatePolicy.BEST,
) -> list[ResultDetail]:
    """Explain every ranked result of a group: value, rank and how points follow."""

    group = snapshot.group(group_id)
    if group is None:
        raise GroupNotFoundError(group_id)

    results = [
        r for r in snapshot.results if r.group_id == group.id and (game_id is None or r.game_id == game_id)
    ]
    names = {c.id: c.name for c in snapshot.children}

    details: list[ResultDetail] = []
    for rr in rank_snapshot(snapshot, policy, results=results):
        game = snapshot.game(rr.game_id)
        lower = game.direction is ScoringDirection.LOWER_IS_BETTER
        details.append(
            ResultDetail(
                result_id=rr.result_id,
                child_id=rr.child_id,
                child_name=names.get(rr.child_id, "Unknown"),
                game_id=game.id,
                game_name=game.name,
                value=rr.value,
                unit=game.unit,
                direction=game.direction,
                comparison="lower is better" if lower else "higher is better",
                rank=rr.rank,
                points=rr.points,
                explanation=explain_points(rr.rank),
            )
        )
    return sorted(details, key=lambda d: (d.game_name, d.rank, d.child_name))
