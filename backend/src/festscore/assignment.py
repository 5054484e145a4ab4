from __future__ import annotations

from loguru import logger

from .domain import Game, Snapshot


def resolve_relevant_games(class_label: str, snapshot: Snapshot) -> tuple[Game, ...]:
    """Return the games that count toward the ranking of one class.

    The first source that yields anything wins; sources are never merged:

    1. explicit class/game assignments for the class,
    2. games observed in results recorded against the class's groups,
    3. nothing, which is a valid "0 of 0 games" state.

    Games come back in snapshot order. Ids are already canonical strings, so
    plain equality is enough here.
    """

    assigned = {a.game_id for a in snapshot.assignments if a.class_label == class_label}
    if assigned:
        games = tuple(g for g in snapshot.games if g.id in assigned)
        missing = assigned - {g.id for g in games}
        if missing:
            logger.warning(
                f"class {class_label}: assignments reference unknown games {sorted(missing)}"
            )
        logger.debug(f"class {class_label}: {len(games)} games from assignments")
        return games

    group_ids = {g.id for g in snapshot.groups if g.class_label == class_label}
    observed = {r.game_id for r in snapshot.results if r.group_id in group_ids}
    if observed:
        games = tuple(g for g in snapshot.games if g.id in observed)
        logger.debug(f"class {class_label}: {len(games)} games derived from results")
        return games

    logger.debug(f"class {class_label}: no relevant games")
    return ()


def resolve_all_classes(snapshot: Snapshot) -> dict[str, tuple[Game, ...]]:
    """Resolve every class once for a single computation pass."""

    return {label: resolve_relevant_games(label, snapshot) for label in snapshot.class_labels()}
