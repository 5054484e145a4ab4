from __future__ import annotations

from collections import defaultdict

from .domain import ClassValueStats, GameStatistics, ScoringDirection, Snapshot


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def compute_game_statistics(snapshot: Snapshot) -> list[GameStatistics]:
    """Summarise the raw measurements of every game, overall and per class.

    Statistics describe raw values only and ignore duplicate handling; they
    are not used for scoring.
    """

    class_of_group = {g.id: g.class_label for g in snapshot.groups}
    stats: list[GameStatistics] = []

    for game in sorted(snapshot.games, key=lambda g: g.name):
        values = [r.value for r in snapshot.results if r.game_id == game.id]
        by_class: dict[str, list[float]] = defaultdict(list)
        for r in snapshot.results:
            if r.game_id == game.id and r.group_id in class_of_group:
                by_class[class_of_group[r.group_id]].append(r.value)

        if values:
            best = min(values) if game.direction is ScoringDirection.LOWER_IS_BETTER else max(values)
        else:
            best = None

        stats.append(
            GameStatistics(
                game_id=game.id,
                game_name=game.name,
                unit=game.unit,
                direction=game.direction,
                count=len(values),
                mean=_mean(values),
                minimum=min(values, default=0.0),
                maximum=max(values, default=0.0),
                best=best,
                per_class=tuple(
                    ClassValueStats(
                        class_label=label,
                        count=len(vals),
                        mean=_mean(vals),
                        minimum=min(vals),
                        maximum=max(vals),
                    )
                    for label, vals in sorted(by_class.items())
                ),
            )
        )
    return stats
