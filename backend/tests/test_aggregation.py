from __future__ import annotations

from conftest import result

from festscore.aggregation import aggregate_child, aggregate_children, rank_scores, ranking_order
from festscore.completion import all_complete, evaluate_completion
from festscore.domain import AggregationMode, Child, CompletionStatus, Game
from festscore.ranking import rank_snapshot


def _child(snapshot, child_id):
    return next(c for c in snapshot.children if c.id == child_id)


def test_total_is_sum_of_rank_points(festival_snapshot):
    """Anna: rank 1 in g1 (10) and rank 2 in g2 (9)."""

    ranked = rank_snapshot(festival_snapshot)
    score = aggregate_child(
        _child(festival_snapshot, "anna"), festival_snapshot.games, ranked, festival_snapshot.results
    )
    assert score.total_points == 19
    assert score.games_participated == 2
    assert score.games_expected == 2
    assert score.status is CompletionStatus.COMPLETE
    assert score.mode is AggregationMode.RANK_POINTS


def test_duplicates_are_not_double_counted(festival_snapshot):
    snapshot = festival_snapshot.model_copy(
        update={"results": festival_snapshot.results + (result("r1b", "anna", "g1", 7),)}
    )
    ranked = rank_snapshot(snapshot)
    score = aggregate_child(_child(snapshot, "anna"), snapshot.games, ranked, snapshot.results)
    assert score.total_points == 19
    assert score.games_participated == 2


def test_only_relevant_games_count(festival_snapshot):
    """Points and participation ignore games outside the class's list."""

    ranked = rank_snapshot(festival_snapshot)
    only_g2 = tuple(g for g in festival_snapshot.games if g.id == "g2")
    score = aggregate_child(_child(festival_snapshot, "ben"), only_g2, ranked, festival_snapshot.results)
    assert score.total_points == 10
    assert score.games_participated == 1
    assert score.games_expected == 1


def test_missing_game_makes_child_incomplete(festival_snapshot):
    snapshot = festival_snapshot.model_copy(
        update={"results": tuple(r for r in festival_snapshot.results if r.id != "r6")}
    )
    ranked = rank_snapshot(snapshot)
    score = aggregate_child(_child(snapshot, "cem"), snapshot.games, ranked, snapshot.results)
    assert score.total_points == 8
    assert score.games_participated == 1
    assert score.status is CompletionStatus.INCOMPLETE


def test_raw_value_sum_mode_is_flagged(festival_snapshot):
    """The legacy fallback sums raw values and says so."""

    ranked = rank_snapshot(festival_snapshot)
    scores = aggregate_children(
        festival_snapshot.children,
        festival_snapshot.games,
        ranked,
        list(festival_snapshot.results),
        AggregationMode.RAW_VALUE_SUM,
    )
    assert [s.total_points for s in scores] == [20.0, 18.0, 20.0]
    assert all(s.mode is AggregationMode.RAW_VALUE_SUM for s in scores)


def test_ranking_order_breaks_ties_by_games_then_input_order():
    children = [
        Child(id=c, name=c, gender="Junge", class_label="1a") for c in ("x", "y", "z")
    ]
    games = (Game(id="g", name="g"), Game(id="h", name="h"))
    scores = [
        aggregate_child(children[0], games, [], []),
        aggregate_child(children[1], games, [], [result("r", "y", "g", 1)]),
        aggregate_child(children[2], games, [], []),
    ]
    assert [c.id for c, _ in ranking_order(children, scores)] == ["y", "x", "z"]


def test_completion_boundaries():
    assert evaluate_completion(0, 0) is CompletionStatus.COMPLETE
    assert evaluate_completion(3, 3) is CompletionStatus.COMPLETE
    assert evaluate_completion(4, 3) is CompletionStatus.COMPLETE
    assert evaluate_completion(2, 3) is CompletionStatus.INCOMPLETE


def test_all_complete_is_logical_and(festival_snapshot):
    ranked = rank_snapshot(festival_snapshot)
    scores = aggregate_children(
        festival_snapshot.children, festival_snapshot.games, ranked, list(festival_snapshot.results)
    )
    assert all_complete(scores)
    assert all_complete([])

    incomplete = scores[0].model_copy(update={"status": CompletionStatus.INCOMPLETE})
    assert not all_complete([incomplete, *scores[1:]])


def test_rank_scores_sets_the_class_rank(festival_snapshot):
    """Each score carries its competition rank on total points."""

    ranked = rank_snapshot(festival_snapshot)
    scores = aggregate_children(
        festival_snapshot.children, festival_snapshot.games, ranked, list(festival_snapshot.results)
    )
    assert [s.rank for s in scores] == [None, None, None]

    ordered = rank_scores(ranking_order(list(festival_snapshot.children), scores))
    assert [(c.id, s.rank, s.total_points) for c, s in ordered] == [
        ("ben", 1, 20),
        ("anna", 2, 19),
        ("cem", 3, 16),
    ]


def test_rank_scores_shares_rank_on_equal_points():
    children = [Child(id=c, name=c, gender="Junge", class_label="1a") for c in ("x", "y", "z")]
    games = (Game(id="g", name="g"),)
    scores = [aggregate_child(c, games, [], []) for c in children]
    assert [s.rank for _, s in rank_scores(ranking_order(children, scores))] == [1, 1, 1]
