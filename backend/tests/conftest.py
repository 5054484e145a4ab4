from __future__ import annotations

import pytest

from festscore.domain import Child, ClassGameAssignment, Game, Group, Result, Snapshot


def result(rid: str, child_id: str, game_id: str, value, group_id: str = "grp-2a-1", **kw) -> Result:
    return Result(id=rid, child_id=child_id, game_id=game_id, group_id=group_id, value=value, **kw)


@pytest.fixture
def festival_snapshot() -> Snapshot:
    """Class 2a with one group, three children and two assigned games."""

    return Snapshot(
        games=(
            Game(id="g1", name="Weitwurf", scoring_type="WEITE_MAX_AUS_N", unit="m"),
            Game(id="g2", name="Hindernislauf", scoring_type="ZEIT_MIN_STRAFE", unit="s"),
        ),
        groups=(Group(id="grp-2a-1", name="2a-1", class_label="2a"),),
        children=(
            Child(id="anna", name="Anna", gender="Mädchen", class_label="2a", group_id="grp-2a-1"),
            Child(id="ben", name="Ben", gender="Junge", class_label="2a", group_id="grp-2a-1"),
            Child(id="cem", name="Cem", gender="Junge", class_label="2a", group_id="grp-2a-1"),
        ),
        assignments=(
            ClassGameAssignment(class_label="2a", game_id="g1"),
            ClassGameAssignment(class_label="2a", game_id="g2"),
        ),
        results=(
            result("r1", "anna", "g1", 8),
            result("r2", "ben", "g1", 8),
            result("r3", "cem", "g1", 5),
            result("r4", "anna", "g2", 12),
            result("r5", "ben", "g2", 10),
            result("r6", "cem", "g2", 15),
        ),
    )
