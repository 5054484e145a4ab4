from __future__ import annotations

import pydantic
import pytest

from festscore.domain import (
    ClassGameAssignment,
    Game,
    Result,
    ScoringDirection,
    Snapshot,
    direction_for_scoring_type,
    parse_result_value,
)
from festscore.errors import ValidationError


def test_ids_are_canonical_strings_at_the_boundary():
    """Integer and string ids compare equal once inside the snapshot."""

    game = Game(id=7, name="Dosenwerfen")
    assignment = ClassGameAssignment(class_label="2a", game_id="7")
    assert game.id == assignment.game_id == "7"


def test_blank_id_is_rejected():
    """An empty id is a malformed record."""

    with pytest.raises(pydantic.ValidationError):
        Game(id="  ", name="x")


def test_scoring_type_decides_direction():
    """Time with penalty is the lower-is-better tag; the rest are higher-is-better."""

    assert direction_for_scoring_type("ZEIT_MIN_STRAFE") is ScoringDirection.LOWER_IS_BETTER
    assert direction_for_scoring_type("niedrig-besser") is ScoringDirection.LOWER_IS_BETTER
    assert direction_for_scoring_type("WEITE_MAX_AUS_N") is ScoringDirection.HIGHER_IS_BETTER
    assert direction_for_scoring_type("MENGE_MAX_ZEIT") is ScoringDirection.HIGHER_IS_BETTER
    assert direction_for_scoring_type("") is ScoringDirection.HIGHER_IS_BETTER


def test_parse_result_value_accepts_numbers_and_decimal_comma():
    """Numeric strings parse, including a German decimal comma."""

    assert parse_result_value("r1", 3) == 3.0
    assert parse_result_value("r1", " 12,5 ") == 12.5
    assert parse_result_value("r1", "7.25") == 7.25


@pytest.mark.parametrize("raw", ["abc", "", None, True, float("nan"), "inf", [1]])
def test_unparseable_value_is_rejected_with_result_id(raw):
    """Bad values are never coerced to zero; the error names the result."""

    with pytest.raises(ValidationError) as excinfo:
        parse_result_value("r42", raw)
    assert excinfo.value.result_id == "r42"
    assert "r42" in str(excinfo.value)


def test_result_model_rejects_non_numeric_value():
    """Constructing a result with a text value fails with the engine's error."""

    with pytest.raises(ValidationError) as excinfo:
        Result(id="r9", child_id="c", game_id="g", group_id="grp", value="schnell")
    assert excinfo.value.result_id == "r9"


def test_snapshot_rejects_duplicate_result_ids():
    """Two results may not share an id inside one snapshot."""

    first = Result(id="r1", child_id="anna", game_id="g1", group_id="grp", value=8)
    second = Result(id="r1", child_id="anna", game_id="g1", group_id="grp", value=7)
    with pytest.raises(ValidationError) as excinfo:
        Snapshot(results=(first, second))
    assert excinfo.value.result_id == "r1"
