from __future__ import annotations

from loguru import logger

from .domain import AggregatedScore, Child, Crown, Gender
from .errors import ValidationError

KOENIG = "König"
KOENIGIN = "Königin"

CROWN_TITLES = {Gender.BOY: KOENIG, Gender.GIRL: KOENIGIN}

_GENDER_ALIASES = {
    "boy": Gender.BOY,
    "junge": Gender.BOY,
    "männlich": Gender.BOY,
    "maennlich": Gender.BOY,
    "m": Gender.BOY,
    "male": Gender.BOY,
    "girl": Gender.GIRL,
    "mädchen": Gender.GIRL,
    "maedchen": Gender.GIRL,
    "weiblich": Gender.GIRL,
    "w": Gender.GIRL,
    "f": Gender.GIRL,
    "female": Gender.GIRL,
}


def normalize_gender(child: Child) -> Gender:
    gender = _GENDER_ALIASES.get(child.gender.strip().lower())
    if gender is None:
        raise ValidationError(
            f"child {child.id}: unsupported gender {child.gender!r}", child_id=child.id
        )
    return gender


def select_crowns(
    class_label: str, ordered: list[tuple[Child, AggregatedScore]]
) -> dict[Gender, Crown]:
    """Crown the first boy and the first girl of an already ranked class.

    Every child's gender is validated, not just the winners', so a bad record
    cannot hide behind a better placed child. Completion does not matter.
    """

    genders = [(child, score, normalize_gender(child)) for child, score in ordered]

    crowns: dict[Gender, Crown] = {}
    for child, score, gender in genders:
        if gender in crowns:
            continue
        crowns[gender] = Crown(
            class_label=class_label,
            gender=gender,
            title=CROWN_TITLES[gender],
            child_id=child.id,
            points=score.total_points,
        )
        logger.debug(f"class {class_label}: {CROWN_TITLES[gender]} is {child.id}")
    return crowns
