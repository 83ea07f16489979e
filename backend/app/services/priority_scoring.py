"""Underserved-school priority scoring.

score = quintile points + no-fee bonus + locale bonus + township bonus + scale bonus

    quintile    (6 - q) * 20          Q1=100 ... Q5=20, missing or invalid treated as Q3
    no-fee      +30                   no_fee_school == "Yes"
    locale      +25                   urban_rural in {Rural, Farm}
    township    +15                   township_village not blank
    scale       +15 / +10 / +5        learners > 1000 / 500 / 200

Higher means more underserved. Scores are recomputed on every request and
never stored.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

DEFAULT_QUINTILE = "3"
DEFAULT_BATCH_SIZE = 10
VALID_QUINTILES = (1, 2, 3, 4, 5)

NO_FEE_BONUS = 30
LOCALE_BONUS = 25
TOWNSHIP_BONUS = 15

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_quintile(value: Any) -> int:
    """Effective quintile used for scoring.

    Only a leading integer in 1..5 counts ("2", "2 ", "3.0"). Blank,
    missing, unparseable ("Q1") or out-of-range ("99") values fall back to 3.
    """
    match = _LEADING_INT.match(str(value)) if value not in (None, "") else None
    if match:
        quintile = int(match.group(1))
        if VALID_QUINTILES[0] <= quintile <= VALID_QUINTILES[-1]:
            return quintile
    return int(DEFAULT_QUINTILE)


def _learners(school: dict) -> int:
    try:
        return int(school.get("learners_2024") or 0)
    except (TypeError, ValueError):
        return 0


def _has_township(school: dict) -> bool:
    township = school.get("township_village")
    return bool(township and str(township).strip())


def score_school(school: dict) -> int:
    score = (6 - parse_quintile(school.get("quintile"))) * 20

    if school.get("no_fee_school") == "Yes":
        score += NO_FEE_BONUS

    if school.get("urban_rural") in ("Rural", "Farm"):
        score += LOCALE_BONUS

    if _has_township(school):
        score += TOWNSHIP_BONUS

    learners = _learners(school)
    if learners > 1000:
        score += 15
    elif learners > 500:
        score += 10
    elif learners > 200:
        score += 5

    return score


def underserved_reasons(school: dict) -> list[str]:
    reasons: list[str] = []

    quintile = parse_quintile(school.get("quintile"))
    if quintile <= 2:
        reasons.append(f"Quintile {quintile} (low socioeconomic area)")

    if school.get("no_fee_school") == "Yes":
        reasons.append("No-fee school")

    if school.get("urban_rural") == "Rural":
        reasons.append("Rural location")
    elif school.get("urban_rural") == "Farm":
        reasons.append("Farm school")

    if _has_township(school):
        reasons.append("Township/village area")

    # Catch-all: the school is only known to be unvisited
    if not reasons:
        reasons.append("No recent outreach recorded")

    return reasons


@dataclass
class RankingResult:
    schools: list[dict] = field(default_factory=list)
    total_underserved: int = 0


def rank_underserved(
    schools: Iterable[dict],
    visited_ids: Iterable[Any],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> RankingResult:
    """Drop visited schools, score the rest and keep the top batch.

    Ties keep input order (sorted() is stable).
    """
    visited = {str(v) for v in visited_ids if v is not None}

    scored = [
        {
            **school,
            "priorityScore": score_school(school),
            "underservedReasons": underserved_reasons(school),
        }
        for school in schools
        if str(school.get("id")) not in visited
    ]
    scored = sorted(scored, key=lambda s: s["priorityScore"], reverse=True)

    return RankingResult(
        schools=scored[: max(batch_size, 0)],
        total_underserved=len(scored),
    )
