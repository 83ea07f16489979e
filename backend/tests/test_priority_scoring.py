"""Tests for underserved priority scoring."""

import uuid

import pytest

from app.services.priority_scoring import (
    parse_quintile,
    rank_underserved,
    score_school,
    underserved_reasons,
)
from conftest import make_school


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1", 1),
        ("5", 5),
        (" 2 ", 2),
        (2, 2),
        ("3.0", 3),
        ("", 3),
        (None, 3),
        ("Q1", 3),
        ("99", 3),
        ("0", 3),
        ("unknown", 3),
    ],
)
def test_parse_quintile(value, expected):
    assert parse_quintile(value) == expected


def test_score_most_underserved_profile():
    school = make_school(
        quintile="1",
        no_fee_school="Yes",
        urban_rural="Rural",
        township_village="Ngqeleni",
        learners_2024=1200,
    )
    assert score_school(school) == 100 + 30 + 25 + 15 + 15


def test_score_least_underserved_profile():
    school = make_school(quintile="5", no_fee_school="No", urban_rural="Urban", learners_2024=100)
    assert score_school(school) == 20


def test_invalid_quintile_scores_as_quintile_three():
    base = dict(no_fee_school="No", urban_rural="Urban", learners_2024=0)
    assert score_school(make_school(quintile="Q1", **base)) == 60
    assert score_school(make_school(quintile="99", **base)) == 60
    assert score_school(make_school(quintile=None, **base)) == 60


@pytest.mark.parametrize(
    "learners, bonus",
    [(None, 0), (200, 0), (201, 5), (500, 5), (501, 10), (1000, 10), (1001, 15)],
)
def test_scale_bonus_thresholds(learners, bonus):
    school = make_school(quintile="5", urban_rural="Urban", learners_2024=learners)
    assert score_school(school) == 20 + bonus


def test_farm_counts_as_remote_locale():
    school = make_school(quintile="5", urban_rural="Farm", learners_2024=0)
    assert score_school(school) == 20 + 25
    assert "Farm school" in underserved_reasons(school)


def test_blank_township_gets_no_bonus():
    school = make_school(quintile="5", urban_rural="Urban", township_village="   ", learners_2024=0)
    assert score_school(school) == 20


def test_reasons_for_low_quintile_no_fee_rural_township():
    school = make_school(
        quintile="2", no_fee_school="Yes", urban_rural="Rural", township_village="Mdantsane",
    )
    assert underserved_reasons(school) == [
        "Quintile 2 (low socioeconomic area)",
        "No-fee school",
        "Rural location",
        "Township/village area",
    ]


def test_reasons_fall_back_to_no_recent_outreach():
    school = make_school(quintile="4", no_fee_school="No", urban_rural="Urban")
    assert underserved_reasons(school) == ["No recent outreach recorded"]


def test_rank_excludes_visited_schools_regardless_of_id_type():
    visited = make_school(quintile="1")
    fresh = make_school(quintile="4")

    result = rank_underserved([visited, fresh], [str(visited["id"])])

    assert [s["id"] for s in result.schools] == [fresh["id"]]
    assert result.total_underserved == 1


def test_rank_orders_by_score_and_truncates():
    low = make_school(quintile="5")
    high = make_school(quintile="1")
    mid = make_school(quintile="3")

    result = rank_underserved([low, high, mid], [], batch_size=2)

    assert [s["id"] for s in result.schools] == [high["id"], mid["id"]]
    assert result.total_underserved == 3
    assert result.schools[0]["priorityScore"] > result.schools[1]["priorityScore"]


def test_rank_keeps_input_order_for_ties():
    schools = [make_school(quintile="3") for _ in range(4)]

    result = rank_underserved(schools, [uuid.uuid4()], batch_size=10)

    assert [s["id"] for s in result.schools] == [s["id"] for s in schools]


def test_rank_annotates_without_mutating_input():
    school = make_school(quintile="2")

    result = rank_underserved([school], [])

    assert "priorityScore" not in school
    assert result.schools[0]["underservedReasons"][0] == "Quintile 2 (low socioeconomic area)"
