"""
Tests de los scorers por eje.

Los escenarios usan los criterios de un cliente en München:
250.000-300.000 EUR, 80-120 m², 2-3 ambientes, departamento.
"""

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from markler.matching.scoring import (
    MatchTarget,
    score_area,
    score_location,
    score_price,
    score_property_type,
    score_rooms,
    score_target,
)
from markler.models import MatchConfig, PropertyType, SearchCriteria
from tests.conftest import make_property

DEFAULT = MatchConfig()
STRICT_BUDGET = MatchConfig(allow_budget_flexibility=False)
EXACT_LOCATION = MatchConfig(exact_location_match=True)


def run(scorer, target, criteria, config=DEFAULT):
    match_reasons, mismatch_reasons = [], []
    result = scorer(target, criteria, config, match_reasons, mismatch_reasons)
    return result, match_reasons, mismatch_reasons


# ---------------------------------------------------------------------------
# Escenarios completos
# ---------------------------------------------------------------------------


def test_perfect_match(munich_criteria):
    scored = score_target(MatchTarget.from_property(make_property()), munich_criteria, DEFAULT)

    assert scored.breakdown.as_tuple() == (100, 100, 100, 100, 100)
    assert scored.overall_score == 100
    assert scored.mismatch_reasons == []
    assert scored.match_reasons[0] == "Price €300,000 is within budget range"


def test_partial_match_combines_weighted_axes(munich_criteria):
    prop = make_property(
        price="340000",
        city="Garching",
        postal_code="80340",
        living_area_sqm="130",
        rooms="4",
        property_type=PropertyType.HOUSE,
    )
    scored = score_target(MatchTarget.from_property(prop), munich_criteria, DEFAULT)

    assert scored.breakdown.as_tuple() == (85, 80, 85, 75, 0)
    # (85*30 + 80*25 + 85*20 + 75*15 + 0*10) / 100 = 73.75
    assert scored.overall_score == 74
    assert "Property type House does not match preferred types" in scored.mismatch_reasons


def test_unconstrained_criteria_score_everything_perfect():
    prop = make_property(price=None, living_area_sqm=None, rooms=None, city=None,
                         postal_code=None, property_type=None)
    scored = score_target(MatchTarget.from_property(prop), SearchCriteria(), DEFAULT)

    assert scored.overall_score == 100
    assert scored.breakdown.lowest() == 100


def test_missing_data_is_neutral(munich_criteria):
    prop = make_property(price=None, living_area_sqm=None, rooms=None, city=None,
                         postal_code=None, property_type=None)
    scored = score_target(MatchTarget.from_property(prop), munich_criteria, DEFAULT)

    assert scored.breakdown.as_tuple() == (50, 50, 50, 50, 50)
    assert scored.overall_score == 50
    assert "Price not specified for this property" in scored.match_reasons


def test_reasons_follow_axis_order(munich_criteria):
    scored = score_target(MatchTarget.from_property(make_property()), munich_criteria, DEFAULT)

    assert [r.split()[0] for r in scored.match_reasons] == [
        "Price", "Property", "Living", "3.0", "Property",
    ]


# ---------------------------------------------------------------------------
# Precio
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "price, config, expected",
    [
        ("300000", DEFAULT, 100),
        ("250000", DEFAULT, 100),
        ("320000", DEFAULT, 85),
        ("330000", DEFAULT, 85),
        # 13.33% sobre el máximo: nunca mejor que la tolerancia
        ("340000", DEFAULT, 85),
        ("360000", DEFAULT, 80),
        ("390000", DEFAULT, 40),
        ("320000", STRICT_BUDGET, 94),
        ("450000", STRICT_BUDGET, 20),
        ("200000", DEFAULT, 30),
    ],
)
def test_price_scores(munich_criteria, price, config, expected):
    target = MatchTarget(price=Decimal(price))
    result, _, _ = run(score_price, target, munich_criteria, config)
    assert result == expected


def test_price_far_over_budget_floors_at_zero(munich_criteria):
    result, _, mismatch = run(score_price, MatchTarget(price=Decimal("900000")), munich_criteria)
    assert result == 0
    assert mismatch == ["Price €900,000 significantly exceeds budget (200.0% over)"]


def test_price_over_budget_reason_reports_percentage(munich_criteria):
    _, match, mismatch = run(score_price, MatchTarget(price=Decimal("345000")), munich_criteria)
    assert match == []
    assert mismatch == ["Price €345,000 is 15.0% over budget"]


def test_price_within_tolerance_is_a_match_reason(munich_criteria):
    _, match, mismatch = run(score_price, MatchTarget(price=Decimal("310000")), munich_criteria)
    assert match == ["Price €310,000 is slightly over budget but within 10% tolerance"]
    assert mismatch == []


def test_only_minimum_budget(munich_criteria):
    criteria = SearchCriteria(min_budget=Decimal("100000"))
    assert run(score_price, MatchTarget(price=Decimal("5000000")), criteria)[0] == 100
    assert run(score_price, MatchTarget(price=Decimal("99999")), criteria)[0] == 30


def test_zero_maximum_budget_is_fully_over():
    criteria = SearchCriteria(max_budget=Decimal("0"))
    assert run(score_price, MatchTarget(price=Decimal("1")), criteria, STRICT_BUDGET)[0] == 0


prices_over_budget = st.integers(min_value=300_001, max_value=3_000_000)


@given(prices_over_budget, prices_over_budget, st.booleans())
def test_price_score_never_improves_with_higher_price(a, b, flexible):
    criteria = SearchCriteria(max_budget=Decimal("300000"))
    config = MatchConfig(allow_budget_flexibility=flexible)
    low, high = sorted((a, b))

    low_score = run(score_price, MatchTarget(price=Decimal(low)), criteria, config)[0]
    high_score = run(score_price, MatchTarget(price=Decimal(high)), criteria, config)[0]

    assert 0 <= high_score <= low_score <= 100


# ---------------------------------------------------------------------------
# Ubicación
# ---------------------------------------------------------------------------


def test_city_match_is_case_insensitive(munich_criteria):
    result, match, _ = run(score_location, MatchTarget(city="MÜNCHEN"), munich_criteria)
    assert result == 100
    assert match == ["Property is in preferred city: MÜNCHEN"]


def test_exact_postal_code_wins_over_proximity():
    criteria = SearchCriteria(preferred_locations=["80300", "80331"])
    result, match, _ = run(score_location, MatchTarget(postal_code="80331"), criteria)
    assert result == 100
    assert match == ["Property postal code 80331 matches exactly"]


def test_near_postal_code(munich_criteria):
    target = MatchTarget(city="Garching", postal_code="80340")
    result, match, _ = run(score_location, target, munich_criteria)
    assert result == 80
    assert match == [
        "Property postal code 80340 is near preferred location 80300 (within 50)"
    ]


def test_exact_location_match_disables_proximity(munich_criteria):
    target = MatchTarget(city="Garching", postal_code="80340")
    result, _, mismatch = run(score_location, target, munich_criteria, EXACT_LOCATION)
    assert result == 0
    assert mismatch == ["Property location Garching does not match preferred locations"]


def test_postal_code_out_of_range(munich_criteria):
    target = MatchTarget(city="Freising", postal_code="80351")
    assert run(score_location, target, munich_criteria)[0] == 0


def test_malformed_postal_codes_are_skipped():
    criteria = SearchCriteria(preferred_locations=["8030X", "803", "80300"])
    assert run(score_location, MatchTarget(postal_code="80310"), criteria)[0] == 80
    assert run(score_location, MatchTarget(postal_code="D-803"), criteria)[0] == 0


def test_location_without_city_or_postal_code(munich_criteria):
    result, match, _ = run(score_location, MatchTarget(city="  "), munich_criteria)
    assert result == 50
    assert match == ["Property location not fully specified"]


# ---------------------------------------------------------------------------
# Superficie
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "area, expected",
    [
        ("80", 100),
        ("120", 100),
        ("130", 85),
        ("138", 85),
        ("150", 75),
        ("300", 0),
        ("60", 75),
        ("20", 25),
    ],
)
def test_area_scores(munich_criteria, area, expected):
    target = MatchTarget(living_area_sqm=Decimal(area))
    assert run(score_area, target, munich_criteria)[0] == expected


def test_area_over_tolerance_reason(munich_criteria):
    _, _, mismatch = run(score_area, MatchTarget(living_area_sqm=Decimal("150")), munich_criteria)
    assert mismatch == ["Living area 150 m² is 25.0% larger than preferred maximum"]


def test_area_missing_is_neutral(munich_criteria):
    assert run(score_area, MatchTarget(), munich_criteria)[0] == 50


# ---------------------------------------------------------------------------
# Ambientes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "rooms, expected",
    [
        ("2", 100),
        ("2.5", 100),
        ("4", 75),
        ("1", 75),
        ("5", 50),
        ("0", 50),
        ("7", 30),
        ("12", 0),
    ],
)
def test_room_scores(munich_criteria, rooms, expected):
    target = MatchTarget(rooms=Decimal(rooms))
    assert run(score_rooms, target, munich_criteria)[0] == expected


def test_one_room_off_counts_as_match(munich_criteria):
    _, match, mismatch = run(score_rooms, MatchTarget(rooms=Decimal("4")), munich_criteria)
    assert match == ["4.0 rooms is 1 room more than preferred"]
    assert mismatch == []


@given(st.integers(min_value=0, max_value=20))
def test_room_score_is_symmetric(half_rooms_off):
    criteria = SearchCriteria(min_rooms=Decimal("10"), max_rooms=Decimal("10"))
    offset = Decimal(half_rooms_off) / 2

    above = run(score_rooms, MatchTarget(rooms=10 + offset), criteria)[0]
    below = run(score_rooms, MatchTarget(rooms=10 - offset), criteria)[0]

    assert above == below


# ---------------------------------------------------------------------------
# Tipo de inmueble
# ---------------------------------------------------------------------------


def test_property_type_is_case_insensitive():
    criteria = SearchCriteria(property_types="apartment, loft")
    result, match, _ = run(score_property_type, MatchTarget(property_type=PropertyType.LOFT), criteria)
    assert result == 100
    assert match == ["Property type Loft matches preferences"]


def test_property_type_mismatch(munich_criteria):
    target = MatchTarget(property_type=PropertyType.OFFICE)
    assert run(score_property_type, target, munich_criteria)[0] == 0


def test_property_type_missing(munich_criteria):
    result, match, _ = run(score_property_type, MatchTarget(), munich_criteria)
    assert result == 50
    assert match == ["Property type not specified"]
