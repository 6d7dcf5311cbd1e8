import pytest

from agronomy.catalog import load_default_catalog
from agronomy.locations import LocationMatch, LocationResolver, LocationRule, load_default_resolver, make_profile
from agronomy.models import BandTier, Level, SoilAxis, SoilSample
from agronomy.suitability import (
    FLOOR_POINTS,
    SuitabilityScorer,
    as_number,
    classify,
    market_potential_for_priority,
)

SCENARIO_A = SoilSample(ph=6.5, nitrogen=160, phosphorus=15, potassium=150)


@pytest.fixture
def catalog():
    return load_default_catalog()


@pytest.fixture
def scorer(catalog):
    return SuitabilityScorer(catalog, load_default_resolver())


def by_id(scored):
    return {s.crop_id: s for s in scored}


def test_scenario_a_all_optimal(scorer):
    """Wheat's bands are exactly the reference bands, so it scores 100."""
    wheat = by_id(scorer.score_all(SCENARIO_A))["wheat"]
    assert wheat.suitability_score == 100
    assert wheat.rationale == [
        "pH 6.5 within optimal range 6.0-7.5",
        "Nitrogen 160 within optimal range 140-200",
        "Phosphorus 15 within optimal range 10-20",
        "Potassium 150 within optimal range 100-200",
    ]


def test_scenario_a_mixed_tiers(scorer):
    scores = by_id(scorer.score_all(SCENARIO_A))
    assert scores["onion"].suitability_score == 90     # N acceptable
    assert scores["bajra"].suitability_score == 70     # N out, K acceptable
    assert scores["toor"].suitability_score == 60      # N out, K out


def test_scenario_b_floor(scorer):
    """pH 4, P 2 and K 20 sit outside every acceptable band."""
    scores = by_id(scorer.score_all(SoilSample(ph=4.0, nitrogen=30, phosphorus=2, potassium=20)))
    # N 30 is still inside the pulse and oilseed bands (20-60 optimal, 40-80 acceptable)
    assert scores["toor"].suitability_score == 40
    assert scores["sesame"].suitability_score == 30
    assert scores["wheat"].suitability_score == 20
    assert scores["rice"].suitability_score == 20
    assert min(s.suitability_score for s in scores.values()) == 20


def test_all_axes_out_of_range_scores_twenty(scorer):
    scored = scorer.score_all(SoilSample(ph=4.0, nitrogen=5, phosphorus=2, potassium=20))
    assert {s.suitability_score for s in scored} == {20}


def test_scenario_c_location_bonus_exactly_ten(scorer):
    without = by_id(scorer.score_all(SCENARIO_A))
    with_loc = by_id(scorer.score_all(SCENARIO_A, "Nashik"))
    assert with_loc["onion"].suitability_score == without["onion"].suitability_score + 10 == 100
    assert "location bonus" in with_loc["onion"].rationale[-1]
    # already 100, capped
    assert with_loc["grapes"].suitability_score == 100
    # not a Nashik crop, unchanged
    assert with_loc["guava"].suitability_score == without["guava"].suitability_score


def test_bonus_capped_at_100(scorer):
    scored = scorer.score_all(SCENARIO_A, "Nashik")
    assert all(0 <= s.suitability_score <= 100 for s in scored)


def test_unmatched_location_gives_no_bonus(scorer):
    """The default profile lists wheat and tomato but is not a real match."""
    baseline = by_id(scorer.score_all(SoilSample(ph=6.5, nitrogen=100, phosphorus=15, potassium=150)))
    unmatched = by_id(scorer.score_all(SoilSample(ph=6.5, nitrogen=100, phosphorus=15, potassium=150), "Atlantis"))
    assert unmatched["wheat"].suitability_score == baseline["wheat"].suitability_score
    assert unmatched["wheat"].market_potential == Level.MEDIUM


def test_location_taken_from_sample(scorer):
    sample = SoilSample(ph=6.5, nitrogen=160, phosphorus=15, potassium=150, location="nashik")
    assert by_id(scorer.score_all(sample))["onion"].suitability_score == 100


@pytest.mark.parametrize("ph", [6.0, 7.5])
def test_boundary_is_optimal(catalog, ph):
    wheat = catalog.get("wheat")
    assert classify(wheat, SoilAxis.PH, ph) == BandTier.OPTIMAL


def test_acceptable_boundary_inclusive(catalog):
    wheat = catalog.get("wheat")
    assert classify(wheat, SoilAxis.PH, 5.5) == BandTier.ACCEPTABLE
    assert classify(wheat, SoilAxis.PH, 8.0) == BandTier.ACCEPTABLE
    assert classify(wheat, SoilAxis.PH, 8.01) == BandTier.OUT_OF_RANGE


@pytest.mark.parametrize("missing", [None, "n/a", True, float("nan")])
def test_missing_axis_gets_floor(scorer, catalog, missing):
    sample = SoilSample(ph=6.5, nitrogen=missing, phosphorus=15, potassium=150)
    for profile in catalog:
        points, tier = scorer.score_axis(profile, SoilAxis.NITROGEN, sample.nitrogen)
        assert points == FLOOR_POINTS
        assert tier == BandTier.OUT_OF_RANGE
    wheat = by_id(scorer.score_all(sample))["wheat"]
    assert wheat.suitability_score == 80
    assert wheat.rationale[1] == "Nitrogen not provided"


def test_rationale_for_acceptable_and_out(scorer):
    scores = by_id(scorer.score_all(SCENARIO_A))
    assert scores["onion"].rationale[1] == "Nitrogen 160 within acceptable range 56-195 (optimal 80-150)"
    assert scores["toor"].rationale[1] == "Nitrogen 160 outside acceptable range 14-78"


def test_preferred_crop_market_potential(scorer):
    scores = by_id(scorer.score_all(SCENARIO_A, "Nashik"))
    assert scores["grapes"].market_potential == Level.HIGH      # priority 1
    assert scores["sugarcane"].market_potential == Level.MEDIUM  # priority 5
    assert scores["cotton"].market_potential == Level.LOW        # priority 6
    assert scores["mango"].market_potential == Level.HIGH        # fruit default
    assert scores["cotton"].investment_required == Level.HIGH


def test_market_potential_for_priority():
    assert market_potential_for_priority(3) == Level.HIGH
    assert market_potential_for_priority(4) == Level.MEDIUM
    assert market_potential_for_priority(7) == Level.LOW


def test_catalog_order_preserved(scorer, catalog):
    assert [s.crop_id for s in scorer.score_all(SCENARIO_A)] == catalog.ids()


def test_deterministic(scorer):
    first = [s.to_dict() for s in scorer.score_all(SCENARIO_A, "Pune")]
    second = [s.to_dict() for s in scorer.score_all(SCENARIO_A, "Pune")]
    assert first == second


def test_unknown_preferred_crop_is_skipped(catalog, caplog):
    resolver = LocationResolver(
        [LocationRule("testville", make_profile("general", ["dragonfruit", "onion"]))],
        make_profile("general", []),
    )
    scorer = SuitabilityScorer(catalog, resolver)
    with caplog.at_level("WARNING"):
        scores = by_id(scorer.score_all(SCENARIO_A, "Testville"))
    assert "dragonfruit" in caplog.text
    assert "dragonfruit" not in scores
    assert scores["onion"].suitability_score == 100


def test_explicit_match_used(scorer, catalog):
    match = LocationMatch(make_profile("western", ["toor"]), matched=True, pattern="x")
    toor = scorer.score_crop(catalog.get("toor"), SCENARIO_A, match)
    assert toor.suitability_score == 70


def test_as_number():
    assert as_number("7.1") == 7.1
    assert as_number(False) is None
    assert as_number(float("inf")) is None
    assert as_number({}) is None
