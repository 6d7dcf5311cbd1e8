"""
Soil Analysis Summary

Rates a soil sample against a general-purpose reference profile using
the same optimal/acceptable band logic as crop scoring, and turns each
axis into a status and a directional recommendation.
"""

import logging
from typing import Optional

from agronomy.catalog import build_profile
from agronomy.models import (
    AxisAnalysis,
    BandTier,
    CropCategory,
    Season,
    SoilAnalysis,
    SoilAxis,
    SoilSample,
)
from agronomy.suitability import TIER_POINTS, as_number, classify, format_band

log = logging.getLogger(__name__)

# General reference bands for Maharashtra soils
REFERENCE_PROFILE = build_profile(
    "reference",
    {"en": "Reference soil"},
    Season.YEAR_ROUND,
    CropCategory.CEREAL,
    ph=(6.0, 7.5),
    nitrogen=(140, 200),
    phosphorus=(10, 20),
    potassium=(100, 200),
)

ORGANIC_MATTER_OPTIMAL = (2.0, 5.0)
ORGANIC_MATTER_MODERATE_MIN = 1.0
ORGANIC_MATTER_OPTIMAL_BONUS = 10
ORGANIC_MATTER_MODERATE_BONUS = 5

EXCELLENT_MIN_SCORE = 80
GOOD_MIN_SCORE = 60

STATUS_LABELS = {
    BandTier.OPTIMAL: "Excellent",
    BandTier.ACCEPTABLE: "Moderate",
    BandTier.OUT_OF_RANGE: "Poor",
}

# axis -> (advice when low, advice when high)
AXIS_ADVICE = {
    SoilAxis.PH: (
        "Soil is acidic. Apply agricultural lime to raise pH",
        "Soil is alkaline. Apply gypsum to lower pH",
    ),
    SoilAxis.NITROGEN: (
        "Nitrogen is low. Apply urea",
        "Nitrogen is high. Reduce nitrogen fertilizer",
    ),
    SoilAxis.PHOSPHORUS: (
        "Phosphorus is low. Apply DAP",
        "Phosphorus is high. Skip phosphate fertilizer this season",
    ),
    SoilAxis.POTASSIUM: (
        "Potassium is low. Apply MOP",
        "Potassium is high. Skip potash fertilizer this season",
    ),
}


def _axis_recommendation(axis: SoilAxis, value: Optional[float], tier: BandTier) -> str:
    if value is None:
        return f"{axis.label} not measured. Get a soil test"
    optimal = REFERENCE_PROFILE.optimal[axis]
    if tier == BandTier.OPTIMAL:
        return f"{axis.label} is within the ideal range {format_band(axis, optimal)}"
    low_advice, high_advice = AXIS_ADVICE[axis]
    advice = low_advice if value < optimal.low else high_advice
    if tier == BandTier.OUT_OF_RANGE:
        advice += ". Correct before planting"
    return advice


def analyze_axis(axis: SoilAxis, value) -> AxisAnalysis:
    number = as_number(value)
    tier = classify(REFERENCE_PROFILE, axis, number)
    return AxisAnalysis(
        value=number,
        tier=tier,
        status=STATUS_LABELS[tier],
        recommendation=_axis_recommendation(axis, number, tier),
    )


def analyze_organic_matter(value) -> Optional[AxisAnalysis]:
    """2.0-5.0% is Excellent, 1.0-2.0% Moderate, anything else Poor."""
    number = as_number(value)
    if number is None:
        return None
    low, high = ORGANIC_MATTER_OPTIMAL
    if low <= number <= high:
        return AxisAnalysis(number, BandTier.OPTIMAL, "Excellent", "Organic matter is in the ideal range")
    if ORGANIC_MATTER_MODERATE_MIN <= number < low:
        return AxisAnalysis(number, BandTier.ACCEPTABLE, "Moderate", "Add compost or farmyard manure")
    if number > high:
        return AxisAnalysis(number, BandTier.OUT_OF_RANGE, "Poor", "Organic matter is unusually high. Check drainage")
    return AxisAnalysis(number, BandTier.OUT_OF_RANGE, "Poor", "Organic matter is very low. Add compost and green manure")


def health_label(score: int) -> str:
    if score >= EXCELLENT_MIN_SCORE:
        return "Excellent"
    if score >= GOOD_MIN_SCORE:
        return "Good"
    return "Needs Improvement"


def analyze_soil(soil: SoilSample) -> SoilAnalysis:
    """Per-axis status plus an overall score capped at 100."""
    axes = {axis: analyze_axis(axis, soil.value(axis)) for axis in SoilAxis}
    score = sum(TIER_POINTS[a.tier] for a in axes.values())

    organic = analyze_organic_matter(soil.organic_matter)
    if organic is not None:
        if organic.tier == BandTier.OPTIMAL:
            score += ORGANIC_MATTER_OPTIMAL_BONUS
        elif organic.tier == BandTier.ACCEPTABLE:
            score += ORGANIC_MATTER_MODERATE_BONUS

    score = min(100, score)
    return SoilAnalysis(
        axes=axes,
        overall_score=score,
        overall_health=health_label(score),
        organic_matter=organic,
    )
