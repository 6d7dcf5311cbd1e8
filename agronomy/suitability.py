"""
Suitability Scorer

Banded piecewise scoring of each catalog crop against a soil sample.

Per axis (pH, N, P, K):
    25 points  value inside the optimal band
    15 points  value inside the acceptable band
     5 points  otherwise, including a missing or non-numeric value

The four axis scores sum to a base in [20, 100]. A matched location whose
preferred-crop list contains the crop adds a flat +10, capped at 100.
Every axis, and the bonus, contributes one rationale string.
"""

import math
import logging
from typing import Iterable, List, Optional, Tuple

from agronomy.catalog import (
    CATEGORY_INVESTMENT,
    CATEGORY_MARKET_POTENTIAL,
    CropCatalog,
    get_catalog,
)
from agronomy.errors import CatalogLookupMiss
from agronomy.locations import LocationMatch, LocationResolver, get_resolver
from agronomy.models import (
    BandTier,
    CropProfile,
    Level,
    ScoredCrop,
    SoilAxis,
    SoilSample,
)

log = logging.getLogger(__name__)

OPTIMAL_POINTS = 25
ACCEPTABLE_POINTS = 15
FLOOR_POINTS = 5
LOCATION_AFFINITY_BONUS = 10
MAX_SCORE = 100

# Preferred-crop priority -> market potential
HIGH_MARKET_MAX_PRIORITY = 3
MEDIUM_MARKET_MAX_PRIORITY = 5

TIER_POINTS = {
    BandTier.OPTIMAL: OPTIMAL_POINTS,
    BandTier.ACCEPTABLE: ACCEPTABLE_POINTS,
    BandTier.OUT_OF_RANGE: FLOOR_POINTS,
}


def as_number(value) -> Optional[float]:
    """Best-effort numeric view of a value; None when it cannot be scored."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def classify(profile: CropProfile, axis: SoilAxis, value) -> BandTier:
    """Tier of a value against one crop's bands for one axis."""
    number = as_number(value)
    if number is None:
        return BandTier.OUT_OF_RANGE
    if profile.optimal[axis].contains(number):
        return BandTier.OPTIMAL
    if profile.acceptable[axis].contains(number):
        return BandTier.ACCEPTABLE
    return BandTier.OUT_OF_RANGE


def format_value(axis: SoilAxis, value: float) -> str:
    # pH reads as 6.0-7.5, nutrients as 140-200
    if axis == SoilAxis.PH and round(value, 1) == value:
        return f"{value:.1f}"
    return f"{value:g}"


def format_band(axis: SoilAxis, band) -> str:
    return f"{format_value(axis, band.low)}-{format_value(axis, band.high)}"


def axis_rationale(profile: CropProfile, axis: SoilAxis, value, tier: BandTier) -> str:
    number = as_number(value)
    if number is None:
        return f"{axis.label} not provided"
    shown = format_value(axis, number)
    optimal = format_band(axis, profile.optimal[axis])
    if tier == BandTier.OPTIMAL:
        return f"{axis.label} {shown} within optimal range {optimal}"
    acceptable = format_band(axis, profile.acceptable[axis])
    if tier == BandTier.ACCEPTABLE:
        return f"{axis.label} {shown} within acceptable range {acceptable} (optimal {optimal})"
    return f"{axis.label} {shown} outside acceptable range {acceptable}"


def market_potential_for_priority(priority: int) -> Level:
    if priority <= HIGH_MARKET_MAX_PRIORITY:
        return Level.HIGH
    if priority <= MEDIUM_MARKET_MAX_PRIORITY:
        return Level.MEDIUM
    return Level.LOW


class SuitabilityScorer:
    """
    Scores every catalog crop against a soil sample.

    Pure: the same sample and location always yield the same scores, in
    catalog order.

    Usage:
        scorer = SuitabilityScorer()
        scored = scorer.score_all(SoilSample(ph=6.5, nitrogen=160, ...), "Nashik")
    """

    def __init__(
        self,
        catalog: Optional[CropCatalog] = None,
        resolver: Optional[LocationResolver] = None,
        locale: str = "en",
    ):
        self.catalog = catalog or get_catalog()
        self.resolver = resolver or get_resolver()
        self.locale = locale

    def score_axis(self, profile: CropProfile, axis: SoilAxis, value) -> Tuple[int, BandTier]:
        tier = classify(profile, axis, value)
        return TIER_POINTS[tier], tier

    def score_crop(
        self,
        profile: CropProfile,
        soil: SoilSample,
        match: Optional[LocationMatch] = None,
    ) -> ScoredCrop:
        """Score one crop. The bonus applies only when match.matched is True."""
        total = 0
        rationale = []
        for axis in SoilAxis:
            value = soil.value(axis)
            points, tier = self.score_axis(profile, axis, value)
            total += points
            rationale.append(axis_rationale(profile, axis, value, tier))

        market = CATEGORY_MARKET_POTENTIAL.get(profile.category, Level.MEDIUM)
        priority = match.profile.priority_of(profile.id) if match and match.matched else None
        if priority is not None:
            total += LOCATION_AFFINITY_BONUS
            market = market_potential_for_priority(priority)
            rationale.append(
                f"Preferred crop for {match.profile.region} (+{LOCATION_AFFINITY_BONUS} location bonus)"
            )

        return ScoredCrop(
            crop_id=profile.id,
            name=profile.name(self.locale),
            suitability_score=min(MAX_SCORE, total),
            season=profile.season,
            category=profile.category,
            rationale=rationale,
            market_potential=market,
            investment_required=CATEGORY_INVESTMENT.get(profile.category, Level.MEDIUM),
        )

    def score_all(
        self,
        soil: SoilSample,
        location: Optional[str] = None,
        match: Optional[LocationMatch] = None,
    ) -> List[ScoredCrop]:
        """
        Score the whole catalog in load order.

        Args:
            soil: Sample to score; missing axes get the floor score
            location: Free text, resolved when match is not given.
                Falls back to soil.location.
            match: Pre-resolved location
        """
        if match is None:
            match = self.resolver.resolve(location if location is not None else soil.location)
        if match.matched:
            self._check_preferred(match.profile.preferred_crops)

        scored = [self.score_crop(profile, soil, match) for profile in self.catalog]
        log.debug(f"Scored {len(scored)} crops (location matched: {match.matched})")
        return scored

    def _check_preferred(self, preferred: Iterable) -> None:
        for entry in preferred:
            try:
                self.catalog.require(entry.crop_id)
            except CatalogLookupMiss as e:
                log.warning(f"Skipping preferred crop: {e}")
