"""
Confidence Scorer

Weather-and-season path for the crops that carry weather tolerance bands
(rice, wheat, cotton). A crop is recommended only when its confidence
strictly exceeds its publish threshold, the current season matches
the crop's season, and any per-crop pre-gate (rice humidity) holds.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from agronomy.catalog import CropCatalog, get_catalog
from agronomy.errors import InvalidInputError
from agronomy.models import (
    ActionRecommendation,
    Band,
    CropProfile,
    RiskFactor,
    Season,
    SoilSample,
    WeatherSnapshot,
)
from agronomy.risk import RiskDeriver

log = logging.getLogger(__name__)

BASE_CONFIDENCE = 50
TEMPERATURE_IN_BAND = 20
TEMPERATURE_OUT_OF_BAND = -15
HUMIDITY_IN_BAND = 15
HUMIDITY_OUT_OF_BAND = -10
MOISTURE_IN_BAND = 15
MOISTURE_OUT_OF_BAND = -10

# Minimum humidity before confidence is computed at all
MIN_HUMIDITY_PCT = {"rice": 60.0}

# Days until the recommended planting date
PLANTING_LEAD_DAYS = {"rice": 15, "wheat": 10, "cotton": 20}

# Lower bound of the expected yield range, t/ha
BASELINE_YIELD_T_PER_HA = {"rice": 4.5, "wheat": 3.8, "cotton": 2.2}

KHARIF_MONTHS = range(6, 11)
RABI_MONTHS = (11, 12, 1, 2, 3)


def season_for_month(month: int) -> Season:
    """June-October is Kharif, November-March is Rabi, April-May is Zaid."""
    if month in KHARIF_MONTHS:
        return Season.KHARIF
    if month in RABI_MONTHS:
        return Season.RABI
    return Season.ZAID


def passes_pre_gate(profile: CropProfile, weather: WeatherSnapshot) -> bool:
    minimum = MIN_HUMIDITY_PCT.get(profile.id)
    if minimum is None:
        return True
    return weather.humidity is not None and weather.humidity >= minimum


def _band_points(band: Band, value: Optional[float], inside: int, outside: int) -> int:
    if value is None:
        return outside
    return inside if band.contains(value) else outside


@dataclass
class ConfidenceRecommendation:
    """A published crop recommendation from the weather/season path."""
    crop_id: str
    name: str
    confidence: int
    season: Season
    planting_in_days: int
    baseline_yield_t_per_ha: float
    risk_factors: List[RiskFactor] = field(default_factory=list)
    actions: List[ActionRecommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cropId": self.crop_id,
            "cropName": self.name,
            "confidence": self.confidence,
            "season": self.season.value,
            "plantingInDays": self.planting_in_days,
            "expectedYield": self.baseline_yield_t_per_ha,
            "riskFactors": [r.to_dict() for r in self.risk_factors],
            "recommendations": [a.to_dict() for a in self.actions],
        }


class ConfidenceScorer:
    """
    Usage:
        scorer = ConfidenceScorer()
        recs = scorer.recommend(WeatherSnapshot(temperature=28, humidity=75, moisture=60), month=7)
    """

    def __init__(
        self,
        catalog: Optional[CropCatalog] = None,
        deriver: Optional[RiskDeriver] = None,
        locale: str = "en",
    ):
        self.catalog = catalog or get_catalog()
        self.deriver = deriver or RiskDeriver()
        self.locale = locale

    def confidence(self, profile: CropProfile, weather: WeatherSnapshot) -> int:
        """Base 50 adjusted per weather band, clamped to [0, 100]."""
        bands = profile.weather
        if bands is None:
            return BASE_CONFIDENCE
        score = BASE_CONFIDENCE
        score += _band_points(bands.temperature, weather.temperature, TEMPERATURE_IN_BAND, TEMPERATURE_OUT_OF_BAND)
        score += _band_points(bands.humidity, weather.humidity, HUMIDITY_IN_BAND, HUMIDITY_OUT_OF_BAND)
        score += _band_points(bands.moisture, weather.moisture, MOISTURE_IN_BAND, MOISTURE_OUT_OF_BAND)
        return max(0, min(100, score))

    def in_season(self, profile: CropProfile, season: Season) -> bool:
        return profile.season == Season.YEAR_ROUND or profile.season == season

    def recommend(
        self,
        weather: WeatherSnapshot,
        month: Optional[int] = None,
        soil: Optional[SoilSample] = None,
    ) -> List[ConfidenceRecommendation]:
        """
        Recommend crops for the given conditions.

        Args:
            weather: Averaged readings; missing values count as out of band
            month: 1-12, defaults to the current month
            soil: Optional soil sample feeding the soil risk rules
        """
        if month is None:
            month = datetime.now().month
        if not 1 <= month <= 12:
            raise InvalidInputError("month", f"month must be 1-12, got {month}")

        season = season_for_month(month)
        recommendations = []
        for profile in self.catalog.confidence_crops():
            if not self.in_season(profile, season):
                continue
            if not passes_pre_gate(profile, weather):
                log.debug(f"{profile.id}: humidity {weather.humidity} below pre-gate")
                continue
            confidence = self.confidence(profile, weather)
            if confidence <= profile.publish_threshold:
                log.debug(f"{profile.id}: confidence {confidence} <= {profile.publish_threshold}")
                continue

            risks = self.deriver.derive_risks(soil, weather)
            recommendations.append(ConfidenceRecommendation(
                crop_id=profile.id,
                name=profile.name(self.locale),
                confidence=confidence,
                season=profile.season,
                planting_in_days=PLANTING_LEAD_DAYS.get(profile.id, 0),
                baseline_yield_t_per_ha=BASELINE_YIELD_T_PER_HA.get(profile.id, 0.0),
                risk_factors=risks,
                actions=self.deriver.derive_actions(risks, crop_id=profile.id),
            ))

        log.info(f"{season.value} recommendations: {[r.crop_id for r in recommendations]}")
        return recommendations
