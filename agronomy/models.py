"""
Core data models for the agronomy engine.

Request inputs (SoilSample, WeatherSnapshot), static reference data
(CropProfile, LocationProfile) and the per-request outputs that make up
a Report. Every output type has a to_dict() producing the camelCase
shape consumed by the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════════
class Season(Enum):
    """Indian cropping seasons."""
    KHARIF = "Kharif"        # Monsoon, June-October
    RABI = "Rabi"            # Winter, November-March
    ZAID = "Zaid"            # Summer, April-May
    YEAR_ROUND = "YearRound"


class CropCategory(Enum):
    CEREAL = "cereal"
    PULSE = "pulse"
    OILSEED = "oilseed"
    CASH_CROP = "cash_crop"
    VEGETABLE = "vegetable"
    FRUIT = "fruit"
    SPICE = "spice"
    MEDICINAL = "medicinal"


class Level(Enum):
    """Three-step rating used for market potential and investment."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ActionType(Enum):
    IRRIGATION = "irrigation"
    FERTILIZER = "fertilizer"
    PESTICIDE = "pesticide"
    HARVESTING = "harvesting"
    STORAGE = "storage"


class SoilAxis(Enum):
    """The four soil axes every crop is scored on."""
    PH = "ph"
    NITROGEN = "nitrogen"
    PHOSPHORUS = "phosphorus"
    POTASSIUM = "potassium"

    @property
    def label(self) -> str:
        return _AXIS_LABELS[self]


_AXIS_LABELS = {
    SoilAxis.PH: "pH",
    SoilAxis.NITROGEN: "Nitrogen",
    SoilAxis.PHOSPHORUS: "Phosphorus",
    SoilAxis.POTASSIUM: "Potassium",
}


class BandTier(Enum):
    """Where a value falls relative to a crop's bands."""
    OPTIMAL = "optimal"
    ACCEPTABLE = "acceptable"
    OUT_OF_RANGE = "out_of_range"


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST INPUTS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class SoilSample:
    """
    A soil test result. Nutrients are kg/ha.

    Fields are Optional so a partially filled sample can still be scored;
    the Normalizer is what enforces presence of the four required axes.
    """
    ph: Optional[float] = None
    nitrogen: Optional[float] = None
    phosphorus: Optional[float] = None
    potassium: Optional[float] = None
    organic_matter: Optional[float] = None
    location: Optional[str] = None

    def value(self, axis: SoilAxis) -> Any:
        return getattr(self, axis.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ph": self.ph,
            "nitrogen": self.nitrogen,
            "phosphorus": self.phosphorus,
            "potassium": self.potassium,
            "organicMatter": self.organic_matter,
            "location": self.location,
        }


@dataclass
class WeatherSnapshot:
    """Weather averaged over a caller-chosen window."""
    temperature: Optional[float] = None   # °C
    humidity: Optional[float] = None      # %
    moisture: Optional[float] = None      # soil moisture %, or rainfall proxy
    wind_speed: Optional[float] = None    # km/h

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "moisture": self.moisture,
            "windSpeed": self.wind_speed,
        }


# ═══════════════════════════════════════════════════════════════════════════
# REFERENCE DATA
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class Band:
    """Inclusive numeric interval."""
    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"{self.low:g}-{self.high:g}"


@dataclass(frozen=True)
class WeatherTolerance:
    """Weather bands used by the confidence scorer."""
    temperature: Band
    humidity: Band
    moisture: Band


@dataclass(frozen=True)
class CropProfile:
    """
    Tolerance profile for a single crop. Immutable after catalog load.

    Attributes:
        id: Stable catalog key, e.g. "wheat"
        names: Locale code -> display name
        optimal: Optimal band per soil axis
        acceptable: Widened band per soil axis, derived once at load time
        weather: Weather bands, only for crops on the confidence path
        publish_threshold: Minimum confidence to publish on that path
    """
    id: str
    names: Mapping[str, str] = field(hash=False)
    season: Season
    category: CropCategory
    optimal: Mapping[SoilAxis, Band] = field(hash=False)
    acceptable: Mapping[SoilAxis, Band] = field(hash=False)
    weather: Optional[WeatherTolerance] = None
    publish_threshold: Optional[int] = None

    def name(self, locale: str = "en") -> str:
        return self.names.get(locale) or self.names.get("en") or self.id


@dataclass(frozen=True)
class PreferredCrop:
    crop_id: str
    priority: int  # 1 = most preferred


@dataclass(frozen=True)
class LocationProfile:
    """Regional narrative plus the crops the region favours."""
    region: str
    climate: str
    soil_type: str
    preferred_crops: Tuple[PreferredCrop, ...] = ()
    market_advantages: Tuple[str, ...] = ()
    challenges: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def priority_of(self, crop_id: str) -> Optional[int]:
        for preferred in self.preferred_crops:
            if preferred.crop_id == crop_id:
                return preferred.priority
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "region": self.region,
            "climate": self.climate,
            "soilType": self.soil_type,
            "preferredCrops": [p.crop_id for p in self.preferred_crops],
            "marketAdvantages": list(self.market_advantages),
            "challenges": list(self.challenges),
            "recommendations": list(self.recommendations),
        }


# ═══════════════════════════════════════════════════════════════════════════
# OUTPUTS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class ScoredCrop:
    """Suitability result for one crop."""
    crop_id: str
    name: str
    suitability_score: int
    season: Season
    category: CropCategory
    rationale: List[str] = field(default_factory=list)
    market_potential: Level = Level.MEDIUM
    investment_required: Level = Level.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.crop_id,
            "name": self.name,
            "suitability": self.suitability_score,
            "season": self.season.value,
            "category": self.category.value,
            "marketPotential": self.market_potential.value,
            "investmentRequired": self.investment_required.value,
            "reason": "; ".join(self.rationale),
        }


@dataclass
class RankedCrop:
    rank: int
    crop: ScoredCrop
    advisory_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"rank": self.rank}
        data.update(self.crop.to_dict())
        if self.advisory_reason:
            data["advisoryReason"] = self.advisory_reason
        return data


@dataclass
class RiskFactor:
    factor: str
    severity: Severity
    probability: int  # 0-100
    mitigation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "severity": self.severity.value,
            "probability": self.probability,
            "mitigation": self.mitigation,
        }


@dataclass
class ActionRecommendation:
    type: ActionType
    description: str
    priority: Priority
    timeline: str
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "description": self.description,
            "priority": self.priority.value,
            "timeline": self.timeline,
            "cost": self.cost,
        }


@dataclass
class AxisAnalysis:
    """Human-readable status of one soil measurement."""
    value: Optional[float]
    tier: BandTier
    status: str
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "status": self.status,
            "recommendation": self.recommendation,
        }


@dataclass
class SoilAnalysis:
    axes: Dict[SoilAxis, AxisAnalysis]
    overall_score: int
    overall_health: str
    organic_matter: Optional[AxisAnalysis] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {axis.value: analysis.to_dict() for axis, analysis in self.axes.items()}
        data["organicMatter"] = self.organic_matter.to_dict() if self.organic_matter else None
        data["overallScore"] = self.overall_score
        data["overallHealth"] = self.overall_health
        return data


@dataclass
class HistorySummary:
    """Summary of an externally supplied time series (e.g. NDVI)."""
    metric: str
    count: int
    mean: Optional[float]
    latest: Optional[float]
    trend: str  # "increasing", "decreasing", "stable" or "insufficient data"
    recent: List[Tuple[str, float]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric": self.metric,
            "count": self.count,
            "mean": self.mean,
            "latest": self.latest,
            "trend": self.trend,
            "recent": [{"date": d, "value": v} for d, v in self.recent],
        }


@dataclass
class Report:
    """
    Complete land-health and crop-planning report for one request.
    Built fresh per request; never persisted by the engine.
    """
    soil_analysis: SoilAnalysis
    crop_recommendations: List[RankedCrop]
    risk_factors: List[RiskFactor]
    action_recommendations: List[ActionRecommendation]
    location_analysis: Optional[LocationProfile] = None
    history: Optional[HistorySummary] = None
    enhanced: bool = False
    advisory_notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "soilAnalysis": self.soil_analysis.to_dict(),
            "cropRecommendations": [c.to_dict() for c in self.crop_recommendations],
            "riskFactors": [r.to_dict() for r in self.risk_factors],
            "actionRecommendations": [a.to_dict() for a in self.action_recommendations],
            "enhanced": self.enhanced,
            "advisoryNotes": list(self.advisory_notes),
        }
        if self.location_analysis is not None:
            data["locationAnalysis"] = self.location_analysis.to_dict()
        if self.history is not None:
            data["history"] = self.history.to_dict()
        return data
