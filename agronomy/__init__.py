"""
Agronomy module for the crop suitability engine.
Contains the crop catalog, scorers, risk rules and report assembly.
"""

from agronomy.models import (
    SoilSample,
    WeatherSnapshot,
    CropProfile,
    LocationProfile,
    ScoredCrop,
    RankedCrop,
    RiskFactor,
    ActionRecommendation,
    Report,
)
from agronomy.errors import AgronomyError, InvalidInputError, AdvisoryUnavailable, CatalogLookupMiss
from agronomy.catalog import CropCatalog, get_catalog
from agronomy.locations import LocationResolver, get_resolver
from agronomy.settings import EngineSettings
from agronomy.engine import AgronomyEngine, get_engine, score_crops, compute_report, recommend_by_conditions

__all__ = [
    # Models
    "SoilSample",
    "WeatherSnapshot",
    "CropProfile",
    "LocationProfile",
    "ScoredCrop",
    "RankedCrop",
    "RiskFactor",
    "ActionRecommendation",
    "Report",
    # Errors
    "AgronomyError",
    "InvalidInputError",
    "AdvisoryUnavailable",
    "CatalogLookupMiss",
    # Reference data
    "CropCatalog",
    "get_catalog",
    "LocationResolver",
    "get_resolver",
    # Engine
    "EngineSettings",
    "AgronomyEngine",
    "get_engine",
    "score_crops",
    "compute_report",
    "recommend_by_conditions",
]
