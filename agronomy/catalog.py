"""
Crop Parameter Catalog

Ordered, immutable table of crop tolerance profiles. Load order is part
of the contract: it is the tie-breaker when two crops score the same.

Bands are agronomic ranges for Maharashtra and surrounding regions
(pH units, nutrients in kg/ha).
"""

import logging
import threading
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from agronomy.errors import CatalogLookupMiss
from agronomy.models import (
    Band,
    CropCategory,
    CropProfile,
    Level,
    Season,
    SoilAxis,
    WeatherTolerance,
)

log = logging.getLogger(__name__)


# Acceptable band derivation
NUTRIENT_ACCEPTABLE_LOW_FACTOR = 0.7
NUTRIENT_ACCEPTABLE_HIGH_FACTOR = 1.3
PH_ACCEPTABLE_OFFSET = 0.5

# Confidence path publish thresholds. Undocumented in the source data;
# kept as-is without further derivation.
CEREAL_PUBLISH_THRESHOLD = 70
CASH_CROP_PUBLISH_THRESHOLD = 65

CATEGORY_MARKET_POTENTIAL = {
    CropCategory.CEREAL: Level.MEDIUM,
    CropCategory.PULSE: Level.MEDIUM,
    CropCategory.OILSEED: Level.HIGH,
    CropCategory.CASH_CROP: Level.MEDIUM,
    CropCategory.VEGETABLE: Level.HIGH,
    CropCategory.FRUIT: Level.HIGH,
    CropCategory.SPICE: Level.HIGH,
    CropCategory.MEDICINAL: Level.MEDIUM,
}

CATEGORY_INVESTMENT = {
    CropCategory.CEREAL: Level.LOW,
    CropCategory.PULSE: Level.LOW,
    CropCategory.OILSEED: Level.MEDIUM,
    CropCategory.CASH_CROP: Level.HIGH,
    CropCategory.VEGETABLE: Level.MEDIUM,
    CropCategory.FRUIT: Level.HIGH,
    CropCategory.SPICE: Level.MEDIUM,
    CropCategory.MEDICINAL: Level.LOW,
}


# ═══════════════════════════════════════════════════════════════════════════
# CROP TABLE
# ═══════════════════════════════════════════════════════════════════════════
# (id, English name, Marathi name, season, category, pH, N, P, K)
_K = Season.KHARIF
_R = Season.RABI
_Y = Season.YEAR_ROUND

CROP_TABLE: List[Tuple] = [
    # Cereals
    ("rice", "Rice", "भात", _K, CropCategory.CEREAL, (5.5, 7.5), (120, 200), (8, 25), (80, 200)),
    ("wheat", "Wheat", "गहू", _R, CropCategory.CEREAL, (6.0, 7.5), (140, 200), (10, 20), (100, 200)),
    ("jowar", "Jowar (Sorghum)", "ज्वारी", _K, CropCategory.CEREAL, (6.0, 8.0), (80, 150), (8, 20), (60, 150)),
    ("bajra", "Bajra (Pearl Millet)", "बाजरी", _K, CropCategory.CEREAL, (6.0, 8.5), (60, 120), (6, 15), (50, 120)),
    ("maize", "Maize", "मका", _K, CropCategory.CEREAL, (5.5, 7.5), (120, 200), (10, 25), (80, 200)),
    ("ragi", "Ragi (Finger Millet)", "नाचणी", _K, CropCategory.CEREAL, (5.5, 8.0), (60, 120), (6, 15), (50, 120)),
    # Pulses
    ("toor", "Toor (Pigeon Pea)", "तूर डाळ", _K, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("moong", "Moong (Green Gram)", "मूग", _K, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("urad", "Urad (Black Gram)", "उडीद", _K, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("chana", "Chana (Chickpea)", "हरभरा", _R, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("masoor", "Masoor (Lentil)", "मसूर", _R, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("matki", "Matki (Moth Bean)", "मटकी", _K, CropCategory.PULSE, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    # Oilseeds
    ("groundnut", "Groundnut", "शेंगदाणे", _K, CropCategory.OILSEED, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("soybean", "Soybean", "सोयाबीन", _K, CropCategory.OILSEED, (6.0, 7.5), (20, 60), (8, 20), (40, 100)),
    ("sunflower", "Sunflower", "सूर्यफूल", _K, CropCategory.OILSEED, (6.0, 8.0), (60, 120), (8, 20), (50, 120)),
    ("sesame", "Sesame", "तीळ", _K, CropCategory.OILSEED, (6.0, 8.0), (40, 80), (6, 15), (30, 80)),
    ("castor", "Castor", "एरंड", _K, CropCategory.OILSEED, (6.0, 8.0), (40, 80), (6, 15), (30, 80)),
    # Cash crops
    ("cotton", "Cotton", "कापूस", _K, CropCategory.CASH_CROP, (5.5, 8.5), (100, 180), (8, 25), (80, 180)),
    ("sugarcane", "Sugarcane", "ऊस", _Y, CropCategory.CASH_CROP, (6.0, 8.0), (150, 250), (12, 30), (120, 250)),
    ("tobacco", "Tobacco", "तंबाखू", _K, CropCategory.CASH_CROP, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    # Vegetables
    ("tomato", "Tomato", "टोमॅटो", _Y, CropCategory.VEGETABLE, (6.0, 7.0), (120, 200), (10, 25), (100, 200)),
    ("onion", "Onion", "कांदा", _R, CropCategory.VEGETABLE, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    ("potato", "Potato", "बटाटा", _R, CropCategory.VEGETABLE, (5.5, 7.0), (120, 200), (10, 25), (100, 200)),
    ("brinjal", "Brinjal", "वांगे", _Y, CropCategory.VEGETABLE, (6.0, 7.5), (100, 180), (8, 20), (80, 180)),
    ("cucumber", "Cucumber", "काकडी", _K, CropCategory.VEGETABLE, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    ("cauliflower", "Cauliflower", "फुलकोबी", _R, CropCategory.VEGETABLE, (6.0, 7.5), (120, 200), (10, 25), (100, 200)),
    ("cabbage", "Cabbage", "कोबी", _R, CropCategory.VEGETABLE, (6.0, 7.5), (120, 200), (10, 25), (100, 200)),
    ("carrot", "Carrot", "गाजर", _R, CropCategory.VEGETABLE, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    ("radish", "Radish", "मुळा", _R, CropCategory.VEGETABLE, (6.0, 7.5), (60, 120), (6, 15), (50, 120)),
    ("spinach", "Spinach", "पालक", _R, CropCategory.VEGETABLE, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    # Fruits
    ("mango", "Mango", "आंबा", _Y, CropCategory.FRUIT, (6.0, 7.5), (100, 200), (10, 25), (80, 200)),
    ("banana", "Banana", "केळे", _Y, CropCategory.FRUIT, (6.0, 7.5), (150, 250), (12, 30), (120, 250)),
    ("orange", "Orange", "संत्रे", _Y, CropCategory.FRUIT, (6.0, 7.5), (100, 200), (10, 25), (80, 200)),
    ("papaya", "Papaya", "पपई", _Y, CropCategory.FRUIT, (6.0, 7.5), (120, 200), (10, 25), (100, 200)),
    ("guava", "Guava", "पेरू", _Y, CropCategory.FRUIT, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    ("pomegranate", "Pomegranate", "डाळिंब", _Y, CropCategory.FRUIT, (6.0, 7.5), (100, 200), (10, 25), (80, 200)),
    ("grapes", "Grapes", "द्राक्षे", _Y, CropCategory.FRUIT, (6.0, 7.5), (120, 200), (10, 25), (100, 200)),
    ("coconut", "Coconut", "नारळ", _Y, CropCategory.FRUIT, (6.0, 7.5), (100, 200), (10, 25), (80, 200)),
    ("cashew", "Cashew", "काजू", _Y, CropCategory.FRUIT, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    # Spices
    ("chilli", "Chilli", "मिरची", _K, CropCategory.SPICE, (6.0, 7.5), (80, 150), (8, 20), (60, 150)),
    ("turmeric", "Turmeric", "हळद", _K, CropCategory.SPICE, (6.0, 7.5), (100, 180), (8, 20), (80, 180)),
    ("ginger", "Ginger", "आले", _K, CropCategory.SPICE, (6.0, 7.5), (100, 180), (8, 20), (80, 180)),
    ("coriander", "Coriander", "कोथिंबीर", _R, CropCategory.SPICE, (6.0, 7.5), (60, 120), (6, 15), (50, 120)),
    ("cumin", "Cumin", "जिरे", _R, CropCategory.SPICE, (6.0, 7.5), (40, 80), (6, 15), (30, 80)),
    # Medicinal plants
    ("tulsi", "Tulsi (Holy Basil)", "तुळस", _Y, CropCategory.MEDICINAL, (6.0, 7.5), (60, 120), (6, 15), (50, 120)),
    ("neem", "Neem", "कडुनिंब", _Y, CropCategory.MEDICINAL, (6.0, 8.0), (80, 150), (8, 20), (60, 150)),
    ("aloe", "Aloe Vera", "कोरफड", _Y, CropCategory.MEDICINAL, (6.0, 8.0), (40, 80), (6, 15), (30, 80)),
]

# Crops scored on the weather/season path: id -> (temperature, humidity, moisture, threshold)
WEATHER_TOLERANCES: Dict[str, Tuple] = {
    "rice": ((20, 35), (60, 90), (40, 80), CEREAL_PUBLISH_THRESHOLD),
    "wheat": ((15, 25), (40, 70), (30, 60), CEREAL_PUBLISH_THRESHOLD),
    "cotton": ((25, 40), (50, 80), (35, 65), CASH_CROP_PUBLISH_THRESHOLD),
}


# ═══════════════════════════════════════════════════════════════════════════
# BAND DERIVATION
# ═══════════════════════════════════════════════════════════════════════════
def acceptable_band(axis: SoilAxis, optimal: Band) -> Band:
    """Widen an optimal band into the acceptable band for that axis."""
    if axis == SoilAxis.PH:
        return Band(
            round(optimal.low - PH_ACCEPTABLE_OFFSET, 6),
            round(optimal.high + PH_ACCEPTABLE_OFFSET, 6),
        )
    return Band(
        round(optimal.low * NUTRIENT_ACCEPTABLE_LOW_FACTOR, 6),
        round(optimal.high * NUTRIENT_ACCEPTABLE_HIGH_FACTOR, 6),
    )


def build_profile(
    crop_id: str,
    names: Dict[str, str],
    season: Season,
    category: CropCategory,
    ph: Tuple[float, float],
    nitrogen: Tuple[float, float],
    phosphorus: Tuple[float, float],
    potassium: Tuple[float, float],
    weather: Optional[WeatherTolerance] = None,
    publish_threshold: Optional[int] = None,
) -> CropProfile:
    """Create a CropProfile with its acceptable bands precomputed."""
    optimal = {
        SoilAxis.PH: Band(*ph),
        SoilAxis.NITROGEN: Band(*nitrogen),
        SoilAxis.PHOSPHORUS: Band(*phosphorus),
        SoilAxis.POTASSIUM: Band(*potassium),
    }
    acceptable = {axis: acceptable_band(axis, band) for axis, band in optimal.items()}
    return CropProfile(
        id=crop_id,
        names=MappingProxyType(dict(names)),
        season=season,
        category=category,
        optimal=MappingProxyType(optimal),
        acceptable=MappingProxyType(acceptable),
        weather=weather,
        publish_threshold=publish_threshold,
    )


# ═══════════════════════════════════════════════════════════════════════════
# CATALOG
# ═══════════════════════════════════════════════════════════════════════════
class CropCatalog:
    """
    Read-only, ordered collection of crop profiles with O(1) lookup by id.

    Usage:
        catalog = get_catalog()
        wheat = catalog.get("wheat")
        for profile in catalog:   # load order
            ...
    """

    def __init__(self, profiles: Iterable[CropProfile]):
        self._profiles: Tuple[CropProfile, ...] = tuple(profiles)
        self._index: Dict[str, CropProfile] = {}
        for profile in self._profiles:
            if profile.id in self._index:
                raise ValueError(f"Duplicate crop id in catalog: {profile.id}")
            self._index[profile.id] = profile

    def __iter__(self) -> Iterator[CropProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, crop_id: object) -> bool:
        return crop_id in self._index

    def get(self, crop_id: str) -> Optional[CropProfile]:
        return self._index.get(crop_id)

    def require(self, crop_id: str) -> CropProfile:
        """Like get(), but raises CatalogLookupMiss for unknown ids."""
        profile = self._index.get(crop_id)
        if profile is None:
            raise CatalogLookupMiss(crop_id)
        return profile

    def ids(self) -> List[str]:
        return [p.id for p in self._profiles]

    def confidence_crops(self) -> List[CropProfile]:
        """Crops carrying weather bands and a publish threshold."""
        return [
            p for p in self._profiles
            if p.weather is not None and p.publish_threshold is not None
        ]

    def find_by_name(self, name: str) -> Optional[CropProfile]:
        """Match an id or any localized display name, case-insensitively."""
        key = name.strip().casefold()
        if key in self._index:
            return self._index[key]
        for profile in self._profiles:
            for display in profile.names.values():
                if display.casefold() == key:
                    return profile
        return None


def load_default_catalog() -> CropCatalog:
    """Build the catalog from CROP_TABLE and WEATHER_TOLERANCES."""
    profiles = []
    for crop_id, name_en, name_mr, season, category, ph, n, p, k in CROP_TABLE:
        weather = None
        threshold = None
        if crop_id in WEATHER_TOLERANCES:
            temp, humidity, moisture, threshold = WEATHER_TOLERANCES[crop_id]
            weather = WeatherTolerance(Band(*temp), Band(*humidity), Band(*moisture))
        profiles.append(build_profile(
            crop_id,
            {"en": name_en, "mr": name_mr},
            season,
            category,
            ph, n, p, k,
            weather=weather,
            publish_threshold=threshold,
        ))
    return CropCatalog(profiles)


# Singleton, guarded so concurrent first use loads exactly once
_catalog: Optional[CropCatalog] = None
_catalog_lock = threading.Lock()


def get_catalog() -> CropCatalog:
    """Get the process-wide crop catalog."""
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = load_default_catalog()
                log.info(f"Crop catalog loaded: {len(_catalog)} crops")
    return _catalog
