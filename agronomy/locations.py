"""
Location Affinity Resolver

Maps a free-text location to a LocationProfile through an ordered table
of (pattern, profile) rules. Matching is case-insensitive substring
containment and the first rule in table order wins, so "Pune, near
Nashik" resolves to Pune.

District preferred-crop lists drive the suitability bonus; the region
narrative (climate, soil, market notes) is shared by all districts of a
region.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from agronomy.models import LocationProfile, PreferredCrop

log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# REGION NARRATIVES
# ═══════════════════════════════════════════════════════════════════════════
REGIONS: Dict[str, Dict] = {
    "western": {
        "region": "Western Maharashtra",
        "climate": "Semi-arid with moderate rainfall",
        "soil_type": "Black soil and red soil",
        "market_advantages": ("Close to Mumbai markets", "Export facilities", "Processing units"),
        "challenges": ("Water scarcity", "Rising land values"),
        "recommendations": ("Use drip irrigation", "Grow high-value crops"),
    },
    "vidarbha": {
        "region": "Vidarbha",
        "climate": "Tropical with moderate rainfall",
        "soil_type": "Black cotton soil",
        "market_advantages": ("Cotton mandis", "Orange processing units", "Rail connectivity"),
        "challenges": ("Cotton pest pressure", "Water scarcity"),
        "recommendations": ("Adopt integrated pest management", "Invest in water conservation"),
    },
    "southern": {
        "region": "Southern Maharashtra",
        "climate": "Tropical monsoon with good rainfall",
        "soil_type": "Laterite soil",
        "market_advantages": ("Sugarcane processing units", "Export facilities", "Reliable water supply"),
        "challenges": ("Low sugarcane prices", "Rising labour costs"),
        "recommendations": ("Diversify crops", "Partner with processing units"),
    },
    "konkan": {
        "region": "Konkan Coast",
        "climate": "Tropical coastal with high rainfall",
        "soil_type": "Laterite soil and sandy loam",
        "market_advantages": ("Mumbai markets", "Export facilities", "Tourism industry"),
        "challenges": ("Very heavy rainfall", "Soil erosion"),
        "recommendations": ("Practice terrace farming", "Use organic methods"),
    },
    "general": {
        "region": "Maharashtra",
        "climate": "Tropical with moderate rainfall",
        "soil_type": "Mixed soil types",
        "market_advantages": ("Local markets", "Government support"),
        "challenges": ("Water scarcity", "Soil erosion"),
        "recommendations": ("Invest in water conservation", "Diversify crops"),
    },
}

# Pattern order is the match order.
# (pattern, region key, preferred crops by priority)
DISTRICT_TABLE = [
    ("pune", "western", ["sugarcane", "grapes", "pomegranate", "tomato", "onion", "cotton", "soybean"]),
    ("nashik", "western", ["grapes", "onion", "tomato", "pomegranate", "sugarcane", "cotton"]),
    ("nagpur", "vidarbha", ["cotton", "soybean", "orange", "banana", "sugarcane", "chilli"]),
    ("aurangabad", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("kolhapur", "southern", ["sugarcane", "grapes", "pomegranate", "banana", "coconut"]),
    ("amravati", "vidarbha", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("solapur", "general", ["cotton", "sugarcane", "grapes", "pomegranate", "onion"]),
    ("sangli", "southern", ["grapes", "sugarcane", "pomegranate", "banana", "coconut"]),
    ("latur", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("beed", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("ahmednagar", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("satara", "southern", ["grapes", "sugarcane", "pomegranate", "banana", "coconut"]),
    ("ratnagiri", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
    ("sindhudurg", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
    ("gadchiroli", "general", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("chandrapur", "general", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("wardha", "vidarbha", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("yavatmal", "general", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("buldhana", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("akola", "vidarbha", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("washim", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("hingoli", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("nanded", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("parbhani", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("jalna", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("dhule", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("nandurbar", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("jalgaon", "general", ["cotton", "sugarcane", "onion", "tomato", "grapes"]),
    ("bhandara", "general", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("gondia", "general", ["cotton", "soybean", "orange", "banana", "sugarcane"]),
    ("thane", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
    ("mumbai", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
    ("raigad", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
    ("palghar", "konkan", ["mango", "coconut", "cashew", "banana", "papaya"]),
]

# "pulses" names a category, not a catalog crop; it is narrative only
DEFAULT_PREFERRED = ["wheat", "rice", "tomato", "onion", "pulses"]


def make_profile(region_key: str, crop_ids: Sequence[str]) -> LocationProfile:
    """Combine a region narrative with a ranked preferred-crop list."""
    narrative = REGIONS[region_key]
    return LocationProfile(
        region=narrative["region"],
        climate=narrative["climate"],
        soil_type=narrative["soil_type"],
        preferred_crops=tuple(
            PreferredCrop(crop_id, priority) for priority, crop_id in enumerate(crop_ids, start=1)
        ),
        market_advantages=narrative["market_advantages"],
        challenges=narrative["challenges"],
        recommendations=narrative["recommendations"],
    )


def normalize_location_key(location: Optional[str]) -> str:
    if not location:
        return ""
    return location.strip().casefold()


# ═══════════════════════════════════════════════════════════════════════════
# RESOLVER
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class LocationRule:
    """A lowercase substring pattern and the profile it selects."""
    pattern: str
    profile: LocationProfile

    def matches(self, key: str) -> bool:
        return bool(key) and self.pattern in key


@dataclass(frozen=True)
class LocationMatch:
    """
    Result of resolving a location.

    matched is False when the default profile was used; the affinity
    bonus only applies to matched locations.
    """
    profile: LocationProfile
    matched: bool
    pattern: Optional[str] = None


class LocationResolver:
    """Ordered rule table with a fallback profile. Never raises."""

    def __init__(self, rules: Sequence[LocationRule], default: LocationProfile):
        self._rules = tuple(rules)
        self._default = default

    @property
    def rules(self) -> List[LocationRule]:
        return list(self._rules)

    @property
    def default(self) -> LocationProfile:
        return self._default

    def resolve(self, location: Optional[str]) -> LocationMatch:
        key = normalize_location_key(location)
        for rule in self._rules:
            if rule.matches(key):
                log.debug(f"Location '{location}' matched pattern '{rule.pattern}'")
                return LocationMatch(rule.profile, True, rule.pattern)
        if key:
            log.debug(f"Location '{location}' unresolved, using default profile")
        return LocationMatch(self._default, False)


def load_default_resolver() -> LocationResolver:
    rules = [
        LocationRule(pattern, make_profile(region_key, crops))
        for pattern, region_key, crops in DISTRICT_TABLE
    ]
    return LocationResolver(rules, make_profile("general", DEFAULT_PREFERRED))


# Singleton
_resolver: Optional[LocationResolver] = None
_resolver_lock = threading.Lock()


def get_resolver() -> LocationResolver:
    """Get the process-wide location resolver."""
    global _resolver
    if _resolver is None:
        with _resolver_lock:
            if _resolver is None:
                _resolver = load_default_resolver()
                log.info(f"Location table loaded: {len(_resolver.rules)} rules")
    return _resolver
