"""
Feature Normalizer

Validates a raw request and turns it into typed inputs for the scorers.
InvalidInputError raised here is the only error a caller of the engine
ever sees, and only for the four required soil fields. Bad optional
values (organic matter, weather readings, location) are dropped with a
warning.
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from agronomy.errors import InvalidInputError
from agronomy.locations import normalize_location_key
from agronomy.models import SoilAxis, SoilSample, WeatherSnapshot

log = logging.getLogger(__name__)

REQUIRED_FIELDS = [axis.value for axis in SoilAxis]

# wire name -> WeatherSnapshot attribute
WEATHER_FIELDS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "moisture": "moisture",
    "soilMoisture": "moisture",
    "windSpeed": "wind_speed",
    "wind_speed": "wind_speed",
}


@dataclass
class NormalizedRequest:
    """Validated request. location keeps display casing; location_key is for matching."""
    soil: SoilSample
    weather: Optional[WeatherSnapshot] = None
    location: Optional[str] = None
    location_key: str = ""
    locale: str = "en"


def coerce_number(field: str, value: Any, required: bool = True) -> Optional[float]:
    """
    Convert a request value to float.

    Accepts ints, floats and numeric strings. Booleans, NaN and infinities
    are rejected. Missing values raise only when required.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise InvalidInputError(field, f"'{field}' is required")
        return None

    if isinstance(value, bool):
        raise InvalidInputError(field, f"'{field}' must be numeric, got a boolean")

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InvalidInputError(field, f"'{field}' must be numeric, got {value!r}")
    else:
        raise InvalidInputError(field, f"'{field}' must be numeric, got {type(value).__name__}")

    if not math.isfinite(number):
        raise InvalidInputError(field, f"'{field}' must be a finite number")
    return number


def normalize_weather(raw: Union[WeatherSnapshot, Mapping, None]) -> Optional[WeatherSnapshot]:
    if raw is None:
        return None
    if isinstance(raw, WeatherSnapshot):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        log.warning(f"Ignoring weather: expected an object, got {type(raw).__name__}")
        return None

    values = {}
    for wire_name, attr in WEATHER_FIELDS.items():
        if wire_name in raw and values.get(attr) is None:
            values[attr] = _optional_number(f"weather.{wire_name}", raw[wire_name])
    return WeatherSnapshot(**values)


def as_soil_sample(soil: Union[SoilSample, Mapping[str, Any]]) -> SoilSample:
    """
    Unvalidated view of a soil mapping for the scoring-only path.

    Values are carried through as given; the scorer treats anything
    missing or non-numeric as out of range.
    """
    if isinstance(soil, SoilSample):
        return soil
    organic = soil.get("organicMatter")
    if organic is None:
        organic = soil.get("organic_matter")
    location = soil.get("location")
    return SoilSample(
        ph=soil.get("ph"),
        nitrogen=soil.get("nitrogen"),
        phosphorus=soil.get("phosphorus"),
        potassium=soil.get("potassium"),
        organic_matter=organic,
        location=(location.strip() or None) if isinstance(location, str) else None,
    )


def _optional_number(field: str, value: Any) -> Optional[float]:
    try:
        return coerce_number(field, value, required=False)
    except InvalidInputError as e:
        log.warning(f"Ignoring optional field: {e}")
        return None


def _clean_location(location: Any) -> Optional[str]:
    if location is None:
        return None
    if not isinstance(location, str):
        log.warning(f"Ignoring location: expected text, got {type(location).__name__}")
        return None
    trimmed = location.strip()
    return trimmed or None


def normalize_request(
    soil: Union[SoilSample, Mapping[str, Any]],
    weather: Union[WeatherSnapshot, Mapping, None] = None,
    location: Optional[str] = None,
    locale: str = "en",
) -> NormalizedRequest:
    """
    Validate a soil request.

    Args:
        soil: SoilSample, or mapping with ph/nitrogen/phosphorus/potassium and
            optional organicMatter, location and weather
        weather: Overrides any weather embedded in the soil mapping
        location: Overrides any location embedded in the soil mapping
        locale: Output locale carried through to the report

    Raises:
        InvalidInputError: On the first missing or non-numeric field
    """
    if isinstance(soil, SoilSample):
        raw = soil.to_dict()
    elif isinstance(soil, Mapping):
        raw = soil
    else:
        raise InvalidInputError("soil", "soil must be a SoilSample or a mapping")

    values = {field: coerce_number(field, raw.get(field)) for field in REQUIRED_FIELDS}

    organic_raw = raw.get("organicMatter")
    if organic_raw is None:
        organic_raw = raw.get("organic_matter")
    organic_matter = _optional_number("organicMatter", organic_raw)

    display_location = _clean_location(location if location is not None else raw.get("location"))
    snapshot = normalize_weather(weather if weather is not None else raw.get("weather"))

    sample = SoilSample(
        ph=values["ph"],
        nitrogen=values["nitrogen"],
        phosphorus=values["phosphorus"],
        potassium=values["potassium"],
        organic_matter=organic_matter,
        location=display_location,
    )
    log.debug(f"Normalized request: {sample.to_dict()}")
    return NormalizedRequest(
        soil=sample,
        weather=snapshot,
        location=display_location,
        location_key=normalize_location_key(display_location),
        locale=locale,
    )
