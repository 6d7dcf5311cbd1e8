"""
Advisory Gateway

Optional generative-text enrichment of a report. The gateway builds a
prompt describing the soil and location, asks a TextCompletionClient for
a JSON answer in the same shape as the deterministic path, and validates
it. Every failure mode (timeout, transport error, unparseable or invalid
content) ends in None; the deterministic report never depends on it.
"""

import re
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agronomy.errors import AdvisoryUnavailable
from agronomy.models import CropCategory, Level, LocationProfile
from agronomy.normalizer import NormalizedRequest

log = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)

LOCALE_LANGUAGES = {"en": "English", "mr": "Marathi"}

CATEGORY_VALUES = {c.value for c in CropCategory}
LEVEL_VALUES = {level.value for level in Level}


class TextCompletionClient:
    """
    Contract for a text completion backend.

    complete() returns the raw model text and may raise anything on
    failure; the gateway converts every exception into a fallback.
    """

    def complete(self, prompt: str, timeout: float) -> str:
        raise NotImplementedError


@dataclass
class AdvisoryCrop:
    name: str
    suitability: int
    season: str
    category: str
    market_potential: str
    investment_required: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "suitability": self.suitability,
            "season": self.season,
            "category": self.category,
            "marketPotential": self.market_potential,
            "investmentRequired": self.investment_required,
            "reason": self.reason,
        }


@dataclass
class StructuredAdvisory:
    """Validated advisory response."""
    crops: List[AdvisoryCrop] = field(default_factory=list)
    improvement_tips: List[str] = field(default_factory=list)
    fertilizer_recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cropRecommendations": [c.to_dict() for c in self.crops],
            "improvementTips": list(self.improvement_tips),
            "fertilizerRecommendations": list(self.fertilizer_recommendations),
        }


# ═══════════════════════════════════════════════════════════════════════════
# PARSING & VALIDATION
# ═══════════════════════════════════════════════════════════════════════════
def extract_json_block(text: str) -> Dict[str, Any]:
    """Pull the outermost {...} block out of free text and parse it."""
    if not isinstance(text, str):
        raise AdvisoryUnavailable("advisory response is not text")
    match = JSON_BLOCK.search(text)
    if not match:
        raise AdvisoryUnavailable("no JSON object in advisory response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AdvisoryUnavailable(f"advisory JSON did not parse: {e}") from e
    if not isinstance(data, dict):
        raise AdvisoryUnavailable("advisory JSON is not an object")
    return data


def _require_text(entry: Dict, key: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise AdvisoryUnavailable(f"cropRecommendations[{index}].{key} missing or not text")
    return value.strip()


def _text_list(data: Dict, key: str) -> List[str]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise AdvisoryUnavailable(f"{key} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def validate_advisory(data: Dict[str, Any]) -> StructuredAdvisory:
    """Check the parsed response against the expected schema."""
    entries = data.get("cropRecommendations")
    if not isinstance(entries, list):
        raise AdvisoryUnavailable("cropRecommendations missing or not a list")

    crops = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise AdvisoryUnavailable(f"cropRecommendations[{i}] is not an object")

        suitability = entry.get("suitability")
        if isinstance(suitability, bool) or not isinstance(suitability, int):
            raise AdvisoryUnavailable(f"cropRecommendations[{i}].suitability is not an integer")
        if not 0 <= suitability <= 100:
            raise AdvisoryUnavailable(f"cropRecommendations[{i}].suitability out of range: {suitability}")

        category = _require_text(entry, "category", i)
        if category not in CATEGORY_VALUES:
            raise AdvisoryUnavailable(f"cropRecommendations[{i}].category unknown: {category}")
        market = _require_text(entry, "marketPotential", i)
        investment = _require_text(entry, "investmentRequired", i)
        if market not in LEVEL_VALUES or investment not in LEVEL_VALUES:
            raise AdvisoryUnavailable(f"cropRecommendations[{i}] has an invalid level")

        crops.append(AdvisoryCrop(
            name=_require_text(entry, "name", i),
            suitability=suitability,
            season=_require_text(entry, "season", i),
            category=category,
            market_potential=market,
            investment_required=investment,
            reason=_require_text(entry, "reason", i),
        ))

    return StructuredAdvisory(
        crops=crops,
        improvement_tips=_text_list(data, "improvementTips"),
        fertilizer_recommendations=_text_list(data, "fertilizerRecommendations"),
    )


def parse_advisory(text: str) -> StructuredAdvisory:
    return validate_advisory(extract_json_block(text))


# ═══════════════════════════════════════════════════════════════════════════
# GATEWAY
# ═══════════════════════════════════════════════════════════════════════════
class AdvisoryGateway:
    """
    Usage:
        gateway = AdvisoryGateway(get_text_client(), timeout=8.0)
        advisory = gateway.enhance(normalized_request)   # None on any failure
    """

    def __init__(
        self,
        client: Optional[TextCompletionClient],
        timeout: float = 8.0,
        top_n: int = 10,
    ):
        self.client = client
        self.timeout = timeout
        self.top_n = top_n

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def build_prompt(
        self,
        request: NormalizedRequest,
        location_profile: Optional[LocationProfile] = None,
    ) -> str:
        soil = request.soil
        language = LOCALE_LANGUAGES.get(request.locale, "English")
        organic = f"{soil.organic_matter}%" if soil.organic_matter is not None else "Not provided"

        lines = [
            f"Based on the following soil data, recommend the top {self.top_n} most suitable crops "
            "for Indian agriculture, specifically Maharashtra and surrounding regions.",
            "",
            "Soil Parameters:",
            f"- pH: {soil.ph} (optimal range: 6.0-7.5)",
            f"- Nitrogen (N): {soil.nitrogen} kg/ha (optimal: 140-200)",
            f"- Phosphorus (P): {soil.phosphorus} kg/ha (optimal: 10-20)",
            f"- Potassium (K): {soil.potassium} kg/ha (optimal: 100-200)",
            f"- Organic Matter: {organic} (optimal: 2.0-5.0)",
            f"- Location: {request.location or 'Not provided'}",
        ]
        if location_profile is not None:
            lines += [
                "",
                "Location Analysis:",
                f"- Region: {location_profile.region}",
                f"- Climate: {location_profile.climate}",
                f"- Soil Type: {location_profile.soil_type}",
                f"- Market Advantages: {', '.join(location_profile.market_advantages)}",
                f"- Challenges: {', '.join(location_profile.challenges)}",
            ]
        lines += [
            "",
            f"Write every text value in {language}. Respond only with JSON in this format:",
            json.dumps({
                "cropRecommendations": [{
                    "name": "crop name",
                    "suitability": 85,
                    "season": "Kharif/Rabi/YearRound",
                    "category": "/".join(sorted(CATEGORY_VALUES)),
                    "marketPotential": "high/medium/low",
                    "investmentRequired": "high/medium/low",
                    "reason": "why this crop suits the soil and location",
                }],
                "improvementTips": ["soil improvement tip"],
                "fertilizerRecommendations": ["fertilizer advice"],
            }, ensure_ascii=False, indent=2),
        ]
        return "\n".join(lines)

    def request(
        self,
        request: NormalizedRequest,
        location_profile: Optional[LocationProfile] = None,
    ) -> StructuredAdvisory:
        """Call the client and validate. Raises AdvisoryUnavailable on any failure."""
        if self.client is None:
            raise AdvisoryUnavailable("no text completion client configured")
        prompt = self.build_prompt(request, location_profile)
        try:
            text = self.client.complete(prompt, timeout=self.timeout)
        except Exception as e:
            raise AdvisoryUnavailable(f"text completion failed: {e}") from e
        return parse_advisory(text)

    def enhance(
        self,
        request: NormalizedRequest,
        location_profile: Optional[LocationProfile] = None,
    ) -> Optional[StructuredAdvisory]:
        """Advisory for the request, or None when it cannot be obtained."""
        if self.client is None:
            return None
        try:
            advisory = self.request(request, location_profile)
        except AdvisoryUnavailable as e:
            log.warning(f"Advisory unavailable, using deterministic output: {e}")
            return None
        log.debug(f"Advisory returned {len(advisory.crops)} crops")
        return advisory
