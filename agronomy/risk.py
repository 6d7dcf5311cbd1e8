"""
Risk & Action Deriver

Independent threshold rules over raw soil and weather values. Each rule
fires on its own; the output is the union of fired rules in table order.
A rule whose inputs are missing does not fire.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from agronomy.models import (
    ActionRecommendation,
    ActionType,
    Priority,
    RiskFactor,
    Severity,
    SoilSample,
    WeatherSnapshot,
)

log = logging.getLogger(__name__)

HIGH_TEMPERATURE_C = 35.0
HIGH_HUMIDITY_PCT = 80.0
PH_LOW = 6.0
PH_HIGH = 8.0
LOW_NITROGEN_KG_HA = 100.0
LOW_MOISTURE_PCT = 30.0
HIGH_MOISTURE_PCT = 80.0
PEST_TEMPERATURE_C = 28.0
PEST_HUMIDITY_PCT = 70.0
PEST_MOISTURE_PCT = 60.0

CRITICAL_ACTION_COST = 3000
CRITICAL_ACTION_TIMELINE = "Immediate"


@dataclass(frozen=True)
class RiskInputs:
    """Flat view of the readings the rules look at. None means not measured."""
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    moisture: Optional[float] = None
    ph: Optional[float] = None
    nitrogen: Optional[float] = None

    @classmethod
    def from_request(
        cls,
        soil: Optional[SoilSample] = None,
        weather: Optional[WeatherSnapshot] = None,
    ) -> "RiskInputs":
        return cls(
            temperature=weather.temperature if weather else None,
            humidity=weather.humidity if weather else None,
            moisture=weather.moisture if weather else None,
            ph=soil.ph if soil else None,
            nitrogen=soil.nitrogen if soil else None,
        )


@dataclass(frozen=True)
class RiskRule:
    """
    One independent risk check.

    requires lists the RiskInputs fields the predicate reads; the rule is
    skipped unless all of them are present.
    """
    name: str
    requires: Sequence[str]
    predicate: Callable[[RiskInputs], bool]
    severity: Severity
    probability: int
    mitigation: str
    action_type: ActionType

    def evaluate(self, inputs: RiskInputs) -> Optional[RiskFactor]:
        if any(getattr(inputs, field) is None for field in self.requires):
            return None
        if not self.predicate(inputs):
            return None
        return RiskFactor(
            factor=self.name,
            severity=self.severity,
            probability=self.probability,
            mitigation=self.mitigation,
        )


DEFAULT_RULES: List[RiskRule] = [
    RiskRule(
        name="High Temperature Stress",
        requires=("temperature",),
        predicate=lambda r: r.temperature > HIGH_TEMPERATURE_C,
        severity=Severity.MEDIUM,
        probability=60,
        mitigation="Implement shade structures and increase irrigation frequency",
        action_type=ActionType.IRRIGATION,
    ),
    RiskRule(
        name="Disease Risk (High Humidity)",
        requires=("humidity",),
        predicate=lambda r: r.humidity > HIGH_HUMIDITY_PCT,
        severity=Severity.HIGH,
        probability=75,
        mitigation="Apply preventive fungicides and improve field ventilation",
        action_type=ActionType.PESTICIDE,
    ),
    RiskRule(
        name="Suboptimal Soil pH",
        requires=("ph",),
        predicate=lambda r: r.ph < PH_LOW or r.ph > PH_HIGH,
        severity=Severity.MEDIUM,
        probability=50,
        mitigation="Apply soil amendments to adjust pH levels",
        action_type=ActionType.FERTILIZER,
    ),
    RiskRule(
        name="Low Nitrogen Content",
        requires=("nitrogen",),
        predicate=lambda r: r.nitrogen < LOW_NITROGEN_KG_HA,
        severity=Severity.HIGH,
        probability=70,
        mitigation="Apply nitrogen-rich fertilizers before planting",
        action_type=ActionType.FERTILIZER,
    ),
    RiskRule(
        name="Severe Soil Moisture Deficit",
        requires=("moisture",),
        predicate=lambda r: r.moisture < LOW_MOISTURE_PCT,
        severity=Severity.HIGH,
        probability=80,
        mitigation="Start irrigation immediately and mulch to retain soil moisture",
        action_type=ActionType.IRRIGATION,
    ),
    RiskRule(
        name="Waterlogging Risk",
        requires=("moisture",),
        predicate=lambda r: r.moisture > HIGH_MOISTURE_PCT,
        severity=Severity.MEDIUM,
        probability=55,
        mitigation="Pause irrigation and clear field drainage channels",
        action_type=ActionType.IRRIGATION,
    ),
    RiskRule(
        name="Pest Outbreak Risk",
        requires=("temperature", "humidity", "moisture"),
        predicate=lambda r: (
            r.temperature > PEST_TEMPERATURE_C
            and r.humidity > PEST_HUMIDITY_PCT
            and r.moisture > PEST_MOISTURE_PCT
        ),
        severity=Severity.MEDIUM,
        probability=65,
        mitigation="Scout fields for pests and set up pheromone traps",
        action_type=ActionType.PESTICIDE,
    ),
]

# Standing actions for crops on the weather/season path
CROP_ACTIONS: Dict[str, List[ActionRecommendation]] = {
    "rice": [
        ActionRecommendation(
            type=ActionType.IRRIGATION,
            description="Maintain 5-7 cm water level during vegetative stage",
            priority=Priority.HIGH,
            timeline="Within 1 week",
            cost=5000,
        ),
    ],
    "wheat": [
        ActionRecommendation(
            type=ActionType.FERTILIZER,
            description="Apply NPK 20:20:20 at 250 kg/ha",
            priority=Priority.HIGH,
            timeline="Before planting",
            cost=8000,
        ),
    ],
}


class RiskDeriver:
    """Applies the rule table and turns high-severity risks into actions."""

    def __init__(self, rules: Optional[Sequence[RiskRule]] = None):
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self._rule_index = {rule.name: rule for rule in self.rules}

    def derive_risks(
        self,
        soil: Optional[SoilSample] = None,
        weather: Optional[WeatherSnapshot] = None,
    ) -> List[RiskFactor]:
        inputs = RiskInputs.from_request(soil, weather)
        risks = []
        for rule in self.rules:
            risk = rule.evaluate(inputs)
            if risk is not None:
                risks.append(risk)
        log.debug(f"Risk rules fired: {[r.factor for r in risks]}")
        return risks

    def derive_actions(
        self,
        risks: Sequence[RiskFactor],
        crop_id: Optional[str] = None,
    ) -> List[ActionRecommendation]:
        """Crop standing actions first, then one critical action per high-severity risk."""
        actions = [
            ActionRecommendation(a.type, a.description, a.priority, a.timeline, a.cost)
            for a in CROP_ACTIONS.get(crop_id, [])
        ] if crop_id else []

        for risk in risks:
            if risk.severity != Severity.HIGH:
                continue
            rule = self._rule_index.get(risk.factor)
            actions.append(ActionRecommendation(
                type=rule.action_type if rule else ActionType.PESTICIDE,
                description=risk.mitigation,
                priority=Priority.CRITICAL,
                timeline=CRITICAL_ACTION_TIMELINE,
                cost=CRITICAL_ACTION_COST,
            ))
        return actions
