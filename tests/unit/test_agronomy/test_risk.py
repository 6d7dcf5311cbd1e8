import pytest

from agronomy.models import ActionType, Priority, Severity, SoilSample, WeatherSnapshot
from agronomy.risk import RiskDeriver


@pytest.fixture
def deriver():
    return RiskDeriver()


def factors(risks):
    return [r.factor for r in risks]


def test_scenario_b_soil_risks(deriver):
    risks = deriver.derive_risks(SoilSample(ph=4.0, nitrogen=30, phosphorus=2, potassium=20))
    assert factors(risks) == ["Suboptimal Soil pH", "Low Nitrogen Content"]
    assert risks[1].severity == Severity.HIGH
    assert risks[1].probability == 70


def test_healthy_inputs_no_risks(deriver):
    soil = SoilSample(ph=6.5, nitrogen=160, phosphorus=15, potassium=150)
    weather = WeatherSnapshot(temperature=25, humidity=60, moisture=50)
    assert deriver.derive_risks(soil, weather) == []


def test_missing_inputs_do_not_fire(deriver):
    assert deriver.derive_risks(SoilSample(), WeatherSnapshot()) == []
    assert deriver.derive_risks(None, None) == []


@pytest.mark.parametrize("weather,expected", [
    (WeatherSnapshot(temperature=36), ["High Temperature Stress"]),
    (WeatherSnapshot(temperature=35), []),
    (WeatherSnapshot(humidity=81), ["Disease Risk (High Humidity)"]),
    (WeatherSnapshot(moisture=29), ["Severe Soil Moisture Deficit"]),
    (WeatherSnapshot(moisture=85), ["Waterlogging Risk"]),
    (WeatherSnapshot(temperature=30, humidity=75, moisture=65), ["Pest Outbreak Risk"]),
    (WeatherSnapshot(temperature=30, humidity=75), []),
])
def test_weather_rules(deriver, weather, expected):
    assert factors(deriver.derive_risks(None, weather)) == expected


@pytest.mark.parametrize("ph,fires", [(5.9, True), (6.0, False), (8.0, False), (8.1, True)])
def test_ph_thresholds(deriver, ph, fires):
    risks = deriver.derive_risks(SoilSample(ph=ph))
    assert ("Suboptimal Soil pH" in factors(risks)) is fires


def test_rules_are_independent_and_ordered(deriver):
    """Every rule fires on its own; output follows table order."""
    soil = SoilSample(ph=9.0, nitrogen=50)
    weather = WeatherSnapshot(temperature=38, humidity=90, moisture=85)
    assert factors(deriver.derive_risks(soil, weather)) == [
        "High Temperature Stress",
        "Disease Risk (High Humidity)",
        "Suboptimal Soil pH",
        "Low Nitrogen Content",
        "Waterlogging Risk",
        "Pest Outbreak Risk",
    ]


def test_high_risks_become_critical_actions(deriver):
    soil = SoilSample(ph=4.0, nitrogen=30)
    weather = WeatherSnapshot(humidity=90, moisture=10)
    risks = deriver.derive_risks(soil, weather)
    actions = deriver.derive_actions(risks)

    high = [r for r in risks if r.severity == Severity.HIGH]
    assert len(actions) == len(high) == 3
    assert all(a.priority == Priority.CRITICAL for a in actions)
    assert all(a.timeline == "Immediate" for a in actions)
    assert [a.description for a in actions] == [r.mitigation for r in high]
    assert [a.type for a in actions] == [ActionType.PESTICIDE, ActionType.FERTILIZER, ActionType.IRRIGATION]


def test_crop_standing_actions(deriver):
    rice = deriver.derive_actions([], crop_id="rice")
    assert len(rice) == 1
    assert rice[0].type == ActionType.IRRIGATION
    assert rice[0].cost == 5000

    wheat = deriver.derive_actions([], crop_id="wheat")
    assert wheat[0].description == "Apply NPK 20:20:20 at 250 kg/ha"
    assert deriver.derive_actions([], crop_id="cotton") == []
