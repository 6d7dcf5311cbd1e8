import pytest

from agronomy.models import BandTier, SoilAxis, SoilSample
from agronomy.soil_analysis import analyze_organic_matter, analyze_soil, health_label


def test_ideal_soil():
    analysis = analyze_soil(SoilSample(ph=6.5, nitrogen=160, phosphorus=15, potassium=150, organic_matter=2.5))
    assert analysis.overall_score == 100
    assert analysis.overall_health == "Excellent"
    assert all(a.status == "Excellent" for a in analysis.axes.values())
    assert analysis.organic_matter.status == "Excellent"


def test_poor_soil():
    analysis = analyze_soil(SoilSample(ph=4.0, nitrogen=30, phosphorus=2, potassium=20))
    assert analysis.overall_score == 20
    assert analysis.overall_health == "Needs Improvement"
    assert analysis.organic_matter is None
    assert analysis.axes[SoilAxis.NITROGEN].recommendation == "Nitrogen is low. Apply urea. Correct before planting"


@pytest.mark.parametrize("ph,advice", [
    (5.7, "Soil is acidic. Apply agricultural lime to raise pH"),
    (7.8, "Soil is alkaline. Apply gypsum to lower pH"),
])
def test_ph_direction(ph, advice):
    axis = analyze_soil(SoilSample(ph=ph, nitrogen=160, phosphorus=15, potassium=150)).axes[SoilAxis.PH]
    assert axis.tier == BandTier.ACCEPTABLE
    assert axis.status == "Moderate"
    assert axis.recommendation == advice


def test_organic_matter_bonus():
    base = SoilSample(ph=6.5, nitrogen=120, phosphorus=15, potassium=150)
    assert analyze_soil(base).overall_score == 90
    base.organic_matter = 1.5
    assert analyze_soil(base).overall_score == 95


def test_good_band():
    analysis = analyze_soil(SoilSample(ph=6.5, nitrogen=120, phosphorus=8, potassium=20, organic_matter=0.5))
    assert analysis.overall_score == 60
    assert analysis.overall_health == "Good"
    assert analysis.organic_matter.status == "Poor"


@pytest.mark.parametrize("value,status", [
    (2.0, "Excellent"), (5.0, "Excellent"), (1.0, "Moderate"), (1.99, "Moderate"),
    (0.9, "Poor"), (6.0, "Poor"),
])
def test_organic_matter_status(value, status):
    assert analyze_organic_matter(value).status == status


def test_health_label():
    assert health_label(80) == "Excellent"
    assert health_label(79) == "Good"
    assert health_label(59) == "Needs Improvement"


def test_missing_axis_reported():
    axis = analyze_soil(SoilSample(ph=6.5, phosphorus=15, potassium=150)).axes[SoilAxis.NITROGEN]
    assert axis.status == "Poor"
    assert "not measured" in axis.recommendation


def test_to_dict_shape():
    data = analyze_soil(SoilSample(ph=6.5, nitrogen=160, phosphorus=15, potassium=150)).to_dict()
    assert set(data) == {"ph", "nitrogen", "phosphorus", "potassium", "organicMatter", "overallScore", "overallHealth"}
    assert data["ph"]["status"] == "Excellent"
