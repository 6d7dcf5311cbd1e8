import json

import pytest

import main
from agronomy import engine as engine_module


@pytest.fixture(autouse=True)
def offline_engine(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(engine_module, "_engine", None)
    yield
    monkeypatch.setattr(engine_module, "_engine", None)


def write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_json_output(tmp_path, capsys):
    soil = write(tmp_path, "soil.json", {"ph": 6.5, "nitrogen": 160, "phosphorus": 15, "potassium": 150})
    weather = write(tmp_path, "weather.json", {"temperature": 38, "humidity": 50, "moisture": 40})

    assert main.main([soil, "--weather", weather, "--location", "Nashik", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["cropRecommendations"][0]["rank"] == 1
    assert data["locationAnalysis"]["region"] == "Western Maharashtra"
    assert data["riskFactors"][0]["factor"] == "High Temperature Stress"
    assert data["enhanced"] is False


def test_text_output_with_ndvi(tmp_path, capsys):
    soil = write(tmp_path, "soil.json", {"ph": 6.5, "nitrogen": 90, "phosphorus": 15, "potassium": 150})
    ndvi = write(tmp_path, "ndvi.json", [
        {"date": "2024-01-01", "value": 0.3},
        {"date": "2024-02-01", "value": 0.5},
    ])

    assert main.main([soil, "--ndvi", ndvi]) == 0

    out = capsys.readouterr().out
    assert "=== CROP RECOMMENDATIONS ===" in out
    assert "Low Nitrogen Content" in out
    assert "NDVI HISTORY" in out


def test_invalid_soil(tmp_path, capsys):
    soil = write(tmp_path, "soil.json", {"ph": 6.5})
    assert main.main([soil]) == 1
    assert "nitrogen" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main.main([str(tmp_path / "nope.json")]) == 2


def test_ndvi_without_objects_is_ignored(tmp_path, capsys):
    soil = write(tmp_path, "soil.json", {"ph": 6.5, "nitrogen": 160, "phosphorus": 15, "potassium": 150})
    ndvi = write(tmp_path, "ndvi.json", [0.3, 0.5, "0.6"])

    assert main.main([soil, "--ndvi", ndvi, "--json"]) == 0

    history = json.loads(capsys.readouterr().out)["history"]
    assert history["count"] == 0
    assert history["trend"] == "insufficient data"


def test_ndvi_not_a_list(tmp_path, capsys):
    soil = write(tmp_path, "soil.json", {"ph": 6.5, "nitrogen": 160, "phosphorus": 15, "potassium": 150})
    ndvi = write(tmp_path, "ndvi.json", 0.5)

    assert main.main([soil, "--ndvi", ndvi]) == 2
    assert "Could not read input" in capsys.readouterr().err
