import pytest

from services.history import (
    DEFAULT_HUMIDITY,
    DEFAULT_MOISTURE,
    DEFAULT_TEMPERATURE,
    aggregate_weather,
    summarize_series,
)


def test_increasing_series():
    points = [
        {"date": "2024-03-01", "value": 0.42},
        {"date": "2024-01-01", "value": 0.30},
        {"date": "2024-02-01", "value": 0.35},
        {"date": "2024-04-01", "value": 0.50},
    ]
    summary = summarize_series(points)
    assert summary.count == 4
    assert summary.latest == 0.5
    assert summary.mean == pytest.approx(0.3925)
    assert summary.trend == "increasing"
    assert summary.recent == [("2024-02-01", 0.35), ("2024-03-01", 0.42), ("2024-04-01", 0.5)]


def test_decreasing_and_stable():
    down = [{"date": f"2024-01-0{i}", "value": 0.8 - i * 0.1} for i in range(1, 5)]
    assert summarize_series(down).trend == "decreasing"
    flat = [{"date": f"2024-01-0{i}", "value": 0.6} for i in range(1, 5)]
    assert summarize_series(flat).trend == "stable"


def test_bad_points_dropped():
    points = [
        {"date": "2024-01-01", "value": "0.5"},
        {"date": "not a date", "value": 0.9},
        {"date": "2024-01-02", "value": "n/a"},
        {"date": "2024-01-03"},
    ]
    summary = summarize_series(points)
    assert summary.count == 1
    assert summary.trend == "insufficient data"


def test_empty_series():
    summary = summarize_series([], metric="evi")
    assert summary.metric == "evi"
    assert summary.count == 0
    assert summary.mean is None
    assert summary.to_dict()["recent"] == []


def test_aggregate_weather():
    snapshot = aggregate_weather([
        {"temperature": 30, "humidity": 60, "soilMoisture": 40},
        {"temperature": 32, "humidity": 70, "moisture": 50, "windSpeed": 10},
    ])
    assert snapshot.temperature == 31.0
    assert snapshot.humidity == 65.0
    assert snapshot.moisture == 45.0
    assert snapshot.wind_speed == 10.0


def test_aggregate_weather_defaults():
    snapshot = aggregate_weather([])
    assert snapshot.temperature == DEFAULT_TEMPERATURE
    assert snapshot.humidity == DEFAULT_HUMIDITY
    assert snapshot.moisture == DEFAULT_MOISTURE
    assert snapshot.wind_speed is None


def test_aggregate_weather_partial():
    snapshot = aggregate_weather([{"temperature": "28.5"}, {"temperature": None}])
    assert snapshot.temperature == 28.5
    assert snapshot.humidity == DEFAULT_HUMIDITY


def test_non_mapping_points_skipped(caplog):
    points = [0.4, "0.5", None, {"date": "2024-01-01", "value": 0.3}, {"date": "2024-01-02", "value": 0.6}]
    summary = summarize_series(points)
    assert summary.count == 2
    assert summary.latest == 0.6
    assert "not {date, value} objects" in caplog.text


def test_generator_input():
    summary = summarize_series({"date": f"2024-03-0{i}", "value": i / 10} for i in range(1, 4))
    assert summary.count == 3
    assert summary.trend == "increasing"
