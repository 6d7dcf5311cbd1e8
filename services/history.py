"""
History Summaries

Turns externally supplied readings into the small summaries the report
carries: an NDVI-style time series summary, and averaged sensor
readings as a WeatherSnapshot. Storage and fetching of the readings is
the caller's business.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from agronomy.models import HistorySummary, WeatherSnapshot

log = logging.getLogger(__name__)

# Fitted change over the whole series below this counts as stable (NDVI units)
TREND_TOLERANCE = 0.02
RECENT_POINTS = 3

# Used when no sensor readings are available
DEFAULT_TEMPERATURE = 25.0
DEFAULT_HUMIDITY = 65.0
DEFAULT_MOISTURE = 45.0

READING_COLUMNS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "moisture": "moisture",
    "soilMoisture": "moisture",
    "windSpeed": "wind_speed",
    "wind_speed": "wind_speed",
}


def summarize_series(
    points: Iterable[Mapping[str, Any]],
    metric: str = "ndvi",
    tolerance: float = TREND_TOLERANCE,
) -> HistorySummary:
    """
    Summarize {date, value} points.

    Entries that are not mappings, and points with an unparseable date or
    value, are dropped. The trend is the sign of a least-squares line
    fitted over the series.
    """
    points = list(points)
    rows = [p for p in points if isinstance(p, Mapping)]
    skipped = len(points) - len(rows)
    if skipped:
        log.warning(f"Ignoring {skipped} {metric} points that are not {{date, value}} objects")

    df = pd.DataFrame(rows, columns=["date", "value"])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df = df.dropna().sort_values("date", kind="mergesort").reset_index(drop=True)

    if df.empty:
        return HistorySummary(metric=metric, count=0, mean=None, latest=None, trend="insufficient data")

    values = df["value"].to_numpy(dtype=float)
    trend = "insufficient data"
    if len(values) >= 2:
        slope = np.polyfit(np.arange(len(values)), values, 1)[0]
        change = slope * (len(values) - 1)
        if change > tolerance:
            trend = "increasing"
        elif change < -tolerance:
            trend = "decreasing"
        else:
            trend = "stable"

    recent = [
        (row.date.strftime("%Y-%m-%d"), round(float(row.value), 4))
        for row in df.tail(RECENT_POINTS).itertuples()
    ]
    return HistorySummary(
        metric=metric,
        count=len(values),
        mean=round(float(values.mean()), 4),
        latest=round(float(values[-1]), 4),
        trend=trend,
        recent=recent,
    )


def aggregate_weather(readings: Iterable[Mapping[str, Any]]) -> WeatherSnapshot:
    """
    Average sensor readings into a WeatherSnapshot.

    Temperature, humidity and moisture fall back to 25 °C, 65 % and 45 %
    when no usable reading exists; wind speed stays None.
    """
    rows = []
    for reading in readings:
        row: Dict[str, Any] = {}
        for key, column in READING_COLUMNS.items():
            if key in reading and row.get(column) is None:
                row[column] = reading[key]
        rows.append(row)

    df = pd.DataFrame(rows, columns=["temperature", "humidity", "moisture", "wind_speed"])
    means = {column: pd.to_numeric(df[column], errors="coerce").mean() for column in df.columns}

    def _mean(column: str, default: Optional[float]) -> Optional[float]:
        value = means.get(column)
        if value is None or pd.isna(value):
            return default
        return round(float(value), 2)

    snapshot = WeatherSnapshot(
        temperature=_mean("temperature", DEFAULT_TEMPERATURE),
        humidity=_mean("humidity", DEFAULT_HUMIDITY),
        moisture=_mean("moisture", DEFAULT_MOISTURE),
        wind_speed=_mean("wind_speed", None),
    )
    log.debug(f"Aggregated {len(rows)} readings: {snapshot.to_dict()}")
    return snapshot
