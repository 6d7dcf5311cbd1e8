"""
Crop suitability report from the command line.

    python main.py soil.json --location "Nashik" --weather weather.json
    python main.py soil.json --json
"""

import sys
import json
import logging
import argparse

from agronomy.engine import get_engine
from agronomy.errors import InvalidInputError
from agronomy.models import Report
from services.history import summarize_series


def load_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def print_report(report: Report):
    analysis = report.soil_analysis
    print("\n=== SOIL ANALYSIS ===")
    for axis, result in analysis.axes.items():
        print(f" {axis.label:<11} {result.value!s:>8}  {result.status:<9} {result.recommendation}")
    if analysis.organic_matter:
        om = analysis.organic_matter
        print(f" {'Organic %':<11} {om.value!s:>8}  {om.status:<9} {om.recommendation}")
    print(f" Overall: {analysis.overall_score}/100 ({analysis.overall_health})")

    print("\n=== CROP RECOMMENDATIONS ===")
    for ranked in report.crop_recommendations:
        crop = ranked.crop
        print(f" {ranked.rank:>2}. {crop.name:<24} {crop.suitability_score:>3}  "
              f"{crop.season.value:<9} {crop.category.value}")
        if ranked.advisory_reason:
            print(f"     {ranked.advisory_reason}")

    if report.risk_factors:
        print("\n=== RISK FACTORS ===")
        for risk in report.risk_factors:
            print(f" [{risk.severity.value}] {risk.factor} ({risk.probability}%): {risk.mitigation}")

    if report.action_recommendations:
        print("\n=== ACTIONS ===")
        for action in report.action_recommendations:
            print(f" [{action.priority.value}] {action.type.value}: {action.description} "
                  f"({action.timeline}, cost {action.cost:g})")

    if report.location_analysis:
        loc = report.location_analysis
        print("\n=== LOCATION ===")
        print(f" {loc.region}: {loc.climate}; {loc.soil_type}")
        for rec in loc.recommendations:
            print(f"  • {rec}")

    if report.history:
        h = report.history
        print(f"\n=== {h.metric.upper()} HISTORY ===")
        print(f" {h.count} points, mean {h.mean}, latest {h.latest}, trend {h.trend}")

    if report.advisory_notes:
        print("\n=== ADVISORY NOTES ===")
        for note in report.advisory_notes:
            print(f"  • {note}")


def main(argv=None) -> int:
    """CLI interface for the report engine."""
    parser = argparse.ArgumentParser(description="Crop suitability report for a soil sample")
    parser.add_argument("soil", help="JSON file with ph, nitrogen, phosphorus, potassium")
    parser.add_argument("--location", help="Free-text location, e.g. 'Nashik'")
    parser.add_argument("--weather", help="JSON file with temperature, humidity, moisture")
    parser.add_argument("--ndvi", help="JSON file with a list of {date, value} points")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        soil = load_json(args.soil)
        weather = load_json(args.weather) if args.weather else None
        history = summarize_series(load_json(args.ndvi)) if args.ndvi else None
    except (OSError, ValueError, TypeError) as e:
        print(f"Could not read input: {e}", file=sys.stderr)
        return 2

    try:
        report = get_engine().compute_report(soil, weather, args.location, history)
    except InvalidInputError as e:
        print(f"Invalid input ({e.field}): {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
