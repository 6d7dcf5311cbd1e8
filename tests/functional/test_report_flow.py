"""
End-to-end report generation with a stubbed text completion backend.
"""

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from agronomy.advisory import AdvisoryGateway, TextCompletionClient
from agronomy.engine import AgronomyEngine
from agronomy.settings import EngineSettings

SOIL = {"ph": 6.5, "nitrogen": 160, "phosphorus": 15, "potassium": 150, "organicMatter": 2.5}


class CannedClient(TextCompletionClient):
    def __init__(self, text):
        self.text = text
        self.prompts = []

    def complete(self, prompt, timeout):
        self.prompts.append(prompt)
        return self.text


class FailingClient(TextCompletionClient):
    def complete(self, prompt, timeout):
        raise ConnectionError("network unreachable")


class BlockingClient(TextCompletionClient):
    """Never answers until released."""

    def __init__(self):
        self.release = threading.Event()

    def complete(self, prompt, timeout):
        self.release.wait(10)
        return "{}"


def make_engine(client, timeout=2.0):
    settings = EngineSettings(advisory_timeout=timeout, api_key="test")
    return AgronomyEngine(settings, gateway=AdvisoryGateway(client, timeout))


def assert_consistent(report):
    crops = report.crop_recommendations
    assert crops
    assert [c.rank for c in crops] == list(range(1, len(crops) + 1))
    scores = [c.crop.suitability_score for c in crops]
    assert scores == sorted(scores, reverse=True)


def test_enhanced_report():
    answer = {
        "cropRecommendations": [{
            "name": "Rice", "suitability": 70, "season": "Kharif", "category": "cereal",
            "marketPotential": "medium", "investmentRequired": "low", "reason": "Good water access",
        }],
        "improvementTips": ["Keep adding compost"],
    }
    client = CannedClient("```json\n" + json.dumps(answer) + "\n```")
    engine = make_engine(client)
    try:
        report = engine.compute_report(SOIL, location="Pune")
    finally:
        engine.shutdown()

    assert report.enhanced
    assert_consistent(report)
    rice = report.crop_recommendations[0]
    assert rice.crop.crop_id == "rice"
    assert rice.crop.suitability_score == 100   # deterministic score kept
    assert rice.advisory_reason == "Good water access"
    assert report.advisory_notes == ["Keep adding compost"]
    assert "Western Maharashtra" in client.prompts[0]


def test_fallback_when_gateway_raises():
    engine = make_engine(FailingClient())
    try:
        report = engine.compute_report(SOIL)
    finally:
        engine.shutdown()
    assert not report.enhanced
    assert_consistent(report)


def test_fallback_when_gateway_malformed():
    engine = make_engine(CannedClient("I think you should plant rice."))
    try:
        report = engine.compute_report(SOIL)
    finally:
        engine.shutdown()
    assert not report.enhanced
    assert_consistent(report)


def test_fallback_on_timeout_does_not_block():
    client = BlockingClient()
    engine = make_engine(client, timeout=0.2)
    try:
        started = time.monotonic()
        report = engine.compute_report(SOIL)
        elapsed = time.monotonic() - started
    finally:
        client.release.set()
        engine.shutdown()

    assert elapsed < 5
    assert not report.enhanced
    assert_consistent(report)


def test_concurrent_reports_are_independent():
    engine = AgronomyEngine(EngineSettings())
    requests = [
        (dict(SOIL, ph=4.0 + i * 0.5), ["Nashik", "Nagpur", None, "Ratnagiri"][i % 4])
        for i in range(12)
    ]
    expected = [engine.compute_report(soil, location=loc).to_dict() for soil, loc in requests]

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(lambda r: engine.compute_report(r[0], location=r[1]).to_dict(), requests))

    assert results == expected
