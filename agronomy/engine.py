"""
Agronomy Engine

Facade wiring the pipeline together:

    input -> normalize -> score -> rank -> risks/actions -> report
                 \\-> advisory (background, bounded by a timeout) --/

The deterministic path always runs to completion. The advisory call is
submitted first, runs on a worker thread, and is waited on only after
the deterministic report pieces exist; if it is late or fails, the
report is returned without enhancement.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, List, Mapping, Optional, Union

from agronomy.advisory import AdvisoryGateway, StructuredAdvisory
from agronomy.catalog import CropCatalog, get_catalog
from agronomy.confidence import ConfidenceRecommendation, ConfidenceScorer
from agronomy.locations import LocationResolver, get_resolver
from agronomy.models import (
    HistorySummary,
    Report,
    ScoredCrop,
    SoilSample,
    WeatherSnapshot,
)
from agronomy.normalizer import as_soil_sample, normalize_request, normalize_weather
from agronomy.ranking import rank_crops
from agronomy.report import assemble_report
from agronomy.risk import RiskDeriver
from agronomy.settings import EngineSettings
from agronomy.soil_analysis import analyze_soil
from agronomy.suitability import SuitabilityScorer

log = logging.getLogger(__name__)

ADVISORY_WORKERS = 4


class AgronomyEngine:
    """
    Usage:
        engine = AgronomyEngine(EngineSettings.from_env())
        report = engine.compute_report({"ph": 6.5, "nitrogen": 160, ...}, location="Nashik")
        print(report.to_dict())
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        catalog: Optional[CropCatalog] = None,
        resolver: Optional[LocationResolver] = None,
        gateway: Optional[AdvisoryGateway] = None,
        deriver: Optional[RiskDeriver] = None,
    ):
        self.settings = settings or EngineSettings()
        self.catalog = catalog or get_catalog()
        self.resolver = resolver or get_resolver()
        self.gateway = gateway or AdvisoryGateway(None)
        self.deriver = deriver or RiskDeriver()
        self.scorer = SuitabilityScorer(self.catalog, self.resolver, self.settings.locale)
        self.confidence_scorer = ConfidenceScorer(self.catalog, self.deriver, self.settings.locale)

        # Shared so a slow advisory never blocks on executor shutdown
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    # ─────────────────────────────────────────────────────────────────────
    # Deterministic scoring
    # ─────────────────────────────────────────────────────────────────────
    def score_crops(
        self,
        soil: Union[SoilSample, Mapping[str, Any]],
        location: Optional[str] = None,
    ) -> List[ScoredCrop]:
        """
        Top-N crops for a sample, deterministic only.

        No validation: missing or non-numeric axes get the floor score.
        """
        scored = self.scorer.score_all(as_soil_sample(soil), location)
        return [r.crop for r in rank_crops(scored, self.settings.top_n)]

    def recommend_by_conditions(
        self,
        weather: Union[WeatherSnapshot, Mapping[str, Any]],
        month: Optional[int] = None,
        soil: Optional[SoilSample] = None,
    ) -> List[ConfidenceRecommendation]:
        """Weather/season recommendations for rice, wheat and cotton."""
        snapshot = normalize_weather(weather) or WeatherSnapshot()
        return self.confidence_scorer.recommend(snapshot, month=month, soil=soil)

    # ─────────────────────────────────────────────────────────────────────
    # Full report
    # ─────────────────────────────────────────────────────────────────────
    def compute_report(
        self,
        soil: Union[SoilSample, Mapping[str, Any]],
        weather: Union[WeatherSnapshot, Mapping[str, Any], None] = None,
        location: Optional[str] = None,
        history: Optional[HistorySummary] = None,
    ) -> Report:
        """
        Full report for one request.

        Raises:
            InvalidInputError: A required soil field is missing or not numeric
        """
        request = normalize_request(soil, weather, location, self.settings.locale)
        match = self.resolver.resolve(request.location)
        location_profile = match.profile if request.location else None

        future = None
        if self.gateway.enabled:
            future = self._get_executor().submit(self.gateway.enhance, request, location_profile)

        ranked = rank_crops(self.scorer.score_all(request.soil, match=match), self.settings.top_n)
        analysis = analyze_soil(request.soil)
        risks = self.deriver.derive_risks(request.soil, request.weather)
        actions = self.deriver.derive_actions(risks)

        advisory = self._await_advisory(future)

        report = assemble_report(
            analysis,
            ranked,
            risks,
            actions,
            location_profile=location_profile,
            history=history,
            advisory=advisory,
            catalog=self.catalog,
        )
        log.info(
            f"Report ready: {len(report.crop_recommendations)} crops, "
            f"{len(report.risk_factors)} risks, enhanced={report.enhanced}"
        )
        return report

    def _await_advisory(self, future: Optional[Future]) -> Optional[StructuredAdvisory]:
        if future is None:
            return None
        try:
            return future.result(timeout=self.settings.advisory_timeout)
        except FutureTimeout:
            future.cancel()
            log.warning(f"Advisory timed out after {self.settings.advisory_timeout}s, using deterministic output")
            return None
        except Exception as e:
            log.error(f"Advisory task failed: {e}")
            return None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            with self._executor_lock:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=ADVISORY_WORKERS,
                        thread_name_prefix="advisory",
                    )
        return self._executor

    def shutdown(self) -> None:
        """Release the advisory worker threads without waiting on them."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None


# Singleton
_engine: Optional[AgronomyEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> AgronomyEngine:
    """Get the process-wide engine configured from the environment."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                from services.text_completion import get_text_client

                settings = EngineSettings.from_env()
                client = get_text_client(settings)
                gateway = AdvisoryGateway(client, settings.advisory_timeout, settings.top_n)
                _engine = AgronomyEngine(settings, gateway=gateway)
                log.info(f"Engine ready (advisory {'on' if gateway.enabled else 'off'})")
    return _engine


def score_crops(
    soil: Union[SoilSample, Mapping[str, Any]],
    location: Optional[str] = None,
) -> List[ScoredCrop]:
    return get_engine().score_crops(soil, location)


def compute_report(
    soil: Union[SoilSample, Mapping[str, Any]],
    weather: Union[WeatherSnapshot, Mapping[str, Any], None] = None,
    location: Optional[str] = None,
    history: Optional[HistorySummary] = None,
) -> Report:
    return get_engine().compute_report(soil, weather, location, history)


def recommend_by_conditions(
    weather: Union[WeatherSnapshot, Mapping[str, Any]],
    month: Optional[int] = None,
    soil: Optional[SoilSample] = None,
) -> List[ConfidenceRecommendation]:
    return get_engine().recommend_by_conditions(weather, month, soil)
