"""
Report Assembler

Pure merge of the per-request pieces into one Report. Scores and ranks
always come from the deterministic scorer; an advisory can only attach
reasons to crops already in the ranked list and add free-text notes.
"""

import logging
from typing import Dict, List, Optional, Sequence

from agronomy.advisory import StructuredAdvisory
from agronomy.catalog import CropCatalog, get_catalog
from agronomy.models import (
    ActionRecommendation,
    HistorySummary,
    LocationProfile,
    RankedCrop,
    Report,
    RiskFactor,
    SoilAnalysis,
)

log = logging.getLogger(__name__)


def _advisory_reasons(
    advisory: StructuredAdvisory,
    ranked: Sequence[RankedCrop],
    catalog: CropCatalog,
) -> Dict[str, str]:
    """crop_id -> advisory reason, for advisory crops that are in the ranked list."""
    ranked_ids = {r.crop.crop_id for r in ranked}
    display_names = {r.crop.name.casefold(): r.crop.crop_id for r in ranked}

    reasons = {}
    for crop in advisory.crops:
        profile = catalog.find_by_name(crop.name)
        crop_id = profile.id if profile else display_names.get(crop.name.strip().casefold())
        if crop_id is None or crop_id not in ranked_ids:
            log.debug(f"Advisory crop '{crop.name}' not in ranked list, skipped")
            continue
        reasons.setdefault(crop_id, crop.reason)
    return reasons


def assemble_report(
    soil_analysis: SoilAnalysis,
    ranked: Sequence[RankedCrop],
    risks: Sequence[RiskFactor],
    actions: Sequence[ActionRecommendation],
    location_profile: Optional[LocationProfile] = None,
    history: Optional[HistorySummary] = None,
    advisory: Optional[StructuredAdvisory] = None,
    catalog: Optional[CropCatalog] = None,
) -> Report:
    """
    Build a Report. Inputs are not modified; identical inputs give equal reports.

    Args:
        soil_analysis: Per-axis soil summary
        ranked: Ranked crops from rank_crops()
        risks: Risk factors, in rule order
        actions: Action recommendations
        location_profile: Narrative for a resolved location
        history: Optional external time-series summary
        advisory: Validated advisory, or None for a deterministic-only report
    """
    notes: List[str] = []
    reasons: Dict[str, str] = {}
    if advisory is not None:
        reasons = _advisory_reasons(advisory, ranked, catalog or get_catalog())
        notes.extend(advisory.improvement_tips)
        notes.extend(advisory.fertilizer_recommendations)

    crops = [
        RankedCrop(
            rank=r.rank,
            crop=r.crop,
            advisory_reason=reasons.get(r.crop.crop_id, r.advisory_reason),
        )
        for r in ranked
    ]

    return Report(
        soil_analysis=soil_analysis,
        crop_recommendations=crops,
        risk_factors=list(risks),
        action_recommendations=list(actions),
        location_analysis=location_profile,
        history=history,
        enhanced=advisory is not None,
        advisory_notes=notes,
    )
