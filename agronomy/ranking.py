"""
Ranker / Selector

Orders scored crops by descending suitability and keeps the top N.
sorted() is stable, so equal scores keep catalog load order.
"""

from typing import List, Sequence

from agronomy.models import RankedCrop, ScoredCrop

DEFAULT_TOP_N = 10


def rank_crops(scored: Sequence[ScoredCrop], top_n: int = DEFAULT_TOP_N) -> List[RankedCrop]:
    """Sort descending by score, truncate to top_n and assign ranks 1..N."""
    if top_n < 1:
        return []
    ordered = sorted(scored, key=lambda crop: crop.suitability_score, reverse=True)
    return [RankedCrop(rank=i, crop=crop) for i, crop in enumerate(ordered[:top_n], start=1)]
