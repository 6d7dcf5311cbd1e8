"""
External-facing helpers: the generative text client and history summaries.
"""

from services.text_completion import GeminiClient, get_text_client
from services.history import summarize_series, aggregate_weather

__all__ = [
    "GeminiClient",
    "get_text_client",
    "summarize_series",
    "aggregate_weather",
]
