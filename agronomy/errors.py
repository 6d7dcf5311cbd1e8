"""
Error types for the agronomy engine.

Only InvalidInputError is ever surfaced to callers. The others are
raised and handled inside the engine.
"""

from typing import Optional


class AgronomyError(Exception):
    """Base class for engine errors."""


class InvalidInputError(AgronomyError):
    """A required soil field is missing or not numeric."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Invalid or missing value for '{field}'")


class AdvisoryUnavailable(AgronomyError):
    """The advisory service timed out, failed, or returned unusable content."""


class CatalogLookupMiss(AgronomyError):
    """A referenced crop id is not in the catalog."""

    def __init__(self, crop_id: str):
        self.crop_id = crop_id
        super().__init__(f"Crop '{crop_id}' not found in catalog")
