"""
Engine Settings

Runtime knobs read from the environment. Agronomic constants (band
factors, publish thresholds, risk cut-offs) are not here; they live as
named constants beside the code that uses them.
"""

import os
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
DEFAULT_TOP_N = 10
DEFAULT_ADVISORY_TIMEOUT = 8.0  # seconds
DEFAULT_ADVISORY_MODEL = "gemini-1.5-flash-latest"
DEFAULT_ADVISORY_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"

SUPPORTED_LOCALES = ("en", "mr")


@dataclass(frozen=True)
class EngineSettings:
    """
    Configuration for one engine instance.

    Attributes:
        locale: Output language for crop names and the advisory prompt
        top_n: Number of ranked crops in a report
        advisory_timeout: Upper bound on the advisory call, in seconds
        advisory_model: Generative model name
        api_key: Key for the text completion service; advisory is off without it
        advisory_endpoint: Base URL of the generateContent API
    """
    locale: str = DEFAULT_LOCALE
    top_n: int = DEFAULT_TOP_N
    advisory_timeout: float = DEFAULT_ADVISORY_TIMEOUT
    advisory_model: str = DEFAULT_ADVISORY_MODEL
    api_key: Optional[str] = None
    advisory_endpoint: str = DEFAULT_ADVISORY_ENDPOINT

    @property
    def advisory_enabled(self) -> bool:
        return bool(self.api_key)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["api_key"] = "***" if self.api_key else None
        return data

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EngineSettings":
        """Build settings from AGRONOMY_* variables and GEMINI_API_KEY."""
        env = os.environ if environ is None else environ

        locale = env.get("AGRONOMY_LOCALE", DEFAULT_LOCALE).strip().lower()
        if locale not in SUPPORTED_LOCALES:
            log.warning(f"Unsupported locale '{locale}', using {DEFAULT_LOCALE}")
            locale = DEFAULT_LOCALE

        top_n = _read_number(env, "AGRONOMY_TOP_N", DEFAULT_TOP_N, int)
        if top_n < 1:
            log.warning(f"AGRONOMY_TOP_N must be positive, using {DEFAULT_TOP_N}")
            top_n = DEFAULT_TOP_N

        timeout = _read_number(env, "AGRONOMY_ADVISORY_TIMEOUT", DEFAULT_ADVISORY_TIMEOUT, float)
        if timeout <= 0:
            log.warning(f"AGRONOMY_ADVISORY_TIMEOUT must be positive, using {DEFAULT_ADVISORY_TIMEOUT}")
            timeout = DEFAULT_ADVISORY_TIMEOUT

        return cls(
            locale=locale,
            top_n=top_n,
            advisory_timeout=timeout,
            advisory_model=env.get("AGRONOMY_ADVISORY_MODEL", DEFAULT_ADVISORY_MODEL),
            api_key=env.get("GEMINI_API_KEY") or None,
            advisory_endpoint=env.get("AGRONOMY_ADVISORY_ENDPOINT", DEFAULT_ADVISORY_ENDPOINT),
        )


def _read_number(env, key: str, default, cast):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        log.warning(f"Ignoring invalid {key}={raw!r}, using {default}")
        return default
