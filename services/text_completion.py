"""
Text Completion Client - Gemini generateContent over REST.

Features:
- Shared requests.Session
- Retry with exponential backoff on transport errors
- Explicit per-call timeout
"""

import logging
import threading
from typing import Any, Dict, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from agronomy.advisory import TextCompletionClient
from agronomy.settings import EngineSettings

log = logging.getLogger(__name__)


class GeminiClient(TextCompletionClient):
    """
    Client for the Gemini generateContent endpoint.

    Usage:
        client = GeminiClient(api_key="...", model="gemini-1.5-flash-latest")
        text = client.complete("Recommend crops for ...", timeout=8.0)
    """

    USER_AGENT = "AgriSuitabilityEngine/1.0"

    def __init__(
        self,
        api_key: str,
        model: str,
        endpoint: str = "https://generativelanguage.googleapis.com/v1beta/models",
        temperature: float = 0.4,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.temperature = temperature
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.USER_AGENT,
            "Content-Type": "application/json",
        })

    @property
    def url(self) -> str:
        return f"{self.endpoint}/{self.model}:generateContent"

    @retry(
        retry=retry_if_exception_type(requests.exceptions.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    def _post(self, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        """POST with retry on connection failures."""
        response = self.session.post(
            self.url,
            params={"key": self.api_key},
            json=payload,
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()

    def complete(self, prompt: str, timeout: float) -> str:
        """
        Generate text for a prompt.

        Raises:
            requests.RequestException: Transport or HTTP failure
            ValueError: Response carried no text
        """
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        data = self._post(payload, timeout)

        candidates = data.get("candidates") or []
        if not candidates:
            raise ValueError("generateContent returned no candidates")
        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text.strip():
            raise ValueError("generateContent returned empty text")

        log.debug(f"Completion received: {len(text)} chars")
        return text


# Singleton
_client: Optional[GeminiClient] = None
_client_lock = threading.Lock()


def get_text_client(settings: Optional[EngineSettings] = None) -> Optional[GeminiClient]:
    """Get the shared client, or None when no API key is configured."""
    global _client
    settings = settings or EngineSettings.from_env()
    if not settings.advisory_enabled:
        log.info("GEMINI_API_KEY not set, advisory disabled")
        return None
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = GeminiClient(
                    api_key=settings.api_key,
                    model=settings.advisory_model,
                    endpoint=settings.advisory_endpoint,
                )
    return _client
