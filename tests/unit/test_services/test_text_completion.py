import pytest
import requests
from unittest.mock import MagicMock, patch

from agronomy.settings import EngineSettings
from services import text_completion
from services.text_completion import GeminiClient, get_text_client


@pytest.fixture
def client():
    with patch('requests.Session') as mock_session:
        c = GeminiClient(api_key="test-key", model="gemini-test")
        c.session = mock_session.return_value
        yield c


def gemini_response(text):
    response = MagicMock()
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


def test_complete_success(client):
    """Verify prompt is posted and text is extracted."""
    client.session.post.return_value = gemini_response('{"cropRecommendations": []}')

    text = client.complete("Recommend crops", timeout=4.0)

    assert text == '{"cropRecommendations": []}'
    args, kwargs = client.session.post.call_args
    assert args[0].endswith("/gemini-test:generateContent")
    assert kwargs["params"] == {"key": "test-key"}
    assert kwargs["timeout"] == 4.0
    assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "Recommend crops"


def test_complete_no_candidates(client):
    response = MagicMock()
    response.json.return_value = {"candidates": []}
    client.session.post.return_value = response
    with pytest.raises(ValueError):
        client.complete("x", timeout=1.0)


def test_complete_http_error(client):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("429")
    client.session.post.return_value = response
    with pytest.raises(requests.exceptions.HTTPError):
        client.complete("x", timeout=1.0)
    # HTTP errors are not retried
    assert client.session.post.call_count == 1


def test_connection_errors_retried(client):
    client.session.post.side_effect = [
        requests.exceptions.ConnectionError("reset"),
        gemini_response("ok"),
    ]
    with patch("time.sleep"):
        assert client.complete("x", timeout=1.0) == "ok"
    assert client.session.post.call_count == 2


def test_get_text_client_without_key():
    assert get_text_client(EngineSettings(api_key=None)) is None


def test_get_text_client_singleton(monkeypatch):
    monkeypatch.setattr(text_completion, "_client", None)
    settings = EngineSettings(api_key="k", advisory_model="m")
    first = get_text_client(settings)
    assert isinstance(first, GeminiClient)
    assert first is get_text_client(settings)
    assert first.model == "m"
    monkeypatch.setattr(text_completion, "_client", None)
