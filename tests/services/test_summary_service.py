from unittest.mock import MagicMock, patch

import pytest
import requests

from app.core.config import settings
from app.core.errors import SummaryError, ValidationError
from app.services.summary_service import SummaryService

REPORT = (
    "transaction_id,client_name,partner,date,amount,status,recorded_by\n"
    "t1,John Doe,Innovate Inc.,2024-05-01,1200.00,Flagged,u1\n"
)


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = "error body"
    response.json.return_value = payload or {}
    return response


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")


@pytest.mark.asyncio
async def test_summarize_report(gemini_key):
    payload = {"candidates": [{"content": {"parts": [{"text": "One flagged charge "}, {"text": "of 1200."}]}}]}

    with patch("app.services.summary_service.requests.post", return_value=_response(payload=payload)) as post:
        summary = await SummaryService.summarize_report(REPORT)

    assert summary == "One flagged charge of 1200."
    kwargs = post.call_args.kwargs
    assert kwargs["params"] == {"key": "test-key"}
    assert REPORT.strip() in kwargs["json"]["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_short_report_rejected(gemini_key):
    with patch("app.services.summary_service.requests.post") as post:
        with pytest.raises(ValidationError):
            await SummaryService.summarize_report("   ")

    post.assert_not_called()


@pytest.mark.asyncio
async def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

    with pytest.raises(SummaryError):
        await SummaryService.summarize_report(REPORT)


@pytest.mark.asyncio
async def test_upstream_error(gemini_key):
    with patch("app.services.summary_service.requests.post", return_value=_response(status_code=500)):
        with pytest.raises(SummaryError) as exc:
            await SummaryService.summarize_report(REPORT)

    assert exc.value.message == "Failed to generate summary. Please try again."


@pytest.mark.asyncio
async def test_network_error(gemini_key):
    with patch("app.services.summary_service.requests.post", side_effect=requests.ConnectionError("down")):
        with pytest.raises(SummaryError):
            await SummaryService.summarize_report(REPORT)


@pytest.mark.asyncio
async def test_empty_candidates(gemini_key):
    with patch("app.services.summary_service.requests.post", return_value=_response(payload={"candidates": []})):
        with pytest.raises(SummaryError):
            await SummaryService.summarize_report(REPORT)
