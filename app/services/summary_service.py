"""
AI summary of a CSV transaction report, via the Gemini generateContent API.

One request, no retries: a failure is reported back to the caller, who can
simply try again.
"""

import logging
from typing import Dict, List

import requests
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import SummaryError, ValidationError

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

MIN_REPORT_LENGTH = 10

PROMPT_SUMMARY = """
You are an expert financial analyst specializing in fraud detection.
You will be provided with a daily transaction report in CSV format.
Your task is to analyze the report and generate a concise summary highlighting any potential anomalies or fraudulent activities.
The summary should be actionable and provide insights for further investigation.

Transaction Report:
"""

FAILURE_MESSAGE = "Failed to generate summary. Please try again."


def _gemini_generate_content(parts: List[Dict], temperature: float = 0.4, max_output_tokens: int = 2048) -> str:
    if not settings.GEMINI_API_KEY:
        logger.error("GEMINI_API_KEY is not configured")
        raise SummaryError(FAILURE_MESSAGE)

    url = GEMINI_URL.format(model=settings.GEMINI_MODEL)
    payload = {
        "contents": [
            {
                "role": "user",
                "parts": parts
            }
        ],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens
        }
    }

    try:
        response = requests.post(
            url,
            params={"key": settings.GEMINI_API_KEY},
            json=payload,
            timeout=settings.GEMINI_TIMEOUT_SECONDS
        )
    except requests.RequestException as exc:
        logger.error("Gemini request failed: %s", exc)
        raise SummaryError(FAILURE_MESSAGE) from exc

    if response.status_code != 200:
        logger.error("Gemini returned %s: %s", response.status_code, response.text[:500])
        raise SummaryError(FAILURE_MESSAGE)

    data = response.json()
    candidates = data.get("candidates", [])
    if not candidates:
        return ""

    content = candidates[0].get("content", {})
    parts_out = content.get("parts", [])
    return "".join(part.get("text", "") for part in parts_out if isinstance(part, dict))


class SummaryService:
    @staticmethod
    async def summarize_report(report: str) -> str:
        """Summarize a CSV transaction report, pointing out anomalies worth a look."""
        report = (report or "").strip()
        if len(report) < MIN_REPORT_LENGTH:
            raise ValidationError("Report must not be empty.")

        summary = await run_in_threadpool(
            _gemini_generate_content,
            [{"text": f"{PROMPT_SUMMARY}{report}"}]
        )
        if not summary.strip():
            logger.error("Gemini returned an empty summary")
            raise SummaryError(FAILURE_MESSAGE)
        return summary.strip()
