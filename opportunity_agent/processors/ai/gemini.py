from __future__ import annotations

import os

import requests

from ...utils.logging import get_logger
from ...utils.pipeline_config import PipelineConfig
from .base import GenerationError
from .remote import RemoteGenerator

logger = get_logger("oa.ai.gemini")


class GeminiGenerator(RemoteGenerator):
    """HTTP client for Gemini via the Google AI Studio API.

    Environment:
      - GOOGLE_API_KEY (required)
      - GEMINI_MODEL (default: gemini-2.0-flash)
    """

    name = "gemini"

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        api_key: str | None = None,
        timeout: int = 60,
    ) -> None:
        super().__init__(config)
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY is required for Gemini backend")
        self.model = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")
        self.timeout = timeout

    def _complete(self, prompt: str) -> str:
        url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.7,
                "maxOutputTokens": 500,
                "responseMimeType": "application/json",
            },
        }
        resp = requests.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise GenerationError("Gemini response is not a JSON object")
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise GenerationError("No candidates in Gemini response")
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise GenerationError("Gemini candidate has no content parts")
        text = "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict)).strip()
        if not text:
            raise GenerationError("Empty text output from Gemini")
        logger.debug("Gemini returned %d chars", len(text))
        return text
