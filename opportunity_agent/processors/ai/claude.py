from __future__ import annotations

import os

import requests

from ...utils.logging import get_logger
from ...utils.pipeline_config import PipelineConfig
from .base import GenerationError
from .remote import RemoteGenerator

logger = get_logger("oa.ai.claude")

_API_URL = "https://api.anthropic.com/v1/messages"
_API_VERSION = "2023-06-01"


class AnthropicGenerator(RemoteGenerator):
    """HTTP client for Claude via the Anthropic Messages API.

    Environment:
      - ANTHROPIC_API_KEY (required)
      - ANTHROPIC_MODEL (default: claude-sonnet-4-20250514)
    """

    name = "anthropic"

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        api_key: str | None = None,
        timeout: int = 60,
    ) -> None:
        super().__init__(config)
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is required for Anthropic backend")
        self.model = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
        self.timeout = timeout

    def _complete(self, prompt: str) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": _API_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": 500,
            "messages": [{"role": "user", "content": prompt}],
        }
        resp = requests.post(_API_URL, headers=headers, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise GenerationError("Anthropic response is not a JSON object")
        blocks = data.get("content") or []
        if not isinstance(blocks, list):
            raise GenerationError("Anthropic response content is not a list of blocks")
        text = "".join(
            str(b.get("text") or "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"
        ).strip()
        if not text:
            raise GenerationError("No text output from Anthropic")
        logger.debug("Anthropic returned %d chars", len(text))
        return text
