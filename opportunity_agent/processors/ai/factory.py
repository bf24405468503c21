from __future__ import annotations

import os
from typing import Optional

from ...utils.logging import get_logger
from ...utils.pipeline_config import PipelineConfig
from .base import OpportunityGenerator

logger = get_logger("oa.ai.factory")

BACKENDS = ("gemini", "anthropic", "fallback")


def create_generator(config: PipelineConfig | None = None, *, backend: Optional[str] = None) -> OpportunityGenerator:
    """Pick the generation backend once, at startup.

    An explicit ``backend`` (or ``GENERATION_BACKEND``) wins. Otherwise the
    first backend with credentials is used: Gemini (``GOOGLE_API_KEY``), then
    Anthropic (``ANTHROPIC_API_KEY``), then the rule-based fallback.
    """
    selected = (backend or os.environ.get("GENERATION_BACKEND") or "").strip().lower()
    if not selected:
        if os.environ.get("GOOGLE_API_KEY"):
            selected = "gemini"
        elif os.environ.get("ANTHROPIC_API_KEY"):
            selected = "anthropic"
        else:
            selected = "fallback"

    if selected == "gemini":
        from .gemini import GeminiGenerator  # lazy import

        generator: OpportunityGenerator = GeminiGenerator(config)
    elif selected == "anthropic":
        from .claude import AnthropicGenerator  # lazy import

        generator = AnthropicGenerator(config)
    elif selected == "fallback":
        from .fallback import FallbackGenerator

        generator = FallbackGenerator(config)
    else:
        raise ValueError(f"Unsupported GENERATION_BACKEND '{selected}'. Use one of {', '.join(BACKENDS)}.")

    logger.info("Generation backend: %s", generator.name)
    return generator
