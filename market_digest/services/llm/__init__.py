"""
LLM Client Layer

Provider-agnostic text generation for the daily report.

LLM USAGE:
    - OpenAI (default primary), Anthropic (fallback)

CRITICAL RULES:
    - LLM does NO math - all numbers come from the data digest
    - LLM never invents price levels or events
"""

from market_digest.services.llm.client import (
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    build_llm_client,
)
from market_digest.services.llm.prompts import SYSTEM_PROMPT, build_user_prompt

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "build_llm_client",
    "SYSTEM_PROMPT",
    "build_user_prompt",
]
