"""
Report Generator

Turns the data digest into prose through the LLM client. Transient
failures are retried with linearly increasing backoff; exhaustion
raises ReportGenerationError.
"""

import asyncio
import logging
import re
from typing import Optional

from market_digest.services.base import ReportGenerationError
from market_digest.services.llm.client import LLMClient
from market_digest.services.llm.prompts import (
    ALLOWED_TAGS,
    SYSTEM_PROMPT,
    build_user_prompt,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "ReportGenerator"

_TAG_RE = re.compile(r"</?\s*([a-zA-Z][a-zA-Z0-9]*)[^>]*>")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\n|\n?```$")


def sanitize_markup(text: str) -> str:
    """
    Keep only the permitted tags.

    <br> becomes a newline; code fences around the whole reply are
    removed; any other tag is dropped with its text kept.
    """
    text = _FENCE_RE.sub("", text.strip())
    text = _BR_RE.sub("\n", text)

    def _keep_allowed(match: re.Match) -> str:
        return match.group(0) if match.group(1).lower() in ALLOWED_TAGS else ""

    return _TAG_RE.sub(_keep_allowed, text).strip()


class ReportGenerator:
    """Generates the report body with bounded retries."""

    def __init__(
        self,
        llm_client: LLMClient,
        max_attempts: int = 3,
        backoff_seconds: float = 5.0,
        language: str = "English",
    ):
        self.llm_client = llm_client
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.language = language

    async def generate(self, digest: str, report_date: str) -> str:
        """
        Generate the report body.

        Raises:
            ReportGenerationError: After `max_attempts` failed attempts
        """
        user_prompt = build_user_prompt(digest, report_date, self.language)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self.llm_client.generate(
                    system_prompt=SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                )
                content = sanitize_markup(response.content or "")
                if not content:
                    raise ValueError("Empty response from model")

                logger.info(
                    f"Report generated by {response.provider.value}/{response.model} "
                    f"({len(content)} chars, attempt {attempt})"
                )
                return content

            except Exception as e:
                last_error = e
                logger.warning(
                    f"Report generation attempt {attempt}/{self.max_attempts} failed: {e}"
                )
                if attempt < self.max_attempts and self.backoff_seconds > 0:
                    await asyncio.sleep(self.backoff_seconds * attempt)

        raise ReportGenerationError(
            SERVICE_NAME,
            f"Generation failed after {self.max_attempts} attempts: {last_error}",
            details={"attempts": self.max_attempts},
        )
