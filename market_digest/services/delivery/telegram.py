"""
Telegram Bot Channel

Sends messages through the Bot API sendMessage endpoint.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from market_digest.services.base import (
    DeliveryError,
    MarkupRejectedError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Telegram"

# Descriptions Telegram returns when parse_mode=HTML fails
_MARKUP_ERROR_RE = re.compile(
    r"can't parse entities|can't find end of the entity|unsupported start tag|unclosed",
    re.IGNORECASE,
)

# Longest flood-control wait we honour before giving up
MAX_RETRY_AFTER_SECONDS = 30


class MessageTransport(ABC):
    """Anything that can send one text message and return its id."""

    @abstractmethod
    async def send_message(self, text: str, parse_mode: Optional[str] = "HTML") -> int:
        """
        Send one message.

        Raises:
            MarkupRejectedError: If the markup could not be parsed
            DeliveryError: On any other failure
        """
        pass


class TelegramChannel(MessageTransport):
    """Telegram Bot API client."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        api_base: str = "https://api.telegram.org",
    ):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._api_base = api_base.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=15),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _post(self, body: dict) -> dict:
        session = await self._ensure_session()
        url = f"{self._api_base}/bot{self._bot_token}/sendMessage"
        try:
            async with session.post(url, json=body) as response:
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise DeliveryError(SERVICE_NAME, f"sendMessage request failed: {e}")

    async def send_message(self, text: str, parse_mode: Optional[str] = "HTML") -> int:
        body = {
            "chat_id": self._chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if parse_mode:
            body["parse_mode"] = parse_mode

        result = await self._post(body)

        # Flood control: wait once as instructed, then retry
        if not result.get("ok") and result.get("error_code") == 429:
            retry_after = (result.get("parameters") or {}).get("retry_after", 1)
            if retry_after > MAX_RETRY_AFTER_SECONDS:
                raise RateLimitError(SERVICE_NAME, f"Flood control: retry after {retry_after}s")
            logger.warning(f"Telegram flood control, retrying in {retry_after}s")
            await asyncio.sleep(retry_after)
            result = await self._post(body)

        if result.get("ok"):
            return int(result["result"]["message_id"])

        description = result.get("description", "unknown error")
        if parse_mode and _MARKUP_ERROR_RE.search(description):
            raise MarkupRejectedError(SERVICE_NAME, description)
        raise DeliveryError(
            SERVICE_NAME,
            description,
            details={"error_code": result.get("error_code")},
        )
