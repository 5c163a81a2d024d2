"""
Delivery Channel

Sends a long report as ordered, size-bounded segments.

State machine per run:

    COMPOSE -> SPLIT -> SEND_NEXT -> SUCCEEDED
                           |  ^
                  markup   |  | plain resend ok
                  rejected v  |
                        RETRY_PLAIN -> FAILED (plain resend failed)

    SEND_NEXT -> FAILED on any other send error
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from market_digest.services.base import MarkupRejectedError
from market_digest.services.delivery.splitter import build_segments, strip_markup
from market_digest.services.delivery.telegram import MessageTransport

logger = logging.getLogger(__name__)


class DeliveryState(str, Enum):
    COMPOSE = "compose"
    SPLIT = "split"
    SEND_NEXT = "send_next"
    RETRY_PLAIN = "retry_plain"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = {DeliveryState.SUCCEEDED, DeliveryState.FAILED}


@dataclass
class DeliveryReport:
    """Outcome of delivering one message."""

    state: DeliveryState
    segments_total: int = 0
    message_ids: list[int] = field(default_factory=list)
    plain_resends: int = 0
    error: Optional[str] = None

    @property
    def segments_sent(self) -> int:
        return len(self.message_ids)

    @property
    def succeeded(self) -> bool:
        return self.state == DeliveryState.SUCCEEDED


class DeliveryChannel:
    """Splits and sends messages strictly in order, one at a time."""

    def __init__(
        self,
        transport: MessageTransport,
        max_length: int = 3800,
        segment_delay: float = 1.2,
        parse_mode: str = "HTML",
    ):
        self.transport = transport
        self.max_length = max_length
        self.segment_delay = segment_delay
        self.parse_mode = parse_mode

    async def deliver(self, text: str) -> DeliveryReport:
        """Run the delivery state machine for one message."""
        report = DeliveryReport(state=DeliveryState.COMPOSE)
        body = ""
        segments: list[str] = []
        index = 0

        while report.state not in TERMINAL_STATES:
            if report.state == DeliveryState.COMPOSE:
                body = text.strip()
                if not body:
                    report.error = "Nothing to send"
                    report.state = DeliveryState.FAILED
                else:
                    report.state = DeliveryState.SPLIT

            elif report.state == DeliveryState.SPLIT:
                try:
                    segments = [s for s in build_segments(body, self.max_length) if s.strip()]
                except ValueError as e:
                    logger.error(f"Cannot split message: {e}")
                    report.error = str(e)
                    report.state = DeliveryState.FAILED
                    continue
                report.segments_total = len(segments)
                logger.info(f"Sending {len(segments)} segment(s)")
                report.state = DeliveryState.SEND_NEXT

            elif report.state == DeliveryState.SEND_NEXT:
                if index >= len(segments):
                    report.state = DeliveryState.SUCCEEDED
                    continue
                if index > 0 and self.segment_delay > 0:
                    await asyncio.sleep(self.segment_delay)
                try:
                    message_id = await self.transport.send_message(
                        segments[index], parse_mode=self.parse_mode
                    )
                    report.message_ids.append(message_id)
                    index += 1
                except MarkupRejectedError as e:
                    logger.warning(f"Segment {index + 1} markup rejected ({e.message}), resending plain")
                    report.state = DeliveryState.RETRY_PLAIN
                except Exception as e:
                    logger.error(f"Segment {index + 1}/{len(segments)} failed: {e}")
                    report.error = str(e)
                    report.state = DeliveryState.FAILED

            elif report.state == DeliveryState.RETRY_PLAIN:
                try:
                    message_id = await self.transport.send_message(
                        strip_markup(segments[index]), parse_mode=None
                    )
                    report.message_ids.append(message_id)
                    report.plain_resends += 1
                    index += 1
                    report.state = DeliveryState.SEND_NEXT
                except Exception as e:
                    logger.error(f"Plain resend of segment {index + 1} failed: {e}")
                    report.error = str(e)
                    report.state = DeliveryState.FAILED

        if report.succeeded:
            logger.info(f"Delivered {report.segments_sent}/{report.segments_total} segment(s)")
        return report

    async def notify(self, text: str) -> Optional[int]:
        """
        Best-effort single plain-text notice.

        Never raises; returns the message id or None.
        """
        notice = text.strip()[: self.max_length]
        try:
            return await self.transport.send_message(notice, parse_mode=None)
        except Exception as e:
            logger.error(f"Failed to send notification: {e}")
            return None
