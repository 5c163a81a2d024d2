"""
Delivery Service

CONTRACT:
    Input:  full report text (Telegram HTML)
    Output: DeliveryReport

RESPONSIBILITIES:
    - Split at section, then paragraph, then hard boundaries
    - Number parts of multi-segment messages
    - Send segments in order with an inter-segment delay
    - Resend a segment once as plain text if its markup is rejected
"""

from market_digest.services.delivery.channel import (
    DeliveryChannel,
    DeliveryReport,
    DeliveryState,
)
from market_digest.services.delivery.splitter import (
    build_segments,
    split_message,
    strip_markup,
)
from market_digest.services.delivery.telegram import MessageTransport, TelegramChannel

__all__ = [
    "DeliveryChannel",
    "DeliveryReport",
    "DeliveryState",
    "build_segments",
    "split_message",
    "strip_markup",
    "MessageTransport",
    "TelegramChannel",
]
