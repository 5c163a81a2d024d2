"""DeliveryChannel state machine and Telegram transport tests."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from market_digest.services.base import DeliveryError, MarkupRejectedError, RateLimitError
from market_digest.services.delivery import DeliveryChannel, DeliveryState, TelegramChannel


def fake_transport(side_effect=None):
    transport = MagicMock()
    ids = iter(range(1, 100))

    async def send(text, parse_mode="HTML"):
        return next(ids)

    transport.send_message = AsyncMock(side_effect=side_effect or send)
    return transport


def long_report(sections=3, size=500):
    return "".join(f"📊 <b>Section {i}</b>\n" + "word " * size + "\n\n" for i in range(sections))


class TestDeliveryChannel:
    @pytest.mark.asyncio
    async def test_single_segment(self):
        transport = fake_transport()
        channel = DeliveryChannel(transport, max_length=3800, segment_delay=0)

        report = await channel.deliver("📈 <b>Report</b>\nAll good.")

        assert report.state == DeliveryState.SUCCEEDED
        assert report.segments_total == 1
        transport.send_message.assert_awaited_once_with(
            "📈 <b>Report</b>\nAll good.", parse_mode="HTML"
        )

    @pytest.mark.asyncio
    async def test_segments_sent_in_order(self):
        transport = fake_transport()
        channel = DeliveryChannel(transport, max_length=3000, segment_delay=0)

        report = await channel.deliver(long_report())

        sent = [c.args[0] for c in transport.send_message.await_args_list]
        assert report.succeeded
        assert report.message_ids == list(range(1, len(sent) + 1))
        assert len(sent) == report.segments_total > 1
        assert all(len(s) <= 3000 for s in sent)
        for i, segment in enumerate(sent, start=1):
            assert segment.endswith(f"({i}/{len(sent)})")

    @pytest.mark.asyncio
    async def test_delay_between_segments(self):
        transport = fake_transport()
        channel = DeliveryChannel(transport, max_length=3000, segment_delay=1.2)

        with patch(
            "market_digest.services.delivery.channel.asyncio.sleep", new=AsyncMock()
        ) as sleep:
            report = await channel.deliver(long_report())

        assert sleep.await_args_list == [call(1.2)] * (report.segments_total - 1)

    @pytest.mark.asyncio
    async def test_markup_rejection_resends_plain_once(self):
        calls = []

        async def send(text, parse_mode="HTML"):
            calls.append((text, parse_mode))
            if parse_mode == "HTML" and len(calls) == 1:
                raise MarkupRejectedError("Telegram", "can't parse entities")
            return len(calls)

        channel = DeliveryChannel(fake_transport(send), segment_delay=0)

        report = await channel.deliver("📈 <b>S&amp;P</b> up")

        assert report.succeeded
        assert report.plain_resends == 1
        assert calls == [("📈 <b>S&amp;P</b> up", "HTML"), ("📈 S&P up", None)]

    @pytest.mark.asyncio
    async def test_plain_resend_keeps_bare_angle_bracket(self):
        sent = []

        async def send(text, parse_mode="HTML"):
            if parse_mode == "HTML":
                raise MarkupRejectedError("Telegram", "unsupported start tag")
            sent.append(text)
            return len(sent)

        channel = DeliveryChannel(fake_transport(send), segment_delay=0)

        report = await channel.deliver("📊 <b>Movers</b>\nAMD < 2% gain while <i>NVDA</i> led")

        assert report.succeeded
        assert sent == ["📊 Movers\nAMD < 2% gain while NVDA led"]

    @pytest.mark.asyncio
    async def test_ceiling_below_marker_room_fails(self):
        transport = fake_transport()
        channel = DeliveryChannel(transport, max_length=10, segment_delay=0)

        report = await channel.deliver("x" * 50)

        assert report.state == DeliveryState.FAILED
        assert "limit" in report.error
        transport.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_plain_resend_failure_fails_run(self):
        async def send(text, parse_mode="HTML"):
            if parse_mode == "HTML":
                raise MarkupRejectedError("Telegram", "can't parse entities")
            raise DeliveryError("Telegram", "chat not found")

        transport = fake_transport(send)
        channel = DeliveryChannel(transport, segment_delay=0)

        report = await channel.deliver("<b>broken")

        assert report.state == DeliveryState.FAILED
        assert "chat not found" in report.error
        assert transport.send_message.await_count == 2

    @pytest.mark.asyncio
    async def test_other_error_stops_without_retry(self):
        sent = []

        async def send(text, parse_mode="HTML"):
            if len(sent) == 1:
                raise DeliveryError("Telegram", "Bad Gateway")
            sent.append(text)
            return len(sent)

        transport = fake_transport(send)
        channel = DeliveryChannel(transport, max_length=3000, segment_delay=0)

        report = await channel.deliver(long_report())

        assert report.state == DeliveryState.FAILED
        assert report.segments_sent == 1
        assert transport.send_message.await_count == 2

    @pytest.mark.asyncio
    async def test_blank_text_fails(self):
        transport = fake_transport()
        report = await DeliveryChannel(transport).deliver("   \n  ")

        assert report.state == DeliveryState.FAILED
        transport.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_notify_never_raises(self):
        transport = fake_transport(DeliveryError("Telegram", "Unauthorized"))

        assert await DeliveryChannel(transport).notify("⚠️ failed") is None
        transport.send_message.assert_awaited_once_with("⚠️ failed", parse_mode=None)

    @pytest.mark.asyncio
    async def test_notify_truncates(self):
        transport = fake_transport()
        await DeliveryChannel(transport, max_length=10).notify("x" * 50)
        transport.send_message.assert_awaited_once_with("x" * 10, parse_mode=None)


class TestTelegramChannel:
    @pytest.fixture
    def channel(self):
        return TelegramChannel("token", "chat-1")

    @pytest.mark.asyncio
    async def test_returns_message_id(self, channel):
        with patch.object(
            channel, "_post", new=AsyncMock(return_value={"ok": True, "result": {"message_id": 42}})
        ) as post:
            assert await channel.send_message("<b>hi</b>") == 42

        body = post.await_args.args[0]
        assert body["chat_id"] == "chat-1"
        assert body["parse_mode"] == "HTML"

    @pytest.mark.asyncio
    async def test_plain_send_has_no_parse_mode(self, channel):
        with patch.object(
            channel, "_post", new=AsyncMock(return_value={"ok": True, "result": {"message_id": 1}})
        ) as post:
            await channel.send_message("hi", parse_mode=None)

        assert "parse_mode" not in post.await_args.args[0]

    @pytest.mark.asyncio
    async def test_entity_error_is_markup_rejection(self, channel):
        response = {
            "ok": False,
            "error_code": 400,
            "description": "Bad Request: can't parse entities: Unsupported start tag \"br\"",
        }
        with patch.object(channel, "_post", new=AsyncMock(return_value=response)):
            with pytest.raises(MarkupRejectedError):
                await channel.send_message("<br>")

    @pytest.mark.asyncio
    async def test_other_error_is_delivery_error(self, channel):
        response = {"ok": False, "error_code": 400, "description": "Bad Request: chat not found"}
        with patch.object(channel, "_post", new=AsyncMock(return_value=response)):
            with pytest.raises(DeliveryError) as exc_info:
                await channel.send_message("hi")

        assert not isinstance(exc_info.value, MarkupRejectedError)

    @pytest.mark.asyncio
    async def test_flood_control_waits_and_retries(self, channel):
        responses = [
            {"ok": False, "error_code": 429, "parameters": {"retry_after": 3}},
            {"ok": True, "result": {"message_id": 7}},
        ]
        with patch.object(channel, "_post", new=AsyncMock(side_effect=responses)), patch(
            "market_digest.services.delivery.telegram.asyncio.sleep", new=AsyncMock()
        ) as sleep:
            assert await channel.send_message("hi") == 7

        sleep.assert_awaited_once_with(3)

    @pytest.mark.asyncio
    async def test_long_flood_wait_gives_up(self, channel):
        response = {"ok": False, "error_code": 429, "parameters": {"retry_after": 600}}
        with patch.object(channel, "_post", new=AsyncMock(return_value=response)):
            with pytest.raises(RateLimitError):
                await channel.send_message("hi")
