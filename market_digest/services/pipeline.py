"""
Daily Report Pipeline

Single entry point for a report run:

    snapshot -> zero-quote guard -> aggregate -> digest -> generate -> deliver

Every run ends in either a delivered report or a short notification.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from market_digest.core.config import Settings
from market_digest.schemas.market import MarketSnapshot
from market_digest.schemas.report import RunResult, RunStatus, RunTrigger
from market_digest.services.aggregation import Aggregator
from market_digest.services.base import NoMarketDataError, ReportGenerationError
from market_digest.services.data_ingestion import (
    MarketSnapshotBuilder,
    QuoteSource,
    SeriesSource,
    Universe,
    get_default_universe,
)
from market_digest.services.data_ingestion.finnhub_adapter import FinnhubQuoteProvider
from market_digest.services.data_ingestion.yahoo_adapter import (
    YahooQuoteProvider,
    YahooSeriesProvider,
)
from market_digest.services.delivery import DeliveryChannel, TelegramChannel
from market_digest.services.llm import build_llm_client
from market_digest.services.report import (
    ReportGenerator,
    format_digest,
    format_report_date,
)

logger = logging.getLogger(__name__)

DIVIDER = "─" * 24

NO_DATA_NOTICE = "⚠️ Today's market report was skipped: no quotes could be fetched from any data provider."
FAILURE_NOTICE = "⚠️ Today's market report failed:\n{error}"


def compose_report(body: str, report_date: str) -> str:
    """Wrap the generated body with title and disclaimer."""
    header = f"📈 <b>US Market Daily | {report_date}</b>\n{DIVIDER}\n\n"
    footer = f"\n\n{DIVIDER}\n🤖 AI-generated summary · Not investment advice"
    return header + body.strip() + footer


class ReportPipeline:
    """Runs one daily report end to end."""

    def __init__(
        self,
        settings: Settings,
        builder: MarketSnapshotBuilder,
        aggregator: Aggregator,
        generator: ReportGenerator,
        channel: DeliveryChannel,
        universe: Optional[Universe] = None,
        resources: Optional[list] = None,
    ):
        self.settings = settings
        self.builder = builder
        self.aggregator = aggregator
        self.generator = generator
        self.channel = channel
        self.universe = universe or get_default_universe()
        self._resources = resources or []

    async def close(self) -> None:
        """Close HTTP sessions held by collaborators."""
        for resource in self._resources:
            await resource.close()

    async def run(
        self,
        trigger: RunTrigger = RunTrigger.MANUAL,
        now: Optional[datetime] = None,
    ) -> RunResult:
        """Execute one run. Never raises; the outcome is in the RunResult."""
        trigger = RunTrigger(trigger)
        now = now or datetime.now(timezone.utc)
        result = RunResult(status=RunStatus.FAILED, trigger=trigger, started_at=now)
        logger.info(f"Report run started ({trigger.value})")

        try:
            await self._run(result, now)
        except NoMarketDataError as e:
            logger.error(f"Run aborted: {e}")
            result.status = RunStatus.NO_DATA
            result.error = e.message
            await self.channel.notify(NO_DATA_NOTICE)
        except ReportGenerationError as e:
            logger.error(f"Run failed: {e}")
            result.status = RunStatus.GENERATION_FAILED
            result.error = e.message
            await self.channel.notify(FAILURE_NOTICE.format(error=e.message))
        except Exception as e:
            logger.exception(f"Run failed unexpectedly: {e}")
            result.status = RunStatus.FAILED
            result.error = str(e)
            await self.channel.notify(FAILURE_NOTICE.format(error=e))

        result.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"Report run finished: {result.status.value} "
            f"({result.segments_sent} segment(s) sent)"
        )
        return result

    async def _run(self, result: RunResult, now: datetime) -> None:
        settings = self.settings

        snapshot: MarketSnapshot = await self.builder.execute(self.universe)
        result.quote_count = snapshot.quote_count
        if snapshot.is_empty:
            raise NoMarketDataError(self.builder.name, "No quotes fetched for any symbol")

        result.indicator_count = len(
            {e.symbol for e in snapshot.all_entries() if e.indicators is not None}
        )

        aggregate = self.aggregator.aggregate(snapshot, now=now)
        digest = format_digest(
            snapshot,
            aggregate,
            timezone=settings.report_timezone,
            earnings_window_days=settings.earnings_window_days,
        )
        report_date = format_report_date(now, settings.report_timezone)

        body = await self.generator.generate(digest, report_date)

        delivery = await self.channel.deliver(compose_report(body, report_date))
        result.segments_sent = delivery.segments_sent
        result.message_ids = list(delivery.message_ids)
        if delivery.succeeded:
            result.status = RunStatus.SUCCEEDED
        else:
            result.status = RunStatus.DELIVERY_FAILED
            result.error = delivery.error


def build_pipeline(settings: Settings, universe: Optional[Universe] = None) -> ReportPipeline:
    """Wire the production collaborators from settings."""
    if not settings.telegram_bot_token or not settings.telegram_chat_id:
        raise ValueError("TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must be set")

    secondary = (
        FinnhubQuoteProvider(settings.finnhub_api_key, settings.finnhub_base_url)
        if settings.finnhub_api_key
        else None
    )
    yahoo_quotes = YahooQuoteProvider()
    yahoo_series = YahooSeriesProvider()
    quote_source = QuoteSource(
        yahoo_quotes, secondary, timeout=settings.quote_timeout_seconds
    )
    if not quote_source.has_fallback:
        logger.info("Secondary quote provider not configured")

    builder = MarketSnapshotBuilder(
        quote_source=quote_source,
        series_source=SeriesSource(yahoo_series),
        basket_delay=settings.basket_delay_seconds,
        series_delay=settings.series_delay_seconds,
        lookback_days=settings.series_lookback_days,
        mover_count=settings.indicator_mover_count,
    )
    generator = ReportGenerator(
        build_llm_client(settings),
        max_attempts=settings.generation_max_attempts,
        backoff_seconds=settings.generation_backoff_seconds,
        language=settings.report_language,
    )
    transport = TelegramChannel(
        settings.telegram_bot_token,
        settings.telegram_chat_id,
        api_base=settings.telegram_api_base,
    )
    channel = DeliveryChannel(
        transport,
        max_length=settings.message_max_length,
        segment_delay=settings.segment_delay_seconds,
    )

    resources = [transport, yahoo_quotes, yahoo_series] + ([secondary] if secondary else [])
    return ReportPipeline(
        settings=settings,
        builder=builder,
        aggregator=Aggregator(settings.ranking_size, settings.earnings_window_days),
        generator=generator,
        channel=channel,
        universe=universe,
        resources=resources,
    )
