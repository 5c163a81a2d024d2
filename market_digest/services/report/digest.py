"""
Data Digest Formatter

Renders a snapshot and its aggregate into the plain-text digest handed
to the text generator. Every number is pre-formatted here so the model
never has to compute anything.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from market_digest.schemas.market import (
    IndicatorBundle,
    MarketAggregate,
    MarketSnapshot,
    Quote,
    RsiFlag,
    UniverseEntry,
)


def _fmt_price(value: Optional[float]) -> str:
    return f"{value:,.2f}" if value is not None else "n/a"


def _fmt_signed(value: float, suffix: str = "") -> str:
    return f"{value:+,.2f}{suffix}"


def _fmt_volume(value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def range_position(quote: Quote) -> Optional[float]:
    """Where the price sits in the 52-week range, 0 = low, 100 = high."""
    high, low = quote.fifty_two_week_high, quote.fifty_two_week_low
    if high is None or low is None or high <= low:
        return None
    return (quote.price - low) / (high - low) * 100


def format_quote_line(entry: UniverseEntry) -> str:
    """One line per entry: name, price, change, extras."""
    quote = entry.quote
    parts = [
        f"{entry.name} ({entry.symbol}): {_fmt_price(quote.price)}",
        f"({_fmt_signed(quote.change)} / {_fmt_signed(quote.change_percent, '%')})",
    ]

    position = range_position(quote)
    if position is not None:
        parts.append(
            f"52w {_fmt_price(quote.fifty_two_week_low)}-{_fmt_price(quote.fifty_two_week_high)}"
            f" at {position:.0f}% of range"
        )

    volume = _fmt_volume(quote.volume)
    avg_volume = _fmt_volume(quote.average_volume)
    if volume and avg_volume:
        parts.append(f"vol {volume} vs avg {avg_volume}")
    elif volume:
        parts.append(f"vol {volume}")

    return " ".join(parts)


def format_indicators(bundle: Optional[IndicatorBundle]) -> Optional[str]:
    """Compact indicator summary, None when nothing is computable."""
    if bundle is None:
        return None

    parts = []
    if bundle.rsi14 is not None:
        rsi_text = f"RSI14 {bundle.rsi14:.1f}"
        if bundle.rsi_flag == RsiFlag.OVERBOUGHT:
            rsi_text += " (overbought)"
        elif bundle.rsi_flag == RsiFlag.OVERSOLD:
            rsi_text += " (oversold)"
        parts.append(rsi_text)
    if bundle.ma20 is not None and bundle.ma20_percent_offset is not None:
        parts.append(f"MA20 {_fmt_price(bundle.ma20)} ({_fmt_signed(bundle.ma20_percent_offset, '%')})")
    if bundle.ma50 is not None and bundle.ma50_percent_offset is not None:
        parts.append(f"MA50 {_fmt_price(bundle.ma50)} ({_fmt_signed(bundle.ma50_percent_offset, '%')})")
    if bundle.bollinger_percent is not None:
        parts.append(f"Bollinger position {bundle.bollinger_percent:.0f}%")

    return ", ".join(parts) if parts else None


def _entry_block(entry: UniverseEntry) -> list[str]:
    lines = [f"- {format_quote_line(entry)}"]
    indicators = format_indicators(entry.indicators)
    if indicators:
        lines.append(f"    {indicators}")
    return lines


def format_digest(
    snapshot: MarketSnapshot,
    aggregate: MarketAggregate,
    timezone: str = "UTC",
    earnings_window_days: int = 7,
) -> str:
    """
    Format the structured digest.

    The EARNINGS section is left out entirely when no event qualifies.
    """
    tz = ZoneInfo(timezone)
    lines = [f"DATA AS OF: {snapshot.timestamp.astimezone(tz):%Y-%m-%d %H:%M %Z}", ""]

    if snapshot.indices:
        lines.append("INDICES:")
        for entry in snapshot.indices:
            lines.extend(_entry_block(entry))
        lines.append("")

    if snapshot.mega_caps:
        lines.append("MEGA-CAPS:")
        for entry in snapshot.mega_caps:
            lines.extend(_entry_block(entry))
        lines.append("")

    sectors = [b for b in snapshot.sectors if b.entries]
    if sectors:
        lines.append("SECTORS (average change):")
        ordered = sorted(sectors, key=lambda b: b.average_change_percent, reverse=True)
        for basket in ordered:
            members = ", ".join(
                f"{e.symbol} {_fmt_signed(e.quote.change_percent, '%')}" for e in basket.entries
            )
            lines.append(
                f"- {basket.name}: {_fmt_signed(basket.average_change_percent, '%')} [{members}]"
            )
        lines.append("")

    if aggregate.top_movers:
        lines.append("TOP MOVERS:")
        for entry in aggregate.top_movers:
            lines.extend(_entry_block(entry))
        lines.append("")

    if aggregate.bottom_movers:
        lines.append("BOTTOM MOVERS (worst first):")
        for entry in aggregate.bottom_movers:
            lines.extend(_entry_block(entry))
        lines.append("")

    if aggregate.earnings:
        lines.append(f"EARNINGS (next {earnings_window_days} days):")
        for event in aggregate.earnings:
            local = event.timestamp.astimezone(tz)
            lines.append(f"- {event.name} ({event.symbol}): {local:%a %Y-%m-%d %H:%M}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def format_report_date(now: datetime, timezone: str) -> str:
    """Report date in the report timezone, e.g. 2026-10-17 (Sat)."""
    return f"{now.astimezone(ZoneInfo(timezone)):%Y-%m-%d (%a)}"
