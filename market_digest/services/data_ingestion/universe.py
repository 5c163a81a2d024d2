"""
Symbol Universe for US Markets

One table of (symbol, name, sector, basket) rows. A symbol may appear in
more than one basket (e.g. NVDA is both a mega-cap and a semiconductor).
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from market_digest.schemas.market import BasketKind, UniverseMember

INDEX_BASKET = "Indices"
MEGA_CAP_BASKET = "Magnificent 7"

# (symbol, name, sector, basket kind, basket name)
UNIVERSE_TABLE = [
    # Indices
    ("^GSPC", "S&P 500", "Index", BasketKind.INDEX, INDEX_BASKET),
    ("^DJI", "Dow Jones Industrial Average", "Index", BasketKind.INDEX, INDEX_BASKET),
    ("^IXIC", "Nasdaq Composite", "Index", BasketKind.INDEX, INDEX_BASKET),
    ("^SOX", "PHLX Semiconductor", "Index", BasketKind.INDEX, INDEX_BASKET),
    # Mega-caps
    ("AAPL", "Apple", "Technology", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("MSFT", "Microsoft", "Technology", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("GOOGL", "Alphabet", "Communication", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("AMZN", "Amazon", "Consumer", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("NVDA", "NVIDIA", "Semiconductors", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("META", "Meta Platforms", "Communication", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    ("TSLA", "Tesla", "Consumer", BasketKind.MEGA_CAP, MEGA_CAP_BASKET),
    # Semiconductors
    ("NVDA", "NVIDIA", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("AMD", "Advanced Micro Devices", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("AVGO", "Broadcom", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("TSM", "Taiwan Semiconductor", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("QCOM", "Qualcomm", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("MU", "Micron Technology", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("INTC", "Intel", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    ("ASML", "ASML Holding", "Semiconductors", BasketKind.SECTOR, "Semiconductors"),
    # Software & Cloud
    ("MSFT", "Microsoft", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("ORCL", "Oracle", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("CRM", "Salesforce", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("ADBE", "Adobe", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("NOW", "ServiceNow", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("PLTR", "Palantir", "Software", BasketKind.SECTOR, "Software & Cloud"),
    ("SNOW", "Snowflake", "Software", BasketKind.SECTOR, "Software & Cloud"),
    # Internet & Communication
    ("GOOGL", "Alphabet", "Communication", BasketKind.SECTOR, "Internet & Media"),
    ("META", "Meta Platforms", "Communication", BasketKind.SECTOR, "Internet & Media"),
    ("NFLX", "Netflix", "Communication", BasketKind.SECTOR, "Internet & Media"),
    ("UBER", "Uber", "Communication", BasketKind.SECTOR, "Internet & Media"),
    ("DIS", "Walt Disney", "Communication", BasketKind.SECTOR, "Internet & Media"),
    # Financials
    ("JPM", "JPMorgan Chase", "Financials", BasketKind.SECTOR, "Financials"),
    ("BAC", "Bank of America", "Financials", BasketKind.SECTOR, "Financials"),
    ("GS", "Goldman Sachs", "Financials", BasketKind.SECTOR, "Financials"),
    ("MS", "Morgan Stanley", "Financials", BasketKind.SECTOR, "Financials"),
    ("V", "Visa", "Financials", BasketKind.SECTOR, "Financials"),
    ("MA", "Mastercard", "Financials", BasketKind.SECTOR, "Financials"),
    ("BRK-B", "Berkshire Hathaway", "Financials", BasketKind.SECTOR, "Financials"),
    # Healthcare
    ("LLY", "Eli Lilly", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    ("UNH", "UnitedHealth", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    ("JNJ", "Johnson & Johnson", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    ("ABBV", "AbbVie", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    ("MRK", "Merck", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    ("PFE", "Pfizer", "Healthcare", BasketKind.SECTOR, "Healthcare"),
    # Energy
    ("XOM", "Exxon Mobil", "Energy", BasketKind.SECTOR, "Energy"),
    ("CVX", "Chevron", "Energy", BasketKind.SECTOR, "Energy"),
    ("COP", "ConocoPhillips", "Energy", BasketKind.SECTOR, "Energy"),
    ("SLB", "Schlumberger", "Energy", BasketKind.SECTOR, "Energy"),
    ("OXY", "Occidental Petroleum", "Energy", BasketKind.SECTOR, "Energy"),
    # Consumer
    ("AMZN", "Amazon", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("TSLA", "Tesla", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("WMT", "Walmart", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("COST", "Costco", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("HD", "Home Depot", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("MCD", "McDonald's", "Consumer", BasketKind.SECTOR, "Consumer"),
    ("NKE", "Nike", "Consumer", BasketKind.SECTOR, "Consumer"),
    # Industrials
    ("CAT", "Caterpillar", "Industrials", BasketKind.SECTOR, "Industrials"),
    ("GE", "GE Aerospace", "Industrials", BasketKind.SECTOR, "Industrials"),
    ("BA", "Boeing", "Industrials", BasketKind.SECTOR, "Industrials"),
    ("RTX", "RTX", "Industrials", BasketKind.SECTOR, "Industrials"),
    ("HON", "Honeywell", "Industrials", BasketKind.SECTOR, "Industrials"),
    ("UPS", "United Parcel Service", "Industrials", BasketKind.SECTOR, "Industrials"),
]


@dataclass
class Universe:
    """Universe members grouped by basket, preserving table order."""

    indices: list[UniverseMember] = field(default_factory=list)
    mega_caps: list[UniverseMember] = field(default_factory=list)
    sector_baskets: dict[str, list[UniverseMember]] = field(default_factory=dict)

    @classmethod
    def from_members(cls, members: Iterable[UniverseMember]) -> "Universe":
        universe = cls()
        for member in members:
            if member.basket == BasketKind.INDEX:
                universe.indices.append(member)
            elif member.basket == BasketKind.MEGA_CAP:
                universe.mega_caps.append(member)
            else:
                universe.sector_baskets.setdefault(member.basket_name, []).append(member)
        return universe

    @property
    def size(self) -> int:
        return (
            len(self.indices)
            + len(self.mega_caps)
            + sum(len(m) for m in self.sector_baskets.values())
        )


def build_members(rows: Optional[list[tuple]] = None) -> list[UniverseMember]:
    """Convert table rows into UniverseMember models."""
    rows = UNIVERSE_TABLE if rows is None else rows
    return [
        UniverseMember(
            symbol=symbol,
            name=name,
            sector=sector,
            basket=basket,
            basket_name=basket_name,
        )
        for symbol, name, sector, basket, basket_name in rows
    ]


def get_default_universe() -> Universe:
    """Get the default US market universe."""
    return Universe.from_members(build_members())
