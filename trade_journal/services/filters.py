from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, Field

from trade_journal.models.records import Direction, JournalEntry, Trade


class TradeFilters(BaseModel):
    search_query: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    symbols: list[str] = []
    setups: list[str] = []
    tags: list[str] = []
    outcome: str | None = Field(None, pattern="^(wins|losses|breakeven)$")
    status: str | None = Field(None, pattern="^(all|open|closed)$")
    direction: Direction | None = None
    pnl_min: float | None = None
    pnl_max: float | None = None
    rr_min: float | None = None
    rr_max: float | None = None
    rule_breaking: bool = False
    has_notes: bool = False
    has_tags: bool = False
    has_screenshots: bool = False


def filter_trades(
    trades: Iterable[Trade],
    journal_entries: Iterable[JournalEntry],
    filters: TradeFilters | None,
) -> list[Trade]:
    """Apply every set filter in a single pass. An empty filter set keeps all trades."""
    trades = list(trades)
    if filters is None:
        return trades

    query = filters.search_query.lower() if filters.search_query else None
    rule_breaking_dates = (
        {e.date for e in journal_entries if not e.followed_system} if filters.rule_breaking else None
    )

    def keep(t: Trade) -> bool:
        if query and not (
            query in t.symbol.lower()
            or query in t.setup.lower()
            or query in t.notes.lower()
            or any(query in tag.lower() for tag in t.tags)
        ):
            return False

        if filters.date_from and t.date < filters.date_from:
            return False
        if filters.date_to and t.date > filters.date_to:
            return False

        if filters.symbols and t.symbol not in filters.symbols:
            return False
        if filters.setups and t.setup not in filters.setups:
            return False
        if filters.tags and not any(tag in filters.tags for tag in t.tags):
            return False

        if filters.outcome == "wins" and t.pnl <= 0:
            return False
        if filters.outcome == "losses" and t.pnl >= 0:
            return False
        if filters.outcome == "breakeven" and t.pnl != 0:
            return False

        if filters.status == "open" and not t.is_open:
            return False
        if filters.status == "closed" and t.is_open:
            return False
        if filters.direction and t.direction != filters.direction:
            return False

        if filters.pnl_min is not None and t.pnl < filters.pnl_min:
            return False
        if filters.pnl_max is not None and t.pnl > filters.pnl_max:
            return False
        if filters.rr_min is not None and (t.rr is None or t.rr < filters.rr_min):
            return False
        if filters.rr_max is not None and (t.rr is None or t.rr > filters.rr_max):
            return False

        if rule_breaking_dates is not None and t.date not in rule_breaking_dates:
            return False
        if filters.has_notes and not t.notes.strip():
            return False
        if filters.has_tags and not t.tags:
            return False
        if filters.has_screenshots and not (t.screenshot_before or t.screenshot_after):
            return False

        return True

    return [t for t in trades if keep(t)]


def available_symbols(trades: Iterable[Trade]) -> list[str]:
    return sorted({t.symbol for t in trades if t.symbol})


def available_setups(trades: Iterable[Trade]) -> list[str]:
    return sorted({t.setup for t in trades if t.setup})


def available_tags(trades: Iterable[Trade]) -> list[str]:
    return sorted({tag for t in trades for tag in t.tags})
