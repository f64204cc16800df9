"""Trade and journal records consumed by the statistics engine.

Records arrive already normalized (see ``services.normalization``), so every
field here is populated. camelCase keys from older exports are accepted as
aliases; snake_case is canonical on output.
"""

import enum
from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Direction(str, enum.Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class Mood(str, enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NEUTRAL = "neutral"
    POOR = "poor"
    TERRIBLE = "terrible"


class DisplayMode(str, enum.Enum):
    PNL = "pnl"
    RR = "rr"


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Trade(_Record):
    id: str
    date: date_type = Field(..., description="Entry date")
    exit_date: date_type | None = None
    symbol: str = ""
    direction: Direction = Field(Direction.LONG, alias="type")
    entry_price: float = 0.0
    exit_price: float | None = None
    pnl: float = 0.0
    rr: float | None = None
    status: TradeStatus
    setup: str = ""
    tags: list[str] = []
    commission: float = 0.0
    notes: str = ""
    name: str | None = None
    quantity: float | None = None
    stop_loss: float | None = None
    target: float | None = None
    entry_time: str | None = None  # HH:MM
    exit_time: str | None = None  # HH:MM
    screenshot_before: str | None = None
    screenshot_after: str | None = None
    entry_mode: str = "detailed"  # detailed, simple

    @property
    def close_date(self) -> date_type:
        """Day the trade's P&L is booked on."""
        return self.exit_date or self.date

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    @property
    def label(self) -> str:
        return f"{self.symbol} {self.direction.value}"


class NewsEvent(_Record):
    name: str
    time: str  # e.g. "8:30 AM"


class JournalEntry(_Record):
    date: date_type
    name: str | None = None
    mood: Mood = Mood.NEUTRAL
    notes: str = ""
    lessons_learned: str = ""
    market_conditions: str = ""
    did_trade: bool = False
    followed_system: bool = True
    is_news_day: bool = False
    news_events: list[NewsEvent] = []
