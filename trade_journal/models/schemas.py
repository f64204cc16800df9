from datetime import date as date_type

from pydantic import BaseModel, Field

from trade_journal.models.records import DisplayMode
from trade_journal.services.filters import TradeFilters


class AnalyticsRequest(BaseModel):
    trades: list[dict] = []
    journal_entries: list[dict] = []
    display_mode: DisplayMode | None = None  # falls back to the stored setting
    filters: TradeFilters | None = None
    as_of: date_type | None = None


class ProjectionRequest(AnalyticsRequest):
    days: int | None = Field(None, ge=1)
    starting_balance: float | None = Field(None, ge=0)
    target_win_rate: float | None = Field(None, ge=0, le=100)
    target_rr: float | None = Field(None, gt=0)


class SettingsUpdateRequest(BaseModel):
    display_mode: DisplayMode | None = None
    show_weekends: bool | None = None
    starting_balance: float | None = Field(None, ge=0)
    account_created_date: date_type | None = None


class StatisticsResponse(BaseModel):
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    total_rr: float = 0.0
    avg_win: float = 0.0
    avg_win_rr: float = 0.0
    avg_loss: float = 0.0
    avg_loss_rr: float = 0.0
    avg_rr: float = 0.0
    best_rr: float = 0.0
    largest_win: float = 0.0
    largest_win_rr: float = 0.0
    largest_loss: float = 0.0
    largest_loss_rr: float = 0.0
    profit_factor: float = 0.0
    profit_factor_rr: float = 0.0
    avg_daily_pnl: float = 0.0
    avg_daily_rr: float = 0.0
    best_day: float = 0.0
    best_day_rr: float = 0.0
    worst_day: float = 0.0
    worst_day_rr: float = 0.0
    trading_days: int = 0
    current_streak: int = 0
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    expectancy: float = 0.0
    expectancy_rr: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_rr: float = 0.0
    max_drawdown_duration: int = 0
    recovery_time: float = 0.0
    performance_by_day: dict[str, dict] = {}
    performance_by_setup: dict[str, dict] = {}
    daily_pnl: list[dict] = []
    weekly_pnl: list[dict] = []
    monthly_pnl: list[dict] = []
    cumulative_pnl: list[dict] = []
    display_mode: DisplayMode = DisplayMode.PNL
    account: dict = {}
    available_symbols: list[str] = []
    available_setups: list[str] = []
    available_tags: list[str] = []


class PersonalBestResponse(BaseModel):
    id: str
    title: str
    description: str
    value: float
    formatted_value: str
    date: date_type
    is_recent: bool
    category: str
    badge: str | None = None
    trades: list[dict] = []
    previous_loss: float | None = None
    period_start: date_type | None = None


class AchievementResponse(BaseModel):
    id: str
    title: str
    description: str
    is_unlocked: bool
    progress: float
    current: float
    target: float
    phase: str | None = None


class StreakResponse(BaseModel):
    current_winning_streak: int = 0
    best_winning_streak: int = 0
    current_losing_streak: int = 0
    longest_losing_streak: int = 0
    trading_days_streak: int = 0
    best_trading_days_streak: int = 0
    journal_streak: int = 0
    best_journal_streak: int = 0
    system_adherence_streak: int = 0
    best_system_adherence_streak: int = 0


class ComparisonResponse(BaseModel):
    month_over_month: list[dict] = []
    quarter_over_quarter: list[dict] = []
    recent_vs_historical: list[dict] = []
    period: dict[str, str] = {}


class TaskResponse(BaseModel):
    id: str
    type: str
    priority: str
    title: str
    description: str
    action: dict
    count: int | None = None
    badges: list[dict] = []
    related_items: list[dict] = []
    missing_fields: list[str] = []


class ProjectionResponse(BaseModel):
    current_value: float
    starting_balance: float
    trading_days: int
    avg_daily_return: float
    projection_rate: float
    days: int
    data: list[dict]
    projected_end_value: float
    projected_gain: float
    projected_gain_percent: float
    data_quality: dict
    what_if: dict | None = None
    risk_of_ruin: dict


class SettingsResponse(BaseModel):
    schema_version: int
    display_mode: DisplayMode
    show_weekends: bool
    starting_balance: float
    account_created_date: date_type


class RestoreResponse(BaseModel):
    trades: list[dict]
    journal_entries: list[dict]
    trade_count: int
    journal_entry_count: int
