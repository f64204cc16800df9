"""Analytics endpoints. Clients post their records; nothing here is persisted."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.config import Settings
from trade_journal.dependencies import (
    get_achievement_tracker,
    get_db_session,
    get_growth_projector,
    get_period_comparison,
    get_personal_bests,
    get_settings,
    get_settings_store,
    get_streak_tracker,
    get_task_detector,
    get_trade_analytics,
)
from trade_journal.models.records import DisplayMode, JournalEntry, Trade
from trade_journal.models.schemas import (
    AchievementResponse,
    AnalyticsRequest,
    ComparisonResponse,
    PersonalBestResponse,
    ProjectionRequest,
    ProjectionResponse,
    StatisticsResponse,
    StreakResponse,
    TaskResponse,
)
from trade_journal.services.achievements import AchievementTracker
from trade_journal.services.analytics import TradeAnalytics, account_growth
from trade_journal.services.comparison import PeriodComparison
from trade_journal.services.filters import (
    available_setups,
    available_symbols,
    available_tags,
    filter_trades,
)
from trade_journal.services.normalization import normalize_journal_entries, normalize_trades
from trade_journal.services.personal_bests import PersonalBests
from trade_journal.services.projection import GrowthProjector
from trade_journal.services.settings_migrations import JournalSettings
from trade_journal.services.settings_store import SettingsStore
from trade_journal.services.streaks import StreakTracker
from trade_journal.services.tasks import TaskDetector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


class RequestContext:
    """Normalized records plus the settings a request is evaluated under."""

    def __init__(
        self,
        all_trades: list[Trade],
        trades: list[Trade],
        journal_entries: list[JournalEntry],
        journal_settings: JournalSettings,
        display_mode: DisplayMode,
        today: date,
    ):
        self.all_trades = all_trades
        self.trades = trades
        self.journal_entries = journal_entries
        self.journal_settings = journal_settings
        self.display_mode = display_mode
        self.today = today


async def build_context(
    request: AnalyticsRequest, store: SettingsStore, db_session: AsyncSession
) -> RequestContext:
    try:
        all_trades = normalize_trades(request.trades)
        journal_entries = normalize_journal_entries(request.journal_entries)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    journal_settings = await store.load(db_session)
    trades = filter_trades(all_trades, journal_entries, request.filters)
    if request.filters is not None:
        logger.debug("Filters kept %d of %d trades", len(trades), len(all_trades))

    return RequestContext(
        all_trades=all_trades,
        trades=trades,
        journal_entries=journal_entries,
        journal_settings=journal_settings,
        display_mode=request.display_mode or journal_settings.display_mode,
        today=request.as_of or date.today(),
    )


@router.post("", response_model=StatisticsResponse)
async def get_statistics(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    analytics: TradeAnalytics = Depends(get_trade_analytics),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    result = analytics.calculate(ctx.trades)
    return StatisticsResponse(
        **result,
        cumulative_pnl=analytics.cumulative_pnl(ctx.trades, use_rr=ctx.display_mode == DisplayMode.RR),
        display_mode=ctx.display_mode,
        account=account_growth(ctx.journal_settings.starting_balance, result["total_pnl"]),
        available_symbols=available_symbols(ctx.all_trades),
        available_setups=available_setups(ctx.all_trades),
        available_tags=available_tags(ctx.all_trades),
    )


@router.post("/personal-bests", response_model=list[PersonalBestResponse])
async def get_personal_bests_endpoint(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    personal_bests: PersonalBests = Depends(get_personal_bests),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    records = personal_bests.calculate(ctx.trades, ctx.display_mode, ctx.today)
    return [
        PersonalBestResponse(**{**r, "trades": [t.model_dump(mode="json") for t in r["trades"]]})
        for r in records
    ]


@router.post("/achievements", response_model=list[AchievementResponse])
async def get_achievements(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    analytics: TradeAnalytics = Depends(get_trade_analytics),
    tracker: AchievementTracker = Depends(get_achievement_tracker),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    stats = analytics.calculate(ctx.trades)
    return [AchievementResponse(**a) for a in tracker.calculate(ctx.trades, stats, ctx.journal_entries)]


@router.post("/streaks", response_model=StreakResponse)
async def get_streaks(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    tracker: StreakTracker = Depends(get_streak_tracker),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    return StreakResponse(**tracker.calculate(ctx.trades, ctx.journal_entries, ctx.display_mode))


@router.post("/comparison", response_model=ComparisonResponse)
async def get_comparison(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    comparison: PeriodComparison = Depends(get_period_comparison),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    return ComparisonResponse(**comparison.calculate(ctx.trades, ctx.display_mode, ctx.today))


@router.post("/tasks", response_model=list[TaskResponse])
async def get_tasks(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    detector: TaskDetector = Depends(get_task_detector),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)

    tasks = detector.detect(ctx.trades, ctx.journal_entries, ctx.display_mode, ctx.today)
    return [TaskResponse(**t) for t in tasks]


async def _projection(
    request: ProjectionRequest,
    settings: Settings,
    db_session,
    store: SettingsStore,
    analytics: TradeAnalytics,
    projector: GrowthProjector,
) -> dict:
    days = request.days or settings.default_projection_days
    if days > settings.max_projection_days:
        raise HTTPException(
            status_code=422,
            detail=f"Projection horizon {days} exceeds maximum of {settings.max_projection_days} days",
        )

    ctx = await build_context(request, store, db_session)
    starting_balance = (
        request.starting_balance if request.starting_balance is not None
        else ctx.journal_settings.starting_balance
    )

    stats = analytics.calculate(ctx.trades)
    projection = projector.project(
        ctx.trades,
        stats,
        starting_balance=starting_balance,
        days=days,
        display_mode=ctx.display_mode,
        target_win_rate=request.target_win_rate,
        target_rr=request.target_rr,
        today=ctx.today,
    )
    projection["risk_of_ruin"] = projector.risk_of_ruin(stats, settings.risk_per_trade)
    return projection


@router.post("/projection", response_model=ProjectionResponse)
async def get_projection(
    request: ProjectionRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    analytics: TradeAnalytics = Depends(get_trade_analytics),
    projector: GrowthProjector = Depends(get_growth_projector),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    projection = await _projection(request, settings, db_session, store, analytics, projector)
    return ProjectionResponse(**projection)


@router.post("/projection/csv", response_class=PlainTextResponse)
async def get_projection_csv(
    request: ProjectionRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
    analytics: TradeAnalytics = Depends(get_trade_analytics),
    projector: GrowthProjector = Depends(get_growth_projector),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    projection = await _projection(request, settings, db_session, store, analytics, projector)
    return PlainTextResponse(projector.to_csv(projection), media_type="text/csv")
