from fastapi import Depends, Request

from trade_journal.config import Settings
from trade_journal.services.achievements import AchievementTracker
from trade_journal.services.analytics import TradeAnalytics
from trade_journal.services.comparison import PeriodComparison
from trade_journal.services.personal_bests import PersonalBests
from trade_journal.services.projection import GrowthProjector
from trade_journal.services.settings_store import SettingsStore
from trade_journal.services.streaks import StreakTracker
from trade_journal.services.tasks import TaskDetector


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request):
    async with request.app.state.async_session() as session:
        yield session


def get_trade_analytics() -> TradeAnalytics:
    return TradeAnalytics()


def get_personal_bests() -> PersonalBests:
    return PersonalBests()


def get_achievement_tracker() -> AchievementTracker:
    return AchievementTracker()


def get_streak_tracker() -> StreakTracker:
    return StreakTracker()


def get_period_comparison(
    analytics: TradeAnalytics = Depends(get_trade_analytics),
) -> PeriodComparison:
    return PeriodComparison(analytics)


def get_task_detector(
    analytics: TradeAnalytics = Depends(get_trade_analytics),
    streaks: StreakTracker = Depends(get_streak_tracker),
) -> TaskDetector:
    return TaskDetector(analytics, streaks)


def get_growth_projector() -> GrowthProjector:
    return GrowthProjector()


def get_settings_store(
    settings: Settings = Depends(get_settings),
) -> SettingsStore:
    return SettingsStore(default_starting_balance=settings.default_starting_balance)
