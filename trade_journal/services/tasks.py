"""Action items derived from the journal: unfinished trades, journals, streaks."""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta

from trade_journal.models.records import DisplayMode, JournalEntry, Mood, Trade
from trade_journal.services.analytics import TradeAnalytics
from trade_journal.services.streaks import StreakTracker

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
RECENT_TRADES_CHECKED = 10
PAST_JOURNAL_DAYS = 7
STREAK_AT_RISK_MIN = 3


def missing_trade_fields(trade: Trade) -> list[str]:
    missing = []
    if trade.is_closed and trade.exit_price is None:
        missing.append("Exit Price")
    if trade.is_closed and not trade.exit_time:
        missing.append("Exit Time")
    if not trade.notes:
        missing.append("Notes")
    if not trade.setup:
        missing.append("Setup")
    if not trade.tags:
        missing.append("Tags")
    if not trade.target:
        missing.append("Target")
    if not trade.stop_loss:
        missing.append("Stop Loss")
    if not trade.entry_time:
        missing.append("Entry Time")
    if not trade.screenshot_before:
        missing.append("Entry Screenshot")
    if trade.is_closed and not trade.screenshot_after:
        missing.append("Exit Screenshot")
    return missing


def missing_journal_fields(entry: JournalEntry | None) -> list[str]:
    if entry is None:
        return ["Entire Entry"]
    missing = []
    if not entry.notes.strip():
        missing.append("Notes")
    if not entry.lessons_learned.strip():
        missing.append("Lessons")
    if not entry.market_conditions.strip():
        missing.append("Market Conditions")
    if entry.mood == Mood.NEUTRAL:
        missing.append("Mood")
    return missing


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


class TaskDetector:
    def __init__(self, analytics: TradeAnalytics | None = None, streaks: StreakTracker | None = None):
        self.analytics = analytics or TradeAnalytics()
        self.streaks = streaks or StreakTracker()

    def detect(
        self,
        trades: Iterable[Trade],
        journal_entries: Iterable[JournalEntry],
        display_mode: DisplayMode = DisplayMode.PNL,
        today: date | None = None,
    ) -> list[dict]:
        """Detect tasks and order them high > medium > low, keeping detection order within a tier."""
        trades = list(trades)
        journal_entries = list(journal_entries)
        today = today or date.today()
        days = self.analytics.daily_data(trades, journal_entries)

        tasks = []
        for task in (
            self._open_trades(trades),
            self._incomplete_trades(trades),
            self._today_journal(days, today),
            self._past_journals(days, today),
            self._journal_streak_at_risk(trades, journal_entries, display_mode, today),
        ):
            if task is not None:
                tasks.append(task)

        tasks.sort(key=lambda t: PRIORITY_ORDER[t["priority"]])
        logger.debug("Detected %d tasks", len(tasks))
        return tasks

    def _open_trades(self, trades: list[Trade]) -> dict | None:
        needing_exit = [t for t in trades if t.is_open and t.exit_price is None]
        if not needing_exit:
            return None
        count = len(needing_exit)
        return {
            "id": "close-open-trades",
            "type": "open-trade",
            "priority": "high",
            "title": f"{count} open trade{_plural(count, ' needs', 's need')} closing",
            "description": " • ".join(t.label for t in needing_exit[:2]),
            "action": {"label": "Add Exit", "route": {"type": "add-trade", "trade_id": needing_exit[0].id}},
            "count": count,
            "badges": [
                {"label": "Exit Price", "variant": "error"},
                {"label": "Exit Time", "variant": "error"},
            ],
            "related_items": [
                {"id": t.id, "label": t.label, "missing_fields": ["Exit Price", "Exit Time"]}
                for t in needing_exit
            ],
        }

    def _incomplete_trades(self, trades: list[Trade]) -> dict | None:
        recent = sorted((t for t in trades if t.is_closed), key=lambda t: t.date, reverse=True)
        incomplete = []
        for t in recent[:RECENT_TRADES_CHECKED]:
            missing = missing_trade_fields(t)
            if missing:
                incomplete.append((t, missing))
        if not incomplete:
            return None

        field_counts = Counter(field for _, missing in incomplete for field in missing)
        count = len(incomplete)
        return {
            "id": "incomplete-trade-data",
            "type": "incomplete-data",
            "priority": "medium",
            "title": f"{count} trade{_plural(count, ' has', 's have')} incomplete data",
            "description": "Complete your records for better insights",
            "action": {"label": "Complete", "route": {"type": "add-trade", "trade_id": incomplete[0][0].id}},
            "count": count,
            "badges": [{"label": field, "variant": "warning"} for field, _ in field_counts.most_common(3)],
            "related_items": [
                {"id": t.id, "label": f"{t.symbol} • {t.date.strftime('%b')} {t.date.day}", "missing_fields": missing}
                for t, missing in incomplete[:5]
            ],
        }

    def _today_journal(self, days: dict, today: date) -> dict | None:
        day = days.get(today)
        if day is None or not day["trades"]:
            return None
        entry = day["journal_entry"]
        missing = missing_journal_fields(entry)
        if not missing:
            return None
        trade_count = len(day["trades"])
        return {
            "id": "complete-today-journal",
            "type": "journal",
            "priority": "high",
            "title": "Write today's journal" if entry is None else "Complete today's journal",
            "description": f"{trade_count} trade{_plural(trade_count, '', 's')} recorded today",
            "action": {"label": "Complete", "route": {"type": "add-journal", "date": today.isoformat()}},
            "badges": [
                {"label": field, "variant": "error" if field == "Entire Entry" else "warning"}
                for field in missing[:3]
            ],
            "missing_fields": missing,
        }

    def _past_journals(self, days: dict, today: date) -> dict | None:
        incomplete = []
        for offset in range(1, PAST_JOURNAL_DAYS + 1):
            day = days.get(today - timedelta(days=offset))
            if day is None or not day["trades"]:
                continue
            missing = missing_journal_fields(day["journal_entry"])
            if missing:
                incomplete.append((day["date"], missing, day["journal_entry"]))
        if not incomplete:
            return None

        count = len(incomplete)
        missing_entirely = sum(1 for _, _, entry in incomplete if entry is None)
        return {
            "id": "past-journals-incomplete",
            "type": "journal",
            "priority": "medium",
            "title": f"{count} past journal{_plural(count, ' needs', 's need')} attention",
            "description": (
                f"{missing_entirely} missing entirely" if missing_entirely else "Complete for better insights"
            ),
            "action": {"label": "Review", "route": {"type": "add-journal", "date": incomplete[0][0].isoformat()}},
            "count": count,
            "badges": (
                [{"label": "Missing", "variant": "error"}]
                if missing_entirely
                else [{"label": "Incomplete", "variant": "warning"}]
            ),
            "related_items": [
                {"id": day.isoformat(), "label": day.isoformat(), "missing_fields": missing}
                for day, missing, _ in incomplete
            ],
        }

    def _journal_streak_at_risk(self, trades, journal_entries, display_mode, today) -> dict | None:
        if not journal_entries:
            return None
        streak = self.streaks.calculate(trades, journal_entries, display_mode)["journal_streak"]
        if streak < STREAK_AT_RISK_MIN:
            return None
        last_entry = max(e.date for e in journal_entries)
        has_today = any(e.date == today for e in journal_entries)
        if (today - last_entry).days != 1 or has_today:
            return None
        return {
            "id": "journal-streak-risk",
            "type": "streak",
            "priority": "medium",
            "title": f"{streak}-day journal streak at risk",
            "description": "Keep your streak alive",
            "action": {"label": "Write Journal", "route": {"type": "add-journal", "date": today.isoformat()}},
        }
