"""Current and best-ever streaks across trading and journaling habits.

Trading-day streaks look through weekends: Friday followed by Monday is
consecutive. Journal and system-adherence streaks need literal calendar
adjacency, so a weekend without entries breaks them.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from trade_journal.models.records import DisplayMode, JournalEntry, Trade
from trade_journal.services.analytics import daily_totals

logger = logging.getLogger(__name__)

SATURDAY = 5


def is_next_calendar_day(previous: date, current: date) -> bool:
    return current - previous == timedelta(days=1)


def is_next_trading_day(previous: date, current: date) -> bool:
    """True when only weekend days lie strictly between the two dates."""
    if current <= previous:
        return False
    day = previous + timedelta(days=1)
    while day < current:
        if day.weekday() < SATURDAY:
            return False
        day += timedelta(days=1)
    return True


def run_lengths(dates: Iterable[date], adjacent: Callable[[date, date], bool]) -> tuple[int, int]:
    """(current, best) run of adjacent dates; current ends at the latest date."""
    ordered = sorted(set(dates))
    if not ordered:
        return 0, 0
    best = run = 1
    for previous, current in zip(ordered, ordered[1:]):
        run = run + 1 if adjacent(previous, current) else 1
        best = max(best, run)
    return run, best


class StreakTracker:
    def calculate(
        self,
        trades: Iterable[Trade],
        journal_entries: Iterable[JournalEntry],
        display_mode: DisplayMode = DisplayMode.PNL,
    ) -> dict:
        trades = list(trades)
        journal_entries = list(journal_entries)

        daily = daily_totals((t for t in trades if t.is_closed), use_rr=display_mode == DisplayMode.RR)
        current_win, best_win, current_lose, longest_lose = self._win_lose_days(list(daily.values()))

        trading_current, trading_best = run_lengths((t.date for t in trades), is_next_trading_day)
        journal_current, journal_best = run_lengths((e.date for e in journal_entries), is_next_calendar_day)
        system_current, system_best = run_lengths(
            (e.date for e in journal_entries if e.followed_system), is_next_calendar_day
        )

        return {
            "current_winning_streak": current_win,
            "best_winning_streak": best_win,
            "current_losing_streak": current_lose,
            "longest_losing_streak": longest_lose,
            "trading_days_streak": trading_current,
            "best_trading_days_streak": trading_best,
            "journal_streak": journal_current,
            "best_journal_streak": journal_best,
            "system_adherence_streak": system_current,
            "best_system_adherence_streak": system_best,
        }

    def _win_lose_days(self, daily_values: list[float]) -> tuple[int, int, int, int]:
        """Streaks over traded days by the sign of each day's total (<= 0 loses)."""
        best_win = best_lose = 0
        win_run = lose_run = 0
        for value in daily_values:
            if value > 0:
                win_run += 1
                lose_run = 0
                best_win = max(best_win, win_run)
            else:
                lose_run += 1
                win_run = 0
                best_lose = max(best_lose, lose_run)
        return win_run, best_win, lose_run, best_lose
