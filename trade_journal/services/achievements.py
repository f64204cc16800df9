"""Milestone catalog evaluated against the current trade and journal history."""

import logging
from collections import defaultdict
from collections.abc import Iterable

from trade_journal.models.records import JournalEntry, Trade

logger = logging.getLogger(__name__)

TRADE_MILESTONES = (
    ("trades-10", "First 10 Trades", "Start your trading journey", 10),
    ("trades-50", "50 Trades Logged", "Building experience and data", 50),
    ("trades-100", "100 Trades Club", "Significant trading experience", 100),
)
JOURNAL_TARGET = 30
SYSTEM_DAYS_TARGET = 10
WIN_RATE_TARGET = 60.0
WIN_RATE_MIN_TRADES = 20
PROFIT_FACTOR_TARGET = 2.0
PROFIT_FACTOR_MIN_TRADES = 30


def _progress(current: float, target: float) -> float:
    if target <= 0:
        return 100.0
    return round(min(current / target * 100, 100.0), 2)


def _achievement(achievement_id, title, description, unlocked, progress, current, target) -> dict:
    return {
        "id": achievement_id,
        "title": title,
        "description": description,
        "is_unlocked": unlocked,
        "progress": progress,
        "current": round(current, 2),
        "target": target,
    }


class AchievementTracker:
    def calculate(
        self,
        trades: Iterable[Trade],
        stats: dict,
        journal_entries: Iterable[JournalEntry] = (),
    ) -> list[dict]:
        """Evaluate the full catalog. Every achievement is always present."""
        trades = [t for t in trades if t.is_closed]
        journal_entries = list(journal_entries)
        trade_count = stats["total_trades"]

        achievements = [
            _achievement(
                achievement_id, title, description,
                trade_count >= target, _progress(trade_count, target), trade_count, target,
            )
            for achievement_id, title, description, target in TRADE_MILESTONES
        ]
        achievements.append(self._profitable_month(trades, stats))
        achievements.append(self._journaling(journal_entries))
        achievements.append(self._system_discipline(journal_entries))
        achievements.append(self._gated(
            "winrate-60", "Consistent Winner", "60%+ win rate with 20+ trades",
            trade_count, WIN_RATE_MIN_TRADES, stats["win_rate"], WIN_RATE_TARGET,
        ))
        achievements.append(self._gated(
            "pf-2", "Strong Edge", "2.0+ profit factor with 30+ trades",
            trade_count, PROFIT_FACTOR_MIN_TRADES, stats["profit_factor"], PROFIT_FACTOR_TARGET,
        ))

        logger.debug("%d of %d achievements unlocked", sum(a["is_unlocked"] for a in achievements), len(achievements))
        return achievements

    def _profitable_month(self, trades: list[Trade], stats: dict) -> dict:
        monthly: dict[str, float] = defaultdict(float)
        for t in trades:
            monthly[t.close_date.strftime("%Y-%m")] += t.pnl
        unlocked = any(pnl > 0 for pnl in monthly.values())
        if unlocked:
            progress = 100.0
        else:
            progress = 50.0 if stats["total_pnl"] > 0 else 0.0
        return _achievement(
            "profitable-month", "Profitable Month", "First month in the green",
            unlocked, progress, 1 if unlocked else 0, 1,
        )

    def _journaling(self, entries: list[JournalEntry]) -> dict:
        count = len(entries)
        return _achievement(
            "journal-30", "Consistent Journaler", "Log 30 daily journal entries",
            count >= JOURNAL_TARGET, _progress(count, JOURNAL_TARGET), count, JOURNAL_TARGET,
        )

    def _system_discipline(self, entries: list[JournalEntry]) -> dict:
        # Most recent trading days first; stop at the first day the system was broken
        streak = 0
        for entry in sorted((e for e in entries if e.did_trade), key=lambda e: e.date, reverse=True):
            if not entry.followed_system:
                break
            streak += 1
        return _achievement(
            "system-10", "System Discipline", "10 consecutive trading days following your system",
            streak >= SYSTEM_DAYS_TARGET, _progress(streak, SYSTEM_DAYS_TARGET), streak, SYSTEM_DAYS_TARGET,
        )

    def _gated(self, achievement_id, title, description, trade_count, min_trades, metric, metric_target) -> dict:
        """Two-phase progress: sample size first, then the metric itself."""
        if trade_count < min_trades:
            return _achievement(
                achievement_id, title, description,
                False, _progress(trade_count, min_trades), trade_count, min_trades,
            ) | {"phase": "sample_size"}
        return _achievement(
            achievement_id, title, description,
            metric >= metric_target, _progress(metric, metric_target), metric, metric_target,
        ) | {"phase": "metric"}
