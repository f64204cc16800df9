import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from trade_journal.models.records import JournalEntry, Trade

logger = logging.getLogger(__name__)

# Reported instead of infinity when there are wins but no losses.
PROFIT_FACTOR_CAP = 999.99

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross profit / gross loss magnitude, capped when there are no losses."""
    if gross_loss > 0:
        return gross_profit / gross_loss
    if gross_profit > 0:
        return PROFIT_FACTOR_CAP
    return 0.0


def daily_totals(trades: Iterable[Trade], use_rr: bool = False) -> dict[date, float]:
    """Sum P&L (or R) per close date, in chronological order."""
    totals: dict[date, float] = defaultdict(float)
    for t in trades:
        totals[t.close_date] += (t.rr or 0.0) if use_rr else t.pnl
    return dict(sorted(totals.items()))


def account_growth(starting_balance: float, total_pnl: float) -> dict:
    current_balance = starting_balance + total_pnl
    growth = (current_balance - starting_balance) / starting_balance * 100 if starting_balance else 0.0
    return {
        "starting_balance": round(starting_balance, 2),
        "current_balance": round(current_balance, 2),
        "growth_percent": round(growth, 2),
    }


class TradeAnalytics:
    """Full performance metrics over a set of trade records."""

    def calculate(self, trades: Iterable[Trade]) -> dict:
        """Calculate aggregate statistics from closed trades.

        Open trades are ignored. Every P&L metric has an R-multiple twin
        (``*_rr``); the caller picks which family to show.
        """
        closed = [t for t in trades if t.is_closed]
        if not closed:
            return self._empty_result()

        ordered = sorted(closed, key=lambda t: t.close_date)

        wins = [t for t in closed if t.pnl > 0]
        losses = [t for t in closed if t.pnl <= 0]

        total = len(closed)
        win_count = len(wins)
        loss_count = len(losses)

        total_pnl = sum(t.pnl for t in closed)
        gross_profit = sum(t.pnl for t in wins)
        gross_loss = abs(sum(t.pnl for t in losses))

        # R family: missing R counts as 0 in sums, but is left out of averages
        total_rr = sum(t.rr or 0.0 for t in closed)
        rr_values = [t.rr for t in closed if t.rr is not None]
        win_rrs = [t.rr for t in wins if t.rr is not None]
        loss_rrs = [t.rr for t in losses if t.rr is not None]
        gross_profit_rr = sum(t.rr or 0.0 for t in wins)
        gross_loss_rr = abs(sum(t.rr or 0.0 for t in losses))

        daily_pnl = daily_totals(ordered)
        daily_rr = daily_totals(ordered, use_rr=True)
        trading_days = len(daily_pnl)

        current_streak, max_win_streak, max_loss_streak = self._calculate_streaks(ordered)

        max_drawdown, max_drawdown_duration, recovery_time = self._calculate_drawdown(daily_pnl)
        max_drawdown_rr, _, _ = self._calculate_drawdown(daily_rr)

        result = {
            "total_trades": total,
            "winning_trades": win_count,
            "losing_trades": loss_count,
            "win_rate": round(win_count / total * 100, 2),
            "total_pnl": round(total_pnl, 2),
            "total_rr": round(total_rr, 2),
            "avg_win": round(gross_profit / win_count, 2) if wins else 0.0,
            "avg_win_rr": round(sum(win_rrs) / len(win_rrs), 2) if win_rrs else 0.0,
            "avg_loss": round(sum(t.pnl for t in losses) / loss_count, 2) if losses else 0.0,
            "avg_loss_rr": round(sum(loss_rrs) / len(loss_rrs), 2) if loss_rrs else 0.0,
            "avg_rr": round(sum(rr_values) / len(rr_values), 2) if rr_values else 0.0,
            "best_rr": round(max(t.rr or 0.0 for t in closed), 2),
            "largest_win": round(max(t.pnl for t in wins), 2) if wins else 0.0,
            "largest_win_rr": round(max(win_rrs), 2) if win_rrs else 0.0,
            "largest_loss": round(min(t.pnl for t in losses), 2) if losses else 0.0,
            "largest_loss_rr": round(min(loss_rrs), 2) if loss_rrs else 0.0,
            "profit_factor": round(profit_factor(gross_profit, gross_loss), 2),
            "profit_factor_rr": round(profit_factor(gross_profit_rr, gross_loss_rr), 2),
            "avg_daily_pnl": round(total_pnl / trading_days, 2),
            "avg_daily_rr": round(total_rr / trading_days, 2),
            "best_day": round(max(daily_pnl.values()), 2),
            "best_day_rr": round(max(daily_rr.values()), 2),
            "worst_day": round(min(daily_pnl.values()), 2),
            "worst_day_rr": round(min(daily_rr.values()), 2),
            "trading_days": trading_days,
            "current_streak": current_streak,
            "longest_win_streak": max_win_streak,
            "longest_lose_streak": max_loss_streak,
            "expectancy": round(total_pnl / total, 2),
            "expectancy_rr": round(total_rr / total, 2),
            "max_drawdown": round(max_drawdown, 2),
            "max_drawdown_rr": round(max_drawdown_rr, 2),
            "max_drawdown_duration": max_drawdown_duration,
            "recovery_time": round(recovery_time, 2),
            "performance_by_day": self._per_weekday_breakdown(closed),
            "performance_by_setup": self._per_setup_breakdown(closed),
            "daily_pnl": self._time_pnl(closed, "day"),
            "weekly_pnl": self._time_pnl(closed, "week"),
            "monthly_pnl": self._time_pnl(closed, "month"),
        }
        logger.debug(
            "Statistics over %d closed trades (%d days): pnl=%.2f win_rate=%.2f",
            total, trading_days, total_pnl, result["win_rate"],
        )
        return result

    def cumulative_pnl(self, trades: Iterable[Trade], use_rr: bool = False) -> list[dict]:
        """Equity curve: running total of daily P&L (or R) over closed trades."""
        curve = []
        running = 0.0
        key = "rr" if use_rr else "pnl"
        for day, value in daily_totals((t for t in trades if t.is_closed), use_rr).items():
            running += value
            curve.append({"date": day.isoformat(), key: round(running, 2)})
        return curve

    def daily_data(self, trades: Iterable[Trade], journal_entries: Iterable[JournalEntry]) -> dict[date, dict]:
        """Group trades (by entry date) and journal entries per calendar day."""
        days: dict[date, dict] = {}
        for t in trades:
            day = days.setdefault(t.date, {"date": t.date, "trades": [], "total_pnl": 0.0, "journal_entry": None})
            day["trades"].append(t)
            day["total_pnl"] += t.pnl
        for entry in journal_entries:
            day = days.setdefault(entry.date, {"date": entry.date, "trades": [], "total_pnl": 0.0, "journal_entry": None})
            day["journal_entry"] = entry
        return days

    def _calculate_streaks(self, ordered: list[Trade]) -> tuple[int, int, int]:
        """Current streak (+wins / -losses), longest win streak, longest loss streak."""
        max_win = 0
        max_loss = 0
        win_streak = 0
        loss_streak = 0

        for t in ordered:
            if t.pnl > 0:
                win_streak += 1
                loss_streak = 0
                max_win = max(max_win, win_streak)
            else:
                loss_streak += 1
                win_streak = 0
                max_loss = max(max_loss, loss_streak)

        current = win_streak if win_streak > 0 else -loss_streak
        return current, max_win, max_loss

    def _calculate_drawdown(self, daily: dict[date, float]) -> tuple[float, int, float]:
        """Max drawdown, longest span under water (days), mean trough-to-recovery days.

        The curve starts at 0, so a losing first day is already a drawdown.
        """
        if not daily:
            return 0.0, 0, 0.0

        equity = 0.0
        peak = 0.0
        peak_date = next(iter(daily))
        max_dd = 0.0
        max_duration = 0
        trough_value: float | None = None
        trough_date: date | None = None
        recoveries: list[int] = []

        for day, value in daily.items():
            equity += value
            if equity >= peak:
                if trough_date is not None:
                    recoveries.append((day - trough_date).days)
                    trough_value = None
                    trough_date = None
                peak = equity
                peak_date = day
                continue

            max_dd = max(max_dd, peak - equity)
            max_duration = max(max_duration, (day - peak_date).days)
            if trough_value is None or equity < trough_value:
                trough_value = equity
                trough_date = day

        recovery_time = sum(recoveries) / len(recoveries) if recoveries else 0.0
        return max_dd, max_duration, recovery_time

    def _per_weekday_breakdown(self, trades: list[Trade]) -> dict[str, dict]:
        """Monday..Friday always present; weekend days only when traded."""
        by_day: dict[str, list[Trade]] = {name: [] for name in WEEKDAY_NAMES[:5]}
        for t in trades:
            by_day.setdefault(WEEKDAY_NAMES[t.close_date.weekday()], []).append(t)
        return {day: self._bucket(day_trades) for day, day_trades in by_day.items()}

    def _per_setup_breakdown(self, trades: list[Trade]) -> dict[str, dict]:
        by_setup: dict[str, list[Trade]] = defaultdict(list)
        for t in trades:
            if t.setup:
                by_setup[t.setup].append(t)
        return {setup: self._bucket(setup_trades) for setup, setup_trades in by_setup.items()}

    def _bucket(self, trades: list[Trade]) -> dict:
        total = len(trades)
        wins = [t for t in trades if t.pnl > 0]
        return {
            "trades": total,
            "pnl": round(sum(t.pnl for t in trades), 2),
            "rr": round(sum(t.rr or 0.0 for t in trades), 2),
            "win_rate": round(len(wins) / total * 100, 2) if total > 0 else 0.0,
        }

    def _time_pnl(self, trades: list[Trade], period: str) -> list[dict]:
        """Aggregate P&L and R by day/week/month."""
        grouped: dict[str, list[float]] = defaultdict(lambda: [0.0, 0.0])

        for t in trades:
            dt = t.close_date
            if period == "day":
                key = dt.isoformat()
            elif period == "week":
                key = f"{dt.isocalendar()[0]}-W{dt.isocalendar()[1]:02d}"
            else:  # month
                key = dt.strftime("%Y-%m")
            grouped[key][0] += t.pnl
            grouped[key][1] += t.rr or 0.0

        return [
            {"period": k, "pnl": round(pnl, 2), "rr": round(rr, 2)}
            for k, (pnl, rr) in sorted(grouped.items())
        ]

    def _empty_result(self) -> dict:
        return {
            "total_trades": 0,
            "winning_trades": 0,
            "losing_trades": 0,
            "win_rate": 0.0,
            "total_pnl": 0.0,
            "total_rr": 0.0,
            "avg_win": 0.0,
            "avg_win_rr": 0.0,
            "avg_loss": 0.0,
            "avg_loss_rr": 0.0,
            "avg_rr": 0.0,
            "best_rr": 0.0,
            "largest_win": 0.0,
            "largest_win_rr": 0.0,
            "largest_loss": 0.0,
            "largest_loss_rr": 0.0,
            "profit_factor": 0.0,
            "profit_factor_rr": 0.0,
            "avg_daily_pnl": 0.0,
            "avg_daily_rr": 0.0,
            "best_day": 0.0,
            "best_day_rr": 0.0,
            "worst_day": 0.0,
            "worst_day_rr": 0.0,
            "trading_days": 0,
            "current_streak": 0,
            "longest_win_streak": 0,
            "longest_lose_streak": 0,
            "expectancy": 0.0,
            "expectancy_rr": 0.0,
            "max_drawdown": 0.0,
            "max_drawdown_rr": 0.0,
            "max_drawdown_duration": 0,
            "recovery_time": 0.0,
            "performance_by_day": self._per_weekday_breakdown([]),
            "performance_by_setup": {},
            "daily_pnl": [],
            "weekly_pnl": [],
            "monthly_pnl": [],
        }
