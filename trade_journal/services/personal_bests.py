import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from trade_journal.models.records import DisplayMode, Trade

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
WIN_RATE_WINDOW = 10
MIN_WIN_STREAK = 3
MIN_TRADES_FOR_AVG_DAY = 2


class PersonalBests:
    """Superlative records (best trade, best day, ...) over closed trades.

    A record is only returned when the event it describes actually happened.
    Ties keep the first period seen in chronological order.
    """

    def calculate(
        self,
        trades: Iterable[Trade],
        display_mode: DisplayMode = DisplayMode.PNL,
        today: date | None = None,
    ) -> list[dict]:
        closed = sorted((t for t in trades if t.is_closed), key=lambda t: t.close_date)
        if not closed:
            return []

        today = today or date.today()
        cutoff = today - timedelta(days=RECENT_DAYS)
        use_rr = display_mode == DisplayMode.RR

        def value(t: Trade) -> float:
            return (t.rr or 0.0) if use_rr else t.pnl

        def fmt(amount: float) -> str:
            return f"{amount:.2f}R" if use_rr else f"{amount:,.2f}"

        days = self._group(closed, lambda t: t.close_date)

        records = [
            self._best_trade(closed, value, fmt, cutoff),
            self._best_day(days, value, fmt, cutoff),
            self._best_rr_trade(closed, cutoff),
            self._best_win_rate(closed, cutoff),
            self._longest_win_streak(closed, cutoff),
            self._best_average_day(days, value, fmt, cutoff),
            self._best_recovery(days, value, fmt, cutoff),
            self._best_week(closed, value, fmt, cutoff),
            self._best_month(closed, value, fmt, cutoff),
        ]
        bests = [r for r in records if r is not None]
        logger.debug("Found %d personal bests over %d trades", len(bests), len(closed))
        return bests

    def _best_trade(self, trades, value, fmt, cutoff) -> dict:
        best = trades[0]
        for t in trades[1:]:
            if value(t) > value(best):
                best = t
        return self._record(
            "best-single-trade", "Best Trade", best.label, value(best), fmt(value(best)),
            best.close_date, [best], "performance", cutoff,
        )

    def _best_day(self, days, value, fmt, cutoff) -> dict | None:
        best_day, best_value = None, 0.0
        for day, day_trades in days.items():
            total = sum(value(t) for t in day_trades)
            if total > best_value:
                best_day, best_value = day, total
        if best_day is None:
            return None
        day_trades = days[best_day]
        return self._record(
            "best-trading-day", "Best Day", _plural(len(day_trades), "trade"), best_value, fmt(best_value),
            best_day, day_trades, "performance", cutoff,
        )

    def _best_rr_trade(self, trades, cutoff) -> dict | None:
        with_rr = [t for t in trades if t.rr is not None]
        if not with_rr:
            return None
        best = with_rr[0]
        for t in with_rr[1:]:
            if t.rr > best.rr:
                best = t
        return self._record(
            "best-rr-trade", "Best R:R", best.label, best.rr, f"{best.rr:.2f}R",
            best.close_date, [best], "performance", cutoff,
        )

    def _best_win_rate(self, trades, cutoff) -> dict | None:
        """Best win rate over any run of exactly 10 consecutive trades."""
        if len(trades) < WIN_RATE_WINDOW:
            return None
        best_rate, best_window = 0.0, None
        for i in range(len(trades) - WIN_RATE_WINDOW + 1):
            window = trades[i:i + WIN_RATE_WINDOW]
            rate = sum(1 for t in window if t.pnl > 0) / WIN_RATE_WINDOW * 100
            if rate > best_rate:
                best_rate, best_window = rate, window
        if best_window is None:
            return None
        return self._record(
            "best-win-rate", "Best Win Rate", f"{WIN_RATE_WINDOW}-trade period", best_rate, f"{best_rate:.0f}%",
            best_window[-1].close_date, best_window, "consistency", cutoff,
        )

    def _longest_win_streak(self, trades, cutoff) -> dict | None:
        best: list[Trade] = []
        current: list[Trade] = []
        for t in trades:
            if t.pnl > 0:
                current.append(t)
                if len(current) > len(best):
                    best = list(current)
            else:
                current = []
        if len(best) < MIN_WIN_STREAK:
            return None
        return self._record(
            "longest-win-streak", "Longest Win Streak", f"{len(best)} consecutive wins", len(best),
            f"{len(best)} wins", best[-1].close_date, best, "streak", cutoff, badge="Hot",
        )

    def _best_average_day(self, days, value, fmt, cutoff) -> dict | None:
        best_day, best_avg = None, 0.0
        for day, day_trades in days.items():
            if len(day_trades) < MIN_TRADES_FOR_AVG_DAY:
                continue
            avg = sum(value(t) for t in day_trades) / len(day_trades)
            if avg > best_avg:
                best_day, best_avg = day, avg
        if best_day is None:
            return None
        day_trades = days[best_day]
        return self._record(
            "best-avg-trade", "Best Avg/Trade", _plural(len(day_trades), "trade"), best_avg, fmt(best_avg),
            best_day, day_trades, "consistency", cutoff,
        )

    def _best_recovery(self, days, value, fmt, cutoff) -> dict | None:
        """Largest winning day that directly follows a losing day."""
        ordered_days = sorted(days)
        best_day, best_amount, previous_loss = None, 0.0, 0.0
        for prev_day, day in zip(ordered_days, ordered_days[1:]):
            prev_total = sum(value(t) for t in days[prev_day])
            total = sum(value(t) for t in days[day])
            if prev_total < 0 < total and total > best_amount:
                best_day, best_amount, previous_loss = day, total, abs(prev_total)
        if best_day is None:
            return None
        return self._record(
            "best-recovery", "Best Comeback", f"After {fmt(previous_loss)} loss", best_amount, fmt(best_amount),
            best_day, days[best_day], "performance", cutoff, badge="Strong",
        ) | {"previous_loss": round(previous_loss, 2)}

    def _best_week(self, trades, value, fmt, cutoff) -> dict | None:
        weeks = self._group(trades, lambda t: t.close_date - timedelta(days=t.close_date.weekday()))
        return self._best_period(
            weeks, value, fmt, cutoff, "best-week", "Best Week",
            lambda monday, week_trades: _plural(len(week_trades), "trade"),
        )

    def _best_month(self, trades, value, fmt, cutoff) -> dict | None:
        months = self._group(trades, lambda t: t.close_date.replace(day=1))
        return self._best_period(
            months, value, fmt, cutoff, "best-month", "Best Month",
            lambda first, month_trades: first.strftime("%B %Y"),
        )

    def _best_period(self, periods, value, fmt, cutoff, record_id, title, describe) -> dict | None:
        best_key, best_value = None, 0.0
        for key, period_trades in periods.items():
            total = sum(value(t) for t in period_trades)
            if total > best_value:
                best_key, best_value = key, total
        if best_key is None:
            return None
        period_trades = periods[best_key]
        # Dated by the latest trade in the period, so recency reflects activity
        last_day = max(t.close_date for t in period_trades)
        return self._record(
            record_id, title, describe(best_key, period_trades), best_value, fmt(best_value),
            last_day, period_trades, "volume", cutoff,
        ) | {"period_start": best_key.isoformat()}

    @staticmethod
    def _group(trades: list[Trade], key: Callable[[Trade], date]) -> dict[date, list[Trade]]:
        groups: dict[date, list[Trade]] = {}
        for t in trades:
            groups.setdefault(key(t), []).append(t)
        return groups

    @staticmethod
    def _record(record_id, title, description, value, formatted, day, trades, category, cutoff, badge="New") -> dict:
        is_recent = day >= cutoff
        return {
            "id": record_id,
            "title": title,
            "description": description,
            "value": round(value, 2),
            "formatted_value": formatted,
            "date": day.isoformat(),
            "is_recent": is_recent,
            "category": category,
            "badge": badge if is_recent else None,
            "trades": list(trades),
        }


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"
