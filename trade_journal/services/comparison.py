"""Period-over-period metric deltas (month, rolling quarter, recent vs history)."""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from trade_journal.models.records import DisplayMode, Trade
from trade_journal.services.analytics import TradeAnalytics

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
QUARTER_MONTHS = 3


def shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's length."""
    month_index = day.year * 12 + day.month - 1 + months
    year, month = divmod(month_index, 12)
    month += 1
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def calculate_change(current: float, previous: float) -> tuple[float, float, str]:
    change = current - previous
    change_percent = change / abs(previous) * 100 if previous != 0 else 0.0
    trend = "up" if change > 0 else "down" if change < 0 else "neutral"
    return change, change_percent, trend


def create_comparison(
    metric: str,
    label: str,
    current: float,
    previous: float,
    current_label: str,
    previous_label: str,
    higher_is_better: bool = True,
) -> dict:
    change, change_percent, trend = calculate_change(current, previous)
    is_positive = trend == "up" if higher_is_better else trend == "down"
    return {
        "metric": metric,
        "label": label,
        "current": round(current, 2),
        "previous": round(previous, 2),
        "change": round(change, 2),
        "change_percent": round(change_percent, 2),
        "trend": trend,
        "is_positive": is_positive,
        "current_label": current_label,
        "previous_label": previous_label,
    }


class PeriodComparison:
    def __init__(self, analytics: TradeAnalytics | None = None):
        self.analytics = analytics or TradeAnalytics()

    def calculate(
        self,
        trades: Iterable[Trade],
        display_mode: DisplayMode = DisplayMode.PNL,
        today: date | None = None,
    ) -> dict:
        trades = [t for t in trades if t.is_closed]
        today = today or date.today()

        month_start = today.replace(day=1)
        previous_month_start = shift_months(month_start, -1)
        quarter_start = shift_months(today, -QUARTER_MONTHS)
        previous_quarter_start = shift_months(today, -2 * QUARTER_MONTHS)
        recent_start = today - timedelta(days=RECENT_DAYS)

        def between(start: date, end: date | None) -> list[Trade]:
            return [t for t in trades if t.date >= start and (end is None or t.date < end)]

        month_labels = (month_start.strftime("%B %Y"), previous_month_start.strftime("%B %Y"))
        result = {
            "month_over_month": self._family(
                between(month_start, None),
                between(previous_month_start, month_start),
                display_mode, *month_labels,
            ),
            "quarter_over_quarter": self._family(
                between(quarter_start, None),
                between(previous_quarter_start, quarter_start),
                display_mode, "Last 3 months", "Prior 3 months",
            ),
            "recent_vs_historical": self._family(
                [t for t in trades if t.date >= recent_start],
                [t for t in trades if t.date < recent_start],
                display_mode, f"Last {RECENT_DAYS} days", "Historical",
            ),
            "period": {"current": month_labels[0], "previous": month_labels[1]},
        }
        logger.debug(
            "Period comparison as of %s: %d/%d/%d metrics",
            today,
            len(result["month_over_month"]),
            len(result["quarter_over_quarter"]),
            len(result["recent_vs_historical"]),
        )
        return result

    def _family(
        self,
        current_trades: list[Trade],
        previous_trades: list[Trade],
        display_mode: DisplayMode,
        current_label: str,
        previous_label: str,
    ) -> list[dict]:
        current = self.analytics.calculate(current_trades)
        previous = self.analytics.calculate(previous_trades)
        use_rr = display_mode == DisplayMode.RR

        total_key, avg_key = ("total_rr", "expectancy_rr") if use_rr else ("total_pnl", "expectancy")
        total_label, avg_label = ("Total R:R", "Avg R:R") if use_rr else ("Total P&L", "Avg Trade")

        comparisons = [
            create_comparison(total_label, total_label, current[total_key], previous[total_key], current_label, previous_label),
            create_comparison("Win Rate", "Win Rate", current["win_rate"], previous["win_rate"], current_label, previous_label),
            create_comparison("Avg Trade", avg_label, current[avg_key], previous[avg_key], current_label, previous_label),
            create_comparison(
                "Total Trades", "Total Trades", current["total_trades"], previous["total_trades"],
                current_label, previous_label,
            ),
        ]
        return [c for c in comparisons if c["current"] != 0 or c["previous"] != 0]
