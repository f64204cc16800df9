"""Forward account-growth projection, what-if scenarios and risk of ruin."""

import csv
import io
import logging
import math
from collections.abc import Iterable
from datetime import date, timedelta

from trade_journal.models.records import DisplayMode, Trade
from trade_journal.services.analytics import daily_totals

logger = logging.getLogger(__name__)

# Project at 80% of the observed daily return to avoid overstating confidence
DAMPING = 0.8
DEFAULT_PAYOFF_RATIO = 1.5
MIN_TRADES_FOR_RISK = 10
MAX_RISK_OF_RUIN = 95.0

DATA_QUALITY_TIERS = (
    (10, "limited", "low", "Need at least 10 trades for meaningful projections. Keep trading!"),
    (30, "developing", "medium", "Good start! More data will improve projection accuracy."),
    (100, "reliable", "high", "Solid data foundation. Projections are reliable."),
)


def data_quality(trade_count: int) -> dict:
    for limit, label, confidence, message in DATA_QUALITY_TIERS:
        if trade_count < limit:
            return {"label": label, "confidence": confidence, "message": message}
    return {
        "label": "excellent",
        "confidence": "very-high",
        "message": "Outstanding dataset. Projections are highly accurate.",
    }


def compound(value: float, rate_percent: float, day: int) -> float:
    """Compound ``value`` for ``day`` days; overflow or NaN falls back to ``value``."""
    try:
        projected = value * (1 + rate_percent / 100) ** day
    except OverflowError:
        return value
    if not math.isfinite(projected):
        return value
    return projected


def project_curve(value: float, rate_percent: float, days: int, start: date) -> list[tuple[int, date, float]]:
    return [
        (day, start + timedelta(days=day), round(compound(value, rate_percent, day)))
        for day in range(days + 1)
    ]


class GrowthProjector:
    def project(
        self,
        trades: Iterable[Trade],
        stats: dict,
        starting_balance: float,
        days: int,
        display_mode: DisplayMode = DisplayMode.PNL,
        target_win_rate: float | None = None,
        target_rr: float | None = None,
        today: date | None = None,
    ) -> dict:
        """Project the account value ``days`` ahead from the current daily return.

        In R mode the "account" is cumulative R starting from 0, matching how
        R-based journals display equity.
        """
        trades = [t for t in trades if t.is_closed]
        today = today or date.today()
        use_rr = display_mode == DisplayMode.RR

        assumed_start = 0.0 if use_rr else starting_balance
        current_value = assumed_start + (stats["total_rr"] if use_rr else stats["total_pnl"])

        trading_days = len(daily_totals(trades, use_rr))
        avg_daily_return = (stats["avg_daily_rr"] if use_rr else stats["avg_daily_pnl"]) if trading_days else 0.0
        if use_rr:
            avg_daily_percent = avg_daily_return
        else:
            avg_daily_percent = avg_daily_return / assumed_start * 100 if assumed_start > 0 else 0.0
        projection_rate = avg_daily_percent * DAMPING

        curve = project_curve(current_value, projection_rate, days, today)
        end_value = curve[-1][2]
        gain = end_value - current_value

        result = {
            "current_value": round(current_value, 2),
            "starting_balance": round(assumed_start, 2),
            "trading_days": trading_days,
            "avg_daily_return": round(avg_daily_return, 2),
            "projection_rate": round(projection_rate, 4),
            "days": days,
            "data": [{"day": d, "date": dt.isoformat(), "current": v} for d, dt, v in curve],
            "projected_end_value": end_value,
            "projected_gain": round(gain, 2),
            "projected_gain_percent": round(gain / current_value * 100, 2) if current_value > 0 else 0.0,
            "data_quality": data_quality(len(trades)),
            "what_if": None,
        }

        if target_win_rate is not None or target_rr is not None:
            what_if = self._what_if(
                stats, len(trades), trading_days, current_value, days, today, use_rr,
                target_win_rate, target_rr, end_value,
            )
            for point, (_, _, value) in zip(result["data"], what_if.pop("curve")):
                point["whatif"] = value
            result["what_if"] = what_if

        logger.debug(
            "Projected %d days from %.2f at %.4f%%/day -> %.2f",
            days, current_value, projection_rate, end_value,
        )
        return result

    def _what_if(
        self, stats, trade_count, trading_days, current_value, days, today, use_rr,
        target_win_rate, target_rr, baseline_end_value,
    ) -> dict:
        """Rebuild expected value per trade from a target win rate and/or R:R."""
        current_payoff = abs(stats["avg_win"] / stats["avg_loss"]) if stats["avg_loss"] != 0 else DEFAULT_PAYOFF_RATIO
        win_rate = target_win_rate if target_win_rate is not None else stats["win_rate"]
        payoff = target_rr if target_rr is not None else current_payoff

        if use_rr:
            # Keep the loss size, scale the win to the target ratio
            avg_loss = stats["avg_loss_rr"] or 1.0
            avg_win = abs(avg_loss) * payoff
        else:
            # Keep the win size, derive the loss from the target ratio
            avg_win = stats["avg_win"]
            avg_loss = abs(avg_win / payoff) if payoff != 0 else stats["avg_loss"]

        expected_value = win_rate / 100 * avg_win - (100 - win_rate) / 100 * abs(avg_loss)
        trades_per_day = trade_count / trading_days if trading_days > 0 else 0.0
        daily_return = expected_value * trades_per_day
        daily_percent = daily_return / current_value * 100 if current_value > 0 else 0.0
        adjusted_rate = daily_percent * DAMPING

        curve = project_curve(current_value, adjusted_rate, days, today)
        end_value = curve[-1][2]
        improvement = (end_value - baseline_end_value) / baseline_end_value * 100 if baseline_end_value != 0 else 0.0

        return {
            "target_win_rate": round(win_rate, 2),
            "target_rr": round(payoff, 2),
            "expected_value": round(expected_value, 2),
            "projection_rate": round(adjusted_rate, 4),
            "projected_end_value": end_value,
            "gain": round(end_value - current_value, 2),
            "improvement": round(improvement, 2),
            "curve": curve,
        }

    def risk_of_ruin(self, stats: dict, risk_per_trade: float = 0.01) -> dict:
        """Heuristic probability (%) of a severe drawdown from the Kelly fraction."""
        if stats["total_trades"] < MIN_TRADES_FOR_RISK or stats["win_rate"] == 0:
            return {
                "probability": 0,
                "severity": "low",
                "warning": "Not enough data for risk assessment",
                "insufficient_data": True,
            }

        win_prob = stats["win_rate"] / 100
        lose_prob = 1 - win_prob
        avg_win = abs(stats["avg_win"])
        avg_loss = abs(stats["avg_loss"])

        ror = 0.0
        if avg_win > 0 and avg_loss > 0:
            payoff = avg_win / avg_loss
            kelly = (win_prob * payoff - lose_prob) / payoff
            if kelly != 0:
                kelly_multiple = risk_per_trade / kelly
                if kelly_multiple > 1:
                    ror = 20 + (kelly_multiple - 1) * 30
                else:
                    ror = max(1.0, 20 * (1 - kelly))
        ror = min(MAX_RISK_OF_RUIN, ror)

        if ror > 50:
            severity, warning = "high", "High risk - reduce position size or improve win rate"
        elif ror > 20:
            severity, warning = "medium", "Moderate risk - maintain discipline"
        else:
            severity, warning = "low", "Low risk - good edge and risk management"

        return {
            "probability": round(ror),
            "severity": severity,
            "warning": warning,
            "insufficient_data": False,
        }

    def to_csv(self, projection: dict) -> str:
        """CSV of the projection curve, with the what-if column when present."""
        has_what_if = projection.get("what_if") is not None
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        header = ["Date", "Day", "Current Trajectory"]
        if has_what_if:
            header.append("What-If Scenario")
        writer.writerow(header)
        for point in projection["data"]:
            row = [point["date"], point["day"], point["current"]]
            if has_what_if:
                row.append(point["whatif"])
            writer.writerow(row)
        return buffer.getvalue()
