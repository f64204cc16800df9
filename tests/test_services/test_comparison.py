from datetime import date

import pytest

from trade_journal.models.records import DisplayMode
from trade_journal.services.comparison import (
    PeriodComparison,
    calculate_change,
    create_comparison,
    shift_months,
)


@pytest.fixture
def comparison():
    return PeriodComparison()


def test_shift_months_clamps_day():
    assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert shift_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
    assert shift_months(date(2024, 12, 31), -6) == date(2024, 6, 30)


def test_calculate_change():
    assert calculate_change(150.0, 100.0) == (50.0, 50.0, "up")
    assert calculate_change(-50.0, 100.0) == (-150.0, -150.0, "down")
    assert calculate_change(10.0, 0.0) == (10.0, 0.0, "up")
    assert calculate_change(5.0, 5.0) == (0.0, 0.0, "neutral")


def test_lower_is_better_flips_positive():
    entry = create_comparison("Max DD", "Max DD", 50.0, 100.0, "now", "then", higher_is_better=False)
    assert entry["trend"] == "down"
    assert entry["is_positive"] is True


def test_no_trades_no_metrics(comparison, today):
    result = comparison.calculate([], today=today)
    assert result["month_over_month"] == []
    assert result["quarter_over_quarter"] == []
    assert result["recent_vs_historical"] == []
    assert result["period"] == {"current": "March 2024", "previous": "February 2024"}


def test_month_over_month(comparison, make_trade, today):
    trades = [
        make_trade("2024-03-04", 100.0),
        make_trade("2024-03-05", 50.0),
        make_trade("2024-02-12", -30.0),
    ]
    metrics = {m["metric"]: m for m in comparison.calculate(trades, today=today)["month_over_month"]}
    total = metrics["Total P&L"]
    assert total["current"] == 150.0
    assert total["previous"] == -30.0
    assert total["change"] == 180.0
    assert total["change_percent"] == 600.0
    assert total["trend"] == "up"
    assert total["is_positive"] is True
    assert metrics["Total Trades"]["current"] == 2
    assert metrics["Win Rate"]["previous"] == 0.0


def test_zero_metrics_are_dropped(comparison, make_trade, today):
    # Breakeven trades in both months: only the trade count differs from zero
    trades = [make_trade("2024-03-04", 0.0), make_trade("2024-02-12", 0.0)]
    metrics = comparison.calculate(trades, today=today)["month_over_month"]
    assert [m["metric"] for m in metrics] == ["Total Trades"]


def test_rolling_quarter(comparison, make_trade, today):
    trades = [
        make_trade("2024-01-10", 100.0),  # within the last 3 months
        make_trade("2023-11-10", 40.0),  # the 3 months before
        make_trade("2023-08-10", 999.0),  # outside both windows
    ]
    metrics = {m["metric"]: m for m in comparison.calculate(trades, today=today)["quarter_over_quarter"]}
    assert metrics["Total P&L"]["current"] == 100.0
    assert metrics["Total P&L"]["previous"] == 40.0


def test_recent_vs_historical_rr(comparison, make_trade, today):
    trades = [make_trade("2024-03-10", 100.0, rr=2.0), make_trade("2023-12-01", -50.0, rr=-1.0)]
    family = comparison.calculate(trades, DisplayMode.RR, today=today)["recent_vs_historical"]
    metrics = {m["metric"]: m for m in family}
    assert metrics["Total R:R"]["current"] == 2.0
    assert metrics["Total R:R"]["previous"] == -1.0
    assert metrics["Avg Trade"]["label"] == "Avg R:R"
    assert family[0]["current_label"] == "Last 30 days"
