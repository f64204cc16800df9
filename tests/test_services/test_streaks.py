from datetime import date

import pytest

from trade_journal.models.records import DisplayMode
from trade_journal.services.streaks import (
    StreakTracker,
    is_next_calendar_day,
    is_next_trading_day,
    run_lengths,
)


@pytest.fixture
def tracker():
    return StreakTracker()


def test_empty_history(tracker):
    result = tracker.calculate([], [])
    assert all(value == 0 for value in result.values())


def test_system_adherence_streak(tracker, make_entry):
    entries = [
        make_entry("2024-01-01", followedSystem=False),
        make_entry("2024-01-02", followedSystem=False),
        make_entry("2024-01-03"),
        make_entry("2024-01-04"),
        make_entry("2024-01-05"),
    ]
    result = tracker.calculate([], entries)
    assert result["system_adherence_streak"] == 3
    assert result["best_system_adherence_streak"] == 3
    assert result["journal_streak"] == 5


def test_trading_days_skip_weekends(tracker, make_trade):
    # Friday then Monday
    trades = [make_trade("2024-03-01", 100.0), make_trade("2024-03-04", 50.0)]
    result = tracker.calculate(trades, [])
    assert result["trading_days_streak"] == 2


def test_journal_streak_breaks_over_weekend(tracker, make_entry):
    result = tracker.calculate([], [make_entry("2024-03-01"), make_entry("2024-03-04")])
    assert result["journal_streak"] == 1
    assert result["best_journal_streak"] == 1


def test_win_and_lose_day_streaks(tracker, make_trade):
    trades = [
        make_trade("2024-03-01", 100.0),
        make_trade("2024-03-04", -50.0),
        make_trade("2024-03-05", 30.0),
        make_trade("2024-03-05", -40.0),
    ]
    result = tracker.calculate(trades, [])
    assert result["current_winning_streak"] == 0
    assert result["current_losing_streak"] == 2
    assert result["best_winning_streak"] == 1
    assert result["longest_losing_streak"] == 2


def test_rr_mode_uses_r_multiples(tracker, make_trade):
    trades = [
        make_trade("2024-03-01", -10.0, rr=0.5),
        make_trade("2024-03-04", -10.0, rr=1.0),
    ]
    pnl = tracker.calculate(trades, [], DisplayMode.PNL)
    rr = tracker.calculate(trades, [], DisplayMode.RR)
    assert pnl["current_losing_streak"] == 2
    assert rr["current_winning_streak"] == 2


def test_adjacency_helpers():
    friday, saturday, monday, thursday = date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 4), date(2024, 2, 29)
    assert is_next_calendar_day(friday, saturday)
    assert not is_next_calendar_day(friday, monday)
    assert is_next_trading_day(friday, monday)
    assert not is_next_trading_day(thursday, monday)
    assert not is_next_trading_day(monday, monday)


def test_run_lengths_tracks_best_and_current():
    dates = [date(2024, 1, d) for d in (1, 2, 3, 7, 8)]
    assert run_lengths(dates, is_next_calendar_day) == (2, 3)
    assert run_lengths([], is_next_calendar_day) == (0, 0)
