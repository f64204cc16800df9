from datetime import date, timedelta

import pytest

from trade_journal.services.achievements import AchievementTracker
from trade_journal.services.analytics import TradeAnalytics


@pytest.fixture
def tracker():
    return AchievementTracker()


def _evaluate(tracker, trades, entries=()):
    stats = TradeAnalytics().calculate(trades)
    return {a["id"]: a for a in tracker.calculate(trades, stats, entries)}


def _series(make_trade, pnls):
    # One trade per day from 2024-01-01, rolling into following months as needed
    start = date(2024, 1, 1)
    return [make_trade((start + timedelta(days=i)).isoformat(), float(p)) for i, p in enumerate(pnls)]


def test_catalog_with_no_trades(tracker):
    achievements = tracker.calculate([], TradeAnalytics().calculate([]), [])
    assert [a["id"] for a in achievements] == [
        "trades-10", "trades-50", "trades-100", "profitable-month",
        "journal-30", "system-10", "winrate-60", "pf-2",
    ]
    assert not any(a["is_unlocked"] for a in achievements)
    assert all(a["progress"] == 0 for a in achievements)


def test_trade_milestones(tracker, make_trade):
    achievements = _evaluate(tracker, _series(make_trade, [10] * 10))
    assert achievements["trades-10"]["is_unlocked"] is True
    assert achievements["trades-10"]["progress"] == 100.0
    assert achievements["trades-50"]["progress"] == 20.0
    assert achievements["trades-50"]["current"] == 10


def test_profitable_month(tracker, make_trade):
    achievements = _evaluate(tracker, _series(make_trade, [100, -20]))
    assert achievements["profitable-month"]["is_unlocked"] is True

    achievements = _evaluate(tracker, _series(make_trade, [-100, 20]))
    assert achievements["profitable-month"]["is_unlocked"] is False
    assert achievements["profitable-month"]["progress"] == 0.0


def test_journal_count(tracker, make_entry):
    entries = [make_entry(f"2024-01-{d:02d}") for d in range(1, 16)]
    achievements = _evaluate(tracker, [], entries)
    assert achievements["journal-30"]["current"] == 15
    assert achievements["journal-30"]["progress"] == 50.0


def test_system_discipline_counts_back_from_latest(tracker, make_entry):
    entries = [
        make_entry("2024-01-01", didTrade=True),
        make_entry("2024-01-02", didTrade=True, followedSystem=False),
        make_entry("2024-01-03", didTrade=True),
        make_entry("2024-01-04"),
        make_entry("2024-01-05", didTrade=True),
    ]
    achievements = _evaluate(tracker, [], entries)
    assert achievements["system-10"]["current"] == 2
    assert achievements["system-10"]["progress"] == 20.0


def test_win_rate_gated_on_sample_size(tracker, make_trade):
    achievements = _evaluate(tracker, _series(make_trade, [10] * 5))
    win_rate = achievements["winrate-60"]
    assert win_rate["phase"] == "sample_size"
    assert win_rate["is_unlocked"] is False
    assert win_rate["progress"] == 25.0
    assert win_rate["target"] == 20


def test_win_rate_unlocked_with_enough_trades(tracker, make_trade):
    achievements = _evaluate(tracker, _series(make_trade, [10] * 15 + [-5] * 5))
    win_rate = achievements["winrate-60"]
    assert win_rate["phase"] == "metric"
    assert win_rate["is_unlocked"] is True
    assert win_rate["current"] == 75.0


def test_profit_factor_metric_phase(tracker, make_trade):
    achievements = _evaluate(tracker, _series(make_trade, [10] * 15 + [-10] * 15))
    pf = achievements["pf-2"]
    assert pf["phase"] == "metric"
    assert pf["is_unlocked"] is False
    assert pf["current"] == 1.0
    assert pf["progress"] == 50.0


def test_profitable_month_uses_close_date(tracker, make_trade):
    trades = [
        make_trade("2024-01-31", 100.0, exitDate="2024-02-01"),
        make_trade("2024-02-05", -150.0),
    ]
    achievements = _evaluate(tracker, trades)
    assert achievements["profitable-month"]["is_unlocked"] is False
    assert achievements["profitable-month"]["progress"] == 0.0
