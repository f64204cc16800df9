from datetime import date

import pytest
from pydantic import ValidationError

from trade_journal.models.records import Direction, Mood, TradeStatus
from trade_journal.services.normalization import (
    is_trade_closed,
    is_trade_open,
    normalize_journal_entries,
    normalize_journal_entry,
    normalize_trade,
)


def test_status_inferred_from_exit_price():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "exitPrice": 101.5, "pnl": 10})
    assert trade.status == TradeStatus.CLOSED
    assert trade.exit_date == date(2024, 3, 1)


def test_zero_exit_price_counts_as_closed():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "exitPrice": 0})
    assert trade.is_closed


def test_missing_exit_price_is_open():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "entryPrice": 100})
    assert trade.is_open
    assert trade.exit_date is None


def test_explicit_status_wins_over_exit_price():
    raw = {"id": "1", "date": "2024-03-01", "exitPrice": 105, "status": "open"}
    assert is_trade_open(raw)
    assert not is_trade_closed(raw)
    assert normalize_trade(raw).is_open


def test_existing_exit_date_is_kept():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "exitDate": "2024-03-04", "exitPrice": 1})
    assert trade.exit_date == date(2024, 3, 4)
    assert trade.close_date == date(2024, 3, 4)


def test_defaults_for_legacy_fields():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "tags": "scalp", "pnl": "oops"})
    assert trade.entry_mode == "detailed"
    assert trade.tags == []
    assert trade.pnl == 0.0
    assert trade.commission == 0.0
    assert trade.rr is None


def test_numeric_coercion():
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "rr": "1.5", "pnl": "-20.25"})
    assert trade.rr == 1.5
    assert trade.pnl == -20.25


def test_missing_id_is_generated():
    trade = normalize_trade({"date": "2024-03-01"})
    assert len(trade.id) == 36


def test_camel_case_fields_are_accepted():
    trade = normalize_trade({
        "id": "1",
        "date": "2024-03-01",
        "type": "short",
        "entryPrice": 5000,
        "stopLoss": 5010,
        "screenshotBefore": "before.png",
        "entryMode": "simple",
    })
    assert trade.direction == Direction.SHORT
    assert trade.entry_price == 5000
    assert trade.stop_loss == 5010
    assert trade.screenshot_before == "before.png"
    assert trade.entry_mode == "simple"


def test_missing_date_is_rejected():
    with pytest.raises(ValidationError):
        normalize_trade({"id": "1", "pnl": 5})


def test_journal_entry_defaults():
    entry = normalize_journal_entry({"date": "2024-03-01"})
    assert entry.mood == Mood.NEUTRAL
    assert entry.notes == ""
    assert entry.lessons_learned == ""
    assert entry.did_trade is False
    assert entry.followed_system is True
    assert entry.is_news_day is False
    assert entry.news_events == []


def test_journal_entry_camel_case():
    entry = normalize_journal_entry({
        "date": "2024-03-01",
        "mood": "good",
        "lessonsLearned": "Wait for confirmation",
        "followedSystem": False,
        "isNewsDay": True,
        "newsEvents": [{"name": "CPI", "time": "8:30 AM"}],
    })
    assert entry.mood == Mood.GOOD
    assert entry.lessons_learned == "Wait for confirmation"
    assert entry.followed_system is False
    assert entry.news_events[0].name == "CPI"


def test_non_list_news_events_become_empty():
    entry = normalize_journal_entry({"date": "2024-03-01", "newsEvents": "CPI"})
    assert entry.news_events == []


def test_duplicate_journal_dates_keep_last():
    entries = normalize_journal_entries([
        {"date": "2024-03-02", "notes": "second day"},
        {"date": "2024-03-01", "notes": "first"},
        {"date": "2024-03-01", "notes": "rewritten"},
    ])
    assert [e.date for e in entries] == [date(2024, 3, 1), date(2024, 3, 2)]
    assert entries[0].notes == "rewritten"


@pytest.mark.parametrize("bad", ["NaN", "nan", "inf", "-Infinity", float("nan"), float("inf")])
def test_non_finite_numbers_fall_back_to_defaults(bad):
    trade = normalize_trade({"id": "1", "date": "2024-03-01", "exitPrice": 1, "pnl": bad, "rr": bad})
    assert trade.pnl == 0.0
    assert trade.rr is None
