from datetime import date

import pytest

from trade_journal.models.records import Direction
from trade_journal.services.filters import (
    TradeFilters,
    available_setups,
    available_symbols,
    available_tags,
    filter_trades,
)


@pytest.fixture
def trades(make_trade):
    return [
        make_trade("2024-03-01", 150.0, symbol="ES", setup="Breakout", tags=["A+"], notes="Textbook", rr=3.0),
        make_trade("2024-03-04", -80.0, symbol="NQ", setup="Reversal", tags=["FOMO"], type="short", rr=-1.0),
        make_trade("2024-03-05", 0.0, symbol="CL", setup="", tags=[], screenshotBefore="cl.png"),
        make_trade("2024-03-06", 0.0, symbol="ES", exitPrice=None),
    ]


def _symbols(result):
    return [t.symbol for t in result]


def test_no_filters_keeps_everything(trades):
    assert filter_trades(trades, [], None) == trades
    assert filter_trades(trades, [], TradeFilters()) == trades


def test_search_matches_symbol_notes_and_tags(trades):
    assert _symbols(filter_trades(trades, [], TradeFilters(search_query="textbook"))) == ["ES"]
    assert _symbols(filter_trades(trades, [], TradeFilters(search_query="fomo"))) == ["NQ"]


def test_date_range(trades):
    filters = TradeFilters(date_from=date(2024, 3, 2), date_to=date(2024, 3, 5))
    assert _symbols(filter_trades(trades, [], filters)) == ["NQ", "CL"]


def test_outcome(trades):
    assert _symbols(filter_trades(trades, [], TradeFilters(outcome="wins"))) == ["ES"]
    assert _symbols(filter_trades(trades, [], TradeFilters(outcome="losses"))) == ["NQ"]
    assert len(filter_trades(trades, [], TradeFilters(outcome="breakeven"))) == 2


def test_status_and_direction(trades):
    assert len(filter_trades(trades, [], TradeFilters(status="open"))) == 1
    assert len(filter_trades(trades, [], TradeFilters(status="closed"))) == 3
    assert _symbols(filter_trades(trades, [], TradeFilters(direction=Direction.SHORT))) == ["NQ"]


def test_rr_range_excludes_missing_r(trades):
    assert _symbols(filter_trades(trades, [], TradeFilters(rr_min=0.0))) == ["ES"]


def test_symbols_setups_tags(trades):
    assert len(filter_trades(trades, [], TradeFilters(symbols=["ES"]))) == 2
    assert _symbols(filter_trades(trades, [], TradeFilters(setups=["Reversal"]))) == ["NQ"]
    assert _symbols(filter_trades(trades, [], TradeFilters(tags=["A+", "FOMO"]))) == ["ES", "NQ", "ES"]


def test_rule_breaking_days(trades, make_entry):
    entries = [make_entry("2024-03-04", followedSystem=False), make_entry("2024-03-01")]
    assert _symbols(filter_trades(trades, entries, TradeFilters(rule_breaking=True))) == ["NQ"]


def test_has_flags(trades):
    assert _symbols(filter_trades(trades, [], TradeFilters(has_notes=True))) == ["ES"]
    assert _symbols(filter_trades(trades, [], TradeFilters(has_screenshots=True))) == ["CL"]
    assert len(filter_trades(trades, [], TradeFilters(has_tags=True))) == 3


def test_available_values(trades):
    assert available_symbols(trades) == ["CL", "ES", "NQ"]
    assert available_setups(trades) == ["Breakout", "Reversal"]
    assert available_tags(trades) == ["A+", "FOMO"]
