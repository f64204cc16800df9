"""Boundary normalization for legacy trade and journal records.

Older exports omit fields that were added later (status, exit date, entry
mode) or carry them with loose types. Each record is upgraded here exactly
once, before any statistics run, so the engine can rely on fully populated
records.
"""

import logging
import math
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from trade_journal.models.records import JournalEntry, Trade

logger = logging.getLogger(__name__)

_EXIT_PRICE_KEYS = ("exit_price", "exitPrice")
_EXIT_DATE_KEYS = ("exit_date", "exitDate")
_ENTRY_MODE_KEYS = ("entry_mode", "entryMode")
_NEWS_EVENT_KEYS = ("news_events", "newsEvents")


def _get(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _to_float(value: Any, default: float | None = 0.0) -> float | None:
    if value is None or value == "":
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    # NaN and infinities fall back to the default
    if not math.isfinite(result):
        return default
    return result


def is_trade_open(raw: Mapping[str, Any]) -> bool:
    """True when a (possibly legacy) trade is still open."""
    status = raw.get("status")
    if status is not None:
        return status == "open"
    return _get(raw, _EXIT_PRICE_KEYS) is None


def is_trade_closed(raw: Mapping[str, Any]) -> bool:
    """True when a (possibly legacy) trade is closed. An exit price of 0 counts."""
    status = raw.get("status")
    if status is not None:
        return status == "closed"
    return _get(raw, _EXIT_PRICE_KEYS) is not None


def normalize_trade(raw: Mapping[str, Any]) -> Trade:
    """Upgrade a loosely-typed trade dict into a fully populated Trade."""
    data = {key: value for key, value in raw.items() if key not in _EXIT_DATE_KEYS + _ENTRY_MODE_KEYS}

    status = raw.get("status")
    if status is None:
        status = "closed" if is_trade_closed(raw) else "open"
    data["status"] = status

    exit_date = _get(raw, _EXIT_DATE_KEYS)
    if status == "closed" and not exit_date:
        exit_date = raw.get("date")
    data["exit_date"] = exit_date or None

    data["entry_mode"] = _get(raw, _ENTRY_MODE_KEYS) or "detailed"

    tags = raw.get("tags")
    data["tags"] = [str(tag) for tag in tags] if isinstance(tags, list) else []

    data["rr"] = _to_float(raw.get("rr"), default=None)
    data["pnl"] = _to_float(raw.get("pnl"))
    data["commission"] = _to_float(raw.get("commission"))

    if not data.get("id"):
        data["id"] = str(uuid.uuid4())
    else:
        data["id"] = str(data["id"])

    return Trade.model_validate(data)


def normalize_journal_entry(raw: Mapping[str, Any]) -> JournalEntry:
    """Fill defaults for journal fields that older entries lack."""
    data = dict(raw)
    if data.get("mood") is None:
        data["mood"] = "neutral"

    for snake, camel, default in (
        ("notes", "notes", ""),
        ("lessons_learned", "lessonsLearned", ""),
        ("market_conditions", "marketConditions", ""),
        ("did_trade", "didTrade", False),
        ("followed_system", "followedSystem", True),
        ("is_news_day", "isNewsDay", False),
    ):
        value = data.get(snake)
        camel_value = data.pop(camel, None) if camel != snake else None
        if value is None:
            value = camel_value
        data[snake] = default if value is None else value

    news_events = _get(raw, _NEWS_EVENT_KEYS)
    data.pop("newsEvents", None)
    data["news_events"] = news_events if isinstance(news_events, list) else []

    return JournalEntry.model_validate(data)


def normalize_trades(raws: Iterable[Mapping[str, Any]]) -> list[Trade]:
    return [normalize_trade(raw) for raw in raws]


def normalize_journal_entries(raws: Iterable[Mapping[str, Any]]) -> list[JournalEntry]:
    """Normalize entries, keeping only the last entry seen for each date."""
    by_date: dict = {}
    for raw in raws:
        entry = normalize_journal_entry(raw)
        if entry.date in by_date:
            logger.debug("Duplicate journal entry for %s, keeping the later one", entry.date)
        by_date[entry.date] = entry
    return sorted(by_date.values(), key=lambda e: e.date)
