"""Backup documents and CSV export of journal data."""

import csv
import io
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from trade_journal.models.records import JournalEntry, Trade
from trade_journal.services.normalization import normalize_journal_entries, normalize_trades

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

CSV_HEADERS = [
    "Date",
    "Symbol",
    "Type",
    "Entry Price",
    "Exit Price",
    "Quantity",
    "Commission",
    "P&L",
    "R:R",
    "Setup",
    "Tags",
    "Notes",
]


class BackupFormatError(ValueError):
    """Raised when a backup document is missing one of its record arrays."""


def export_json(
    trades: Iterable[Trade],
    journal_entries: Iterable[JournalEntry],
    exported_at: datetime | None = None,
) -> dict:
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "version": BACKUP_VERSION,
        "export_date": exported_at.isoformat(),
        "trades": [t.model_dump(mode="json") for t in trades],
        "journal_entries": [e.model_dump(mode="json") for e in journal_entries],
    }


def _cell(value) -> str:
    return "" if value is None else str(value)


def export_csv(trades: Iterable[Trade]) -> str:
    """One row per trade, every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for t in trades:
        writer.writerow([
            t.date.isoformat(),
            t.symbol,
            t.direction.value,
            _cell(t.entry_price),
            _cell(t.exit_price),
            _cell(t.quantity),
            _cell(t.commission),
            _cell(t.pnl),
            _cell(t.rr),
            t.setup,
            "; ".join(t.tags),
            t.notes,
        ])
    return buffer.getvalue()


def parse_backup(payload: dict) -> tuple[list[Trade], list[JournalEntry]]:
    """Validate a backup document and normalize its records.

    Both snake_case and the older camelCase ``journalEntries`` key are accepted.
    """
    if not isinstance(payload, dict):
        raise BackupFormatError("Invalid data format: expected a JSON object")

    trades = payload.get("trades")
    if not isinstance(trades, list):
        raise BackupFormatError("Invalid data format: missing trades array")

    entries = payload.get("journal_entries", payload.get("journalEntries"))
    if not isinstance(entries, list):
        raise BackupFormatError("Invalid data format: missing journal entries array")

    logger.info(
        "Parsed backup version %s: %d trades, %d journal entries",
        payload.get("version", "unknown"), len(trades), len(entries),
    )
    return normalize_trades(trades), normalize_journal_entries(entries)
