"""Versioned journal-settings schema and the step migrations between versions.

A stored payload carries ``schema_version``; anything without one is a v0
legacy blob (camelCase app settings with optional account keys). Each step
takes the previous version's dict and returns the next one, so a payload of
any known age is upgraded one step at a time to ``CURRENT_VERSION``.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from trade_journal.models.records import DisplayMode

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2
DEFAULT_STARTING_BALANCE = 10000.0


class SettingsMigrationError(ValueError):
    """Raised for payloads written by a newer schema than this code knows."""


class JournalSettings(BaseModel):
    schema_version: int = CURRENT_VERSION
    display_mode: DisplayMode = DisplayMode.PNL
    show_weekends: bool = True
    starting_balance: float = Field(DEFAULT_STARTING_BALANCE, ge=0)
    account_created_date: date


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _v0_to_v1(raw: dict, today: date, default_starting_balance: float) -> dict:
    """Legacy camelCase app settings to snake_case display settings."""
    display_mode = _first(raw, "display_mode", "displayMode")
    show_weekends = _first(raw, "show_weekends", "showWeekends")
    return {
        "schema_version": 1,
        "display_mode": display_mode if display_mode in ("pnl", "rr") else "pnl",
        "show_weekends": True if show_weekends is None else bool(show_weekends),
        # Account keys lived in a separate legacy blob; carry them if merged in
        "starting_balance": _first(raw, "starting_balance", "startingBalance"),
        "account_created_date": _first(raw, "account_created_date", "accountCreatedDate"),
    }


def _v1_to_v2(raw: dict, today: date, default_starting_balance: float) -> dict:
    """Account settings become required: fill balance and creation date."""
    upgraded = dict(raw)
    upgraded["schema_version"] = 2
    if upgraded.get("starting_balance") is None:
        upgraded["starting_balance"] = default_starting_balance
    if not upgraded.get("account_created_date"):
        upgraded["account_created_date"] = today.isoformat()
    return upgraded


MIGRATIONS: dict[int, Callable[[dict, date, float], dict]] = {
    0: _v0_to_v1,
    1: _v1_to_v2,
}


def migrate_settings(
    raw: Mapping[str, Any] | None,
    today: date | None = None,
    default_starting_balance: float = DEFAULT_STARTING_BALANCE,
) -> JournalSettings:
    """Upgrade a stored settings payload of any known version to JournalSettings."""
    today = today or date.today()
    data = dict(raw or {})
    version = data.get("schema_version", 0)
    if not isinstance(version, int) or version < 0:
        raise SettingsMigrationError(f"Invalid settings schema_version: {version!r}")
    if version > CURRENT_VERSION:
        raise SettingsMigrationError(
            f"Settings schema_version {version} is newer than supported version {CURRENT_VERSION}"
        )

    while version < CURRENT_VERSION:
        data = MIGRATIONS[version](data, today, default_starting_balance)
        logger.debug("Migrated settings from v%d to v%d", version, data["schema_version"])
        version = data["schema_version"]

    return JournalSettings.model_validate(data)
