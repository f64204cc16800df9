"""Load/save of the user's journal settings.

The statistics engine never reads this store; the API layer loads settings
and passes plain values (display mode, starting balance) into the engine.
"""

import json
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.models.journal_settings import JournalSettingsRow
from trade_journal.services.settings_migrations import (
    DEFAULT_STARTING_BALANCE,
    JournalSettings,
    migrate_settings,
)

logger = logging.getLogger(__name__)


class SettingsStore:
    """Single-row store of the versioned settings payload."""

    def __init__(self, default_starting_balance: float = DEFAULT_STARTING_BALANCE):
        self.default_starting_balance = default_starting_balance

    async def _row(self, db_session: AsyncSession) -> JournalSettingsRow | None:
        result = await db_session.execute(select(JournalSettingsRow).order_by(JournalSettingsRow.id).limit(1))
        return result.scalar_one_or_none()

    async def load(self, db_session: AsyncSession, today: date | None = None) -> JournalSettings:
        """Stored settings upgraded to the current schema; defaults when nothing is stored."""
        row = await self._row(db_session)
        raw = json.loads(row.payload) if row is not None else None
        if raw is not None and "schema_version" not in raw:
            raw["schema_version"] = row.schema_version
        return migrate_settings(raw, today=today, default_starting_balance=self.default_starting_balance)

    async def save(self, db_session: AsyncSession, settings: JournalSettings) -> JournalSettings:
        payload = settings.model_dump(mode="json")
        row = await self._row(db_session)
        if row is None:
            row = JournalSettingsRow(schema_version=settings.schema_version, payload=json.dumps(payload))
            db_session.add(row)
        else:
            row.schema_version = settings.schema_version
            row.payload = json.dumps(payload)
        await db_session.commit()
        logger.info(
            "Saved journal settings v%d (display_mode=%s, starting_balance=%.2f)",
            settings.schema_version, settings.display_mode.value, settings.starting_balance,
        )
        return settings
