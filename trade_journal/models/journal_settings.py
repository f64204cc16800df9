"""Persisted journal settings (single row, JSON payload)."""

from sqlalchemy import Column, Integer, DateTime, Text
from sqlalchemy.sql import func

from trade_journal.models.database import Base


class JournalSettingsRow(Base):
    __tablename__ = "journal_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    schema_version = Column(Integer, nullable=False, default=0)
    payload = Column(Text, nullable=False)  # JSON-serialized settings dict
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
