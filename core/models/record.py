"""
Error and Warning Record - ORM model.

One row per ingested error report, stored in ``ErrorAndWarningsEntries``.
Column names keep the storage schema's PascalCase; Python attributes are
snake_case.

The model is schema-less. PostgreSQL deployments place the table in
DB_SCHEMA through the engine's ``schema_translate_map``
(see infrastructure/database.py), which keeps the same model usable on
SQLite in tests.

Exports:
    Base: Declarative base (metadata for table creation)
    ErrorAndWarningRecord: The persisted record
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from config.defaults import DatabaseDefaults


class Base(DeclarativeBase):
    """Declarative base for all ORM models in this app."""


class ErrorAndWarningRecord(Base):
    """
    A ship error/warning report as stored in the relational store.

    No uniqueness or relationship constraints: the same report delivered
    twice is stored twice.
    """

    __tablename__ = DatabaseDefaults.RECORDS_TABLE

    id: Mapped[int] = mapped_column(
        "Id", Integer, primary_key=True, autoincrement=True
    )
    created_at: Mapped[datetime] = mapped_column(
        "CreatedDateTime", DateTime(timezone=True), nullable=False
    )
    ship_name: Mapped[str] = mapped_column(
        "ShipName", String(DatabaseDefaults.SHIP_NAME_MAX_LENGTH), nullable=False
    )
    message: Mapped[str] = mapped_column("Message", Text, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation for HTTP responses."""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "ship_name": self.ship_name,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return (
            f"ErrorAndWarningRecord(id={self.id!r}, created_at={self.created_at!r}, "
            f"ship_name={self.ship_name!r})"
        )
