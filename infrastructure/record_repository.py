# ============================================================================
# ERROR AND WARNING RECORD REPOSITORY
# ============================================================================
# PURPOSE: Persist and query ErrorAndWarningRecord rows
# EXPORTS: ErrorWarningRepository
# DEPENDENCIES: sqlalchemy
# ============================================================================

"""
Error and Warning Record Repository.

Each call opens its own session via session_scope(), so one repository
instance can serve concurrent invocations. SQLAlchemy errors are re-raised as
DatabaseError; logging at ERROR level is left to the caller.
"""

from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.models import ErrorAndWarningRecord
from exceptions import ContractViolationError, DatabaseError
from infrastructure.database import session_scope
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "ErrorWarningRepository")


class ErrorWarningRepository:
    """Data access for the ErrorAndWarningsEntries table."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        # None = process-wide factory from infrastructure.database
        self._session_factory = session_factory

    def add_record(self, record: ErrorAndWarningRecord) -> ErrorAndWarningRecord:
        """
        Insert one record and commit.

        Args:
            record: New, unsaved record

        Returns:
            The same record (id populated after commit)

        Raises:
            ContractViolationError: record is not an ErrorAndWarningRecord
            DatabaseError: insert or commit failed (session rolled back)
        """
        if not isinstance(record, ErrorAndWarningRecord):
            raise ContractViolationError(
                f"add_record expects ErrorAndWarningRecord, got {type(record).__name__}"
            )

        try:
            with session_scope(self._session_factory) as session:
                session.add(record)
                session.commit()
                logger.debug(f"💾 Saved record id={record.id} ship={record.ship_name!r}")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to save record: {e}") from e

        return record

    def list_recent(self, limit: int = 50, ship_name: Optional[str] = None) -> List[ErrorAndWarningRecord]:
        """Newest records first, optionally for one ship."""
        stmt = select(ErrorAndWarningRecord)
        if ship_name is not None:
            stmt = stmt.where(ErrorAndWarningRecord.ship_name == ship_name)
        stmt = stmt.order_by(
            ErrorAndWarningRecord.created_at.desc(),
            ErrorAndWarningRecord.id.desc()
        ).limit(limit)

        try:
            with session_scope(self._session_factory) as session:
                return list(session.scalars(stmt))
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list records: {e}") from e

    def count(self, ship_name: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(ErrorAndWarningRecord)
        if ship_name is not None:
            stmt = stmt.where(ErrorAndWarningRecord.ship_name == ship_name)

        try:
            with session_scope(self._session_factory) as session:
                return session.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count records: {e}") from e


__all__ = ["ErrorWarningRepository"]
