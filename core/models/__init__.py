"""
Core Data Models Package.

Exports:
    Base: SQLAlchemy declarative base
    ErrorAndWarningRecord: Persisted error/warning report
"""

from .record import Base, ErrorAndWarningRecord

__all__ = [
    "Base",
    "ErrorAndWarningRecord",
]
