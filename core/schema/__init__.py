"""
Core Schema Package - message boundary models.
"""

from .error_report import (
    REQUIRED_PROPERTIES,
    ErrorReportMessage,
    parse_report_time,
    normalize_properties,
)

__all__ = [
    "REQUIRED_PROPERTIES",
    "ErrorReportMessage",
    "parse_report_time",
    "normalize_properties",
]
