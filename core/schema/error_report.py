"""
Error Report Message Schema - Transport Boundary.

Ships publish error and warning reports to Service Bus. The payload lives in
the message's application properties, an untyped key/value bag:

    time              date/time the error occurred (ISO-8601 or invariant-culture text)
    ship              name of the reporting ship
    exceptionmessage  free-text error or warning

ErrorReportMessage turns that bag into a validated structure at the handler
boundary so a missing key fails as MissingPropertyError, separately from a
bad timestamp (TimestampParseError).

Exports:
    REQUIRED_PROPERTIES: Property keys every report must carry
    ErrorReportMessage: Validated report
    parse_report_time: Timestamp parser used for the 'time' property
    normalize_properties: Decode a raw property bag to str keys
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

from core.models import ErrorAndWarningRecord
from exceptions import MissingPropertyError, TimestampParseError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "ErrorReportMessage")


REQUIRED_PROPERTIES = ("time", "ship", "exceptionmessage")

# Accepted after ISO-8601 fails; month-first matches .NET invariant culture
_FALLBACK_TIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
)


# ============================================================================
# PROPERTY HELPERS
# ============================================================================

def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, str):
        return value
    return str(value)


def normalize_properties(properties: Mapping[Any, Any]) -> Dict[str, Any]:
    """
    Decode a raw property bag.

    AMQP application properties can surface keys and values as bytes
    depending on the SDK path. Keys are decoded to str; bytes values are
    decoded, everything else is left as-is.
    """
    normalized = {}
    for key, value in properties.items():
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        normalized[_as_text(key)] = value
    return normalized


def parse_report_time(value: Any) -> datetime:
    """
    Parse the 'time' property into an aware UTC datetime.

    Accepts datetime instances, ISO-8601 strings (trailing 'Z' included) and
    the invariant-culture formats in _FALLBACK_TIME_FORMATS. Naive values are
    taken as UTC.

    Raises:
        TimestampParseError: value is empty, not text, or matches no format
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = _parse_time_text(value.strip())
    else:
        raise TimestampParseError(value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_time_text(text: str) -> datetime:
    iso_text = text[:-1] + "+00:00" if text[-1:] in ("Z", "z") else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass

    for fmt in _FALLBACK_TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        logger.debug(f"Parsed time {text!r} with fallback format {fmt!r}")
        return parsed

    raise TimestampParseError(text)


# ============================================================================
# MESSAGE MODEL
# ============================================================================

class ErrorReportMessage(BaseModel):
    """
    Validated error report.

    ``time`` is kept raw (str or datetime) so that a report with every key
    present can still be logged before its timestamp is parsed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    time: Any = Field(..., description="Raw 'time' property")
    ship: str = Field(..., description="Reporting ship, copied verbatim")
    exception_message: str = Field(
        ...,
        alias="exceptionmessage",
        description="Error/warning text, copied verbatim"
    )

    @classmethod
    def from_properties(cls, properties: Mapping[Any, Any]) -> "ErrorReportMessage":
        """
        Build a report from a message property bag.

        Raises:
            MissingPropertyError: any of REQUIRED_PROPERTIES is absent or None
        """
        normalized = normalize_properties(properties)
        missing = [key for key in REQUIRED_PROPERTIES if normalized.get(key) is None]
        if missing:
            raise MissingPropertyError(missing)

        return cls(
            time=normalized["time"],
            ship=_as_text(normalized["ship"]),
            exceptionmessage=_as_text(normalized["exceptionmessage"]),
        )

    def created_at(self) -> datetime:
        """Parsed 'time' property (aware, UTC)."""
        return parse_report_time(self.time)

    def to_record(self) -> ErrorAndWarningRecord:
        """New, unsaved ORM record for this report."""
        return ErrorAndWarningRecord(
            created_at=self.created_at(),
            ship_name=self.ship,
            message=self.exception_message,
        )

    def to_properties(self) -> Dict[str, str]:
        """Property bag for publishing; 'time' is normalized to ISO-8601 UTC."""
        return {
            "time": self.created_at().isoformat(),
            "ship": self.ship,
            "exceptionmessage": self.exception_message,
        }


__all__ = [
    "REQUIRED_PROPERTIES",
    "ErrorReportMessage",
    "parse_report_time",
    "normalize_properties",
]
