# ============================================================================
# EXCEPTIONS
# ============================================================================
# PURPOSE: Exception hierarchy separating contract violations from business failures
# EXPORTS: ContractViolationError, BusinessLogicError, MessageValidationError,
#          MissingPropertyError, TimestampParseError, DatabaseError,
#          ServiceBusError, ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues: bad messages, database outages)

The ingestion handler catches business failures at the top level and logs
them; contract violations are caught there too (the host must never see an
application error under the default policy) but indicate a bug.
"""

from typing import Any, Iterable


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    Examples:
        - Trigger receives an object that exposes no message properties
        - Repository receives something other than an ErrorAndWarningRecord
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These occur during normal operation and are handled without crashing.
    """
    pass


class MessageValidationError(BusinessLogicError):
    """
    An inbound error report does not satisfy the message contract.
    """
    pass


class MissingPropertyError(MessageValidationError):
    """
    One or more required message properties are absent or null.

    Attributes:
        missing: Names of the missing properties, in contract order
    """

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"Message is missing required properties: {', '.join(self.missing)}"
        )


class TimestampParseError(MessageValidationError):
    """
    The 'time' property could not be parsed as a date/time.

    Attributes:
        value: The raw value that failed to parse
    """

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unparseable time property: {value!r}")


class DatabaseError(BusinessLogicError):
    """
    Database operation failures.

    Examples:
        - Connection lost
        - Constraint violation
        - Commit failure
    """
    pass


class ServiceBusError(BusinessLogicError):
    """
    Service Bus communication failures (publisher side).

    Examples:
        - Namespace unreachable
        - Queue not found
        - Authentication failure
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    Typically fatal: missing connection settings, malformed URLs.
    """
    pass


__all__ = [
    "ContractViolationError",
    "BusinessLogicError",
    "MessageValidationError",
    "MissingPropertyError",
    "TimestampParseError",
    "DatabaseError",
    "ServiceBusError",
    "ConfigurationError",
]
