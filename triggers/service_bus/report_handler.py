# ============================================================================
# SERVICE BUS ERROR REPORT HANDLER
# ============================================================================
# STATUS: Trigger layer - error report queue message processing
# PURPOSE: Turn one Service Bus error report into one ErrorAndWarningsEntries row
# ============================================================================
"""
Error Report Queue Message Handler Module.

Ships publish error/warning reports to the ``errorsandwarnings`` queue with
the payload in the message's application properties (``time``, ``ship``,
``exceptionmessage``). Each message becomes exactly one record.

Processing Flow:
    1. Read the property bag (MissingPropertyError if a key is absent)
    2. Log ``Processing message: <exceptionmessage> Ship: <ship>``
    3. Parse ``time`` (TimestampParseError if unparseable)
    4. Add the record and commit (DatabaseError on failure)

Failure policy (INGEST_FAILURE_POLICY):
    log   - the failure is logged once as
            ``Exception in ProcessQueueMessage: <detail>`` and the handler
            returns normally, so the host completes the message.
    raise - same single log line, then the exception propagates and the host
            abandons the message (redelivery / dead-lettering per queue settings).

Usage:
    from triggers.service_bus import handle_error_report

    @app.service_bus_queue_trigger(
        arg_name="msg",
        queue_name="errorsandwarnings",
        connection="ServiceBusConnection"
    )
    def process_error_report(msg: func.ServiceBusMessage) -> None:
        handle_error_report(msg)
"""

import time
import uuid
from collections.abc import Mapping
from typing import Any, Dict, Optional

from config import get_config
from core.schema import ErrorReportMessage
from exceptions import ContractViolationError
from infrastructure.record_repository import ErrorWarningRepository
from util_logger import LoggerFactory, ComponentType, LogContext

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "ErrorReportHandler")


def handle_error_report(
    msg: Any,
    repository: Optional[ErrorWarningRepository] = None,
    failure_policy: Optional[str] = None,
    queue_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Persist one error report message.

    Args:
        msg: func.ServiceBusMessage, or any object exposing
             ``application_properties``/``user_properties``, or a plain mapping
        repository: Record repository (default: process-wide session factory)
        failure_policy: 'log' or 'raise' (default: INGEST_FAILURE_POLICY)
        queue_name: Queue name for log dimensions

    Returns:
        Processing result dict with success status and details
    """
    correlation_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    context = LogContext(
        correlation_id=correlation_id,
        queue_name=queue_name,
        message_id=getattr(msg, "message_id", None),
        delivery_count=getattr(msg, "delivery_count", None),
    )
    reraise = _should_raise(failure_policy)

    try:
        report = ErrorReportMessage.from_properties(_extract_properties(msg))
        context.ship_name = report.ship

        logger.info(
            f"Processing message: {report.exception_message} Ship: {report.ship}",
            extra={"custom_dimensions": context.to_dict()}
        )

        record = report.to_record()
        repository = repository or ErrorWarningRepository()
        repository.add_record(record)

        elapsed = time.time() - start_time
        logger.debug(
            f"[{correlation_id}] Report stored in {elapsed:.3f}s",
            extra={"custom_dimensions": context.to_dict()}
        )

        return {
            "success": True,
            "record_id": record.id,
            "ship": report.ship,
            "correlation_id": correlation_id,
        }

    except Exception as e:
        logger.error(
            f"Exception in ProcessQueueMessage: {e}",
            exc_info=True,
            extra={
                "custom_dimensions": {
                    **context.to_dict(),
                    "exception_type": type(e).__name__,
                    "elapsed_seconds": round(time.time() - start_time, 3),
                }
            }
        )

        if reraise:
            raise

        return {
            "success": False,
            "error": str(e),
            "error_type": type(e).__name__,
            "correlation_id": correlation_id,
        }


def _extract_properties(msg: Any) -> Mapping:
    """
    Property bag of a trigger message.

    Prefers ``application_properties`` and falls back to ``user_properties``
    (older azure-functions releases only expose the latter).
    """
    if isinstance(msg, Mapping):
        return msg

    if not hasattr(msg, "application_properties") and not hasattr(msg, "user_properties"):
        raise ContractViolationError(
            f"Expected a Service Bus message or mapping, got {type(msg).__name__}"
        )

    properties = getattr(msg, "application_properties", None) or getattr(msg, "user_properties", None)
    return properties or {}


def _should_raise(failure_policy: Optional[str]) -> bool:
    """
    Resolved before processing starts. A configuration that cannot be loaded
    falls back to 'log'; the same load error then fails the message itself.
    """
    if failure_policy is not None:
        return failure_policy.strip().lower() == "raise"
    try:
        return get_config().queues.raise_on_failure
    except Exception as e:
        logger.warning(f"⚠️ Failure policy unavailable, using 'log': {e}")
        return False


__all__ = ["handle_error_report"]
