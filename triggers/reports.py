"""
Error Report HTTP Triggers.

    GET  /api/reports?ship=<name>&limit=<n>  - most recent stored reports
    POST /api/reports                        - enqueue a report for ingestion

The POST body uses the same keys as the queue message properties:

    {"time": "2016-05-01T10:00:00Z", "ship": "Endeavour", "exceptionmessage": "Sensor timeout"}

It is validated with ErrorReportMessage (missing key or bad time -> 400) and
published to the reports queue, where the Service Bus trigger stores it.

Exports:
    ReportQueryTrigger, ReportSubmitTrigger
    report_query_trigger, report_submit_trigger: Singleton instances
"""

from typing import Any, Dict, List, Optional

import azure.functions as func

from .http_base import BaseHttpTrigger
from config.defaults import AppDefaults
from core.schema import ErrorReportMessage


def parse_limit(raw: Optional[str]) -> int:
    """
    Validate the ``limit`` query parameter.

    Raises:
        ValueError: not an integer or outside 1..REPORTS_MAX_PAGE_SIZE
    """
    if raw is None or raw == "":
        return AppDefaults.REPORTS_PAGE_SIZE
    try:
        limit = int(raw)
    except ValueError:
        raise ValueError(f"limit must be an integer, got {raw!r}")
    if not 1 <= limit <= AppDefaults.REPORTS_MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {AppDefaults.REPORTS_MAX_PAGE_SIZE}")
    return limit


class ReportQueryTrigger(BaseHttpTrigger):
    """GET /api/reports."""

    def __init__(self, repository=None):
        super().__init__("reports_query")
        self._repository = repository

    @property
    def repository(self):
        if self._repository is None:
            from infrastructure.record_repository import ErrorWarningRepository
            self._repository = ErrorWarningRepository()
        return self._repository

    def get_allowed_methods(self) -> List[str]:
        return ["GET"]

    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        params = self.extract_query_params(req, optional_params=["ship", "limit"])
        limit = parse_limit(params.get("limit"))
        ship = params.get("ship")

        records = self.repository.list_recent(limit=limit, ship_name=ship)
        return {
            "ship": ship,
            "limit": limit,
            "count": len(records),
            "reports": [record.to_dict() for record in records],
        }


class ReportSubmitTrigger(BaseHttpTrigger):
    """POST /api/reports."""

    def __init__(self, publisher=None):
        super().__init__("reports_submit")
        self._publisher = publisher

    @property
    def publisher(self):
        if self._publisher is None:
            from infrastructure.service_bus import ServiceBusRepository
            self._publisher = ServiceBusRepository.instance()
        return self._publisher

    def get_allowed_methods(self) -> List[str]:
        return ["POST"]

    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        body = self.extract_json_body(req)
        report = ErrorReportMessage.from_properties(body)
        # Reject bad timestamps here instead of in the queue trigger
        created_at = report.created_at()

        message_id = self.publisher.send_error_report(report)
        return {
            "_status_code": 202,
            "status": "queued",
            "message_id": message_id,
            "ship": report.ship,
            "time": created_at.isoformat(),
        }


# Singleton instances
report_query_trigger = ReportQueryTrigger()
report_submit_trigger = ReportSubmitTrigger()
