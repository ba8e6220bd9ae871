"""
Triggers Package.

Azure Functions trigger implementations.

HTTP Endpoints:
    /api/livez: Liveness probe
    /api/health: Database and configuration health
    /api/reports: Query stored reports (GET), enqueue a report (POST)

Service Bus:
    triggers.service_bus.handle_error_report: error report queue handler

Exports:
    Base classes only; trigger instances are imported from their modules
"""

from .http_base import BaseHttpTrigger, SystemMonitoringTrigger

__all__ = [
    'BaseHttpTrigger',
    'SystemMonitoringTrigger',
]
