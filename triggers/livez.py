"""
Liveness Check HTTP Trigger.

GET /api/livez - answers as long as the worker process is running.
No database, Service Bus or config checks; use /api/health for those.

Exports:
    LivenessCheckTrigger: Liveness check trigger class
    livez_trigger: Singleton trigger instance
"""

from typing import Dict, Any

import azure.functions as func

from .http_base import SystemMonitoringTrigger


class LivenessCheckTrigger(SystemMonitoringTrigger):
    """Liveness probe with no external dependencies."""

    def __init__(self):
        super().__init__("livez")

    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        return {"status": "alive"}


# Singleton instance
livez_trigger = LivenessCheckTrigger()
