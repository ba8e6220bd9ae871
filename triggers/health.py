"""
Health Check HTTP Trigger.

GET /api/health - readiness of the ingestion pipeline.

Components Monitored:
    - Environment variable validation (config.env_validation)
    - Database connectivity (SELECT 1) and stored record count
    - Service Bus settings (queue name, auth mode)

Overall status is "unhealthy" (HTTP 503) when the database is unreachable or
the environment has validation errors; warnings alone keep it "healthy".

Exports:
    HealthCheckTrigger: Health check trigger class
    health_check_trigger: Singleton trigger instance
"""

import sys
from datetime import datetime, timezone
from typing import Dict, Any

import azure.functions as func

from .http_base import SystemMonitoringTrigger
from config import get_config, debug_config
from config.env_validation import get_validation_summary


class HealthCheckTrigger(SystemMonitoringTrigger):
    """Health check HTTP trigger implementation."""

    def __init__(self):
        super().__init__("health_check")

    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        health_data = {
            "status": "healthy",
            "components": {},
            "environment": {
                "python_version": sys.version.split()[0],
                "function_runtime": "python",
            },
            "errors": []
        }

        env_health = self._check_environment()
        health_data["components"]["environment"] = env_health
        if env_health["status"] == "unhealthy":
            health_data["status"] = "unhealthy"
            health_data["errors"].extend(env_health.get("errors", []))

        db_health = self._check_database()
        health_data["components"]["database"] = db_health
        if db_health["status"] == "unhealthy":
            health_data["status"] = "unhealthy"
            health_data["errors"].append(f"Database: {db_health['details'].get('error')}")

        health_data["components"]["service_bus"] = self._check_service_bus()
        health_data["config"] = debug_config()

        if health_data["status"] == "unhealthy":
            health_data["_status_code"] = 503
        return health_data

    # ========================================================================
    # COMPONENT CHECKS
    # ========================================================================

    def _component(self, name: str, status: str, details: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "component": name,
            "status": status,
            "details": details,
            "checked_at": datetime.now(timezone.utc).isoformat()
        }

    def _check_environment(self) -> Dict[str, Any]:
        summary = get_validation_summary()
        component = self._component(
            "environment",
            "healthy" if summary["valid"] else "unhealthy",
            summary
        )
        component["errors"] = [
            f"{e['var_name']}: {e['message']}" for e in summary.get("errors", [])
        ]
        return component

    def _check_database(self) -> Dict[str, Any]:
        from infrastructure.database import check_database
        from infrastructure.record_repository import ErrorWarningRepository

        details = check_database()
        if details["status"] == "healthy":
            try:
                details["record_count"] = ErrorWarningRepository().count()
            except Exception as e:
                self.logger.warning(f"⚠️ Record count unavailable: {e}")
                details["record_count"] = None
        return self._component("database", details.pop("status"), details)

    def _check_service_bus(self) -> Dict[str, Any]:
        queues = get_config().queues
        if queues.connection_string:
            auth = "connection_string"
        elif queues.namespace:
            auth = "managed_identity"
        else:
            auth = "not_configured"

        return self._component(
            "service_bus",
            "healthy" if auth != "not_configured" else "warning",
            {
                "reports_queue": queues.reports_queue,
                "auth": auth,
                "failure_policy": queues.failure_policy,
            }
        )


# Singleton instance
health_check_trigger = HealthCheckTrigger()
