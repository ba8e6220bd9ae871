"""
Azure Service Bus Queue Configuration.

Provides configuration for:
    - Service Bus connection settings (connection string or namespace)
    - The error report queue name
    - Send retry count for the publisher
    - The ingestion failure policy

Failure policy:
    log   - failures are logged and the message is completed (dropped)
    raise - failures are logged and re-raised, the host abandons the message
            and Service Bus redelivers it up to the queue's max delivery count

Exports:
    QueueConfig: Pydantic queue configuration model
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .defaults import QueueDefaults


# ============================================================================
# QUEUE CONFIGURATION
# ============================================================================

class QueueConfig(BaseModel):
    """
    Azure Service Bus queue configuration.
    """

    connection_setting: str = Field(
        default=QueueDefaults.CONNECTION_SETTING,
        description="Name of the app setting the trigger binding reads its connection from"
    )

    connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Service Bus connection string (from ServiceBusConnection env var)"
    )

    namespace: Optional[str] = Field(
        default=None,
        description="Fully qualified namespace for managed identity auth (alternative to connection string)"
    )

    reports_queue: str = Field(
        default=QueueDefaults.REPORTS_QUEUE,
        description="Queue carrying ship error and warning reports"
    )

    retry_count: int = Field(
        default=QueueDefaults.RETRY_COUNT,
        ge=1,
        le=10,
        description="Send attempts for the publisher"
    )

    failure_policy: str = Field(
        default=QueueDefaults.FAILURE_POLICY,
        description="What the ingestion handler does after logging a failure: 'log' or 'raise'"
    )

    @field_validator("failure_policy")
    @classmethod
    def _validate_failure_policy(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in QueueDefaults.FAILURE_POLICIES:
            raise ValueError(
                f"failure_policy must be one of {', '.join(QueueDefaults.FAILURE_POLICIES)}, got '{value}'"
            )
        return value

    @property
    def raise_on_failure(self) -> bool:
        return self.failure_policy == QueueDefaults.FAILURE_POLICY_RAISE

    def debug_dict(self) -> dict:
        return {
            "connection_setting": self.connection_setting,
            "connection_string": "***MASKED***" if self.connection_string else None,
            "namespace": self.namespace,
            "reports_queue": self.reports_queue,
            "retry_count": self.retry_count,
            "failure_policy": self.failure_policy,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            connection_string=os.environ.get(QueueDefaults.CONNECTION_SETTING),
            # Check both SERVICE_BUS_NAMESPACE and Azure Functions binding variable
            namespace=os.environ.get("SERVICE_BUS_NAMESPACE") or os.environ.get(f"{QueueDefaults.CONNECTION_SETTING}__fullyQualifiedNamespace"),
            reports_queue=os.environ.get("SERVICE_BUS_REPORTS_QUEUE", QueueDefaults.REPORTS_QUEUE),
            retry_count=int(os.environ.get("SERVICE_BUS_RETRY_COUNT", str(QueueDefaults.RETRY_COUNT))),
            failure_policy=os.environ.get("INGEST_FAILURE_POLICY", QueueDefaults.FAILURE_POLICY),
        )


__all__ = ["QueueConfig"]
