# ============================================================================
# SERVICE BUS REPOSITORY
# ============================================================================
# PURPOSE: Publish error reports to the Service Bus reports queue
# EXPORTS: ServiceBusRepository - Singleton wrapper over ServiceBusClient
# DEPENDENCIES: azure-servicebus, azure-identity
# SOURCE: ServiceBusConnection (connection string) or namespace + DefaultAzureCredential
# ============================================================================

"""
Service Bus Repository Implementation.

Publishes error reports in the same shape ships use: the body is the
exception text and the payload travels in application properties
(``time``, ``ship``, ``exceptionmessage``). Used by POST /api/reports to feed
the ingestion trigger end to end.

Authentication:
    - ServiceBusConnection set: connection string (local development)
    - Otherwise: fully qualified namespace + DefaultAzureCredential
"""

import threading
import time
import uuid
from datetime import timedelta
from typing import Dict, Optional

from azure.identity import DefaultAzureCredential
from azure.servicebus import ServiceBusClient, ServiceBusMessage, ServiceBusSender

from config import get_config, QueueConfig
from config.defaults import QueueDefaults
from core.schema import ErrorReportMessage
from exceptions import ConfigurationError, ServiceBusError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "ServiceBusRepository")


class ServiceBusRepository:
    """
    Thread-safe singleton Service Bus publisher.

    Senders are cached per queue and reused across calls.
    """

    _instance: Optional['ServiceBusRepository'] = None
    _lock = threading.Lock()

    def __init__(self, queue_config: Optional[QueueConfig] = None, client: Optional[ServiceBusClient] = None):
        self.config = queue_config or get_config().queues
        self.client = client or self._create_client(self.config)
        self.max_retries = self.config.retry_count
        self.retry_delay = 1  # seconds
        self._senders: Dict[str, ServiceBusSender] = {}
        logger.info(f"✅ ServiceBusRepository initialized (queue={self.config.reports_queue})")

    @classmethod
    def instance(cls) -> 'ServiceBusRepository':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._lock:
            if cls._instance is not None:
                cls._instance.close()
            cls._instance = None

    @staticmethod
    def _create_client(queue_config: QueueConfig) -> ServiceBusClient:
        if queue_config.connection_string:
            logger.info("🔑 Using connection string authentication")
            return ServiceBusClient.from_connection_string(queue_config.connection_string)

        if not queue_config.namespace:
            raise ConfigurationError(
                "Service Bus not configured: set ServiceBusConnection or "
                "SERVICE_BUS_NAMESPACE (ServiceBusConnection__fullyQualifiedNamespace)"
            )

        logger.info(f"🔐 Using DefaultAzureCredential for namespace {queue_config.namespace}")
        return ServiceBusClient(
            fully_qualified_namespace=queue_config.namespace,
            credential=DefaultAzureCredential()
        )

    def _get_sender(self, queue_name: str) -> ServiceBusSender:
        if queue_name not in self._senders:
            logger.debug(f"🚌 Creating new sender for queue: {queue_name}")
            self._senders[queue_name] = self.client.get_queue_sender(queue_name)
        return self._senders[queue_name]

    def send_error_report(self, report: ErrorReportMessage, queue_name: Optional[str] = None) -> str:
        """
        Send one error report.

        Args:
            report: Validated report
            queue_name: Target queue (default: configured reports queue)

        Returns:
            Message id of the sent message

        Raises:
            ServiceBusError: all send attempts failed
        """
        queue_name = queue_name or self.config.reports_queue
        message = ServiceBusMessage(
            body=report.exception_message,
            message_id=uuid.uuid4().hex,
            content_type="text/plain",
            time_to_live=timedelta(hours=QueueDefaults.MESSAGE_TTL_HOURS),
            application_properties=report.to_properties(),
        )

        for attempt in range(self.max_retries):
            try:
                self._get_sender(queue_name).send_messages(message)
                logger.info(
                    f"✅ Error report sent to {queue_name} (ship={report.ship})",
                    extra={"custom_dimensions": {"queue_name": queue_name, "message_id": message.message_id}}
                )
                return message.message_id
            except Exception as e:
                logger.warning(f"⚠️ Send attempt {attempt + 1}/{self.max_retries} failed: {e}")
                # Drop the cached sender; a broken link is not reused
                self._senders.pop(queue_name, None)
                if attempt == self.max_retries - 1:
                    raise ServiceBusError(
                        f"Failed to send message to {queue_name} after {self.max_retries} attempts: {e}"
                    ) from e
                time.sleep(self.retry_delay * (2 ** attempt))

    def close(self) -> None:
        for sender in self._senders.values():
            try:
                sender.close()
            except Exception as e:
                logger.debug(f"Sender close failed: {e}")
        self._senders.clear()
        self.client.close()


__all__ = ["ServiceBusRepository"]
