"""
Azure Functions entry point for Ship Error Report Ingestion.

Ships publish error and warning reports to a Service Bus queue. Each message
carries ``time``, ``ship`` and ``exceptionmessage`` application properties and
becomes one row in the ErrorAndWarningsEntries table.

Architecture:
    Ship -> Service Bus (errorsandwarnings) -> process_error_report -> PostgreSQL
                                                      |
                                            ErrorReportMessage (pydantic)
                                            ErrorWarningRepository (SQLAlchemy)

Exports:
    app: Azure Function App instance

Endpoints:
    GET  /api/livez   - Liveness probe (no dependencies)
    GET  /api/health  - Database connectivity + environment validation
    GET  /api/reports - Recent stored reports (?ship=&limit=)
    POST /api/reports - Enqueue a report on the reports queue

Queue Triggers:
    errorsandwarnings (SERVICE_BUS_REPORTS_QUEUE) - error report ingestion

Environment Variables:
    ServiceBusConnection: Service Bus connection (or __fullyQualifiedNamespace)
    DB_HOST / DB_NAME / DB_USER / DB_PASSWORD: PostgreSQL (or DATABASE_URL)
    USE_MANAGED_IDENTITY: Passwordless PostgreSQL via Entra ID token
    INGEST_FAILURE_POLICY: log (default) or raise
    DB_CREATE_TABLES: Create the records table at startup (dev only)
"""

# ========================================================================
# IMPORTS
# ========================================================================

import logging

import azure.functions as func

# Suppress Azure Identity and Azure SDK authentication/HTTP logging
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.identity._internal").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.servicebus").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("msal").setLevel(logging.WARNING)  # Microsoft Authentication Library

from config import get_config
from config.env_validation import log_validation_results
from infrastructure.database import ensure_tables
from triggers.health import health_check_trigger
from triggers.livez import livez_trigger
from triggers.reports import report_query_trigger, report_submit_trigger
from triggers.service_bus import handle_error_report
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

# ========================================================================
# STARTUP
# ========================================================================

log_validation_results(LoggerFactory.create_logger(ComponentType.VALIDATOR, "EnvValidation"))

config = get_config()
REPORTS_QUEUE = config.queues.reports_queue

if config.database.create_tables:
    try:
        ensure_tables()
    except Exception as e:
        # Ingestion failures will surface per message; keep the host up
        logger.error(f"❌ Table creation failed at startup: {e}", exc_info=True)

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger.info(
    f"✅ Function app initialized (queue={REPORTS_QUEUE}, "
    f"failure_policy={config.queues.failure_policy}, environment={config.environment})"
)


# ========================================================================
# HTTP TRIGGERS
# ========================================================================

@app.route(route="health", methods=["GET"])
def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint using HTTP trigger base class."""
    return health_check_trigger.handle_request(req)


@app.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness probe - is the app alive? No dependencies checked."""
    return livez_trigger.handle_request(req)


@app.route(route="reports", methods=["GET"])
def list_reports(req: func.HttpRequest) -> func.HttpResponse:
    return report_query_trigger.handle_request(req)


@app.route(route="reports", methods=["POST"])
def submit_report(req: func.HttpRequest) -> func.HttpResponse:
    return report_submit_trigger.handle_request(req)


# ========================================================================
# SERVICE BUS TRIGGERS
# ========================================================================

@app.service_bus_queue_trigger(
    arg_name="msg",
    queue_name=REPORTS_QUEUE,
    connection=config.queues.connection_setting
)
def process_error_report(msg: func.ServiceBusMessage) -> None:
    """
    Store one ship error report.

    Failures are logged by the handler; with INGEST_FAILURE_POLICY=raise they
    also propagate so the host abandons the message.
    """
    handle_error_report(msg, queue_name=REPORTS_QUEUE)
