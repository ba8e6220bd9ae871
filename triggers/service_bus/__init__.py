# ============================================================================
# SERVICE BUS HANDLERS MODULE
# ============================================================================
# STATUS: Trigger layer - Service Bus message handling
# PURPOSE: Handlers for Service Bus queue triggers
# ============================================================================
"""
Service Bus Handlers Module.

Keeps message handling out of function_app.py so it can be unit tested
without the Functions host.

Usage in function_app.py:
    from triggers.service_bus import handle_error_report

    @app.service_bus_queue_trigger(
        arg_name="msg",
        queue_name="errorsandwarnings",
        connection="ServiceBusConnection"
    )
    def process_error_report(msg: func.ServiceBusMessage) -> None:
        handle_error_report(msg, queue_name="errorsandwarnings")

Exports:
    handle_error_report: Error report queue handler
"""

from .report_handler import handle_error_report

__all__ = [
    'handle_error_report',
]
