"""
Shared request handling for the HTTP endpoints.

Subclasses implement process_request and get_allowed_methods; the base class
turns their return value or exception into a JSON response:

    ValueError, MessageValidationError -> 400
    any other exception               -> 500
    "_status_code" key in the result   -> that status (e.g. 202, 503)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
import json
import traceback
import uuid
from datetime import datetime, timezone

import azure.functions as func

from exceptions import MessageValidationError
from util_logger import LoggerFactory, ComponentType, LogContext


class BaseHttpTrigger(ABC):
    """JSON-in, JSON-out endpoint with request-id logging."""

    def __init__(self, trigger_name: str):
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    @abstractmethod
    def process_request(self, req: func.HttpRequest) -> Dict[str, Any]:
        """
        Response payload for a request whose method is allowed.

        Raises:
            ValueError, MessageValidationError: client errors (400)
            Exception: internal server errors (500)
        """

    @abstractmethod
    def get_allowed_methods(self) -> List[str]:
        """HTTP methods accepted by this trigger."""

    def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """Entry point called from the function_app route."""
        request_id = self._generate_request_id()
        dims = {"custom_dimensions": LogContext(request_id=request_id).to_dict()}

        self.logger.info(
            f"🌐 [{self.trigger_name}] Request {request_id} started: {req.method} {req.url}",
            extra=dims
        )

        try:
            if req.method not in self.get_allowed_methods():
                return self._create_error_response(
                    error="Method not allowed",
                    message=f"Method {req.method} not allowed. Allowed: {', '.join(self.get_allowed_methods())}",
                    status_code=405,
                    request_id=request_id
                )

            response_data = self.process_request(req)
            status_code = response_data.pop("_status_code", 200)

            self.logger.info(
                f"✅ [{self.trigger_name}] Request {request_id} completed successfully",
                extra=dims
            )
            return self._create_success_response(response_data, request_id, status_code)

        except (ValueError, MessageValidationError) as e:
            self.logger.warning(f"❌ [{self.trigger_name}] Client error: {e}", extra=dims)
            return self._create_error_response(
                error="Bad request",
                message=str(e),
                status_code=400,
                request_id=request_id
            )

        except Exception as e:
            self.logger.error(f"💥 [{self.trigger_name}] Internal error: {e}", exc_info=True, extra=dims)
            return self._create_error_response(
                error="Internal server error",
                message=str(e),
                status_code=500,
                request_id=request_id,
                include_debug_info=True
            )

    # Request parsing helpers

    def extract_query_params(self, req: func.HttpRequest,
                             required_params: Optional[List[str]] = None,
                             optional_params: Optional[List[str]] = None) -> Dict[str, str]:
        """
        Non-empty query parameters by name.

        Raises:
            ValueError: a required parameter is absent or empty
        """
        wanted = list(required_params or []) + list(optional_params or [])
        params = {name: req.params[name] for name in wanted if req.params.get(name)}

        missing = [name for name in required_params or [] if name not in params]
        if missing:
            raise ValueError(f"Missing required query parameters: {', '.join(missing)}")
        return params

    def extract_json_body(self, req: func.HttpRequest, required: bool = True) -> Optional[Dict[str, Any]]:
        """
        Request body as a dict, or None when optional and absent.

        Raises:
            ValueError: If body is required but missing, or not a JSON object
        """
        try:
            body = req.get_json()
        except ValueError as e:
            raise ValueError(f"Invalid JSON in request body: {e}")

        if body is None:
            if required:
                raise ValueError("Request body is required")
            return None

        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")

        return body

    # Response building

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())[:8]

    def _json_response(self, payload: Dict[str, Any], status_code: int, request_id: str) -> func.HttpResponse:
        payload.update(request_id=request_id, timestamp=datetime.now(timezone.utc).isoformat())
        return func.HttpResponse(
            json.dumps(payload, default=str),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )

    def _create_success_response(self, data: Dict[str, Any], request_id: str,
                                 status_code: int = 200) -> func.HttpResponse:
        return self._json_response(dict(data), status_code, request_id)

    def _create_error_response(self, error: str, message: str, status_code: int,
                               request_id: str, include_debug_info: bool = False) -> func.HttpResponse:
        payload = {"error": error, "message": message}
        # Tracebacks only leave the app with DEBUG_MODE=true
        if include_debug_info and self._debug_mode():
            payload["debug"] = {"trigger_name": self.trigger_name, "traceback": traceback.format_exc()}
        return self._json_response(payload, status_code, request_id)

    def _debug_mode(self) -> bool:
        try:
            from config import get_config
            return get_config().debug_mode
        except Exception:
            return False


class SystemMonitoringTrigger(BaseHttpTrigger):
    """GET-only endpoints (liveness, health)."""

    def get_allowed_methods(self) -> List[str]:
        return ["GET"]
