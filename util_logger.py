"""
Unified Logger System.

JSON-only structured logging for Azure Functions with Application Insights.

Every logger is named ``<component_type>.<name>``, writes one JSON object per
line to stdout and also propagates to the Functions host logger. Component
identity and per-invocation fields end up in ``customDimensions``:

    logger.info("Processing ...", extra={"custom_dimensions": LogContext(...).to_dict()})

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Per-invocation correlation dimensions
    ComponentConfig: Per-component logger settings
    JSONFormatter: One JSON object per log line
    LoggerFactory: Factory for creating loggers

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
import logging
import sys
import os
import json


# ============================================================================
# COMPONENT TYPES - Aligned with the layers of the app
# ============================================================================

class ComponentType(Enum):
    """Component types aligned with architecture layers."""
    TRIGGER = "trigger"        # Queue + HTTP entry points
    SCHEMA = "schema"          # Message boundary models
    REPOSITORY = "repository"  # Data access layer
    ADAPTER = "adapter"        # Engine, Entra ID tokens
    VALIDATOR = "validator"    # Startup validation


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Case-insensitive lookup; KeyError for unknown names."""
        return cls[level.strip().upper()]


# ============================================================================
# LOG CONTEXT - Correlation and tracking
# ============================================================================

@dataclass
class LogContext:
    """
    Correlation fields for one queue or HTTP invocation.

    Passed as ``extra={'custom_dimensions': context.to_dict()}`` so every line
    of an invocation can be filtered in Application Insights.
    """
    correlation_id: Optional[str] = None  # 8-char id generated per invocation
    queue_name: Optional[str] = None
    message_id: Optional[str] = None      # Service Bus message id
    delivery_count: Optional[int] = None  # Service Bus delivery attempt
    request_id: Optional[str] = None      # HTTP request id
    ship_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ComponentConfig:
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# JSON FORMATTER - Structured logging for Azure Functions
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, in the shape Application Insights parses.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        dims = getattr(record, 'custom_dimensions', None)
        if dims:
            payload['customDimensions'] = dims

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            payload['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


class _ComponentFilter(logging.Filter):
    """Puts component identity in front of any caller-supplied dimensions."""

    def __init__(self, component_type: ComponentType, name: str):
        super().__init__()
        self.identity = {'component_type': component_type.value, 'component_name': name}

    def filter(self, record: logging.LogRecord) -> bool:
        record.custom_dimensions = {**self.identity, **(getattr(record, 'custom_dimensions', None) or {})}
        return True


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

def _resolve_default_level() -> LogLevel:
    """DEBUG_LOGGING=true wins, then LOG_LEVEL, then INFO."""
    if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
        return LogLevel.DEBUG
    try:
        return LogLevel.from_string(os.getenv('LOG_LEVEL', 'INFO'))
    except KeyError:
        return LogLevel.INFO


class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "ErrorReportHandler")
        logger.info("Processing message")
    """

    DEFAULT_CONFIGS = {
        component: ComponentConfig(component, _resolve_default_level())
        for component in ComponentType
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Logger named "<component_type>.<name>".

        Safe to call repeatedly: the JSON handler and component filter are
        attached once per logger.
        """
        config = config or cls.DEFAULT_CONFIGS[component_type]
        level = config.log_level.to_python_level()

        logger = logging.getLogger(f"{component_type.value}.{name}")
        logger.setLevel(level)

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(level)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        if not any(isinstance(f, _ComponentFilter) for f in logger.filters):
            logger.addFilter(_ComponentFilter(component_type, name))

        # Functions host root logger forwards to Application Insights
        logger.propagate = True
        return logger


__all__ = [
    "ComponentType",
    "LogLevel",
    "LogContext",
    "ComponentConfig",
    "JSONFormatter",
    "LoggerFactory",
]
