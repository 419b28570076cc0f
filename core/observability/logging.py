"""
Structured Logging with Correlation IDs

Every log line emitted while a document or tax operation runs carries the
operation's correlation fields:
- document_id: Registry record being opened / shared / deleted
- numero_documento: Business number of the document being registered
- country_code: Jurisdiction being used to seed the tax configuration
- operation: Name of the coordinator / engine operation

Usage:
    from core.observability.logging import get_logger, with_correlation

    logger = get_logger(__name__)

    with with_correlation(document_id="doc-001", operation="delete"):
        logger.info("Deleting document", extra_fields={"path": path})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional


# =============================================================================
# Correlation Context
# =============================================================================

@dataclass(frozen=True)
class CorrelationContext:
    """Correlation fields of the operation in progress."""
    document_id: Optional[str] = None
    numero_documento: Optional[str] = None
    country_code: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "CorrelationContext":
        """Copy with the given non-None fields overridden."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})

    def label(self) -> str:
        """Compact prefix for human-readable lines, e.g. 'open/3f2a9c1e-77b0'."""
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.document_id:
            parts.append(self.document_id[:12])
        if self.numero_documento:
            parts.append(f"num:{self.numero_documento}")
        if self.country_code:
            parts.append(f"country:{self.country_code}")
        return "/".join(parts) or "-"


_correlation_context: ContextVar[CorrelationContext] = ContextVar(
    "correlation_context",
    default=CorrelationContext(),
)


def get_correlation_context() -> CorrelationContext:
    return _correlation_context.get()


@contextmanager
def with_correlation(**kwargs) -> Iterator[CorrelationContext]:
    """
    Add correlation fields for the duration of a block.

    Nested blocks inherit the outer fields; the outer context is restored
    on exit.

    Usage:
        with with_correlation(country_code="ES", operation="initialize_tax_config"):
            logger.info("Seeding presets")
    """
    token = _correlation_context.set(get_correlation_context().merge(**kwargs))
    try:
        yield _correlation_context.get()
    finally:
        _correlation_context.reset(token)


# =============================================================================
# Formatters
# =============================================================================

def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {
        "timestamp": "2025-03-01T12:00:00.000+00:00",
        "level": "INFO",
        "logger": "documents.lifecycle",
        "message": "Document deleted",
        "document_id": "doc-001",
        "operation": "delete"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _record_time(record).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **get_correlation_context().to_dict(),
            **getattr(record, "extra_fields", {}),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """
    Single line with the correlation label and trailing key=value extras.

    Output format:
    2025-03-01 12:00:00 [INFO ] tax_engine.engine [initialize_tax_config/country:ES]: Initialized presets=4
    """

    def format(self, record: logging.LogRecord) -> str:
        line = "{time} [{level:5}] {name} [{label}]: {message}".format(
            time=_record_time(record).strftime("%Y-%m-%d %H:%M:%S"),
            level=record.levelname,
            name=record.name,
            label=get_correlation_context().label(),
            message=record.getMessage(),
        )

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            line += " " + " ".join(f"{k}={v}" for k, v in extra_fields.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# =============================================================================
# Logger with Correlation Support
# =============================================================================

class CorrelatedLogger:
    """
    Thin wrapper over logging.Logger accepting per-call extra_fields.

    Correlation fields are read by the formatters at emit time, so they
    follow whatever with_correlation block is active.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def log(self, level: int, msg: str, *args, extra_fields: Optional[Dict[str, Any]] = None, exc_info=None):
        if not self._logger.isEnabledFor(level):
            return
        if exc_info is True:
            exc_info = sys.exc_info()

        record = self._logger.makeRecord(
            self._logger.name, level, "(unknown file)", 0, msg, args, exc_info or None,
        )
        record.extra_fields = dict(extra_fields or {})
        self._logger.handle(record)

    def debug(self, msg: str, *args, **kwargs):
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        kwargs["exc_info"] = True
        self.log(logging.ERROR, msg, *args, **kwargs)

    def setLevel(self, level):
        self._logger.setLevel(level)

    def isEnabledFor(self, level) -> bool:
        return self._logger.isEnabledFor(level)


# =============================================================================
# Configuration
# =============================================================================

HANDLER_NAME = "facturas-core"

APP_LOGGERS = ["core", "documents", "tax_engine", "country_defaults", "services"]

_loggers: Dict[str, CorrelatedLogger] = {}
_configured = False


def configure_logging(level: int = logging.INFO, json_format: bool = False) -> logging.Handler:
    """
    Install the stdout handler on the root logger.

    Calling again replaces the handler installed by the previous call, so
    settings loaded after import-time defaults take effect.

    Args:
        level: Logging level for the handler and the application loggers
        json_format: JSON lines instead of human-readable lines

    Returns:
        The installed handler
    """
    global _configured

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root.addHandler(handler)
    root.setLevel(level)
    for logger_name in APP_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)

    _configured = True
    return handler


def get_logger(name: str) -> CorrelatedLogger:
    """
    Get a correlated logger, installing default logging on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not _configured:
        configure_logging()

    if name not in _loggers:
        _loggers[name] = CorrelatedLogger(logging.getLogger(name))
    return _loggers[name]


# =============================================================================
# Convenience Functions
# =============================================================================

def log_document_event(event: str, **fields):
    """Log a document lifecycle event (generated, deleted, purged)."""
    get_logger("documents.lifecycle").info(event, extra_fields=fields)
