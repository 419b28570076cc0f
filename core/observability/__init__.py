"""
Observability for the document core

Structured logging whose lines carry the correlation fields (document,
document number, country, operation) of the operation in progress.
"""

from core.observability.logging import (
    CorrelationContext,
    StructuredFormatter,
    HumanReadableFormatter,
    configure_logging,
    get_correlation_context,
    get_logger,
    log_document_event,
    with_correlation,
)

__all__ = [
    # Context
    "CorrelationContext",
    "get_correlation_context",
    "with_correlation",
    # Output
    "StructuredFormatter",
    "HumanReadableFormatter",
    "configure_logging",
    # Loggers
    "get_logger",
    "log_document_event",
]
