"""
Observability Module

Provides structured logging with correlation IDs (system, operation,
person id) written to stderr.
"""

from core.observability.logging import (
    CorrelationContext,
    configure_logging,
    get_logger,
    with_correlation,
)

__all__ = [
    "CorrelationContext",
    "configure_logging",
    "get_logger",
    "with_correlation",
]
