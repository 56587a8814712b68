"""
Observability Module

Provides node log sinks, structured logging and tracing.
"""

from .log_sink import LogSink, NodeLog
from .logging import configure_logging
from .tracing import (
    create_span,
    get_current_span,
    get_trace_id,
    get_tracer,
    init_tracing,
)

__all__ = [
    # Log sinks
    "LogSink",
    "NodeLog",
    # Tracing
    "init_tracing",
    "get_tracer",
    "get_current_span",
    "get_trace_id",
    "create_span",
    # Logging
    "configure_logging",
]
