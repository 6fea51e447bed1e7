"""
Observability
=============

Tracing observer, span exporters and logging setup.

Example:
    from hybridrag.observe import TracingObserver, LoggingSpanExporter, configure_logging

    configure_logging("DEBUG")
    observer = TracingObserver([LoggingSpanExporter()])
"""

from hybridrag.observe.tracing import (
    Span,
    SpanType,
    SpanStatus,
    SpanContext,
    SpanExporter,
    TracingObserver,
    NoOpObserver,
    current_span_context,
    hash_query,
)
from hybridrag.observe.exporters import LoggingSpanExporter, InMemorySpanExporter
from hybridrag.observe.logging import configure_logging

__all__ = [
    "Span",
    "SpanType",
    "SpanStatus",
    "SpanContext",
    "SpanExporter",
    "TracingObserver",
    "NoOpObserver",
    "current_span_context",
    "hash_query",
    "LoggingSpanExporter",
    "InMemorySpanExporter",
    "configure_logging",
]
