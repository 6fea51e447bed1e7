"""
Span exporters shipped with the package.

- LoggingSpanExporter: one structlog event per span
- InMemorySpanExporter: keeps traces in memory (tests, debugging)
"""

import structlog
import threading
from typing import List

from hybridrag.observe.tracing import Span, SpanExporter

log = structlog.get_logger()


class LoggingSpanExporter(SpanExporter):
    """Logs every span of a trace at the given level."""

    def __init__(self, level: str = "info"):
        self.level = level.lower()

    @property
    def name(self) -> str:
        return "logging"

    def export(self, spans: List[Span]) -> None:
        emit = getattr(log, self.level)
        for span in spans:
            emit(
                f"span {span.name}",
                trace_id=span.trace_id,
                span_id=span.id,
                parent_id=span.parent_id,
                status=span.status.value,
                duration_ms=span.duration_ms,
                error=span.error or None,
                **span.attributes
            )


class InMemorySpanExporter(SpanExporter):
    """
    Collects exported traces.

    Attributes:
        traces: One list of spans per exported trace, in export order
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.traces: List[List[Span]] = []

    @property
    def name(self) -> str:
        return "memory"

    def export(self, spans: List[Span]) -> None:
        with self._lock:
            self.traces.append(list(spans))

    @property
    def spans(self) -> List[Span]:
        """All exported spans, flattened."""
        with self._lock:
            return [span for trace in self.traces for span in trace]

    def clear(self) -> None:
        with self._lock:
            self.traces.clear()
