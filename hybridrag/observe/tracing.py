"""
Retrieval Tracing
=================

Observer that turns retrieval events into spans and exports one trace
per retrieval.

Trace layout:
    retrieval (root, opened by on_retrieve_start)
    ├── retrieve.vector.search
    ├── retrieve.graph.traverse
    └── retrieve.rerank

The active span is carried in a ContextVar. Tasks spawned by the
orchestrator (asyncio.gather) copy the context at creation, so events
from concurrent branches attach to the same root span.

Child events are reported once the operation has finished, with its
latency: their start time is reconstructed as `end - latency`.
"""

import hashlib
import structlog
import threading
import uuid
from abc import ABC, abstractmethod
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from hybridrag.core.interfaces import Observer
from hybridrag.core.models import ContextItem, Query, Result

log = structlog.get_logger()


class SpanType(str, Enum):
    RETRIEVAL = "retrieval"
    VECTOR_SEARCH = "retrieve.vector.search"
    GRAPH_TRAVERSE = "retrieve.graph.traverse"
    RERANK = "retrieve.rerank"


class SpanStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


@dataclass
class Span:
    """
    A traced operation.

    Attributes:
        id: Span identifier
        trace_id: Identifier shared by all spans of one retrieval
        parent_id: Parent span id ("" for the root)
        type: Operation type
        name: Human-readable name
        start_time: UTC start
        end_time: UTC end (None while the span is open)
        attributes: Small scalar values
        artifacts: Larger objects (e.g. retrieved items summary)
        status: ok / error
        error: Error message when status is error
    """
    id: str
    trace_id: str
    parent_id: str
    type: SpanType
    name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    status: SpanStatus = SpanStatus.OK
    error: str = ""

    @property
    def duration_ms(self) -> int:
        if self.end_time is None:
            return 0
        return int((self.end_time - self.start_time).total_seconds() * 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "trace_id": self.trace_id,
            "parent_id": self.parent_id,
            "type": self.type.value,
            "name": self.name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "attributes": self.attributes,
            "artifacts": self.artifacts,
            "status": self.status.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class SpanContext:
    trace_id: str
    span_id: str
    parent: Optional["SpanContext"] = None


_current_span: ContextVar[Optional[SpanContext]] = ContextVar("hybridrag_current_span", default=None)


def current_span_context() -> Optional[SpanContext]:
    """SpanContext of the retrieval running in the current context, if any."""
    return _current_span.get()


class SpanExporter(ABC):
    """Sends finished traces to an observability backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def export(self, spans: List[Span]) -> None:
        ...


def generate_id() -> str:
    return uuid.uuid4().hex[:16]


def hash_query(text: str) -> str:
    """Short sha256 prefix, so that query text never reaches the trace."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:8]


def summarize_items(items: List[ContextItem]) -> List[Dict[str, Any]]:
    return [
        {
            "id": item.id,
            "source": item.source,
            "score": item.score,
            "mode": item.provenance.mode.value,
        }
        for item in items
    ]


class TracingObserver(Observer):
    """
    Observer recording spans and exporting them per trace.

    Example:
        >>> exporter = InMemorySpanExporter()
        >>> observer = TracingObserver([exporter])
        >>> hybrid = HybridRetriever(HybridRetrieverConfig(
        ...     vector=vector_retriever, observer=observer
        ... ))
        >>> await hybrid.retrieve(Query(text="..."))
        >>> [span.type for span in exporter.traces[0]]
        [<SpanType.RETRIEVAL: 'retrieval'>, <SpanType.VECTOR_SEARCH: 'retrieve.vector.search'>]

    Events received outside of a retrieval (no active span) are ignored.
    """

    def __init__(self, exporters: Optional[List[SpanExporter]] = None):
        self.exporters = list(exporters or [])
        self._lock = threading.Lock()
        self._spans: Dict[str, Span] = {}
        self._traces: Dict[str, List[str]] = {}

    def on_retrieve_start(self, query: Query) -> None:
        parent = _current_span.get()
        span_id = generate_id()
        trace_id = parent.trace_id if parent else span_id

        span = Span(
            id=span_id,
            trace_id=trace_id,
            parent_id=parent.span_id if parent else "",
            type=SpanType.RETRIEVAL,
            name="retrieve",
            start_time=datetime.now(timezone.utc),
            attributes={
                "retrieval.query_hash": hash_query(query.text),
                "retrieval.top_k": query.top_k,
                "retrieval.modes": [mode.value for mode in query.modes],
                "retrieval.min_score": query.min_score,
            },
        )

        with self._lock:
            self._spans[span_id] = span
            self._traces.setdefault(trace_id, []).append(span_id)

        _current_span.set(SpanContext(trace_id=trace_id, span_id=span_id, parent=parent))

    def on_retrieve_end(self, result: Optional[Result], error: Optional[BaseException]) -> None:
        context = _current_span.get()
        if context is None:
            return
        _current_span.set(context.parent)

        with self._lock:
            span = self._spans.get(context.span_id)
            if span is None:
                return

            span.end_time = datetime.now(timezone.utc)
            if error is not None:
                span.status = SpanStatus.ERROR
                span.error = str(error) or type(error).__name__
            elif result is not None:
                span.attributes["retrieval.result_count"] = len(result.items)
                span.attributes["retrieval.latency_ms"] = result.metadata.latency_ms
                span.attributes["retrieval.modes_used"] = [m.value for m in result.metadata.modes_used]
                span.attributes["retrieval.cache_hit"] = result.metadata.cache_hit
                span.artifacts["retrieved.context"] = summarize_items(result.items)

            # Nested retrievals export with their outermost root
            if context.parent is not None:
                return
            spans = self._pop_trace(context.trace_id)

        self._export(spans)

    def on_vector_search(self, backend: str, top_k: int, result_count: int, latency_ms: int) -> None:
        self._record_child(
            SpanType.VECTOR_SEARCH,
            latency_ms,
            {
                "vector.backend": backend,
                "vector.top_k": top_k,
                "vector.result_count": result_count,
                "vector.latency_ms": latency_ms,
            }
        )

    def on_graph_traverse(self, backend: str, depth: int, node_count: int, latency_ms: int) -> None:
        self._record_child(
            SpanType.GRAPH_TRAVERSE,
            latency_ms,
            {
                "graph.backend": backend,
                "graph.depth": depth,
                "graph.node_count": node_count,
                "graph.latency_ms": latency_ms,
            }
        )

    def on_rerank(self, model: str, input_count: int, output_count: int, latency_ms: int) -> None:
        self._record_child(
            SpanType.RERANK,
            latency_ms,
            {
                "reranker.model": model,
                "reranker.input_count": input_count,
                "reranker.output_count": output_count,
                "reranker.latency_ms": latency_ms,
            }
        )

    @property
    def active_spans(self) -> int:
        with self._lock:
            return len(self._spans)

    def _record_child(self, span_type: SpanType, latency_ms: int, attributes: Dict[str, Any]) -> None:
        context = _current_span.get()
        if context is None:
            return

        end = datetime.now(timezone.utc)
        span = Span(
            id=generate_id(),
            trace_id=context.trace_id,
            parent_id=context.span_id,
            type=span_type,
            name=span_type.value,
            start_time=end - timedelta(milliseconds=latency_ms),
            end_time=end,
            attributes=attributes,
        )

        with self._lock:
            self._spans[span.id] = span
            self._traces.setdefault(context.trace_id, []).append(span.id)

    def _pop_trace(self, trace_id: str) -> List[Span]:
        span_ids = self._traces.pop(trace_id, [])
        return [self._spans.pop(span_id) for span_id in span_ids if span_id in self._spans]

    def _export(self, spans: List[Span]) -> None:
        for exporter in self.exporters:
            try:
                exporter.export(spans)
            except Exception as e:
                log.error(
                    "Failed to export spans",
                    exporter=exporter.name,
                    span_count=len(spans),
                    error=str(e)
                )


class NoOpObserver(Observer):
    """Observer that ignores every event."""

    def on_vector_search(self, backend: str, top_k: int, result_count: int, latency_ms: int) -> None:
        pass

    def on_graph_traverse(self, backend: str, depth: int, node_count: int, latency_ms: int) -> None:
        pass

    def on_rerank(self, model: str, input_count: int, output_count: int, latency_ms: int) -> None:
        pass
