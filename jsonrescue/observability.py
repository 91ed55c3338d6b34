"""
Engine observability — OpenTelemetry tracing + Prometheus metrics.

Provides:
- Spans per recovery stage (strict parse, line recovery, fragment scan)
- Outcome counters and latency histograms for recovery calls
- Prometheus scraping utilities for embedding services

Tracing is a no-op until the host application installs a tracer provider
(or calls `setup_tracing()`).
"""

import time
from contextlib import contextmanager
from typing import Generator

import structlog
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = structlog.get_logger(__name__)

# ── OpenTelemetry Setup ──────────────────────────────────────────────


def setup_tracing(service_name: str | None = None, console: bool = True) -> trace.Tracer:
    """
    Install an SDK tracer provider for the engine.

    Args:
        service_name: Name of the service (appears in traces). Defaults to APP_NAME.
        console: Export finished spans to stdout (local debugging).
    """
    from jsonrescue.version import APP_NAME, VERSION

    resource = Resource.create(
        {"service.name": service_name or APP_NAME, "service.version": VERSION}
    )
    provider = TracerProvider(resource=resource)
    if console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    logger.info("otel_tracing_initialized", service=service_name or APP_NAME)
    return get_tracer()


def get_tracer() -> trace.Tracer:
    """Tracer from whichever provider is currently installed."""
    return trace.get_tracer("jsonrescue")


@contextmanager
def trace_recovery_stage(stage_name: str, **attributes) -> Generator:
    """
    Context manager to trace one stage of a recovery call.

    Usage:
        with trace_recovery_stage("fragment_scan", text_length=len(text)):
            value = extract_largest_fragment(text)
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(
        f"jsonrescue.{stage_name}",
        attributes={
            "recovery.stage": stage_name,
            **{k: str(v) for k, v in attributes.items()},
        },
    ) as span:
        start = time.monotonic()
        try:
            yield span
            span.set_attribute("recovery.status", "success")
        except Exception as e:
            span.set_attribute("recovery.status", "error")
            span.set_attribute("recovery.error", str(e))
            span.record_exception(e)
            raise
        finally:
            latency = (time.monotonic() - start) * 1000
            span.set_attribute("recovery.latency_ms", round(latency))


# ── Recovery Metrics ─────────────────────────────────────────────────

RECOVERY_CALLS = Counter(
    "recoveries_total",
    "Recovery calls by the stage that produced the value",
    ["source"],
    namespace="jsonrescue",
)

RECOVERY_REJECTED = Counter(
    "rejected_inputs_total",
    "Inputs refused by the size guard",
    namespace="jsonrescue",
)

CORRUPT_LINES = Counter(
    "corrupt_lines_total",
    "Lines replaced by placeholders during reconstruction",
    namespace="jsonrescue",
)

RECOVERY_LATENCY = Histogram(
    "recovery_latency_seconds",
    "End-to-end recovery latency",
    ["source"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5],
    namespace="jsonrescue",
)


# ── Prometheus Scraping ──────────────────────────────────────────────


def get_metrics() -> bytes:
    """Generate Prometheus metrics for scraping."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Content type for Prometheus metrics response."""
    return CONTENT_TYPE_LATEST
