"""OpenTelemetry tracing helpers for cfs.

Core operations open their spans through :func:`operation_span`, which works
against the bare OpenTelemetry API: until :func:`configure_telemetry` installs
an SDK provider, every span is a no-op.

Usage::

    from cfs.utils.telemetry import ATTR_SANDBOX_DIR, get_tracer, operation_span

    _tracer = get_tracer(__name__)

    with operation_span(_tracer, "cfs.execute", {ATTR_SANDBOX_DIR: "/srv/sandbox"}) as span:
        span.set_attribute(ATTR_EXIT_CODE, 0)

Exporting spans needs the ``otel`` extra: ``pip install cmd-file-service[otel]``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from cfs.errors import ServiceError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_SANDBOX_DIR = "cfs.sandbox.dir"
ATTR_TIMEOUT = "cfs.command.timeout"
ATTR_EXIT_CODE = "cfs.command.exit_code"
ATTR_TIMED_OUT = "cfs.command.timed_out"
ATTR_DOWNLOAD_URL = "cfs.download.url"
ATTR_DOWNLOAD_PATH = "cfs.download.path"
ATTR_DOWNLOAD_BYTES = "cfs.download.bytes"
ATTR_LOG_FILE = "cfs.logs.file"
ATTR_LOG_LINES = "cfs.logs.lines"
ATTR_ERROR_STATUS = "cfs.error.status_code"

_INSTRUMENTATION_NAME = "cfs"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name* (no-op until configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


@contextmanager
def operation_span(
    tracer: trace.Tracer,
    name: str,
    attributes: Mapping[str, Any],
) -> Iterator[trace.Span]:
    """Run the body inside span *name*, tagging service failures with their HTTP status."""
    with tracer.start_as_current_span(name, attributes=dict(attributes)) as span:
        try:
            yield span
        except ServiceError as exc:
            span.set_attribute(ATTR_ERROR_STATUS, exc.status_code)
            raise


def configure_telemetry(
    *,
    service_name: str = "cmd-file-service",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider for *service_name*.

    Spans go to stdout when *export_to_console* is set and to the OTLP/gRPC
    collector at *otlp_endpoint* when one is given.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or, for OTLP, ``opentelemetry-exporter-otlp``)
        is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required to export traces. "
            "Install it with: pip install cmd-file-service[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install cmd-file-service[otel]"
        )
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
