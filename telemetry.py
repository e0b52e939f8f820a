"""Optional tracing of a sync run.

Spans are exported only when ``UPTRACE_DSN`` is set and the ``telemetry``
extra is installed; otherwise ``traced`` does nothing.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Any, Iterator

from config import Config
from utils import redact_url

SERVICE_NAME = "factorio-mod-updater"
ATTRIBUTE_PREFIX = "factorio."

_tracer = None


def span_attributes(**fields: Any) -> dict[str, Any]:
    """Namespace field names and coerce values to types a span accepts."""
    attributes: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if not isinstance(value, (str, bool, int, float)):
            value = str(value)
        attributes[ATTRIBUTE_PREFIX + key] = value
    return attributes


@contextmanager
def traced(step: str, **fields: Any) -> Iterator[None]:
    tracer = _tracer
    if tracer is None:
        yield
        return
    # exceptions are recorded on the span and mark it as failed
    with tracer.start_as_current_span(step, attributes=span_attributes(**fields)):
        yield


def init_telemetry(config: Config) -> bool:
    global _tracer

    if _tracer is not None:
        return True
    dsn = os.environ.get("UPTRACE_DSN", "").strip()
    if not dsn:
        logging.debug("UPTRACE_DSN is not set, tracing is disabled")
        return False

    service_version = _service_version()
    try:
        import uptrace
        from opentelemetry import trace

        uptrace.configure_opentelemetry(
            dsn=dsn,
            service_name=SERVICE_NAME,
            service_version=service_version,
            resource_attributes=span_attributes(
                service=config.service_name,
                compose_file=config.compose_file,
                mod_dir=config.mod_dir,
            ),
        )
    except (ImportError, RuntimeError, ValueError, TypeError, AttributeError):
        logging.exception("Failed to initialize OpenTelemetry")
        return False

    _instrument_requests()
    _tracer = trace.get_tracer(SERVICE_NAME, service_version)
    logging.info("Tracing %s to Uptrace", config.service_name)
    return True


def shutdown_telemetry() -> None:
    global _tracer

    if _tracer is None:
        return
    _tracer = None
    try:
        import uptrace

        uptrace.shutdown()
    except (ImportError, RuntimeError, ValueError, TypeError, AttributeError):
        logging.exception("Failed to flush traces")


def _service_version() -> str:
    try:
        return version(SERVICE_NAME)
    except PackageNotFoundError:
        return ""


def _instrument_requests() -> None:
    try:
        from opentelemetry.instrumentation.requests import RequestsInstrumentor

        RequestsInstrumentor().instrument(request_hook=_redact_request_url)
    except (ImportError, RuntimeError, ValueError, TypeError, AttributeError) as exc:
        logging.warning("Requests instrumentation is unavailable: %s", exc)


def _redact_request_url(span: Any, request: Any) -> None:
    if span is None or not span.is_recording():
        return
    # download URLs carry the portal token in the query string
    safe_url = redact_url(str(getattr(request, "url", "") or ""))
    span.set_attribute("http.url", safe_url)
    span.set_attribute("url.full", safe_url)
