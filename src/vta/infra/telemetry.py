"""OpenTelemetry bootstrap: tracer provider, instrumentations and span names.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a no-op and
``tracer`` hands out non-recording spans.

Auto-instrumentations wired here:

- **FastAPI** (inbound HTTP spans)
- **httpx** (outbound HTTP spans, which covers the OpenAI SDK calls)
- **SQLAlchemy** (interaction store spans)

Usage::

    from vta.infra.telemetry import SPAN_RAG_RETRIEVE, tracer

    with tracer.start_as_current_span(SPAN_RAG_RETRIEVE) as span:
        ...
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from opentelemetry import trace

from vta.configs.system import TracingConfig

logger = logging.getLogger(__name__)

_provider: Any = None

tracer = trace.get_tracer("vta")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_RAG_PIPELINE = "rag.pipeline"
SPAN_RAG_REWRITE = "rag.rewrite"
SPAN_RAG_RETRIEVE = "rag.retrieve"
SPAN_EMBEDDING_EMBED = "embedding.embed"
SPAN_INDEX_QUERY = "index.query"
SPAN_HISTORY_LOAD = "history.load"
SPAN_INTERACTION_APPEND = "interaction.append"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_RAG_QUERY_LEN = "rag.query_len"
ATTR_RAG_TOP_K = "rag.top_k"
ATTR_RAG_NAMESPACE = "rag.namespace"
ATTR_RAG_RESULT_COUNT = "rag.result_count"
ATTR_RAG_REWRITTEN = "rag.rewritten"

ATTR_EMBEDDING_MODEL = "embedding.model"
ATTR_EMBEDDING_TEXT_LEN = "embedding.text_len"

ATTR_HISTORY_SESSION_ID = "history.session_id"
ATTR_HISTORY_MESSAGE_COUNT = "history.message_count"


def _auth_headers(settings: TracingConfig) -> dict[str, str]:
    """Basic auth for hosted collectors; empty when no credentials are set."""
    if not (settings.username and settings.password):
        return {}
    token = base64.b64encode(
        f"{settings.username}:{settings.password}".encode()
    ).decode()
    return {"Authorization": f"Basic {token}"}


def _build_provider(settings: TracingConfig):
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.service_name}),
        sampler=ParentBased(root=TraceIdRatioBased(settings.sample_rate)),
    )
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.endpoint, headers=_auth_headers(settings)
            )
        )
    )
    return provider


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> None:
    """Install the OTLP tracer provider and the HTTP instrumentations.

    ``app`` gets ASGI middleware from the FastAPI instrumentor, so this
    must run before the application serves.  A no-op when tracing is
    disabled or has nowhere to export to.
    """
    global _provider  # noqa: PLW0603

    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return
    if not settings.endpoint:
        logger.warning("Tracing enabled without an endpoint; not exporting spans.")
        return

    _provider = _build_provider(settings)
    trace.set_tracer_provider(_provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app, excluded_urls=",".join(settings.excluded_urls)
        )

    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    HTTPXClientInstrumentor().instrument()
    logger.info(
        "OpenTelemetry tracing exporting to %s (service=%s, sample_rate=%.2f).",
        settings.endpoint,
        settings.service_name,
        settings.sample_rate,
    )


def instrument_sqlalchemy(engine: object) -> None:
    """Trace statements of the interaction store engine, if tracing is on."""
    if _provider is None:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    SQLAlchemyInstrumentor().instrument(
        engine=getattr(engine, "sync_engine", engine)
    )


def shutdown_telemetry() -> None:
    """Flush buffered spans; called when the application stops."""
    global _provider  # noqa: PLW0603

    if _provider is None:
        return
    _provider.shutdown()
    _provider = None
