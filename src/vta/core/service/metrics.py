"""Prometheus metrics for the teaching assistant.

Business metrics that complement the HTTP metrics provided by
``prometheus-fastapi-instrumentator``.  All metrics use the ``vta_``
prefix.
"""

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import FastAPI
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from vta.configs.system import MetricsConfig, TracingConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Chat request metrics
# ---------------------------------------------------------------------------

CHAT_REQUESTS_ACTIVE = Gauge(
    "vta_chat_requests_active",
    "Number of chat requests currently being answered",
    ["service"],
)

CHAT_REQUESTS_TOTAL = Counter(
    "vta_chat_requests_total",
    "Total chat requests, by outcome",
    ["service", "status"],  # "ok" | "error"
)

CHAT_REQUEST_DURATION_SECONDS = Histogram(
    "vta_chat_request_duration_seconds",
    "End-to-end duration of answering one chat request",
    ["service"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120),
)

# ---------------------------------------------------------------------------
# Retrieval metrics
# ---------------------------------------------------------------------------

EMBEDDING_LATENCY_SECONDS = Histogram(
    "vta_embedding_latency_seconds",
    "Latency of embedding API calls",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

RAG_RETRIEVAL_LATENCY_SECONDS = Histogram(
    "vta_rag_retrieval_latency_seconds",
    "Retrieval latency (embed + index handle + vector query)",
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10),
)

RAG_MATCHES_RETURNED = Histogram(
    "vta_rag_matches_returned",
    "Number of course-material matches per retrieval",
    buckets=(0, 1, 2, 3, 5, 10),
)

QUERY_REWRITES_TOTAL = Counter(
    "vta_query_rewrites_total",
    "Query clean-up attempts, by outcome",
    ["result"],  # "rewritten" | "fallback" | "skipped"
)

# ---------------------------------------------------------------------------
# History / feedback metrics
# ---------------------------------------------------------------------------

HISTORY_LOAD_FAILURES_TOTAL = Counter(
    "vta_history_load_failures_total",
    "History listings downgraded to an empty list",
)

RATINGS_TOTAL = Counter(
    "vta_ratings_total",
    "Rating submissions, by rating and outcome",
    ["rating", "result"],  # result: "rated" | "already_rated" | "not_found"
)


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------


def observe_reply(
    service: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Record active gauge, outcome counter and duration for a reply coroutine."""

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            CHAT_REQUESTS_ACTIVE.labels(service=service).inc()
            start = time.monotonic()
            status = "ok"
            try:
                return await fn(*args, **kwargs)
            except Exception:
                status = "error"
                raise
            finally:
                CHAT_REQUESTS_ACTIVE.labels(service=service).dec()
                CHAT_REQUESTS_TOTAL.labels(service=service, status=status).inc()
                CHAT_REQUEST_DURATION_SECONDS.labels(service=service).observe(
                    time.monotonic() - start
                )

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# App wiring
# ---------------------------------------------------------------------------


def install_metrics(
    app: FastAPI, config: MetricsConfig, tracing: TracingConfig
) -> None:
    """Attach HTTP instrumentation middleware and the exposition endpoint.

    Must run before the application starts serving: Starlette refuses
    new middleware once the stack is built.
    """
    if not config.enabled:
        logger.info("Prometheus metrics disabled")
        return

    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=tracing.excluded_urls,
    ).instrument(app).expose(app, endpoint=config.endpoint)
    logger.info("Prometheus metrics exposed at %s", config.endpoint)
