"""Structured logging bootstrap.

One stdout handler on the root logger, shared with uvicorn.  Output is
JSON lines for log shippers unless ``logging.json_output`` is off, in
which case uvicorn's coloured formatter is used for local runs.

Every record carries ``session_id`` (OpenTelemetry baggage bound by the
chat routes) and, when tracing is active, ``trace_id``/``span_id``, so
one student's conversation can be followed across requests and into
traces.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import baggage, context, trace

from vta.configs.system import LoggingConfig

SESSION_BAGGAGE_KEY = "session.id"

_CONTEXT_FIELDS = ("session_id", "trace_id", "span_id")

_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s " + " ".join(
    f"%({field})s" for field in _CONTEXT_FIELDS
)
_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s [%(session_id)s] %(message)s"
_DEV_DATEFMT = "%H:%M:%S"

# Noisy client libraries; raised to WARNING unless ``logging.loggers``
# says otherwise.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "opentelemetry", "pinecone")


def bind_session_id(session_id: str) -> None:
    """Tag the log records of the current request with *session_id*."""
    context.attach(baggage.set_baggage(SESSION_BAGGAGE_KEY, session_id))


class _RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        session_id = baggage.get_baggage(SESSION_BAGGAGE_KEY)
        record.session_id = str(session_id) if session_id else ""  # type: ignore[attr-defined]
        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if not config.json_output:
        from uvicorn.logging import DefaultFormatter

        return DefaultFormatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT, use_colors=True)

    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(
        fmt=_JSON_FORMAT,
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": config.service_name},
        defaults={field: "" for field in _CONTEXT_FIELDS},
    )


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger (call once at startup, before lifespan)."""
    if config is None:
        config = LoggingConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_RequestContextFilter())
    handler.setFormatter(_build_formatter(config))

    root = logging.getLogger()
    root.setLevel(config.level.upper())
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvi = logging.getLogger(name)
        uvi.handlers = [handler]
        uvi.propagate = False

    levels = {name: "WARNING" for name in _QUIET_LOGGERS}
    levels.update(config.loggers)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level.upper())
