"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

MASK = "***"
SENSITIVE_KEYS = frozenset(
    {"signature", "api_key", "x_api_key", "authorization", "secret", "webhook_secret", "account_number", "push_token"}
)


def _is_sensitive(key: str) -> bool:
    key = key.lower().replace("-", "_")
    return key in SENSITIVE_KEYS or key.endswith("_secret")


def _mask(value, depth: int = 0):
    if depth > 5:
        return value
    if isinstance(value, dict):
        return {k: MASK if _is_sensitive(str(k)) else _mask(v, depth + 1) for k, v in value.items()}
    if isinstance(value, list):
        return [_mask(v, depth + 1) for v in value]
    return value


def mask_sensitive_fields(logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor: replace secrets and bank details with a mask, nested dicts included."""
    return _mask(event_dict)


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: If True, output JSON (production). If False, colored console (dev).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        mask_sensitive_fields,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def bind_request_context(trace_id: str, method: str, path: str) -> None:
    """Bind per-request identifiers so every log line of the request carries them."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id, method=method, path=path)


def bind_webhook_context(source: str) -> None:
    structlog.contextvars.bind_contextvars(webhook_source=source)


def bind_event_context(event_type: str, event_id: str | None = None) -> None:
    """Add the parsed event's identifiers to the bound context."""
    ctx = {"event_type": event_type}
    if event_id:
        ctx["event_id"] = event_id
    structlog.contextvars.bind_contextvars(**ctx)


def clear_request_context() -> None:
    """Clear bound context variables after a request."""
    structlog.contextvars.clear_contextvars()
