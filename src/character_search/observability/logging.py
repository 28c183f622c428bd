"""Structured logging with per-request context using structlog and contextvars."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

_configured = False


def setup_structured_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog with per-request context.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines instead of the console format
    """
    global _configured
    if _configured:
        return

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Inject request context
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
    )

    _configured = True


@contextmanager
def request_context(stream: str, request_id: int, query: str) -> Iterator[None]:
    """Tag every log line inside the block with the request it belongs to.

    Values the caller had bound under the same keys are restored on exit;
    other bound keys are left alone.

    Args:
        stream: Request stream name ("search" or "favorites")
        request_id: Monotonic id of the request within its stream
        query: Search term or joined id list
    """
    with structlog.contextvars.bound_contextvars(stream=stream, request_id=request_id, query=query):
        yield


def get_logger(name: str = "character_search") -> structlog.stdlib.BoundLogger:
    """Get a structlog logger carrying request context."""
    return structlog.get_logger(name)
