"""Logging setup and per-request context."""

from .logging import get_logger, request_context, setup_structured_logging

__all__ = [
    "get_logger",
    "request_context",
    "setup_structured_logging",
]
