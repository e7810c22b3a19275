"""Observability helpers (structured logging)."""

from .logging import ComponentLogger, configure_logging, new_request_id

__all__ = [
    "ComponentLogger",
    "configure_logging",
    "new_request_id",
]
