"""Helpers shared by every remote-call boundary."""

from .invocation import execute, execute_async

__all__ = ["execute", "execute_async"]
