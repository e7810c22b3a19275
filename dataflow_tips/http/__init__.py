"""HTTP surface of the agent (requires fastapi)."""

from .api import create_app, create_router

__all__ = ["create_app", "create_router"]
