"""ASGI application factory and dependencies for the Mealsync server."""

from mealsync.server.app import app, create_app

__all__ = ["app", "create_app"]
