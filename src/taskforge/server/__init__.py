"""taskforge webhook server."""

from taskforge.server.app import create_app

__all__ = ["create_app"]
