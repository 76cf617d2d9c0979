"""
WebSocket server and event handling for arcade rooms.
"""

from .server import app, create_app

__all__ = ["app", "create_app"]
