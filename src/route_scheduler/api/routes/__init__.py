"""Route group exports."""

from . import chat, health, routes

__all__ = ["chat", "health", "routes"]
