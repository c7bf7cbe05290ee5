"""API v1 routers."""

from . import ask, conversations

__all__ = ["ask", "conversations"]
