"""HTTP middleware for the chat API."""

from streamchat.api.middleware.correlation import CorrelationIdMiddleware
from streamchat.api.middleware.error_handler import setup_error_handlers

__all__ = ["CorrelationIdMiddleware", "setup_error_handlers"]
