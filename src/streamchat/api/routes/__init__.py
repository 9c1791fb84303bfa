"""API route modules."""

from streamchat.api.routes.chat import router as chat_router
from streamchat.api.routes.conversations import router as conversations_router
from streamchat.api.routes.health import router as health_router

__all__ = ["chat_router", "conversations_router", "health_router"]
