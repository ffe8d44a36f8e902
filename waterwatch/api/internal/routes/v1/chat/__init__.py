from .chat_routes import router as chat_router

__all__ = ["chat_router"]
