from .issue_routes import router as issue_router
from .map_routes import router as map_router

__all__ = ["issue_router", "map_router"]
