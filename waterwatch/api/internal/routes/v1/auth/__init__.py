# Local application imports
from waterwatch.api.internal.routes.v1.auth.auth_routes import router

__all__ = ["router"]
