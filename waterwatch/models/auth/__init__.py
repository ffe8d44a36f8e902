# Local application imports
from waterwatch.models.auth.session import Session
from waterwatch.models.auth.user import User

__all__ = ["User", "Session"]
