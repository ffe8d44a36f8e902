# Local application imports
from waterwatch.services.auth.auth_gate import AuthEvent, AuthGate, AuthSession, ensure_admin_account

__all__ = ["AuthEvent", "AuthGate", "AuthSession", "ensure_admin_account"]
