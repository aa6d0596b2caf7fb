from .deps import get_container, get_current_user, require_admin, require_roles, require_superadmin
from .middleware import RequestLoggingMiddleware

__all__ = [
    "get_container",
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_superadmin",
    "RequestLoggingMiddleware",
]
