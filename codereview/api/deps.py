"""FastAPI dependencies shared by the routers.

Authentication resolves the bearer token (or the session cookie) to an
:class:`AuthenticatedUser` value that handlers pass on to services explicitly.
"""

from typing import Callable, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from codereview.container import Container
from codereview.core import UnauthorizedError, get_config
from codereview.core.context import AuthenticatedUser
from codereview.models import SortSpec, UserRole, parse_sort

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_config().AUTH.COOKIE_NAME) or None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    container: Container = Depends(get_container),
) -> AuthenticatedUser:
    """FastAPI dependency ensuring the request carries a valid token for an active user."""
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError("Not authenticated")
    user = await container.auth_service.authenticate(token)
    return AuthenticatedUser.from_user(user)


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory allowing only the listed roles (exact match)."""

    async def _require(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        user.require_role(*roles)
        return user

    return _require


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPERADMIN)
require_superadmin = require_roles(UserRole.SUPERADMIN)


class Pagination:
    """``page`` / ``limit`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit


def sort_param(default: str) -> Callable[..., SortSpec]:
    """Dependency factory for a ``sort_by`` query parameter such as ``-created_at``."""

    def _sort(sort_by: Optional[str] = Query(None, description=f"Sort field, '-' for descending (default {default})")):
        return parse_sort(sort_by or "", default)

    return _sort


def split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
