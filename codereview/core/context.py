"""The authenticated caller, passed explicitly from route dependencies into services."""

from dataclasses import dataclass
from typing import Optional

from codereview.core.exceptions import ForbiddenError
from codereview.models import User, UserRole


@dataclass(frozen=True)
class AuthenticatedUser:
    """Authenticated user context for a single request."""

    id: str
    email: str
    role: UserRole
    first_name: str = ""
    last_name: str = ""
    cohort: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "AuthenticatedUser":
        return cls(
            id=user.id,
            email=user.email,
            role=UserRole(user.role),
            first_name=user.first_name,
            last_name=user.last_name,
            cohort=user.cohort,
        )

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(self.role)

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def require_role(self, *roles: UserRole) -> None:
        """Exact-match role allow-list."""
        if self.role not in roles:
            raise ForbiddenError(f"User role {self.role.value} is not authorized to access this resource")

    def require_self_or_admin(self, owner_id: str) -> None:
        if self.id != owner_id and not self.is_admin:
            raise ForbiddenError()
