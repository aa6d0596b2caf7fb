from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .enums import NotificationType, UserRole

_CHANNEL_FIELDS = {
    NotificationType.PROJECT_STATUS: "project_status",
    NotificationType.NEW_COMMENT: "new_comment",
    NotificationType.NEW_ASSIGNMENT: "new_assignment",
    NotificationType.NEW_SUBMISSION: "new_submission",
}


class NotificationChannel(BaseModel):
    """Per-event-type switches for one delivery channel."""

    project_status: bool = True
    new_comment: bool = True
    new_assignment: bool = True
    new_submission: bool = True

    def allows(self, notification_type: NotificationType | str) -> bool:
        return bool(getattr(self, _CHANNEL_FIELDS[NotificationType(notification_type)]))


class NotificationPreferences(BaseModel):
    email: NotificationChannel = NotificationChannel()
    in_app: NotificationChannel = NotificationChannel()


@dataclass
class User:
    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.STUDENT
    cohort: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    verification_token: Optional[str] = None
    verification_token_expires: Optional[datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    notification_preferences: NotificationPreferences = field(default_factory=NotificationPreferences)
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return UserRole.is_admin(self.role)
