from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from codereview.models import NotificationPreferences, UserRole


class UserResponse(BaseModel):
    """Public view of a user; never carries credentials or tokens."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    cohort: Optional[str] = None
    is_active: bool
    is_verified: bool
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    notification_preferences: NotificationPreferences
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    # Admin only
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    cohort: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)


class ChannelUpdate(BaseModel):
    project_status: Optional[bool] = None
    new_comment: Optional[bool] = None
    new_assignment: Optional[bool] = None
    new_submission: Optional[bool] = None


class NotificationPreferencesUpdate(BaseModel):
    email: Optional[ChannelUpdate] = None
    in_app: Optional[ChannelUpdate] = None
