from .assignment import AssignmentCreateRequest, AssignmentResponse, AssignmentUpdateRequest, ReconcileResponse
from .auth import EmailRequest, LoginRequest, RegisterRequest, ResetPasswordRequest, TokenResponse
from .cohort import CohortCreateRequest, CohortResponse, CohortUpdateRequest
from .comment import CommentCreateRequest, CommentResponse, CommentUpdateRequest, ReplyCreateRequest
from .common import ApiResponse, CountResponse, PageData, ok
from .file import FileResponse
from .notification import NotificationListData, NotificationResponse
from .project import (
    FeedbackRequest,
    ProjectCreateRequest,
    ProjectResponse,
    ProjectStatusRequest,
    ProjectUpdateRequest,
)
from .user import (
    NotificationPreferencesUpdate,
    PasswordChangeRequest,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    # Common
    "ApiResponse",
    "CountResponse",
    "PageData",
    "ok",
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "EmailRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    # Users
    "UserResponse",
    "UserUpdateRequest",
    "PasswordChangeRequest",
    "NotificationPreferencesUpdate",
    # Cohorts
    "CohortCreateRequest",
    "CohortUpdateRequest",
    "CohortResponse",
    # Projects
    "ProjectCreateRequest",
    "ProjectUpdateRequest",
    "ProjectStatusRequest",
    "FeedbackRequest",
    "ProjectResponse",
    # Files
    "FileResponse",
    # Comments
    "CommentCreateRequest",
    "CommentUpdateRequest",
    "ReplyCreateRequest",
    "CommentResponse",
    # Assignments
    "AssignmentCreateRequest",
    "AssignmentUpdateRequest",
    "AssignmentResponse",
    "ReconcileResponse",
    # Notifications
    "NotificationResponse",
    "NotificationListData",
]
