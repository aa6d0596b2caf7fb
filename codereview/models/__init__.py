from .assignment import Assignment
from .cohort import Cohort
from .comment import Comment, Reply
from .common import Page, SortSpec, parse_sort
from .enums import AssignmentKind, NotificationType, ProjectStatus, ResourceKind, UserRole
from .file import ProjectFile
from .notification import Notification
from .project import Project, ProjectFeedback
from .refs import AssignmentTarget, RelatedResource
from .user import NotificationChannel, NotificationPreferences, User

__all__ = [
    # Enums
    "UserRole",
    "ProjectStatus",
    "AssignmentKind",
    "NotificationType",
    "ResourceKind",
    # References
    "AssignmentTarget",
    "RelatedResource",
    # Models
    "User",
    "NotificationChannel",
    "NotificationPreferences",
    "Cohort",
    "Project",
    "ProjectFeedback",
    "ProjectFile",
    "Comment",
    "Reply",
    "Assignment",
    "Notification",
    # Paging
    "Page",
    "SortSpec",
    "parse_sort",
]
