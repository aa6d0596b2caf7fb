from .assignment_repository import AssignmentRepository
from .base_repository import BaseRepository, to_object_id
from .cohort_repository import CohortRepository
from .comment_repository import CommentRepository
from .file_repository import FileRepository
from .notification_repository import NotificationRepository
from .project_repository import ProjectRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "to_object_id",
    "UserRepository",
    "CohortRepository",
    "ProjectRepository",
    "FileRepository",
    "CommentRepository",
    "AssignmentRepository",
    "NotificationRepository",
]
