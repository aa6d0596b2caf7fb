from .assignment_service import AssignmentService, ReconcileReport
from .auth_service import AuthService
from .cohort_service import CohortService
from .comment_service import CommentService
from .email_service import DisabledEmailSender, EmailSender, EmailService, SmtpEmailSender, render_template
from .fanout import NotificationFanout, distinct_recipients
from .file_service import FileService, UploadedFile, detect_language, is_text_file
from .notification_service import NotificationService
from .project_service import ProjectService, normalize_tags
from .storage import LocalStorageHandler, MinioStorageHandler, StorageHandler, build_key, create_storage
from .user_service import UserService

__all__ = [
    # Collaborators
    "StorageHandler",
    "LocalStorageHandler",
    "MinioStorageHandler",
    "create_storage",
    "build_key",
    "EmailSender",
    "SmtpEmailSender",
    "DisabledEmailSender",
    "EmailService",
    "render_template",
    # Domain services
    "AuthService",
    "UserService",
    "CohortService",
    "ProjectService",
    "normalize_tags",
    "FileService",
    "UploadedFile",
    "detect_language",
    "is_text_file",
    "CommentService",
    "AssignmentService",
    "ReconcileReport",
    "NotificationService",
    "NotificationFanout",
    "distinct_recipients",
]
