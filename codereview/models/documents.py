"""Beanie Document models for CodeReview MongoDB collections.

References between collections are stored as ObjectId hex strings; the
repositories convert documents into the plain models of this package.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document, Indexed, Replace, SaveChanges, before_event
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from codereview.core.security import utcnow

from .comment import Reply
from .enums import NotificationType, ProjectStatus, UserRole
from .project import ProjectFeedback
from .refs import AssignmentTarget, RelatedResource
from .user import NotificationPreferences


class CodeReviewDocument(Document):
    """Base document carrying creation and modification timestamps."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @before_event(Replace, SaveChanges)
    def touch(self) -> None:
        self.updated_at = utcnow()

    class Settings:
        use_cache = False


class UserDocument(CodeReviewDocument):
    """Registered user of any role."""

    email: Indexed(str, unique=True)
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
    notification_preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"
        use_cache = False
        indexes = [
            "role",
            "cohort",
            "verification_token",
            "reset_password_token",
        ]


class CohortDocument(CodeReviewDocument):
    """Time-boxed group of students sharing assigned reviewers."""

    name: Indexed(str, unique=True)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    students: List[str] = Field(default_factory=list)
    assigned_reviewers: List[str] = Field(default_factory=list)
    is_active: bool = True

    class Settings:
        name = "cohorts"
        use_cache = False
        indexes = [
            "is_active",
            "students",
            [("start_date", -1)],
        ]


class ProjectDocument(CodeReviewDocument):
    """Student project submitted for review."""

    title: str
    description: str
    student: Indexed(str)
    reviewers: List[str] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.PENDING
    submission_date: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)
    feedback: Optional[ProjectFeedback] = None
    files: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    class Settings:
        name = "projects"
        use_cache = False
        indexes = [
            "reviewers",
            "status",
            "tags",
            [("submission_date", -1)],
        ]


class FileDocument(CodeReviewDocument):
    """Uploaded project file; text files keep their content inline."""

    project: Indexed(str)
    filename: str
    path: str
    content: Optional[str] = None
    file_type: str
    language: str = "plaintext"
    size: int = 0
    uploaded_by: str

    class Settings:
        name = "files"
        use_cache = False


class CommentDocument(CodeReviewDocument):
    """Line comment on a file, with embedded replies."""

    project: Indexed(str)
    file: str
    line_number: int
    author: str
    text: str
    replies: List[Reply] = Field(default_factory=list)

    class Settings:
        name = "comments"
        use_cache = False
        indexes = [
            [("file", 1), ("line_number", 1), ("created_at", 1)],
        ]


class AssignmentDocument(CodeReviewDocument):
    """Reviewer grant on a cohort, student or project."""

    reviewer: Indexed(str)
    assigned_to: AssignmentTarget
    created_by: str
    is_active: bool = True
    notes: Optional[str] = None

    class Settings:
        name = "assignments"
        use_cache = False
        indexes = [
            IndexModel(
                [("reviewer", ASCENDING), ("assigned_to.kind", ASCENDING), ("assigned_to.id", ASCENDING)],
                name="unique_active_assignment",
                unique=True,
                partialFilterExpression={"is_active": True},
            ),
            [("assigned_to.kind", 1), ("assigned_to.id", 1)],
        ]


class NotificationDocument(CodeReviewDocument):
    """In-app notification for a single recipient."""

    recipient: Indexed(str)
    type: NotificationType
    content: str
    related_resource: Optional[RelatedResource] = None
    is_read: bool = False
    email_sent: bool = False

    class Settings:
        name = "notifications"
        use_cache = False
        indexes = [
            [("recipient", 1), ("is_read", 1), ("created_at", -1)],
        ]


DOCUMENT_MODELS = [
    UserDocument,
    CohortDocument,
    ProjectDocument,
    FileDocument,
    CommentDocument,
    AssignmentDocument,
    NotificationDocument,
]
