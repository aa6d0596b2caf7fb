"""Enums for the CodeReview application."""

from enum import Enum

# ───────────────────────────────────────────────
# ENUMS
# ───────────────────────────────────────────────


class UserRole(str, Enum):
    """User role enumeration for access control."""

    STUDENT = "student"
    REVIEWER = "reviewer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @classmethod
    def admin_roles(cls) -> tuple["UserRole", ...]:
        return (cls.ADMIN, cls.SUPERADMIN)

    @classmethod
    def is_admin(cls, role: "UserRole | str") -> bool:
        """True for admin and superadmin."""
        return cls(role) in cls.admin_roles()

    @classmethod
    def can_review(cls, role: "UserRole | str") -> bool:
        """Roles that may hold reviewer assignments."""
        return cls(role) in (cls.REVIEWER, cls.ADMIN)

    @classmethod
    def self_registrable(cls) -> tuple["UserRole", ...]:
        return (cls.STUDENT, cls.REVIEWER)


class ProjectStatus(str, Enum):
    """Review status of a submitted project."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REVISION_REQUESTED = "revision_requested"


class AssignmentKind(str, Enum):
    """What an assignment grants a reviewer access to."""

    COHORT = "cohort"
    STUDENT = "student"
    PROJECT = "project"

    @property
    def propagates(self) -> bool:
        """Kinds mirrored into a denormalized reviewer array."""
        return self in (AssignmentKind.COHORT, AssignmentKind.PROJECT)


class NotificationType(str, Enum):
    """Notification event types; also the keys of the preference matrix."""

    PROJECT_STATUS = "projectStatus"
    NEW_COMMENT = "newComment"
    NEW_ASSIGNMENT = "newAssignment"
    NEW_SUBMISSION = "newSubmission"

    @property
    def subject(self) -> str:
        return _NOTIFICATION_SUBJECTS.get(self, "Notification")


_NOTIFICATION_SUBJECTS = {
    NotificationType.PROJECT_STATUS: "Project Status Update",
    NotificationType.NEW_COMMENT: "New Comment",
    NotificationType.NEW_ASSIGNMENT: "New Assignment",
    NotificationType.NEW_SUBMISSION: "New Project Submission",
}


class ResourceKind(str, Enum):
    """Kinds of resource a notification can point at."""

    PROJECT = "project"
    COMMENT = "comment"
    ASSIGNMENT = "assignment"
