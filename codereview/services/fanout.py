"""Event subscribers that turn domain events into per-recipient notifications.

Every handler builds the distinct recipient list for its event, drops the actor, and
calls :meth:`NotificationService.notify` once per remaining recipient.
"""

from typing import Iterable, List, Optional

from codereview.core import get_logger
from codereview.events import (
    AssignmentCreated,
    CommentCreated,
    CommentReplied,
    EventBus,
    ProjectFeedbackAdded,
    ProjectStatusChanged,
    ProjectSubmitted,
)
from codereview.models import AssignmentKind, AssignmentTarget, NotificationType, RelatedResource, ResourceKind
from codereview.repositories import CohortRepository, ProjectRepository, UserRepository

from .notification_service import NotificationService

_STATUS_LABELS = {
    "pending": "Pending",
    "accepted": "Accepted",
    "revision_requested": "Revision Requested",
}


def distinct_recipients(*groups: Iterable[Optional[str]], exclude: Optional[str] = None) -> List[str]:
    """Flatten ``groups`` keeping first-seen order, without blanks or ``exclude``."""
    seen: List[str] = []
    for group in groups:
        for user_id in group:
            if user_id and user_id != exclude and user_id not in seen:
                seen.append(user_id)
    return seen


class NotificationFanout:
    def __init__(
        self,
        notifications: NotificationService,
        users: UserRepository,
        cohorts: CohortRepository,
        projects: ProjectRepository,
    ):
        self.notifications = notifications
        self.users = users
        self.cohorts = cohorts
        self.projects = projects
        self.logger = get_logger("services.fanout")

    def register(self, bus: EventBus) -> None:
        bus.subscribe(ProjectSubmitted.name, self.on_project_submitted)
        bus.subscribe(ProjectStatusChanged.name, self.on_project_status_changed)
        bus.subscribe(ProjectFeedbackAdded.name, self.on_project_feedback_added)
        bus.subscribe(CommentCreated.name, self.on_comment_created)
        bus.subscribe(CommentReplied.name, self.on_comment_replied)
        bus.subscribe(AssignmentCreated.name, self.on_assignment_created)

    async def _actor_name(self, actor_id: str) -> str:
        actor = await self.users.get_by_id(actor_id)
        return actor.full_name if actor else "Someone"

    async def _notify_all(
        self, recipients: List[str], notification_type: NotificationType, content: str, resource: RelatedResource
    ) -> None:
        for recipient in recipients:
            await self.notifications.notify(recipient, notification_type, content, resource)
        self.logger.debug("fanout_completed", type=notification_type.value, recipients=len(recipients))

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def on_project_submitted(self, event: ProjectSubmitted) -> None:
        project = event.project
        recipients = distinct_recipients(project.reviewers, exclude=event.actor_id)
        if not recipients:
            return
        name = await self._actor_name(event.actor_id)
        await self._notify_all(
            recipients,
            NotificationType.NEW_SUBMISSION,
            f'{name} submitted a new project "{project.title}"',
            RelatedResource(kind=ResourceKind.PROJECT, id=project.id),
        )

    async def on_project_status_changed(self, event: ProjectStatusChanged) -> None:
        project = event.project
        status = _STATUS_LABELS.get(project.status.value, project.status.value)
        await self._notify_all(
            distinct_recipients([project.student], exclude=event.actor_id),
            NotificationType.PROJECT_STATUS,
            f'Your project "{project.title}" status has been updated to {status}',
            RelatedResource(kind=ResourceKind.PROJECT, id=project.id),
        )

    async def on_project_feedback_added(self, event: ProjectFeedbackAdded) -> None:
        project = event.project
        recipients = distinct_recipients([project.student], exclude=event.actor_id)
        if not recipients:
            return
        name = await self._actor_name(event.actor_id)
        await self._notify_all(
            recipients,
            NotificationType.PROJECT_STATUS,
            f'{name} left feedback on your project "{project.title}"',
            RelatedResource(kind=ResourceKind.PROJECT, id=project.id),
        )

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def on_comment_created(self, event: CommentCreated) -> None:
        project, comment = event.project, event.comment
        recipients = distinct_recipients([project.student], project.reviewers, exclude=event.actor_id)
        if not recipients:
            return
        name = await self._actor_name(event.actor_id)
        await self._notify_all(
            recipients,
            NotificationType.NEW_COMMENT,
            f'{name} commented on line {comment.line_number} in project "{project.title}"',
            RelatedResource(kind=ResourceKind.COMMENT, id=comment.id),
        )

    async def on_comment_replied(self, event: CommentReplied) -> None:
        project, comment = event.project, event.comment
        recipients = distinct_recipients(
            [comment.author], [project.student], project.reviewers, exclude=event.actor_id
        )
        if not recipients:
            return
        name = await self._actor_name(event.actor_id)
        await self._notify_all(
            recipients,
            NotificationType.NEW_COMMENT,
            f'{name} replied to a comment on line {comment.line_number} in project "{project.title}"',
            RelatedResource(kind=ResourceKind.COMMENT, id=comment.id),
        )

    # -------------------------------------------------------------------------
    # Assignments
    # -------------------------------------------------------------------------

    async def on_assignment_created(self, event: AssignmentCreated) -> None:
        assignment = event.assignment
        recipients = distinct_recipients([assignment.reviewer], exclude=event.actor_id)
        if not recipients:
            return
        await self._notify_all(
            recipients,
            NotificationType.NEW_ASSIGNMENT,
            f"You have been assigned to review {await self._describe_target(assignment.assigned_to)}",
            RelatedResource(kind=ResourceKind.ASSIGNMENT, id=assignment.id),
        )

    async def _describe_target(self, target: AssignmentTarget) -> str:
        match target.kind:
            case AssignmentKind.COHORT:
                cohort = await self.cohorts.get_by_id(target.id)
                return f'the cohort "{cohort.name}"' if cohort else "a cohort"
            case AssignmentKind.STUDENT:
                student = await self.users.get_by_id(target.id)
                return f"the student {student.full_name}" if student else "a student"
            case AssignmentKind.PROJECT:
                project = await self.projects.get_by_id(target.id)
                return f'the project "{project.title}"' if project else "a project"
        return "a new target"
