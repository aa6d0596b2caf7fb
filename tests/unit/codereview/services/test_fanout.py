from collections import Counter

import pytest

from codereview.events import (
    AssignmentCreated,
    CommentCreated,
    CommentReplied,
    EventBus,
    ProjectFeedbackAdded,
    ProjectStatusChanged,
    ProjectSubmitted,
)
from codereview.models import Assignment, AssignmentKind, AssignmentTarget, Comment, NotificationType, ProjectStatus, Reply
from codereview.core import utcnow
from codereview.services import distinct_recipients


def test_distinct_recipients_keeps_order_and_drops_actor():
    assert distinct_recipients(["a", "b"], ["b", None, "c", ""], ["a"], exclude="c") == ["a", "b"]


class TestNotificationFanout:
    """Every subscriber notifies each recipient once and never the actor."""

    @pytest.fixture
    def bus(self, container) -> EventBus:
        return container.bus

    @pytest.fixture
    def reviewed_project(self, container, project, reviewer, other_reviewer):
        container.projects.raw(project.id).reviewers.extend([reviewer.id, other_reviewer.id])
        return container.projects.raw(project.id)

    def _comment(self, project, author_id) -> Comment:
        return Comment(
            id="c" * 24,
            project=project.id,
            file="f" * 24,
            line_number=5,
            author=author_id,
            text="Consider extracting this",
        )

    def _types(self, container, user) -> Counter:
        return Counter(n.type for n in container.notifications.for_recipient(user.id))

    def test_registers_each_event_once(self, bus):
        for event in (
            ProjectSubmitted,
            ProjectStatusChanged,
            ProjectFeedbackAdded,
            CommentCreated,
            CommentReplied,
            AssignmentCreated,
        ):
            assert len(bus.handlers(event.name)) == 1

    @pytest.mark.asyncio
    async def test_project_submitted_notifies_reviewers(self, bus, container, reviewed_project, student, reviewer):
        await bus.emit(ProjectSubmitted(actor_id=student.id, project=reviewed_project))

        assert self._types(container, reviewer) == {NotificationType.NEW_SUBMISSION: 1}
        assert container.notifications.for_recipient(student.id) == []
        assert "Alice Student" in container.notifications.for_recipient(reviewer.id)[0].content

    @pytest.mark.asyncio
    async def test_status_change_notifies_owner(self, bus, container, reviewed_project, student, reviewer):
        reviewed_project.status = ProjectStatus.REVISION_REQUESTED
        await bus.emit(
            ProjectStatusChanged(actor_id=reviewer.id, project=reviewed_project, previous_status=ProjectStatus.PENDING)
        )

        [notification] = container.notifications.for_recipient(student.id)
        assert notification.type == NotificationType.PROJECT_STATUS
        assert "Revision Requested" in notification.content
        assert container.notifications.for_recipient(reviewer.id) == []

    @pytest.mark.asyncio
    async def test_owner_changing_own_status_is_silent(self, bus, container, reviewed_project, student):
        await bus.emit(
            ProjectStatusChanged(actor_id=student.id, project=reviewed_project, previous_status=ProjectStatus.PENDING)
        )
        assert container.notifications.all() == []

    @pytest.mark.asyncio
    async def test_feedback_notifies_owner(self, bus, container, reviewed_project, student, reviewer):
        await bus.emit(ProjectFeedbackAdded(actor_id=reviewer.id, project=reviewed_project))

        assert self._types(container, student) == {NotificationType.PROJECT_STATUS: 1}

    @pytest.mark.asyncio
    async def test_comment_by_reviewer(self, bus, container, reviewed_project, student, reviewer, other_reviewer):
        comment = self._comment(reviewed_project, reviewer.id)
        await bus.emit(CommentCreated(actor_id=reviewer.id, comment=comment, project=reviewed_project))

        assert self._types(container, student) == {NotificationType.NEW_COMMENT: 1}
        assert self._types(container, other_reviewer) == {NotificationType.NEW_COMMENT: 1}
        assert container.notifications.for_recipient(reviewer.id) == []

    @pytest.mark.asyncio
    async def test_reply_notifies_comment_author_once(
        self, bus, container, reviewed_project, student, reviewer, other_reviewer
    ):
        # student authored the comment and owns the project: one notification, not two
        comment = self._comment(reviewed_project, student.id)
        reply = Reply(id="r" * 24, author=reviewer.id, text="Agreed", created_at=utcnow())
        await bus.emit(CommentReplied(actor_id=reviewer.id, comment=comment, reply=reply, project=reviewed_project))

        assert self._types(container, student) == {NotificationType.NEW_COMMENT: 1}
        assert self._types(container, other_reviewer) == {NotificationType.NEW_COMMENT: 1}
        assert container.notifications.for_recipient(reviewer.id) == []
        assert "replied" in container.notifications.for_recipient(student.id)[0].content

    @pytest.mark.asyncio
    async def test_assignment_notifies_reviewer(self, bus, container, cohort, admin, reviewer):
        assignment = Assignment(
            id="a" * 24,
            reviewer=reviewer.id,
            assigned_to=AssignmentTarget(kind=AssignmentKind.COHORT, id=cohort.id),
            created_by=admin.id,
        )
        await bus.emit(AssignmentCreated(actor_id=admin.id, assignment=assignment))

        [notification] = container.notifications.for_recipient(reviewer.id)
        assert notification.type == NotificationType.NEW_ASSIGNMENT
        assert 'the cohort "Spring Cohort"' in notification.content

    @pytest.mark.asyncio
    async def test_failing_recipient_does_not_break_emit(self, bus, container, reviewed_project, student, sender):
        sender.error = RuntimeError("smtp down")

        await bus.emit(ProjectSubmitted(actor_id=student.id, project=reviewed_project))

        assert len(container.notifications.all()) == 2
