import pytest

from codereview.core import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from codereview.models import AssignmentKind, AssignmentTarget, NotificationType
from codereview.services import AssignmentService
from tests.utils import as_actor


def _project_target(project) -> AssignmentTarget:
    return AssignmentTarget(kind=AssignmentKind.PROJECT, id=project.id)


def _cohort_target(cohort) -> AssignmentTarget:
    return AssignmentTarget(kind=AssignmentKind.COHORT, id=cohort.id)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestAssignmentCreation:
    """
    create_assignment should:
    - validate reviewer and target
    - allow one active assignment per (reviewer, kind, target)
    - mirror cohort/project assignments into the target's reviewer array
    """

    @pytest.fixture
    def service(self, container) -> AssignmentService:
        return container.assignment_service

    @pytest.mark.asyncio
    async def test_project_assignment_adds_reviewer(self, service, container, admin, reviewer, project):
        assignment = await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        assert assignment.is_active is True
        assert assignment.created_by == admin.id
        stored = await container.projects.get_by_id(project.id)
        assert stored.reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_cohort_assignment_adds_assigned_reviewer(self, service, container, admin, reviewer, cohort):
        await service.create_assignment(reviewer.id, _cohort_target(cohort), as_actor(admin))

        stored = await container.cohorts.get_by_id(cohort.id)
        assert stored.assigned_reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_second_active_assignment_conflicts(self, service, container, admin, reviewer, project):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        with pytest.raises(ConflictError):
            await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        assert len(container.assignments.all()) == 1
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_inactive_assignment_does_not_propagate(self, service, container, admin, reviewer, project):
        assignment = await service.create_assignment(
            reviewer.id, _project_target(project), as_actor(admin), is_active=False
        )

        assert assignment.is_active is False
        assert (await container.projects.get_by_id(project.id)).reviewers == []

    @pytest.mark.asyncio
    async def test_student_assignment_has_no_reviewer_array(self, service, container, admin, reviewer, student):
        target = AssignmentTarget(kind=AssignmentKind.STUDENT, id=student.id)
        assignment = await service.create_assignment(reviewer.id, target, as_actor(admin))

        assert assignment.assigned_to.kind == AssignmentKind.STUDENT
        assert assignment.propagates is False

    @pytest.mark.asyncio
    async def test_student_target_must_be_a_student(self, service, admin, reviewer, other_reviewer):
        target = AssignmentTarget(kind=AssignmentKind.STUDENT, id=other_reviewer.id)

        with pytest.raises(BadRequestError):
            await service.create_assignment(reviewer.id, target, as_actor(admin))

    @pytest.mark.asyncio
    async def test_reviewer_must_be_able_to_review(self, service, admin, student, project):
        with pytest.raises(BadRequestError):
            await service.create_assignment(student.id, _project_target(project), as_actor(admin))

    @pytest.mark.asyncio
    async def test_admin_can_be_assigned(self, service, admin, project):
        assignment = await service.create_assignment(admin.id, _project_target(project), as_actor(admin))
        assert assignment.reviewer == admin.id

    @pytest.mark.asyncio
    async def test_unknown_reviewer_or_target(self, service, admin, reviewer, project):
        with pytest.raises(NotFoundError):
            await service.create_assignment("0" * 24, _project_target(project), as_actor(admin))

        missing = AssignmentTarget(kind=AssignmentKind.COHORT, id="0" * 24)
        with pytest.raises(NotFoundError):
            await service.create_assignment(reviewer.id, missing, as_actor(admin))

    @pytest.mark.asyncio
    async def test_reviewer_is_notified(self, service, container, admin, reviewer, project):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        notifications = container.notifications.for_recipient(reviewer.id)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.NEW_ASSIGNMENT
        assert "Todo App" in notifications[0].content


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestAssignmentLifecycle:
    @pytest.fixture
    def service(self, container) -> AssignmentService:
        return container.assignment_service

    @pytest.mark.asyncio
    async def test_deactivate_then_reactivate(self, service, container, admin, reviewer, project):
        assignment = await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        await service.update_assignment(assignment.id, is_active=False)
        assert (await container.projects.get_by_id(project.id)).reviewers == []

        await service.update_assignment(assignment.id, is_active=True)
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_notes_only_update_keeps_array(self, service, container, admin, reviewer, project):
        assignment = await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        updated = await service.update_assignment(assignment.id, notes="Focus on tests")

        assert updated.notes == "Focus on tests"
        assert updated.is_active is True
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_reactivation_conflicts_with_other_active(self, service, admin, reviewer, project):
        first = await service.create_assignment(
            reviewer.id, _project_target(project), as_actor(admin), is_active=False
        )
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        with pytest.raises(ConflictError):
            await service.update_assignment(first.id, is_active=True)

    @pytest.mark.asyncio
    async def test_delete_active_removes_reviewer(self, service, container, admin, reviewer, cohort):
        assignment = await service.create_assignment(reviewer.id, _cohort_target(cohort), as_actor(admin))

        await service.delete_assignment(assignment.id)

        assert container.assignments.all() == []
        assert (await container.cohorts.get_by_id(cohort.id)).assigned_reviewers == []

    @pytest.mark.asyncio
    async def test_delete_inactive_leaves_array(self, service, container, admin, reviewer, project):
        inactive = await service.create_assignment(
            reviewer.id, _project_target(project), as_actor(admin), is_active=False
        )
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        await service.delete_assignment(inactive.id)

        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_get_missing_assignment(self, service):
        with pytest.raises(NotFoundError):
            await service.get_assignment("0" * 24)

    @pytest.mark.asyncio
    async def test_reviewer_assignments_visible_to_self_only(
        self, service, admin, reviewer, other_reviewer, project
    ):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        page = await service.reviewer_assignments(reviewer.id, as_actor(reviewer), sort=[("created_at", -1)])
        assert page.total == 1

        with pytest.raises(ForbiddenError):
            await service.reviewer_assignments(reviewer.id, as_actor(other_reviewer), sort=[("created_at", -1)])

    @pytest.mark.asyncio
    async def test_deactivate_target(self, service, admin, reviewer, other_reviewer, cohort):
        await service.create_assignment(reviewer.id, _cohort_target(cohort), as_actor(admin))
        await service.create_assignment(other_reviewer.id, _cohort_target(cohort), as_actor(admin))

        assert await service.deactivate_target(_cohort_target(cohort)) == 2
        page = await service.list_assignments(is_active=True, sort=[("created_at", 1)])
        assert page.total == 0


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


class TestReconcile:
    """reconcile should repair reviewer arrays from the assignment records."""

    @pytest.fixture
    def service(self, container) -> AssignmentService:
        return container.assignment_service

    @pytest.mark.asyncio
    async def test_restores_missing_reviewer(self, service, container, admin, reviewer, project):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))
        container.projects.raw(project.id).reviewers.clear()

        report = await service.reconcile()

        assert report.added == 1
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_removes_reviewer_of_inactive_assignment(self, service, container, admin, reviewer, project):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin), is_active=False)
        container.projects.raw(project.id).reviewers.append(reviewer.id)

        report = await service.reconcile()

        assert report.removed == 1
        assert (await container.projects.get_by_id(project.id)).reviewers == []

    @pytest.mark.asyncio
    async def test_keeps_reviewer_covered_by_another_active(self, service, container, admin, reviewer, project):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin), is_active=False)
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))

        report = await service.reconcile()

        assert report.removed == 0
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_leaves_unassigned_reviewers_alone(self, service, container, reviewer, project):
        container.projects.raw(project.id).reviewers.append(reviewer.id)

        report = await service.reconcile()

        assert report.scanned == 0
        assert (await container.projects.get_by_id(project.id)).reviewers == [reviewer.id]

    @pytest.mark.asyncio
    async def test_is_idempotent(self, service, container, admin, reviewer, other_reviewer, project, cohort):
        await service.create_assignment(reviewer.id, _project_target(project), as_actor(admin))
        await service.create_assignment(other_reviewer.id, _cohort_target(cohort), as_actor(admin))
        container.cohorts.raw(cohort.id).assigned_reviewers.clear()

        first = await service.reconcile()
        second = await service.reconcile()

        assert (first.scanned, first.added, first.removed) == (2, 1, 0)
        assert (second.added, second.removed) == (0, 0)
