from datetime import datetime

import pytest

from codereview.core import BadRequestError, ConflictError, NotFoundError
from codereview.models import AssignmentKind, AssignmentTarget
from codereview.schemas import CohortCreateRequest, CohortUpdateRequest
from codereview.services import CohortService
from tests.utils import as_actor


def _create(name="Winter Cohort", **overrides) -> CohortCreateRequest:
    data = {"name": name, "start_date": "2024-01-01T00:00:00Z", "end_date": "2024-06-01T00:00:00Z"}
    data.update(overrides)
    return CohortCreateRequest(**data)


@pytest.fixture
def service(container) -> CohortService:
    return container.cohort_service


class TestCreateCohort:
    @pytest.mark.asyncio
    async def test_creates_and_enrolls(self, service, container, student):
        cohort = await service.create_cohort(_create(students=[student.id]))

        assert cohort.students == [student.id]
        assert cohort.assigned_reviewers == []
        assert cohort.start_date < cohort.end_date
        assert (await container.users.get_by_id(student.id)).cohort == cohort.id

    @pytest.mark.asyncio
    async def test_end_before_start(self, service):
        with pytest.raises(BadRequestError):
            await service.create_cohort(_create(start_date="2024-06-01T00:00:00Z", end_date="2024-01-01T00:00:00Z"))

    @pytest.mark.asyncio
    async def test_duplicate_name(self, service, cohort):
        with pytest.raises(ConflictError):
            await service.create_cohort(_create(name=cohort.name))

    @pytest.mark.asyncio
    async def test_non_student_members(self, service, reviewer):
        with pytest.raises(BadRequestError):
            await service.create_cohort(_create(students=[reviewer.id]))

    @pytest.mark.asyncio
    async def test_unknown_members(self, service):
        with pytest.raises(BadRequestError):
            await service.create_cohort(_create(students=["0" * 24]))

    @pytest.mark.asyncio
    async def test_moving_student_leaves_previous_cohort(self, service, container, student, cohort):
        await service.add_student(cohort.id, student.id)

        created = await service.create_cohort(_create(students=[student.id]))

        assert (await container.cohorts.get_by_id(cohort.id)).students == []
        assert (await container.users.get_by_id(student.id)).cohort == created.id


class TestUpdateCohort:
    @pytest.mark.asyncio
    async def test_student_diff(self, service, container, student, other_student):
        cohort = await service.create_cohort(_create(students=[student.id]))

        updated = await service.update_cohort(cohort.id, CohortUpdateRequest(students=[other_student.id]))

        assert updated.students == [other_student.id]
        assert (await container.users.get_by_id(student.id)).cohort is None
        assert (await container.users.get_by_id(other_student.id)).cohort == cohort.id

    @pytest.mark.asyncio
    async def test_dates_checked_against_stored_values(self, service):
        cohort = await service.create_cohort(_create())

        with pytest.raises(BadRequestError):
            await service.update_cohort(cohort.id, CohortUpdateRequest(end_date=datetime(2023, 12, 1)))

    @pytest.mark.asyncio
    async def test_rename_conflict(self, service, cohort):
        other = await service.create_cohort(_create())

        with pytest.raises(ConflictError):
            await service.update_cohort(other.id, CohortUpdateRequest(name=cohort.name))

    @pytest.mark.asyncio
    async def test_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.update_cohort("0" * 24, CohortUpdateRequest(name="x"))


class TestMembershipAndDelete:
    @pytest.mark.asyncio
    async def test_add_and_remove_student(self, service, container, student, cohort):
        added = await service.add_student(cohort.id, student.id)
        assert added.students == [student.id]

        removed = await service.remove_student(cohort.id, student.id)
        assert removed.students == []
        assert (await container.users.get_by_id(student.id)).cohort is None

        with pytest.raises(NotFoundError):
            await service.remove_student(cohort.id, student.id)

    @pytest.mark.asyncio
    async def test_delete_clears_students_and_assignments(
        self, service, container, admin, student, reviewer, cohort
    ):
        await service.add_student(cohort.id, student.id)
        target = AssignmentTarget(kind=AssignmentKind.COHORT, id=cohort.id)
        assignment = await container.assignment_service.create_assignment(reviewer.id, target, as_actor(admin))

        await service.delete_cohort(cohort.id)

        assert await container.cohorts.get_by_id(cohort.id) is None
        assert (await container.users.get_by_id(student.id)).cohort is None
        assert (await container.assignments.get_by_id(assignment.id)).is_active is False
