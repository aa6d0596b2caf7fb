from typing import Iterable, List, Optional

from codereview.core import BadRequestError, ConflictError, NotFoundError, as_utc, get_logger
from codereview.models import AssignmentKind, AssignmentTarget, Cohort, Page, SortSpec, User, UserRole
from codereview.repositories import CohortRepository, UserRepository
from codereview.schemas import CohortCreateRequest, CohortUpdateRequest

from .assignment_service import AssignmentService


class CohortService:
    """Cohort CRUD; keeps ``Cohort.students`` and ``User.cohort`` pointing at each other."""

    def __init__(self, cohorts: CohortRepository, users: UserRepository, assignments: AssignmentService):
        self.cohorts = cohorts
        self.users = users
        self.assignments = assignments
        self.logger = get_logger("services.cohorts")

    async def get_cohort(self, cohort_id: str) -> Cohort:
        cohort = await self.cohorts.get_by_id(cohort_id)
        if cohort is None:
            raise NotFoundError("Cohort not found")
        return cohort

    async def list_cohorts(
        self,
        *,
        name: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_current: Optional[bool] = None,
        sort: SortSpec,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Cohort]:
        return await self.cohorts.list_cohorts(
            name=name, is_active=is_active, is_current=is_current, sort=sort, page=page, limit=limit
        )

    async def _load_students(self, student_ids: Iterable[str]) -> List[User]:
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            return []
        students = await self.users.get_many(ids)
        if len(students) != len(ids):
            raise BadRequestError("One or more students were not found")
        if any(student.role != UserRole.STUDENT for student in students):
            raise BadRequestError("Only students can be added to a cohort")
        return students

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        existing = await self.cohorts.get_by_name(name)
        if existing and existing.id != exclude_id:
            raise ConflictError("Cohort with this name already exists")

    async def _enroll(self, cohort_id: str, students: List[User]) -> None:
        for student in students:
            if student.cohort and student.cohort != cohort_id:
                await self.cohorts.pull(student.cohort, "students", student.id)
        await self.users.set_cohort([student.id for student in students], cohort_id)

    async def _unenroll(self, cohort_id: str, student_ids: Iterable[str]) -> None:
        students = await self.users.get_many(student_ids)
        await self.users.set_cohort([s.id for s in students if s.cohort == cohort_id], None)

    async def create_cohort(self, payload: CohortCreateRequest) -> Cohort:
        start_date, end_date = as_utc(payload.start_date), as_utc(payload.end_date)
        if end_date <= start_date:
            raise BadRequestError("End date must be after start date")
        await self._ensure_unique_name(payload.name)
        students = await self._load_students(payload.students)

        cohort = await self.cohorts.create(
            name=payload.name,
            description=payload.description,
            start_date=start_date,
            end_date=end_date,
            students=[student.id for student in students],
            assigned_reviewers=[],
            is_active=payload.is_active,
        )
        await self._enroll(cohort.id, students)
        self.logger.info("cohort_created", cohort_id=cohort.id, students=len(students))
        return cohort

    async def update_cohort(self, cohort_id: str, payload: CohortUpdateRequest) -> Cohort:
        cohort = await self.get_cohort(cohort_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"students"})

        start_date = as_utc(changes.get("start_date", cohort.start_date))
        end_date = as_utc(changes.get("end_date", cohort.end_date))
        if end_date <= start_date:
            raise BadRequestError("End date must be after start date")
        if "start_date" in changes:
            changes["start_date"] = start_date
        if "end_date" in changes:
            changes["end_date"] = end_date
        if "name" in changes and changes["name"] != cohort.name:
            await self._ensure_unique_name(changes["name"], exclude_id=cohort_id)

        added: List[User] = []
        removed: List[str] = []
        if payload.students is not None:
            students = await self._load_students(payload.students)
            new_ids = [student.id for student in students]
            added = [student for student in students if student.id not in cohort.students]
            removed = [student_id for student_id in cohort.students if student_id not in new_ids]
            changes["students"] = new_ids

        if not changes:
            return cohort
        updated = await self.cohorts.update(cohort_id, changes)
        if removed:
            await self._unenroll(cohort_id, removed)
        if added:
            await self._enroll(cohort_id, added)
        return updated

    async def delete_cohort(self, cohort_id: str) -> None:
        await self.get_cohort(cohort_id)
        cleared = await self.users.clear_cohort(cohort_id)
        deactivated = await self.assignments.deactivate_target(AssignmentTarget(kind=AssignmentKind.COHORT, id=cohort_id))
        await self.cohorts.delete(cohort_id)
        self.logger.info("cohort_deleted", cohort_id=cohort_id, students=cleared, assignments=deactivated)

    async def add_student(self, cohort_id: str, user_id: str) -> Cohort:
        await self.get_cohort(cohort_id)
        students = await self._load_students([user_id])
        await self.cohorts.add_to_set(cohort_id, "students", user_id)
        await self._enroll(cohort_id, students)
        return await self.get_cohort(cohort_id)

    async def remove_student(self, cohort_id: str, user_id: str) -> Cohort:
        cohort = await self.get_cohort(cohort_id)
        if user_id not in cohort.students:
            raise NotFoundError("Student is not a member of this cohort")
        await self.cohorts.pull(cohort_id, "students", user_id)
        await self._unenroll(cohort_id, [user_id])
        return await self.get_cohort(cohort_id)
