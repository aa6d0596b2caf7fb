"""Reviewer assignments and the reviewer arrays that mirror them.

An :class:`Assignment` is the source of truth. Cohort and project assignments are
mirrored into ``Cohort.assigned_reviewers`` / ``Project.reviewers`` with atomic
``$addToSet`` / ``$pull`` updates issued after the assignment write. The two writes
are not transactional; :meth:`AssignmentService.reconcile` replays the mirror from
the assignment records and is safe to run at any time.
"""

from dataclasses import dataclass
from typing import Optional, Set, Tuple

from codereview.core import BadRequestError, ConflictError, NotFoundError, get_logger
from codereview.core.context import AuthenticatedUser
from codereview.events import AssignmentCreated, EventBus
from codereview.models import Assignment, AssignmentKind, AssignmentTarget, Page, SortSpec, UserRole
from codereview.repositories import AssignmentRepository, CohortRepository, ProjectRepository, UserRepository
from codereview.repositories.base_repository import BaseRepository


@dataclass
class ReconcileReport:
    scanned: int = 0
    added: int = 0
    removed: int = 0


def _tuple_key(assignment: Assignment) -> Tuple[str, str, str]:
    return assignment.reviewer, assignment.assigned_to.kind.value, assignment.assigned_to.id


class AssignmentService:
    def __init__(
        self,
        assignments: AssignmentRepository,
        users: UserRepository,
        cohorts: CohortRepository,
        projects: ProjectRepository,
        bus: EventBus,
    ):
        self.assignments = assignments
        self.users = users
        self.cohorts = cohorts
        self.projects = projects
        self.bus = bus
        self.logger = get_logger("services.assignments")

    # -------------------------------------------------------------------------
    # Target resolution
    # -------------------------------------------------------------------------

    async def _ensure_target(self, target: AssignmentTarget) -> None:
        match target.kind:
            case AssignmentKind.COHORT:
                if await self.cohorts.get_by_id(target.id) is None:
                    raise NotFoundError("Cohort not found")
            case AssignmentKind.STUDENT:
                student = await self.users.get_by_id(target.id)
                if student is None:
                    raise NotFoundError("Student not found")
                if student.role != UserRole.STUDENT:
                    raise BadRequestError("Target user is not a student")
            case AssignmentKind.PROJECT:
                if await self.projects.get_by_id(target.id) is None:
                    raise NotFoundError("Project not found")

    def _mirror(self, target: AssignmentTarget) -> Optional[Tuple[BaseRepository, str]]:
        """Repository and array field mirroring assignments of this kind, if any."""
        match target.kind:
            case AssignmentKind.COHORT:
                return self.cohorts, "assigned_reviewers"
            case AssignmentKind.PROJECT:
                return self.projects, "reviewers"
        return None

    async def _add_reviewer(self, assignment: Assignment) -> bool:
        mirror = self._mirror(assignment.assigned_to)
        if mirror is None:
            return False
        repo, field = mirror
        return await repo.add_to_set(assignment.assigned_to.id, field, assignment.reviewer)

    async def _remove_reviewer(self, assignment: Assignment) -> bool:
        mirror = self._mirror(assignment.assigned_to)
        if mirror is None:
            return False
        repo, field = mirror
        return await repo.pull(assignment.assigned_to.id, field, assignment.reviewer)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def create_assignment(
        self,
        reviewer_id: str,
        target: AssignmentTarget,
        actor: AuthenticatedUser,
        *,
        is_active: bool = True,
        notes: Optional[str] = None,
    ) -> Assignment:
        reviewer = await self.users.get_by_id(reviewer_id)
        if reviewer is None:
            raise NotFoundError("Reviewer not found")
        if not UserRole.can_review(reviewer.role):
            raise BadRequestError("User is not a reviewer")

        await self._ensure_target(target)

        if is_active and await self.assignments.find_active(reviewer_id, target):
            raise ConflictError("An active assignment already exists for this reviewer and target")

        assignment = await self.assignments.create(
            reviewer=reviewer_id,
            assigned_to=target,
            created_by=actor.id,
            is_active=is_active,
            notes=notes,
        )
        if assignment.is_active:
            await self._add_reviewer(assignment)

        self.logger.info(
            "assignment_created",
            assignment_id=assignment.id,
            reviewer=reviewer_id,
            kind=target.kind.value,
            target=target.id,
        )
        await self.bus.emit(AssignmentCreated(actor_id=actor.id, assignment=assignment))
        return assignment

    async def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    async def update_assignment(
        self,
        assignment_id: str,
        *,
        is_active: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> Assignment:
        """Change notes and/or toggle ``is_active``, keeping the mirror in step."""
        assignment = await self.get_assignment(assignment_id)

        changes = {}
        if notes is not None:
            changes["notes"] = notes
        toggled = is_active is not None and is_active != assignment.is_active
        if toggled:
            if is_active and await self.assignments.find_active(
                assignment.reviewer, assignment.assigned_to, exclude_id=assignment.id
            ):
                raise ConflictError("An active assignment already exists for this reviewer and target")
            changes["is_active"] = is_active
        if not changes:
            return assignment

        updated = await self.assignments.update(assignment_id, changes)
        if updated is None:
            raise NotFoundError("Assignment not found")

        if toggled:
            if updated.is_active:
                await self._add_reviewer(updated)
            else:
                await self._remove_reviewer(updated)
            self.logger.info("assignment_toggled", assignment_id=assignment_id, is_active=updated.is_active)
        return updated

    async def delete_assignment(self, assignment_id: str) -> None:
        assignment = await self.get_assignment(assignment_id)
        if assignment.is_active:
            await self._remove_reviewer(assignment)
        await self.assignments.delete(assignment_id)
        self.logger.info("assignment_deleted", assignment_id=assignment_id)

    async def list_assignments(
        self,
        *,
        reviewer: Optional[str] = None,
        kind: Optional[AssignmentKind] = None,
        assigned_to: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort: SortSpec,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Assignment]:
        return await self.assignments.list_assignments(
            reviewer=reviewer,
            kind=kind,
            assigned_to=assigned_to,
            is_active=is_active,
            sort=sort,
            page=page,
            limit=limit,
        )

    async def reviewer_assignments(
        self,
        reviewer_id: str,
        actor: AuthenticatedUser,
        *,
        is_active: Optional[bool] = True,
        sort: SortSpec,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Assignment]:
        actor.require_self_or_admin(reviewer_id)
        if await self.users.get_by_id(reviewer_id) is None:
            raise NotFoundError("Reviewer not found")
        return await self.list_assignments(reviewer=reviewer_id, is_active=is_active, sort=sort, page=page, limit=limit)

    async def deactivate_target(self, target: AssignmentTarget) -> int:
        """Deactivate every active assignment on ``target`` (used when it goes away)."""
        active = await self.assignments.list_active_for_target(target)
        for assignment in active:
            await self.assignments.update(assignment.id, {"is_active": False})
        return len(active)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    async def reconcile(self) -> ReconcileReport:
        """Replay the reviewer mirror from assignment records.

        Active assignments are re-added; inactive ones are pulled unless another
        active assignment covers the same (reviewer, kind, target).
        """
        report = ReconcileReport()
        active_keys: Set[Tuple[str, str, str]] = set()
        inactive = []

        async for assignment in self.assignments.iter_propagating():
            report.scanned += 1
            if assignment.is_active:
                active_keys.add(_tuple_key(assignment))
                if await self._add_reviewer(assignment):
                    report.added += 1
            else:
                inactive.append(assignment)

        pulled: Set[Tuple[str, str, str]] = set()
        for assignment in inactive:
            key = _tuple_key(assignment)
            if key in active_keys or key in pulled:
                continue
            pulled.add(key)
            if await self._remove_reviewer(assignment):
                report.removed += 1

        self.logger.info("assignments_reconciled", scanned=report.scanned, added=report.added, removed=report.removed)
        return report
