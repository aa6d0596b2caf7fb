from typing import Iterable, List, Optional

from starlette.concurrency import run_in_threadpool

from codereview.core import ForbiddenError, NotFoundError, get_logger, utcnow
from codereview.core.context import AuthenticatedUser
from codereview.events import EventBus, ProjectFeedbackAdded, ProjectStatusChanged, ProjectSubmitted
from codereview.models import (
    AssignmentKind,
    AssignmentTarget,
    Page,
    Project,
    ProjectFeedback,
    ProjectStatus,
    SortSpec,
    UserRole,
)
from codereview.repositories import (
    CohortRepository,
    CommentRepository,
    FileRepository,
    ProjectRepository,
    UserRepository,
)
from codereview.schemas import ProjectCreateRequest, ProjectUpdateRequest

from .assignment_service import AssignmentService
from .storage import StorageHandler


def normalize_tags(tags: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(tag.strip() for tag in tags if tag and tag.strip()))


class ProjectService:
    """Project CRUD plus the review actions (status, feedback)."""

    def __init__(
        self,
        projects: ProjectRepository,
        users: UserRepository,
        cohorts: CohortRepository,
        files: FileRepository,
        comments: CommentRepository,
        storage: StorageHandler,
        assignments: AssignmentService,
        bus: EventBus,
    ):
        self.projects = projects
        self.users = users
        self.cohorts = cohorts
        self.files = files
        self.comments = comments
        self.storage = storage
        self.assignments = assignments
        self.bus = bus
        self.logger = get_logger("services.projects")

    # -------------------------------------------------------------------------
    # Access rules
    # -------------------------------------------------------------------------

    @staticmethod
    def ensure_can_view(project: Project, actor: AuthenticatedUser) -> None:
        if actor.is_admin or project.is_owned_by(actor.id) or project.is_reviewed_by(actor.id):
            return
        raise ForbiddenError("Not authorized to access this project")

    @staticmethod
    def ensure_can_edit(project: Project, actor: AuthenticatedUser) -> None:
        if actor.is_admin or project.is_owned_by(actor.id):
            return
        raise ForbiddenError("Only the project owner can modify this project")

    @staticmethod
    def ensure_can_review(project: Project, actor: AuthenticatedUser) -> None:
        if actor.is_admin or project.is_reviewed_by(actor.id):
            return
        raise ForbiddenError("Only reviewers assigned to this project can review it")

    async def get_project(self, project_id: str) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def get_project_for(self, project_id: str, actor: AuthenticatedUser) -> Project:
        """Load a project the actor is allowed to see."""
        project = await self.get_project(project_id)
        self.ensure_can_view(project, actor)
        return project

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def create_project(self, payload: ProjectCreateRequest, actor: AuthenticatedUser) -> Project:
        actor.require_role(UserRole.STUDENT, UserRole.ADMIN)

        reviewers: List[str] = []
        owner = await self.users.get_by_id(actor.id)
        if owner and owner.cohort:
            cohort = await self.cohorts.get_by_id(owner.cohort)
            if cohort:
                reviewers = list(cohort.assigned_reviewers)

        now = utcnow()
        project = await self.projects.create(
            title=payload.title.strip(),
            description=payload.description,
            student=actor.id,
            reviewers=reviewers,
            tags=normalize_tags(payload.tags),
            submission_date=now,
            last_updated=now,
        )
        self.logger.info("project_submitted", project_id=project.id, student=actor.id, reviewers=len(reviewers))
        await self.bus.emit(ProjectSubmitted(actor_id=actor.id, project=project))
        return project

    async def list_projects(
        self,
        actor: AuthenticatedUser,
        *,
        student: Optional[str] = None,
        reviewer: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        tags: Optional[List[str]] = None,
        sort: SortSpec,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Project]:
        match actor.role:
            case UserRole.STUDENT:
                student = actor.id
            case UserRole.REVIEWER:
                reviewer = actor.id
        return await self.projects.list_projects(
            student=student,
            reviewer=reviewer,
            status=status,
            tags=normalize_tags(tags or []),
            sort=sort,
            page=page,
            limit=limit,
        )

    async def update_project(self, project_id: str, payload: ProjectUpdateRequest, actor: AuthenticatedUser) -> Project:
        project = await self.get_project(project_id)
        self.ensure_can_edit(project, actor)

        changes = payload.model_dump(exclude_none=True)
        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])
        if not changes:
            return project
        changes["last_updated"] = utcnow()
        return await self.projects.update(project_id, changes)

    async def delete_project(self, project_id: str, actor: AuthenticatedUser) -> None:
        project = await self.get_project(project_id)
        self.ensure_can_edit(project, actor)

        for file in await self.files.list_by_project(project_id):
            await run_in_threadpool(self.storage.delete, file.path)
        await self.files.delete_by_project(project_id)
        await self.comments.delete_by_project(project_id)
        target = AssignmentTarget(kind=AssignmentKind.PROJECT, id=project_id)
        deactivated = await self.assignments.deactivate_target(target)
        await self.projects.delete(project_id)
        self.logger.info("project_deleted", project_id=project_id, assignments=deactivated)

    # -------------------------------------------------------------------------
    # Review actions
    # -------------------------------------------------------------------------

    async def update_status(self, project_id: str, status: ProjectStatus, actor: AuthenticatedUser) -> Project:
        project = await self.get_project(project_id)
        self.ensure_can_review(project, actor)

        updated = await self.projects.update(project_id, {"status": status, "last_updated": utcnow()})
        self.logger.info("project_status_changed", project_id=project_id, status=ProjectStatus(status).value)
        await self.bus.emit(ProjectStatusChanged(actor_id=actor.id, project=updated, previous_status=project.status))
        return updated

    async def add_feedback(
        self,
        project_id: str,
        text: str,
        actor: AuthenticatedUser,
        status: Optional[ProjectStatus] = None,
    ) -> Project:
        project = await self.get_project(project_id)
        self.ensure_can_review(project, actor)

        now = utcnow()
        feedback = ProjectFeedback(
            text=text,
            reviewer=actor.id,
            created_at=project.feedback.created_at if project.feedback else now,
            updated_at=now,
        )
        changes = {"feedback": feedback, "last_updated": now}
        if status is not None:
            changes["status"] = status

        updated = await self.projects.update(project_id, changes)
        await self.bus.emit(ProjectFeedbackAdded(actor_id=actor.id, project=updated))
        return updated
