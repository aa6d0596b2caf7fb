from typing import Optional

from starlette.concurrency import run_in_threadpool

from codereview.core import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    get_config,
    get_logger,
    hash_password,
    verify_password,
)
from codereview.core.context import AuthenticatedUser
from codereview.models import Page, Project, SortSpec, User, UserRole
from codereview.repositories import CohortRepository, ProjectRepository, UserRepository
from codereview.schemas import NotificationPreferencesUpdate, UserUpdateRequest

from .storage import PROFILE_IMAGES_PREFIX, StorageHandler, build_key

_ADMIN_FIELDS = ("role", "is_active", "cohort")


class UserService:
    def __init__(
        self,
        users: UserRepository,
        cohorts: CohortRepository,
        projects: ProjectRepository,
        storage: StorageHandler,
    ):
        self.users = users
        self.cohorts = cohorts
        self.projects = projects
        self.storage = storage
        self.logger = get_logger("services.users")

    async def _get(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user(self, user_id: str, actor: AuthenticatedUser) -> User:
        actor.require_self_or_admin(user_id)
        return await self._get(user_id)

    async def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        cohort: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_verified: Optional[bool] = None,
        search: Optional[str] = None,
        sort: SortSpec,
        page: int = 1,
        limit: int = 10,
    ) -> Page[User]:
        return await self.users.list_users(
            role=role,
            cohort=cohort,
            is_active=is_active,
            is_verified=is_verified,
            search=search,
            sort=sort,
            page=page,
            limit=limit,
        )

    async def update_user(self, user_id: str, payload: UserUpdateRequest, actor: AuthenticatedUser) -> User:
        """Profile edits for the owner; role, status and cohort for administrators."""
        actor.require_self_or_admin(user_id)
        user = await self._get(user_id)
        provided = payload.model_fields_set

        if any(field in provided for field in _ADMIN_FIELDS) and not actor.is_admin:
            raise ForbiddenError("Only administrators can change role, status or cohort")

        changes = {}
        for field in ("first_name", "last_name", "bio"):
            value = getattr(payload, field)
            if field in provided and value is not None:
                changes[field] = value.strip() if field != "bio" else value

        if payload.email is not None:
            email = payload.email.strip().lower()
            if email != user.email:
                existing = await self.users.get_by_email(email)
                if existing and existing.id != user.id:
                    raise ConflictError("Email is already in use")
                changes["email"] = email

        if payload.role is not None and payload.role != user.role:
            if UserRole.is_admin(payload.role) and not actor.is_superadmin:
                raise ForbiddenError("Only a superadmin can grant administrator roles")
            changes["role"] = payload.role

        if payload.is_active is not None:
            changes["is_active"] = payload.is_active

        if "cohort" in provided:
            role = UserRole(changes.get("role", user.role))
            await self._move_cohort(user, payload.cohort or None, role)
            changes["cohort"] = payload.cohort or None

        if not changes:
            return user
        updated = await self.users.update(user_id, changes)
        self.logger.info("user_updated", user_id=user_id, fields=sorted(changes))
        return updated

    async def _move_cohort(self, user: User, cohort_id: Optional[str], role: UserRole) -> None:
        if cohort_id is not None:
            if role != UserRole.STUDENT:
                raise BadRequestError("Only students can belong to a cohort")
            if await self.cohorts.get_by_id(cohort_id) is None:
                raise NotFoundError("Cohort not found")
        if user.cohort and user.cohort != cohort_id:
            await self.cohorts.pull(user.cohort, "students", user.id)
        if cohort_id is not None:
            await self.cohorts.add_to_set(cohort_id, "students", user.id)

    async def change_password(
        self, user_id: str, current_password: str, new_password: str, actor: AuthenticatedUser
    ) -> None:
        if actor.id != user_id:
            raise ForbiddenError("You can only change your own password")
        user = await self._get(user_id)
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        await self.users.update(user_id, {"password_hash": hash_password(new_password)})
        self.logger.info("password_changed", user_id=user_id)

    async def update_notification_preferences(
        self, user_id: str, payload: NotificationPreferencesUpdate, actor: AuthenticatedUser
    ) -> User:
        if actor.id != user_id:
            raise ForbiddenError("You can only change your own notification preferences")
        user = await self._get(user_id)

        preferences = user.notification_preferences.model_copy(deep=True)
        for channel in ("email", "in_app"):
            update = getattr(payload, channel)
            if update is None:
                continue
            current = getattr(preferences, channel)
            setattr(preferences, channel, current.model_copy(update=update.model_dump(exclude_none=True)))

        return await self.users.update(user_id, {"notification_preferences": preferences})

    async def upload_profile_picture(
        self, user_id: str, filename: str, content_type: str, data: bytes, actor: AuthenticatedUser
    ) -> User:
        if actor.id != user_id:
            raise ForbiddenError("You can only change your own profile picture")
        if not (content_type or "").startswith("image/"):
            raise BadRequestError("Profile picture must be an image")
        if len(data) > get_config().STORAGE.MAX_IMAGE_SIZE:
            raise BadRequestError("Profile picture is too large")
        user = await self._get(user_id)

        key = build_key(PROFILE_IMAGES_PREFIX, filename)
        await run_in_threadpool(self.storage.put, data, key, content_type)
        if user.profile_picture:
            await run_in_threadpool(self.storage.delete, user.profile_picture)
        return await self.users.update(user_id, {"profile_picture": key})

    async def list_user_projects(
        self, user_id: str, actor: AuthenticatedUser, *, sort: SortSpec, page: int = 1, limit: int = 10
    ) -> Page[Project]:
        await self._get(user_id)
        reviewer = None
        if not actor.is_admin and actor.id != user_id:
            if actor.role != UserRole.REVIEWER:
                raise ForbiddenError()
            reviewer = actor.id
        return await self.projects.list_projects(student=user_id, reviewer=reviewer, sort=sort, page=page, limit=limit)
