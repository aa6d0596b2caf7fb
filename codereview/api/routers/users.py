from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from codereview.api.deps import Pagination, get_container, get_current_user, require_admin, sort_param
from codereview.api.uploads import read_image
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.models import SortSpec, UserRole
from codereview.schemas import (
    ApiResponse,
    NotificationPreferencesUpdate,
    PageData,
    PasswordChangeRequest,
    ProjectResponse,
    UserResponse,
    UserUpdateRequest,
    ok,
)

router = APIRouter(prefix="/users", tags=["Users"])


def _user(user) -> UserResponse:
    return UserResponse.model_validate(user, from_attributes=True)


@router.get("", response_model=ApiResponse[PageData[UserResponse]])
async def list_users(
    role: Optional[UserRole] = None,
    cohort: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_verified: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-created_at")),
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.user_service.list_users(
        role=role,
        cohort=cohort,
        is_active=is_active,
        is_verified=is_verified,
        search=search,
        sort=sort,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ok(PageData.from_page(page, UserResponse))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(_user(await container.user_service.get_user(user_id, actor)))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    user = await container.user_service.update_user(user_id, payload, actor)
    return ok(_user(user), "User updated successfully")


@router.put("/{user_id}/password", response_model=ApiResponse[None])
async def change_password(
    user_id: str,
    payload: PasswordChangeRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.user_service.change_password(user_id, payload.current_password, payload.new_password, actor)
    return ok(message="Password updated successfully")


@router.put("/{user_id}/notification-preferences", response_model=ApiResponse[UserResponse])
async def update_notification_preferences(
    user_id: str,
    payload: NotificationPreferencesUpdate,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    user = await container.user_service.update_notification_preferences(user_id, payload, actor)
    return ok(_user(user), "Notification preferences updated")


@router.post("/{user_id}/profile-picture", response_model=ApiResponse[UserResponse])
async def upload_profile_picture(
    user_id: str,
    file: UploadFile = File(...),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    image = await read_image(file)
    user = await container.user_service.upload_profile_picture(
        user_id, image.filename, image.content_type, image.data, actor
    )
    return ok(_user(user), "Profile picture updated")


@router.get("/{user_id}/projects", response_model=ApiResponse[PageData[ProjectResponse]])
async def list_user_projects(
    user_id: str,
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-submission_date")),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.user_service.list_user_projects(
        user_id, actor, sort=sort, page=pagination.page, limit=pagination.limit
    )
    return ok(PageData.from_page(page, ProjectResponse))
