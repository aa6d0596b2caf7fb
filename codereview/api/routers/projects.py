from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from codereview.api.deps import Pagination, get_container, get_current_user, sort_param, split_csv
from codereview.api.uploads import read_project_files
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.models import ProjectStatus, SortSpec
from codereview.schemas import (
    ApiResponse,
    CommentResponse,
    FeedbackRequest,
    FileResponse,
    PageData,
    ProjectCreateRequest,
    ProjectResponse,
    ProjectStatusRequest,
    ProjectUpdateRequest,
    ok,
)

router = APIRouter(prefix="/projects", tags=["Projects"])


def _project(project) -> ProjectResponse:
    return ProjectResponse.model_validate(project, from_attributes=True)


# -------------------------------------------------------------------------
# CRUD
# -------------------------------------------------------------------------


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    project = await container.project_service.create_project(payload, actor)
    return ok(_project(project), "Project submitted successfully")


@router.get("", response_model=ApiResponse[PageData[ProjectResponse]])
async def list_projects(
    student: Optional[str] = None,
    reviewer: Optional[str] = None,
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    tags: Optional[str] = None,
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-submission_date")),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.project_service.list_projects(
        actor,
        student=student,
        reviewer=reviewer,
        status=project_status,
        tags=split_csv(tags),
        sort=sort,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ok(PageData.from_page(page, ProjectResponse))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    project_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(_project(await container.project_service.get_project_for(project_id, actor)))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    project = await container.project_service.update_project(project_id, payload, actor)
    return ok(_project(project), "Project updated successfully")


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    project_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.project_service.delete_project(project_id, actor)
    return ok(message="Project deleted successfully")


# -------------------------------------------------------------------------
# Review actions
# -------------------------------------------------------------------------


@router.put("/{project_id}/status", response_model=ApiResponse[ProjectResponse])
async def update_status(
    project_id: str,
    payload: ProjectStatusRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    project = await container.project_service.update_status(project_id, payload.status, actor)
    return ok(_project(project), "Project status updated")


@router.post("/{project_id}/feedback", response_model=ApiResponse[ProjectResponse])
async def add_feedback(
    project_id: str,
    payload: FeedbackRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    project = await container.project_service.add_feedback(project_id, payload.text, actor, status=payload.status)
    return ok(_project(project), "Feedback added successfully")


# -------------------------------------------------------------------------
# Files and comments
# -------------------------------------------------------------------------


@router.post(
    "/{project_id}/files",
    response_model=ApiResponse[List[FileResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def upload_files(
    project_id: str,
    files: List[UploadFile] = File(...),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    uploads = await read_project_files(files)
    created = await container.file_service.upload_files(project_id, uploads, actor)
    return ok([FileResponse.from_file(file) for file in created], f"{len(created)} file(s) uploaded")


@router.get("/{project_id}/files", response_model=ApiResponse[List[FileResponse]])
async def list_project_files(
    project_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    files = await container.file_service.list_project_files(project_id, actor)
    return ok([FileResponse.from_file(file) for file in files])


@router.get("/{project_id}/comments", response_model=ApiResponse[List[CommentResponse]])
async def list_project_comments(
    project_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comments = await container.comment_service.list_project_comments(project_id, actor)
    return ok([CommentResponse.model_validate(comment, from_attributes=True) for comment in comments])
