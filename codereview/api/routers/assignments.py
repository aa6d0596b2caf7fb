from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from codereview.api.deps import (
    Pagination,
    get_container,
    get_current_user,
    require_admin,
    require_superadmin,
    sort_param,
)
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.models import AssignmentKind, SortSpec
from codereview.schemas import (
    ApiResponse,
    AssignmentCreateRequest,
    AssignmentResponse,
    AssignmentUpdateRequest,
    PageData,
    ReconcileResponse,
    ok,
)

router = APIRouter(tags=["Assignments"])


def _assignment(assignment) -> AssignmentResponse:
    return AssignmentResponse.model_validate(assignment, from_attributes=True)


@router.post(
    "/assignments",
    response_model=ApiResponse[AssignmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_assignment(
    payload: AssignmentCreateRequest,
    actor: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    assignment = await container.assignment_service.create_assignment(
        payload.reviewer,
        payload.assigned_to,
        actor,
        is_active=payload.is_active,
        notes=payload.notes,
    )
    return ok(_assignment(assignment), "Assignment created successfully")


@router.get("/assignments", response_model=ApiResponse[PageData[AssignmentResponse]])
async def list_assignments(
    reviewer: Optional[str] = None,
    kind: Optional[AssignmentKind] = None,
    assigned_to: Optional[str] = None,
    is_active: Optional[bool] = None,
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-created_at")),
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.assignment_service.list_assignments(
        reviewer=reviewer,
        kind=kind,
        assigned_to=assigned_to,
        is_active=is_active,
        sort=sort,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ok(PageData.from_page(page, AssignmentResponse))


@router.post("/assignments/reconcile", response_model=ApiResponse[ReconcileResponse])
async def reconcile_assignments(
    _: AuthenticatedUser = Depends(require_superadmin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    report = await container.assignment_service.reconcile()
    return ok(ReconcileResponse.model_validate(report, from_attributes=True), "Reviewer lists reconciled")


@router.get("/assignments/{assignment_id}", response_model=ApiResponse[AssignmentResponse])
async def get_assignment(
    assignment_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(_assignment(await container.assignment_service.get_assignment(assignment_id)))


@router.put("/assignments/{assignment_id}", response_model=ApiResponse[AssignmentResponse])
async def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdateRequest,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    assignment = await container.assignment_service.update_assignment(
        assignment_id, is_active=payload.is_active, notes=payload.notes
    )
    return ok(_assignment(assignment), "Assignment updated successfully")


@router.delete("/assignments/{assignment_id}", response_model=ApiResponse[None])
async def delete_assignment(
    assignment_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.assignment_service.delete_assignment(assignment_id)
    return ok(message="Assignment deleted successfully")


@router.get("/reviewers/{reviewer_id}/assignments", response_model=ApiResponse[PageData[AssignmentResponse]])
async def list_reviewer_assignments(
    reviewer_id: str,
    is_active: Optional[bool] = Query(True),
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-created_at")),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.assignment_service.reviewer_assignments(
        reviewer_id,
        actor,
        is_active=is_active,
        sort=sort,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ok(PageData.from_page(page, AssignmentResponse))
