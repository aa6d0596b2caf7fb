from typing import Optional

from fastapi import APIRouter, Depends, status

from codereview.api.deps import Pagination, get_container, require_admin, require_superadmin, sort_param
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.models import SortSpec
from codereview.schemas import ApiResponse, CohortCreateRequest, CohortResponse, CohortUpdateRequest, PageData, ok

router = APIRouter(prefix="/cohorts", tags=["Cohorts"])


def _cohort(cohort) -> CohortResponse:
    return CohortResponse.model_validate(cohort, from_attributes=True)


@router.post("", response_model=ApiResponse[CohortResponse], status_code=status.HTTP_201_CREATED)
async def create_cohort(
    payload: CohortCreateRequest,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    cohort = await container.cohort_service.create_cohort(payload)
    return ok(_cohort(cohort), "Cohort created successfully")


@router.get("", response_model=ApiResponse[PageData[CohortResponse]])
async def list_cohorts(
    name: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_current: Optional[bool] = None,
    pagination: Pagination = Depends(),
    sort: SortSpec = Depends(sort_param("-start_date")),
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    page = await container.cohort_service.list_cohorts(
        name=name,
        is_active=is_active,
        is_current=is_current,
        sort=sort,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ok(PageData.from_page(page, CohortResponse))


@router.get("/{cohort_id}", response_model=ApiResponse[CohortResponse])
async def get_cohort(
    cohort_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(_cohort(await container.cohort_service.get_cohort(cohort_id)))


@router.put("/{cohort_id}", response_model=ApiResponse[CohortResponse])
async def update_cohort(
    cohort_id: str,
    payload: CohortUpdateRequest,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    cohort = await container.cohort_service.update_cohort(cohort_id, payload)
    return ok(_cohort(cohort), "Cohort updated successfully")


@router.delete("/{cohort_id}", response_model=ApiResponse[None])
async def delete_cohort(
    cohort_id: str,
    _: AuthenticatedUser = Depends(require_superadmin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.cohort_service.delete_cohort(cohort_id)
    return ok(message="Cohort deleted successfully")


@router.post("/{cohort_id}/students/{user_id}", response_model=ApiResponse[CohortResponse])
async def add_student(
    cohort_id: str,
    user_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    cohort = await container.cohort_service.add_student(cohort_id, user_id)
    return ok(_cohort(cohort), "Student added to cohort")


@router.delete("/{cohort_id}/students/{user_id}", response_model=ApiResponse[CohortResponse])
async def remove_student(
    cohort_id: str,
    user_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    container: Container = Depends(get_container),
) -> ApiResponse:
    cohort = await container.cohort_service.remove_student(cohort_id, user_id)
    return ok(_cohort(cohort), "Student removed from cohort")
