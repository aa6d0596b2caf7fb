from fastapi import APIRouter, Depends, Query

from codereview.api.deps import get_container, get_current_user
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.schemas import ApiResponse, CountResponse, NotificationListData, NotificationResponse, ok

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=ApiResponse[NotificationListData])
async def list_notifications(
    unread_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    service = container.notification_service
    items, total = await service.list_for_user(actor.id, unread_only=unread_only, skip=skip, limit=limit)
    data = NotificationListData(
        items=[NotificationResponse.model_validate(item, from_attributes=True) for item in items],
        count=len(items),
        total=total,
        unread=await service.unread_count(actor.id),
    )
    return ok(data)


@router.get("/unread-count", response_model=ApiResponse[CountResponse])
async def unread_count(
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(CountResponse(count=await container.notification_service.unread_count(actor.id)))


@router.put("/read-all", response_model=ApiResponse[CountResponse])
async def mark_all_read(
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    updated = await container.notification_service.mark_all_read(actor.id)
    return ok(CountResponse(count=updated), "All notifications marked as read")


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    notification = await container.notification_service.mark_read(notification_id, actor.id)
    return ok(NotificationResponse.model_validate(notification, from_attributes=True))
