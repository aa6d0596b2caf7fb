from fastapi import APIRouter, Depends, status

from codereview.api.deps import get_container, get_current_user
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.schemas import (
    ApiResponse,
    CommentCreateRequest,
    CommentResponse,
    CommentUpdateRequest,
    ReplyCreateRequest,
    ok,
)

router = APIRouter(prefix="/comments", tags=["Comments"])


def _comment(comment) -> CommentResponse:
    return CommentResponse.model_validate(comment, from_attributes=True)


@router.post("", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comment = await container.comment_service.create_comment(payload, actor)
    return ok(_comment(comment), "Comment added successfully")


@router.get("/{comment_id}", response_model=ApiResponse[CommentResponse])
async def get_comment(
    comment_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    return ok(_comment(await container.comment_service.get_comment(comment_id, actor)))


@router.put("/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: str,
    payload: CommentUpdateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comment = await container.comment_service.update_comment(comment_id, payload.text, actor)
    return ok(_comment(comment), "Comment updated successfully")


@router.delete("/{comment_id}", response_model=ApiResponse[None])
async def delete_comment(
    comment_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.comment_service.delete_comment(comment_id, actor)
    return ok(message="Comment deleted successfully")


@router.post(
    "/{comment_id}/replies",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_reply(
    comment_id: str,
    payload: ReplyCreateRequest,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comment = await container.comment_service.add_reply(comment_id, payload.text, actor)
    return ok(_comment(comment), "Reply added successfully")


@router.delete("/{comment_id}/replies/{reply_id}", response_model=ApiResponse[CommentResponse])
async def delete_reply(
    comment_id: str,
    reply_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comment = await container.comment_service.delete_reply(comment_id, reply_id, actor)
    return ok(_comment(comment), "Reply deleted successfully")
