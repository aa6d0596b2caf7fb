from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from codereview.api.deps import get_container, get_current_user
from codereview.container import Container
from codereview.core.context import AuthenticatedUser
from codereview.schemas import ApiResponse, CommentResponse, FileResponse, ok

router = APIRouter(prefix="/files", tags=["Files"])


def content_disposition(filename: str) -> str:
    """``inline`` disposition that survives non latin-1 names (RFC 6266 ``filename*``)."""
    quoted = quote(filename)
    if quoted == filename:
        return f'inline; filename="{filename}"'
    fallback = "".join(ch for ch in filename if ch.isascii() and ch.isprintable() and ch not in '"\\') or "file"
    return f"inline; filename=\"{fallback}\"; filename*=utf-8''{quoted}"


@router.get("/{file_id}", response_model=ApiResponse[FileResponse])
async def get_file(
    file_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    file, _ = await container.file_service.get_file(file_id, actor)
    return ok(FileResponse.from_file(file))


@router.get("/{file_id}/raw")
async def get_raw_file(
    file_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> Response:
    file, data = await container.file_service.read_raw(file_id, actor)
    media_type = file.file_type
    if file.content is not None and not media_type.startswith("text/"):
        media_type = "text/plain; charset=utf-8"
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(file.filename)},
    )


@router.get("/{file_id}/comments", response_model=ApiResponse[List[CommentResponse]])
async def list_file_comments(
    file_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    comments = await container.comment_service.list_file_comments(file_id, actor)
    return ok([CommentResponse.model_validate(comment, from_attributes=True) for comment in comments])


@router.delete("/{file_id}", response_model=ApiResponse[None])
async def delete_file(
    file_id: str,
    actor: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> ApiResponse:
    await container.file_service.delete_file(file_id, actor)
    return ok(message="File deleted successfully")
