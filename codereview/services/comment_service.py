from typing import List

from bson import ObjectId

from codereview.core import BadRequestError, ForbiddenError, NotFoundError, get_logger, utcnow
from codereview.core.context import AuthenticatedUser
from codereview.events import CommentCreated, CommentReplied, EventBus
from codereview.models import Comment, Reply
from codereview.repositories import CommentRepository, FileRepository
from codereview.schemas import CommentCreateRequest

from .project_service import ProjectService


class CommentService:
    """Line comments and their replies; access follows the parent project."""

    def __init__(
        self,
        comments: CommentRepository,
        files: FileRepository,
        project_service: ProjectService,
        bus: EventBus,
    ):
        self.comments = comments
        self.files = files
        self.project_service = project_service
        self.bus = bus
        self.logger = get_logger("services.comments")

    async def _get(self, comment_id: str) -> Comment:
        comment = await self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def create_comment(self, payload: CommentCreateRequest, actor: AuthenticatedUser) -> Comment:
        project = await self.project_service.get_project_for(payload.project_id, actor)
        file = await self.files.get_by_id(payload.file_id)
        if file is None:
            raise NotFoundError("File not found")
        if file.project != project.id:
            raise BadRequestError("File does not belong to this project")

        comment = await self.comments.create(
            project=project.id,
            file=file.id,
            line_number=payload.line_number,
            author=actor.id,
            text=payload.text,
            replies=[],
        )
        self.logger.info("comment_created", comment_id=comment.id, project_id=project.id, line=payload.line_number)
        await self.bus.emit(CommentCreated(actor_id=actor.id, comment=comment, project=project))
        return comment

    async def get_comment(self, comment_id: str, actor: AuthenticatedUser) -> Comment:
        comment = await self._get(comment_id)
        await self.project_service.get_project_for(comment.project, actor)
        return comment

    async def list_file_comments(self, file_id: str, actor: AuthenticatedUser) -> List[Comment]:
        file = await self.files.get_by_id(file_id)
        if file is None:
            raise NotFoundError("File not found")
        await self.project_service.get_project_for(file.project, actor)
        return await self.comments.list_by_file(file_id)

    async def list_project_comments(self, project_id: str, actor: AuthenticatedUser) -> List[Comment]:
        await self.project_service.get_project_for(project_id, actor)
        return await self.comments.list_by_project(project_id)

    async def update_comment(self, comment_id: str, text: str, actor: AuthenticatedUser) -> Comment:
        comment = await self._get(comment_id)
        if comment.author != actor.id:
            raise ForbiddenError("Only the comment author can edit this comment")
        return await self.comments.update(comment_id, {"text": text})

    async def delete_comment(self, comment_id: str, actor: AuthenticatedUser) -> None:
        comment = await self._get(comment_id)
        if comment.author != actor.id and not actor.is_admin:
            raise ForbiddenError("Only the comment author can delete this comment")
        await self.comments.delete(comment_id)

    async def add_reply(self, comment_id: str, text: str, actor: AuthenticatedUser) -> Comment:
        comment = await self._get(comment_id)
        project = await self.project_service.get_project_for(comment.project, actor)

        reply = Reply(id=str(ObjectId()), author=actor.id, text=text, created_at=utcnow())
        updated = await self.comments.add_reply(comment_id, reply)
        if updated is None:
            raise NotFoundError("Comment not found")
        await self.bus.emit(CommentReplied(actor_id=actor.id, comment=updated, reply=reply, project=project))
        return updated

    async def delete_reply(self, comment_id: str, reply_id: str, actor: AuthenticatedUser) -> Comment:
        comment = await self._get(comment_id)
        reply = comment.find_reply(reply_id)
        if reply is None:
            raise NotFoundError("Reply not found")
        if reply.author != actor.id and not actor.is_admin:
            raise ForbiddenError("Only the reply author can delete this reply")
        await self.comments.remove_reply(comment_id, reply_id)
        return await self._get(comment_id)
