from typing import List, Optional

from codereview.core.security import utcnow
from codereview.models import Comment, Reply
from codereview.models.documents import CommentDocument

from .base_repository import BaseRepository, encode, to_object_id


class CommentRepository(BaseRepository[CommentDocument, Comment]):
    document = CommentDocument
    model = Comment

    async def list_by_file(self, file_id: str) -> List[Comment]:
        return await self._find_all({"file": file_id}, sort=[("line_number", 1), ("created_at", 1)])

    async def list_by_project(self, project_id: str) -> List[Comment]:
        return await self._find_all({"project": project_id}, sort=[("created_at", -1)])

    async def add_reply(self, comment_id: str, reply: Reply) -> Optional[Comment]:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        await CommentDocument.find_one({"_id": oid}).update(
            {"$push": {"replies": encode(reply)}, "$set": {"updated_at": utcnow()}}
        )
        return await self.get_by_id(comment_id)

    async def remove_reply(self, comment_id: str, reply_id: str) -> bool:
        return await self.pull(comment_id, "replies", {"id": reply_id})

    async def delete_by_file(self, file_id: str) -> int:
        result = await CommentDocument.find({"file": file_id}).delete()
        return result.deleted_count if result else 0

    async def delete_by_project(self, project_id: str) -> int:
        result = await CommentDocument.find({"project": project_id}).delete()
        return result.deleted_count if result else 0
