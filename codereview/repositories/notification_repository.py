from typing import Any, Dict, List, Tuple

from codereview.models import Notification
from codereview.models.documents import NotificationDocument

from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[NotificationDocument, Notification]):
    document = NotificationDocument
    model = Notification

    async def list_for_recipient(
        self, recipient: str, *, unread_only: bool = False, skip: int = 0, limit: int = 10
    ) -> Tuple[List[Notification], int]:
        filters: Dict[str, Any] = {"recipient": recipient}
        if unread_only:
            filters["is_read"] = False
        total = await NotificationDocument.find(filters).count()
        docs = await NotificationDocument.find(filters).sort([("created_at", -1)]).skip(skip).limit(limit).to_list()
        return [self._to_model(doc) for doc in docs], total

    async def count_unread(self, recipient: str) -> int:
        return await NotificationDocument.find({"recipient": recipient, "is_read": False}).count()

    async def mark_all_read(self, recipient: str) -> int:
        result = await NotificationDocument.find({"recipient": recipient, "is_read": False}).update(
            {"$set": {"is_read": True}}
        )
        return result.modified_count if result else 0
