from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from codereview.models import NotificationType, RelatedResource


class NotificationResponse(BaseModel):
    id: str
    recipient: str
    type: NotificationType
    content: str
    related_resource: Optional[RelatedResource] = None
    is_read: bool
    email_sent: bool
    created_at: Optional[datetime] = None


class NotificationListData(BaseModel):
    items: List[NotificationResponse]
    count: int
    total: int
    unread: int
