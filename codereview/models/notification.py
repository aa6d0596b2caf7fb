from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import NotificationType
from .refs import RelatedResource


@dataclass
class Notification:
    id: str
    recipient: str
    type: NotificationType
    content: str
    related_resource: Optional[RelatedResource] = None
    is_read: bool = False
    email_sent: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
