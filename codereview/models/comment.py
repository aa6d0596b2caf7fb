from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class Reply(BaseModel):
    id: str
    author: str
    text: str
    created_at: datetime


@dataclass
class Comment:
    id: str
    project: str
    file: str
    line_number: int
    author: str
    text: str
    replies: List[Reply] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_reply(self, reply_id: str) -> Optional[Reply]:
        return next((reply for reply in self.replies if reply.id == reply_id), None)
