from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from codereview.models import Reply


class CommentCreateRequest(BaseModel):
    project_id: str
    file_id: str
    line_number: int = Field(ge=1)
    text: str = Field(min_length=1, max_length=1000)


class CommentUpdateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=1000)


class ReplyCreateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: str
    project: str
    file: str
    line_number: int
    author: str
    text: str
    replies: List[Reply]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
