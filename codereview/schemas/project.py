from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from codereview.models import ProjectFeedback, ProjectStatus


class ProjectCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    tags: List[str] = Field(default_factory=list)


class ProjectUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    tags: Optional[List[str]] = None


class ProjectStatusRequest(BaseModel):
    status: ProjectStatus


class FeedbackRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: str
    student: str
    reviewers: List[str]
    status: ProjectStatus
    submission_date: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    feedback: Optional[ProjectFeedback] = None
    files: List[str]
    tags: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
