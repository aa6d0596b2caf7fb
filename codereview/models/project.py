from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .enums import ProjectStatus


class ProjectFeedback(BaseModel):
    """The single reviewer feedback block of a project."""

    text: str
    reviewer: str
    created_at: datetime
    updated_at: datetime


@dataclass
class Project:
    id: str
    title: str
    description: str
    student: str
    reviewers: List[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.PENDING
    submission_date: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    feedback: Optional[ProjectFeedback] = None
    files: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_owned_by(self, user_id: str) -> bool:
        return self.student == user_id

    def is_reviewed_by(self, user_id: str) -> bool:
        return user_id in self.reviewers
