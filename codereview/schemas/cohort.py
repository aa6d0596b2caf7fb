from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CohortCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    start_date: datetime
    end_date: datetime
    students: List[str] = Field(default_factory=list)
    is_active: bool = True


class CohortUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    students: Optional[List[str]] = None
    is_active: Optional[bool] = None


class CohortResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    students: List[str]
    assigned_reviewers: List[str]
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
