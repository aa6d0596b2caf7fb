from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from codereview.models import AssignmentTarget


class AssignmentCreateRequest(BaseModel):
    reviewer: str
    assigned_to: AssignmentTarget
    is_active: bool = True
    notes: Optional[str] = Field(default=None, max_length=1000)


class AssignmentUpdateRequest(BaseModel):
    is_active: Optional[bool] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


class AssignmentResponse(BaseModel):
    id: str
    reviewer: str
    assigned_to: AssignmentTarget
    created_by: str
    is_active: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReconcileResponse(BaseModel):
    scanned: int
    added: int
    removed: int
