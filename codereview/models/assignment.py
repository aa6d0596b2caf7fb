from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .refs import AssignmentTarget


@dataclass
class Assignment:
    id: str
    reviewer: str
    assigned_to: AssignmentTarget
    created_by: str
    is_active: bool = True
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def propagates(self) -> bool:
        """Whether this assignment is mirrored into a reviewer array."""
        return self.assigned_to.kind.propagates
