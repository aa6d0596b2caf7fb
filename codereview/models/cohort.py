from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Cohort:
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    description: Optional[str] = None
    students: List[str] = field(default_factory=list)
    assigned_reviewers: List[str] = field(default_factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
