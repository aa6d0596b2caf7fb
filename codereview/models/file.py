from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ProjectFile:
    id: str
    project: str
    filename: str
    path: str
    file_type: str
    language: str
    size: int
    uploaded_by: str
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
