from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class FileResponse(BaseModel):
    """File metadata; inline content is served by the raw endpoint."""

    id: str
    project: str
    filename: str
    path: str
    file_type: str
    language: str
    size: int
    uploaded_by: str
    has_inline_content: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_file(cls, file) -> "FileResponse":
        return cls.model_validate(
            {
                "id": file.id,
                "project": file.project,
                "filename": file.filename,
                "path": file.path,
                "file_type": file.file_type,
                "language": file.language,
                "size": file.size,
                "uploaded_by": file.uploaded_by,
                "has_inline_content": file.content is not None,
                "created_at": file.created_at,
            }
        )
