from typing import List

from codereview.models import ProjectFile
from codereview.models.documents import FileDocument

from .base_repository import BaseRepository


class FileRepository(BaseRepository[FileDocument, ProjectFile]):
    document = FileDocument
    model = ProjectFile

    async def list_by_project(self, project_id: str) -> List[ProjectFile]:
        return await self._find_all({"project": project_id}, sort=[("created_at", 1)])

    async def delete_by_project(self, project_id: str) -> int:
        result = await FileDocument.find({"project": project_id}).delete()
        return result.deleted_count if result else 0
