from typing import Any, Dict, List, Optional

from codereview.models import Page, Project, ProjectStatus, SortSpec
from codereview.models.documents import ProjectDocument

from .base_repository import BaseRepository


class ProjectRepository(BaseRepository[ProjectDocument, Project]):
    document = ProjectDocument
    model = Project

    async def list_projects(
        self,
        *,
        student: Optional[str] = None,
        reviewer: Optional[str] = None,
        status: Optional[ProjectStatus] = None,
        tags: Optional[List[str]] = None,
        sort: SortSpec,
        page: int,
        limit: int,
    ) -> Page[Project]:
        filters: Dict[str, Any] = {}
        if student is not None:
            filters["student"] = student
        if reviewer is not None:
            filters["reviewers"] = reviewer
        if status is not None:
            filters["status"] = ProjectStatus(status).value
        if tags:
            filters["tags"] = {"$in": tags}
        return await self._find_page(filters, sort, page, limit)
