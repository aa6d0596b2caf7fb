from typing import Any, AsyncIterator, Dict, Optional

from codereview.models import Assignment, AssignmentKind, AssignmentTarget, Page, SortSpec
from codereview.models.documents import AssignmentDocument

from .base_repository import BaseRepository


class AssignmentRepository(BaseRepository[AssignmentDocument, Assignment]):
    document = AssignmentDocument
    model = Assignment

    async def find_active(
        self, reviewer: str, target: AssignmentTarget, exclude_id: Optional[str] = None
    ) -> Optional[Assignment]:
        """The active assignment for (reviewer, kind, target), if any."""
        filters: Dict[str, Any] = {
            "reviewer": reviewer,
            "assigned_to.kind": target.kind.value,
            "assigned_to.id": target.id,
            "is_active": True,
        }
        async for doc in AssignmentDocument.find(filters):
            if exclude_id is None or str(doc.id) != exclude_id:
                return self._to_model(doc)
        return None

    async def list_assignments(
        self,
        *,
        reviewer: Optional[str] = None,
        kind: Optional[AssignmentKind] = None,
        assigned_to: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort: SortSpec,
        page: int,
        limit: int,
    ) -> Page[Assignment]:
        filters: Dict[str, Any] = {}
        if reviewer is not None:
            filters["reviewer"] = reviewer
        if kind is not None:
            filters["assigned_to.kind"] = AssignmentKind(kind).value
        if assigned_to is not None:
            filters["assigned_to.id"] = assigned_to
        if is_active is not None:
            filters["is_active"] = is_active
        return await self._find_page(filters, sort, page, limit)

    async def iter_propagating(self) -> AsyncIterator[Assignment]:
        """Every cohort/project assignment, active or not."""
        kinds = [kind.value for kind in AssignmentKind if kind.propagates]
        async for doc in AssignmentDocument.find({"assigned_to.kind": {"$in": kinds}}):
            yield self._to_model(doc)

    async def list_active_for_target(self, target: AssignmentTarget) -> list[Assignment]:
        return await self._find_all(
            {"assigned_to.kind": target.kind.value, "assigned_to.id": target.id, "is_active": True}
        )
