import re
from typing import Any, Dict, Optional

from codereview.core.security import utcnow
from codereview.models import Cohort, Page, SortSpec
from codereview.models.documents import CohortDocument

from .base_repository import BaseRepository


class CohortRepository(BaseRepository[CohortDocument, Cohort]):
    document = CohortDocument
    model = Cohort

    async def get_by_name(self, name: str) -> Optional[Cohort]:
        doc = await CohortDocument.find_one({"name": name})
        return self._to_model(doc) if doc else None

    async def list_cohorts(
        self,
        *,
        name: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_current: Optional[bool] = None,
        sort: SortSpec,
        page: int,
        limit: int,
    ) -> Page[Cohort]:
        filters: Dict[str, Any] = {}
        if name:
            filters["name"] = {"$regex": re.escape(name), "$options": "i"}
        if is_active is not None:
            filters["is_active"] = is_active
        if is_current is not None:
            now = utcnow()
            if is_current:
                filters["start_date"] = {"$lte": now}
                filters["end_date"] = {"$gte": now}
            else:
                filters["$or"] = [{"start_date": {"$gt": now}}, {"end_date": {"$lt": now}}]
        return await self._find_page(filters, sort, page, limit)
