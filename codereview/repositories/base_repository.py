from dataclasses import fields
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pydantic import BaseModel

from codereview.core.security import utcnow
from codereview.models.common import Page, SortSpec
from codereview.models.documents import CodeReviewDocument

D = TypeVar("D", bound=CodeReviewDocument)
M = TypeVar("M")


def to_object_id(value: Optional[str]) -> Optional[PydanticObjectId]:
    """Parse a hex id; malformed ids behave like missing documents."""
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        return None


def encode(value: Any) -> Any:
    """Prepare a value for a raw ``$set`` / ``$addToSet`` expression."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set)):
        return [encode(item) for item in value]
    return value


class BaseRepository(Generic[D, M]):
    """
    Beanie-backed repository returning plain models instead of documents.

    Subclasses set ``document`` and ``model``; every field of ``model`` except ``id``
    must exist on ``document``.
    """

    document: Type[D]
    model: Type[M]

    def _to_model(self, doc: D) -> M:
        data = {f.name: getattr(doc, f.name) for f in fields(self.model) if f.name != "id"}
        return self.model(id=str(doc.id), **data)

    async def _get_document(self, item_id: str) -> Optional[D]:
        oid = to_object_id(item_id)
        if oid is None:
            return None
        return await self.document.get(oid)

    async def get_by_id(self, item_id: str) -> Optional[M]:
        doc = await self._get_document(item_id)
        if not doc:
            return None
        return self._to_model(doc)

    async def get_many(self, item_ids: Iterable[str]) -> List[M]:
        oids = [oid for oid in (to_object_id(i) for i in item_ids) if oid is not None]
        if not oids:
            return []
        docs = await self.document.find({"_id": {"$in": oids}}).to_list()
        return [self._to_model(doc) for doc in docs]

    async def create(self, **data: Any) -> M:
        doc = self.document(**data)
        await doc.insert()
        return self._to_model(doc)

    async def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[M]:
        """Apply a partial ``$set`` and return the refreshed model."""
        oid = to_object_id(item_id)
        if oid is None:
            return None
        update_data = {key: encode(value) for key, value in changes.items()}
        update_data["updated_at"] = utcnow()
        await self.document.find_one({"_id": oid}).update({"$set": update_data})
        return await self.get_by_id(item_id)

    async def delete(self, item_id: str) -> bool:
        oid = to_object_id(item_id)
        if oid is None:
            return False
        result = await self.document.find_one({"_id": oid}).delete()
        return bool(result and result.deleted_count)

    async def add_to_set(self, item_id: str, field: str, value: Any) -> bool:
        """Atomically add ``value`` to the array ``field``; no duplicates."""
        return await self._array_op(item_id, "$addToSet", field, value)

    async def pull(self, item_id: str, field: str, value: Any) -> bool:
        """Atomically remove every occurrence of ``value`` from the array ``field``."""
        return await self._array_op(item_id, "$pull", field, value)

    async def _array_op(self, item_id: str, operator: str, field: str, value: Any) -> bool:
        oid = to_object_id(item_id)
        if oid is None:
            return False
        result = await self.document.find_one({"_id": oid}).update(
            {operator: {field: encode(value)}, "$set": {"updated_at": utcnow()}}
        )
        return bool(result and result.modified_count)

    async def _find_all(self, filters: Dict[str, Any], sort: Optional[SortSpec] = None) -> List[M]:
        query = self.document.find(filters)
        if sort:
            query = query.sort(self._sort_expr(sort))
        return [self._to_model(doc) for doc in await query.to_list()]

    async def _find_page(self, filters: Dict[str, Any], sort: SortSpec, page: int, limit: int) -> Page[M]:
        result: Page[M] = Page(page=page, limit=limit)
        result.total = await self.document.find(filters).count()
        docs = (
            await self.document.find(filters)
            .sort(self._sort_expr(sort))
            .skip(result.skip)
            .limit(limit)
            .to_list()
        )
        result.items = [self._to_model(doc) for doc in docs]
        return result

    @staticmethod
    def _sort_expr(sort: SortSpec) -> list:
        return [("_id" if key == "id" else key, direction) for key, direction in sort]
