import re
from typing import Any, Dict, Iterable, Optional

from codereview.models import Page, SortSpec, User, UserRole
from codereview.models.documents import UserDocument

from .base_repository import BaseRepository, to_object_id


class UserRepository(BaseRepository[UserDocument, User]):
    document = UserDocument
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await UserDocument.find_one({"email": email.strip().lower()})
        return self._to_model(doc) if doc else None

    async def get_by_verification_token(self, token: str) -> Optional[User]:
        doc = await UserDocument.find_one({"verification_token": token})
        return self._to_model(doc) if doc else None

    async def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        doc = await UserDocument.find_one({"reset_password_token": token_hash})
        return self._to_model(doc) if doc else None

    async def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        cohort: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_verified: Optional[bool] = None,
        search: Optional[str] = None,
        sort: SortSpec,
        page: int,
        limit: int,
    ) -> Page[User]:
        filters: Dict[str, Any] = {}
        if role is not None:
            filters["role"] = UserRole(role).value
        if cohort is not None:
            filters["cohort"] = cohort
        if is_active is not None:
            filters["is_active"] = is_active
        if is_verified is not None:
            filters["is_verified"] = is_verified
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            filters["$or"] = [{"first_name": pattern}, {"last_name": pattern}, {"email": pattern}]
        return await self._find_page(filters, sort, page, limit)

    async def set_cohort(self, user_ids: Iterable[str], cohort_id: Optional[str]) -> int:
        """Point every listed user at ``cohort_id`` (or clear it with None)."""
        ids = [oid for oid in (to_object_id(i) for i in user_ids) if oid is not None]
        if not ids:
            return 0
        result = await UserDocument.find({"_id": {"$in": ids}}).update({"$set": {"cohort": cohort_id}})
        return result.modified_count if result else 0

    async def clear_cohort(self, cohort_id: str) -> int:
        result = await UserDocument.find({"cohort": cohort_id}).update({"$set": {"cohort": None}})
        return result.modified_count if result else 0
