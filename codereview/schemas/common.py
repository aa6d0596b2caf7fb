from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from codereview.models import Page

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope of every successful response."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PageData(BaseModel, Generic[T]):
    items: List[T]
    count: int
    total: int
    page: int
    pages: int

    @classmethod
    def from_page(cls, page: Page, item_schema) -> "PageData":
        items = [item_schema.model_validate(item, from_attributes=True) for item in page.items]
        return cls(items=items, count=len(items), total=page.total, page=page.page, pages=page.pages)


class CountResponse(BaseModel):
    count: int


def ok(data=None, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(data=data, message=message)
