import math
from dataclasses import dataclass, field
from typing import Generic, List, Tuple, TypeVar

T = TypeVar("T")

# (field, direction) pairs with direction 1 or -1, as Mongo expects
SortSpec = List[Tuple[str, int]]


def parse_sort(sort_by: str, default: str) -> SortSpec:
    """Turn ``"-created_at"`` / ``"title"`` style parameters into a sort spec."""
    value = (sort_by or default).strip()
    if value.startswith("-"):
        return [(value[1:], -1)]
    return [(value.lstrip("+"), 1)]


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 1

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit
