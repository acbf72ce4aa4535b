import math
from typing import Generic, List, TypeVar
from pydantic import BaseModel, computed_field

T = TypeVar("T")

class PagedResult(BaseModel, Generic[T]):
    items: List[T]
    page_number: int
    page_size: int
    total_items: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.page_size else 0
