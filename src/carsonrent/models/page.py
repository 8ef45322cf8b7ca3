import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from carsonrent.models.enums import SortDirection

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 2000


class SortOrder(BaseModel):
    field: str
    direction: SortDirection = SortDirection.ASC

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        """Parse ``"field"`` or ``"field,desc"`` into a SortOrder."""
        name, _, direction = value.partition(",")
        name = name.strip()
        if not name:
            raise ValueError("sort field cannot be empty")
        direction = direction.strip().lower() or SortDirection.ASC.value
        return cls(field=name, direction=SortDirection(direction))

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC

    def __str__(self) -> str:
        return f"{self.field},{self.direction.value}"


class PageRequest(BaseModel):
    page: int = Field(default=0, ge=0)
    size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE)
    sort: list[SortOrder] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("sort", mode="before")
    @classmethod
    def _coerce_sort(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, (str, SortOrder)):
            value = [value]
        return [SortOrder.parse(item) if isinstance(item, str) else item for item in value]

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> "PageRequest":
        return self.model_copy(update={"page": self.page + 1})


class Page(BaseModel, Generic[T]):
    """A slice of a larger result set plus where it sits in that set."""

    content: list[T]
    page: int = Field(ge=0)
    size: int = Field(gt=0)
    total_elements: int = Field(ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 0


__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "Page", "PageRequest", "SortOrder"]
