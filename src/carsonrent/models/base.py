from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T_Entity = TypeVar("T_Entity", bound="EntityModel")


class EntityModel(BaseModel):
    """Base class for persisted resources.

    The identifier stays ``None`` until the entity store assigns one.
    """

    id: int | None = None

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def with_id(self: T_Entity, entity_id: int | None) -> T_Entity:
        return self.model_copy(update={"id": entity_id})

    def searchable_text(self) -> str:
        """Flatten every populated non-id field into one lower-cased string."""
        values = self.model_dump(mode="json", exclude={"id"}, exclude_none=True).values()
        return " ".join(str(value) for value in values).lower()


def ensure_timezone_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError("datetime must be timezone-aware")
    return dt


def ensure_non_empty_text(value: str, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    if not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value


def ensure_optional_text(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    value = value.strip()
    return value or None
