from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from carsonrent.models.base import EntityModel, ensure_optional_text, ensure_timezone_aware


class Coordinates(EntityModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    label: str | None = None
    recorded_at: datetime | None = None

    @field_validator("label", mode="before")
    @classmethod
    def _normalize_label(cls, value: Any) -> str | None:
        return ensure_optional_text(value, "label")

    @field_validator("recorded_at", mode="before")
    @classmethod
    def _validate_recorded_at(cls, value: Any) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if not isinstance(value, datetime):
            raise ValueError("recorded_at must be a datetime or an ISO 8601 string")
        return ensure_timezone_aware(value)


__all__ = ["Coordinates"]
