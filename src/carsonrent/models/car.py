from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from carsonrent.models.base import EntityModel, ensure_non_empty_text, ensure_optional_text
from carsonrent.models.enums import CarStatus


class Car(EntityModel):
    brand: str
    model: str
    license_plate: str
    year: int | None = Field(default=None, ge=1886, le=2100)
    color: str | None = None
    daily_rate: float = Field(default=0.0, ge=0)
    status: CarStatus = CarStatus.AVAILABLE
    coordinates_id: int | None = Field(default=None, ge=1)

    @field_validator("brand", "model")
    @classmethod
    def _ensure_non_empty(cls, value: str, info: ValidationInfo) -> str:
        return ensure_non_empty_text(value, info.field_name or "value")

    @field_validator("license_plate")
    @classmethod
    def _normalize_license_plate(cls, value: str) -> str:
        return ensure_non_empty_text(value, "license_plate").strip().upper()

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: Any) -> str | None:
        return ensure_optional_text(value, "color")


__all__ = ["Car"]
