"""SQLModel table definitions for entity persistence.

Table classes are kept apart from the pydantic domain models in car.py and
coordinates.py. Domain models are frozen and reject unknown fields; SQLModel
tables must stay mutable for ORM updates.

Field names match the domain models so conversion goes through
``model_dump()`` and ``model_validate()``. Enum fields are stored as their
string value. SQLite drops timezone info, so datetimes come back naive and
are restored to UTC by the entity store.
"""

from datetime import datetime

from sqlmodel import Field, SQLModel


class CarRecord(SQLModel, table=True):
    """SQLModel table for the Car domain model."""

    __tablename__ = "car"

    id: int | None = Field(default=None, primary_key=True)
    brand: str
    model: str
    license_plate: str = Field(index=True)
    year: int | None = None
    color: str | None = None
    daily_rate: float = 0.0
    status: str
    coordinates_id: int | None = Field(default=None, index=True)


class CoordinatesRecord(SQLModel, table=True):
    """SQLModel table for the Coordinates domain model."""

    __tablename__ = "coordinates"

    id: int | None = Field(default=None, primary_key=True)
    latitude: float
    longitude: float
    label: str | None = None
    recorded_at: datetime | None = None
