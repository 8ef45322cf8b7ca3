"""Static descriptions of the resources the service exposes.

A definition only names things: the alert/collection tag, the URL segment,
the domain model and the table class. Wiring services to definitions is the
factory's job.
"""

from pydantic import BaseModel, ConfigDict
from sqlmodel import SQLModel

from carsonrent.models.base import EntityModel
from carsonrent.models.car import Car
from carsonrent.models.coordinates import Coordinates
from carsonrent.models.tables import CarRecord, CoordinatesRecord


class EntityDefinition(BaseModel):
    entity_name: str
    path: str
    model: type[EntityModel]
    record: type[SQLModel]

    model_config = ConfigDict(frozen=True)


CAR = EntityDefinition(entity_name="car", path="cars", model=Car, record=CarRecord)
COORDINATES = EntityDefinition(
    entity_name="coordinates",
    path="coordinates",
    model=Coordinates,
    record=CoordinatesRecord,
)

ENTITY_DEFINITIONS: tuple[EntityDefinition, ...] = (CAR, COORDINATES)
