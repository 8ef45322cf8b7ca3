from carsonrent.models.base import EntityModel
from carsonrent.models.car import Car
from carsonrent.models.coordinates import Coordinates
from carsonrent.models.definitions import CAR, COORDINATES, ENTITY_DEFINITIONS, EntityDefinition
from carsonrent.models.enums import CarStatus, SortDirection
from carsonrent.models.page import Page, PageRequest, SortOrder

__all__ = [
    "CAR",
    "COORDINATES",
    "ENTITY_DEFINITIONS",
    "Car",
    "CarStatus",
    "Coordinates",
    "EntityDefinition",
    "EntityModel",
    "Page",
    "PageRequest",
    "SortDirection",
    "SortOrder",
]
