from enum import StrEnum


class CarStatus(StrEnum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"
