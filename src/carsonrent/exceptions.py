"""Exceptions raised by the carsonrent services and mapped to HTTP responses."""


class CarsOnRentError(Exception):
    """Base class for carsonrent errors."""


class ClientRequestError(CarsOnRentError):
    """A request the client must fix; answered with 400 and a failure alert."""

    def __init__(self, entity_name: str, error_key: str, message: str | None = None):
        self.entity_name = entity_name
        self.error_key = error_key
        self.message = message or f"Invalid request for {entity_name}"
        super().__init__(self.message)


class IdAlreadyExistsError(ClientRequestError):
    """Raised when a new entity arrives with its identifier already set."""

    def __init__(self, entity_name: str, entity_id: int):
        self.entity_id = entity_id
        super().__init__(
            entity_name,
            "idexists",
            f"A new {entity_name} cannot already have an ID",
        )


class InvalidSortError(ClientRequestError):
    """Raised when a page request sorts on a field the entity does not have."""

    def __init__(self, entity_name: str, field: str):
        self.field = field
        super().__init__(
            entity_name,
            "invalidsort",
            f"Cannot sort {entity_name} by unknown field '{field}'",
        )
