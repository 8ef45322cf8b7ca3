"""Resource service tying an entity store to its search index.

Every write goes to the relational store first and is then mirrored into the
search index on the same call. There is no transaction spanning the two
stores: when the index write fails the store keeps the change and the error
propagates to the caller. ``reindex`` rebuilds the index from the store.
"""

import structlog
from pydantic import BaseModel, ConfigDict, Field

from carsonrent.models.base import EntityModel
from carsonrent.models.definitions import EntityDefinition
from carsonrent.models.page import Page, PageRequest
from carsonrent.services.entity_store import EntityStore
from carsonrent.services.search_index import SearchIndex

DEFAULT_REINDEX_BATCH_SIZE = 500


class ReindexResult(BaseModel):
    """Result of a reindex run."""

    entity_name: str
    indexed: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class IndexHealth(BaseModel):
    """Row count in the entity store against document count in the search index."""

    entity_name: str
    stored: int = Field(ge=0)
    indexed: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def in_sync(self) -> bool:
        return self.stored == self.indexed


class ResourceService:
    """Business-facing contract for one resource.

    All dependencies are injected via constructor for testability.
    """

    def __init__(
        self,
        definition: EntityDefinition,
        entity_store: EntityStore,
        search_index: SearchIndex,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._definition = definition
        self._entity_store = entity_store
        self._search_index = search_index
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def definition(self) -> EntityDefinition:
        return self._definition

    async def initialize(self) -> None:
        await self._entity_store.initialize_schema()
        await self._search_index.initialize()

    async def save(self, entity: EntityModel) -> EntityModel:
        """Save an entity and mirror it into the search index.

        Args:
            entity: The entity to save; a missing id means create.

        Returns:
            The persisted entity.
        """
        self._logger.debug("request_to_save", entity=self._definition.entity_name, entity_id=entity.id)
        saved = await self._entity_store.save(entity)
        await self._search_index.index(saved)
        return saved

    async def find_all(self, page_request: PageRequest) -> Page:
        """Get one page of all entities."""
        self._logger.debug(
            "request_to_get_all",
            entity=self._definition.entity_name,
            page=page_request.page,
            size=page_request.size,
        )
        return await self._entity_store.find_page(page_request)

    async def find_one(self, entity_id: int) -> EntityModel | None:
        """Get the entity with the given id, or None."""
        self._logger.debug("request_to_get", entity=self._definition.entity_name, entity_id=entity_id)
        return await self._entity_store.find_by_id(entity_id)

    async def delete(self, entity_id: int) -> None:
        """Delete the entity with the given id from both stores.

        Deleting an id that does not exist is not an error.
        """
        self._logger.debug("request_to_delete", entity=self._definition.entity_name, entity_id=entity_id)
        await self._entity_store.delete(entity_id)
        await self._search_index.delete(entity_id)

    async def search(self, query: str, page_request: PageRequest) -> Page:
        """Search the index for entities matching the query."""
        self._logger.debug(
            "request_to_search",
            entity=self._definition.entity_name,
            query=query,
            page=page_request.page,
        )
        return await self._search_index.search(query, page_request)

    async def index_health(self) -> IndexHealth:
        """Compare how many entities each store holds.

        A mismatch means a write reached the entity store but not the index
        (or the reverse); running reindex repairs it.
        """
        health = IndexHealth(
            entity_name=self._definition.entity_name,
            stored=await self._entity_store.count(),
            indexed=await self._search_index.count(),
        )
        if not health.in_sync:
            self._logger.warning(
                "search_index_out_of_sync",
                entity=self._definition.entity_name,
                stored=health.stored,
                indexed=health.indexed,
            )
        return health

    async def reindex(self, batch_size: int = DEFAULT_REINDEX_BATCH_SIZE) -> ReindexResult:
        """Rebuild the search index from the entity store.

        Clears the collection then indexes every stored entity, a page at a
        time. Running it twice leaves the same index.

        Args:
            batch_size: Number of entities read per page.

        Returns:
            ReindexResult with the number of entities indexed.
        """
        self._logger.info("reindex_started", entity=self._definition.entity_name)

        await self._search_index.clear()

        indexed = 0
        page_request = PageRequest(page=0, size=batch_size)
        while True:
            page = await self._entity_store.find_page(page_request)
            for entity in page.content:
                await self._search_index.index(entity)
                indexed += 1
            if not page.has_next:
                break
            page_request = page_request.next()

        self._logger.info(
            "reindex_completed",
            entity=self._definition.entity_name,
            indexed=indexed,
        )
        return ReindexResult(entity_name=self._definition.entity_name, indexed=indexed)
