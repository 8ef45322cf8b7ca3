"""Factory functions for creating and wiring resource services.

Provides a production factory that creates services with persistent storage
and a test factory that uses in-memory stores for fast, isolated testing.
"""

from pathlib import Path
from typing import Any

import chromadb
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from carsonrent.config import Settings
from carsonrent.models.definitions import ENTITY_DEFINITIONS, EntityDefinition
from carsonrent.services.entity_store import EntityStore, create_async_engine_from_path
from carsonrent.services.resource import IndexHealth, ReindexResult, ResourceService
from carsonrent.services.search_index import SearchIndex

_TEST_COLLECTION_ID_LENGTH = 8


class ApplicationContext:
    """Holds the wired services and the resources they share."""

    def __init__(
        self,
        settings: Settings,
        services: dict[str, ResourceService],
        engine: AsyncEngine,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._settings = settings
        self._services = services
        self._engine = engine
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def services(self) -> dict[str, ResourceService]:
        return dict(self._services)

    def service(self, entity_name: str) -> ResourceService:
        """Return the service for an entity name.

        Raises:
            KeyError: If no service handles that entity.
        """
        try:
            return self._services[entity_name]
        except KeyError:
            raise KeyError(f"No resource service for entity '{entity_name}'") from None

    async def initialize(self) -> None:
        """Create tables and collections for every service."""
        for service in self._services.values():
            await service.initialize()
        self._logger.info("application_initialized", entities=sorted(self._services))

    async def reindex(self) -> dict[str, ReindexResult]:
        """Rebuild every search index from its entity store."""
        return {name: await service.reindex() for name, service in self._services.items()}

    async def index_health(self) -> dict[str, IndexHealth]:
        """Compare store and index sizes for every service."""
        return {name: await service.index_health() for name, service in self._services.items()}

    async def close(self) -> None:
        await self._engine.dispose()
        self._logger.info("application_closed")


def create_application_context(
    settings: Settings,
    definitions: tuple[EntityDefinition, ...] = ENTITY_DEFINITIONS,
    embedding_function: Any | None = None,
) -> ApplicationContext:
    """Create a production ApplicationContext with persistent storage.

    Sets up SQLite (or any SQLAlchemy async URL) for entities and ChromaDB
    for the search mirror, either persisted next to the database or served
    by a ChromaDB server when ``settings.search_host`` is set.

    Args:
        settings: Runtime settings.
        definitions: Entity definitions to expose.
        embedding_function: ChromaDB embedding function (default: ConstantEmbeddingFunction).

    Returns:
        ApplicationContext ready to be initialized.
    """
    logger = structlog.get_logger(__name__)

    if "://" not in settings.database_url and settings.database_url != ":memory:":
        Path(settings.database_url).parent.mkdir(parents=True, exist_ok=True)
    engine = create_async_engine_from_path(settings.database_url)

    if settings.search_host:
        chroma_client = chromadb.HttpClient(host=settings.search_host, port=settings.search_port)
    else:
        Path(settings.search_path).mkdir(parents=True, exist_ok=True)
        chroma_client = chromadb.PersistentClient(path=settings.search_path)

    services = _create_services(
        engine=engine,
        chroma_client=chroma_client,
        collection_prefix=settings.collection_prefix,
        definitions=definitions,
        embedding_function=embedding_function,
        logger=logger,
    )
    return ApplicationContext(settings=settings, services=services, engine=engine, logger=logger)


def create_test_application_context(
    embedding_function: Any | None = None,
    collection_prefix: str | None = None,
    settings: Settings | None = None,
    definitions: tuple[EntityDefinition, ...] = ENTITY_DEFINITIONS,
) -> ApplicationContext:
    """Create an ApplicationContext with in-memory storage for testing.

    Uses in-memory SQLite and ephemeral ChromaDB for fast, isolated tests.
    Ephemeral ChromaDB clients share state inside a process, so each call
    gets a unique collection prefix unless one is given.

    Args:
        embedding_function: ChromaDB embedding function for the collections.
        collection_prefix: Collection name prefix. If None, generates a unique one.
        settings: Settings to expose on the context (default: Settings()).
        definitions: Entity definitions to expose.

    Returns:
        ApplicationContext with in-memory storage.
    """
    from uuid import uuid4

    logger = structlog.get_logger(__name__)

    engine = create_async_engine_from_path(":memory:")
    chroma_client = chromadb.EphemeralClient()
    effective_prefix = collection_prefix or f"test_{uuid4().hex[:_TEST_COLLECTION_ID_LENGTH]}"

    services = _create_services(
        engine=engine,
        chroma_client=chroma_client,
        collection_prefix=effective_prefix,
        definitions=definitions,
        embedding_function=embedding_function,
        logger=logger,
    )
    return ApplicationContext(
        settings=settings or Settings(),
        services=services,
        engine=engine,
        logger=logger,
    )


def collection_name_for(prefix: str, definition: EntityDefinition) -> str:
    return f"{prefix}_{definition.entity_name}"


def _create_services(
    engine: AsyncEngine,
    chroma_client: chromadb.ClientAPI,
    collection_prefix: str,
    definitions: tuple[EntityDefinition, ...],
    embedding_function: Any | None,
    logger: structlog.stdlib.BoundLogger,
) -> dict[str, ResourceService]:
    services: dict[str, ResourceService] = {}
    for definition in definitions:
        entity_store = EntityStore(engine=engine, definition=definition, logger=logger)
        search_index = SearchIndex(
            client=chroma_client,
            collection_name=collection_name_for(collection_prefix, definition),
            definition=definition,
            embedding_function=embedding_function,
            logger=logger,
        )
        services[definition.entity_name] = ResourceService(
            definition=definition,
            entity_store=entity_store,
            search_index=search_index,
            logger=logger,
        )
    return services
