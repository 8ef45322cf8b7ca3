"""Search index service mirroring entities into a ChromaDB collection.

ChromaDB's Python client is synchronous, so we use asyncio.to_thread()
to wrap blocking operations and maintain async consistency with other services.
"""

import asyncio
from typing import Any

import chromadb
from chromadb.api.types import Documents, EmbeddingFunction, Embeddings
import structlog

from carsonrent.exceptions import InvalidSortError
from carsonrent.models.base import EntityModel
from carsonrent.models.definitions import EntityDefinition
from carsonrent.models.page import Page, PageRequest

MATCH_ALL = "*"


class ConstantEmbeddingFunction(EmbeddingFunction[Documents]):
    """Embeds every document as the same one-dimensional vector.

    Search filters on document text and never queries by vector, so the
    collection only needs an embedding to exist for each record.
    """

    def __init__(self) -> None:
        self.dim = 1

    def __call__(self, input: Documents) -> Embeddings:
        return [[0.0] * self.dim for _ in input]


class SearchIndex:
    """Stores denormalized copies of entities and answers free-text queries.

    Each entity becomes one ChromaDB record keyed by its id. The record's
    document is the lower-cased text of every populated field; its metadata
    carries the full entity as JSON so results can be rebuilt without a
    round trip to the relational store.

    Accepts a ChromaDB Client via dependency injection to support persistent,
    HTTP and ephemeral clients.
    """

    def __init__(
        self,
        client: chromadb.ClientAPI,
        collection_name: str,
        definition: EntityDefinition,
        embedding_function: Any | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._collection_name = collection_name
        self._definition = definition
        self._embedding_function = embedding_function or ConstantEmbeddingFunction()
        self._logger = logger or structlog.get_logger(__name__)
        self._collection: chromadb.Collection | None = None

    @property
    def collection_name(self) -> str:
        return self._collection_name

    async def initialize(self) -> None:
        """Initialize the collection, creating it if it doesn't exist."""
        self._collection = await asyncio.to_thread(self._get_or_create_collection)
        self._logger.info(
            "search_index_initialized",
            entity=self._definition.entity_name,
            collection_name=self._collection_name,
        )

    async def index(self, entity: EntityModel) -> None:
        """Add or replace the search document for an entity.

        Raises:
            ValueError: If the entity has no id yet.
            RuntimeError: If collection not initialized.
        """
        collection = self._require_collection()
        if entity.id is None:
            raise ValueError(f"Cannot index {self._definition.entity_name} without an id")

        await asyncio.to_thread(
            collection.upsert,
            ids=[str(entity.id)],
            documents=[_document_text(entity)],
            metadatas=[{"entity_id": entity.id, "payload": entity.model_dump_json()}],
        )
        self._logger.debug(
            "entity_indexed",
            collection=self._collection_name,
            entity_id=entity.id,
        )

    async def delete(self, entity_id: int) -> None:
        """Delete the search document for an entity id, if there is one.

        Raises:
            RuntimeError: If collection not initialized.
        """
        collection = self._require_collection()
        await asyncio.to_thread(collection.delete, ids=[str(entity_id)])
        self._logger.debug(
            "entity_unindexed",
            collection=self._collection_name,
            entity_id=entity_id,
        )

    async def search(self, query: str, page_request: PageRequest) -> Page:
        """Return the page of entities whose document contains every query token.

        Tokens are whitespace-separated words matched whole and
        case-insensitively, so "red" does not match "alfred". The query "*"
        matches every document.

        Raises:
            ValueError: If the query is blank.
            InvalidSortError: If a sort order names an unknown field.
            RuntimeError: If collection not initialized.
        """
        collection = self._require_collection()
        where_document = self._build_where_document(query)

        result = await asyncio.to_thread(
            collection.get,
            where_document=where_document,
            include=["metadatas"],
        )
        entities = [
            self._definition.model.model_validate_json(metadata["payload"])
            for metadata in result["metadatas"] or []
        ]
        entities = self._sort(entities, page_request)
        start = page_request.offset
        content = entities[start : start + page_request.size]

        self._logger.debug(
            "search_executed",
            collection=self._collection_name,
            query=query,
            total=len(entities),
        )
        return Page(
            content=content,
            page=page_request.page,
            size=page_request.size,
            total_elements=len(entities),
        )

    async def clear(self) -> None:
        """Delete and recreate the collection, removing every search document.

        Raises:
            RuntimeError: If collection not initialized.
        """
        self._require_collection()
        await asyncio.to_thread(self._client.delete_collection, self._collection_name)
        self._collection = await asyncio.to_thread(self._get_or_create_collection)
        self._logger.info(
            "search_index_cleared",
            collection=self._collection_name,
        )

    async def count(self) -> int:
        """Return the number of search documents in the collection.

        Raises:
            RuntimeError: If collection not initialized.
        """
        collection = self._require_collection()
        return await asyncio.to_thread(collection.count)

    def _get_or_create_collection(self) -> chromadb.Collection:
        return self._client.get_or_create_collection(
            name=self._collection_name,
            embedding_function=self._embedding_function,
        )

    def _require_collection(self) -> chromadb.Collection:
        if self._collection is None:
            raise RuntimeError("SearchIndex not initialized. Call initialize() first.")
        return self._collection

    @staticmethod
    def _build_where_document(query: str) -> dict[str, Any] | None:
        tokens = query.lower().split()
        if not tokens:
            raise ValueError("Search query cannot be empty")
        if tokens == [MATCH_ALL]:
            return None
        clauses = [{"$contains": f" {token} "} for token in tokens]
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def _sort(self, entities: list[EntityModel], page_request: PageRequest) -> list[EntityModel]:
        fields = self._definition.model.model_fields
        for order in page_request.sort:
            if order.field not in fields:
                raise InvalidSortError(self._definition.entity_name, order.field)

        # Stable sorts applied from the least to the most significant key
        ordered = sorted(entities, key=lambda entity: entity.id or 0)
        for order in reversed(page_request.sort):
            ordered = sorted(
                ordered,
                key=lambda entity, name=order.field: _sort_key(getattr(entity, name)),
                reverse=order.descending,
            )
        return ordered


def _document_text(entity: EntityModel) -> str:
    # Every token, first and last included, is surrounded by single spaces
    return f" {' '.join(entity.searchable_text().split())} "


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, value)
