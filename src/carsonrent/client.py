"""Async HTTP client bindings for the REST resources.

One ResourceClient per entity maps logical operations to single HTTP calls
on the resource routes. There is no caching or retrying: each call is one
request, and any non-2xx response raises ``httpx.HTTPStatusError``.
"""

from typing import Any, Generic

import httpx
import structlog

from carsonrent.models.base import T_Entity
from carsonrent.models.definitions import EntityDefinition
from carsonrent.models.page import DEFAULT_PAGE_SIZE, Page, SortOrder


class ResourceClient(Generic[T_Entity]):
    """Client for the routes of a single resource."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        path: str,
        model: type[T_Entity],
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._http_client = http_client
        self._resource_url = f"/api/{path}"
        self._search_url = f"/api/_search/{path}"
        self._model = model
        self._logger = logger or structlog.get_logger(__name__)

    async def query(
        self,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
        sort: list[str | SortOrder] | None = None,
    ) -> Page[T_Entity]:
        """Fetch one page of entities."""
        response = await self._http_client.get(self._resource_url, params=_page_params(page, size, sort))
        response.raise_for_status()
        return Page[self._model].model_validate_json(response.content)  # type: ignore[name-defined]

    async def get(self, entity_id: int) -> T_Entity | None:
        """Fetch one entity; returns None when the response has no body."""
        response = await self._http_client.get(f"{self._resource_url}/{entity_id}")
        response.raise_for_status()
        if not response.content:
            return None
        return self._model.model_validate_json(response.content)

    async def save(self, entity: T_Entity) -> T_Entity:
        """Create an entity (POST)."""
        response = await self._http_client.post(self._resource_url, json=entity.model_dump(mode="json"))
        response.raise_for_status()
        created = self._model.model_validate_json(response.content)
        self._logger.debug("entity_created", url=self._resource_url, entity_id=created.id)
        return created

    async def update(self, entity: T_Entity) -> T_Entity:
        """Update an entity (PUT); the server creates it when the id is missing."""
        response = await self._http_client.put(self._resource_url, json=entity.model_dump(mode="json"))
        response.raise_for_status()
        return self._model.model_validate_json(response.content)

    async def remove(self, entity_id: int) -> None:
        """Delete an entity (DELETE)."""
        response = await self._http_client.delete(f"{self._resource_url}/{entity_id}")
        response.raise_for_status()
        self._logger.debug("entity_removed", url=self._resource_url, entity_id=entity_id)

    async def search(
        self,
        query: str,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
        sort: list[str | SortOrder] | None = None,
    ) -> Page[T_Entity]:
        """Run a free-text search."""
        params = {"query": query, **_page_params(page, size, sort)}
        response = await self._http_client.get(self._search_url, params=params)
        response.raise_for_status()
        return Page[self._model].model_validate_json(response.content)  # type: ignore[name-defined]


def create_resource_client(http_client: httpx.AsyncClient, definition: EntityDefinition) -> ResourceClient:
    return ResourceClient(http_client=http_client, path=definition.path, model=definition.model)


def _page_params(page: int, size: int, sort: list[str | SortOrder] | None) -> dict[str, Any]:
    params: dict[str, Any] = {"page": page, "size": size}
    if sort:
        params["sort"] = [str(order) for order in sort]
    return params
