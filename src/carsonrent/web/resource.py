"""REST routes for one resource.

``create_resource_router`` builds the same six routes for any entity
definition, bound to the ResourceService passed in:

    POST   /api/{path}                 create
    PUT    /api/{path}                 update (creates when the id is missing)
    GET    /api/{path}                 list, paginated
    GET    /api/{path}/{id}            get one, 404 when absent
    DELETE /api/{path}/{id}            delete, idempotent
    GET    /api/_search/{path}?query=  free-text search, paginated
"""

import structlog
from fastapi import APIRouter, Query, Response, status

from carsonrent.exceptions import IdAlreadyExistsError, InvalidSortError
from carsonrent.models.page import MAX_PAGE_SIZE, Page, PageRequest, SortOrder
from carsonrent.services.resource import ResourceService
from carsonrent.web.header_util import AlertHeaders
from carsonrent.web.pagination import pagination_headers

API_PREFIX = "/api"


def create_resource_router(
    service: ResourceService,
    alerts: AlertHeaders,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> APIRouter:
    """Build the REST routes for the service's entity."""
    logger = logger or structlog.get_logger(__name__)
    definition = service.definition
    entity_name = definition.entity_name
    model = definition.model
    base_url = f"{API_PREFIX}/{definition.path}"
    search_url = f"{API_PREFIX}/_search/{definition.path}"

    router = APIRouter(tags=[entity_name])

    def page_request(page: int, size: int, sort: list[str]) -> PageRequest:
        orders = []
        for raw in sort:
            try:
                orders.append(SortOrder.parse(raw))
            except ValueError:
                raise InvalidSortError(entity_name, raw) from None
        return PageRequest(page=page, size=size, sort=orders)

    async def create(entity, response: Response):
        if entity.id is not None:
            raise IdAlreadyExistsError(entity_name, entity.id)
        result = await service.save(entity)
        response.status_code = status.HTTP_201_CREATED
        response.headers["Location"] = f"{base_url}/{result.id}"
        response.headers.update(alerts.entity_creation(entity_name, str(result.id)))
        return result

    @router.post(base_url, response_model=model, status_code=status.HTTP_201_CREATED)
    async def create_entity(entity: model, response: Response):  # type: ignore[valid-type]
        logger.debug("rest_request_to_save", entity=entity_name, body=entity.model_dump(mode="json"))
        return await create(entity, response)

    @router.put(base_url, response_model=model)
    async def update_entity(entity: model, response: Response):  # type: ignore[valid-type]
        logger.debug("rest_request_to_update", entity=entity_name, body=entity.model_dump(mode="json"))
        if entity.id is None:
            return await create(entity, response)
        result = await service.save(entity)
        response.headers.update(alerts.entity_update(entity_name, str(entity.id)))
        return result

    @router.get(base_url, response_model=Page[model])  # type: ignore[valid-type]
    async def list_entities(
        response: Response,
        page: int = Query(0, ge=0),
        size: int = Query(20, gt=0, le=MAX_PAGE_SIZE),
        sort: list[str] = Query(default=[]),
    ):
        logger.debug("rest_request_to_get_page", entity=entity_name, page=page, size=size)
        result = await service.find_all(page_request(page, size, sort))
        response.headers.update(pagination_headers(result, base_url))
        return result

    @router.get(f"{base_url}/{{entity_id}}", response_model=model)
    async def get_entity(entity_id: int):
        logger.debug("rest_request_to_get", entity=entity_name, entity_id=entity_id)
        result = await service.find_one(entity_id)
        if result is None:
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return result

    @router.delete(f"{base_url}/{{entity_id}}")
    async def delete_entity(entity_id: int) -> Response:
        logger.debug("rest_request_to_delete", entity=entity_name, entity_id=entity_id)
        await service.delete(entity_id)
        return Response(
            status_code=status.HTTP_200_OK,
            headers=alerts.entity_deletion(entity_name, str(entity_id)),
        )

    @router.get(search_url, response_model=Page[model])  # type: ignore[valid-type]
    async def search_entities(
        response: Response,
        query: str = Query(..., pattern=r"\S"),
        page: int = Query(0, ge=0),
        size: int = Query(20, gt=0, le=MAX_PAGE_SIZE),
        sort: list[str] = Query(default=[]),
    ):
        logger.debug("rest_request_to_search", entity=entity_name, query=query)
        result = await service.search(query, page_request(page, size, sort))
        response.headers.update(pagination_headers(result, search_url, query=query))
        return result

    return router
