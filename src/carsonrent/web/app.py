"""FastAPI application exposing every resource service over REST."""

from contextlib import asynccontextmanager

import structlog
from chromadb.errors import ChromaError
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from carsonrent import __version__
from carsonrent.exceptions import ClientRequestError
from carsonrent.services.factory import ApplicationContext
from carsonrent.web.header_util import AlertHeaders
from carsonrent.web.resource import create_resource_router


def create_app(
    context: ApplicationContext,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> FastAPI:
    """Build the FastAPI app for an application context.

    The lifespan initializes every service on startup and disposes the
    database engine on shutdown.
    """
    logger = logger or structlog.get_logger(__name__)
    settings = context.settings
    alerts = AlertHeaders(settings.application_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("application_startup", application=settings.application_name)
        await context.initialize()
        app.state.context = context
        yield
        await context.close()
        logger.info("application_shutdown", application=settings.application_name)

    app = FastAPI(title=settings.application_name, version=__version__, lifespan=lifespan)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Location", "Link", "X-Total-Count"],
        )

    @app.exception_handler(ClientRequestError)
    async def handle_client_request_error(request: Request, exc: ClientRequestError) -> JSONResponse:
        logger.warning(
            "client_request_rejected",
            path=request.url.path,
            entity=exc.entity_name,
            error_key=exc.error_key,
        )
        return JSONResponse(
            status_code=400,
            content={
                "message": f"error.{exc.error_key}",
                "title": exc.message,
                "entity_name": exc.entity_name,
                "error_key": exc.error_key,
            },
            headers=alerts.failure(exc.entity_name, exc.error_key),
        )

    @app.exception_handler(SQLAlchemyError)
    @app.exception_handler(ChromaError)
    async def handle_store_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("store_operation_failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"message": "error.internalServerError"})

    @app.get("/management/health")
    async def health_check():
        health = await context.index_health()
        return {
            "status": "UP",
            "components": {
                name: {"stored": item.stored, "indexed": item.indexed, "in_sync": item.in_sync}
                for name, item in health.items()
            },
        }

    for service in context.services.values():
        app.include_router(create_resource_router(service, alerts, logger=logger))

    return app
