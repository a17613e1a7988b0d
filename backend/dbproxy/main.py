"""
Mongo CRUD Proxy - FastAPI Application

Generic CRUD endpoints over any database and collection, with connections and
schema-bound accessors opened lazily and shared across requests.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dbproxy.config import Settings, get_settings
from dbproxy.core.errors import ProxyError, describe_errors
from dbproxy.core.logging_setup import configure_logging
from dbproxy.database.registry import DataAccessLayer, check_connection_settings
from dbproxy.routers import documents, health

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def create_app(
    settings: Optional[Settings] = None,
    data_access: Optional[DataAccessLayer] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the environment)
        data_access: Prebuilt data-access layer (defaults to one built from settings)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        - Check the connection template
        - Open the default collection and count its documents

        Shutdown:
        - Close all database connections
        """
        app_settings = settings or get_settings()
        configure_logging(app_settings.log_level)
        logger.info(f"Starting server with environment variables: {app_settings.describe()}")

        layer = data_access
        if layer is None:
            check_connection_settings(app_settings)
            layer = DataAccessLayer.from_settings(app_settings)
        app.state.data_access = layer

        try:
            await layer.verify(app_settings.default_database, app_settings.default_collection)
        except ProxyError as e:
            logger.error(f"Error starting server: {e.message}")
            await layer.close()
            raise
        logger.info("Successfully connected to MongoDB")

        yield

        logger.info("Shutting down, closing database connections")
        await layer.close()

    app = FastAPI(
        title="Mongo CRUD Proxy",
        description="""
## Generic MongoDB CRUD over HTTP

Every endpoint names the database and collection it works on. Connections are
opened on first use and shared by all later requests for the same database.

### Endpoints
- `GET /find/{database}/{collection}`: list every document
- `POST /insert/{database}/{collection}`: insert `document` or `documents`
- `DELETE /delete/{database}/{collection}/{id}`: delete by id
- `PUT /update/{database}/{collection}/{id}`: set the fields in `update`
        """,
        version=API_VERSION,
        lifespan=lifespan,
    )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": describe_errors(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error in {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc) or type(exc).__name__},
        )

    app.include_router(health.router)
    app.include_router(documents.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Mongo CRUD Proxy",
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()
