from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tracker.core.config import get_settings
from tracker.core.exceptions import AppException
from tracker.core.logging import get_logger
from tracker.services.bootstrap import AppConfig, init_app_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Startup builds the AppConfig (logging, tokens, event logs, geo resolver);
    shutdown closes every resource it registered.
    """
    # Startup
    settings = get_settings()
    app_config = init_app_config(settings)
    app.state.app_config = app_config

    logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        authority=app_config.authority,
    )

    yield

    # Shutdown
    logger.info("Application shutting down")
    app_config.close()
    app.state.app_config = None


def get_app_config(request: Request) -> AppConfig:
    """Dependency returning the AppConfig built at startup."""
    return request.app.state.app_config


def create_application() -> FastAPI:
    """
    Application factory.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        logger.warning(
            "Application exception",
            error_code=exc.error_code,
            message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        """Health check endpoint for load balancers and monitoring."""
        app_config = get_app_config(request)
        return {
            "status": "healthy",
            "version": settings.app_version,
            "server_name": app_config.server_name,
            "authority": app_config.authority,
            "geo_enabled": app_config.geo_resolver is not None,
        }

    return app


# Create application instance
app = create_application()
