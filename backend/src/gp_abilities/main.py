"""GP Abilities - FastAPI Application

Serves the GeneratePress / GenerateBlocks ability catalog under the
Abilities API prefix. Providers are loaded into the registry during the
lifespan startup; a duplicate ability name aborts startup.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from .abilities.registry import REGISTRY
from .api import abilities_router, health_router
from .core.config import get_settings_instance
from .core.exceptions import GpAbilitiesException
from .core.logging import get_logger, setup_logging
from .core.response import AbilityResponse

logger = get_logger(__name__)


def _incident_id() -> str:
    return f"ERR-{uuid.uuid4().hex[:8].upper()}"


def _route_of(request: Request) -> str:
    return f"{request.method} {request.url.path}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings = get_settings_instance()

    logger.info(
        f"Starting {settings.app_name} {settings.version}",
        extra={"environment": settings.environment, "store_backend": settings.store_backend},
    )
    REGISTRY.ensure_loaded()
    logger.info("Ability registry loaded", extra={"abilities": len(REGISTRY.list())})

    yield

    logger.info(f"{settings.app_name} stopped")


def create_app() -> FastAPI:
    """Build the FastAPI app: routers under ``api_prefix`` plus error envelopes."""
    settings = get_settings_instance()
    app = FastAPI(
        title=settings.app_name,
        description="GeneratePress / GenerateBlocks abilities API",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app: FastAPI) -> None:
    """Every failure leaves the API as ``{"error": {"code", "message", "details"}}``.

    Server-side failures get an incident id in ``details`` that also appears
    in the log record, so a client report can be matched to the traceback.
    """
    settings = get_settings_instance()

    @app.exception_handler(GpAbilitiesException)
    async def on_ability_error(request: Request, exc: GpAbilitiesException):
        details = dict(exc.details)
        if exc.status_code >= 500:
            details["incident_id"] = _incident_id()
            logger.error(
                f"{exc.error_code} on {_route_of(request)}: {exc.message}",
                extra={"incident_id": details["incident_id"], "details": exc.details},
            )
        else:
            logger.info(f"{exc.error_code} on {_route_of(request)}: {exc.message}")
        return AbilityResponse.error(exc.message, code=exc.error_code, details=details, status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def on_http_error(request: Request, exc: HTTPException):
        logger.info(f"HTTP {exc.status_code} on {_route_of(request)}: {exc.detail}")
        return AbilityResponse.error(
            str(exc.detail),
            code=f"HTTP_{exc.status_code}",
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None) or None,
        )

    @app.exception_handler(Exception)
    async def on_crash(request: Request, exc: Exception):
        incident = _incident_id()
        logger.exception(f"Unhandled {type(exc).__name__} on {_route_of(request)}", extra={"incident_id": incident})
        details: dict[str, str] = {"incident_id": incident}
        if settings.debug:
            details["exception"] = f"{type(exc).__name__}: {exc}"
        return AbilityResponse.error(
            "Internal server error", code="INTERNAL_SERVER_ERROR", details=details, status_code=500
        )


def register_routes(app: FastAPI) -> None:
    settings = get_settings_instance()
    app.include_router(abilities_router, prefix=settings.api_prefix)
    app.include_router(health_router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.version,
            "abilities": f"{settings.api_prefix}/abilities",
        }


setup_logging()
app = create_app()


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings_instance()
    uvicorn.run("gp_abilities.main:app", host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
