"""Main FastAPI application"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portal.core.config import logger, settings
from portal.core.errors import DomainError, InfrastructureError, PortalError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Config Portal...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Version: {settings.version}")

    from portal.core.container import PortalContainer, set_container
    from portal.models import close_db, get_session_maker, init_database, init_db

    try:
        init_database(settings.db_url)
        await init_db()
        logger.info("✓ Database initialized")

        container = PortalContainer(settings, get_session_maker())
        set_container(container)
        await container.start()
        logger.info(f"✓ Environments: {container.portal_settings.all_envs}")

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        raise

    yield

    logger.info("Shutting down Config Portal...")
    await container.stop()
    set_container(None)
    await close_db()


app = FastAPI(
    title="Config Portal",
    description="Application lifecycle management for the configuration center",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)


from portal.middleware import StructuredLoggingMiddleware

app.add_middleware(StructuredLoggingMiddleware)


def _error_response(status_code: int, error: PortalError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.to_dict())


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return _error_response(400, exc)


@app.exception_handler(InfrastructureError)
async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error_response(502, exc)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": settings.version,
            "environment": settings.environment,
        }
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return JSONResponse(
        content={
            "service": "Config Portal",
            "version": settings.version,
            "docs": "/docs" if settings.is_development else None,
        }
    )


# Include routers
from portal.api.v1 import apps

app.include_router(apps.router, prefix="/apps", tags=["Apps"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portal.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
