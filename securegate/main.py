"""
SecureGate ASGI application.

Run locally with ``python -m securegate.main`` or
``uvicorn securegate.main:app --reload``.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from securegate import __version__
from securegate.api.middleware.logging import LoggingMiddleware
from securegate.api.middleware.request_id import RequestIdMiddleware
from securegate.api.routes import router as api_router
from securegate.api.routes.health import router as health_router
from securegate.core.config import settings
from securegate.core.exceptions import SecureGateError, UnauthorizedError
from securegate.core.logging import configure_logging
from securegate.models.database import close_db, init_db

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_format)
    await init_db()
    logger.info("app.startup", version=__version__, environment=settings.environment)
    try:
        yield
    finally:
        await close_db()
        logger.info("app.shutdown")


async def handle_securegate_error(request: Request, exc: SecureGateError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path)
    message = str(exc) if settings.debug else "An error occurred"
    return JSONResponse({"error": "internal_server_error", "message": message}, status_code=500)


def create_app() -> FastAPI:
    """Build the application: middleware, routers and error handlers."""
    docs = settings.is_development
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
    )

    # Outermost first: CORS, request id, access log
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SecureGateError, handle_securegate_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("securegate.main:app", host=settings.host, port=settings.port, reload=settings.reload)
