"""FastAPI application factory.

Run with::

    uvicorn search_proxy.api.app:app
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from search_proxy.api.dependencies import lifespan
from search_proxy.api.routes import router
from search_proxy.config import VERSION, get_settings
from search_proxy.context import ServiceContext
from search_proxy.errors import SearchProxyError
from search_proxy.handlers import StatusHandler
from search_proxy.utils import utc_timestamp

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: str, details: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": details, **extra, "timestamp": utc_timestamp()},
    )


async def handle_search_proxy_error(request: Request, exc: SearchProxyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.details)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_envelope(), "timestamp": utc_timestamp()},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid request", details)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info("Unhandled route: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=StatusHandler.not_found(request.method, request.url.path),
        )
    return _envelope(exc.status_code, "Request failed", str(exc.detail))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))


def create_app(context: ServiceContext | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        context: Pre-built services. When None, the lifespan builds them
            from settings at startup and closes them at shutdown.

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Search Proxy API",
        description="Search proxy for LLM completion APIs with key failover and response caching",
        version=VERSION,
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    settings = context.settings if context is not None else get_settings()
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "HEAD", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
    )

    app.add_exception_handler(SearchProxyError, handle_search_proxy_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "search_proxy.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
