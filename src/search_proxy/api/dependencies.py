"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - ServiceContext built during lifespan (or supplied by the caller)
    - Handlers stored in app.state
    - Dependency functions retrieve from request.app.state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from search_proxy.config import get_settings
from search_proxy.context import ServiceContext
from search_proxy.handlers import SearchHandler, StatusHandler
from search_proxy.logging_config import configure_logging

logger = logging.getLogger(__name__)


def get_search_handler(request: Request) -> SearchHandler:
    """Dependency injection for SearchHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "search_handler", None)
    if handler is None:
        raise RuntimeError("SearchHandler not initialized. Check lifespan setup.")
    return handler


def get_status_handler(request: Request) -> StatusHandler:
    """Dependency injection for StatusHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "status_handler", None)
    if handler is None:
        raise RuntimeError("StatusHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Builds the ServiceContext unless one was attached to ``app.state.context``
    before startup (tests do this), then stores the handlers in app.state.
    A context built here is also closed here.

    Args:
        app: The FastAPI application instance
    """
    context: ServiceContext | None = getattr(app.state, "context", None)
    owned = context is None
    if context is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        context = ServiceContext.create(settings)
        app.state.context = context

    app.state.search_handler = SearchHandler(context)
    app.state.status_handler = StatusHandler(context)

    credentials = context.dispatcher.credentials
    logger.info("Search proxy started, %d API key(s) configured", len(credentials))
    if credentials:
        logger.info("API key previews: %s", ", ".join(c.preview for c in credentials))
    else:
        logger.warning("No API keys configured; uncached searches will fail with 500")
    logger.info("Failover policy: %s", context.dispatcher.policy.value)

    yield

    del app.state.search_handler
    del app.state.status_handler
    if owned:
        await context.aclose()
        del app.state.context
    logger.info("Search proxy shut down")


# Type aliases for cleaner dependency injection
SearchHandlerDep = Annotated[SearchHandler, Depends(get_search_handler)]
StatusHandlerDep = Annotated[StatusHandler, Depends(get_status_handler)]
