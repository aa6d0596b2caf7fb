"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codereview.api.middleware import RequestLoggingMiddleware
from codereview.api.routers import ROUTERS
from codereview.container import Container
from codereview.core import get_config, register_exception_handlers, setup_logger
from codereview.db import close_db, initialize_db


def create_app(container: Optional[Container] = None, *, init_db: Optional[bool] = None) -> FastAPI:
    """Build the CodeReview API.

    Args:
        container: Dependency container; a default one backed by MongoDB is created when omitted.
        init_db: Initialise Beanie on startup and close the client on shutdown. Defaults to
            True only when no container is supplied.

    Returns:
        FastAPI: The configured application.
    """
    config = get_config()
    if init_db is None:
        init_db = container is None
    container = container or Container()

    logger = setup_logger(
        stream_level=logging.getLevelName(config.APP.LOG_LEVEL.upper()),
        structlog_bind={"service": "codereview"},
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_db:
            await initialize_db()
        logger.info("service_started", url=config.APP.URL, api_prefix=config.APP.API_PREFIX)
        try:
            yield
        finally:
            if init_db:
                await close_db()
            logger.info("service_stopped")

    app = FastAPI(
        title="CodeReview Platform",
        summary="Code review learning platform backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    # CORS - allow frontend access with the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.APP.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware, add_request_id_header=True)

    register_exception_handlers(app, debug=config.APP.DEBUG)
    for router in ROUTERS:
        app.include_router(router, prefix=config.APP.API_PREFIX)
    return app
