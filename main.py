import asyncio
import logging
import socket
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.core.config import settings
from app.api.core.exceptions import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.api.core.logger import setup_logging
from app.api.core.middleware import RequestLoggingMiddleware
from app.api.db.database import build_session_factory, create_tables, engine
from app.api.modules.v1 import router as api_router

setup_logging()
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the schema on startup and release the connection pool on shutdown.

    Args:
        app (FastAPI): FastAPI application instance supplied by the framework.

    Returns:
        AsyncIterator[None]: Asynchronous context manager controlling startup/shutdown.
    """
    db_engine: AsyncEngine = app.state.engine

    if settings.DB_AUTO_CREATE:
        await create_tables(db_engine)
        logger.info("Database schema ready")

    try:
        yield
    finally:
        await db_engine.dispose()
        logger.info("Database connection pool disposed")


def create_app(db_engine: Optional[AsyncEngine] = None) -> FastAPI:
    """Build the application around a shared connection pool.

    Every request borrows sessions from ``app.state.session_factory``; the pool
    itself lives as long as the application.
    """
    db_engine = db_engine or engine

    application = FastAPI(
        title=f"{settings.APP_NAME} API",
        description=f"{settings.APP_NAME} API for newsletter subscriptions",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    application.state.engine = db_engine
    application.state.session_factory = build_session_factory(db_engine)

    application.add_middleware(RequestLoggingMiddleware)

    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(Exception, general_exception_handler)

    application.include_router(api_router)
    return application


def bind_listener(host: str = settings.APP_HOST, port: int = settings.APP_PORT) -> socket.socket:
    """Bind a TCP listener; port 0 asks the OS for a free one."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    listener.bind((host, port))
    listener.listen()
    return listener


def run(listener: socket.socket, db_engine: AsyncEngine) -> uvicorn.Server:
    """Wire the application to an already bound listener.

    The returned server does not start until ``await server.serve(sockets=[listener])``.
    """
    config = uvicorn.Config(
        create_app(db_engine),
        log_config=None,
        lifespan="on",
    )
    server = uvicorn.Server(config)
    host, port = listener.getsockname()[:2]
    logger.info("Serving on http://%s:%s", host, port)
    return server


app = create_app()


if __name__ == "__main__":
    listener = bind_listener(settings.APP_HOST, settings.APP_PORT)
    server = run(listener, engine)
    asyncio.run(server.serve(sockets=[listener]))
