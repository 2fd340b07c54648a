"""
fetchr API application.

Serves the persistence and execution endpoints that RemoteBackend talks to:
collections and saved requests, environments, request execution, history,
and Postman import / JSON export.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import configure_logging
from .database import init_db
from .exceptions import register_exception_handlers
from .routers import collections, environments, execute, history, import_export, requests

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

ROUTERS = (
    collections.router,
    requests.router,
    environments.router,
    execute.router,
    history.router,
    import_export.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    logger.info("fetchr API %s ready", API_VERSION)
    yield
    logger.info("fetchr API shutting down")


def create_app() -> FastAPI:
    """Build the application with middleware, error handlers and routers."""
    application = FastAPI(
        title="fetchr",
        description="A local API testing client with collections, environments and history",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # The desktop front end runs on its own origin
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    @application.get("/")
    async def root():
        return {"name": "fetchr", "version": API_VERSION, "docs": application.docs_url}

    @application.get("/health")
    async def health_check():
        return {"status": "healthy"}

    for router in ROUTERS:
        application.include_router(router)
    return application


app = create_app()
