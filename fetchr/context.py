"""
Application session context.

``AppSession`` bundles the backend, the tab session and the store for one
running client. It is constructed explicitly and passed to whoever needs
it; there is no module-level instance.

    async with AppSession(LocalBackend()) as app:
        await app.store.send_request()
"""

import logging
from typing import Optional

from .backend import Backend
from .config import Settings, get_settings
from .session import TabSessionManager
from .store import CollectionStore

logger = logging.getLogger(__name__)


class AppSession:

    def __init__(self, backend: Backend, settings: Optional[Settings] = None):
        self.settings = settings if settings is not None else get_settings()
        self.backend = backend
        self.tabs = TabSessionManager()
        self.store = CollectionStore(backend, tabs=self.tabs, settings=self.settings)
        self.started = False

    async def start(self) -> None:
        """Load the mirrors from the backend."""
        await self.store.initialize()
        self.started = True
        logger.info(
            "Session started with %d collections and %d environments",
            len(self.store.collections), len(self.store.environments),
        )

    async def stop(self) -> None:
        """Cancel in-flight sends and release the backend."""
        await self.store.cancel_all()
        await self.backend.aclose()
        self.started = False
        logger.info("Session stopped")

    async def __aenter__(self) -> "AppSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
