"""
Client-side collection store.

``CollectionStore`` keeps in-memory mirrors of the persisted collections,
requests, environments and history, and drives the tab session through them.

Every mutation is written to the backend first and then followed by a full
reload of the affected mirror. When the write fails, the error is logged,
the reload is skipped and the mirror keeps its last good state. Sending,
importing and exporting log their failures and re-raise them.
"""

import asyncio
import logging
import uuid
from typing import Optional

from .backend import Backend
from .config import Settings, get_settings
from .exceptions import APIException, RequestCancelledError
from .schemas.collection import CollectionNode, TreeNode
from .schemas.environment import EnvironmentRecord, EnvironmentVariable, serialize_variables
from .schemas.execute import HttpResponse
from .schemas.history import HistoryEntry
from .schemas.request import RequestRecord
from .services.collection_tree import build_tree, collect_subtree_ids
from .services.curl_generator import generate_curl
from .services.variable_substitution import find_undefined, resolve_draft
from .session import TabSessionManager

logger = logging.getLogger(__name__)


class CollectionStore:
    """Mirrors of persisted state plus the operations that keep them in sync."""

    def __init__(
        self,
        backend: Backend,
        tabs: Optional[TabSessionManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.backend = backend
        self.tabs = tabs if tabs is not None else TabSessionManager()
        self.settings = settings if settings is not None else get_settings()

        self.collections: list[CollectionNode] = []
        self.requests: dict[str, list[RequestRecord]] = {}
        self.environments: list[EnvironmentRecord] = []
        self.active_environment: Optional[EnvironmentRecord] = None
        self.history: list[HistoryEntry] = []

        # tab id -> outbound send task
        self._in_flight: dict[str, asyncio.Task] = {}

    async def initialize(self) -> None:
        await self.load_collections()
        await self.load_environments()
        await self.load_history()

    # Derived views

    @property
    def collection_tree(self) -> list[TreeNode]:
        return build_tree(self.collections, self.requests)

    def generate_curl(self) -> str:
        return generate_curl(self.tabs.current_draft)

    def _owner_of(self, request_id: str) -> Optional[str]:
        for collection_id, records in self.requests.items():
            if any(record.id == request_id for record in records):
                return collection_id
        return None

    def _release_request(self, request_id: str) -> None:
        """Detach tabs from a request that was deleted."""
        if self.tabs.selected_request_id == request_id:
            self.tabs.reset_active()
        self.tabs.unbind_request(request_id)

    # Collections

    async def load_collections(self) -> bool:
        """Reload every collection and the requests each one owns."""
        try:
            collections = await self.backend.list_collections()
            requests = {}
            for collection in collections:
                requests[collection.id] = await self.backend.list_requests(collection.id)
        except APIException as e:
            logger.error("Failed to load collections: %s", e.detail)
            return False

        self.collections = collections
        self.requests = requests
        return True

    async def load_requests(self, collection_id: str) -> bool:
        try:
            self.requests[collection_id] = await self.backend.list_requests(collection_id)
        except APIException as e:
            logger.error("Failed to load requests for collection %s: %s", collection_id, e.detail)
            return False
        return True

    async def create_collection(
        self, name: str, parent_id: Optional[str] = None, is_folder: bool = False
    ) -> bool:
        node = CollectionNode(id=str(uuid.uuid4()), name=name, parent_id=parent_id, is_folder=is_folder)
        try:
            await self.backend.create_collection(node)
        except APIException as e:
            logger.error("Failed to create collection %r: %s", name, e.detail)
            return False

        logger.info("Created %s %r", "folder" if is_folder else "collection", name)
        await self.load_collections()
        return True

    async def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection together with everything nested below it."""
        doomed = [
            record.id
            for node_id in collect_subtree_ids(self.collections, collection_id)
            for record in self.requests.get(node_id, [])
        ]
        try:
            await self.backend.delete_collection(collection_id)
        except APIException as e:
            logger.error("Failed to delete collection %s: %s", collection_id, e.detail)
            return False

        for request_id in doomed:
            self._release_request(request_id)
        await self.load_collections()
        return True

    # Requests

    async def save_current_request(self, name: str, collection_id: str) -> bool:
        """
        Persist the active tab's draft as a request named ``name``.

        An unbound tab gets a fresh id. On success the tab is bound to the
        saved request, renamed, and its dirty flag cleared.
        """
        tab = self.tabs.active_tab
        tab_id = tab.id
        request_id = tab.request_id or str(uuid.uuid4())
        previous_owner = self._owner_of(request_id)
        record = tab.draft.to_record(request_id, collection_id, name)

        try:
            await self.backend.save_request(record)
        except APIException as e:
            logger.error("Failed to save request %r: %s", name, e.detail)
            return False

        self.tabs.mark_saved(request_id, name, tab_id=tab_id)
        await self.load_requests(collection_id)
        if previous_owner and previous_owner != collection_id:
            await self.load_requests(previous_owner)
        return True

    async def load_request(self, request_id: str, open_in_new_tab: bool = False) -> bool:
        """Open a saved request in the editor, reusing its tab if one is open."""
        try:
            record = await self.backend.get_request(request_id)
        except APIException as e:
            logger.error("Failed to load request %s: %s", request_id, e.detail)
            return False

        if record is None:
            logger.warning("Request %s no longer exists", request_id)
            return False

        self.tabs.open_request(record, force_new_tab=open_in_new_tab)
        return True

    async def delete_request(self, request_id: str, collection_id: str) -> bool:
        try:
            await self.backend.delete_request(request_id)
        except APIException as e:
            logger.error("Failed to delete request %s: %s", request_id, e.detail)
            return False

        self._release_request(request_id)
        await self.load_requests(collection_id)
        return True

    # Sending

    async def send_request(self) -> HttpResponse:
        """
        Resolve and send the active tab's draft.

        History records the draft as written, with its tokens unresolved.

        Raises:
            RequestCancelledError: cancel_request() stopped the send
            APIException: The send failed
        """
        tab = self.tabs.active_tab
        tab_id = tab.id
        template = tab.draft.model_copy(deep=True)

        undefined = find_undefined(template, self.active_environment)
        if undefined:
            logger.warning("Unresolved variables in request: %s", ", ".join(undefined))
        resolved = resolve_draft(template, self.active_environment)

        self.cancel_request(tab_id)
        self.tabs.set_loading(tab_id, True)
        self.tabs.set_response(tab_id, None)

        task = asyncio.ensure_future(self.backend.send_request(resolved))
        self._in_flight[tab_id] = task
        try:
            response = await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            logger.info("Request %s %s cancelled", resolved.method, resolved.url)
            raise RequestCancelledError() from None
        except APIException as e:
            logger.error("Request %s %s failed: %s", resolved.method, resolved.url, e.detail)
            raise
        finally:
            # A newer send on the same tab owns the loading flag
            if self._in_flight.get(tab_id) is task:
                del self._in_flight[tab_id]
                self.tabs.set_loading(tab_id, False)

        self.tabs.set_response(tab_id, response)
        await self.add_history(template.method, template.url, response.status, response.response_time)
        return response

    def cancel_request(self, tab_id: Optional[str] = None) -> bool:
        """Cancel the in-flight send of a tab (the active one by default)."""
        task = self._in_flight.get(tab_id or self.tabs.active_tab.id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def close_tab(self, index: int) -> None:
        """Close a tab, cancelling its in-flight send first."""
        if 0 <= index < len(self.tabs.tabs):
            self.cancel_request(self.tabs.tabs[index].id)
        self.tabs.close_tab(index)

    async def cancel_all(self) -> None:
        tasks = [task for task in self._in_flight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # Environments

    async def load_environments(self) -> bool:
        try:
            environments = await self.backend.list_environments()
            active = await self.backend.get_active_environment()
        except APIException as e:
            logger.error("Failed to load environments: %s", e.detail)
            return False

        self.environments = environments
        self.active_environment = active
        return True

    def _find_environment(self, environment_id: str) -> Optional[EnvironmentRecord]:
        for env in self.environments:
            if env.id == environment_id:
                return env
        return None

    async def _write_environment(self, env: EnvironmentRecord) -> bool:
        try:
            await self.backend.save_environment(env)
        except APIException as e:
            logger.error("Failed to save environment %r: %s", env.name, e.detail)
            return False

        await self.load_environments()
        return True

    async def save_environment(
        self, name: str, variables: list[EnvironmentVariable], is_active: bool = False
    ) -> bool:
        env = EnvironmentRecord(
            id=str(uuid.uuid4()),
            name=name,
            variables=serialize_variables(variables),
            is_active=is_active,
        )
        return await self._write_environment(env)

    async def update_environment(
        self, environment_id: str, name: str, variables: list[EnvironmentVariable]
    ) -> bool:
        current = self._find_environment(environment_id)
        if current is None:
            logger.warning("Environment %s is not loaded", environment_id)
            return False
        updated = current.model_copy(update={"name": name, "variables": serialize_variables(variables)})
        return await self._write_environment(updated)

    async def set_active_environment(self, environment_id: str) -> bool:
        current = self._find_environment(environment_id)
        if current is None:
            logger.warning("Environment %s is not loaded", environment_id)
            return False
        return await self._write_environment(current.model_copy(update={"is_active": True}))

    async def delete_environment(self, environment_id: str) -> bool:
        try:
            await self.backend.delete_environment(environment_id)
        except APIException as e:
            logger.error("Failed to delete environment %s: %s", environment_id, e.detail)
            return False

        await self.load_environments()
        return True

    # History

    async def load_history(self, limit: Optional[int] = None) -> bool:
        try:
            self.history = await self.backend.list_history(limit or self.settings.history_limit)
        except APIException as e:
            logger.error("Failed to load history: %s", e.detail)
            return False
        return True

    async def add_history(self, method: str, url: str, status: int, response_time: int) -> bool:
        entry = HistoryEntry(
            id=str(uuid.uuid4()),
            method=method,
            url=url,
            status=status,
            response_time=response_time,
        )
        try:
            await self.backend.add_history(entry)
        except APIException as e:
            logger.error("Failed to record history: %s", e.detail)
            return False

        await self.load_history()
        return True

    async def clear_history(self) -> bool:
        try:
            await self.backend.clear_history()
        except APIException as e:
            logger.error("Failed to clear history: %s", e.detail)
            return False

        self.history = []
        return True

    # Import / export

    async def import_postman_collection(self, json_content: str) -> str:
        """
        Import a Postman v2.1 collection under a new root folder.

        Returns:
            Id of the new root folder
        """
        try:
            imported = await self.backend.import_collection(json_content)
            root_id = await self.backend.save_imported_collection(imported)
        except APIException as e:
            logger.error("Failed to import collection: %s", e.detail)
            raise

        logger.info(
            "Imported %r with %d folders and %d requests",
            imported.name, len(imported.folders), len(imported.requests),
        )
        await self.load_collections()
        return root_id

    async def export_collection(self, collection_id: str) -> str:
        try:
            return await self.backend.export_collection(collection_id)
        except APIException as e:
            logger.error("Failed to export collection %s: %s", collection_id, e.detail)
            raise
