"""
Backend collaborators used by the client-side store.

``Backend`` lists every persistence and network operation the store relies
on. Two implementations are provided:

- ``LocalBackend`` talks to the SQLite database directly through SQLAlchemy
  sessions and sends requests with httpx in-process.
- ``RemoteBackend`` calls the same operations on a running fetchr API.

Every failure surfaces as an ``APIException`` subclass.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol, TypeVar

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import get_settings
from .database import SessionLocal
from .exceptions import (
    APIException,
    DatabaseError,
    NetworkError,
    ResourceNotFoundError,
    RequestTimeoutError,
    exception_from_payload,
)
from .schemas.collection import CollectionNode
from .schemas.draft import RequestDraft
from .schemas.environment import EnvironmentRecord
from .schemas.execute import HttpResponse
from .schemas.history import HistoryEntry
from .schemas.imported import ImportedCollection
from .schemas.request import RequestRecord
from .services import (
    collection_service,
    environment_service,
    history_service,
    import_export,
)
from .services.http_executor import send_request
from .services.postman_import import parse_postman_collection
from .services.variable_substitution import interpolate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Backend(Protocol):
    """Operations the store awaits; each call is a suspension point."""

    async def list_collections(self) -> list[CollectionNode]: ...

    async def create_collection(self, node: CollectionNode) -> None: ...

    async def delete_collection(self, collection_id: str) -> None: ...

    async def list_requests(self, collection_id: str) -> list[RequestRecord]: ...

    async def save_request(self, record: RequestRecord) -> None: ...

    async def get_request(self, request_id: str) -> Optional[RequestRecord]: ...

    async def delete_request(self, request_id: str) -> None: ...

    async def send_request(self, draft: RequestDraft) -> HttpResponse: ...

    async def interpolate(self, text: str) -> str: ...

    async def list_environments(self) -> list[EnvironmentRecord]: ...

    async def get_active_environment(self) -> Optional[EnvironmentRecord]: ...

    async def save_environment(self, env: EnvironmentRecord) -> None: ...

    async def delete_environment(self, environment_id: str) -> None: ...

    async def add_history(self, entry: HistoryEntry) -> None: ...

    async def list_history(self, limit: int) -> list[HistoryEntry]: ...

    async def clear_history(self) -> None: ...

    async def import_collection(self, json_content: str) -> ImportedCollection: ...

    async def save_imported_collection(self, imported: ImportedCollection) -> str: ...

    async def export_collection(self, collection_id: str) -> str: ...

    async def aclose(self) -> None: ...


class LocalBackend:
    """
    Backend running against a local SQLAlchemy session factory.

    Session work is synchronous, so each call runs in a worker thread with
    its own session and the event loop stays free for in-flight sends.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._session_factory = session_factory
        self._timeout = timeout if timeout is not None else get_settings().request_timeout
        self._transport = transport

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseError(f"Database error occurred: {e.__class__.__name__}") from e
        finally:
            db.close()

    def _in_session(self, work: Callable[[Session], T]) -> T:
        with self._session() as db:
            return work(db)

    async def _run(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._in_session, work)

    # Collections

    async def list_collections(self) -> list[CollectionNode]:
        return await self._run(collection_service.list_collections)

    async def create_collection(self, node: CollectionNode) -> None:
        await self._run(lambda db: collection_service.create_collection(db, node))

    async def delete_collection(self, collection_id: str) -> None:
        if not await self._run(lambda db: collection_service.delete_collection(db, collection_id)):
            raise ResourceNotFoundError("Collection", collection_id)

    # Requests

    async def list_requests(self, collection_id: str) -> list[RequestRecord]:
        return await self._run(lambda db: collection_service.list_requests(db, collection_id))

    async def save_request(self, record: RequestRecord) -> None:
        await self._run(lambda db: collection_service.save_request(db, record))

    async def get_request(self, request_id: str) -> Optional[RequestRecord]:
        return await self._run(lambda db: collection_service.get_request(db, request_id))

    async def delete_request(self, request_id: str) -> None:
        if not await self._run(lambda db: collection_service.delete_request(db, request_id)):
            raise ResourceNotFoundError("Request", request_id)

    # Execution

    async def send_request(self, draft: RequestDraft) -> HttpResponse:
        return await send_request(draft, timeout=self._timeout, transport=self._transport)

    async def interpolate(self, text: str) -> str:
        active = await self.get_active_environment()
        return interpolate(text, active)

    # Environments

    async def list_environments(self) -> list[EnvironmentRecord]:
        return await self._run(environment_service.list_environments)

    async def get_active_environment(self) -> Optional[EnvironmentRecord]:
        return await self._run(environment_service.get_active_environment)

    async def save_environment(self, env: EnvironmentRecord) -> None:
        await self._run(lambda db: environment_service.save_environment(db, env))

    async def delete_environment(self, environment_id: str) -> None:
        if not await self._run(lambda db: environment_service.delete_environment(db, environment_id)):
            raise ResourceNotFoundError("Environment", environment_id)

    # History

    async def add_history(self, entry: HistoryEntry) -> None:
        await self._run(lambda db: history_service.save_history(db, entry))

    async def list_history(self, limit: int) -> list[HistoryEntry]:
        return await self._run(lambda db: history_service.list_history(db, limit))

    async def clear_history(self) -> None:
        await self._run(history_service.clear_history)

    # Import / export

    async def import_collection(self, json_content: str) -> ImportedCollection:
        return parse_postman_collection(json_content)

    async def save_imported_collection(self, imported: ImportedCollection) -> str:
        return await self._run(lambda db: import_export.save_imported_collection(db, imported))

    async def export_collection(self, collection_id: str) -> str:
        return await self._run(lambda db: import_export.export_collection(db, collection_id))

    async def aclose(self) -> None:
        pass


class RemoteBackend:
    """Backend calling a fetchr API over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        if client is None:
            # The API applies the outbound timeout itself; leave it room to answer
            client = httpx.AsyncClient(
                base_url=base_url or settings.api_base_url,
                timeout=settings.request_timeout + 5,
            )
        self._client = client

    async def _call(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"fetchr API did not answer {method} {path}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"fetchr API unreachable: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {"detail": response.text}
            logger.debug("fetchr API %s %s returned %s", method, path, response.status_code)
            raise exception_from_payload(response.status_code, payload)
        return response

    # Collections

    async def list_collections(self) -> list[CollectionNode]:
        response = await self._call("GET", "/api/collections")
        return [CollectionNode.model_validate(item) for item in response.json()]

    async def create_collection(self, node: CollectionNode) -> None:
        await self._call("POST", "/api/collections", json=node.model_dump(mode="json"))

    async def delete_collection(self, collection_id: str) -> None:
        await self._call("DELETE", f"/api/collections/{collection_id}")

    # Requests

    async def list_requests(self, collection_id: str) -> list[RequestRecord]:
        response = await self._call("GET", f"/api/collections/{collection_id}/requests")
        return [RequestRecord.model_validate(item) for item in response.json()]

    async def save_request(self, record: RequestRecord) -> None:
        await self._call("PUT", f"/api/requests/{record.id}", json=record.model_dump(mode="json"))

    async def get_request(self, request_id: str) -> Optional[RequestRecord]:
        try:
            response = await self._call("GET", f"/api/requests/{request_id}")
        except APIException as e:
            if e.status_code == 404:
                return None
            raise
        return RequestRecord.model_validate(response.json())

    async def delete_request(self, request_id: str) -> None:
        await self._call("DELETE", f"/api/requests/{request_id}")

    # Execution

    async def send_request(self, draft: RequestDraft) -> HttpResponse:
        response = await self._call("POST", "/api/execute", json=draft.model_dump(mode="json"))
        return HttpResponse.model_validate(response.json())

    async def interpolate(self, text: str) -> str:
        response = await self._call("POST", "/api/execute/interpolate", json={"text": text})
        return response.json()["result"]

    # Environments

    async def list_environments(self) -> list[EnvironmentRecord]:
        response = await self._call("GET", "/api/environments")
        return [EnvironmentRecord.model_validate(item) for item in response.json()]

    async def get_active_environment(self) -> Optional[EnvironmentRecord]:
        response = await self._call("GET", "/api/environments/active")
        payload = response.json()
        return EnvironmentRecord.model_validate(payload) if payload else None

    async def save_environment(self, env: EnvironmentRecord) -> None:
        await self._call("PUT", f"/api/environments/{env.id}", json=env.model_dump(mode="json"))

    async def delete_environment(self, environment_id: str) -> None:
        await self._call("DELETE", f"/api/environments/{environment_id}")

    # History

    async def add_history(self, entry: HistoryEntry) -> None:
        await self._call("POST", "/api/history", json=entry.model_dump(mode="json"))

    async def list_history(self, limit: int) -> list[HistoryEntry]:
        response = await self._call("GET", "/api/history", params={"limit": limit})
        return [HistoryEntry.model_validate(item) for item in response.json()]

    async def clear_history(self) -> None:
        await self._call("DELETE", "/api/history")

    # Import / export

    async def import_collection(self, json_content: str) -> ImportedCollection:
        response = await self._call("POST", "/api/import/postman", json={"json_content": json_content})
        return ImportedCollection.model_validate(response.json())

    async def save_imported_collection(self, imported: ImportedCollection) -> str:
        response = await self._call("POST", "/api/import", json=imported.model_dump(mode="json"))
        return response.json()["root_id"]

    async def export_collection(self, collection_id: str) -> str:
        response = await self._call("GET", f"/api/collections/{collection_id}/export")
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()
