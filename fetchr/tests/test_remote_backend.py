"""
Tests for RemoteBackend against the in-process API through httpx's ASGI
transport.
"""

import asyncio
import json

import httpx
import pytest

from fetchr.backend import RemoteBackend
from fetchr.context import AppSession
from fetchr.exceptions import APIException, CollectionImportError
from fetchr.schemas.collection import CollectionNode
from fetchr.schemas.environment import EnvironmentRecord, EnvironmentVariable, serialize_variables
from fetchr.schemas.request import RequestRecord

from conftest import POSTMAN_COLLECTION, received


@pytest.fixture
def remote(api):
    def _make() -> RemoteBackend:
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=api), base_url="http://testserver")
        return RemoteBackend(client=client)

    return _make


def run_with(remote, scenario):
    """Run ``scenario(backend)`` on a fresh RemoteBackend, closing it afterwards."""

    async def _run():
        backend = remote()
        try:
            return await scenario(backend)
        finally:
            await backend.aclose()

    return asyncio.run(_run())


class TestRemoteBackendCalls:

    def test_collection_and_request_round_trip(self, remote):
        async def scenario(backend):
            await backend.create_collection(CollectionNode(id="c1", name="Box"))
            await backend.save_request(RequestRecord(id="r1", collection_id="c1", name="Ping", method="HEAD"))
            return (
                await backend.list_collections(),
                await backend.list_requests("c1"),
                await backend.get_request("r1"),
            )

        collections, requests, fetched = run_with(remote, scenario)

        assert [c.name for c in collections] == ["Box"]
        assert [r.id for r in requests] == ["r1"]
        assert fetched.method == "HEAD"

    def test_missing_request_is_none(self, remote):
        async def scenario(backend):
            return await backend.get_request("missing")

        assert run_with(remote, scenario) is None

    def test_errors_are_rebuilt_from_envelope(self, remote):
        async def scenario(backend):
            with pytest.raises(APIException) as not_found:
                await backend.delete_request("missing")
            with pytest.raises(CollectionImportError):
                await backend.import_collection("{}")
            return not_found.value

        error = run_with(remote, scenario)

        assert error.status_code == 404
        assert error.error_code == "RESOURCE_NOT_FOUND"
        assert "missing" in error.detail

    def test_interpolate_and_active_environment(self, remote):
        async def scenario(backend):
            assert await backend.get_active_environment() is None
            await backend.save_environment(EnvironmentRecord(
                id="e1", name="Dev", is_active=True,
                variables=serialize_variables([EnvironmentVariable(key="host", value="api.dev")]),
            ))
            return await backend.interpolate("{{host}}/x"), await backend.get_active_environment()

        text, active = run_with(remote, scenario)

        assert text == "api.dev/x"
        assert active.id == "e1"

    def test_import_and_export(self, remote):
        async def scenario(backend):
            imported = await backend.import_collection(json.dumps(POSTMAN_COLLECTION))
            root_id = await backend.save_imported_collection(imported)
            return await backend.export_collection(root_id)

        exported = json.loads(run_with(remote, scenario))

        assert exported["name"] == "Shop API"
        assert [f["name"] for f in exported["folders"]] == ["Auth"]


class TestSessionOverRemote:

    def test_auth_login_scenario(self, remote):
        async def scenario():
            async with AppSession(remote()) as session:
                store = session.store
                await store.create_collection("Auth", is_folder=True)
                auth_id = store.collections[0].id
                await store.save_environment(
                    "Dev", [EnvironmentVariable(key="host", value="https://api.example.com")], is_active=True
                )
                session.tabs.set_url("{{host}}/login")
                await store.save_current_request("Login", auth_id)
                response = await store.send_request()
                return store, response

        store, response = asyncio.run(scenario())

        assert received(response)["url"] == "https://api.example.com/login"
        assert [(h.method, h.url, h.status) for h in store.history] == [("GET", "{{host}}/login", 200)]
        assert [c.label for c in store.collection_tree[0].children] == ["Login"]

    def test_failed_write_over_http_keeps_mirror(self, remote):
        async def scenario():
            async with AppSession(remote()) as session:
                ok = await session.store.create_collection("Orphan", parent_id="missing")
                return ok, session.store.collections

        ok, collections = asyncio.run(scenario())

        assert ok is False
        assert collections == []
