"""
Shared fixtures: a throwaway SQLite database per test, a TestClient wired to
it, and helpers for building backends and stores on top of it.
"""

import json
import os

# Keep the app's own engine away from the working copy's database
os.environ.setdefault("FETCHR_DATABASE_URL", "sqlite:///./test_fetchr.db")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from fetchr.backend import LocalBackend
from fetchr.config import Settings
from fetchr.database import build_engine, get_db, init_db
from fetchr.main import app
from fetchr.routers.execute import get_transport
from fetchr.store import CollectionStore


# A Postman v2.1 document exercising folders, body modes and auth schemes
POSTMAN_COLLECTION = {
    "info": {
        "name": "Shop API",
        "schema": "https://schema.getpostman.com/json/collection/v2.1.0/collection.json",
    },
    "item": [
        {
            "name": "Auth",
            "item": [
                {
                    "name": "Login",
                    "request": {
                        "method": "post",
                        "header": [
                            {"key": "Accept", "value": "application/json"},
                            {"key": "X-Debug", "value": "1", "disabled": True},
                        ],
                        "body": {"mode": "raw", "raw": "{\"user\": \"{{user}}\"}"},
                        "url": {"raw": "{{host}}/login", "host": ["{{host}}"], "path": ["login"]},
                        "auth": {
                            "type": "basic",
                            "basic": [
                                {"key": "username", "value": "bob", "type": "string"},
                                {"key": "password", "value": "pw", "type": "string"},
                            ],
                        },
                    },
                },
                {
                    "name": "Tokens",
                    "item": [
                        {
                            "name": "Refresh",
                            "request": {
                                "method": "GET",
                                "url": "{{host}}/refresh",
                                "auth": {"type": "bearer", "bearer": [{"key": "token", "value": "t0k"}]},
                            },
                        }
                    ],
                },
            ],
        },
        {
            "name": "Upload",
            "request": {
                "method": "PUT",
                "url": "{{host}}/upload",
                "body": {
                    "mode": "formdata",
                    "formdata": [
                        {"key": "title", "value": "cat", "type": "text"},
                        {"key": "image", "type": "file", "src": "/tmp/cat.png"},
                    ],
                },
            },
        },
        {
            "name": "Notes",
            "request": {
                "method": "POST",
                "url": "{{host}}/notes",
                "body": {"mode": "raw", "raw": "<note/>", "options": {"raw": {"language": "xml"}}},
                "auth": {"type": "apikey", "apikey": [
                    {"key": "key", "value": "X-Api-Key"},
                    {"key": "value", "value": "secret"},
                ]},
            },
        },
    ],
}


def echo_handler(request: httpx.Request) -> httpx.Response:
    """Answer every request with a JSON description of what was received."""
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "url": str(request.url),
            "headers": dict(request.headers),
            "body": request.content.decode(),
        },
        headers={"Set-Cookie": "session=abc; Path=/; Domain=example.com"},
    )


def received(response) -> dict:
    """Decode the echo handler's description from an HttpResponse."""
    return json.loads(response.body)


@pytest.fixture
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'fetchr.db'}")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api(session_factory):
    """The app with its database and outbound transport pointed at test doubles."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transport] = lambda: httpx.MockTransport(echo_handler)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api):
    """Create a test client bound to the per-test database."""
    with TestClient(api) as test_client:
        yield test_client


@pytest.fixture
def settings():
    return Settings(request_timeout=5.0, history_limit=50)


@pytest.fixture
def make_store(session_factory, settings):
    """Build a store over a LocalBackend, optionally with a custom transport handler."""

    def _make(handler=echo_handler) -> CollectionStore:
        backend = LocalBackend(
            session_factory=session_factory,
            timeout=settings.request_timeout,
            transport=httpx.MockTransport(handler),
        )
        return CollectionStore(backend, settings=settings)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()
