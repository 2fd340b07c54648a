"""
Tests for settings resolution and the application session context.
"""

import asyncio

import httpx
import pytest

from fetchr.backend import LocalBackend
from fetchr.config import DEFAULT_HISTORY_LIMIT, DEFAULT_REQUEST_TIMEOUT, load_settings
from fetchr.context import AppSession
from fetchr.exceptions import RequestCancelledError


class TestSettings:

    def test_defaults(self):
        settings = load_settings({})

        assert settings.request_timeout == DEFAULT_REQUEST_TIMEOUT
        assert settings.history_limit == DEFAULT_HISTORY_LIMIT
        assert settings.database_url == "sqlite:///./fetchr.db"

    def test_environment_overrides(self):
        settings = load_settings({
            "FETCHR_REQUEST_TIMEOUT": "2.5",
            "FETCHR_HISTORY_LIMIT": "10",
            "FETCHR_LOG_LEVEL": "debug",
            "UNRELATED": "x",
        })

        assert settings.request_timeout == 2.5
        assert settings.history_limit == 10
        assert settings.log_level == "debug"

    def test_invalid_value_is_rejected(self):
        with pytest.raises(ValueError):
            load_settings({"FETCHR_HISTORY_LIMIT": "many"})


class TestAppSession:

    def test_start_loads_mirrors(self, session_factory, settings):
        async def scenario():
            async with AppSession(LocalBackend(session_factory=session_factory), settings=settings) as app:
                await app.store.create_collection("Box")
            restarted = AppSession(LocalBackend(session_factory=session_factory), settings=settings)
            await restarted.start()
            await restarted.stop()
            return restarted

        restarted = asyncio.run(scenario())

        assert [c.name for c in restarted.store.collections] == ["Box"]
        assert restarted.started is False

    def test_stop_cancels_in_flight_sends(self, session_factory, settings):
        async def hang(request):
            await asyncio.sleep(10)
            return httpx.Response(200)

        backend = LocalBackend(session_factory=session_factory, transport=httpx.MockTransport(hang))

        async def scenario():
            app = AppSession(backend, settings=settings)
            await app.start()
            app.tabs.set_url("https://hang.example.com")
            pending = asyncio.ensure_future(app.store.send_request())
            await asyncio.sleep(0.05)
            await app.stop()
            with pytest.raises(RequestCancelledError):
                await pending
            return app

        app = asyncio.run(scenario())

        assert not app.tabs.active_tab.is_loading
