"""Shared fixtures for cloud-auth tests."""

import asyncio

import pytest
import respx

from cloud_auth.api.client import CloudClient
from cloud_auth.auth.inapp_browser import (
    EXIT,
    LOAD_ERROR,
    NAVIGATION_START,
    BrowserEvent,
)
from cloud_auth.config import Settings

API_URL = "https://api.test"
APP_ID = "test-app"


class FakeWindow:
    """In-memory login window that lets tests fire window events."""

    def __init__(self):
        self.listeners = {EXIT: [], LOAD_ERROR: [], NAVIGATION_START: []}
        self.removed: list[str] = []
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def add_event_listener(self, event, listener):
        self.listeners[event].append(listener)

    def remove_event_listener(self, event, listener):
        self.removed.append(event)
        self.listeners[event].remove(listener)

    async def close(self):
        self.close_count += 1

    def fire(self, event: str, url: str | None = None) -> None:
        for listener in list(self.listeners[event]):
            listener(BrowserEvent(event, url=url))


class FakeBrowser:
    """Embedded browser host that hands out a single FakeWindow."""

    def __init__(self, available: bool = True):
        self._available = available
        self.window = FakeWindow()
        self.opened: list[tuple[str, str, str]] = []
        self.closed = False

    def available(self) -> bool:
        return self._available

    async def open(self, url, target, options):
        self.opened.append((url, target, options))
        return self.window

    async def aclose(self):
        self.closed = True


async def wait_for_window(browser: FakeBrowser, attempts: int = 100) -> FakeWindow:
    """Yield to the event loop until the flow has attached its listeners."""
    for _ in range(attempts):
        if browser.window.listeners[NAVIGATION_START]:
            return browser.window
        await asyncio.sleep(0)
    raise AssertionError("login window was never opened")


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fake API and a temporary cache directory."""
    return Settings(
        app_id=APP_ID,
        api_url=API_URL,
        web_url="https://web.test",
        auth_host="auth.test",
        callback_url="http://localhost/app",
        cache_dir=tmp_path,
    )


@pytest.fixture
def api_mock():
    """respx router for the fake API."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def client(settings):
    """API client without a token source."""
    return CloudClient(settings)


@pytest.fixture
def browser():
    """Available fake embedded browser."""
    return FakeBrowser()
