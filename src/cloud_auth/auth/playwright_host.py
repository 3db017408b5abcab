"""Embedded browser host backed by Playwright (Chromium).

Maps Playwright page events onto the window events the in-app browser
flow listens for:

- main-frame navigation request -> ``navigation-start``
- failed main-frame navigation  -> ``load-error``
- page closed by the user       -> ``exit``

Browser profiles for logins that keep their cache are stored in:
  ~/.config/cloud-auth/browser_data/{app_id}/
"""

import asyncio
import importlib.util
import logging
import os
import stat
import sys
from pathlib import Path
from typing import Any

from cloud_auth.auth.inapp_browser import (
    EXIT,
    LOAD_ERROR,
    NAVIGATION_START,
    BrowserEvent,
    BrowserListener,
)
from cloud_auth.config import Settings, get_settings
from cloud_auth.exceptions import CapabilityMissingError

logger = logging.getLogger(__name__)

BROWSER_DATA_DIR_NAME = "browser_data"
DEFAULT_VIEWPORT = {"width": 500, "height": 700}


def is_gui_available() -> bool:
    """Check if a GUI environment is available for browser display.

    Returns:
        True if GUI is available, False otherwise
    """
    # macOS - check if we're in a GUI session
    if sys.platform == "darwin":
        return os.environ.get("TERM_PROGRAM") is not None or os.path.exists(
            "/System/Library/CoreServices/WindowServer.app"
        )

    # Linux - check DISPLAY or WAYLAND_DISPLAY
    if sys.platform.startswith("linux"):
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))

    # Windows - assume GUI available
    if sys.platform == "win32":
        return True

    return False


def parse_window_options(options: str) -> dict[str, str]:
    """Parse a ``key=value,key=value`` window option string."""
    parsed: dict[str, str] = {}
    for part in options.split(","):
        key, sep, value = part.partition("=")
        if key.strip() and sep:
            parsed[key.strip()] = value.strip()
    return parsed


def get_browser_data_dir(base_dir: Path, app_id: str) -> Path:
    """Get browser data directory for persistent login profiles.

    Creates the directory with secure permissions (0700) if it doesn't exist.
    """
    data_dir = base_dir / BROWSER_DATA_DIR_NAME / app_id
    data_dir.mkdir(parents=True, exist_ok=True)

    try:
        os.chmod(data_dir, stat.S_IRWXU)  # 0700
    except OSError:
        pass

    return data_dir


class PlaywrightWindow:
    """A Playwright page exposed through the ``BrowserWindow`` contract."""

    def __init__(self, playwright: Any, context: Any, page: Any, browser: Any | None = None):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._listeners: dict[str, list[BrowserListener]] = {
            EXIT: [],
            LOAD_ERROR: [],
            NAVIGATION_START: [],
        }
        self._closed = False
        self._navigation: asyncio.Future | None = None
        self._teardown: asyncio.Future | None = None

        page.on("request", self._handle_request)
        page.on("requestfailed", self._handle_request_failed)
        page.on("close", self._handle_close)

    def add_event_listener(self, event: str, listener: BrowserListener) -> None:
        self._listeners[event].append(listener)

    def remove_event_listener(self, event: str, listener: BrowserListener) -> None:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    def navigate(self, url: str) -> None:
        """Start loading ``url``; progress is reported through window events."""
        self._navigation = asyncio.ensure_future(self._page.goto(url))
        self._navigation.add_done_callback(self._background_done)

    @staticmethod
    def _background_done(task: asyncio.Future) -> None:
        # Navigation failures already reached listeners as load-error or exit
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Background browser task failed: {task.exception()}")

    def _dispatch(self, event: BrowserEvent) -> None:
        for listener in list(self._listeners[event.type]):
            listener(event)

    def _is_main_navigation(self, request: Any) -> bool:
        return request.is_navigation_request() and request.frame == self._page.main_frame

    def _handle_request(self, request: Any) -> None:
        if self._is_main_navigation(request):
            self._dispatch(BrowserEvent(NAVIGATION_START, url=request.url))

    def _handle_request_failed(self, request: Any) -> None:
        if self._is_main_navigation(request):
            self._dispatch(BrowserEvent(LOAD_ERROR, url=request.url, message=request.failure))

    def _handle_close(self, page: Any) -> None:
        if self._closed:
            return
        self._dispatch(BrowserEvent(EXIT))
        # The user closed the page; release the context, browser and driver
        self._teardown = asyncio.ensure_future(self.close())
        self._teardown.add_done_callback(self._background_done)

    async def close(self) -> None:
        """Close the page and tear down the browser. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightBrowser:
    """Opens login windows in a Chromium instance driven by Playwright.

    Window options follow the in-app browser conventions:

    - ``clearcache=yes`` (default): fresh, throwaway browser profile
    - ``clearcache=no``: persistent profile per app ID, so provider
      sessions survive between logins
    - ``clearsessioncache=yes``: drop session cookies from a persistent
      profile before navigating
    - ``width``/``height``: window viewport size
    """

    def __init__(self, settings: Settings | None = None, headless: bool | None = None):
        self.settings = settings or get_settings()
        self.headless = headless if headless is not None else self.settings.headless
        self._windows: list[PlaywrightWindow] = []

    def available(self) -> bool:
        if importlib.util.find_spec("playwright") is None:
            return False
        return self.headless or is_gui_available()

    async def aclose(self) -> None:
        """Tear down every window this host opened that is still running."""
        windows, self._windows = self._windows, []
        for window in windows:
            await window.close()

    async def open(self, url: str, target: str, options: str) -> PlaywrightWindow:
        try:
            from playwright.async_api import async_playwright
        except ImportError:
            raise CapabilityMissingError(
                "Playwright is not installed. Install with: pip install playwright && playwright install chromium"
            ) from None

        opts = parse_window_options(options)
        viewport = {
            "width": int(opts.get("width", DEFAULT_VIEWPORT["width"])),
            "height": int(opts.get("height", DEFAULT_VIEWPORT["height"])),
        }

        playwright = await async_playwright().start()
        browser = None
        try:
            if opts.get("clearcache", "yes") == "no":
                user_data_dir = get_browser_data_dir(
                    self.settings.cache_dir, self.settings.require_app_id()
                )
                context = await playwright.chromium.launch_persistent_context(
                    user_data_dir=str(user_data_dir),
                    headless=self.headless,
                    viewport=viewport,
                )
                if opts.get("clearsessioncache", "yes") == "yes":
                    await self._clear_session_cookies(context)
            else:
                browser = await playwright.chromium.launch(headless=self.headless)
                context = await browser.new_context(viewport=viewport)

            page = context.pages[0] if context.pages else await context.new_page()
        except (Exception, asyncio.CancelledError):
            if browser is not None:
                await browser.close()
            await playwright.stop()
            raise

        window = PlaywrightWindow(playwright, context, page, browser=browser)
        self._windows.append(window)
        logger.info("Opening browser window for login")
        window.navigate(url)
        return window

    @staticmethod
    async def _clear_session_cookies(context: Any) -> None:
        """Remove cookies without an expiry, keeping persistent ones."""
        cookies = await context.cookies()
        persistent = [c for c in cookies if c.get("expires", -1) != -1]
        await context.clear_cookies()
        if persistent:
            await context.add_cookies(persistent)
        logger.debug(f"Cleared {len(cookies) - len(persistent)} session cookie(s)")
