"""Embedded-browser login flow shared by all redirect-based strategies.

A flow opens a login window at the URL handed out by the backend and
waits for one of three signals from the window:

- ``navigation-start`` towards the auth host: the provider redirected back
  with ``?token=...&signup=0|1``. The window is closed and the flow
  resolves with the token.
- ``exit``: the user dismissed the window. The flow is cancelled.
- ``load-error``: the window failed to load. The flow fails and the window
  is left open.

Whichever signal arrives first decides the outcome; later signals are
ignored. Cancelling the task awaiting ``InAppBrowserFlow.run()`` detaches
every observer and closes the window, even when a token already arrived.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol
from urllib.parse import parse_qsl, urlsplit

from cloud_auth.auth.models import LoginResult
from cloud_auth.exceptions import (
    InAppBrowserError,
    InAppBrowserExitError,
    InAppBrowserLoadError,
)

logger = logging.getLogger(__name__)

# Window event names
EXIT = "exit"
LOAD_ERROR = "load-error"
NAVIGATION_START = "navigation-start"

WINDOW_TARGET = "_blank"


@dataclass(frozen=True)
class BrowserEvent:
    """Event delivered by a login window to its listeners."""

    type: str
    url: str | None = None
    message: str | None = None


BrowserListener = Callable[[BrowserEvent], None]


class BrowserWindow(Protocol):
    """Handle to an open embedded-browser window."""

    def add_event_listener(self, event: str, listener: BrowserListener) -> None: ...

    def remove_event_listener(self, event: str, listener: BrowserListener) -> None: ...

    async def close(self) -> None: ...


class EmbeddedBrowser(Protocol):
    """Host capability that can open embedded-browser windows."""

    def available(self) -> bool: ...

    async def open(self, url: str, target: str, options: str) -> BrowserWindow: ...

    async def aclose(self) -> None: ...


class FlowState(Enum):
    """States of a single embedded-browser login."""

    PENDING = "pending"
    WINDOW_OPEN = "window_open"
    TOKEN_OBTAINED = "token_obtained"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FlowState.TOKEN_OBTAINED, FlowState.CANCELLED, FlowState.FAILED)


def is_callback_url(url: str | None, auth_host: str) -> bool:
    """Check whether a navigation target is the provider's redirect back to us."""
    if not url:
        return False
    return urlsplit(url).hostname == auth_host


def parse_callback_params(url: str) -> dict[str, str]:
    """Parse the query string of a callback URL, ignoring any fragment."""
    query = urlsplit(url.split("#")[0]).query
    return dict(parse_qsl(query, keep_blank_values=True))


def parse_signup_flag(value: str | None) -> bool:
    """Interpret the ``signup`` callback parameter ("0"/"1")."""
    try:
        return bool(int(value, 10))
    except (TypeError, ValueError):
        return False


class InAppBrowserFlow:
    """One embedded-browser login, from opening the window to a terminal state."""

    def __init__(self, browser: EmbeddedBrowser, auth_host: str):
        self.browser = browser
        self.auth_host = auth_host
        self.state = FlowState.PENDING
        self.window: BrowserWindow | None = None
        self._outcome: asyncio.Future[LoginResult] | None = None
        self._left_open = False
        self._window_closed = False

    def _transition(self, state: FlowState) -> None:
        logger.debug(f"In-app browser flow: {self.state.value} -> {state.value}")
        self.state = state

    def _listeners(self) -> dict[str, BrowserListener]:
        return {
            EXIT: self._on_exit,
            LOAD_ERROR: self._on_load_error,
            NAVIGATION_START: self._on_navigation_start,
        }

    def _detach(self, *events: str) -> None:
        assert self.window is not None
        listeners = self._listeners()
        for event in events:
            self.window.remove_event_listener(event, listeners[event])

    def _settled(self) -> bool:
        return self._outcome is None or self._outcome.done()

    def _fail(self, state: FlowState, error: Exception) -> None:
        assert self._outcome is not None
        self._transition(state)
        self._left_open = True
        self._outcome.set_exception(error)

    def _on_exit(self, event: BrowserEvent) -> None:
        if self._settled():
            return
        self._fail(FlowState.CANCELLED, InAppBrowserExitError())

    def _on_load_error(self, event: BrowserEvent) -> None:
        if self._settled():
            return
        self._fail(FlowState.FAILED, InAppBrowserLoadError(url=event.url))

    def _on_navigation_start(self, event: BrowserEvent) -> None:
        if self._settled() or not is_callback_url(event.url, self.auth_host):
            return

        assert self._outcome is not None
        params = parse_callback_params(event.url)
        token = params.get("token")
        if not token:
            self._fail(FlowState.FAILED, InAppBrowserError("Callback URL did not include a token"))
            return

        self._detach(EXIT, LOAD_ERROR)
        self._transition(FlowState.TOKEN_OBTAINED)
        self._outcome.set_result(
            LoginResult(token=token, signup=parse_signup_flag(params.get("signup")))
        )

    async def _close_window(self) -> None:
        if self.window is None or self._window_closed:
            return
        self._window_closed = True
        await self.window.close()

    async def run(self, url: str, options: str = "") -> LoginResult:
        """Open the login window and wait for the flow to settle.

        The window is closed on every way out of this coroutine except an
        exit or load-error signal (or a callback without a token), which
        leave it to the user.

        Raises:
            InAppBrowserExitError: If the user closed the window.
            InAppBrowserLoadError: If the window failed to load.
            InAppBrowserError: If the callback carried no token.
        """
        if self.state is not FlowState.PENDING:
            raise RuntimeError("In-app browser flow can only run once")

        self._outcome = asyncio.get_running_loop().create_future()
        self.window = await self.browser.open(url, WINDOW_TARGET, options)
        self._transition(FlowState.WINDOW_OPEN)

        for event, listener in self._listeners().items():
            self.window.add_event_listener(event, listener)

        try:
            return await self._outcome
        except asyncio.CancelledError:
            if not self.state.is_terminal:
                self._detach(EXIT, LOAD_ERROR, NAVIGATION_START)
                self._transition(FlowState.CANCELLED)
            raise
        finally:
            if not self._left_open:
                await self._close_window()
