"""Tests for the embedded-browser login flow."""

import asyncio

import pytest
from conftest import FakeBrowser, wait_for_window

from cloud_auth.auth.inapp_browser import (
    EXIT,
    LOAD_ERROR,
    NAVIGATION_START,
    WINDOW_TARGET,
    FlowState,
    InAppBrowserFlow,
    is_callback_url,
    parse_callback_params,
    parse_signup_flag,
)
from cloud_auth.exceptions import (
    InAppBrowserError,
    InAppBrowserExitError,
    InAppBrowserLoadError,
)

LOGIN_URL = "https://provider.test/login"


class TestCallbackHelpers:
    """Tests for callback URL parsing."""

    def test_is_callback_url_matches_host(self):
        assert is_callback_url("http://auth.test/?token=ABC", "auth.test")
        assert is_callback_url("https://auth.test:8443/cb", "auth.test")

    def test_is_callback_url_rejects_other_hosts(self):
        assert not is_callback_url("https://provider.test/?token=ABC", "auth.test")
        assert not is_callback_url("https://evil.test/auth.test", "auth.test")
        assert not is_callback_url(None, "auth.test")
        assert not is_callback_url("", "auth.test")

    def test_parse_callback_params(self):
        assert parse_callback_params("http://auth.test/?token=ABC&signup=1") == {
            "token": "ABC",
            "signup": "1",
        }

    def test_parse_callback_params_ignores_fragment(self):
        assert parse_callback_params("http://auth.test/?token=ABC#/home") == {"token": "ABC"}

    def test_parse_callback_params_decodes(self):
        assert parse_callback_params("http://auth.test/?token=a%2Bb")["token"] == "a+b"

    @pytest.mark.parametrize(
        "value,expected",
        [("1", True), ("0", False), ("2", True), (None, False), ("", False), ("yes", False)],
    )
    def test_parse_signup_flag(self, value, expected):
        assert parse_signup_flag(value) is expected


@pytest.mark.asyncio
class TestInAppBrowserFlow:
    """Tests for InAppBrowserFlow state handling."""

    async def test_opens_window_with_target_and_options(self, browser):
        """The window opens at the login URL in a new target."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL, "location=no"))
        window = await wait_for_window(browser)

        assert browser.opened == [(LOGIN_URL, WINDOW_TARGET, "location=no")]
        assert flow.state is FlowState.WINDOW_OPEN
        assert all(window.listeners[e] for e in (EXIT, LOAD_ERROR, NAVIGATION_START))

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_callback_resolves_token(self, browser):
        """A redirect to the auth host yields the token and signup flag."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "http://auth.test/?token=ABC&signup=1")
        result = await task

        assert result.token == "ABC"
        assert result.signup is True
        assert flow.state is FlowState.TOKEN_OBTAINED
        assert window.removed == [EXIT, LOAD_ERROR]
        assert window.close_count == 1

    async def test_signup_flag_zero(self, browser):
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "http://auth.test/?token=ABC&signup=0")

        assert (await task).signup is False

    async def test_other_hosts_are_ignored(self, browser):
        """Navigation inside the provider's pages does not settle the flow."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "https://provider.test/consent?token=NOPE")
        await asyncio.sleep(0)

        assert not task.done()
        assert flow.state is FlowState.WINDOW_OPEN

        window.fire(NAVIGATION_START, "http://auth.test/?token=REAL&signup=0")
        assert (await task).token == "REAL"

    async def test_exit_cancels(self, browser):
        """Closing the window fails with an exit error and leaves it alone."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(EXIT)

        with pytest.raises(InAppBrowserExitError, match="InAppBrowser exit"):
            await task
        assert flow.state is FlowState.CANCELLED
        assert not window.closed

    async def test_load_error_fails(self, browser):
        """A load error fails the flow and keeps the window open."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(LOAD_ERROR, LOGIN_URL)

        with pytest.raises(InAppBrowserLoadError, match="InAppBrowser loaderror"):
            await task
        assert flow.state is FlowState.FAILED
        assert not window.closed

    async def test_first_signal_wins(self, browser):
        """Signals after the flow settled are ignored."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(LOAD_ERROR, LOGIN_URL)
        window.fire(EXIT)
        window.fire(NAVIGATION_START, "http://auth.test/?token=LATE")

        with pytest.raises(InAppBrowserLoadError):
            await task
        assert flow.state is FlowState.FAILED

    async def test_navigation_after_success_is_inert(self, browser):
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "http://auth.test/?token=FIRST")
        window.fire(NAVIGATION_START, "http://auth.test/?token=SECOND")

        assert (await task).token == "FIRST"
        assert window.close_count == 1

    async def test_callback_without_token_fails(self, browser):
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "http://auth.test/?signup=1")

        with pytest.raises(InAppBrowserError, match="did not include a token"):
            await task
        assert flow.state is FlowState.FAILED

    async def test_cancellation_closes_window(self, browser):
        """Cancelling the awaiting task detaches every listener and closes the window."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert flow.state is FlowState.CANCELLED
        assert sorted(window.removed) == sorted([EXIT, LOAD_ERROR, NAVIGATION_START])
        assert not any(window.listeners.values())
        assert window.close_count == 1

    async def test_cancel_after_token_still_closes_window(self, browser):
        """A token that arrives just before cancellation does not leave the window open."""
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(NAVIGATION_START, "http://auth.test/?token=ABC&signup=0")
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert flow.state is FlowState.TOKEN_OBTAINED
        assert window.close_count == 1

    async def test_cancel_after_load_error_leaves_window(self, browser):
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)

        window.fire(LOAD_ERROR, LOGIN_URL)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert flow.state is FlowState.FAILED
        assert not window.closed

    async def test_run_only_once(self, browser):
        flow = InAppBrowserFlow(browser, "auth.test")
        task = asyncio.create_task(flow.run(LOGIN_URL))
        window = await wait_for_window(browser)
        window.fire(NAVIGATION_START, "http://auth.test/?token=ABC")
        await task

        with pytest.raises(RuntimeError):
            await flow.run(LOGIN_URL)

    async def test_separate_flows_are_independent(self):
        """Two flows on two windows settle independently."""
        first_browser, second_browser = FakeBrowser(), FakeBrowser()
        first = asyncio.create_task(InAppBrowserFlow(first_browser, "auth.test").run(LOGIN_URL))
        second = asyncio.create_task(InAppBrowserFlow(second_browser, "auth.test").run(LOGIN_URL))
        first_window = await wait_for_window(first_browser)
        second_window = await wait_for_window(second_browser)

        second_window.fire(EXIT)
        first_window.fire(NAVIGATION_START, "http://auth.test/?token=ONE")

        assert (await first).token == "ONE"
        with pytest.raises(InAppBrowserExitError):
            await second
