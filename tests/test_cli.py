"""Tests for the command line interface."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from cloud_auth import __version__
from cloud_auth.auth.models import AuthModuleId, LoginOptions, LoginResult
from cloud_auth.cli.errors import get_error_type
from cloud_auth.exceptions import (
    AuthValidationError,
    CapabilityMissingError,
    CloudAPIError,
    DetailedError,
    InAppBrowserExitError,
    InAppBrowserLoadError,
    TransportError,
    UnknownAuthModuleError,
)
from cloud_auth.main import app

runner = CliRunner()


class TestErrorTypes:
    """Tests for mapping exceptions onto friendly messages."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (DetailedError("Error creating user", ["conflict_email"]), "signup_rejected"),
            (AuthValidationError("missing"), "invalid_input"),
            (UnknownAuthModuleError("myspace"), "unknown_module"),
            (CapabilityMissingError("InAppBrowser plugin missing"), "no_browser"),
            (InAppBrowserExitError(), "browser_closed"),
            (InAppBrowserLoadError(), "browser_load_error"),
            (TransportError("down"), "network_error"),
            (CloudAPIError("nope", 401), "auth_failed"),
            (CloudAPIError("nope", 403), "auth_failed"),
            (CloudAPIError("boom", 503), "server_error"),
            (CloudAPIError("bad", 400), "api_error"),
            (ValueError("App ID cannot be empty"), "no_app_id"),
            (RuntimeError("?"), "unknown"),
        ],
    )
    def test_get_error_type(self, error, expected):
        assert get_error_type(error) == expected


class TestCommands:
    """Tests for CLI commands with the auth container mocked out."""

    @pytest.fixture(autouse=True)
    def cli_settings(self, settings):
        with patch("cloud_auth.cli.commands.auth.get_settings", return_value=settings):
            yield settings

    @pytest.fixture
    def run_with_auth(self):
        with patch("cloud_auth.cli.commands.auth.run_with_auth") as mock:
            yield mock

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_basic_login(self, run_with_auth):
        run_with_auth.return_value = LoginResult(token="T")

        result = runner.invoke(app, ["login", "basic", "--email", "a@b.com", "--password", "p"])

        assert result.exit_code == 0, result.output
        assert "Login successful" in result.output
        assert "browser" in run_with_auth.call_args.kwargs

    def test_login_runs_auth_login(self, run_with_auth):
        """The action passed to the container calls Auth.login with the CLI values."""
        captured = {}

        def fake_run(action, **kwargs):
            container = MagicMock()

            async def login(module, credentials, options):
                captured.update(module=module, credentials=credentials, options=options)
                return LoginResult(token="T")

            container.auth.login = login
            coro = action(container)
            try:
                coro.send(None)
            except StopIteration as stop:
                return stop.value

        run_with_auth.side_effect = fake_run

        result = runner.invoke(
            app, ["login", "basic", "-e", "a@b.com", "-p", "p", "--no-remember"]
        )

        assert result.exit_code == 0, result.output
        assert captured["module"] is AuthModuleId.BASIC
        assert captured["credentials"] == {"email": "a@b.com", "password": "p"}
        assert captured["options"] == LoginOptions(remember=False)
        assert "not be remembered" in result.output

    def test_social_login_reports_signup(self, run_with_auth):
        run_with_auth.return_value = LoginResult(token="T", signup=True)

        result = runner.invoke(app, ["login", "github", "--headless"])

        assert result.exit_code == 0, result.output
        assert "new account" in result.output

    def test_login_error_is_formatted(self, run_with_auth):
        run_with_auth.side_effect = InAppBrowserExitError()

        result = runner.invoke(app, ["login", "google"])

        assert result.exit_code == 1
        assert "Login cancelled" in result.output

    def test_login_unknown_method_rejected(self, run_with_auth):
        result = runner.invoke(app, ["login", "myspace"])

        assert result.exit_code != 0
        run_with_auth.assert_not_called()

    def test_status_logged_out(self, run_with_auth):
        user = MagicMock()
        user.is_anonymous.return_value = True
        run_with_auth.return_value = (False, user)

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_status_logged_in(self, run_with_auth):
        user = MagicMock()
        user.is_anonymous.return_value = False
        user.id = "u-1"
        user.details = {"email": "a@b.com"}
        run_with_auth.return_value = (True, user)

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "u-1" in result.output
        assert "a@b.com" in result.output

    def test_logout(self, run_with_auth):
        run_with_auth.return_value = True

        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 0
        assert "Logged out" in result.output

    def test_signup_rejected_lists_codes(self, run_with_auth):
        run_with_auth.side_effect = DetailedError("Error creating user", ["conflict_email"])

        result = runner.invoke(app, ["signup", "--email", "a@b.com", "--password", "p"])

        assert result.exit_code == 1
        assert "conflict_email" in result.output

    def test_reset_request(self, run_with_auth):
        result = runner.invoke(app, ["reset-password", "request", "a@b.com"])

        assert result.exit_code == 0, result.output
        assert "Reset code sent" in result.output

    def test_reset_confirm_without_request(self, run_with_auth):
        run_with_auth.side_effect = AuthValidationError("email address not found in local storage")

        result = runner.invoke(
            app, ["reset-password", "confirm", "123456", "--new-password", "secret"]
        )

        assert result.exit_code == 1
        assert "Invalid input" in result.output

    def test_missing_app_id(self, run_with_auth):
        run_with_auth.side_effect = ValueError("App ID cannot be empty")

        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 1
        assert "config set app_id" in result.output


class TestConfigCommands:
    """Tests for the config subcommands."""

    @pytest.fixture(autouse=True)
    def config_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        with patch("cloud_auth.config.CONFIG_PATH", path):
            yield path

    def test_set_and_show(self, config_path):
        result = runner.invoke(app, ["config", "set", "app_id", "abc123"])

        assert result.exit_code == 0, result.output
        assert "app_id: abc123" in config_path.read_text()

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "nope", "1"])

        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_set_invalid_timeout(self):
        result = runner.invoke(app, ["config", "set", "timeout", "500"])

        assert result.exit_code != 0

    def test_set_bool(self, config_path):
        result = runner.invoke(app, ["config", "set", "headless", "yes"])

        assert result.exit_code == 0
        assert "headless: true" in config_path.read_text()
