"""Auth façade: the single public entry point for authentication."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from cloud_auth.api.models import APIFailure
from cloud_auth.auth.models import AuthModuleId, LoginOptions, LoginResult, UserDetails
from cloud_auth.auth.strategies import AuthType, BasicAuth, detailed_error_from_failure
from cloud_auth.auth.token_context import CombinedTokenContext
from cloud_auth.config import Settings
from cloud_auth.events import TOKEN_CHANGED, EventEmitter
from cloud_auth.exceptions import AuthValidationError, DetailedError, UnknownAuthModuleError
from cloud_auth.storage import Storage
from cloud_auth.user import UserService

logger = logging.getLogger(__name__)

PASSWORD_RESET_EMAIL_KEY = "auth_password_reset_email"


class Auth:
    """Handles authentication of a single user.

    Covers signing up, logging in and out, password resets, and social
    provider logins. The stored token decides whether the user is logged
    in; ``is_authenticated()`` and ``get_token()`` always read it back from
    the token context.

    Logins are serialized per instance: a second ``login()`` waits for the
    first to finish before it starts.
    """

    def __init__(
        self,
        settings: Settings,
        emitter: EventEmitter,
        auth_modules: Mapping[AuthModuleId, AuthType],
        token_context: CombinedTokenContext,
        user_service: UserService,
        storage: Storage,
    ):
        self.settings = settings
        self.emitter = emitter
        self.auth_modules = auth_modules
        self.token_context = token_context
        self.user_service = user_service
        self.storage = storage
        self._auth_token: str | None = None
        self._login_lock = asyncio.Lock()

    @property
    def basic(self) -> BasicAuth:
        module = self.auth_modules[AuthModuleId.BASIC]
        assert isinstance(module, BasicAuth)
        return module

    @property
    def password_reset_url(self) -> str:
        """Hosted password reset form for email/password users."""
        return f"{self.settings.web_url}/password/reset/{self.settings.require_app_id()}"

    def is_authenticated(self) -> bool:
        """Check whether an auth token is stored."""
        return bool(self.token_context.get())

    def _resolve_module(self, module_id: AuthModuleId | str) -> AuthType:
        try:
            key = AuthModuleId(module_id)
        except ValueError:
            raise UnknownAuthModuleError(module_id) from None
        module = self.auth_modules.get(key)
        if module is None:
            raise UnknownAuthModuleError(module_id)
        return module

    async def login(
        self,
        module_id: AuthModuleId | str,
        credentials: Mapping[str, Any] | None = None,
        options: LoginOptions | dict[str, Any] | None = None,
    ) -> LoginResult:
        """Log in with the given strategy.

        For email/password authentication pass ``email`` and ``password`` in
        ``credentials``; for social logins leave it out; for custom
        authentication send whatever the backend expects.

        After the strategy succeeds the token is stored (durably unless
        ``remember`` is off), the full user is loaded from the backend and
        saved locally, and ``auth:token-changed`` is emitted.

        Raises:
            UnknownAuthModuleError: If ``module_id`` names no strategy.
            AuthValidationError: If required credentials are missing.
            CloudAPIError: If the backend rejects the login.
            InAppBrowserError: If a redirect login is dismissed or fails.
        """
        options = LoginOptions.normalize(options)
        module = self._resolve_module(module_id)

        async with self._login_lock:
            logger.info(f"Logging in with {module.module_id}")
            result = await module.authenticate(credentials, options)
            self.store_token(result.token, options)

            await self.user_service.load()
            self.user_service.current().store()

        logger.info("Login successful")
        return result

    def logout(self) -> None:
        """Clear the stored token and the locally stored user."""
        self.token_context.delete()
        user = self.user_service.current()
        user.unstore()
        user.clear()
        logger.info("Logged out")

    async def signup(self, details: UserDetails | Mapping[str, Any]) -> None:
        """Sign up a user with email/password authentication.

        Does not log the user in; call ``login()`` afterwards.

        Raises:
            DetailedError: With machine-readable codes in ``details``.
        """
        await self.basic.signup(details)

    async def request_password_reset(self, email: str) -> None:
        """Start a password reset; the user receives a code by email."""
        self.storage.set(PASSWORD_RESET_EMAIL_KEY, email)
        await self.basic.request_password_reset(email)

    async def confirm_password_reset(self, code: int | str, new_password: str) -> None:
        """Finish a password reset started with ``request_password_reset()``.

        Raises:
            AuthValidationError: If no reset was requested from this device.
        """
        email = self.storage.get(PASSWORD_RESET_EMAIL_KEY)
        if not email:
            raise AuthValidationError("email address not found in local storage")
        await self.basic.confirm_password_reset(email, code, new_password)

    def get_token(self) -> str | None:
        """Get the raw auth token of the active user."""
        return self.token_context.get()

    def store_token(self, token: str, options: LoginOptions | None = None) -> None:
        """Store a token and announce the change."""
        options = options or LoginOptions()
        original_token = self._auth_token
        self._auth_token = token
        self.token_context.store(token, permanent=options.remember)
        self.emitter.emit(TOKEN_CHANGED, {"old": original_token, "new": token})

    @staticmethod
    def get_detailed_error_from_response(failure: APIFailure) -> DetailedError:
        """Build the signup ``DetailedError`` for a backend failure."""
        return detailed_error_from_failure(failure)
