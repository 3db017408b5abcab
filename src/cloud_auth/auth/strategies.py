"""Authentication strategies.

Each strategy turns user-supplied (or implicit) data into a raw auth token.
``BasicAuth`` talks to the backend directly with an email and password;
every other strategy runs the embedded-browser redirect flow for its
provider.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from cloud_auth.api.client import CloudClient
from cloud_auth.api.models import APIFailure
from cloud_auth.auth.inapp_browser import EmbeddedBrowser, InAppBrowserFlow
from cloud_auth.auth.models import AuthModuleId, LoginOptions, LoginResult, UserDetails
from cloud_auth.config import Settings
from cloud_auth.exceptions import (
    AuthValidationError,
    CapabilityMissingError,
    CloudAPIError,
    DetailedError,
)

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check that an email has a ``local@domain.tld`` shape."""
    return EMAIL_REGEX.match(email) is not None


def detailed_error_from_failure(failure: APIFailure) -> DetailedError:
    """Map backend field errors onto ``{error_type}_{parameter}`` codes.

    Codes keep the order of the response; entries without an
    ``error_type`` are skipped.
    """
    errors = [
        f"{detail.error_type}_{detail.parameter}"
        for detail in failure.details
        if detail.error_type
    ]
    return DetailedError("Error creating user", errors)


class AuthType(ABC):
    """Base class for authentication strategies."""

    module_id: ClassVar[AuthModuleId]

    def __init__(
        self,
        settings: Settings,
        client: CloudClient,
        browser: EmbeddedBrowser | None = None,
    ):
        self.settings = settings
        self.client = client
        self.browser = browser

    @abstractmethod
    async def authenticate(
        self,
        data: Mapping[str, Any] | None = None,
        options: LoginOptions | None = None,
    ) -> LoginResult:
        """Authenticate and return the raw token from the backend."""

    async def inapp_browser_flow(
        self,
        module_id: AuthModuleId,
        data: Mapping[str, Any] | None = None,
        options: LoginOptions | None = None,
    ) -> LoginResult:
        """Run the embedded-browser login for ``module_id``.

        Raises:
            CapabilityMissingError: If no embedded browser is available.
            CloudAPIError: If the backend refused to start the login.
            InAppBrowserError: If the window was closed or failed to load.
        """
        options = LoginOptions.normalize(options)

        if self.browser is None or not self.browser.available():
            raise CapabilityMissingError("InAppBrowser plugin missing")

        result = await self.client.post(
            f"/auth/login/{module_id}",
            json={
                "app_id": self.settings.require_app_id(),
                "callback": self.settings.callback_url,
                "data": dict(data or {}),
            },
        )
        payload = result.unwrap()

        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise CloudAPIError(f"Backend returned no login URL for {module_id}", result.status_code)

        logger.info(f"Opening {module_id} login window")
        flow = InAppBrowserFlow(self.browser, self.settings.auth_host)
        return await flow.run(url, options.inappbrowser_options.to_option_string())


class BasicAuth(AuthType):
    """Email/password authentication, plus signup and password reset."""

    module_id = AuthModuleId.BASIC

    async def authenticate(
        self,
        data: Mapping[str, Any] | None = None,
        options: LoginOptions | None = None,
    ) -> LoginResult:
        data = data or {}
        if not data.get("email") or not data.get("password"):
            raise AuthValidationError("email and password are required for basic authentication")

        result = await self.client.post(
            "/auth/login",
            json={
                "app_id": self.settings.require_app_id(),
                "email": data["email"],
                "password": data["password"],
            },
        )
        payload = result.unwrap()

        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise CloudAPIError("Backend returned no token", result.status_code)
        return LoginResult(token=token)

    async def request_password_reset(self, email: str | None) -> None:
        """Ask the backend to email a password reset code."""
        if not email:
            raise AuthValidationError("Email is required for password reset request.")

        result = await self.client.post(
            "/users/password/reset",
            json={
                "app_id": self.settings.require_app_id(),
                "email": email,
                "flow": "app",
            },
        )
        result.unwrap()

    async def confirm_password_reset(
        self,
        email: str | None,
        code: int | str | None,
        new_password: str | None,
    ) -> None:
        """Set a new password using the code from the reset email."""
        if not code or not email or not new_password:
            raise AuthValidationError("Code, new password, and email are required.")

        result = await self.client.post(
            "/users/password",
            json={
                "reset_token": code,
                "new_password": new_password,
                "email": email,
            },
        )
        result.unwrap()

    async def signup(self, details: UserDetails | Mapping[str, Any]) -> None:
        """Create a user account.

        Raises:
            DetailedError: With codes ``required_email``, ``invalid_email`` or
                ``required_password`` for local validation failures, or
                ``{error_type}_{parameter}`` codes reported by the backend.
            TransportError: If the backend could not be reached.
        """
        if not isinstance(details, UserDetails):
            details = UserDetails.model_validate(dict(details))

        if details.email:
            if not is_valid_email(details.email):
                raise DetailedError("Invalid email supplied.", ["invalid_email"])
        else:
            raise DetailedError("Email is required for email/password auth signup.", ["required_email"])

        if not details.password:
            raise DetailedError("Password is required for email/password auth signup.", ["required_password"])

        user_data: dict[str, Any] = {
            "app_id": self.settings.require_app_id(),
            "email": details.email,
            "password": details.password,
        }

        # optional details
        for key in ("username", "image", "name", "custom"):
            value = getattr(details, key)
            if value:
                user_data[key] = value

        result = await self.client.post("/users", json=user_data)
        if isinstance(result, APIFailure):
            raise detailed_error_from_failure(result)


class RedirectAuth(AuthType):
    """Strategy that logs in through the embedded-browser redirect flow."""

    async def authenticate(
        self,
        data: Mapping[str, Any] | None = None,
        options: LoginOptions | None = None,
    ) -> LoginResult:
        return await self.inapp_browser_flow(self.module_id, data, options)


class CustomAuth(RedirectAuth):
    module_id = AuthModuleId.CUSTOM


class TwitterAuth(RedirectAuth):
    module_id = AuthModuleId.TWITTER


class FacebookAuth(RedirectAuth):
    module_id = AuthModuleId.FACEBOOK


class GithubAuth(RedirectAuth):
    module_id = AuthModuleId.GITHUB


class GoogleAuth(RedirectAuth):
    module_id = AuthModuleId.GOOGLE


class InstagramAuth(RedirectAuth):
    module_id = AuthModuleId.INSTAGRAM


class LinkedInAuth(RedirectAuth):
    module_id = AuthModuleId.LINKEDIN


STRATEGY_CLASSES: tuple[type[AuthType], ...] = (
    BasicAuth,
    CustomAuth,
    TwitterAuth,
    FacebookAuth,
    GithubAuth,
    GoogleAuth,
    InstagramAuth,
    LinkedInAuth,
)


def build_auth_modules(
    settings: Settings,
    client: CloudClient,
    browser: EmbeddedBrowser | None = None,
) -> Mapping[AuthModuleId, AuthType]:
    """Build the fixed, read-only registry of strategies."""
    return MappingProxyType(
        {cls.module_id: cls(settings, client, browser) for cls in STRATEGY_CLASSES}
    )
