"""Composition root: builds the auth object graph once, explicitly."""

from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from cloud_auth.api.client import CloudClient
from cloud_auth.auth.core import Auth
from cloud_auth.auth.inapp_browser import EmbeddedBrowser
from cloud_auth.auth.models import AuthModuleId
from cloud_auth.auth.playwright_host import PlaywrightBrowser
from cloud_auth.auth.strategies import AuthType, build_auth_modules
from cloud_auth.auth.token_context import CombinedTokenContext, token_label
from cloud_auth.config import Settings, get_settings
from cloud_auth.events import EventEmitter
from cloud_auth.storage import JsonFileStorage, KeyringStorage, MemoryStorage, Storage
from cloud_auth.user import SingleUserService, UserContext


@dataclass
class AuthContainer:
    """Every object the auth subsystem needs, each built exactly once."""

    settings: Settings
    local_storage: Storage
    token_context: CombinedTokenContext
    client: CloudClient
    emitter: EventEmitter
    user_service: SingleUserService
    browser: EmbeddedBrowser
    auth_modules: Mapping[AuthModuleId, AuthType]
    auth: Auth

    async def aclose(self) -> None:
        try:
            await self.browser.aclose()
        finally:
            await self.client.aclose()

    async def __aenter__(self) -> "AuthContainer":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def build_auth(
    settings: Settings | None = None,
    *,
    storage: Storage | None = None,
    temp_storage: Storage | None = None,
    local_storage: Storage | None = None,
    browser: EmbeddedBrowser | None = None,
    emitter: EventEmitter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AuthContainer:
    """Wire up the auth subsystem.

    Defaults: tokens that should be remembered go to the OS keyring,
    session tokens stay in memory, local app data goes to a JSON file in
    the cache directory, and redirect logins open a Playwright browser.

    Raises:
        ValueError: If no valid app ID is configured.
    """
    settings = settings or get_settings()
    app_id = settings.require_app_id()

    local_storage = local_storage or JsonFileStorage(settings.local_storage_file)
    token_context = CombinedTokenContext(
        storage=storage or KeyringStorage(),
        temp_storage=temp_storage or MemoryStorage(),
        label=token_label(app_id),
    )
    client = CloudClient(settings, token_source=token_context, transport=transport)
    emitter = emitter or EventEmitter()
    user_service = SingleUserService(client, UserContext(local_storage, app_id))
    if browser is None:
        browser = PlaywrightBrowser(settings)
    auth_modules = build_auth_modules(settings, client, browser)

    auth = Auth(
        settings=settings,
        emitter=emitter,
        auth_modules=auth_modules,
        token_context=token_context,
        user_service=user_service,
        storage=local_storage,
    )

    return AuthContainer(
        settings=settings,
        local_storage=local_storage,
        token_context=token_context,
        client=client,
        emitter=emitter,
        user_service=user_service,
        browser=browser,
        auth_modules=auth_modules,
        auth=auth,
    )
