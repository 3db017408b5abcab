"""Authentication module for cloud-auth."""

from cloud_auth.auth.core import Auth
from cloud_auth.auth.inapp_browser import (
    BrowserEvent,
    BrowserWindow,
    EmbeddedBrowser,
    FlowState,
    InAppBrowserFlow,
)
from cloud_auth.auth.models import (
    AuthModuleId,
    InAppBrowserOptions,
    LoginOptions,
    LoginResult,
    UserDetails,
)
from cloud_auth.auth.playwright_host import PlaywrightBrowser, is_gui_available
from cloud_auth.auth.strategies import (
    AuthType,
    BasicAuth,
    CustomAuth,
    FacebookAuth,
    GithubAuth,
    GoogleAuth,
    InstagramAuth,
    LinkedInAuth,
    RedirectAuth,
    TwitterAuth,
    build_auth_modules,
)
from cloud_auth.auth.token_context import CombinedTokenContext, TokenContext

__all__ = [
    # Façade
    "Auth",
    # Token storage
    "TokenContext",
    "CombinedTokenContext",
    # Strategies
    "AuthType",
    "BasicAuth",
    "RedirectAuth",
    "CustomAuth",
    "TwitterAuth",
    "FacebookAuth",
    "GithubAuth",
    "GoogleAuth",
    "InstagramAuth",
    "LinkedInAuth",
    "build_auth_modules",
    # Embedded browser
    "BrowserEvent",
    "BrowserWindow",
    "EmbeddedBrowser",
    "FlowState",
    "InAppBrowserFlow",
    "PlaywrightBrowser",
    "is_gui_available",
    # Models
    "AuthModuleId",
    "InAppBrowserOptions",
    "LoginOptions",
    "LoginResult",
    "UserDetails",
]
