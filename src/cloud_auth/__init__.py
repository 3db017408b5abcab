"""Client-side authentication for the cloud app backend."""

__version__ = "0.1.0"

from cloud_auth.auth import Auth, AuthModuleId, LoginOptions, LoginResult  # noqa: E402
from cloud_auth.container import AuthContainer, build_auth  # noqa: E402
from cloud_auth.exceptions import (  # noqa: E402
    AuthValidationError,
    CapabilityMissingError,
    CloudAPIError,
    CloudAuthError,
    DetailedError,
    InAppBrowserError,
    InAppBrowserExitError,
    InAppBrowserLoadError,
    TransportError,
    UnknownAuthModuleError,
)

__all__ = [
    "__version__",
    "Auth",
    "AuthContainer",
    "AuthModuleId",
    "LoginOptions",
    "LoginResult",
    "build_auth",
    "AuthValidationError",
    "CapabilityMissingError",
    "CloudAPIError",
    "CloudAuthError",
    "DetailedError",
    "InAppBrowserError",
    "InAppBrowserExitError",
    "InAppBrowserLoadError",
    "TransportError",
    "UnknownAuthModuleError",
]
