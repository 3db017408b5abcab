"""Exceptions for cloud authentication."""


class CloudAuthError(Exception):
    """Base exception for all authentication errors."""


class AuthValidationError(CloudAuthError):
    """Required input was missing or malformed; raised before any I/O."""


class DetailedError(CloudAuthError):
    """Error carrying an ordered list of machine-readable codes.

    Raised by signup, either from local validation (``required_email``,
    ``invalid_email``, ``required_password``) or from field-level errors
    reported by the backend (``{error_type}_{parameter}``).
    """

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    def __repr__(self) -> str:
        return f"DetailedError({self.message!r}, {self.details!r})"


class UnknownAuthModuleError(CloudAuthError):
    """No authentication strategy is registered under the given module ID."""

    def __init__(self, module_id: object):
        super().__init__(f"Authentication class is invalid or missing: {module_id}")
        self.module_id = module_id


class CapabilityMissingError(CloudAuthError):
    """The host environment lacks an embedded browser."""


class CloudAPIError(CloudAuthError):
    """Backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(CloudAPIError):
    """Network-level failure talking to the backend."""


class InAppBrowserError(CloudAuthError):
    """Base exception for embedded-browser login failures."""


class InAppBrowserExitError(InAppBrowserError):
    """User closed the login window before completing the flow."""

    def __init__(self, message: str = "InAppBrowser exit"):
        super().__init__(message)


class InAppBrowserLoadError(InAppBrowserError):
    """The login window failed to load a page."""

    def __init__(self, message: str = "InAppBrowser loaderror", url: str | None = None):
        super().__init__(message)
        self.url = url
