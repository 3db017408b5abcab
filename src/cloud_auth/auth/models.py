"""Models exchanged between the auth façade and its strategies."""

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuthModuleId(StrEnum):
    """Identifiers of the available authentication strategies."""

    BASIC = "basic"
    CUSTOM = "custom"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    GITHUB = "github"
    GOOGLE = "google"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"


class InAppBrowserOptions(BaseModel):
    """Window options for the embedded login browser.

    Unknown keys are kept and passed through to the browser host as-is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    location: bool = False
    clear_cache: bool = Field(
        default=True,
        alias="clearcache",
        validation_alias=AliasChoices("clearcache", "clearCache", "clear_cache"),
    )
    clear_session_cache: bool = Field(
        default=True,
        alias="clearsessioncache",
        validation_alias=AliasChoices("clearsessioncache", "clearSessionCache", "clear_session_cache"),
    )

    def to_option_string(self) -> str:
        """Render as ``key=yes|no`` / ``key=value`` pairs joined by commas."""
        parts = []
        for key, value in self.model_dump(by_alias=True).items():
            if isinstance(value, bool):
                value = "yes" if value else "no"
            parts.append(f"{key}={value}")
        return ",".join(parts)


class LoginOptions(BaseModel):
    """Options for a single login call."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    remember: bool = True
    inappbrowser_options: InAppBrowserOptions = Field(
        default_factory=InAppBrowserOptions,
        validation_alias=AliasChoices(
            "inappbrowser_options", "inAppBrowserOptions", "embeddedBrowserOptions"
        ),
    )

    @classmethod
    def normalize(cls, options: "LoginOptions | dict[str, Any] | None") -> "LoginOptions":
        """Build options from None, a plain dict, or an existing instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(options)


class LoginResult(BaseModel):
    """Outcome of a successful authentication."""

    token: str
    signup: bool | None = None


class UserDetails(BaseModel):
    """Details describing a user for email/password signup."""

    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    password: str | None = None
    username: str | None = None
    name: str | None = None
    image: str | None = None
    custom: dict[str, Any] | None = None
