"""Current-user profile, loaded from the backend and cached in local storage."""

import json
import logging
from typing import Any, Protocol

from cloud_auth.api.client import CloudClient
from cloud_auth.storage import Storage

logger = logging.getLogger(__name__)


def user_label(app_id: str) -> str:
    """Storage label under which the current user for an app is kept."""
    return f"user_{app_id}"


class UserContext:
    """Persists the current user as JSON in local storage."""

    def __init__(self, storage: Storage, app_id: str):
        self.storage = storage
        self.label = user_label(app_id)

    def load(self) -> "User | None":
        raw = self.storage.get(self.label)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt stored user profile")
            return None
        return User(self, id=data.get("id"), details=data.get("details"), data=data.get("data"))

    def store(self, user: "User") -> None:
        self.storage.set(self.label, json.dumps(user.to_dict()))

    def unstore(self) -> None:
        self.storage.delete(self.label)


class User:
    """A user profile; anonymous until it has an ID."""

    def __init__(
        self,
        context: UserContext,
        id: str | None = None,
        details: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ):
        self._context = context
        self.id = id
        self.details: dict[str, Any] = dict(details or {})
        self.data: dict[str, Any] = dict(data or {})

    def is_anonymous(self) -> bool:
        return not self.id

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "details": self.details, "data": self.data}

    def store(self) -> None:
        """Persist this user as the current user."""
        self._context.store(self)

    def unstore(self) -> None:
        """Remove the persisted current user."""
        self._context.unstore()

    def clear(self) -> None:
        """Reset to an anonymous user."""
        self.id = None
        self.details = {}
        self.data = {}


class UserService(Protocol):
    """What the auth façade needs from the user-profile service."""

    async def load(self) -> None: ...

    def current(self) -> User: ...


class SingleUserService:
    """Tracks the single signed-in user of this app."""

    def __init__(self, client: CloudClient, context: UserContext):
        self.client = client
        self.context = context
        self._user: User | None = None

    def current(self) -> User:
        """Return the cached user, the stored user, or a new anonymous one."""
        if self._user is None:
            self._user = self.context.load() or User(self.context)
        return self._user

    async def load(self) -> None:
        """Fetch the signed-in user's profile into ``current()``.

        Raises:
            CloudAPIError: If the backend rejected the request.
        """
        result = await self.client.get("/users/self")
        payload = result.unwrap() or {}

        user = self.current()
        user.id = payload.get("uuid") or payload.get("id")
        user.details = dict(payload.get("details") or {})
        user.data = dict(payload.get("custom") or {})
        logger.debug("Loaded current user profile")
