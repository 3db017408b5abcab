"""Auth token lifecycle over durable and session storage."""

import logging

from cloud_auth.storage import Storage

logger = logging.getLogger(__name__)


def token_label(app_id: str) -> str:
    """Storage label under which the auth token for an app is kept."""
    return f"auth_{app_id}"


class TokenContext:
    """Reads and writes a single auth token in one storage."""

    def __init__(self, storage: Storage, label: str):
        self.storage = storage
        self.label = label

    def get(self) -> str | None:
        return self.storage.get(self.label)

    def store(self, token: str) -> None:
        self.storage.set(self.label, token)

    def delete(self) -> None:
        self.storage.delete(self.label)


class CombinedTokenContext:
    """Auth token split over a durable slot and a temporary slot.

    Logins with "remember me" write the durable slot, others the temporary
    one. On read the temporary token shadows the durable one, so a
    session-only login takes effect even when an older remembered token
    still exists.
    """

    def __init__(self, storage: Storage, temp_storage: Storage, label: str):
        self.storage = storage
        self.temp_storage = temp_storage
        self.label = label

    def get(self) -> str | None:
        """Return the temporary token if set, else the durable one."""
        perm_token = self.storage.get(self.label)
        temp_token = self.temp_storage.get(self.label)
        return temp_token or perm_token or None

    def store(self, token: str, permanent: bool = True) -> None:
        """Write the token to exactly one slot; the other is left alone."""
        if permanent:
            self.storage.set(self.label, token)
        else:
            self.temp_storage.set(self.label, token)
        logger.debug(f"Stored auth token ({'durable' if permanent else 'temporary'} slot)")

    def delete(self) -> None:
        """Clear both slots."""
        self.storage.delete(self.label)
        self.temp_storage.delete(self.label)
