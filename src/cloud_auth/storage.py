"""Key/value storage backends used for tokens and local app data.

Three backends share the same synchronous ``get``/``set``/``delete``
contract:

- ``KeyringStorage``: durable, kept in the OS keyring (macOS Keychain,
  Windows Credential Manager, GNOME Keyring / KWallet on Linux)
- ``MemoryStorage``: session-scoped, lost when the process exits
- ``JsonFileStorage``: local app data in a JSON file with owner-only
  permissions
"""

import json
import logging
import os
import stat
from pathlib import Path
from typing import Protocol

import keyring
import keyring.errors

logger = logging.getLogger(__name__)

SERVICE_NAME = "cloud-auth"


class Storage(Protocol):
    """Synchronous key/value store keyed by string label."""

    def get(self, label: str) -> str | None: ...

    def set(self, label: str, value: str) -> None: ...

    def delete(self, label: str) -> None: ...


class KeyringStorage:
    """Durable storage in the OS keyring."""

    def __init__(self, service: str = SERVICE_NAME):
        self.service = service

    def get(self, label: str) -> str | None:
        return keyring.get_password(self.service, label)

    def set(self, label: str, value: str) -> None:
        keyring.set_password(self.service, label, value)

    def delete(self, label: str) -> None:
        try:
            keyring.delete_password(self.service, label)
        except keyring.errors.PasswordDeleteError:
            pass


class MemoryStorage:
    """Session-scoped storage; values live as long as the instance."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, label: str) -> str | None:
        return self._data.get(label)

    def set(self, label: str, value: str) -> None:
        self._data[label] = value

    def delete(self, label: str) -> None:
        self._data.pop(label, None)


class JsonFileStorage:
    """Local app data persisted to a single JSON file.

    The file is rewritten on every mutation and chmod'ed to 0600, since it
    can hold the pending password-reset email and the cached user profile.
    """

    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring corrupt local storage file: {self.path.name}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)
        try:
            os.chmod(self.path, stat.S_IRUSR | stat.S_IWUSR)  # 0600
        except OSError:
            pass

    def get(self, label: str) -> str | None:
        return self._read().get(label)

    def set(self, label: str, value: str) -> None:
        data = self._read()
        data[label] = value
        self._write(data)

    def delete(self, label: str) -> None:
        data = self._read()
        if label in data:
            del data[label]
            self._write(data)
