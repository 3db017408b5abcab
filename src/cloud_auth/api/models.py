"""Typed results returned by the cloud API client.

Every response is classified once, at the client boundary, into either
``APISuccess`` or ``APIFailure``. Transport failures never produce a
result; they raise ``TransportError`` instead.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from cloud_auth.exceptions import CloudAPIError


class APIErrorDetail(BaseModel):
    """One field-level error reported by the backend."""

    model_config = ConfigDict(extra="ignore")

    error_type: str | None = None
    parameter: str | None = None


@dataclass(frozen=True)
class APISuccess:
    """A 2xx/3xx response; ``data`` is the ``data`` member of the body."""

    status_code: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.data


@dataclass(frozen=True)
class APIFailure:
    """A 4xx/5xx response with the backend's structured error, if any."""

    status_code: int
    message: str
    details: list[APIErrorDetail] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise CloudAPIError(self.message, self.status_code)


APIResult = APISuccess | APIFailure
