"""API module for cloud-auth."""

from cloud_auth.api.client import CloudClient
from cloud_auth.api.models import APIErrorDetail, APIFailure, APIResult, APISuccess

__all__ = [
    "CloudClient",
    "APIErrorDetail",
    "APIFailure",
    "APIResult",
    "APISuccess",
]
