"""HTTP client layer for the LionDine menu service.

Async httpx clients for the upstream sources:
- LionDine: per-meal menu pages (HTML)
"""

from liondine.clients.base import BaseAsyncClient, UpstreamHTTPError
from liondine.clients.liondine import LionDineClient

__all__ = [
    "BaseAsyncClient",
    "LionDineClient",
    "UpstreamHTTPError",
]
