"""Error taxonomy for the LionDine menu service.

Every failure the acquisition pipeline can surface is one of the classes
below. Each carries a stable ``kind`` string and a ``retryable`` flag so an
outer layer (CLI, dashboard, HTTP router) can tell "fix your request" apart
from "try again later" without inspecting messages.

    InvalidCategory      caller error, never retryable
    UpstreamFetchFailed  menu page could not be downloaded
    InsufficientContent  page text too short to be a real menu
    StructuringFailed    LLM call failed or returned unparseable content
    SchemaInvalid        LLM content parsed but is not a valid menu record
    CacheUnavailable     durable cache store could not be written
"""

from typing import Any


class MenuServiceError(Exception):
    """Base class for all menu service failures."""

    kind: str = "menu_service_error"
    retryable: bool = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Render the error for a response body."""
        return {
            "error": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }


class InvalidCategory(MenuServiceError):
    """Requested meal category is not one of the known categories."""

    kind = "invalid_category"
    retryable = False


class UpstreamFetchFailed(MenuServiceError):
    """Menu page download failed or timed out."""

    kind = "upstream_fetch_failed"


class InsufficientContent(MenuServiceError):
    """Downloaded page text is shorter than the minimum content length."""

    kind = "insufficient_content"


class StructuringFailed(MenuServiceError):
    """Text-structuring call failed or returned no usable JSON object."""

    kind = "structuring_failed"


class SchemaInvalid(MenuServiceError):
    """Structured output does not match the menu record schema."""

    kind = "schema_invalid"


class CacheUnavailable(MenuServiceError):
    """Durable cache backend could not be read or written."""

    kind = "cache_unavailable"
