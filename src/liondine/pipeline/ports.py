"""Ports the orchestrator depends on.

The orchestrator only sees these two interfaces. Production wiring uses the
LionDine page fetcher and the LLM structurer; tests and offline runs swap in
deterministic implementations without touching the orchestrator.
"""

from abc import ABC, abstractmethod
from typing import Any

from liondine.models import MealCategory


class MenuFetcher(ABC):
    """Port: retrieve raw menu text for a meal category."""

    @abstractmethod
    async def fetch(self, category: MealCategory) -> str:
        """Return the page text for ``category``.

        Raises:
            UpstreamFetchFailed: If the source is unreachable or errors
        """
        ...


class MenuStructurer(ABC):
    """Port: turn raw menu text into a structured menu payload.

    Implementations own the extraction policy (closure detection, hours
    formatting, station grouping) and must return stations empty for any
    hall whose status is ``closed``.
    """

    @abstractmethod
    async def structure(self, text: str, category: MealCategory) -> dict[str, Any]:
        """Return a JSON object shaped like a MenuRecord.

        Raises:
            StructuringFailed: If the call errors or returns no JSON object
        """
        ...
