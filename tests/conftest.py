"""Shared fixtures: a controllable clock, sample menus, and stub pipeline ports."""

import asyncio
import copy
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from liondine.models import MealCategory, MenuRecord
from liondine.pipeline.ports import MenuFetcher, MenuStructurer

MENU_TEXT = (
    "John Jay 11:00 AM to 2:30 PM Main Line Grilled Chicken Rice Pilaf "
    "Roasted Broccoli Vegan Station Tofu Stir Fry Brown Rice "
    "Ferris Closed for lunch JJ's 12:00 PM to 10:00 AM Grill Cheeseburger Fries"
)

SAMPLE_PAYLOAD: dict[str, Any] = {
    "mealType": "lunch",
    "timestamp": "2026-01-28T16:00:00+00:00",
    "diningHalls": [
        {
            "name": "John Jay",
            "hours": "11:00 AM to 2:30 PM",
            "status": "open",
            "stations": [
                {"name": "Main Line", "items": ["Grilled Chicken", "Rice Pilaf", "Roasted Broccoli"]},
                {"name": "Vegan Station", "items": ["Tofu Stir Fry", "Brown Rice"]},
            ],
        },
        {"name": "Ferris", "hours": "", "status": "closed", "stations": []},
        {
            "name": "JJ's",
            "hours": "12:00 PM to 10:00 AM",
            "status": "open",
            "stations": [{"name": "Grill", "items": ["Cheeseburger", "Fries"]}],
        },
    ],
}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class StubFetcher(MenuFetcher):
    """Returns fixed text (or raises) after an optional delay; counts calls."""

    def __init__(self, text: str = MENU_TEXT, error: Exception | None = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch(self, category: MealCategory) -> str:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


class StubStructurer(MenuStructurer):
    """Returns a fixed payload (or raises) after an optional delay; counts calls."""

    def __init__(self, payload: Any = None, error: Exception | None = None, delay: float = 0.0):
        self.payload = copy.deepcopy(SAMPLE_PAYLOAD) if payload is None else payload
        self.error = error
        self.delay = delay
        self.calls = 0

    async def structure(self, text: str, category: MealCategory) -> Any:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2026-01-28 12:00 UTC."""
    return FakeClock(datetime(2026, 1, 28, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def lunch_record(sample_payload) -> MenuRecord:
    return MenuRecord.from_payload(sample_payload, MealCategory.LUNCH)


@pytest.fixture
def make_fetcher():
    """Factory for StubFetcher."""
    return StubFetcher


@pytest.fixture
def make_structurer():
    """Factory for StubStructurer."""
    return StubStructurer
