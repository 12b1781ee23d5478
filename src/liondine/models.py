"""Menu data model.

Field names serialise in camelCase (``mealType``, ``diningHalls``) so a
record stored or returned by this service has exactly the shape the
structuring prompt asks the LLM for.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from liondine.errors import InvalidCategory, SchemaInvalid


class MealCategory(Enum):
    """Meal periods published by LionDine, one page each."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    LATENIGHT = "latenight"

    def get_label(self) -> str:
        """Human-readable label for display."""
        if self is MealCategory.LATENIGHT:
            return "Late Night"
        return self.value.capitalize()


VALID_CATEGORIES = tuple(c.value for c in MealCategory)


def parse_category(value: "str | MealCategory") -> MealCategory:
    """Validate a caller-supplied category.

    Args:
        value: Category name (case-insensitive) or MealCategory

    Returns:
        The matching MealCategory

    Raises:
        InvalidCategory: If value is not one of breakfast, lunch, dinner, latenight
    """
    if isinstance(value, MealCategory):
        return value
    if isinstance(value, str):
        try:
            return MealCategory(value.strip().lower())
        except ValueError:
            pass
    raise InvalidCategory(
        f"Invalid meal type {value!r}. Must be one of: {', '.join(VALID_CATEGORIES)}"
    )


class Station(BaseModel):
    """A serving station and the dishes it offers."""

    model_config = ConfigDict(frozen=True)

    name: str
    items: list[str] = Field(default_factory=list)


class DiningHall(BaseModel):
    """One dining hall's listing for a meal period."""

    model_config = ConfigDict(frozen=True)

    name: str
    hours: str = ""
    status: Literal["open", "closed"] = "open"
    stations: list[Station] = Field(default_factory=list)

    @field_validator("hours", mode="before")
    @classmethod
    def _hours_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("status", mode="before")
    @classmethod
    def _status_lower(cls, v: Any) -> Any:
        if v is None:
            return "open"
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"


class MenuRecord(BaseModel):
    """Structured menu for one meal category, as produced per day."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    meal_type: MealCategory = Field(alias="mealType")
    timestamp: datetime
    dining_halls: list[DiningHall] = Field(alias="diningHalls")

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        category: MealCategory,
        generated_at: datetime | None = None,
    ) -> "MenuRecord":
        """Validate a structurer payload into a MenuRecord.

        ``mealType`` is always taken from the requested category and
        ``timestamp`` falls back to ``generated_at`` (or now) when absent.

        Raises:
            SchemaInvalid: If ``diningHalls`` is missing or not a list, or any
                nested field fails validation
        """
        halls = payload.get("diningHalls")
        if halls is None:
            raise SchemaInvalid("Invalid menu data structure: 'diningHalls' is missing")
        if not isinstance(halls, list):
            raise SchemaInvalid(
                f"Invalid menu data structure: 'diningHalls' is {type(halls).__name__}, not a list"
            )

        data = dict(payload)
        data["mealType"] = category.value
        if not data.get("timestamp"):
            data["timestamp"] = generated_at or datetime.now(timezone.utc)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SchemaInvalid(f"Invalid menu data structure: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict with camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "MenuRecord":
        return cls.model_validate_json(raw)

    def open_halls(self) -> list[DiningHall]:
        """Dining halls serving this meal."""
        return [h for h in self.dining_halls if not h.is_closed]
