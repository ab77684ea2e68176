"""Day and meal entry writes."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.catalog import Day, FoodItem, MealEntry, Recipe
from nutrition_cascade.domain.errors import NotFoundError
from nutrition_cascade.domain.inputs import MealEntryCreate, MealEntryUpdate
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.services.cascade import CascadeService
from nutrition_cascade.services.units import convert_multiplier

_logger = logging.getLogger(__name__)


class DayRepository(Protocol):
    """Persistence interface for days and meal entries."""

    def get_day(self, day_id: UUID) -> Day | None:
        """Return a day by id."""

    def get_day_by_date(self, day: date) -> Day | None:
        """Return the day row for a calendar date."""

    def create_day(self, day: date) -> Day:
        """Create an empty day and return it."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""

    def get_meal_entry(self, entry_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""

    def list_meal_entries(self, day_id: UUID) -> list[MealEntry]:
        """Return the meal entries of a day."""

    def create_meal_entry(self, payload: dict[str, object]) -> MealEntry:
        """Create a meal entry and return it."""

    def update_meal_entry(
        self, entry_id: UUID, payload: dict[str, object]
    ) -> MealEntry:
        """Update a meal entry and return it."""

    def delete_meal_entry(self, entry_id: UUID) -> bool:
        """Delete a meal entry."""


@dataclass
class DayService:
    """Application service for the food log."""

    repository: DayRepository
    cascade: CascadeService

    def get_or_create_day(self, day: date) -> Day:
        """Return the day for ``day``, creating it on first use."""
        existing = self.repository.get_day_by_date(day)
        if existing is not None:
            return existing
        _logger.info("Creating day %s", day.isoformat())
        return self.repository.create_day(day)

    def get_day(self, day_id: UUID) -> Day:
        """Return a day or raise ``NotFoundError``."""
        found = self.repository.get_day(day_id)
        if found is None:
            raise NotFoundError("Day", day_id)
        return found

    def log_meal(self, payload: MealEntryCreate) -> MealEntry:
        """Log a food item or recipe and refresh the day total.

        A food item may be logged by ``quantity`` and ``unit`` instead of
        servings; the quantity is converted to servings of the food item.
        """
        servings = payload.servings
        if payload.recipe_id is not None:
            base = self._require_recipe(payload.recipe_id).cached_nutrition
        else:
            food = self._require_food(payload.food_item_id)
            base = food.nutrition
            if payload.quantity is not None:
                servings = convert_multiplier(
                    payload.quantity,
                    payload.unit or food.serving_unit,
                    food,
                    self.cascade.conversion_mode,
                )

        day = self.get_or_create_day(payload.day)
        nutrition = base.scale(servings * payload.percent_eaten / 100.0)
        entry = self.repository.create_meal_entry(
            {
                "day_id": str(day.id),
                "meal_type": payload.meal_type.value,
                "recipe_id": _optional_id(payload.recipe_id),
                "food_item_id": _optional_id(payload.food_item_id),
                "servings": servings,
                "percent_eaten": payload.percent_eaten,
                "quantity": payload.quantity,
                "unit": payload.unit,
                "notes": payload.notes,
                **nutrition.as_dict(prefix="cached_"),
            }
        )
        self.cascade.recalculate_day(day.id)
        return entry

    def update_meal_entry(
        self, entry_id: UUID, payload: MealEntryUpdate
    ) -> MealEntry:
        """Change servings, portion, slot or notes and refresh the day."""
        current = self._require_entry(entry_id)
        raw = payload.model_dump(mode="json", exclude_unset=True)
        changes = {
            key: value
            for key, value in raw.items()
            if value is not None or key == "notes"
        }
        if not changes:
            return current
        self.repository.update_meal_entry(entry_id, changes)
        self.cascade.recalculate_day(current.day_id)
        return self._require_entry(entry_id)

    def delete_meal_entry(self, entry_id: UUID) -> None:
        """Delete a meal entry and refresh the day."""
        entry = self._require_entry(entry_id)
        self.repository.delete_meal_entry(entry_id)
        self.cascade.recalculate_day(entry.day_id)

    def day_totals(self, day_id: UUID) -> NutritionVector:
        """Return the cached nutrition total of a day."""
        return self.get_day(day_id).cached_nutrition

    def _require_entry(self, entry_id: UUID) -> MealEntry:
        entry = self.repository.get_meal_entry(entry_id)
        if entry is None:
            raise NotFoundError("Meal entry", entry_id)
        return entry

    def _require_recipe(self, recipe_id: UUID) -> Recipe:
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def _require_food(self, food_item_id: UUID | None) -> FoodItem:
        food = (
            self.repository.get_food_item(food_item_id)
            if food_item_id is not None
            else None
        )
        if food is None:
            raise NotFoundError("Food item", food_item_id)
        return food


def _optional_id(value: UUID | None) -> str | None:
    return str(value) if value is not None else None
