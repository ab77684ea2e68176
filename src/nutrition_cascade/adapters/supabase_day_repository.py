"""Supabase implementation for days and meal entries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_cascade.adapters.supabase_rows import (
    parse_day,
    parse_food_item,
    parse_meal_entry,
    parse_recipe,
)
from nutrition_cascade.domain.catalog import Day, FoodItem, MealEntry, Recipe
from nutrition_cascade.domain.errors import PersistenceError
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.services.days import DayRepository


@dataclass
class SupabaseDayRepository(DayRepository):
    """Supabase-backed repository for the food log."""

    client: Client

    def get_day(self, day_id: UUID) -> Day | None:
        """Return a day by id."""
        return self._first_day("id", str(day_id))

    def get_day_by_date(self, day: date) -> Day | None:
        """Return the day row for a calendar date."""
        return self._first_day("date", day.isoformat())

    def create_day(self, day: date) -> Day:
        """Create an empty day and return it."""
        response = (
            self.client.table("days")
            .insert(
                {
                    "date": day.isoformat(),
                    "cached_calories_burned": 0.0,
                    **NutritionVector.zero().as_dict(prefix="cached_"),
                }
            )
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to create day")
        return parse_day(response.data[0])

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""
        response = (
            self.client.table("food_items")
            .select("*")
            .eq("id", str(food_item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food_item(response.data[0])

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_recipe(response.data[0])

    def get_meal_entry(self, entry_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""
        response = (
            self.client.table("meal_entries")
            .select("*")
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_meal_entry(response.data[0])

    def list_meal_entries(self, day_id: UUID) -> list[MealEntry]:
        """Return the meal entries of a day."""
        response = (
            self.client.table("meal_entries")
            .select("*")
            .eq("day_id", str(day_id))
            .order("created_at")
            .execute()
        )
        return [parse_meal_entry(row) for row in response.data or []]

    def create_meal_entry(self, payload: dict[str, object]) -> MealEntry:
        """Create a meal entry and return it."""
        response = self.client.table("meal_entries").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create meal entry")
        return parse_meal_entry(response.data[0])

    def update_meal_entry(
        self, entry_id: UUID, payload: dict[str, object]
    ) -> MealEntry:
        """Update a meal entry and return it."""
        response = (
            self.client.table("meal_entries")
            .update(payload)
            .eq("id", str(entry_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update meal entry")
        return parse_meal_entry(response.data[0])

    def delete_meal_entry(self, entry_id: UUID) -> bool:
        """Delete a meal entry."""
        response = (
            self.client.table("meal_entries")
            .delete()
            .eq("id", str(entry_id))
            .execute()
        )
        return bool(response.data)

    def _first_day(self, column: str, value: str) -> Day | None:
        response = (
            self.client.table("days")
            .select("*")
            .eq(column, value)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_day(response.data[0])
