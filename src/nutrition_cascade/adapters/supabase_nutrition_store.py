"""Supabase implementation of the cascade store."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_cascade.adapters.supabase_rows import (
    parse_component,
    parse_day,
    parse_food_item,
    parse_ingredient,
    parse_meal_entry,
    parse_recipe,
)
from nutrition_cascade.domain.cascade import CascadeChangeSet
from nutrition_cascade.domain.catalog import (
    Day,
    FoodItem,
    MealEntry,
    Recipe,
    RecipeComponent,
    RecipeIngredient,
)
from nutrition_cascade.services.cascade import NutritionStore

_logger = logging.getLogger(__name__)

APPLY_CHANGESET_FUNCTION = "apply_nutrition_changeset"


@dataclass
class SupabaseNutritionStore(NutritionStore):
    """Reads the recipe graph and applies cascades through one RPC call.

    The database function named by ``APPLY_CHANGESET_FUNCTION`` writes the
    whole change set inside a single transaction.
    """

    client: Client

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""
        rows = self._select_by("food_items", "id", str(food_item_id))
        return parse_food_item(rows[0]) if rows else None

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""
        rows = self._select_by("recipes", "id", str(recipe_id))
        return parse_recipe(rows[0]) if rows else None

    def list_ingredients(self, recipe_id: UUID) -> list[RecipeIngredient]:
        """Return the ingredient edges of a recipe."""
        rows = self._select_by("recipe_ingredients", "recipe_id", str(recipe_id))
        return [parse_ingredient(row) for row in rows]

    def list_components(self, recipe_id: UUID) -> list[RecipeComponent]:
        """Return the component edges of a recipe."""
        rows = self._select_by("recipe_components", "recipe_id", str(recipe_id))
        return [parse_component(row) for row in rows]

    def list_recipe_ids_using_food_items(self, food_item_ids: set[UUID]) -> set[UUID]:
        """Return recipes with an ingredient edge to any of the food items."""
        rows = self._select_in(
            "recipe_ingredients", "recipe_id", "food_item_id", food_item_ids
        )
        return {UUID(str(row["recipe_id"])) for row in rows}

    def list_recipes_using_components(self, recipe_ids: set[UUID]) -> set[UUID]:
        """Return recipes with a component edge to any of the recipes."""
        rows = self._select_in(
            "recipe_components", "recipe_id", "component_recipe_id", recipe_ids
        )
        return {UUID(str(row["recipe_id"])) for row in rows}

    def list_component_edges(self, recipe_ids: set[UUID]) -> list[RecipeComponent]:
        """Return component edges owned by any of the recipes."""
        rows = self._select_in("recipe_components", "*", "recipe_id", recipe_ids)
        return [parse_component(row) for row in rows]

    def get_day(self, day_id: UUID) -> Day | None:
        """Return a day by id."""
        rows = self._select_by("days", "id", str(day_id))
        return parse_day(rows[0]) if rows else None

    def list_meal_entries(self, day_id: UUID) -> list[MealEntry]:
        """Return the meal entries of a day."""
        rows = self._select_by("meal_entries", "day_id", str(day_id))
        return [parse_meal_entry(row) for row in rows]

    def list_day_ids_referencing(
        self, recipe_ids: set[UUID], food_item_ids: set[UUID]
    ) -> set[UUID]:
        """Return days with a meal entry for any of the recipes or food items."""
        rows = [
            *self._select_in("meal_entries", "day_id", "recipe_id", recipe_ids),
            *self._select_in("meal_entries", "day_id", "food_item_id", food_item_ids),
        ]
        return {UUID(str(row["day_id"])) for row in rows}

    def apply_changes(self, changes: CascadeChangeSet) -> None:
        """Persist all writes of one cascade atomically."""
        if changes.is_empty():
            return
        self.client.rpc(APPLY_CHANGESET_FUNCTION, changeset_payload(changes)).execute()
        _logger.info(
            "Applied changeset: food_items=%s recipes=%s meal_entries=%s days=%s",
            len(changes.food_items),
            len(changes.recipes),
            len(changes.meal_entries),
            len(changes.days),
        )

    def _select_by(self, table: str, column: str, value: str) -> list[dict]:
        response = self.client.table(table).select("*").eq(column, value).execute()
        return response.data or []

    def _select_in(
        self, table: str, columns: str, column: str, values: set[UUID]
    ) -> list[dict]:
        if not values:
            return []
        response = (
            self.client.table(table)
            .select(columns)
            .in_(column, sorted(str(value) for value in values))
            .execute()
        )
        return response.data or []


def changeset_payload(changes: CascadeChangeSet) -> dict[str, list[dict[str, object]]]:
    """Serialize a change set into the RPC argument document."""
    return {
        "food_items": [
            _food_item_row(food) for food in changes.food_items.values()
        ],
        "recipes": [
            {"id": str(recipe_id), **nutrition.as_dict(prefix="cached_")}
            for recipe_id, nutrition in changes.recipes.items()
        ],
        "meal_entries": [
            {"id": str(entry_id), **nutrition.as_dict(prefix="cached_")}
            for entry_id, nutrition in changes.meal_entries.items()
        ],
        "days": [
            {"id": str(day_id), **nutrition.as_dict(prefix="cached_")}
            for day_id, nutrition in changes.days.items()
        ],
    }


def _food_item_row(food: FoodItem) -> dict[str, object]:
    return {
        "id": str(food.id),
        "name": food.name,
        "brand": food.brand,
        "serving_size": food.serving_size,
        "serving_unit": food.serving_unit,
        **food.nutrition.as_dict(),
        "base_unit_type": food.base_unit_type.value if food.base_unit_type else None,
        "grams_per_serving": food.grams_per_serving,
        "ml_per_serving": food.ml_per_serving,
        "preference": food.preference.value,
        "notes": food.notes,
    }
