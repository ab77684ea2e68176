"""Supabase implementation for food items."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_cascade.adapters.supabase_rows import parse_food_item
from nutrition_cascade.domain.catalog import FoodItem
from nutrition_cascade.domain.errors import PersistenceError
from nutrition_cascade.services.food_items import FoodItemRepository


@dataclass
class SupabaseFoodItemRepository(FoodItemRepository):
    """Supabase-backed repository for food items."""

    client: Client

    def create_food_item(self, payload: dict[str, object]) -> FoodItem:
        """Create a food item and return it."""
        response = self.client.table("food_items").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create food item")
        return parse_food_item(response.data[0])

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

    def delete_food_item(self, food_item_id: UUID) -> bool:
        """Delete a food item."""
        response = (
            self.client.table("food_items")
            .delete()
            .eq("id", str(food_item_id))
            .execute()
        )
        return bool(response.data)

    def list_food_items(self) -> list[FoodItem]:
        """Return every food item ordered by name."""
        response = self.client.table("food_items").select("*").order("name").execute()
        return [parse_food_item(row) for row in response.data or []]

    def list_recipe_ids_using_food_item(self, food_item_id: UUID) -> set[UUID]:
        """Return recipes with the food item as an ingredient."""
        response = (
            self.client.table("recipe_ingredients")
            .select("recipe_id")
            .eq("food_item_id", str(food_item_id))
            .execute()
        )
        return {UUID(str(row["recipe_id"])) for row in response.data or []}

    def count_meal_entries_for_food_item(self, food_item_id: UUID) -> int:
        """Return how many meal entries log the food item directly."""
        response = (
            self.client.table("meal_entries")
            .select("id")
            .eq("food_item_id", str(food_item_id))
            .execute()
        )
        return len(response.data or [])
