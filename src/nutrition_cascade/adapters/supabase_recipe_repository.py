"""Supabase implementation for recipes, ingredients and components."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_cascade.adapters.supabase_rows import (
    parse_component,
    parse_food_item,
    parse_ingredient,
    parse_recipe,
)
from nutrition_cascade.domain.catalog import (
    FoodItem,
    Recipe,
    RecipeComponent,
    RecipeIngredient,
)
from nutrition_cascade.domain.errors import PersistenceError
from nutrition_cascade.services.graph import ComponentRepository
from nutrition_cascade.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository, ComponentRepository):
    """Supabase-backed repository for recipes and their edges."""

    client: Client

    def create_recipe(self, payload: dict[str, object]) -> Recipe:
        """Create a recipe and return it."""
        response = self.client.table("recipes").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create recipe")
        return parse_recipe(response.data[0])

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

    def update_recipe(self, recipe_id: UUID, payload: dict[str, object]) -> Recipe:
        """Update a recipe and return it."""
        response = (
            self.client.table("recipes")
            .update(payload)
            .eq("id", str(recipe_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update recipe")
        return parse_recipe(response.data[0])

    def delete_recipe(self, recipe_id: UUID) -> bool:
        """Delete a recipe together with its own edges."""
        self.client.table("recipe_ingredients").delete().eq(
            "recipe_id", str(recipe_id)
        ).execute()
        self.client.table("recipe_components").delete().eq(
            "recipe_id", str(recipe_id)
        ).execute()
        response = (
            self.client.table("recipes").delete().eq("id", str(recipe_id)).execute()
        )
        return bool(response.data)

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

    def get_ingredient(self, ingredient_id: UUID) -> RecipeIngredient | None:
        """Return an ingredient edge by id."""
        response = (
            self.client.table("recipe_ingredients")
            .select("*")
            .eq("id", str(ingredient_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_ingredient(response.data[0])

    def list_ingredients(self, recipe_id: UUID) -> list[RecipeIngredient]:
        """Return the ingredient edges of a recipe."""
        response = (
            self.client.table("recipe_ingredients")
            .select("*")
            .eq("recipe_id", str(recipe_id))
            .execute()
        )
        return [parse_ingredient(row) for row in response.data or []]

    def create_ingredient(self, payload: dict[str, object]) -> RecipeIngredient:
        """Create an ingredient edge and return it."""
        response = self.client.table("recipe_ingredients").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create recipe ingredient")
        return parse_ingredient(response.data[0])

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> RecipeIngredient:
        """Update an ingredient edge and return it."""
        response = (
            self.client.table("recipe_ingredients")
            .update(payload)
            .eq("id", str(ingredient_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update recipe ingredient")
        return parse_ingredient(response.data[0])

    def delete_ingredient(self, ingredient_id: UUID) -> bool:
        """Delete an ingredient edge."""
        response = (
            self.client.table("recipe_ingredients")
            .delete()
            .eq("id", str(ingredient_id))
            .execute()
        )
        return bool(response.data)

    def get_component(self, component_id: UUID) -> RecipeComponent | None:
        """Return a component edge by id."""
        response = (
            self.client.table("recipe_components")
            .select("*")
            .eq("id", str(component_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_component(response.data[0])

    def list_components(self, recipe_id: UUID) -> list[RecipeComponent]:
        """Return the component edges of a recipe."""
        response = (
            self.client.table("recipe_components")
            .select("*")
            .eq("recipe_id", str(recipe_id))
            .execute()
        )
        return [parse_component(row) for row in response.data or []]

    def list_parent_recipe_ids(self, component_recipe_id: UUID) -> set[UUID]:
        """Return ids of recipes using the given recipe as a component."""
        response = (
            self.client.table("recipe_components")
            .select("recipe_id")
            .eq("component_recipe_id", str(component_recipe_id))
            .execute()
        )
        return {UUID(str(row["recipe_id"])) for row in response.data or []}

    def create_component(
        self,
        recipe_id: UUID,
        component_recipe_id: UUID,
        servings: float,
        notes: str | None,
    ) -> RecipeComponent:
        """Persist a component edge and return it."""
        response = (
            self.client.table("recipe_components")
            .insert(
                {
                    "recipe_id": str(recipe_id),
                    "component_recipe_id": str(component_recipe_id),
                    "servings": servings,
                    "notes": notes,
                }
            )
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to create recipe component")
        return parse_component(response.data[0])

    def update_component(
        self, component_id: UUID, servings: float | None, notes: str | None
    ) -> RecipeComponent:
        """Update a component edge and return it."""
        payload: dict[str, object] = {}
        if servings is not None:
            payload["servings"] = servings
        if notes is not None:
            payload["notes"] = notes
        response = (
            self.client.table("recipe_components")
            .update(payload)
            .eq("id", str(component_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update recipe component")
        return parse_component(response.data[0])

    def delete_component(self, component_id: UUID) -> bool:
        """Delete a component edge."""
        response = (
            self.client.table("recipe_components")
            .delete()
            .eq("id", str(component_id))
            .execute()
        )
        return bool(response.data)

    def count_meal_entries_for_recipe(self, recipe_id: UUID) -> int:
        """Return how many meal entries log the recipe."""
        response = (
            self.client.table("meal_entries")
            .select("id")
            .eq("recipe_id", str(recipe_id))
            .execute()
        )
        return len(response.data or [])
