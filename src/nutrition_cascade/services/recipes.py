"""Recipe, ingredient and component writes."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.catalog import (
    FoodItem,
    Recipe,
    RecipeComponent,
    RecipeDetail,
    RecipeIngredient,
)
from nutrition_cascade.domain.errors import (
    NotFoundError,
    NutritionError,
    PersistenceError,
    ValidationError,
)
from nutrition_cascade.domain.inputs import (
    ComponentCreate,
    IngredientCreate,
    IngredientUpdate,
    RecipeCreate,
    RecipeUpdate,
)
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.services.cascade import CascadeService
from nutrition_cascade.services.graph import ComponentGraphService
from nutrition_cascade.services.units import convert_for_food

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipes and their ingredients."""

    def create_recipe(self, payload: dict[str, object]) -> Recipe:
        """Create a recipe and return it."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""

    def update_recipe(self, recipe_id: UUID, payload: dict[str, object]) -> Recipe:
        """Update a recipe and return it."""

    def delete_recipe(self, recipe_id: UUID) -> bool:
        """Delete a recipe together with its own edges."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""

    def get_ingredient(self, ingredient_id: UUID) -> RecipeIngredient | None:
        """Return an ingredient edge by id."""

    def list_ingredients(self, recipe_id: UUID) -> list[RecipeIngredient]:
        """Return the ingredient edges of a recipe."""

    def create_ingredient(self, payload: dict[str, object]) -> RecipeIngredient:
        """Create an ingredient edge and return it."""

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> RecipeIngredient:
        """Update an ingredient edge and return it."""

    def delete_ingredient(self, ingredient_id: UUID) -> bool:
        """Delete an ingredient edge."""

    def list_components(self, recipe_id: UUID) -> list[RecipeComponent]:
        """Return the component edges of a recipe."""

    def count_meal_entries_for_recipe(self, recipe_id: UUID) -> int:
        """Return how many meal entries log the recipe."""


@dataclass
class RecipeService:
    """Application service for recipe writes; every edge change cascades.

    When the cascade after an edge write fails, the edge write is reverted
    before the error propagates, so stored edges and cached totals agree.
    """

    repository: RecipeRepository
    graph: ComponentGraphService
    cascade: CascadeService

    def create_recipe(self, payload: RecipeCreate) -> Recipe:
        """Create an empty recipe."""
        recipe = self.repository.create_recipe(
            {
                **payload.model_dump(),
                **NutritionVector.zero().as_dict(prefix="cached_"),
            }
        )
        _logger.info("Created recipe %s (%s)", recipe.id, recipe.name)
        return recipe

    def get_recipe(self, recipe_id: UUID) -> Recipe:
        """Return a recipe or raise ``NotFoundError``."""
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def update_recipe(self, recipe_id: UUID, payload: RecipeUpdate) -> Recipe:
        """Update recipe fields; a servings change recalculates dependents."""
        current = self.get_recipe(recipe_id)
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key == "notes"
        }
        if not changes:
            return current
        recipe = self.repository.update_recipe(recipe_id, changes)
        if recipe.servings_produced != current.servings_produced:
            self._cascade_or_revert(
                recipe_id,
                lambda: self.repository.update_recipe(
                    recipe_id, {"servings_produced": current.servings_produced}
                ),
            )
            recipe = self.get_recipe(recipe_id)
        return recipe

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe that is neither logged nor used as a component."""
        recipe = self.get_recipe(recipe_id)
        logged = self.repository.count_meal_entries_for_recipe(recipe_id)
        parents = self.graph.usage_count(recipe_id)
        if logged or parents:
            raise ValidationError(
                f"Cannot delete '{recipe.name}': logged in {logged} meal "
                f"entry(ies) and used as a component in {parents} recipe(s)"
            )
        self.repository.delete_recipe(recipe_id)
        _logger.info("Deleted recipe %s", recipe_id)

    def add_ingredient(self, payload: IngredientCreate) -> RecipeIngredient:
        """Add a food item to a recipe and recalculate."""
        self.get_recipe(payload.recipe_id)
        food = self._require_food(payload.food_item_id)
        existing = self.repository.list_ingredients(payload.recipe_id)
        if any(item.food_item_id == payload.food_item_id for item in existing):
            raise ValidationError(
                f"'{food.name}' is already an ingredient of this recipe; "
                "update the existing ingredient instead"
            )
        self._check_convertible(payload.quantity, payload.unit, food)
        ingredient = self.repository.create_ingredient(
            payload.model_dump(mode="json")
        )
        self._cascade_or_revert(
            payload.recipe_id,
            lambda: self.repository.delete_ingredient(ingredient.id),
        )
        return ingredient

    def update_ingredient(
        self, ingredient_id: UUID, payload: IngredientUpdate
    ) -> RecipeIngredient:
        """Change an ingredient's quantity, unit or notes and recalculate."""
        current = self._require_ingredient(ingredient_id)
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key == "notes"
        }
        if not changes:
            return current
        food = self._require_food(current.food_item_id)
        self._check_convertible(
            changes.get("quantity", current.quantity),
            changes.get("unit", current.unit),
            food,
        )
        ingredient = self.repository.update_ingredient(ingredient_id, changes)
        previous = {key: getattr(current, key) for key in changes}
        self._cascade_or_revert(
            current.recipe_id,
            lambda: self.repository.update_ingredient(ingredient_id, previous),
        )
        return ingredient

    def remove_ingredient(self, ingredient_id: UUID) -> None:
        """Remove an ingredient and recalculate its recipe.

        A failed recalculation restores the ingredient under a new id.
        """
        ingredient = self._require_ingredient(ingredient_id)
        self.repository.delete_ingredient(ingredient_id)
        self._cascade_or_revert(
            ingredient.recipe_id,
            lambda: self.repository.create_ingredient(
                {
                    "recipe_id": str(ingredient.recipe_id),
                    "food_item_id": str(ingredient.food_item_id),
                    "quantity": ingredient.quantity,
                    "unit": ingredient.unit,
                    "notes": ingredient.notes,
                }
            ),
        )

    def add_component(self, payload: ComponentCreate) -> RecipeComponent:
        """Use one recipe inside another and recalculate."""
        component = self.graph.add_component_edge(
            payload.recipe_id,
            payload.component_recipe_id,
            payload.servings,
            payload.notes,
        )
        self._cascade_or_revert(
            payload.recipe_id,
            lambda: self.graph.repository.delete_component(component.id),
        )
        return component

    def update_component(
        self,
        component_id: UUID,
        servings: float | None,
        notes: str | None = None,
    ) -> RecipeComponent:
        """Change component servings and recalculate."""
        previous = self.graph.repository.get_component(component_id)
        component = self.graph.update_component_servings(component_id, servings, notes)
        self._cascade_or_revert(
            component.recipe_id,
            lambda: self.graph.repository.update_component(
                component_id, previous.servings, previous.notes
            ),
        )
        return component

    def remove_component(self, component_id: UUID) -> None:
        """Remove a component edge and recalculate the former parent."""
        component = self.graph.remove_component_edge(component_id)
        self._cascade_or_revert(
            component.recipe_id,
            lambda: self.graph.repository.create_component(
                component.recipe_id,
                component.component_recipe_id,
                component.servings,
                component.notes,
            ),
        )

    def get_recipe_detail(self, recipe_id: UUID) -> RecipeDetail:
        """Return a recipe with its edges and transitive components."""
        recipe = self.get_recipe(recipe_id)
        return RecipeDetail(
            recipe=recipe,
            ingredients=self.repository.list_ingredients(recipe_id),
            components=self.repository.list_components(recipe_id),
            all_component_ids=self.graph.all_component_ids(recipe_id),
        )

    def _cascade_or_revert(self, recipe_id: UUID, revert: Callable[[], object]) -> None:
        try:
            self.cascade.cascade_from_recipes([recipe_id])
        except (NutritionError, PersistenceError):
            _logger.warning(
                "Recalculation of recipe %s failed; reverting edge change", recipe_id
            )
            revert()
            raise

    def _check_convertible(self, quantity: float, unit: str, food: FoodItem) -> None:
        mode = self.cascade.conversion_mode
        conversion = convert_for_food(quantity, unit, food, mode)
        if conversion.warning:
            _logger.warning("Ingredient for '%s' stored with fallback", food.name)

    def _require_food(self, food_item_id: UUID) -> FoodItem:
        food = self.repository.get_food_item(food_item_id)
        if food is None:
            raise NotFoundError("Food item", food_item_id)
        return food

    def _require_ingredient(self, ingredient_id: UUID) -> RecipeIngredient:
        ingredient = self.repository.get_ingredient(ingredient_id)
        if ingredient is None:
            raise NotFoundError("Recipe ingredient", ingredient_id)
        return ingredient
