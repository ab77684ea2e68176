"""Cascading recalculation of recipe and day nutrition."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.cascade import (
    CascadeChangeSet,
    CascadeResult,
    CascadeSeed,
)
from nutrition_cascade.domain.catalog import (
    Day,
    FoodItem,
    MealEntry,
    Recipe,
    RecipeComponent,
    RecipeIngredient,
)
from nutrition_cascade.domain.errors import NotFoundError, ValidationError
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.domain.units import ConversionMode
from nutrition_cascade.services.ordering import order_recipes
from nutrition_cascade.services.units import convert_for_food

_logger = logging.getLogger(__name__)


class NutritionStore(Protocol):
    """Reads the cascade needs and the single write it issues."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""

    def list_ingredients(self, recipe_id: UUID) -> list[RecipeIngredient]:
        """Return the ingredient edges of a recipe."""

    def list_components(self, recipe_id: UUID) -> list[RecipeComponent]:
        """Return the component edges of a recipe."""

    def list_recipe_ids_using_food_items(self, food_item_ids: set[UUID]) -> set[UUID]:
        """Return recipes with an ingredient edge to any of the food items."""

    def list_recipes_using_components(self, recipe_ids: set[UUID]) -> set[UUID]:
        """Return recipes with a component edge to any of the recipes."""

    def list_component_edges(self, recipe_ids: set[UUID]) -> list[RecipeComponent]:
        """Return component edges owned by any of the recipes."""

    def get_day(self, day_id: UUID) -> Day | None:
        """Return a day by id."""

    def list_meal_entries(self, day_id: UUID) -> list[MealEntry]:
        """Return the meal entries of a day."""

    def list_day_ids_referencing(
        self, recipe_ids: set[UUID], food_item_ids: set[UUID]
    ) -> set[UUID]:
        """Return days with a meal entry for any of the recipes or food items."""

    def apply_changes(self, changes: CascadeChangeSet) -> None:
        """Persist all writes of one cascade atomically."""


@dataclass
class CascadeService:
    """Propagates leaf edits to every dependent recipe and day."""

    store: NutritionStore
    conversion_mode: ConversionMode = ConversionMode.STRICT

    def cascade_from_food_items(
        self,
        food_item_ids: Iterable[UUID],
        pending_food_items: Mapping[UUID, FoodItem] | None = None,
    ) -> CascadeResult:
        """Recalculate everything depending on the given food items.

        ``pending_food_items`` are new versions of food item rows that have
        not been written yet; they are used for the calculation and written
        in the same change set as the aggregates.
        """
        pending = dict(pending_food_items or {})
        seed = CascadeSeed(food_item_ids=frozenset(food_item_ids) | frozenset(pending))
        return self._run(seed, pending)

    def cascade_from_recipes(self, recipe_ids: Iterable[UUID]) -> CascadeResult:
        """Recalculate the given recipes and everything depending on them."""
        return self._run(CascadeSeed(recipe_ids=frozenset(recipe_ids)), {})

    def recalculate_recipe(self, recipe_id: UUID) -> NutritionVector:
        """Recalculate a recipe, its ancestors and their days."""
        result = self.cascade_from_recipes([recipe_id])
        return result.recipe_nutrition[recipe_id]

    def compute_recipe_nutrition(self, recipe_id: UUID) -> NutritionVector:
        """Return a recipe's per-serving nutrition from stored values, unsaved."""
        recipe = self._require_recipe(recipe_id)
        return self._compute_recipe(recipe, {}, {}, [])

    def recalculate_day(self, day_id: UUID) -> NutritionVector:
        """Refresh every meal entry of a day from its source and re-sum it."""
        if self.store.get_day(day_id) is None:
            raise NotFoundError("Day", day_id)
        changes = CascadeChangeSet()
        total = self._refresh_day(day_id, changes, {}, affected=None)
        self.store.apply_changes(changes)
        return total

    def _run(self, seed: CascadeSeed, foods: dict[UUID, FoodItem]) -> CascadeResult:
        if seed.is_empty():
            raise ValidationError("A cascade needs at least one changed record")
        food_ids = set(seed.food_item_ids)
        affected = set(seed.recipe_ids)
        if food_ids:
            affected |= self.store.list_recipe_ids_using_food_items(food_ids)
        frontier = set(affected)
        while frontier:
            parents = self.store.list_recipes_using_components(frontier) - affected
            affected |= parents
            frontier = parents

        order = order_recipes(affected, self.store.list_component_edges(affected))
        changes = CascadeChangeSet(food_items=dict(foods))
        warnings: list[str] = []
        for recipe_id in order:
            recipe = self._require_recipe(recipe_id)
            changes.recipes[recipe_id] = self._compute_recipe(
                recipe, foods, changes.recipes, warnings
            )

        day_ids = sorted(
            self.store.list_day_ids_referencing(affected, food_ids), key=str
        )
        day_totals = {
            day_id: self._refresh_day(
                day_id, changes, foods, affected=(affected, food_ids)
            )
            for day_id in day_ids
        }

        self.store.apply_changes(changes)
        _logger.info(
            "Cascade complete: foods=%s recipes=%s days=%s warnings=%s",
            len(food_ids),
            len(order),
            len(day_ids),
            len(warnings),
        )
        return CascadeResult(
            recipes_recalculated=order,
            days_recalculated=day_ids,
            recipe_nutrition=dict(changes.recipes),
            day_nutrition=day_totals,
            warnings=warnings,
        )

    def _compute_recipe(
        self,
        recipe: Recipe,
        foods: dict[UUID, FoodItem],
        fresh: Mapping[UUID, NutritionVector],
        warnings: list[str],
    ) -> NutritionVector:
        total = NutritionVector.zero()
        for ingredient in self.store.list_ingredients(recipe.id):
            food = self._food(ingredient.food_item_id, foods)
            conversion = convert_for_food(
                ingredient.quantity, ingredient.unit, food, self.conversion_mode
            )
            if conversion.warning:
                warnings.append(f"{recipe.name}: {conversion.warning}")
            total = total + food.nutrition.scale(conversion.multiplier)
        for component in self.store.list_components(recipe.id):
            child = fresh.get(component.component_recipe_id)
            if child is None:
                child = self._require_recipe(
                    component.component_recipe_id
                ).cached_nutrition
            total = total + child.scale(component.servings)
        return total.scale(1.0 / recipe.servings_produced)

    def _refresh_day(
        self,
        day_id: UUID,
        changes: CascadeChangeSet,
        foods: dict[UUID, FoodItem],
        affected: tuple[set[UUID], set[UUID]] | None,
    ) -> NutritionVector:
        """Recompute a day's entries; ``affected=None`` refreshes all of them."""
        total = NutritionVector.zero()
        for entry in self.store.list_meal_entries(day_id):
            if affected is not None and not _references(entry, *affected):
                total = total + entry.cached_nutrition
                continue
            nutrition = self._entry_source(entry, changes, foods).scale(
                entry.servings * entry.percent_eaten / 100.0
            )
            changes.meal_entries[entry.id] = nutrition
            total = total + nutrition
        changes.days[day_id] = total
        return total

    def _entry_source(
        self,
        entry: MealEntry,
        changes: CascadeChangeSet,
        foods: dict[UUID, FoodItem],
    ) -> NutritionVector:
        if entry.recipe_id is not None:
            fresh = changes.recipes.get(entry.recipe_id)
            if fresh is not None:
                return fresh
            return self._require_recipe(entry.recipe_id).cached_nutrition
        if entry.food_item_id is not None:
            return self._food(entry.food_item_id, foods).nutrition
        return NutritionVector.zero()

    def _food(self, food_item_id: UUID, foods: dict[UUID, FoodItem]) -> FoodItem:
        food = foods.get(food_item_id)
        if food is None:
            food = self.store.get_food_item(food_item_id)
            if food is None:
                raise NotFoundError("Food item", food_item_id)
            foods[food_item_id] = food
        return food

    def _require_recipe(self, recipe_id: UUID) -> Recipe:
        recipe = self.store.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe


def _references(entry: MealEntry, recipe_ids: set[UUID], food_ids: set[UUID]) -> bool:
    return entry.recipe_id in recipe_ids or entry.food_item_id in food_ids
