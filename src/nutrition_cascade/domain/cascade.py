"""Domain models for cascading recalculation."""

from dataclasses import dataclass, field
from uuid import UUID

from nutrition_cascade.domain.catalog import FoodItem
from nutrition_cascade.domain.nutrition import NutritionVector


@dataclass(frozen=True)
class CascadeSeed:
    """Changed leaf records a cascade starts from."""

    food_item_ids: frozenset[UUID] = frozenset()
    recipe_ids: frozenset[UUID] = frozenset()

    def is_empty(self) -> bool:
        """Return whether the seed names no records."""
        return not self.food_item_ids and not self.recipe_ids


@dataclass
class CascadeChangeSet:
    """Every write produced by one cascade, applied as a single unit.

    ``food_items`` carries leaf rows the caller wants written together with
    the aggregates derived from them.
    """

    food_items: dict[UUID, FoodItem] = field(default_factory=dict)
    recipes: dict[UUID, NutritionVector] = field(default_factory=dict)
    meal_entries: dict[UUID, NutritionVector] = field(default_factory=dict)
    days: dict[UUID, NutritionVector] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Return whether there is nothing to write."""
        return not (self.food_items or self.recipes or self.meal_entries or self.days)


@dataclass(frozen=True)
class CascadeResult:
    """Summary of a completed cascade."""

    recipes_recalculated: list[UUID]
    days_recalculated: list[UUID]
    recipe_nutrition: dict[UUID, NutritionVector]
    day_nutrition: dict[UUID, NutritionVector]
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FoodItemChange:
    """An updated food item and the cascade it triggered.

    ``cascade`` is ``None`` while a batch defers recalculation.
    """

    food_item: FoodItem
    cascade: CascadeResult | None
