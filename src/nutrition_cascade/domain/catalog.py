"""Domain models for food items, recipes, meal entries and days."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID

from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.domain.units import BaseUnitType


class Preference(StrEnum):
    """User preference for a food item."""

    LIKED = "liked"
    DISLIKED = "disliked"
    NEUTRAL = "neutral"


class MealType(StrEnum):
    """Meal slot of a logged entry."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class FoodItem:
    """A food item with nutrition per serving."""

    id: UUID
    name: str
    brand: str | None
    serving_size: float
    serving_unit: str
    nutrition: NutritionVector
    base_unit_type: BaseUnitType | None = None
    grams_per_serving: float | None = None
    ml_per_serving: float | None = None
    preference: Preference = Preference.NEUTRAL
    notes: str | None = None


@dataclass(frozen=True)
class Recipe:
    """A recipe with engine-maintained per-serving nutrition."""

    id: UUID
    name: str
    servings_produced: float
    cached_nutrition: NutritionVector
    is_favorite: bool = False
    notes: str | None = None


@dataclass(frozen=True)
class RecipeIngredient:
    """Edge from a recipe to a food item."""

    id: UUID
    recipe_id: UUID
    food_item_id: UUID
    quantity: float
    unit: str
    notes: str | None = None


@dataclass(frozen=True)
class RecipeComponent:
    """Edge from a recipe to another recipe used as a component."""

    id: UUID
    recipe_id: UUID
    component_recipe_id: UUID
    servings: float
    notes: str | None = None


@dataclass(frozen=True)
class MealEntry:
    """Food or recipe consumed on a day."""

    id: UUID
    day_id: UUID
    meal_type: MealType
    recipe_id: UUID | None
    food_item_id: UUID | None
    servings: float
    percent_eaten: float
    cached_nutrition: NutritionVector
    quantity: float | None = None
    unit: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Day:
    """Calendar day with cached totals."""

    id: UUID
    date: date
    cached_nutrition: NutritionVector
    cached_calories_burned: float = 0.0
    notes: str | None = None


@dataclass(frozen=True)
class RecipeDetail:
    """Recipe with its edges and transitive components."""

    recipe: Recipe
    ingredients: list[RecipeIngredient]
    components: list[RecipeComponent]
    all_component_ids: set[UUID]


@dataclass(frozen=True)
class FoodItemUsage:
    """Where a food item is referenced."""

    food_item_id: UUID
    recipe_ids: set[UUID]
    meal_entry_count: int

    @property
    def total(self) -> int:
        """Return recipe plus direct meal usages."""
        return len(self.recipe_ids) + self.meal_entry_count
