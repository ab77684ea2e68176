"""Validated write payloads."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from nutrition_cascade.domain.catalog import MealType, Preference
from nutrition_cascade.domain.exercise import ExerciseType
from nutrition_cascade.domain.nutrition import NutritionVector

MIN_SEGMENT_METRICS = 2


class NutritionInput(BaseModel):
    """Per-serving nutrient amounts."""

    calories: float = Field(ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sodium: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)
    saturated_fat: float = Field(default=0.0, ge=0.0)
    cholesterol: float = Field(default=0.0, ge=0.0)

    def to_vector(self) -> NutritionVector:
        """Return the nutrition as a domain vector."""
        return NutritionVector(**self.model_dump())


class FoodItemCreate(BaseModel):
    """Payload for a new food item."""

    name: str = Field(min_length=1)
    brand: str | None = None
    serving_size: float = Field(gt=0.0)
    serving_unit: str = Field(min_length=1)
    nutrition: NutritionInput
    preference: Preference = Preference.NEUTRAL
    notes: str | None = None


class FoodItemUpdate(BaseModel):
    """Partial update for a food item; ``None`` leaves a field unchanged."""

    name: str | None = Field(default=None, min_length=1)
    brand: str | None = None
    serving_size: float | None = Field(default=None, gt=0.0)
    serving_unit: str | None = Field(default=None, min_length=1)
    calories: float | None = Field(default=None, ge=0.0)
    protein: float | None = Field(default=None, ge=0.0)
    carbs: float | None = Field(default=None, ge=0.0)
    fat: float | None = Field(default=None, ge=0.0)
    fiber: float | None = Field(default=None, ge=0.0)
    sodium: float | None = Field(default=None, ge=0.0)
    sugar: float | None = Field(default=None, ge=0.0)
    saturated_fat: float | None = Field(default=None, ge=0.0)
    cholesterol: float | None = Field(default=None, ge=0.0)
    preference: Preference | None = None
    notes: str | None = None


class RecipeCreate(BaseModel):
    """Payload for a new recipe."""

    name: str = Field(min_length=1)
    servings_produced: float = Field(default=1.0, gt=0.0)
    is_favorite: bool = False
    notes: str | None = None


class RecipeUpdate(BaseModel):
    """Partial update for a recipe."""

    name: str | None = Field(default=None, min_length=1)
    servings_produced: float | None = Field(default=None, gt=0.0)
    is_favorite: bool | None = None
    notes: str | None = None


class IngredientCreate(BaseModel):
    """Payload for adding a food item to a recipe."""

    recipe_id: UUID
    food_item_id: UUID
    quantity: float = Field(gt=0.0)
    unit: str = Field(min_length=1)
    notes: str | None = None


class IngredientUpdate(BaseModel):
    """Partial update for a recipe ingredient."""

    quantity: float | None = Field(default=None, gt=0.0)
    unit: str | None = Field(default=None, min_length=1)
    notes: str | None = None


class ComponentCreate(BaseModel):
    """Payload for using one recipe inside another."""

    recipe_id: UUID
    component_recipe_id: UUID
    servings: float = Field(gt=0.0)
    notes: str | None = None


class MealEntryCreate(BaseModel):
    """Payload for logging a meal; exactly one source must be set."""

    day: date
    meal_type: MealType = MealType.UNSPECIFIED
    recipe_id: UUID | None = None
    food_item_id: UUID | None = None
    servings: float | None = Field(default=None, gt=0.0)
    percent_eaten: float = Field(default=100.0, ge=0.0, le=100.0)
    quantity: float | None = Field(default=None, gt=0.0)
    unit: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _check_source(self) -> "MealEntryCreate":
        if self.recipe_id is None and self.food_item_id is None:
            raise ValueError("Must provide either recipe_id or food_item_id")
        if self.recipe_id is not None and self.food_item_id is not None:
            raise ValueError("Provide only one of recipe_id or food_item_id")
        if self.quantity is not None and self.food_item_id is None:
            raise ValueError("quantity/unit logging requires food_item_id")
        if self.servings is None and self.quantity is None:
            self.servings = 1.0
        return self


class MealEntryUpdate(BaseModel):
    """Partial update for a meal entry."""

    meal_type: MealType | None = None
    servings: float | None = Field(default=None, gt=0.0)
    percent_eaten: float | None = Field(default=None, ge=0.0, le=100.0)
    notes: str | None = None


class ExerciseCreate(BaseModel):
    """Payload for a new exercise session."""

    day: date
    exercise_type: ExerciseType = ExerciseType.TREADMILL
    notes: str | None = None


class SegmentCreate(BaseModel):
    """Payload for a new exercise segment; two of three metrics suffice."""

    exercise_id: UUID
    duration_minutes: float | None = Field(default=None, ge=0.0)
    speed_mph: float | None = Field(default=None, ge=0.0)
    distance_miles: float | None = Field(default=None, ge=0.0)
    incline_percent: float = 0.0
    avg_heart_rate: float | None = Field(default=None, gt=0.0)
    notes: str | None = None

    @model_validator(mode="after")
    def _check_metrics(self) -> "SegmentCreate":
        provided = [
            value
            for value in (self.duration_minutes, self.speed_mph, self.distance_miles)
            if value is not None
        ]
        if len(provided) < MIN_SEGMENT_METRICS:
            raise ValueError(
                "Must provide at least 2 of: duration_minutes, speed_mph, "
                "distance_miles"
            )
        return self


class SegmentUpdate(BaseModel):
    """Partial update for an exercise segment."""

    duration_minutes: float | None = Field(default=None, ge=0.0)
    speed_mph: float | None = Field(default=None, ge=0.0)
    distance_miles: float | None = Field(default=None, ge=0.0)
    incline_percent: float | None = None
    avg_heart_rate: float | None = Field(default=None, gt=0.0)
    notes: str | None = None
