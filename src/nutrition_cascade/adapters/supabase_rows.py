"""Row parsers shared by the Supabase adapters."""

from datetime import date
from uuid import UUID

from nutrition_cascade.domain.catalog import (
    Day,
    FoodItem,
    MealEntry,
    MealType,
    Preference,
    Recipe,
    RecipeComponent,
    RecipeIngredient,
)
from nutrition_cascade.domain.exercise import (
    CalculatedField,
    Exercise,
    ExerciseSegment,
    ExerciseType,
)
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.domain.units import BaseUnitType


def parse_food_item(row: dict[str, object]) -> FoodItem:
    """Parse a food item row into a domain model."""
    base_unit_type = row.get("base_unit_type")
    return FoodItem(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        serving_size=float(row.get("serving_size", 1.0)),
        serving_unit=str(row.get("serving_unit", "serving")),
        nutrition=NutritionVector.from_mapping(row),
        base_unit_type=BaseUnitType(base_unit_type) if base_unit_type else None,
        grams_per_serving=_optional_float(row.get("grams_per_serving")),
        ml_per_serving=_optional_float(row.get("ml_per_serving")),
        preference=Preference(row.get("preference") or Preference.NEUTRAL),
        notes=row.get("notes"),
    )


def parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a recipe row into a domain model."""
    return Recipe(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        servings_produced=float(row.get("servings_produced", 1.0)),
        cached_nutrition=NutritionVector.from_mapping(row, prefix="cached_"),
        is_favorite=bool(row.get("is_favorite", False)),
        notes=row.get("notes"),
    )


def parse_ingredient(row: dict[str, object]) -> RecipeIngredient:
    """Parse a recipe ingredient row into a domain model."""
    return RecipeIngredient(
        id=UUID(str(row["id"])),
        recipe_id=UUID(str(row["recipe_id"])),
        food_item_id=UUID(str(row["food_item_id"])),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        notes=row.get("notes"),
    )


def parse_component(row: dict[str, object]) -> RecipeComponent:
    """Parse a recipe component row into a domain model."""
    return RecipeComponent(
        id=UUID(str(row["id"])),
        recipe_id=UUID(str(row["recipe_id"])),
        component_recipe_id=UUID(str(row["component_recipe_id"])),
        servings=float(row.get("servings", 1.0)),
        notes=row.get("notes"),
    )


def parse_day(row: dict[str, object]) -> Day:
    """Parse a day row into a domain model."""
    return Day(
        id=UUID(str(row["id"])),
        date=date.fromisoformat(str(row["date"])),
        cached_nutrition=NutritionVector.from_mapping(row, prefix="cached_"),
        cached_calories_burned=float(row.get("cached_calories_burned") or 0.0),
        notes=row.get("notes"),
    )


def parse_meal_entry(row: dict[str, object]) -> MealEntry:
    """Parse a meal entry row into a domain model."""
    return MealEntry(
        id=UUID(str(row["id"])),
        day_id=UUID(str(row["day_id"])),
        meal_type=MealType(row.get("meal_type") or MealType.UNSPECIFIED),
        recipe_id=_optional_uuid(row.get("recipe_id")),
        food_item_id=_optional_uuid(row.get("food_item_id")),
        servings=float(row.get("servings", 1.0)),
        percent_eaten=float(row.get("percent_eaten", 100.0)),
        cached_nutrition=NutritionVector.from_mapping(row, prefix="cached_"),
        quantity=_optional_float(row.get("quantity")),
        unit=row.get("unit"),
        notes=row.get("notes"),
    )


def parse_exercise(row: dict[str, object]) -> Exercise:
    """Parse an exercise row into a domain model."""
    return Exercise(
        id=UUID(str(row["id"])),
        day_id=UUID(str(row["day_id"])),
        exercise_type=ExerciseType(row.get("exercise_type") or ExerciseType.TREADMILL),
        cached_duration_minutes=float(row.get("cached_duration_minutes") or 0.0),
        cached_distance_miles=float(row.get("cached_distance_miles") or 0.0),
        cached_calories_burned=float(row.get("cached_calories_burned") or 0.0),
        notes=row.get("notes"),
    )


def parse_segment(row: dict[str, object]) -> ExerciseSegment:
    """Parse an exercise segment row into a domain model."""
    return ExerciseSegment(
        id=UUID(str(row["id"])),
        exercise_id=UUID(str(row["exercise_id"])),
        segment_order=int(row.get("segment_order", 1)),
        duration_minutes=_optional_float(row.get("duration_minutes")),
        speed_mph=_optional_float(row.get("speed_mph")),
        distance_miles=_optional_float(row.get("distance_miles")),
        incline_percent=float(row.get("incline_percent") or 0.0),
        calculated_field=CalculatedField(
            row.get("calculated_field") or CalculatedField.NONE
        ),
        is_consistent=bool(row.get("is_consistent", True)),
        calories_burned=float(row.get("calories_burned") or 0.0),
        weight_used_lbs=_optional_float(row.get("weight_used_lbs")),
        avg_heart_rate=_optional_float(row.get("avg_heart_rate")),
        notes=row.get("notes"),
    )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None


def _optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None
