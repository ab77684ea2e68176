"""Dependency container wiring for the engine."""

from dataclasses import dataclass

from supabase import create_client

from nutrition_cascade.adapters.supabase_day_repository import SupabaseDayRepository
from nutrition_cascade.adapters.supabase_exercise_repository import (
    SupabaseExerciseRepository,
)
from nutrition_cascade.adapters.supabase_food_item_repository import (
    SupabaseFoodItemRepository,
)
from nutrition_cascade.adapters.supabase_nutrition_store import SupabaseNutritionStore
from nutrition_cascade.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from nutrition_cascade.config import Settings
from nutrition_cascade.services.cascade import CascadeService
from nutrition_cascade.services.days import DayService
from nutrition_cascade.services.exercise import ExerciseService
from nutrition_cascade.services.food_items import FoodItemService
from nutrition_cascade.services.graph import ComponentGraphService
from nutrition_cascade.services.recipes import RecipeService


@dataclass
class AppContainer:
    """Holds engine-wide dependencies."""

    settings: Settings
    cascade_service: CascadeService
    graph_service: ComponentGraphService
    food_item_service: FoodItemService
    recipe_service: RecipeService
    day_service: DayService
    exercise_service: ExerciseService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    cascade_service = CascadeService(
        store=SupabaseNutritionStore(supabase_client),
        conversion_mode=resolved_settings.unit_conversion_mode,
    )
    graph_service = ComponentGraphService(recipe_repository)
    day_service = DayService(SupabaseDayRepository(supabase_client), cascade_service)
    return AppContainer(
        settings=resolved_settings,
        cascade_service=cascade_service,
        graph_service=graph_service,
        food_item_service=FoodItemService(
            SupabaseFoodItemRepository(supabase_client), cascade_service
        ),
        recipe_service=RecipeService(
            recipe_repository, graph_service, cascade_service
        ),
        day_service=day_service,
        exercise_service=ExerciseService(
            repository=SupabaseExerciseRepository(supabase_client),
            days=day_service,
            default_weight_lbs=resolved_settings.default_weight_lbs,
        ),
    )
