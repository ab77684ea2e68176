"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from nutrition_cascade.adapters.supabase_exercise_repository import (
    SupabaseExerciseRepository,
)
from nutrition_cascade.adapters.supabase_food_item_repository import (
    SupabaseFoodItemRepository,
)
from nutrition_cascade.adapters.supabase_nutrition_store import (
    APPLY_CHANGESET_FUNCTION,
    SupabaseNutritionStore,
    changeset_payload,
)
from nutrition_cascade.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from nutrition_cascade.adapters.supabase_rows import (
    parse_food_item,
    parse_meal_entry,
    parse_segment,
)
from nutrition_cascade.domain.cascade import CascadeChangeSet
from nutrition_cascade.domain.catalog import MealType, Preference
from nutrition_cascade.domain.errors import PersistenceError
from nutrition_cascade.domain.exercise import CalculatedField
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.domain.units import BaseUnitType


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeRpcCall:
    calls: list[tuple[str, dict[str, object]]]
    name: str
    params: dict[str, object]

    def execute(self) -> FakeResponse:
        self.calls.append((self.name, self.params))
        return FakeResponse(data=[])


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]

    def rpc(self, name: str, params: dict[str, object]) -> FakeRpcCall:
        return FakeRpcCall(self.rpc_calls, name, params)


def _food_row(food_id: str) -> dict[str, object]:
    return {
        "id": food_id,
        "name": "Peanut Butter",
        "serving_size": 2,
        "serving_unit": "tbsp (16g)",
        "calories": 190,
        "fat": 16,
        "base_unit_type": "weight",
        "grams_per_serving": 32,
        "ml_per_serving": None,
        "preference": "liked",
    }


def test_parse_food_item_defaults_missing_nutrients() -> None:
    food = parse_food_item(_food_row(str(uuid4())))

    assert food.nutrition.calories == 190
    assert food.nutrition.sodium == 0
    assert food.base_unit_type is BaseUnitType.WEIGHT
    assert food.grams_per_serving == 32.0
    assert food.ml_per_serving is None
    assert food.preference is Preference.LIKED


def test_parse_meal_entry_reads_cached_columns() -> None:
    entry_id, day_id, recipe_id = uuid4(), uuid4(), uuid4()

    entry = parse_meal_entry(
        {
            "id": str(entry_id),
            "day_id": str(day_id),
            "meal_type": "dinner",
            "recipe_id": str(recipe_id),
            "food_item_id": None,
            "servings": 1.5,
            "percent_eaten": 100,
            "cached_calories": 450,
            "cached_protein": 30,
        }
    )

    assert entry.id == entry_id
    assert entry.recipe_id == recipe_id
    assert entry.food_item_id is None
    assert entry.meal_type is MealType.DINNER
    assert entry.cached_nutrition.calories == 450
    assert entry.cached_nutrition.protein == 30


def test_parse_segment() -> None:
    segment = parse_segment(
        {
            "id": str(uuid4()),
            "exercise_id": str(uuid4()),
            "segment_order": 1,
            "duration_minutes": 30,
            "speed_mph": 3.0,
            "distance_miles": 1.5,
            "incline_percent": 2,
            "calculated_field": "distance",
            "is_consistent": True,
            "calories_burned": 125.9,
        }
    )

    assert segment.calculated_field is CalculatedField.DISTANCE
    assert segment.calories_burned == 125.9
    assert segment.weight_used_lbs is None


def test_supabase_food_item_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    foods_table = client.table("food_items")
    food_id = str(uuid4())
    foods_table.queue("insert", [_food_row(food_id)])
    foods_table.queue("select", [_food_row(food_id)])

    repository = SupabaseFoodItemRepository(client)
    created = repository.create_food_item({"name": "Peanut Butter"})
    fetched = repository.get_food_item(created.id)

    assert str(created.id) == food_id
    assert fetched is not None
    assert fetched.name == "Peanut Butter"
    assert ("id", food_id) in foods_table.last_filters
    assert repository.get_food_item(uuid4()) is None


def test_supabase_food_item_repository_failed_create() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseFoodItemRepository(client)

    with pytest.raises(PersistenceError):
        repository.create_food_item({"name": "Kale"})


def test_supabase_food_item_usage_queries() -> None:
    client = FakeSupabaseClient()
    recipe_id = uuid4()
    client.table("recipe_ingredients").queue(
        "select", [{"recipe_id": str(recipe_id)}, {"recipe_id": str(recipe_id)}]
    )
    client.table("meal_entries").queue("select", [{"id": "a"}, {"id": "b"}])

    repository = SupabaseFoodItemRepository(client)

    assert repository.list_recipe_ids_using_food_item(uuid4()) == {recipe_id}
    assert repository.count_meal_entries_for_food_item(uuid4()) == 2


def test_supabase_recipe_repository_components() -> None:
    client = FakeSupabaseClient()
    components_table = client.table("recipe_components")
    parent_id, child_id, edge_id = uuid4(), uuid4(), uuid4()
    components_table.queue(
        "insert",
        [
            {
                "id": str(edge_id),
                "recipe_id": str(parent_id),
                "component_recipe_id": str(child_id),
                "servings": 2,
            }
        ],
    )
    components_table.queue("select", [{"recipe_id": str(parent_id)}])

    repository = SupabaseRecipeRepository(client)
    edge = repository.create_component(parent_id, child_id, 2.0, None)
    parents = repository.list_parent_recipe_ids(child_id)

    assert edge.id == edge_id
    assert edge.servings == 2.0
    assert components_table.last_payload == {
        "recipe_id": str(parent_id),
        "component_recipe_id": str(child_id),
        "servings": 2.0,
        "notes": None,
    }
    assert parents == {parent_id}


def test_supabase_exercise_repository_latest_weight() -> None:
    client = FakeSupabaseClient()
    vitals_table = client.table("vitals")
    vitals_table.queue("select", [{"value": 182.5}])

    repository = SupabaseExerciseRepository(client)

    assert repository.get_latest_weight_lbs() == 182.5
    assert ("vital_type", "weight") in vitals_table.last_filters
    assert repository.get_latest_weight_lbs() is None


def test_nutrition_store_skips_empty_in_queries() -> None:
    client = FakeSupabaseClient()
    store = SupabaseNutritionStore(client)

    assert store.list_recipe_ids_using_food_items(set()) == set()
    assert store.list_day_ids_referencing(set(), set()) == set()
    assert client.tables == {}


def test_nutrition_store_applies_changeset_in_one_call() -> None:
    client = FakeSupabaseClient()
    store = SupabaseNutritionStore(client)
    recipe_id, day_id = uuid4(), uuid4()
    changes = CascadeChangeSet(
        recipes={recipe_id: NutritionVector(calories=395)},
        days={day_id: NutritionVector(calories=450)},
    )

    store.apply_changes(changes)

    assert len(client.rpc_calls) == 1
    name, params = client.rpc_calls[0]
    assert name == APPLY_CHANGESET_FUNCTION
    assert params == changeset_payload(changes)
    assert params["recipes"][0]["id"] == str(recipe_id)
    assert params["recipes"][0]["cached_calories"] == 395
    assert params["days"][0]["cached_calories"] == 450
    assert params["food_items"] == []
    assert client.tables == {}


def test_nutrition_store_skips_empty_changeset() -> None:
    client = FakeSupabaseClient()

    SupabaseNutritionStore(client).apply_changes(CascadeChangeSet())

    assert client.rpc_calls == []


def test_changeset_payload_serializes_food_items() -> None:
    food = parse_food_item(_food_row(str(uuid4())))

    payload = changeset_payload(CascadeChangeSet(food_items={food.id: food}))

    row = payload["food_items"][0]
    assert UUID(row["id"]) == food.id
    assert row["calories"] == 190
    assert row["base_unit_type"] == "weight"
    assert row["preference"] == "liked"
