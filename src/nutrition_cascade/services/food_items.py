"""Food item writes with cascading recalculation."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.cascade import CascadeResult, FoodItemChange
from nutrition_cascade.domain.catalog import FoodItem, FoodItemUsage, Preference
from nutrition_cascade.domain.errors import NotFoundError, ValidationError
from nutrition_cascade.domain.inputs import FoodItemCreate, FoodItemUpdate
from nutrition_cascade.domain.nutrition import NutritionVector
from nutrition_cascade.services.cascade import CascadeService
from nutrition_cascade.services.units import serving_profile

_logger = logging.getLogger(__name__)

_NUTRIENTS = tuple(NutritionVector.zero().as_dict())
_REQUIRED = {"name", "serving_size", "serving_unit", "preference", *_NUTRIENTS}


class FoodItemRepository(Protocol):
    """Persistence interface for food items."""

    def create_food_item(self, payload: dict[str, object]) -> FoodItem:
        """Create a food item and return it."""

    def get_food_item(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id."""

    def delete_food_item(self, food_item_id: UUID) -> bool:
        """Delete a food item."""

    def list_food_items(self) -> list[FoodItem]:
        """Return every food item ordered by name."""

    def list_recipe_ids_using_food_item(self, food_item_id: UUID) -> set[UUID]:
        """Return recipes with the food item as an ingredient."""

    def count_meal_entries_for_food_item(self, food_item_id: UUID) -> int:
        """Return how many meal entries log the food item directly."""


@dataclass
class FoodItemService:
    """Application service for food item writes.

    Between ``start_batch`` and ``finish_batch`` updated rows are held as
    pending; ``finish_batch`` writes them together with one cascade over
    every food item changed in the batch. A failed finish leaves the batch
    open and nothing written.
    """

    repository: FoodItemRepository
    cascade: CascadeService
    _pending: dict[UUID, FoodItem] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def in_batch(self) -> bool:
        """Return whether a batch is open."""
        return self._pending is not None

    def create_food_item(self, payload: FoodItemCreate) -> FoodItem:
        """Create a food item with its serving profile derived."""
        profile = serving_profile(payload.serving_size, payload.serving_unit)
        row = {
            **payload.model_dump(mode="json", exclude={"nutrition"}),
            **payload.nutrition.to_vector().as_dict(),
            "base_unit_type": profile.base_unit_type.value,
            "grams_per_serving": profile.grams_per_serving,
            "ml_per_serving": profile.ml_per_serving,
        }
        food = self.repository.create_food_item(row)
        _logger.info("Created food item %s (%s)", food.id, food.name)
        return food

    def get_food_item(self, food_item_id: UUID) -> FoodItem:
        """Return a food item or raise ``NotFoundError``."""
        food = self.repository.get_food_item(food_item_id)
        if food is None:
            raise NotFoundError("Food item", food_item_id)
        return food

    def update_food_item(
        self, food_item_id: UUID, payload: FoodItemUpdate
    ) -> FoodItemChange:
        """Apply a partial update and recalculate everything depending on it.

        The new row is written in the same change set as the recalculated
        aggregates; inside a batch both wait for ``finish_batch``.
        """
        current = self.get_food_item(food_item_id)
        if self._pending is not None:
            current = self._pending.get(food_item_id, current)
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key not in _REQUIRED
        }
        updated = _apply_update(current, changes)

        if self._pending is not None:
            self._pending[food_item_id] = updated
            return FoodItemChange(food_item=updated, cascade=None)

        result = self.cascade.cascade_from_food_items(
            [food_item_id], pending_food_items={food_item_id: updated}
        )
        return FoodItemChange(food_item=updated, cascade=result)

    def delete_food_item(self, food_item_id: UUID) -> None:
        """Delete an unused food item."""
        food = self.get_food_item(food_item_id)
        usage = self.get_usage(food_item_id)
        if usage.total:
            raise ValidationError(
                f"Cannot delete '{food.name}': used in {len(usage.recipe_ids)} "
                f"recipe(s) and {usage.meal_entry_count} meal entry(ies)"
            )
        self.repository.delete_food_item(food_item_id)
        _logger.info("Deleted food item %s", food_item_id)

    def get_usage(self, food_item_id: UUID) -> FoodItemUsage:
        """Return where a food item is referenced."""
        return FoodItemUsage(
            food_item_id=food_item_id,
            recipe_ids=self.repository.list_recipe_ids_using_food_item(food_item_id),
            meal_entry_count=self.repository.count_meal_entries_for_food_item(
                food_item_id
            ),
        )

    def list_unused_food_items(self) -> list[FoodItem]:
        """Return food items referenced by no recipe and no meal entry."""
        return [
            food
            for food in self.repository.list_food_items()
            if not self.get_usage(food.id).total
        ]

    def start_batch(self) -> None:
        """Defer cascades until ``finish_batch``."""
        if self._pending is not None:
            raise ValidationError("A food item batch is already open")
        self._pending = {}

    def finish_batch(self) -> CascadeResult | None:
        """Close the batch and cascade once over every changed food item."""
        if self._pending is None:
            raise ValidationError("No food item batch is open")
        pending = self._pending
        if not pending:
            self._pending = None
            return None
        _logger.info("Finishing batch of %s food item updates", len(pending))
        result = self.cascade.cascade_from_food_items(
            pending, pending_food_items=pending
        )
        self._pending = None
        return result

    def cancel_batch(self) -> int:
        """Discard the open batch; return how many updates were dropped."""
        if self._pending is None:
            raise ValidationError("No food item batch is open")
        dropped = len(self._pending)
        self._pending = None
        _logger.info("Cancelled batch of %s food item updates", dropped)
        return dropped


def _apply_update(current: FoodItem, changes: dict[str, object]) -> FoodItem:
    nutrients = {key: changes.pop(key) for key in _NUTRIENTS if key in changes}
    if "preference" in changes:
        changes["preference"] = Preference(changes["preference"])
    updated = replace(
        current, nutrition=replace(current.nutrition, **nutrients), **changes
    )
    profile = serving_profile(updated.serving_size, updated.serving_unit)
    return replace(
        updated,
        base_unit_type=profile.base_unit_type,
        grams_per_serving=profile.grams_per_serving,
        ml_per_serving=profile.ml_per_serving,
    )

