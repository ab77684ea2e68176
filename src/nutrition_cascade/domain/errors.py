"""Error taxonomy for the nutrition engine."""

from uuid import UUID


class NutritionError(Exception):
    """Base class for engine errors."""


class ValidationError(NutritionError):
    """Raised when a write is rejected before anything is persisted."""


class CycleError(ValidationError):
    """Raised when a component edge would make the recipe graph cyclic."""

    def __init__(self, recipe_id: UUID, component_recipe_id: UUID) -> None:
        self.recipe_id = recipe_id
        self.component_recipe_id = component_recipe_id
        if recipe_id == component_recipe_id:
            message = f"Recipe {recipe_id} cannot use itself as a component"
        else:
            message = (
                f"Adding recipe {component_recipe_id} as a component of "
                f"{recipe_id} would create a circular reference"
            )
        super().__init__(message)


class UnitConversionError(ValidationError):
    """Raised when no conversion rule relates an ingredient unit to a food."""

    def __init__(self, quantity: float, unit: str, serving_unit: str) -> None:
        self.quantity = quantity
        self.unit = unit
        self.serving_unit = serving_unit
        super().__init__(
            f"Cannot convert {quantity} '{unit}' to servings of '{serving_unit}'"
        )


class NotFoundError(NutritionError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found with id: {entity_id}")


class GraphIntegrityError(NutritionError):
    """Raised when the stored component graph contains a cycle."""

    def __init__(self, remaining: list[UUID]) -> None:
        self.remaining = remaining
        super().__init__(
            "Recipe component graph is cyclic; unordered recipes: "
            + ", ".join(str(recipe_id) for recipe_id in remaining)
        )


class PersistenceError(RuntimeError):
    """Raised by adapters when the store rejects or drops a write."""
