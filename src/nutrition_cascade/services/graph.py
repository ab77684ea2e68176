"""Recipe composition graph management."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.catalog import Recipe, RecipeComponent
from nutrition_cascade.domain.errors import CycleError, NotFoundError, ValidationError

_logger = logging.getLogger(__name__)


class ComponentRepository(Protocol):
    """Persistence interface for recipe-to-recipe edges."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""

    def get_component(self, component_id: UUID) -> RecipeComponent | None:
        """Return a component edge by id."""

    def list_components(self, recipe_id: UUID) -> list[RecipeComponent]:
        """Return the component edges of a recipe."""

    def list_parent_recipe_ids(self, component_recipe_id: UUID) -> set[UUID]:
        """Return ids of recipes using the given recipe as a component."""

    def create_component(
        self,
        recipe_id: UUID,
        component_recipe_id: UUID,
        servings: float,
        notes: str | None,
    ) -> RecipeComponent:
        """Persist a component edge and return it."""

    def update_component(
        self, component_id: UUID, servings: float | None, notes: str | None
    ) -> RecipeComponent:
        """Update a component edge and return it."""

    def delete_component(self, component_id: UUID) -> bool:
        """Delete a component edge."""


@dataclass
class ComponentGraphService:
    """Maintains the acyclic recipe composition graph."""

    repository: ComponentRepository

    def would_create_cycle(self, recipe_id: UUID, component_recipe_id: UUID) -> bool:
        """Return whether ``recipe_id`` is reachable from ``component_recipe_id``."""
        visited: set[UUID] = set()
        pending = [component_recipe_id]
        while pending:
            current = pending.pop()
            if current == recipe_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            pending.extend(
                edge.component_recipe_id
                for edge in self.repository.list_components(current)
            )
        return False

    def add_component_edge(
        self,
        recipe_id: UUID,
        component_recipe_id: UUID,
        servings: float,
        notes: str | None = None,
    ) -> RecipeComponent:
        """Add ``component_recipe_id`` to ``recipe_id`` unless it closes a cycle."""
        if servings <= 0:
            raise ValidationError("Component servings must be greater than 0")
        self._require_recipe(recipe_id)
        self._require_recipe(component_recipe_id)
        if self.would_create_cycle(recipe_id, component_recipe_id):
            _logger.info(
                "Rejected component edge %s -> %s (cycle)",
                recipe_id,
                component_recipe_id,
            )
            raise CycleError(recipe_id, component_recipe_id)
        existing = self.repository.list_components(recipe_id)
        if any(edge.component_recipe_id == component_recipe_id for edge in existing):
            raise ValidationError(
                f"Recipe {component_recipe_id} is already a component of "
                f"{recipe_id}; update its servings instead"
            )
        return self.repository.create_component(
            recipe_id, component_recipe_id, servings, notes
        )

    def update_component_servings(
        self,
        component_id: UUID,
        servings: float | None,
        notes: str | None = None,
    ) -> RecipeComponent:
        """Change the servings or notes of an existing edge."""
        if servings is not None and servings <= 0:
            raise ValidationError("Component servings must be greater than 0")
        if self.repository.get_component(component_id) is None:
            raise NotFoundError("Recipe component", component_id)
        return self.repository.update_component(component_id, servings, notes)

    def remove_component_edge(self, component_id: UUID) -> RecipeComponent:
        """Delete an edge and return what was removed."""
        component = self.repository.get_component(component_id)
        if component is None:
            raise NotFoundError("Recipe component", component_id)
        self.repository.delete_component(component_id)
        return component

    def all_component_ids(self, recipe_id: UUID) -> set[UUID]:
        """Return every recipe reachable from ``recipe_id`` through components."""
        found: set[UUID] = set()
        pending = [recipe_id]
        visited: set[UUID] = set()
        while pending:
            current = pending.pop()
            if current in visited:
                continue
            visited.add(current)
            for edge in self.repository.list_components(current):
                found.add(edge.component_recipe_id)
                pending.append(edge.component_recipe_id)
        return found

    def parent_recipe_ids(self, recipe_id: UUID) -> set[UUID]:
        """Return recipes that use ``recipe_id`` directly."""
        return self.repository.list_parent_recipe_ids(recipe_id)

    def usage_count(self, recipe_id: UUID) -> int:
        """Return how many recipes use ``recipe_id`` as a component."""
        return len(self.parent_recipe_ids(recipe_id))

    def _require_recipe(self, recipe_id: UUID) -> Recipe:
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe
