"""Dependency ordering of stale recipes."""

import logging
from collections.abc import Iterable
from uuid import UUID

from nutrition_cascade.domain.catalog import RecipeComponent
from nutrition_cascade.domain.errors import GraphIntegrityError

_logger = logging.getLogger(__name__)


def order_recipes(
    recipe_ids: Iterable[UUID], edges: Iterable[RecipeComponent]
) -> list[UUID]:
    """Return ``recipe_ids`` with every component before the recipes using it.

    Only edges whose endpoints are both in ``recipe_ids`` constrain the
    order. Ready recipes are taken in id order so the result is stable.
    """
    nodes = set(recipe_ids)
    dependents: dict[UUID, set[UUID]] = {node: set() for node in nodes}
    in_degree: dict[UUID, int] = dict.fromkeys(nodes, 0)
    for edge in edges:
        parent, child = edge.recipe_id, edge.component_recipe_id
        if parent not in nodes or child not in nodes:
            continue
        if parent in dependents[child]:
            continue
        dependents[child].add(parent)
        in_degree[parent] += 1

    ready = sorted(
        (node for node, degree in in_degree.items() if degree == 0), key=str
    )
    ordered: list[UUID] = []
    while ready:
        current = ready.pop(0)
        ordered.append(current)
        released = []
        for parent in dependents[current]:
            in_degree[parent] -= 1
            if in_degree[parent] == 0:
                released.append(parent)
        if released:
            ready = sorted([*ready, *released], key=str)

    if len(ordered) != len(nodes):
        remaining = sorted(nodes.difference(ordered), key=str)
        _logger.error(
            "Recipe ordering stalled with %s recipes left: %s",
            len(remaining),
            remaining,
        )
        raise GraphIntegrityError(remaining)
    return ordered
