"""Unit parsing and nutrition multiplier conversion."""

import logging
import re
from functools import lru_cache

from nutrition_cascade.domain.catalog import FoodItem
from nutrition_cascade.domain.errors import UnitConversionError
from nutrition_cascade.domain.units import (
    GRAM_UNITS,
    GRAMS_PER_UNIT,
    MILLILITER_UNITS,
    ML_PER_UNIT,
    SERVING_UNITS,
    UNIT_ALIASES,
    BaseUnitType,
    Conversion,
    ConversionMode,
    ConversionRule,
    ParsedUnit,
    ServingProfile,
    UnitCategory,
)

_logger = logging.getLogger(__name__)

_ANNOTATION = re.compile(r"^(?P<base>[^(]*)\((?P<note>[^)]*)\)")
_GRAM_NOTE = re.compile(r"^(?P<amount>\d+(?:\.\d+)?)\s*(?:g|gram|grams)$")
_ML_NOTE = re.compile(
    r"^(?P<amount>\d+(?:\.\d+)?)\s*"
    r"(?:ml|milliliter|milliliters|millilitre|millilitres)$"
)


@lru_cache(maxsize=1024)
def parse_unit(unit: str) -> ParsedUnit:
    """Split a unit string into base unit and optional annotation.

    ``"tbsp (20g)"`` parses to base ``tbsp`` with a 20 g weight per unit,
    ``"cup (240ml)"`` to base ``cup`` with 240 ml per unit.
    """
    text = unit.strip().lower()
    gram_weight: float | None = None
    ml_amount: float | None = None
    match = _ANNOTATION.match(text)
    if match:
        text = match.group("base").strip()
        note = match.group("note").strip()
        gram_match = _GRAM_NOTE.match(note)
        ml_match = _ML_NOTE.match(note)
        if gram_match:
            gram_weight = float(gram_match.group("amount"))
        if ml_match:
            ml_amount = float(ml_match.group("amount"))
    return ParsedUnit(
        base_unit=text,
        canonical=UNIT_ALIASES.get(text),
        gram_weight=gram_weight,
        ml_amount=ml_amount,
    )


def categorize_unit(unit: str) -> UnitCategory:
    """Return the category of a unit string."""
    return parse_unit(unit).category


def to_grams(quantity: float, unit: str) -> float | None:
    """Convert a quantity to grams, or ``None`` without a weight basis."""
    parsed = parse_unit(unit)
    if parsed.gram_weight is not None:
        return quantity * parsed.gram_weight
    if parsed.canonical in GRAMS_PER_UNIT:
        return quantity * GRAMS_PER_UNIT[parsed.canonical]
    return None


def to_ml(quantity: float, unit: str) -> float | None:
    """Convert a quantity to millilitres, or ``None`` without a volume basis."""
    parsed = parse_unit(unit)
    if parsed.ml_amount is not None:
        return quantity * parsed.ml_amount
    if parsed.canonical in ML_PER_UNIT:
        return quantity * ML_PER_UNIT[parsed.canonical]
    return None


def infer_base_unit_type(serving_unit: str) -> BaseUnitType:
    """Infer how a food item's nutrition is based from its serving unit."""
    parsed = parse_unit(serving_unit)
    if parsed.gram_weight is not None:
        return BaseUnitType.WEIGHT
    if parsed.ml_amount is not None:
        return BaseUnitType.VOLUME
    category = parsed.category
    if category is UnitCategory.VOLUME:
        return BaseUnitType.VOLUME
    if category is UnitCategory.COUNT:
        return BaseUnitType.COUNT
    return BaseUnitType.WEIGHT


def grams_per_serving(serving_size: float, serving_unit: str) -> float | None:
    """Return the weight of one serving in grams when it can be known."""
    return to_grams(serving_size, serving_unit)


def ml_per_serving(serving_size: float, serving_unit: str) -> float | None:
    """Return the volume of one serving in millilitres when it can be known."""
    return to_ml(serving_size, serving_unit)


def serving_profile(serving_size: float, serving_unit: str) -> ServingProfile:
    """Derive the conversion factors stored on a food item."""
    return ServingProfile(
        base_unit_type=infer_base_unit_type(serving_unit),
        grams_per_serving=grams_per_serving(serving_size, serving_unit),
        ml_per_serving=ml_per_serving(serving_size, serving_unit),
    )


def resolve_multiplier(  # noqa: PLR0911, PLR0913
    quantity: float,
    ingredient_unit: str,
    serving_size: float,
    serving_unit: str,
    grams_per_serving: float | None,
    ml_per_serving: float | None,
    mode: ConversionMode = ConversionMode.STRICT,
) -> Conversion:
    """Return how many food servings ``quantity`` of ``ingredient_unit`` is.

    Rules are tried in order; the first that applies wins. When none does,
    strict mode raises ``UnitConversionError`` and best-effort mode treats
    the quantity as a serving count and attaches a warning.
    """
    raw = ingredient_unit.strip().lower()
    if raw in SERVING_UNITS:
        return Conversion(quantity, ConversionRule.SERVINGS)

    ingredient = parse_unit(ingredient_unit)
    food = parse_unit(serving_unit)
    if ingredient.base_unit == food.base_unit:
        return Conversion(quantity / serving_size, ConversionRule.SAME_UNIT)

    food_is_weighed = (
        food.category is UnitCategory.WEIGHT or food.gram_weight is not None
    )
    if (
        ingredient.category is UnitCategory.WEIGHT
        and food_is_weighed
        and grams_per_serving
    ):
        grams = to_grams(quantity, ingredient_unit)
        if grams is not None:
            return Conversion(grams / grams_per_serving, ConversionRule.WEIGHT)

    if raw in GRAM_UNITS and grams_per_serving:
        return Conversion(quantity / grams_per_serving, ConversionRule.GRAMS)

    food_is_measured = (
        food.category is UnitCategory.VOLUME
        or food.ml_amount is not None
        or bool(ml_per_serving)
    )
    if ingredient.category is UnitCategory.VOLUME and food_is_measured:
        ml = to_ml(quantity, ingredient_unit)
        food_ml = ml_per_serving or to_ml(serving_size, serving_unit)
        if ml is not None and food_ml:
            return Conversion(ml / food_ml, ConversionRule.VOLUME)

    if raw in MILLILITER_UNITS and ml_per_serving:
        return Conversion(quantity / ml_per_serving, ConversionRule.MILLILITERS)

    if mode is ConversionMode.STRICT:
        raise UnitConversionError(quantity, ingredient_unit, serving_unit)
    warning = (
        f"Unit conversion fallback: '{ingredient_unit}' vs '{serving_unit}'. "
        f"Treating {quantity} as servings."
    )
    _logger.warning(warning)
    return Conversion(quantity, ConversionRule.FALLBACK, warning=warning)


def nutrition_multiplier(  # noqa: PLR0913
    quantity: float,
    ingredient_unit: str,
    serving_size: float,
    serving_unit: str,
    grams_per_serving: float | None,
    ml_per_serving: float | None,
    mode: ConversionMode = ConversionMode.STRICT,
) -> float:
    """Return the nutrition multiplier for one ingredient usage."""
    return resolve_multiplier(
        quantity,
        ingredient_unit,
        serving_size,
        serving_unit,
        grams_per_serving,
        ml_per_serving,
        mode,
    ).multiplier


def convert_for_food(
    quantity: float,
    unit: str,
    food: FoodItem,
    mode: ConversionMode = ConversionMode.STRICT,
) -> Conversion:
    """Resolve a conversion against a food item's stored serving profile."""
    grams = food.grams_per_serving
    ml = food.ml_per_serving
    if grams is None and ml is None:
        profile = serving_profile(food.serving_size, food.serving_unit)
        grams, ml = profile.grams_per_serving, profile.ml_per_serving
    return resolve_multiplier(
        quantity, unit, food.serving_size, food.serving_unit, grams, ml, mode
    )


def convert_multiplier(
    quantity: float,
    unit: str,
    food: FoodItem,
    mode: ConversionMode = ConversionMode.STRICT,
) -> float:
    """Return how many servings of ``food`` the given quantity represents."""
    return convert_for_food(quantity, unit, food, mode).multiplier
