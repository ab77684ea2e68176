"""Measurement unit taxonomy and conversion constants."""

from dataclasses import dataclass
from enum import StrEnum


class UnitCategory(StrEnum):
    """Category of a measurement unit."""

    WEIGHT = "weight"
    VOLUME = "volume"
    COUNT = "count"
    CUSTOM = "custom"


class BaseUnitType(StrEnum):
    """Canonical storage basis of a food item."""

    WEIGHT = "weight"
    VOLUME = "volume"
    COUNT = "count"

    @property
    def canonical_unit(self) -> str:
        """Return the unit string values are stored against."""
        return {"weight": "g", "volume": "ml", "count": "each"}[self.value]


class CanonicalUnit(StrEnum):
    """Closed set of units with a known physical factor."""

    GRAM = "g"
    MILLIGRAM = "mg"
    KILOGRAM = "kg"
    OUNCE = "oz"
    POUND = "lb"
    MILLILITER = "ml"
    LITER = "l"
    TEASPOON = "tsp"
    TABLESPOON = "tbsp"
    FLUID_OUNCE = "fl oz"
    CUP = "cup"
    PINT = "pint"
    QUART = "quart"
    GALLON = "gallon"
    EACH = "each"

    @property
    def category(self) -> UnitCategory:
        """Return the category of this unit."""
        if self in GRAMS_PER_UNIT:
            return UnitCategory.WEIGHT
        if self in ML_PER_UNIT:
            return UnitCategory.VOLUME
        return UnitCategory.COUNT


class ConversionMode(StrEnum):
    """How the converter treats an ingredient with no conversion path."""

    STRICT = "strict"
    BEST_EFFORT = "best_effort"


class ConversionRule(StrEnum):
    """Rule that produced a nutrition multiplier."""

    SERVINGS = "servings"
    SAME_UNIT = "same_unit"
    WEIGHT = "weight"
    GRAMS = "grams"
    VOLUME = "volume"
    MILLILITERS = "milliliters"
    FALLBACK = "fallback"


ML_PER_TSP = 4.92892
ML_PER_TBSP = 14.7868
ML_PER_FL_OZ = 29.5735
ML_PER_CUP = 236.588
ML_PER_PINT = 473.176
ML_PER_QUART = 946.353
ML_PER_LITER = 1000.0
ML_PER_GALLON = 3785.41

G_PER_MG = 0.001
G_PER_KG = 1000.0
G_PER_OZ = 28.3495
G_PER_LB = 453.592

GRAMS_PER_UNIT: dict[CanonicalUnit, float] = {
    CanonicalUnit.GRAM: 1.0,
    CanonicalUnit.MILLIGRAM: G_PER_MG,
    CanonicalUnit.KILOGRAM: G_PER_KG,
    CanonicalUnit.OUNCE: G_PER_OZ,
    CanonicalUnit.POUND: G_PER_LB,
}

ML_PER_UNIT: dict[CanonicalUnit, float] = {
    CanonicalUnit.MILLILITER: 1.0,
    CanonicalUnit.LITER: ML_PER_LITER,
    CanonicalUnit.TEASPOON: ML_PER_TSP,
    CanonicalUnit.TABLESPOON: ML_PER_TBSP,
    CanonicalUnit.FLUID_OUNCE: ML_PER_FL_OZ,
    CanonicalUnit.CUP: ML_PER_CUP,
    CanonicalUnit.PINT: ML_PER_PINT,
    CanonicalUnit.QUART: ML_PER_QUART,
    CanonicalUnit.GALLON: ML_PER_GALLON,
}

UNIT_ALIASES: dict[str, CanonicalUnit] = {
    "g": CanonicalUnit.GRAM,
    "gram": CanonicalUnit.GRAM,
    "grams": CanonicalUnit.GRAM,
    "mg": CanonicalUnit.MILLIGRAM,
    "milligram": CanonicalUnit.MILLIGRAM,
    "milligrams": CanonicalUnit.MILLIGRAM,
    "kg": CanonicalUnit.KILOGRAM,
    "kilogram": CanonicalUnit.KILOGRAM,
    "kilograms": CanonicalUnit.KILOGRAM,
    "oz": CanonicalUnit.OUNCE,
    "ounce": CanonicalUnit.OUNCE,
    "ounces": CanonicalUnit.OUNCE,
    "lb": CanonicalUnit.POUND,
    "lbs": CanonicalUnit.POUND,
    "pound": CanonicalUnit.POUND,
    "pounds": CanonicalUnit.POUND,
    "ml": CanonicalUnit.MILLILITER,
    "milliliter": CanonicalUnit.MILLILITER,
    "milliliters": CanonicalUnit.MILLILITER,
    "millilitre": CanonicalUnit.MILLILITER,
    "millilitres": CanonicalUnit.MILLILITER,
    "l": CanonicalUnit.LITER,
    "liter": CanonicalUnit.LITER,
    "liters": CanonicalUnit.LITER,
    "litre": CanonicalUnit.LITER,
    "litres": CanonicalUnit.LITER,
    "tsp": CanonicalUnit.TEASPOON,
    "teaspoon": CanonicalUnit.TEASPOON,
    "teaspoons": CanonicalUnit.TEASPOON,
    "tbsp": CanonicalUnit.TABLESPOON,
    "tablespoon": CanonicalUnit.TABLESPOON,
    "tablespoons": CanonicalUnit.TABLESPOON,
    "fl oz": CanonicalUnit.FLUID_OUNCE,
    "floz": CanonicalUnit.FLUID_OUNCE,
    "fluid ounce": CanonicalUnit.FLUID_OUNCE,
    "fluid ounces": CanonicalUnit.FLUID_OUNCE,
    "cup": CanonicalUnit.CUP,
    "cups": CanonicalUnit.CUP,
    "pint": CanonicalUnit.PINT,
    "pints": CanonicalUnit.PINT,
    "quart": CanonicalUnit.QUART,
    "quarts": CanonicalUnit.QUART,
    "gallon": CanonicalUnit.GALLON,
    "gallons": CanonicalUnit.GALLON,
    "each": CanonicalUnit.EACH,
    "piece": CanonicalUnit.EACH,
    "pieces": CanonicalUnit.EACH,
    "item": CanonicalUnit.EACH,
    "items": CanonicalUnit.EACH,
    "count": CanonicalUnit.EACH,
    "unit": CanonicalUnit.EACH,
    "units": CanonicalUnit.EACH,
}

SERVING_UNITS = frozenset({"serving", "servings"})
GRAM_UNITS = frozenset({"g", "gram", "grams"})
MILLILITER_UNITS = frozenset({"ml", "milliliter", "milliliters"})


@dataclass(frozen=True)
class ParsedUnit:
    """A unit string split into its base unit and optional annotation.

    ``canonical`` is ``None`` for custom units such as ``scoop`` or
    ``slice``; those only convert through their gram or ml annotation.
    """

    base_unit: str
    canonical: CanonicalUnit | None
    gram_weight: float | None
    ml_amount: float | None

    @property
    def category(self) -> UnitCategory:
        """Return the unit category."""
        if self.canonical is None:
            return UnitCategory.CUSTOM
        return self.canonical.category


@dataclass(frozen=True)
class ServingProfile:
    """Conversion factors fixed on a food item when it is written."""

    base_unit_type: BaseUnitType
    grams_per_serving: float | None
    ml_per_serving: float | None


@dataclass(frozen=True)
class Conversion:
    """Outcome of converting one ingredient usage to a serving multiplier."""

    multiplier: float
    rule: ConversionRule
    warning: str | None = None
