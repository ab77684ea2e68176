"""Nutrition vector shared by food items, recipes, meal entries and days."""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class NutritionVector:
    """Nine-field nutrient record; sodium and cholesterol are in mg."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sodium: float = 0.0
    sugar: float = 0.0
    saturated_fat: float = 0.0
    cholesterol: float = 0.0

    @classmethod
    def zero(cls) -> "NutritionVector":
        """Return the all-zero vector."""
        return cls()

    @classmethod
    def total(cls, vectors: Iterable["NutritionVector"]) -> "NutritionVector":
        """Sum an iterable of vectors."""
        result = cls.zero()
        for vector in vectors:
            result = result + vector
        return result

    @classmethod
    def from_mapping(
        cls, row: Mapping[str, object], prefix: str = ""
    ) -> "NutritionVector":
        """Build a vector from a row, reading ``{prefix}{field}`` columns."""
        values: dict[str, float] = {}
        for item in fields(cls):
            raw = row.get(f"{prefix}{item.name}")
            values[item.name] = float(raw) if raw is not None else 0.0
        return cls(**values)

    def as_dict(self, prefix: str = "") -> dict[str, float]:
        """Return the vector as a column mapping."""
        return {f"{prefix}{key}": value for key, value in asdict(self).items()}

    def scale(self, multiplier: float) -> "NutritionVector":
        """Return every field multiplied by ``multiplier``."""
        return NutritionVector(
            **{key: value * multiplier for key, value in asdict(self).items()}
        )

    def __add__(self, other: "NutritionVector") -> "NutritionVector":
        if not isinstance(other, NutritionVector):
            return NotImplemented
        return NutritionVector(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
            sodium=self.sodium + other.sodium,
            sugar=self.sugar + other.sugar,
            saturated_fat=self.saturated_fat + other.saturated_fat,
            cholesterol=self.cholesterol + other.cholesterol,
        )

    def __mul__(self, multiplier: float) -> "NutritionVector":
        return self.scale(multiplier)

    __rmul__ = __mul__
