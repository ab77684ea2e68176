"""Domain models for exercise sessions."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class ExerciseType(StrEnum):
    """Supported exercise kinds."""

    TREADMILL = "treadmill"


class CalculatedField(StrEnum):
    """Which segment value was derived from the other two."""

    DURATION = "duration"
    SPEED = "speed"
    DISTANCE = "distance"
    NONE = "none"


@dataclass(frozen=True)
class SegmentMetrics:
    """Duration, speed and distance after filling in the missing value."""

    duration_minutes: float | None
    speed_mph: float | None
    distance_miles: float | None
    calculated_field: CalculatedField
    is_consistent: bool


@dataclass(frozen=True)
class Exercise:
    """An exercise session with totals summed from its segments."""

    id: UUID
    day_id: UUID
    exercise_type: ExerciseType
    cached_duration_minutes: float = 0.0
    cached_distance_miles: float = 0.0
    cached_calories_burned: float = 0.0
    notes: str | None = None


@dataclass(frozen=True)
class ExerciseSegment:
    """A constant-speed stretch of an exercise session."""

    id: UUID
    exercise_id: UUID
    segment_order: int
    duration_minutes: float | None
    speed_mph: float | None
    distance_miles: float | None
    incline_percent: float
    calculated_field: CalculatedField
    is_consistent: bool
    calories_burned: float
    weight_used_lbs: float | None = None
    avg_heart_rate: float | None = None
    notes: str | None = None
