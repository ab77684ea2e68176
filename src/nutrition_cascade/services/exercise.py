"""Treadmill calorie model and exercise logging."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_cascade.domain.errors import NotFoundError, ValidationError
from nutrition_cascade.domain.exercise import (
    CalculatedField,
    Exercise,
    ExerciseSegment,
    SegmentMetrics,
)
from nutrition_cascade.domain.inputs import (
    MIN_SEGMENT_METRICS,
    ExerciseCreate,
    SegmentCreate,
    SegmentUpdate,
)
from nutrition_cascade.services.days import DayService

_logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_LBS = 150.0
KG_PER_LB = 0.453592
INCLINE_MET_PER_PERCENT = 0.1
CONSISTENCY_TOLERANCE = 0.01

# (upper speed bound in mph, MET) for walking and running on a treadmill.
_MET_STEPS: tuple[tuple[float, float], ...] = (
    (2.0, 2.0),
    (2.5, 2.5),
    (3.0, 3.0),
    (3.5, 3.5),
    (4.0, 4.3),
    (4.5, 5.0),
    (5.0, 6.0),
    (5.5, 8.3),
    (6.0, 9.0),
    (7.0, 9.8),
    (8.0, 10.5),
)
_MAX_MET = 11.5


def met_for_speed(speed_mph: float) -> float:
    """Return the level-ground MET value for a treadmill speed."""
    for upper, met in _MET_STEPS:
        if speed_mph < upper:
            return met
    return _MAX_MET


def calories_burned(
    duration_minutes: float | None,
    speed_mph: float | None,
    incline_percent: float = 0.0,
    weight_lbs: float | None = None,
) -> float:
    """Estimate kcal burned, rounded to one decimal.

    ``MET x kg x hours`` with the MET raised by 0.1 per percent of incline.
    """
    if not duration_minutes or not speed_mph:
        return 0.0
    if duration_minutes <= 0 or speed_mph <= 0:
        return 0.0
    weight_kg = (weight_lbs or DEFAULT_WEIGHT_LBS) * KG_PER_LB
    met = met_for_speed(speed_mph) + incline_percent * INCLINE_MET_PER_PERCENT
    calories = met * weight_kg * (duration_minutes / 60.0)
    return round(calories * 10) / 10


def derive_missing(
    duration_minutes: float | None,
    speed_mph: float | None,
    distance_miles: float | None,
) -> SegmentMetrics:
    """Fill in the one missing value of duration, speed and distance."""
    duration, speed, distance = duration_minutes, speed_mph, distance_miles
    if duration is not None and speed is not None and distance is not None:
        expected = speed * duration / 60.0
        error = abs(expected - distance) / max(distance, 0.001)
        return SegmentMetrics(
            duration,
            speed,
            distance,
            CalculatedField.NONE,
            is_consistent=error < CONSISTENCY_TOLERANCE,
        )
    if duration is not None and speed is not None:
        return SegmentMetrics(
            duration, speed, speed * duration / 60.0, CalculatedField.DISTANCE, True
        )
    if duration is not None and distance is not None:
        derived = distance / (duration / 60.0) if duration > 0 else 0.0
        return SegmentMetrics(
            duration, derived, distance, CalculatedField.SPEED, True
        )
    if speed is not None and distance is not None:
        derived = distance / speed * 60.0 if speed > 0 else 0.0
        return SegmentMetrics(
            derived, speed, distance, CalculatedField.DURATION, True
        )
    return SegmentMetrics(duration, speed, distance, CalculatedField.NONE, True)


class ExerciseRepository(Protocol):
    """Persistence interface for exercises, segments and body weight."""

    def create_exercise(self, payload: dict[str, object]) -> Exercise:
        """Create an exercise and return it."""

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        """Return an exercise by id."""

    def update_exercise(
        self, exercise_id: UUID, payload: dict[str, object]
    ) -> Exercise:
        """Update an exercise and return it."""

    def delete_exercise(self, exercise_id: UUID) -> bool:
        """Delete an exercise and its segments."""

    def list_exercises(self, day_id: UUID) -> list[Exercise]:
        """Return the exercises of a day."""

    def list_all_exercises(self) -> list[Exercise]:
        """Return every exercise."""

    def get_segment(self, segment_id: UUID) -> ExerciseSegment | None:
        """Return a segment by id."""

    def list_segments(self, exercise_id: UUID) -> list[ExerciseSegment]:
        """Return the segments of an exercise in order."""

    def create_segment(self, payload: dict[str, object]) -> ExerciseSegment:
        """Create a segment and return it."""

    def update_segment(
        self, segment_id: UUID, payload: dict[str, object]
    ) -> ExerciseSegment:
        """Update a segment and return it."""

    def delete_segment(self, segment_id: UUID) -> bool:
        """Delete a segment."""

    def get_latest_weight_lbs(self) -> float | None:
        """Return the most recently recorded body weight."""

    def update_day_calories_burned(self, day_id: UUID, calories: float) -> None:
        """Store the burned calorie total of a day."""


@dataclass
class ExerciseService:
    """Logs exercise and keeps burned-calorie totals current."""

    repository: ExerciseRepository
    days: DayService
    default_weight_lbs: float = DEFAULT_WEIGHT_LBS

    def add_exercise(self, payload: ExerciseCreate) -> Exercise:
        """Create an exercise session on the given date."""
        day = self.days.get_or_create_day(payload.day)
        return self.repository.create_exercise(
            {
                "day_id": str(day.id),
                "exercise_type": payload.exercise_type.value,
                "notes": payload.notes,
                "cached_duration_minutes": 0.0,
                "cached_distance_miles": 0.0,
                "cached_calories_burned": 0.0,
            }
        )

    def update_exercise_notes(self, exercise_id: UUID, notes: str | None) -> Exercise:
        """Change the notes of an exercise."""
        self._require_exercise(exercise_id)
        return self.repository.update_exercise(exercise_id, {"notes": notes})

    def delete_exercise(self, exercise_id: UUID) -> None:
        """Delete an exercise and refresh its day."""
        exercise = self._require_exercise(exercise_id)
        self.repository.delete_exercise(exercise_id)
        self._refresh_day(exercise.day_id)

    def add_segment(self, payload: SegmentCreate) -> ExerciseSegment:
        """Append a segment, deriving the missing metric and calories."""
        exercise = self._require_exercise(payload.exercise_id)
        order = len(self.repository.list_segments(exercise.id)) + 1
        values = self._segment_values(
            payload.duration_minutes,
            payload.speed_mph,
            payload.distance_miles,
            payload.incline_percent,
            self._current_weight(),
        )
        segment = self.repository.create_segment(
            {
                "exercise_id": str(exercise.id),
                "segment_order": order,
                "avg_heart_rate": payload.avg_heart_rate,
                "notes": payload.notes,
                **values,
            }
        )
        self._refresh_exercise(exercise)
        return segment

    def update_segment(
        self, segment_id: UUID, payload: SegmentUpdate
    ) -> ExerciseSegment:
        """Apply a partial update and re-derive the segment.

        The previously derived metric is dropped so it is derived again
        from the values the user entered.
        """
        current = self._require_segment(segment_id)
        metrics = _entered_metrics(current)
        changes = payload.model_dump(exclude_unset=True)
        metrics.update({key: changes[key] for key in metrics if key in changes})
        if sum(value is not None for value in metrics.values()) < MIN_SEGMENT_METRICS:
            raise ValidationError(
                "A segment needs at least 2 of duration, speed and distance"
            )
        incline = changes.get("incline_percent")
        if incline is None:
            incline = current.incline_percent

        values = self._segment_values(
            metrics["duration_minutes"],
            metrics["speed_mph"],
            metrics["distance_miles"],
            incline,
            self._current_weight(),
        )
        extra = {
            key: changes[key] for key in ("avg_heart_rate", "notes") if key in changes
        }
        segment = self.repository.update_segment(segment_id, {**values, **extra})
        self._refresh_exercise(self._require_exercise(current.exercise_id))
        return segment

    def delete_segment(self, segment_id: UUID) -> None:
        """Delete a segment and refresh its exercise and day."""
        segment = self._require_segment(segment_id)
        self.repository.delete_segment(segment_id)
        self._refresh_exercise(self._require_exercise(segment.exercise_id))

    def recalculate_all(self) -> int:
        """Recompute every segment with the current weight; return the count."""
        weight = self._current_weight()
        count = 0
        day_ids: set[UUID] = set()
        for exercise in self.repository.list_all_exercises():
            for segment in self.repository.list_segments(exercise.id):
                entered = _entered_metrics(segment)
                values = self._segment_values(
                    entered["duration_minutes"],
                    entered["speed_mph"],
                    entered["distance_miles"],
                    segment.incline_percent,
                    weight,
                )
                self.repository.update_segment(segment.id, values)
                count += 1
            self._refresh_totals(exercise)
            day_ids.add(exercise.day_id)
        for day_id in day_ids:
            self._refresh_day(day_id)
        _logger.info("Recalculated %s segments at %s lb", count, weight)
        return count

    @staticmethod
    def _segment_values(
        duration_minutes: float | None,
        speed_mph: float | None,
        distance_miles: float | None,
        incline_percent: float,
        weight_lbs: float,
    ) -> dict[str, object]:
        metrics = derive_missing(duration_minutes, speed_mph, distance_miles)
        return {
            "duration_minutes": metrics.duration_minutes,
            "speed_mph": metrics.speed_mph,
            "distance_miles": metrics.distance_miles,
            "incline_percent": incline_percent,
            "calculated_field": metrics.calculated_field.value,
            "is_consistent": metrics.is_consistent,
            "calories_burned": calories_burned(
                metrics.duration_minutes,
                metrics.speed_mph,
                incline_percent,
                weight_lbs,
            ),
            "weight_used_lbs": weight_lbs,
        }

    def _current_weight(self) -> float:
        return self.repository.get_latest_weight_lbs() or self.default_weight_lbs

    def _refresh_exercise(self, exercise: Exercise) -> None:
        self._refresh_totals(exercise)
        self._refresh_day(exercise.day_id)

    def _refresh_totals(self, exercise: Exercise) -> None:
        segments = self.repository.list_segments(exercise.id)
        self.repository.update_exercise(
            exercise.id,
            {
                "cached_duration_minutes": sum(
                    segment.duration_minutes or 0.0 for segment in segments
                ),
                "cached_distance_miles": sum(
                    segment.distance_miles or 0.0 for segment in segments
                ),
                "cached_calories_burned": sum(
                    segment.calories_burned for segment in segments
                ),
            },
        )

    def _refresh_day(self, day_id: UUID) -> None:
        total = sum(
            exercise.cached_calories_burned
            for exercise in self.repository.list_exercises(day_id)
        )
        self.repository.update_day_calories_burned(day_id, total)

    def _require_exercise(self, exercise_id: UUID) -> Exercise:
        exercise = self.repository.get_exercise(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        return exercise

    def _require_segment(self, segment_id: UUID) -> ExerciseSegment:
        segment = self.repository.get_segment(segment_id)
        if segment is None:
            raise NotFoundError("Exercise segment", segment_id)
        return segment


def _entered_metrics(segment: ExerciseSegment) -> dict[str, float | None]:
    """Return the segment's metrics without the one that was derived."""
    metrics = {
        "duration_minutes": segment.duration_minutes,
        "speed_mph": segment.speed_mph,
        "distance_miles": segment.distance_miles,
    }
    derived = {
        CalculatedField.DURATION: "duration_minutes",
        CalculatedField.SPEED: "speed_mph",
        CalculatedField.DISTANCE: "distance_miles",
    }.get(segment.calculated_field)
    if derived is not None:
        metrics[derived] = None
    return metrics
