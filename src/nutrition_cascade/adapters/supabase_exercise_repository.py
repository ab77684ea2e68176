"""Supabase implementation for exercise sessions."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_cascade.adapters.supabase_rows import parse_exercise, parse_segment
from nutrition_cascade.domain.errors import PersistenceError
from nutrition_cascade.domain.exercise import Exercise, ExerciseSegment
from nutrition_cascade.services.exercise import ExerciseRepository


@dataclass
class SupabaseExerciseRepository(ExerciseRepository):
    """Supabase-backed repository for exercises, segments and weight."""

    client: Client

    def create_exercise(self, payload: dict[str, object]) -> Exercise:
        """Create an exercise and return it."""
        response = self.client.table("exercises").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create exercise")
        return parse_exercise(response.data[0])

    def get_exercise(self, exercise_id: UUID) -> Exercise | None:
        """Return an exercise by id."""
        response = (
            self.client.table("exercises")
            .select("*")
            .eq("id", str(exercise_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_exercise(response.data[0])

    def update_exercise(
        self, exercise_id: UUID, payload: dict[str, object]
    ) -> Exercise:
        """Update an exercise and return it."""
        response = (
            self.client.table("exercises")
            .update(payload)
            .eq("id", str(exercise_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update exercise")
        return parse_exercise(response.data[0])

    def delete_exercise(self, exercise_id: UUID) -> bool:
        """Delete an exercise and its segments."""
        self.client.table("exercise_segments").delete().eq(
            "exercise_id", str(exercise_id)
        ).execute()
        response = (
            self.client.table("exercises")
            .delete()
            .eq("id", str(exercise_id))
            .execute()
        )
        return bool(response.data)

    def list_exercises(self, day_id: UUID) -> list[Exercise]:
        """Return the exercises of a day."""
        response = (
            self.client.table("exercises")
            .select("*")
            .eq("day_id", str(day_id))
            .execute()
        )
        return [parse_exercise(row) for row in response.data or []]

    def list_all_exercises(self) -> list[Exercise]:
        """Return every exercise."""
        response = self.client.table("exercises").select("*").execute()
        return [parse_exercise(row) for row in response.data or []]

    def get_segment(self, segment_id: UUID) -> ExerciseSegment | None:
        """Return a segment by id."""
        response = (
            self.client.table("exercise_segments")
            .select("*")
            .eq("id", str(segment_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_segment(response.data[0])

    def list_segments(self, exercise_id: UUID) -> list[ExerciseSegment]:
        """Return the segments of an exercise in order."""
        response = (
            self.client.table("exercise_segments")
            .select("*")
            .eq("exercise_id", str(exercise_id))
            .order("segment_order")
            .execute()
        )
        return [parse_segment(row) for row in response.data or []]

    def create_segment(self, payload: dict[str, object]) -> ExerciseSegment:
        """Create a segment and return it."""
        response = self.client.table("exercise_segments").insert(payload).execute()
        if not response.data:
            raise PersistenceError("Failed to create exercise segment")
        return parse_segment(response.data[0])

    def update_segment(
        self, segment_id: UUID, payload: dict[str, object]
    ) -> ExerciseSegment:
        """Update a segment and return it."""
        response = (
            self.client.table("exercise_segments")
            .update(payload)
            .eq("id", str(segment_id))
            .execute()
        )
        if not response.data:
            raise PersistenceError("Failed to update exercise segment")
        return parse_segment(response.data[0])

    def delete_segment(self, segment_id: UUID) -> bool:
        """Delete a segment."""
        response = (
            self.client.table("exercise_segments")
            .delete()
            .eq("id", str(segment_id))
            .execute()
        )
        return bool(response.data)

    def get_latest_weight_lbs(self) -> float | None:
        """Return the most recently recorded body weight."""
        response = (
            self.client.table("vitals")
            .select("value")
            .eq("vital_type", "weight")
            .order("recorded_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return float(response.data[0]["value"])

    def update_day_calories_burned(self, day_id: UUID, calories: float) -> None:
        """Store the burned calorie total of a day."""
        self.client.table("days").update({"cached_calories_burned": calories}).eq(
            "id", str(day_id)
        ).execute()
