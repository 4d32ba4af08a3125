from __future__ import annotations
from typing import List, Optional

from db import ExerciseRepository, SetRepository, WorkoutRepository
from models import ExerciseCategory, ExerciseRecord, SetRecord, WorkoutRecord


class HistoryReader:
    """Ordered working-set history per exercise.

    Every query excludes warm-up sets and orders by workout date descending
    (workout id descending on the same date), then set number ascending.
    """

    LAST_WORKOUT_SET_LIMIT = 10

    def __init__(
        self,
        exercise_repo: ExerciseRepository,
        workout_repo: WorkoutRepository,
        set_repo: SetRepository,
    ) -> None:
        self.exercises = exercise_repo
        self.workouts = workout_repo
        self.sets = set_repo

    def recent_sets(self, exercise_id: int, limit: int = 50) -> List[SetRecord]:
        return self.sets.fetch_recent_for_exercise(exercise_id, limit)

    def recent_workouts(self, exercise_id: int, limit: int) -> List[WorkoutRecord]:
        return self.workouts.fetch_recent_for_exercise(exercise_id, limit)

    def last_workout_sets(self, exercise_id: int) -> List[SetRecord]:
        """Sets of the most recent workout that trained the exercise."""
        sets = self.recent_sets(exercise_id, self.LAST_WORKOUT_SET_LIMIT)
        if not sets:
            return []
        last_workout_id = sets[0].workout_id
        return [s for s in sets if s.workout_id == last_workout_id]

    def exercise(self, exercise_id: int) -> Optional[ExerciseRecord]:
        return self.exercises.find(exercise_id)

    def category(self, exercise_id: int) -> Optional[ExerciseCategory]:
        return self.exercises.fetch_category(exercise_id)

    def all_exercises(self) -> List[ExerciseRecord]:
        return self.exercises.fetch_all_exercises()
