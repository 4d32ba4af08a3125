from __future__ import annotations
import logging
import sqlite3
from typing import Optional

from algorithms.progression_rules import ProgressionRules
from algorithms.rep_prediction import RepPredictor
from history_reader import HistoryReader
from models import ExerciseCategory, RepPrediction, RIRFeedback, RIRResponse

logger = logging.getLogger(__name__)


class ProgressionService:
    """Suggest working weights and preview reps for upcoming sets."""

    def __init__(self, history: HistoryReader) -> None:
        self.history = history

    def _category(self, exercise_id: int) -> Optional[ExerciseCategory]:
        exercise = self.history.exercise(exercise_id)
        if exercise is None:
            logger.warning("Exercise %s not found, using default weights", exercise_id)
            return None
        if exercise.category is None:
            logger.warning(
                "Unknown category for %s (id %s), using default weights",
                exercise.name,
                exercise_id,
            )
        return exercise.category

    def starting_weight(self, exercise_id: int) -> float:
        try:
            category = self._category(exercise_id)
        except sqlite3.Error:
            logger.exception("Could not read category for exercise %s", exercise_id)
            return ProgressionRules.DEFAULT_STARTING_WEIGHT
        return ProgressionRules.starting_weight(category)

    def suggest_next_weight(self, exercise_id: int) -> float:
        """Return the weight for the next session of ``exercise_id``.

        Set 1 of the most recent workout decides the progression. Without
        history, or when history cannot be read, the category's starting
        weight is returned.
        """
        try:
            last_sets = self.history.last_workout_sets(exercise_id)
            if not last_sets:
                weight = self.starting_weight(exercise_id)
                logger.debug(
                    "No history for exercise %s, starting at %s", exercise_id, weight
                )
                return weight
            first = last_sets[0]
            category = self._category(exercise_id)
            suggested = ProgressionRules.next_weight(
                category,
                first.weight,
                first.reps,
                first.target_reps,
                first.rir_response,
            )
        except sqlite3.Error:
            logger.exception(
                "Failed to read history for exercise %s, using starting weight",
                exercise_id,
            )
            return self.starting_weight(exercise_id)
        logger.debug(
            "Exercise %s: last %sx%s (target %s, %s) -> %s",
            exercise_id,
            first.weight,
            first.reps,
            first.target_reps or ProgressionRules.DEFAULT_TARGET_REPS,
            first.rir_response.value if first.rir_response else None,
            suggested,
        )
        return suggested

    def get_last_weight(self, exercise_id: int) -> Optional[float]:
        last_sets = self.history.last_workout_sets(exercise_id)
        return last_sets[0].weight if last_sets else None

    @staticmethod
    def predict_reps(
        set1_reps: int, set1_rir: RIRResponse | str, set_number: int
    ) -> RepPrediction:
        return RepPredictor.predict(set1_reps, set1_rir, set_number)

    @staticmethod
    def format_rep_prediction(prediction: RepPrediction) -> str:
        return RepPredictor.format(prediction)

    @staticmethod
    def get_rir_feedback(rir: RIRResponse | str) -> RIRFeedback:
        return RepPredictor.feedback(rir)
