from typing import Iterable, List, Optional, Sequence

import numpy as np

from models import (
    AlertLevel,
    ExerciseRecord,
    SandbaggingAlert,
    SetRecord,
    StagnationAlert,
    WorkoutRecord,
)


class PlateauDetector:
    """Classify stalled progress and sandbagged sessions from set history.

    Every method works on history passed in explicitly. Workouts are expected
    newest first and sets in history order (newest workout first, set number
    ascending within a workout).
    """

    STAGNATION_WINDOW: int = 5
    STAGNATION_SET_LIMIT: int = 50
    STAGNATION_MIN_WORKOUTS: int = 3
    STAGNATION_TRIGGER: int = 3
    SEVERE_STAGNATION: int = 4
    INCREASE_SET_LIMIT: int = 100
    INCREASE_WORKOUT_LIMIT: int = 10

    SANDBAG_WINDOW: int = 3
    SANDBAG_SET_LIMIT: int = 20
    SANDBAG_MIN_WORKOUTS: int = 2
    SANDBAG_MIN_SETS: int = 3
    FLAT_REP_RANGE: int = 1
    FLAT_WORKOUT_TRIGGER: int = 2
    SEVERE_FLAT_WORKOUTS: int = 3

    INTERVENTIONS: tuple[str, ...] = (
        "Deload to 90% of current weight for 1 week to recover",
        "Switch to 3×8-12 reps instead of 5×5 to build volume",
        "Add 1 extra set per workout (6×5 instead of 5×5)",
        "Try a different variation (front squat, incline bench, etc.)",
        "Take a full rest day and focus on recovery",
        "Review your nutrition and sleep quality",
    )
    SEVERE_ORDER: tuple[int, ...] = (0, 1, 3, 4)
    MODERATE_ORDER: tuple[int, ...] = (1, 2, 3, 0)

    # stagnation

    @staticmethod
    def sets_for_workout(sets: Iterable[SetRecord], workout_id: int) -> List[SetRecord]:
        return sorted(
            (s for s in sets if s.workout_id == workout_id and not s.is_warmup),
            key=lambda s: s.set_number,
        )

    @classmethod
    def top_weights(
        cls, workouts: Sequence[WorkoutRecord], sets: Sequence[SetRecord]
    ) -> List[float]:
        """Return the heaviest set of each workout, 0 when none was fetched."""
        return [
            max((s.weight for s in cls.sets_for_workout(sets, w.id)), default=0.0)
            for w in workouts
        ]

    @staticmethod
    def stagnant_streak(top_weights: Sequence[float]) -> int:
        """Count leading workouts that match the most recent top weight."""
        if not top_weights:
            return 0
        first = top_weights[0]
        count = 0
        for weight in top_weights:
            if weight != first:
                break
            count += 1
        return count

    @classmethod
    def stagnation_level(cls, streak: int) -> Optional[AlertLevel]:
        if streak < cls.STAGNATION_TRIGGER:
            return None
        if streak >= cls.SEVERE_STAGNATION:
            return AlertLevel.ERROR
        return AlertLevel.WARNING

    @classmethod
    def stagnation_message(cls, streak: int, exercise_name: str) -> str:
        if streak >= cls.SEVERE_STAGNATION:
            return (
                f"{exercise_name} has been stuck at the same weight for {streak} "
                "workouts. Time for a change!"
            )
        return (
            f"{exercise_name} hasn't progressed in {streak} workouts. "
            "Consider an intervention."
        )

    @classmethod
    def interventions(cls, streak: int) -> List[str]:
        order = cls.SEVERE_ORDER if streak >= cls.SEVERE_STAGNATION else cls.MODERATE_ORDER
        return [cls.INTERVENTIONS[i] for i in order]

    @staticmethod
    def last_weight_increase(
        sets: Sequence[SetRecord],
        workouts: Sequence[WorkoutRecord],
        current_weight: float,
    ) -> Optional[str]:
        """Return the date of the workout whose top weight sits closest below
        ``current_weight``.

        Candidates are ranked by weight, not by date, and ties go to the lowest
        workout id. The date is only known when that workout is among
        ``workouts``; otherwise ``None``.
        """
        per_workout: dict[int, float] = {}
        for s in sets:
            if s.workout_id not in per_workout or s.weight > per_workout[s.workout_id]:
                per_workout[s.workout_id] = s.weight
        below = sorted(
            ((wid, weight) for wid, weight in per_workout.items() if weight < current_weight),
            key=lambda item: (-item[1], item[0]),
        )
        if not below:
            return None
        target_id = below[0][0]
        for w in workouts:
            if w.id == target_id:
                return w.date
        return None

    @classmethod
    def stagnation(
        cls,
        exercise: ExerciseRecord,
        workouts: Sequence[WorkoutRecord],
        sets: Sequence[SetRecord],
        increase_sets: Sequence[SetRecord] = (),
        increase_workouts: Sequence[WorkoutRecord] = (),
    ) -> Optional[StagnationAlert]:
        """Return a stagnation alert when 3+ recent sessions share a top weight."""
        recent = list(workouts)[: cls.STAGNATION_WINDOW]
        if len(recent) < cls.STAGNATION_MIN_WORKOUTS:
            return None
        weights = cls.top_weights(recent, list(sets)[: cls.STAGNATION_SET_LIMIT])
        streak = cls.stagnant_streak(weights)
        level = cls.stagnation_level(streak)
        if level is None:
            return None
        current = weights[0]
        increase_sets = list(increase_sets)[: cls.INCREASE_SET_LIMIT]
        increase_workouts = list(increase_workouts)[: cls.INCREASE_WORKOUT_LIMIT]
        return StagnationAlert(
            severity=level,
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            message=cls.stagnation_message(streak, exercise.name),
            interventions=cls.interventions(streak),
            workouts_analyzed=len(recent),
            stagnant_workouts=streak,
            current_weight=current,
            last_weight_increase=cls.last_weight_increase(
                increase_sets, increase_workouts, current
            ),
        )

    # sandbagging

    @classmethod
    def rep_progressions(
        cls, workouts: Sequence[WorkoutRecord], sets: Sequence[SetRecord]
    ) -> List[List[int]]:
        """Rep sequences of the workouts that logged enough sets to judge."""
        progressions: List[List[int]] = []
        for w in workouts:
            workout_sets = cls.sets_for_workout(sets, w.id)
            if len(workout_sets) >= cls.SANDBAG_MIN_SETS:
                progressions.append([s.reps for s in workout_sets])
        return progressions

    @staticmethod
    def rep_range(reps: Sequence[int]) -> int:
        return int(np.ptp(np.array(reps)))

    @classmethod
    def average_rep_range(cls, progressions: Sequence[Sequence[int]]) -> float:
        if not progressions:
            return 0.0
        return float(np.mean([cls.rep_range(p) for p in progressions]))

    @classmethod
    def sandbagging_message(cls, flat_workouts: int, exercise_name: str) -> str:
        if flat_workouts >= cls.SEVERE_FLAT_WORKOUTS:
            return (
                f"{exercise_name} reps aren't dropping across sets in {flat_workouts} "
                "workouts. You might not be training to true failure."
            )
        return (
            f"{exercise_name} shows consistent reps across sets in {flat_workouts} "
            "workouts. Consider pushing harder to 1 RIR."
        )

    @classmethod
    def sandbagging_suggestion(cls, average_rep_range: float) -> str:
        if average_rep_range <= cls.FLAT_REP_RANGE:
            return (
                "Add 5-10lbs and push until reps start dropping "
                "(Set 1: 8-10 reps, Set 5: 5-7 reps)"
            )
        return (
            "Focus on progressive overload - increase weight when you can complete "
            "all sets at target reps"
        )

    @classmethod
    def sandbagging(
        cls,
        exercise: ExerciseRecord,
        workouts: Sequence[WorkoutRecord],
        sets: Sequence[SetRecord],
    ) -> Optional[SandbaggingAlert]:
        """Return a sandbagging alert when 2+ recent sessions show flat reps."""
        recent = list(workouts)[: cls.SANDBAG_WINDOW]
        if len(recent) < cls.SANDBAG_MIN_WORKOUTS:
            return None
        window = list(sets)[: cls.SANDBAG_SET_LIMIT]
        progressions = cls.rep_progressions(recent, window)
        flat = sum(1 for p in progressions if cls.rep_range(p) <= cls.FLAT_REP_RANGE)
        if flat < cls.FLAT_WORKOUT_TRIGGER:
            return None
        average = cls.average_rep_range(progressions)
        return SandbaggingAlert(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            message=cls.sandbagging_message(flat, exercise.name),
            suggestion=cls.sandbagging_suggestion(average),
            workouts_analyzed=len(recent),
            flat_rep_workouts=flat,
            average_rep_range=average,
            current_weight=max((s.weight for s in window), default=0.0),
        )
