from models import ExerciseCategory, RIRResponse


class ProgressionRules:
    """Linear progression policy keyed by exercise category (weights in lb)."""

    DEFAULT_STARTING_WEIGHT: float = 45.0
    DEFAULT_INCREMENT: float = 5.0
    DEFAULT_TARGET_REPS: int = 5
    MISS_TOLERANCE: int = 2

    STARTING_WEIGHTS: dict[ExerciseCategory, float] = {
        ExerciseCategory.SQUAT: 45.0,
        ExerciseCategory.DEADLIFT: 95.0,
        ExerciseCategory.BENCH: 45.0,
        ExerciseCategory.PRESS: 45.0,
        ExerciseCategory.ROW: 65.0,
        ExerciseCategory.PULL: 0.0,
        ExerciseCategory.ACCESSORY: 10.0,
    }

    INCREMENTS: dict[ExerciseCategory, float] = {
        ExerciseCategory.SQUAT: 5.0,
        ExerciseCategory.DEADLIFT: 10.0,
        ExerciseCategory.BENCH: 5.0,
        ExerciseCategory.PRESS: 2.5,
        ExerciseCategory.ROW: 5.0,
        ExerciseCategory.PULL: 2.5,
        ExerciseCategory.ACCESSORY: 2.5,
    }

    @classmethod
    def starting_weight(cls, category: ExerciseCategory | str | None) -> float:
        """Return the first-session weight for ``category``."""
        parsed = ExerciseCategory.parse(category)
        if parsed is None:
            return cls.DEFAULT_STARTING_WEIGHT
        return cls.STARTING_WEIGHTS[parsed]

    @classmethod
    def increment(cls, category: ExerciseCategory | str | None) -> float:
        """Return the per-session weight jump for ``category``."""
        parsed = ExerciseCategory.parse(category)
        if parsed is None:
            return cls.DEFAULT_INCREMENT
        return cls.INCREMENTS[parsed]

    @classmethod
    def next_weight(
        cls,
        category: ExerciseCategory | str | None,
        last_weight: float,
        actual_reps: int,
        target_reps: int | None = None,
        rir: RIRResponse | str | None = None,
    ) -> float:
        """Apply the first matching progression rule to a set-1 performance.

        Hitting the target with reps in the tank adds two increments, hitting it
        at roughly one rep in reserve adds one. Missing by more than
        ``MISS_TOLERANCE`` reps drops one increment, floored at the category's
        starting weight. Anything else, including a target reached with
        ``no_way``, repeats the weight.
        """
        target = target_reps or cls.DEFAULT_TARGET_REPS
        response = RIRResponse.parse(rir)
        step = cls.increment(category)
        if actual_reps >= target and response is RIRResponse.YES_EASILY:
            return last_weight + step * 2
        if actual_reps >= target and response is RIRResponse.YES_MAYBE:
            return last_weight + step
        if actual_reps < target - cls.MISS_TOLERANCE:
            return max(last_weight - step, cls.starting_weight(category))
        return last_weight
