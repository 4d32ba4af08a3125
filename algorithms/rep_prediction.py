import math

from models import RepPrediction, RIRFeedback, RIRResponse


class RepPredictor:
    """Predict reps for later sets from the first working set."""

    DECAY_FACTORS: dict[RIRResponse, float] = {
        RIRResponse.YES_MAYBE: 0.875,
        RIRResponse.YES_EASILY: 0.925,
        RIRResponse.NO_WAY: 0.825,
    }
    MARGIN: int = 1

    FEEDBACK: dict[RIRResponse, RIRFeedback] = {
        RIRResponse.YES_MAYBE: RIRFeedback(
            "Perfect! That's 1 RIR. Keep it up!", "success"
        ),
        RIRResponse.YES_EASILY: RIRFeedback(
            "Too easy! Push harder next set or increase weight.", "warning"
        ),
        RIRResponse.NO_WAY: RIRFeedback(
            "Complete failure - risky for joints. Stop at 1 RIR next time.", "error"
        ),
    }

    @staticmethod
    def _round_half_up(value: float) -> int:
        return int(math.floor(value + 0.5))

    @classmethod
    def expected_reps(
        cls, set1_reps: int, set1_rir: RIRResponse | str, set_number: int
    ) -> float:
        """Return the unrounded rep estimate ``reps * decay ** (n - 1)``."""
        if set_number < 1:
            raise ValueError("set_number must be at least 1")
        if set1_reps < 0:
            raise ValueError("set1_reps must be non-negative")
        response = RIRResponse(set1_rir)
        return set1_reps * math.pow(cls.DECAY_FACTORS[response], set_number - 1)

    @classmethod
    def predict(
        cls, set1_reps: int, set1_rir: RIRResponse | str, set_number: int
    ) -> RepPrediction:
        """Return the ``min``/``max``/``expected`` reps for ``set_number``."""
        expected = cls._round_half_up(cls.expected_reps(set1_reps, set1_rir, set_number))
        low = max(1, expected - cls.MARGIN)
        high = expected + cls.MARGIN
        return RepPrediction(min=low, max=high, expected=expected)

    @staticmethod
    def format(prediction: RepPrediction) -> str:
        if prediction.min == prediction.max:
            return f"{prediction.expected} reps"
        return f"{prediction.min}-{prediction.max} reps"

    @classmethod
    def feedback(cls, rir: RIRResponse | str) -> RIRFeedback:
        """Map an RIR answer to a message and a success/warning/error tone."""
        return cls.FEEDBACK[RIRResponse(rir)]
