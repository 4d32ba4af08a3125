import datetime
from typing import Sequence

from models import MuscleGroup, VolumeAnalysis, VolumeStatus


class VolumeBalance:
    """Weekly set-count bands per muscle group."""

    OPTIMAL_MIN: int = 10
    OPTIMAL_MAX: int = 15
    BALANCED_RATIO: float = 0.7
    WINDOW_DAYS: int = 7

    # Checked in order; the first keyword contained in the name wins.
    KEYWORDS: tuple[tuple[str, MuscleGroup], ...] = (
        ("squat", MuscleGroup.LEGS),
        ("deadlift", MuscleGroup.LEGS),
        ("lunge", MuscleGroup.LEGS),
        ("leg press", MuscleGroup.LEGS),
        ("leg curl", MuscleGroup.LEGS),
        ("leg extension", MuscleGroup.LEGS),
        ("bench", MuscleGroup.CHEST),
        ("incline bench", MuscleGroup.CHEST),
        ("decline bench", MuscleGroup.CHEST),
        ("chest fly", MuscleGroup.CHEST),
        ("push up", MuscleGroup.CHEST),
        ("row", MuscleGroup.BACK),
        ("pull up", MuscleGroup.BACK),
        ("lat pulldown", MuscleGroup.BACK),
        ("conventional deadlift", MuscleGroup.BACK),
        ("face pull", MuscleGroup.BACK),
        ("press", MuscleGroup.SHOULDERS),
        ("lateral raise", MuscleGroup.SHOULDERS),
        ("front raise", MuscleGroup.SHOULDERS),
        ("rear delt", MuscleGroup.SHOULDERS),
        ("bicep curl", MuscleGroup.ARMS),
        ("tricep extension", MuscleGroup.ARMS),
        ("tricep dip", MuscleGroup.ARMS),
        ("hammer curl", MuscleGroup.ARMS),
        ("plank", MuscleGroup.CORE),
        ("crunch", MuscleGroup.CORE),
        ("russian twist", MuscleGroup.CORE),
    )

    @classmethod
    def resolve_muscle_group(cls, exercise_name: str) -> MuscleGroup:
        """Return the muscle group for an exercise name, ``OTHER`` if unknown."""
        normalized = exercise_name.lower()
        for keyword, group in cls.KEYWORDS:
            if keyword in normalized:
                return group
        return MuscleGroup.OTHER

    @classmethod
    def week_window(cls, today: datetime.date) -> tuple[datetime.date, datetime.date]:
        """Return the inclusive trailing window ending on ``today``."""
        return today - datetime.timedelta(days=cls.WINDOW_DAYS - 1), today

    @classmethod
    def classify(cls, group: MuscleGroup, total_sets: int) -> VolumeAnalysis:
        name = group.value
        if total_sets < cls.OPTIMAL_MIN:
            status = VolumeStatus.TOO_LOW
            recommendation = (
                f"Add {cls.OPTIMAL_MIN - total_sets} more {name} sets this week"
            )
        elif total_sets > cls.OPTIMAL_MAX:
            status = VolumeStatus.TOO_HIGH
            recommendation = (
                f"Reduce {name} volume by {total_sets - cls.OPTIMAL_MAX} sets "
                "(consider deload)"
            )
        else:
            status = VolumeStatus.OPTIMAL
            recommendation = f"{name} volume is perfect!"
        percentage = min(total_sets / cls.OPTIMAL_MAX * 100, 100.0)
        return VolumeAnalysis(
            muscle_group=group,
            total_sets=total_sets,
            status=status,
            recommendation=recommendation,
            percentage=percentage,
        )

    @classmethod
    def overall_balance(cls, analyses: Sequence[VolumeAnalysis]) -> str:
        """``balanced`` when enough of the trained groups sit in the optimal band."""
        active = [a for a in analyses if a.total_sets > 0]
        if not active:
            return "unbalanced"
        optimal = sum(1 for a in active if a.status is VolumeStatus.OPTIMAL)
        return "balanced" if optimal / len(active) >= cls.BALANCED_RATIO else "unbalanced"

    @staticmethod
    def recommendations(analyses: Sequence[VolumeAnalysis], balance: str) -> list[str]:
        result: list[str] = []
        if balance == "unbalanced":
            low = [a.muscle_group.value for a in analyses if a.status is VolumeStatus.TOO_LOW]
            high = [a.muscle_group.value for a in analyses if a.status is VolumeStatus.TOO_HIGH]
            if low:
                result.append(f"Focus on {', '.join(low)} - add more sets")
            if high:
                result.append(f"{', '.join(high)} volume is too high - consider reducing")
        result.extend(a.recommendation for a in analyses if a.status is not VolumeStatus.OPTIMAL)
        if not result:
            result.append("Great job! All muscle groups are in optimal volume range.")
        return result
