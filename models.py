from __future__ import annotations
import datetime
from dataclasses import dataclass, field, asdict
from enum import Enum


class _ParsableEnum(str, Enum):
    """String enum with a lenient parser for values read from storage."""

    @classmethod
    def parse(cls, value):
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class ExerciseCategory(_ParsableEnum):
    SQUAT = "squat"
    BENCH = "bench"
    DEADLIFT = "deadlift"
    ROW = "row"
    PRESS = "press"
    PULL = "pull"
    ACCESSORY = "accessory"


class RIRResponse(_ParsableEnum):
    """Answer to "could you have done one more rep?" after a set."""

    YES_MAYBE = "yes_maybe"
    YES_EASILY = "yes_easily"
    NO_WAY = "no_way"


class PRType(_ParsableEnum):
    WEIGHT = "weight_pr"
    VOLUME = "volume_pr"
    REPS = "rep_pr"

    @property
    def label(self) -> str:
        return {"weight_pr": "weight", "volume_pr": "volume", "rep_pr": "reps"}[
            self.value
        ]


class AlertType(_ParsableEnum):
    STAGNATION = "stagnation"
    SANDBAGGING = "sandbagging"


class AlertLevel(_ParsableEnum):
    """Severity reported by the detectors."""

    WARNING = "warning"
    ERROR = "error"

    def stored(self) -> "AlertSeverity":
        return AlertSeverity.CRITICAL if self is AlertLevel.ERROR else AlertSeverity.WARNING


class AlertSeverity(_ParsableEnum):
    """Severity persisted on alert rows."""

    WARNING = "warning"
    CRITICAL = "critical"


class VolumeStatus(_ParsableEnum):
    TOO_LOW = "too_low"
    OPTIMAL = "optimal"
    TOO_HIGH = "too_high"


class MuscleGroup(_ParsableEnum):
    LEGS = "legs"
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    CORE = "core"
    OTHER = "other"


REPORTED_MUSCLE_GROUPS = (
    MuscleGroup.LEGS,
    MuscleGroup.CHEST,
    MuscleGroup.BACK,
    MuscleGroup.SHOULDERS,
    MuscleGroup.ARMS,
    MuscleGroup.CORE,
)


@dataclass(frozen=True)
class ExerciseRecord:
    id: int
    name: str
    category: ExerciseCategory | None
    is_compound: bool = True
    is_default_variation: bool = False
    muscle_group: MuscleGroup = MuscleGroup.OTHER
    description: str | None = None


@dataclass(frozen=True)
class WorkoutRecord:
    id: int
    date: str
    program_name: str | None = None
    workout_type: str | None = None
    notes: str | None = None
    duration_minutes: int | None = None
    completed: bool = False


@dataclass(frozen=True)
class SetRecord:
    id: int
    workout_id: int
    exercise_id: int
    set_number: int
    weight: float
    reps: int
    rir_response: RIRResponse | None
    target_reps: int | None
    is_warmup: bool = False
    date: str | None = None

    @property
    def volume(self) -> float:
        return self.weight * self.reps


@dataclass(frozen=True)
class PersonalRecordRow:
    id: int
    exercise_id: int
    workout_id: int | None
    set_id: int | None
    pr_type: PRType
    weight: float
    reps: int
    volume: float | None
    date: str
    exercise_name: str | None = None


@dataclass(frozen=True)
class AlertRow:
    id: int
    exercise_id: int
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    is_dismissed: bool
    created_at: str
    exercise_name: str | None = None


@dataclass(frozen=True)
class RepPrediction:
    min: int
    max: int
    expected: int


@dataclass(frozen=True)
class RIRFeedback:
    message: str
    type: str


@dataclass(frozen=True)
class PRCheck:
    is_weight_pr: bool
    is_volume_pr: bool
    is_rep_pr: bool
    previous_weight_pr: float | None = None
    previous_volume_pr: float | None = None
    previous_rep_pr: int | None = None

    def achieved(self) -> list[PRType]:
        flags = (
            (PRType.WEIGHT, self.is_weight_pr),
            (PRType.VOLUME, self.is_volume_pr),
            (PRType.REPS, self.is_rep_pr),
        )
        return [pr_type for pr_type, hit in flags if hit]


@dataclass
class StagnationAlert:
    severity: AlertLevel
    exercise_id: int
    exercise_name: str
    message: str
    interventions: list[str]
    workouts_analyzed: int
    stagnant_workouts: int
    current_weight: float
    last_weight_increase: str | None
    type: AlertType = AlertType.STAGNATION

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SandbaggingAlert:
    exercise_id: int
    exercise_name: str
    message: str
    suggestion: str
    workouts_analyzed: int
    flat_rep_workouts: int
    average_rep_range: float
    current_weight: float
    severity: AlertLevel = AlertLevel.WARNING
    type: AlertType = AlertType.SANDBAGGING

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class VolumeAnalysis:
    muscle_group: MuscleGroup
    total_sets: int
    status: VolumeStatus
    recommendation: str
    percentage: float


@dataclass
class WeeklyVolumeReport:
    week_start: datetime.date
    week_end: datetime.date
    muscle_groups: list[VolumeAnalysis] = field(default_factory=list)
    overall_balance: str = "unbalanced"
    recommendations: list[str] = field(default_factory=list)
