from __future__ import annotations
import datetime
import logging
import sqlite3
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from alert_service import AlertService
from config import DEFAULT_DB_PATH, configure_logging
from db import (
    AlertRepository,
    ExerciseRepository,
    PersonalRecordRepository,
    SetRepository,
    SettingsRepository,
    WorkoutRepository,
)
from history_reader import HistoryReader
from models import (
    RepPrediction,
    RIRFeedback,
    RIRResponse,
    SandbaggingAlert,
    SetRecord,
    StagnationAlert,
)
from pr_service import PRService
from progression_service import ProgressionService
from settings_schema import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Snapshot of an in-progress workout. Transitions return new snapshots."""

    workout_id: int
    exercises: Tuple[int, ...]
    started_at: datetime.datetime
    current_exercise_index: int = 0
    current_set_number: int = 1
    completed_sets: Tuple[SetRecord, ...] = ()
    is_resting: bool = False
    last_completed_set: Optional[SetRecord] = None

    @property
    def current_exercise_id(self) -> Optional[int]:
        if self.current_exercise_index >= len(self.exercises):
            return None
        return self.exercises[self.current_exercise_index]

    @property
    def is_last_exercise(self) -> bool:
        return self.current_exercise_index >= len(self.exercises) - 1

    def sets_for_exercise(self, exercise_id: int) -> List[SetRecord]:
        return [s for s in self.completed_sets if s.exercise_id == exercise_id]


@dataclass(frozen=True)
class SetResult:
    set_id: int
    prs: List[str]
    feedback: RIRFeedback
    next_prediction: Optional[RepPrediction] = None


@dataclass
class WorkoutSummary:
    workout_id: int
    duration_minutes: int
    sets_completed: int
    stagnation_alerts: List[StagnationAlert] = field(default_factory=list)
    sandbagging_alerts: List[SandbaggingAlert] = field(default_factory=list)


class WorkoutSessionService:
    """Drive a workout from start to finish.

    The service holds no session state; every call takes a ``SessionContext``
    and returns the next one.
    """

    def __init__(
        self,
        exercise_repo: ExerciseRepository,
        workout_repo: WorkoutRepository,
        set_repo: SetRepository,
        progression: ProgressionService,
        prs: PRService,
        alerts: AlertService,
        settings_repo: SettingsRepository,
    ) -> None:
        self.exercises = exercise_repo
        self.workouts = workout_repo
        self.sets = set_repo
        self.progression = progression
        self.prs = prs
        self.alerts = alerts
        self.settings = settings_repo

    @classmethod
    def from_paths(
        cls, db_path: str = DEFAULT_DB_PATH, yaml_path: str = "settings.yaml"
    ) -> "WorkoutSessionService":
        """Wire every repository and service against one database file."""
        settings = SettingsRepository(db_path, yaml_path)
        configure_logging(settings.get_text("log_level", DEFAULT_SETTINGS["log_level"]))
        exercises = ExerciseRepository(db_path)
        workouts = WorkoutRepository(db_path)
        sets = SetRepository(db_path)
        history = HistoryReader(exercises, workouts, sets)
        return cls(
            exercises,
            workouts,
            sets,
            ProgressionService(history),
            PRService(PersonalRecordRepository(db_path), sets),
            AlertService(history, AlertRepository(db_path)),
            settings,
        )

    def sets_per_exercise(self) -> int:
        return self.settings.get_int(
            "sets_per_exercise", DEFAULT_SETTINGS["sets_per_exercise"]
        )

    def target_reps(self) -> int:
        return self.settings.get_int("target_reps", DEFAULT_SETTINGS["target_reps"])

    def start(
        self,
        exercise_ids: Optional[Sequence[int]] = None,
        date: Optional[datetime.date] = None,
        now: Optional[datetime.datetime] = None,
    ) -> SessionContext:
        """Create the workout row. Without ``exercise_ids`` the default variations are used."""
        if exercise_ids is None:
            exercise_ids = [e.id for e in self.exercises.fetch_defaults()]
        if not exercise_ids:
            raise ValueError("at least one exercise is required")
        workout_id = self.workouts.create(
            (date or datetime.date.today()).isoformat(),
            self.settings.get_text("program_name", DEFAULT_SETTINGS["program_name"]),
            self.settings.get_text("workout_type", DEFAULT_SETTINGS["workout_type"]),
        )
        logger.info("Started workout %s with %d exercise(s)", workout_id, len(exercise_ids))
        return SessionContext(
            workout_id=workout_id,
            exercises=tuple(exercise_ids),
            started_at=now or datetime.datetime.now(),
        )

    def current_exercise(self, ctx: SessionContext) -> Optional[int]:
        return ctx.current_exercise_id

    def suggested_weight(self, ctx: SessionContext) -> float:
        exercise_id = ctx.current_exercise_id
        if exercise_id is None:
            raise ValueError("no exercise in progress")
        return self.progression.suggest_next_weight(exercise_id)

    def complete_set(
        self,
        ctx: SessionContext,
        weight: float,
        reps: int,
        rir: RIRResponse | str,
        target_reps: Optional[int] = None,
    ) -> Tuple[SessionContext, SetResult]:
        """Log the current set, detect PRs and preview the next set."""
        exercise_id = ctx.current_exercise_id
        if exercise_id is None:
            raise ValueError("no exercise in progress")
        last = ctx.last_completed_set
        if (
            last is not None
            and last.exercise_id == exercise_id
            and last.set_number == ctx.current_set_number
        ):
            raise ValueError("set already completed, end rest before the next set")
        stored_next = self.sets.next_set_number(ctx.workout_id, exercise_id)
        if stored_next != ctx.current_set_number:
            raise ValueError(
                f"expected set {stored_next}, session is at set {ctx.current_set_number}"
            )
        rir = RIRResponse(rir)
        target = target_reps or self.target_reps()
        set_id = self.sets.add(
            ctx.workout_id,
            exercise_id,
            ctx.current_set_number,
            weight,
            reps,
            rir,
            target,
        )
        record = SetRecord(
            id=set_id,
            workout_id=ctx.workout_id,
            exercise_id=exercise_id,
            set_number=ctx.current_set_number,
            weight=weight,
            reps=reps,
            rir_response=rir,
            target_reps=target,
        )
        prs = self.prs.detect_and_save_prs(
            exercise_id, ctx.workout_id, set_id, weight, reps
        )
        new_ctx = replace(
            ctx,
            completed_sets=ctx.completed_sets + (record,),
            last_completed_set=record,
        )
        prediction = None
        next_set = ctx.current_set_number + 1
        if next_set <= self.sets_per_exercise():
            first = next(
                (s for s in new_ctx.sets_for_exercise(exercise_id) if s.set_number == 1),
                record,
            )
            prediction = self.progression.predict_reps(
                first.reps, first.rir_response, next_set
            )
        return new_ctx, SetResult(
            set_id=set_id,
            prs=prs,
            feedback=self.progression.get_rir_feedback(rir),
            next_prediction=prediction,
        )

    def start_rest(self, ctx: SessionContext) -> SessionContext:
        return replace(ctx, is_resting=True)

    def end_rest(self, ctx: SessionContext) -> SessionContext:
        """Move on to the next set once the current one has been logged."""
        last = ctx.last_completed_set
        if (
            last is None
            or last.exercise_id != ctx.current_exercise_id
            or last.set_number != ctx.current_set_number
        ):
            raise ValueError("complete the current set before ending rest")
        return replace(
            ctx, is_resting=False, current_set_number=ctx.current_set_number + 1
        )

    def next_exercise(
        self, ctx: SessionContext, now: Optional[datetime.datetime] = None
    ) -> Tuple[Optional[SessionContext], Optional[WorkoutSummary]]:
        """Advance to the next exercise, finishing the workout after the last."""
        if ctx.is_last_exercise:
            return None, self.finish(ctx, now)
        return (
            replace(
                ctx,
                current_exercise_index=ctx.current_exercise_index + 1,
                current_set_number=1,
                is_resting=False,
            ),
            None,
        )

    def finish(
        self, ctx: SessionContext, now: Optional[datetime.datetime] = None
    ) -> WorkoutSummary:
        """Mark the workout complete and run both alert passes."""
        elapsed = (now or datetime.datetime.now()) - ctx.started_at
        duration = max(0, int((elapsed.total_seconds() + 30) // 60))
        self.workouts.complete(ctx.workout_id, duration)
        summary = WorkoutSummary(
            workout_id=ctx.workout_id,
            duration_minutes=duration,
            sets_completed=len(ctx.completed_sets),
        )
        try:
            summary.stagnation_alerts = self.alerts.process_stagnation_alerts()
        except sqlite3.Error as exc:
            logger.warning("Skipping stagnation alerts: %s", exc)
        try:
            summary.sandbagging_alerts = self.alerts.process_sandbagging_alerts()
        except sqlite3.Error as exc:
            logger.warning("Skipping sandbagging alerts: %s", exc)
        retention = self.settings.get_int(
            "alert_retention_days", DEFAULT_SETTINGS["alert_retention_days"]
        )
        try:
            self.alerts.cleanup_old_alerts(retention, now)
        except sqlite3.Error as exc:
            logger.warning("Skipping alert cleanup: %s", exc)
        logger.info(
            "Finished workout %s after %s min, %d set(s)",
            ctx.workout_id,
            duration,
            summary.sets_completed,
        )
        return summary

    def discard(self, ctx: SessionContext) -> None:
        """End the session without completing the workout. Logged sets remain."""
        logger.info(
            "Discarded workout %s with %d logged set(s)",
            ctx.workout_id,
            len(ctx.completed_sets),
        )
