from __future__ import annotations
import datetime
import logging
from typing import List, Optional

from algorithms.plateau_detection import PlateauDetector
from db import AlertRepository
from history_reader import HistoryReader
from models import AlertRow, AlertType, SandbaggingAlert, StagnationAlert

logger = logging.getLogger(__name__)


class AlertService:
    """Run the stagnation and sandbagging detectors and persist their alerts.

    Storage errors are not handled here; callers decide whether to skip a
    detection cycle.
    """

    def __init__(self, history: HistoryReader, alert_repo: AlertRepository) -> None:
        self.history = history
        self.alerts = alert_repo

    def detect_stagnation(self, exercise_id: int) -> Optional[StagnationAlert]:
        exercise = self.history.exercise(exercise_id)
        if exercise is None:
            return None
        workouts = self.history.recent_workouts(
            exercise_id, PlateauDetector.STAGNATION_WINDOW
        )
        if len(workouts) < PlateauDetector.STAGNATION_MIN_WORKOUTS:
            return None
        sets = self.history.recent_sets(exercise_id, PlateauDetector.STAGNATION_SET_LIMIT)
        increase_sets = self.history.recent_sets(
            exercise_id, PlateauDetector.INCREASE_SET_LIMIT
        )
        increase_workouts = self.history.recent_workouts(
            exercise_id, PlateauDetector.INCREASE_WORKOUT_LIMIT
        )
        alert = PlateauDetector.stagnation(
            exercise, workouts, sets, increase_sets, increase_workouts
        )
        if alert is not None:
            logger.debug(
                "%s stagnant for %s workouts at %s",
                exercise.name,
                alert.stagnant_workouts,
                alert.current_weight,
            )
        return alert

    def analyze_all_exercises_stagnation(self) -> List[StagnationAlert]:
        found = []
        for exercise in self.history.all_exercises():
            alert = self.detect_stagnation(exercise.id)
            if alert is not None:
                found.append(alert)
        return found

    def process_stagnation_alerts(self) -> List[StagnationAlert]:
        """Persist new stagnation alerts and return the ones created."""
        created = []
        for alert in self.analyze_all_exercises_stagnation():
            if self.alerts.has_active(alert.exercise_id, AlertType.STAGNATION):
                logger.debug("Active stagnation alert exists for %s", alert.exercise_name)
                continue
            self.alerts.add(
                alert.exercise_id,
                AlertType.STAGNATION,
                alert.severity.stored(),
                alert.message,
            )
            created.append(alert)
        if created:
            logger.info("Created %d stagnation alert(s)", len(created))
        return created

    def detect_sandbagging(self, exercise_id: int) -> Optional[SandbaggingAlert]:
        exercise = self.history.exercise(exercise_id)
        if exercise is None:
            return None
        workouts = self.history.recent_workouts(
            exercise_id, PlateauDetector.SANDBAG_WINDOW
        )
        if len(workouts) < PlateauDetector.SANDBAG_MIN_WORKOUTS:
            return None
        sets = self.history.recent_sets(exercise_id, PlateauDetector.SANDBAG_SET_LIMIT)
        alert = PlateauDetector.sandbagging(exercise, workouts, sets)
        if alert is not None:
            logger.debug(
                "%s flat reps in %s of %s workouts",
                exercise.name,
                alert.flat_rep_workouts,
                alert.workouts_analyzed,
            )
        return alert

    def analyze_all_exercises_sandbagging(self) -> List[SandbaggingAlert]:
        found = []
        for exercise in self.history.all_exercises():
            alert = self.detect_sandbagging(exercise.id)
            if alert is not None:
                found.append(alert)
        return found

    def process_sandbagging_alerts(self) -> List[SandbaggingAlert]:
        created = []
        for alert in self.analyze_all_exercises_sandbagging():
            if self.alerts.has_active(alert.exercise_id, AlertType.SANDBAGGING):
                logger.debug("Active sandbagging alert exists for %s", alert.exercise_name)
                continue
            self.alerts.add(
                alert.exercise_id,
                AlertType.SANDBAGGING,
                alert.severity.stored(),
                alert.message,
            )
            created.append(alert)
        if created:
            logger.info("Created %d sandbagging alert(s)", len(created))
        return created

    def active_alerts(self) -> List[AlertRow]:
        return self.alerts.fetch_active()

    def alerts_for_exercise(self, exercise_id: int) -> List[AlertRow]:
        return self.alerts.fetch_for_exercise(exercise_id)

    def dismiss_alert(self, alert_id: int) -> None:
        self.alerts.dismiss(alert_id)

    def cleanup_old_alerts(
        self, days_to_keep: int = 30, now: Optional[datetime.datetime] = None
    ) -> None:
        """Delete dismissed alerts created more than ``days_to_keep`` days ago."""
        if days_to_keep < 0:
            raise ValueError("days_to_keep must be non-negative")
        now = now or datetime.datetime.now()
        cutoff = (now - datetime.timedelta(days=days_to_keep)).isoformat(timespec="seconds")
        self.alerts.delete_dismissed_before(cutoff)
