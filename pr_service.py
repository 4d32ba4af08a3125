from __future__ import annotations
import logging
from typing import Dict, List, Optional

from db import PersonalRecordRepository, SetRepository
from models import PersonalRecordRow, PRCheck, PRType

logger = logging.getLogger(__name__)


class PRService:
    """Detect and store personal records for logged sets."""

    def __init__(
        self, pr_repo: PersonalRecordRepository, set_repo: Optional[SetRepository] = None
    ) -> None:
        self.repo = pr_repo
        self.sets = set_repo

    @staticmethod
    def _latest(
        records: List[PersonalRecordRow], pr_type: PRType, weight: float | None = None
    ) -> Optional[PersonalRecordRow]:
        for rec in records:
            if rec.pr_type != pr_type:
                continue
            if weight is not None and rec.weight != weight:
                continue
            return rec
        return None

    def _rep_baseline(
        self,
        records: List[PersonalRecordRow],
        exercise_id: int,
        weight: float,
        set_id: Optional[int] = None,
    ) -> Optional[int]:
        """Reps to beat for a rep PR at ``weight``.

        A previous rep PR at the weight wins. Otherwise the best of the newest
        record at that weight and the working sets already logged at exactly
        that weight is used, so a weight lifted once already has something to
        beat. ``set_id`` is left out of the history lookup.
        """
        rep_pr = self._latest(records, PRType.REPS, weight)
        if rep_pr is not None:
            return rep_pr.reps
        candidates = [rec.reps for rec in records if rec.weight == weight][:1]
        if self.sets is not None:
            logged = self.sets.best_reps_at_weight(exercise_id, weight, set_id)
            if logged is not None:
                candidates.append(logged)
        return max(candidates) if candidates else None

    def check_for_pr(
        self, exercise_id: int, weight: float, reps: int, set_id: Optional[int] = None
    ) -> PRCheck:
        records = self.repo.fetch_for_exercise(exercise_id)
        weight_pr = self._latest(records, PRType.WEIGHT)
        volume_pr = self._latest(records, PRType.VOLUME)
        rep_baseline = self._rep_baseline(records, exercise_id, weight, set_id)

        previous_weight = weight_pr.weight if weight_pr else None
        previous_volume = volume_pr.volume if volume_pr else None
        volume = weight * reps
        return PRCheck(
            is_weight_pr=weight > (previous_weight or 0),
            is_volume_pr=volume > (previous_volume or 0),
            is_rep_pr=rep_baseline is not None and reps > rep_baseline,
            previous_weight_pr=previous_weight,
            previous_volume_pr=previous_volume,
            previous_rep_pr=rep_baseline,
        )

    def save_pr(
        self,
        exercise_id: int,
        workout_id: Optional[int],
        set_id: Optional[int],
        pr_type: PRType | str,
        weight: float,
        reps: int,
    ) -> int:
        return self.repo.add(exercise_id, workout_id, set_id, pr_type, weight, reps)

    def detect_and_save_prs(
        self,
        exercise_id: int,
        workout_id: Optional[int],
        set_id: Optional[int],
        weight: float,
        reps: int,
    ) -> List[str]:
        """Record every PR category the set achieves.

        Returns the achieved labels in the order weight, volume, reps.
        """
        check = self.check_for_pr(exercise_id, weight, reps, set_id)
        achieved = check.achieved()
        for pr_type in achieved:
            self.save_pr(exercise_id, workout_id, set_id, pr_type, weight, reps)
        if achieved:
            logger.info(
                "Exercise %s: %sx%s set new %s PR",
                exercise_id,
                weight,
                reps,
                "/".join(p.label for p in achieved),
            )
        return [p.label for p in achieved]

    def get_exercise_prs(self, exercise_id: int) -> List[PersonalRecordRow]:
        return self.repo.fetch_for_exercise(exercise_id)

    def get_best_prs(self, exercise_id: int) -> Dict[PRType, PersonalRecordRow]:
        """Highest record per category, regardless of insertion order."""
        best: Dict[PRType, PersonalRecordRow] = {}
        value = {
            PRType.WEIGHT: lambda r: r.weight,
            PRType.VOLUME: lambda r: r.volume or 0.0,
            PRType.REPS: lambda r: r.reps,
        }
        for rec in self.repo.fetch_for_exercise(exercise_id):
            key = value[rec.pr_type]
            current = best.get(rec.pr_type)
            if current is None or key(rec) > key(current):
                best[rec.pr_type] = rec
        return best

    def get_all_prs(self, limit: int = 50) -> List[PersonalRecordRow]:
        return self.repo.fetch_recent(limit)
