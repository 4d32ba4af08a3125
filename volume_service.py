from __future__ import annotations
import datetime
import logging
from typing import List, Optional

from algorithms.volume_balance import VolumeBalance
from db import SetRepository
from models import (
    REPORTED_MUSCLE_GROUPS,
    MuscleGroup,
    VolumeAnalysis,
    WeeklyVolumeReport,
)

logger = logging.getLogger(__name__)


class VolumeService:
    """Weekly working-set volume per muscle group."""

    def __init__(self, set_repo: SetRepository) -> None:
        self.sets = set_repo

    def _counts(self, today: Optional[datetime.date]) -> tuple:
        start, end = VolumeBalance.week_window(today or datetime.date.today())
        counts = self.sets.count_by_muscle_group(start.isoformat(), end.isoformat())
        return start, end, counts

    def analyze_weekly_volume(
        self, muscle_group: MuscleGroup | str, today: Optional[datetime.date] = None
    ) -> VolumeAnalysis:
        group = MuscleGroup(muscle_group)
        if group not in REPORTED_MUSCLE_GROUPS:
            raise ValueError(f"unsupported muscle group: {group.value}")
        _start, _end, counts = self._counts(today)
        return VolumeBalance.classify(group, counts.get(group.value, 0))

    def analyze_all_muscle_groups(
        self, today: Optional[datetime.date] = None
    ) -> List[VolumeAnalysis]:
        _start, _end, counts = self._counts(today)
        return [
            VolumeBalance.classify(group, counts.get(group.value, 0))
            for group in REPORTED_MUSCLE_GROUPS
        ]

    def generate_weekly_volume_report(
        self, today: Optional[datetime.date] = None
    ) -> WeeklyVolumeReport:
        start, end, counts = self._counts(today)
        analyses = [
            VolumeBalance.classify(group, counts.get(group.value, 0))
            for group in REPORTED_MUSCLE_GROUPS
        ]
        balance = VolumeBalance.overall_balance(analyses)
        logger.debug(
            "Volume %s..%s: %s (%s)",
            start,
            end,
            {a.muscle_group.value: a.total_sets for a in analyses},
            balance,
        )
        return WeeklyVolumeReport(
            week_start=start,
            week_end=end,
            muscle_groups=analyses,
            overall_balance=balance,
            recommendations=VolumeBalance.recommendations(analyses, balance),
        )
