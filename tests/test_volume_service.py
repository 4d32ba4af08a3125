import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ExerciseRepository, SetRepository, WorkoutRepository
from models import MuscleGroup, VolumeStatus
from volume_service import VolumeService


TODAY = datetime.date(2024, 6, 14)


class VolumeServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_volume.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.exercises = ExerciseRepository(self.db_path)
        self.workouts = WorkoutRepository(self.db_path)
        self.sets = SetRepository(self.db_path)
        self.service = VolumeService(self.sets)
        self.ids = dict((n, i) for i, n in self.exercises.fetch_names_and_ids())

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def _log(self, name: str, date: datetime.date, count: int) -> None:
        wid = self.workouts.create(date.isoformat())
        for number in range(1, count + 1):
            self.sets.add(wid, self.ids[name], number, 100, 5, "yes_maybe", 5)

    def test_optimal_legs(self) -> None:
        self._log("Barbell Back Squat", TODAY, 5)
        self._log("Conventional Deadlift", TODAY - datetime.timedelta(days=2), 5)
        self._log("Lunges", TODAY - datetime.timedelta(days=6), 2)
        analysis = self.service.analyze_weekly_volume(MuscleGroup.LEGS, TODAY)
        self.assertEqual(analysis.total_sets, 12)
        self.assertEqual(analysis.status, VolumeStatus.OPTIMAL)
        self.assertAlmostEqual(analysis.percentage, 80.0)

    def test_window_excludes_older_sets(self) -> None:
        self._log("Barbell Back Squat", TODAY - datetime.timedelta(days=7), 10)
        self._log("Barbell Back Squat", TODAY - datetime.timedelta(days=1), 5)
        analysis = self.service.analyze_weekly_volume("legs", TODAY)
        self.assertEqual(analysis.total_sets, 5)
        self.assertEqual(analysis.status, VolumeStatus.TOO_LOW)

    def test_too_high_is_clamped(self) -> None:
        self._log("Barbell Bench Press", TODAY, 10)
        self._log("Incline Bench Press", TODAY - datetime.timedelta(days=3), 10)
        analysis = self.service.analyze_weekly_volume("chest", TODAY)
        self.assertEqual(analysis.total_sets, 20)
        self.assertEqual(analysis.status, VolumeStatus.TOO_HIGH)
        self.assertEqual(analysis.percentage, 100.0)

    def test_warmups_and_other_group_are_ignored(self) -> None:
        wid = self.workouts.create(TODAY.isoformat())
        self.sets.add(wid, self.ids["Barbell Back Squat"], 1, 45, 10, None, is_warmup=True)
        farmer = self.exercises.add("Farmer Carry", "accessory")
        self.sets.add(wid, farmer, 1, 100, 5, "yes_maybe")
        analyses = self.service.analyze_all_muscle_groups(TODAY)
        self.assertEqual(len(analyses), 6)
        self.assertNotIn(MuscleGroup.OTHER, [a.muscle_group for a in analyses])
        self.assertTrue(all(a.total_sets == 0 for a in analyses))
        with self.assertRaises(ValueError):
            self.service.analyze_weekly_volume(MuscleGroup.OTHER, TODAY)

    def test_weekly_report(self) -> None:
        self._log("Barbell Back Squat", TODAY, 12)
        self._log("Barbell Row", TODAY, 11)
        self._log("Barbell Bench Press", TODAY, 4)
        report = self.service.generate_weekly_volume_report(TODAY)
        self.assertEqual(report.week_start, datetime.date(2024, 6, 8))
        self.assertEqual(report.week_end, TODAY)
        self.assertEqual(
            [a.muscle_group for a in report.muscle_groups],
            [
                MuscleGroup.LEGS,
                MuscleGroup.CHEST,
                MuscleGroup.BACK,
                MuscleGroup.SHOULDERS,
                MuscleGroup.ARMS,
                MuscleGroup.CORE,
            ],
        )
        self.assertEqual(report.overall_balance, "unbalanced")
        self.assertEqual(
            report.recommendations[0],
            "Focus on chest, shoulders, arms, core - add more sets",
        )
        self.assertIn("Add 6 more chest sets this week", report.recommendations)

    def test_balanced_report(self) -> None:
        self._log("Barbell Back Squat", TODAY, 12)
        self._log("Barbell Row", TODAY, 11)
        self._log("Overhead Press", TODAY, 10)
        report = self.service.generate_weekly_volume_report(TODAY)
        self.assertEqual(report.overall_balance, "balanced")
        self.assertEqual(report.recommendations[0], "Add 10 more chest sets this week")

    def test_empty_week(self) -> None:
        report = self.service.generate_weekly_volume_report(TODAY)
        self.assertEqual(report.overall_balance, "unbalanced")
        self.assertEqual(len(report.recommendations), 7)


if __name__ == "__main__":
    unittest.main()
