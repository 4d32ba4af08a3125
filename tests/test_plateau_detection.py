import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.plateau_detection import PlateauDetector
from models import (
    AlertLevel,
    AlertType,
    ExerciseCategory,
    ExerciseRecord,
    SetRecord,
    WorkoutRecord,
)


SQUAT = ExerciseRecord(id=1, name="Barbell Back Squat", category=ExerciseCategory.SQUAT)


def build_history(sessions):
    """Turn ``[(date, [(weight, reps), ...]), ...]`` (newest first) into records."""
    workouts = []
    sets = []
    next_set_id = 1
    for index, (date, performed) in enumerate(sessions):
        workout_id = len(sessions) - index
        workouts.append(WorkoutRecord(id=workout_id, date=date))
        for number, (weight, reps) in enumerate(performed, start=1):
            sets.append(
                SetRecord(
                    id=next_set_id,
                    workout_id=workout_id,
                    exercise_id=SQUAT.id,
                    set_number=number,
                    weight=weight,
                    reps=reps,
                    rir_response=None,
                    target_reps=5,
                    date=date,
                )
            )
            next_set_id += 1
    return workouts, sets


class StagnationTestCase(unittest.TestCase):
    def test_needs_three_workouts(self) -> None:
        workouts, sets = build_history(
            [("2024-01-05", [(135, 5)] * 5), ("2024-01-03", [(135, 5)] * 5)]
        )
        self.assertIsNone(PlateauDetector.stagnation(SQUAT, workouts, sets))

    def test_three_identical_workouts_warn(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-05", [(135, 5)] * 5),
                ("2024-01-03", [(135, 5)] * 5),
                ("2024-01-01", [(135, 5)] * 5),
            ]
        )
        alert = PlateauDetector.stagnation(SQUAT, workouts, sets)
        self.assertIsNotNone(alert)
        self.assertEqual(alert.severity, AlertLevel.WARNING)
        self.assertEqual(alert.type, AlertType.STAGNATION)
        self.assertEqual(alert.stagnant_workouts, 3)
        self.assertEqual(alert.workouts_analyzed, 3)
        self.assertEqual(alert.current_weight, 135)
        self.assertIn("hasn't progressed in 3 workouts", alert.message)
        self.assertEqual(
            alert.interventions,
            [PlateauDetector.INTERVENTIONS[i] for i in (1, 2, 3, 0)],
        )

    def test_fourth_identical_workout_escalates(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-07", [(135, 5)] * 5),
                ("2024-01-05", [(135, 5)] * 5),
                ("2024-01-03", [(135, 5)] * 5),
                ("2024-01-01", [(135, 5)] * 5),
            ]
        )
        alert = PlateauDetector.stagnation(SQUAT, workouts, sets)
        self.assertEqual(alert.severity, AlertLevel.ERROR)
        self.assertEqual(alert.stagnant_workouts, 4)
        self.assertIn("Time for a change", alert.message)
        self.assertTrue(alert.interventions[0].startswith("Deload"))
        self.assertEqual(len(alert.interventions), 4)

    def test_streak_stops_at_first_different_weight(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-07", [(135, 5)] * 5),
                ("2024-01-05", [(135, 5)] * 5),
                ("2024-01-03", [(130, 5)] * 5),
                ("2024-01-01", [(135, 5)] * 5),
            ]
        )
        self.assertIsNone(PlateauDetector.stagnation(SQUAT, workouts, sets))

    def test_top_weight_is_heaviest_set(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-05", [(95, 5), (135, 5), (115, 5)]),
                ("2024-01-03", [(135, 3)]),
            ]
        )
        self.assertEqual(PlateauDetector.top_weights(workouts, sets), [135, 135])

    def test_last_weight_increase_picks_closest_weight_below(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-09", [(135, 5)] * 5),
                ("2024-01-07", [(135, 5)] * 5),
                ("2024-01-05", [(135, 5)] * 5),
                ("2024-01-03", [(125, 5)] * 5),
                ("2024-01-01", [(130, 5)] * 5),
            ]
        )
        alert = PlateauDetector.stagnation(SQUAT, workouts, sets, sets, workouts)
        self.assertEqual(alert.last_weight_increase, "2024-01-01")

    def test_last_weight_increase_without_lighter_workout(self) -> None:
        workouts, sets = build_history([("2024-01-05", [(135, 5)] * 5)] * 3)
        alert = PlateauDetector.stagnation(SQUAT, workouts, sets, sets, workouts)
        self.assertIsNone(alert.last_weight_increase)

    def test_to_dict(self) -> None:
        workouts, sets = build_history([("2024-01-05", [(135, 5)] * 5)] * 3)
        data = PlateauDetector.stagnation(SQUAT, workouts, sets).to_dict()
        self.assertEqual(data["exercise_name"], "Barbell Back Squat")
        self.assertEqual(data["stagnant_workouts"], 3)


class SandbaggingTestCase(unittest.TestCase):
    def test_two_flat_workouts_trigger(self) -> None:
        workouts, sets = build_history(
            [("2024-01-03", [(100, 8)] * 5), ("2024-01-01", [(100, 8)] * 5)]
        )
        alert = PlateauDetector.sandbagging(SQUAT, workouts, sets)
        self.assertIsNotNone(alert)
        self.assertEqual(alert.severity, AlertLevel.WARNING)
        self.assertEqual(alert.type, AlertType.SANDBAGGING)
        self.assertEqual(alert.flat_rep_workouts, 2)
        self.assertIn("1 RIR", alert.message)
        self.assertTrue(alert.suggestion.startswith("Add 5-10lbs"))

    def test_single_workout_is_not_enough(self) -> None:
        workouts, sets = build_history([("2024-01-01", [(100, 8)] * 5)])
        self.assertIsNone(PlateauDetector.sandbagging(SQUAT, workouts, sets))

    def test_three_flat_workouts_change_wording(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-05", [(100, 8), (100, 8), (100, 8)]),
                ("2024-01-03", [(100, 8), (100, 8), (100, 8)]),
                ("2024-01-01", [(100, 8), (100, 8), (100, 8)]),
            ]
        )
        alert = PlateauDetector.sandbagging(SQUAT, workouts, sets)
        self.assertEqual(alert.flat_rep_workouts, 3)
        self.assertIn("true failure", alert.message)

    def test_dropping_reps_are_not_flagged(self) -> None:
        falling = [(100, 8), (100, 7), (100, 6), (100, 6), (100, 5)]
        workouts, sets = build_history(
            [("2024-01-05", falling), ("2024-01-03", falling), ("2024-01-01", falling)]
        )
        self.assertIsNone(PlateauDetector.sandbagging(SQUAT, workouts, sets))

    def test_short_workouts_are_ignored(self) -> None:
        workouts, sets = build_history(
            [("2024-01-03", [(100, 8)] * 2), ("2024-01-01", [(100, 8)] * 2)]
        )
        self.assertIsNone(PlateauDetector.sandbagging(SQUAT, workouts, sets))

    def test_average_range_selects_suggestion(self) -> None:
        flat = [(100, 8), (100, 8), (100, 8)]
        wide = [(100, 10), (100, 8), (100, 4)]
        workouts, sets = build_history(
            [("2024-01-05", flat), ("2024-01-03", flat), ("2024-01-01", wide)]
        )
        alert = PlateauDetector.sandbagging(SQUAT, workouts, sets)
        self.assertAlmostEqual(alert.average_rep_range, 2.0)
        self.assertTrue(alert.suggestion.startswith("Focus on progressive overload"))

    def test_current_weight_from_recent_sets(self) -> None:
        workouts, sets = build_history(
            [
                ("2024-01-03", [(105, 8), (110, 8), (105, 8)]),
                ("2024-01-01", [(100, 8)] * 3),
            ]
        )
        alert = PlateauDetector.sandbagging(SQUAT, workouts, sets)
        self.assertEqual(alert.current_weight, 110)

    def test_rep_range(self) -> None:
        self.assertEqual(PlateauDetector.rep_range([8, 8, 7, 8]), 1)
        self.assertEqual(PlateauDetector.average_rep_range([]), 0.0)


if __name__ == "__main__":
    unittest.main()
