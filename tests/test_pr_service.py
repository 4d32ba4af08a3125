import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ExerciseRepository, PersonalRecordRepository, SetRepository, WorkoutRepository
from models import PRType
from pr_service import PRService


class PRServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_prs.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.exercises = ExerciseRepository(self.db_path)
        self.workouts = WorkoutRepository(self.db_path)
        self.service = PRService(PersonalRecordRepository(self.db_path))
        ids = dict((n, i) for i, n in self.exercises.fetch_names_and_ids())
        self.squat = ids["Barbell Back Squat"]
        self.bench = ids["Barbell Bench Press"]
        self.wid = self.workouts.create("2024-04-01")

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_first_set_sets_weight_and_volume(self) -> None:
        achieved = self.service.detect_and_save_prs(self.squat, self.wid, None, 135, 5)
        self.assertEqual(achieved, ["weight", "volume"])
        rows = self.service.get_exercise_prs(self.squat)
        self.assertEqual({r.pr_type for r in rows}, {PRType.WEIGHT, PRType.VOLUME})

    def test_ties_do_not_create_records(self) -> None:
        self.service.detect_and_save_prs(self.squat, self.wid, None, 135, 5)
        self.assertEqual(self.service.detect_and_save_prs(self.squat, self.wid, None, 135, 5), [])
        self.assertEqual(len(self.service.get_exercise_prs(self.squat)), 2)

    def test_rep_pr_needs_a_previous_lift_at_that_weight(self) -> None:
        first = self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 3)
        self.assertNotIn("reps", first)
        later = self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 5)
        self.assertIn("reps", later)
        self.assertEqual(later, ["volume", "reps"])
        again = self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 5)
        self.assertEqual(again, [])
        more = self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 6)
        self.assertEqual(more, ["volume", "reps"])

    def test_rep_prs_are_scoped_per_weight(self) -> None:
        self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 3)
        self.service.detect_and_save_prs(self.squat, self.wid, None, 200, 5)
        # 180 has never been a record weight
        check = self.service.check_for_pr(self.squat, 180, 8)
        self.assertFalse(check.is_rep_pr)
        self.assertIsNone(check.previous_rep_pr)
        self.assertTrue(check.is_volume_pr)
        self.assertFalse(check.is_weight_pr)

    def test_previous_values_and_mixed_categories(self) -> None:
        self.service.detect_and_save_prs(self.bench, self.wid, None, 100, 5)
        self.service.detect_and_save_prs(self.bench, self.wid, None, 95, 8)
        check = self.service.check_for_pr(self.bench, 100, 5)
        self.assertEqual(check.previous_weight_pr, 100)
        self.assertEqual(check.previous_volume_pr, 760)
        self.assertEqual(check.previous_rep_pr, 5)
        achieved = self.service.detect_and_save_prs(self.bench, self.wid, None, 105, 8)
        self.assertEqual(achieved, ["weight", "volume"])
        achieved = self.service.detect_and_save_prs(self.bench, self.wid, None, 105, 9)
        self.assertEqual(achieved, ["volume", "reps"])

    def test_rep_pr_uses_logged_sets_at_that_weight(self) -> None:
        sets = SetRepository(self.db_path)
        service = PRService(PersonalRecordRepository(self.db_path), sets)

        def log(number, weight, reps):
            set_id = sets.add(self.wid, self.squat, number, weight, reps, "yes_maybe", 5)
            return service.detect_and_save_prs(self.squat, self.wid, set_id, weight, reps)

        self.assertEqual(log(1, 225, 5), ["weight", "volume"])
        self.assertEqual(log(2, 200, 3), [])
        self.assertEqual(log(3, 200, 5), ["reps"])
        self.assertEqual(service.check_for_pr(self.squat, 200, 5).previous_rep_pr, 5)
        # warmups are not a baseline
        sets.add(self.wid, self.squat, 4, 150, 10, None, is_warmup=True)
        self.assertIsNone(service.check_for_pr(self.squat, 150, 8).previous_rep_pr)

    def test_exercises_are_independent(self) -> None:
        self.service.detect_and_save_prs(self.squat, self.wid, None, 300, 5)
        self.assertEqual(
            self.service.detect_and_save_prs(self.bench, self.wid, None, 100, 5),
            ["weight", "volume"],
        )

    def test_check_without_records(self) -> None:
        check = self.service.check_for_pr(self.squat, 45, 5)
        self.assertTrue(check.is_weight_pr)
        self.assertTrue(check.is_volume_pr)
        self.assertFalse(check.is_rep_pr)
        self.assertIsNone(check.previous_weight_pr)
        self.assertIsNone(check.previous_volume_pr)

    def test_best_prs_return_maximum(self) -> None:
        for weight, reps in ((135, 5), (145, 5), (155, 3), (155, 4)):
            self.service.detect_and_save_prs(self.squat, self.wid, None, weight, reps)
        self.service.save_pr(self.squat, None, None, PRType.WEIGHT, 140, 1)
        best = self.service.get_best_prs(self.squat)
        self.assertEqual(best[PRType.WEIGHT].weight, 155)
        self.assertEqual(best[PRType.VOLUME].volume, 725)
        self.assertEqual(best[PRType.REPS].reps, 4)

    def test_all_prs_include_names(self) -> None:
        self.service.detect_and_save_prs(self.squat, self.wid, None, 135, 5)
        rows = self.service.get_all_prs()
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0].exercise_name, "Barbell Back Squat")
        self.assertEqual(rows[0].workout_id, self.wid)
        self.assertEqual(len(self.service.get_all_prs(limit=1)), 1)


if __name__ == "__main__":
    unittest.main()
