import unittest

from program_engine.weak_points import analyze_strength_standards, analyze_weak_points


class WeakPointAnalyzerTests(unittest.TestCase):
    def test_fewer_than_two_lifts_returns_default(self):
        for lifts in ({}, {"squat": 100}, {"squat": 100, "bench": 0}, {"bench": None, "deadlift": -5}):
            result = analyze_weak_points(lifts, "Advanced", "Muscle Gain", "lower back pain")
            self.assertEqual(result["primary_weak_point"], "General Muscle Balance")
            self.assertIsNone(result["secondary_weak_point"])

    def test_equal_squat_and_deadlift_flags_posterior_chain(self):
        result = analyze_weak_points({"squat": 100, "deadlift": 100}, "Intermediate", "General Fitness", "")
        self.assertEqual(result["primary_weak_point"], "Posterior Chain Weakness")
        self.assertEqual(result["priority"], 1)
        self.assertIn("Romanian Deadlifts", result["recommended_accessories"])

    def test_back_injury_overrides_other_priority_one_rules(self):
        result = analyze_weak_points(
            {"squat": 100, "deadlift": 100, "bench": 40},
            "Advanced",
            "Muscle Gain",
            "Old lower back injury",
        )
        self.assertEqual(result["primary_weak_point"], "Spinal Stability")
        self.assertEqual(result["priority"], 1)
        self.assertEqual(result["secondary_weak_point"], "Posterior Chain Weakness")

    def test_spine_keyword_also_triggers_spinal_diagnosis(self):
        result = analyze_weak_points({"squat": 140, "bench": 100, "deadlift": 180}, "Beginner", "", "spine surgery")
        self.assertEqual(result["primary_weak_point"], "Spinal Stability")

    def test_pressing_weakness_ranks_before_push_pull(self):
        result = analyze_weak_points({"squat": 100, "bench": 40, "deadlift": 150}, "Intermediate", "", "")
        self.assertEqual(result["primary_weak_point"], "Upper Body Pressing Weakness")
        self.assertEqual(result["secondary_weak_point"], "Push/Pull Imbalance")

    def test_knee_injury_ranks_at_priority_two(self):
        result = analyze_weak_points({"squat": 100, "bench": 80, "deadlift": 150}, "Intermediate", "", "bad knee")
        self.assertEqual(result["primary_weak_point"], "Knee & Hip Stability")
        self.assertEqual(result["secondary_weak_point"], "Push/Pull Imbalance")

    def test_shoulder_injury_suppresses_push_pull_rule(self):
        result = analyze_weak_points(
            {"squat": 100, "bench": 80, "deadlift": 150, "overhead_press": 30},
            "Intermediate",
            "",
            "Shoulder impingement",
        )
        self.assertEqual(result["primary_weak_point"], "Shoulder Stability")
        self.assertEqual(result["secondary_weak_point"], "Overhead Pressing Weakness")

    def test_first_listed_rule_wins_priority_ties(self):
        # Pressing weakness (rule 2) and knee injury (rule 7) are both priority 2.
        result = analyze_weak_points({"squat": 100, "bench": 40, "deadlift": 150}, "Intermediate", "", "knee")
        self.assertEqual(result["primary_weak_point"], "Upper Body Pressing Weakness")
        self.assertEqual(result["secondary_weak_point"], "Knee & Hip Stability")

    def test_advanced_heavy_squatter_gets_core_stability(self):
        result = analyze_weak_points({"squat": 180, "deadlift": 220}, "Advanced", "Strength Gain", "")
        self.assertEqual(result["primary_weak_point"], "Core Stability")

    def test_hypertrophy_goal_adds_specialization(self):
        result = analyze_weak_points({"squat": 120, "deadlift": 160}, "Intermediate", "Muscle Gain: Hypertrophy", "")
        self.assertEqual(result["primary_weak_point"], "Muscle Specialization")


class StrengthStandardsTests(unittest.TestCase):
    def test_largest_high_severity_deficit_is_primary(self):
        result = analyze_strength_standards({"squat": 120, "bench": 100, "deadlift": 200})
        self.assertEqual(result["primary_weak_point"], "Posterior Chain Weakness")
        self.assertEqual(result["secondary_weak_point"], "Upper Body Pressing Weakness")
        self.assertEqual(result["analysis_type"], "standards")
        self.assertIn("8 weeks", result["rationale"])

    def test_balanced_lifts_report_no_deficit(self):
        result = analyze_strength_standards({"squat": 160, "bench": 130, "deadlift": 200, "overhead_press": 85})
        self.assertEqual(result["primary_weak_point"], "Balanced Strength Profile")
        self.assertEqual(result["recommended_accessories"], [])

    def test_insufficient_lifts_return_default(self):
        result = analyze_strength_standards({"bench": 100})
        self.assertEqual(result["primary_weak_point"], "General Muscle Balance")


if __name__ == "__main__":
    unittest.main()
