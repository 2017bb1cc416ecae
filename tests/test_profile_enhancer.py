import unittest

from program_engine.periodization import HYPERTROPHY_BLOCK
from program_engine.profile_enhancer import (
    enhance_user_profile,
    infer_recovery_capacity,
    infer_stress_level,
    normalize_onboarding_responses,
    parse_injury_limitations,
    process_user_data,
)


def _onboarding(**overrides):
    answers = {
        "primary_goal": "Muscle Gain: Hypertrophy",
        "training_frequency_days": 4,
        "session_duration": "60-75 minutes",
        "equipment": ["Barbell", "Dumbbells"],
        "injuries_limitations": "",
        "squat_1rm": 140,
        "bench_1rm": 100,
        "deadlift_1rm": 180,
        "overhead_press_1rm": 60,
        "strength_assessment_type": "estimated_1rm",
        "weight_unit": "kg",
    }
    answers.update(overrides)
    return answers


class OnboardingNormalizationTests(unittest.TestCase):
    def test_pound_lifts_are_converted_without_mutating_input(self):
        raw = _onboarding(squat_1rm=225, bench_1rm="", weight_unit="lbs")
        normalized = normalize_onboarding_responses(raw)
        self.assertEqual(normalized["squat_1rm"], 102.06)
        self.assertIsNone(normalized["bench_1rm"])
        self.assertEqual(raw["squat_1rm"], 225)
        self.assertEqual(normalized["weight_unit"], "kg")
        self.assertEqual(normalized["display_unit"], "lbs")

    def test_normalizing_twice_does_not_convert_again(self):
        once = normalize_onboarding_responses({"squat_1rm": 225, "weight_unit": "lbs"})
        twice = normalize_onboarding_responses(once)
        self.assertEqual(twice, once)
        self.assertEqual(twice["squat_1rm"], 102.06)

    def test_invalid_values_fall_back_to_safe_defaults(self):
        normalized = normalize_onboarding_responses(
            {"training_frequency_days": 12, "strength_assessment_type": "guess", "squat_1rm": "heavy"}
        )
        self.assertEqual(normalized["training_frequency_days"], 7)
        self.assertEqual(normalized["strength_assessment_type"], "unsure")
        self.assertIsNone(normalized["squat_1rm"])
        self.assertEqual(normalized["equipment"], [])

    def test_missing_onboarding_is_tolerated(self):
        normalized = normalize_onboarding_responses(None)
        self.assertEqual(normalized["training_frequency_days"], 3)


class ProfileInferenceTests(unittest.TestCase):
    def test_recovery_capacity_scoring(self):
        self.assertEqual(infer_recovery_capacity({"training_frequency_days": 4, "session_duration": "60-75 minutes"}), 9)
        self.assertEqual(infer_recovery_capacity({"training_frequency_days": 3, "session_duration": "45-60 minutes"}), 6)
        self.assertEqual(infer_recovery_capacity({"training_frequency_days": 2, "session_duration": "30-45 minutes"}), 3)

    def test_stress_level_from_frequency(self):
        self.assertEqual(infer_stress_level({"training_frequency_days": 6}), 3)
        self.assertEqual(infer_stress_level({"training_frequency_days": 4}), 6)
        self.assertEqual(infer_stress_level({"training_frequency_days": 2}), 8)

    def test_injury_text_maps_to_areas_and_contraindications(self):
        analysis = parse_injury_limitations("Left knee pain, herniated disc")
        self.assertEqual(analysis["identified_areas"], ["Knees", "Lower Back"])
        self.assertIn("Heavy deadlifts from floor", analysis["contraindications"])
        self.assertEqual(parse_injury_limitations(""), {"identified_areas": [], "contraindications": []})

    def test_enhanced_profile_sections(self):
        profile = enhance_user_profile({"name": "Sam", "experience_level": "Intermediate"}, _onboarding())
        self.assertEqual(profile["volume_parameters"]["training_age"], 1.25)
        self.assertEqual(profile["volume_parameters"]["recovery_capacity"], 9)
        self.assertEqual(profile["recovery_profile"]["recovery_rate"], 1.2)
        self.assertEqual(profile["recovery_profile"]["fatigue_threshold"], 8)
        self.assertEqual(profile["rpe_profile"]["session_rpe_targets"], [7, 9])
        self.assertEqual(profile["name"], "Sam")

    def test_strength_goal_uses_higher_rpe_targets(self):
        profile = enhance_user_profile({"experience_level": "Advanced"}, _onboarding(primary_goal="Strength Gain"))
        self.assertEqual(profile["rpe_profile"]["session_rpe_targets"], [8, 10])


class ProcessUserDataTests(unittest.TestCase):
    def test_pre_analysis_bundles_landmarks_weak_points_and_model(self):
        result = process_user_data({"name": "Sam", "experience_level": "Intermediate"}, _onboarding())
        self.assertEqual(result["periodization_model"], HYPERTROPHY_BLOCK)
        self.assertIn("chest", result["volume_landmarks"])
        self.assertEqual(result["weak_point_analysis"]["primary_weak_point"], "Push/Pull Imbalance")

    def test_pre_analysis_without_lifts_uses_default_weak_point(self):
        result = process_user_data(
            {"experience_level": "Beginner"},
            _onboarding(squat_1rm=None, bench_1rm=None, deadlift_1rm=None, overhead_press_1rm=None),
        )
        self.assertEqual(result["weak_point_analysis"]["primary_weak_point"], "General Muscle Balance")


if __name__ == "__main__":
    unittest.main()
