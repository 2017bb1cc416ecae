import unittest

from program_engine.profile_enhancer import process_user_data
from program_engine.prompt_composer import MANDATORY_CONSTRAINTS, PromptComposer


GUIDELINES = {
    "volume_framework": "VOLUME GUIDELINE TEXT 123",
    "autoregulation": "AUTOREG GUIDELINE TEXT 456",
    "periodization": None,
}


def _analysis():
    return process_user_data(
        {"name": "Sam", "experience_level": "Intermediate"},
        {
            "primary_goal": "Muscle Gain: Hypertrophy",
            "training_frequency_days": 4,
            "session_duration": "60-75 minutes",
            "equipment": ["Barbell", "Cables"],
            "injuries_limitations": "",
            "squat_1rm": 140,
            "bench_1rm": 100,
            "deadlift_1rm": 180,
        },
    )


class PromptComposerTests(unittest.TestCase):
    def setUp(self):
        self.analysis = _analysis()
        self.composer = PromptComposer(GUIDELINES)

    def _compose(self, tier, paid=True):
        return self.composer.compose(
            tier,
            self.analysis["enhanced_profile"],
            self.analysis["volume_landmarks"],
            self.analysis["weak_point_analysis"],
            self.analysis["periodization_model"],
            paid,
        )

    def test_full_tier_embeds_guidelines_and_all_constraints(self):
        prompt = self._compose("full")
        self.assertIn("VOLUME GUIDELINE TEXT 123", prompt)
        self.assertIn("AUTOREG GUIDELINE TEXT 456", prompt)
        self.assertNotIn("### PERIODIZATION", prompt)
        for title, _ in MANDATORY_CONSTRAINTS:
            self.assertIn(title, prompt)
        self.assertIn("VOLUME LANDMARKS", prompt)
        self.assertIn("Push/Pull Imbalance", prompt)
        self.assertIn("Hypertrophy-Focused Block Periodization", prompt)

    def test_full_tier_lists_phase_targets_and_deload_plan(self):
        prompt = self._compose("full")
        self.assertIn("- Accumulation (3 wk): wk1 x0.9 @ 65%, wk2 x1 @ 70%, wk3 x1.1 @ 75%", prompt)
        self.assertIn("- Deload (1 wk): wk1 x1 @ 55%", prompt)
        self.assertIn("Planned deload: active, 7 days, volume -50%, intensity -40%.", prompt)

    def test_trial_prompt_omits_phase_targets(self):
        prompt = self._compose("full", paid=False)
        self.assertIn("Hypertrophy-Focused Block Periodization", prompt)
        self.assertNotIn("Phase targets", prompt)

    def test_simplified_tier_drops_guideline_text(self):
        prompt = self._compose("simplified")
        self.assertNotIn("VOLUME GUIDELINE TEXT 123", prompt)
        self.assertNotIn("MANDATORY CONSTRAINTS", prompt)
        self.assertIn("- Weak point: Push/Pull Imbalance", prompt)
        self.assertIn("chest", prompt)

    def test_basic_tier_keeps_only_core_facts(self):
        prompt = self._compose("basic")
        self.assertIn("Goal: Muscle Gain: Hypertrophy", prompt)
        self.assertIn("Equipment: Barbell, Cables", prompt)
        self.assertIn("Training days per week: 4", prompt)
        self.assertIn("compound movement", prompt)
        self.assertNotIn("VOLUME LANDMARKS", prompt)
        self.assertNotIn("Push/Pull Imbalance", prompt)

    def test_every_tier_documents_the_output_schema(self):
        for tier in ("full", "simplified", "basic"):
            for paid in (True, False):
                prompt = self._compose(tier, paid)
                self.assertIn("OUTPUT SCHEMA", prompt)
                self.assertIn("durationWeeksTotal must equal the sum", prompt)
                self.assertIn("Return ONLY the JSON object", prompt)

    def test_paid_program_length_follows_goal_table(self):
        prompt = self._compose("basic")
        self.assertIn("PROGRAM LENGTH: 6 weeks total", prompt)
        self.assertNotIn("EXAMPLE WEEK ONLY", prompt)

    def test_trial_requests_single_mid_program_preview_week_on_every_tier(self):
        for tier in ("full", "simplified", "basic"):
            prompt = self._compose(tier, paid=False)
            self.assertIn("EXAMPLE WEEK ONLY", prompt)
            self.assertIn("set durationWeeksTotal to 1", prompt)
            self.assertIn("week 3 of the full program", prompt)
            self.assertIn("preview", prompt)
            self.assertNotIn("PROGRAM LENGTH", prompt)

    def test_missing_guidelines_are_omitted(self):
        composer = PromptComposer({})
        prompt = composer.compose(
            "full",
            self.analysis["enhanced_profile"],
            self.analysis["volume_landmarks"],
            self.analysis["weak_point_analysis"],
            self.analysis["periodization_model"],
            True,
        )
        self.assertNotIn("SCIENTIFIC FRAMEWORK", prompt)
        self.assertIn("MANDATORY CONSTRAINTS", prompt)

    def test_unknown_tier_raises(self):
        with self.assertRaises(ValueError):
            self._compose("extreme")


if __name__ == "__main__":
    unittest.main()
