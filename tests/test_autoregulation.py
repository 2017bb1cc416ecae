import unittest

from program_engine.autoregulation import (
    analyze_rpe_trend,
    build_autoregulation_notes,
    calculate_adaptive_load,
    determine_deload_need,
    track_cumulative_fatigue,
)


class AutoregulationTests(unittest.TestCase):
    def test_fatigue_decays_before_new_session_is_added(self):
        self.assertEqual(track_cumulative_fatigue(10, 5, recovery_rate=1.0), 12.0)
        self.assertEqual(track_cumulative_fatigue(10, 5, recovery_rate=0.2), 5.0)

    def test_rpe_trend_needs_three_values(self):
        self.assertEqual(analyze_rpe_trend([7, 9]), "stable")
        self.assertEqual(analyze_rpe_trend([7, 8, 9]), "increasing")
        self.assertEqual(analyze_rpe_trend([9, 8, 7.5]), "decreasing")
        self.assertEqual(analyze_rpe_trend([8, 8.5, 8.5]), "stable")

    def test_adaptive_load_rounds_to_plate_increment(self):
        self.assertEqual(calculate_adaptive_load(100, 1), 100.0)
        self.assertEqual(calculate_adaptive_load(100, 3, last_rpe=9), 85.0)
        self.assertEqual(calculate_adaptive_load(100, 1, last_rpe=7), 102.5)

    def test_deload_need_checks_fatigue_then_trend(self):
        self.assertEqual(determine_deload_need(8, 7)["type"], "volume")
        self.assertEqual(determine_deload_need(5, 7, [6, 7, 8])["type"], "intensity")
        self.assertFalse(determine_deload_need(5, 7, [7, 7, 7])["needs_deload"])

    def test_notes_include_phase_target(self):
        notes = build_autoregulation_notes("Realization")
        self.assertIn("Realization phase target RPE: 8-10", notes)
        self.assertNotIn("Accumulation", notes)
        self.assertIn("reduce intensity 10-20%", build_autoregulation_notes())


if __name__ == "__main__":
    unittest.main()
