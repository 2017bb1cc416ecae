import copy
import json
import unittest

from program_engine.program_validator import validate_program, validate_week, validate_workout_day


def make_day(day_of_week, rest=False):
    if rest:
        return {"dayOfWeek": day_of_week, "focus": "Rest Day", "isRestDay": True, "exercises": []}
    return {
        "dayOfWeek": day_of_week,
        "focus": "Full Body",
        "isRestDay": False,
        "estimatedDurationMinutes": 60,
        "warmUp": [{"name": "Bike", "sets": 1, "reps": "5 min", "category": "Warm-up"}],
        "exercises": [
            {"name": "Back Squat", "sets": 4, "reps": "5", "rpe": 8, "weight": "100 kg", "category": "Anchor_Lift"},
            {"name": "Lying Leg Curl", "sets": 3, "reps": "12", "rpe": 7, "category": "Isolation"},
        ],
        "coolDown": [{"name": "Hip Flexor Stretch", "sets": 1, "reps": "60s", "category": "Cool-down"}],
    }


def make_week(week_number, training_days=(1, 3, 5)):
    return {
        "weekNumber": week_number,
        "days": [make_day(d, rest=d not in training_days) for d in range(1, 8)],
    }


def make_program(phase_weeks=(3, 2), total=None):
    phases = []
    week_number = 1
    for index, weeks in enumerate(phase_weeks, start=1):
        phase_week_list = []
        for _ in range(weeks):
            phase_week_list.append(make_week(week_number))
            week_number += 1
        phases.append({
            "phaseName": f"Phase {index}",
            "phaseNumber": index,
            "durationWeeks": weeks,
            "weeks": phase_week_list,
        })
    return {
        "programName": "Test Block",
        "description": "Test program",
        "durationWeeksTotal": sum(phase_weeks) if total is None else total,
        "trainingFrequency": 3,
        "phases": phases,
    }


def codes(result):
    return {violation["code"] for violation in result["violations"]}


class ProgramValidatorTests(unittest.TestCase):
    def test_well_formed_program_is_valid(self):
        result = validate_program(make_program(), training_days=3)
        self.assertTrue(result["valid"], result["violations"])
        self.assertEqual(result["violations"], [])

    def test_total_duration_must_match_phase_sum(self):
        result = validate_program(make_program((3, 2), total=6))
        self.assertFalse(result["valid"])
        self.assertIn("duration_mismatch", codes(result))
        paths = [v["path"] for v in result["violations"]]
        self.assertIn("program.durationWeeksTotal", paths)

    def test_phase_week_count_must_match_declared_duration(self):
        program = make_program((3,))
        program["phases"][0]["weeks"].pop()
        program["durationWeeksTotal"] = 3
        self.assertIn("phase_week_mismatch", codes(validate_program(program)))

    def test_numeric_fields_reject_strings_and_booleans(self):
        program = make_program()
        program["phases"][0]["weeks"][0]["days"][0]["exercises"][0]["sets"] = "4"
        program["phases"][0]["weeks"][1]["days"][0]["exercises"][0]["sets"] = True
        program["phases"][1]["weeks"][0]["weekNumber"] = "4"
        result = validate_program(program)
        type_paths = [v["path"] for v in result["violations"] if v["code"] == "invalid_type"]
        self.assertIn("program.phases[0].weeks[0].days[0].exercises[0].sets", type_paths)
        self.assertIn("program.phases[0].weeks[1].days[0].exercises[0].sets", type_paths)
        self.assertIn("program.phases[1].weeks[0].weekNumber", type_paths)

    def test_string_total_duration_is_rejected(self):
        program = make_program()
        program["durationWeeksTotal"] = "5"
        self.assertIn("invalid_type", codes(validate_program(program)))

    def test_enums_are_enforced(self):
        program = make_program()
        program["phases"][0]["weeks"][0]["days"][0]["focus"] = "Leg Day"
        program["phases"][0]["weeks"][0]["days"][0]["exercises"][1]["category"] = "Accessory"
        result = validate_program(program)
        self.assertEqual(
            [v["path"] for v in result["violations"] if v["code"] == "invalid_enum"],
            [
                "program.phases[0].weeks[0].days[0].focus",
                "program.phases[0].weeks[0].days[0].exercises[1].category",
            ],
        )

    def test_day_of_week_range_and_uniqueness(self):
        program = make_program()
        days = program["phases"][0]["weeks"][0]["days"]
        days[1]["dayOfWeek"] = 1
        days[6]["dayOfWeek"] = 8
        result = validate_program(program)
        self.assertIn("duplicate_day", codes(result))
        self.assertIn("out_of_range", codes(result))

    def test_training_day_needs_exercises_and_anchor_lift(self):
        program = make_program()
        week = program["phases"][0]["weeks"][0]
        week["days"][0]["exercises"] = []
        week["days"][2]["exercises"].reverse()
        result = validate_program(program)
        self.assertIn("empty_day", codes(result))
        self.assertIn("missing_anchor_lift", codes(result))
        self.assertNotIn("missing_anchor_lift", codes(validate_program(program, require_anchor_lifts=False)))

    def test_compound_name_counts_as_anchor_without_category(self):
        program = make_program()
        del program["phases"][0]["weeks"][0]["days"][0]["exercises"][0]["category"]
        self.assertTrue(validate_program(program)["valid"])

    def test_training_day_count_checked_unless_trial(self):
        program = make_program((1,))
        self.assertIn("training_day_count", codes(validate_program(program, training_days=4)))
        self.assertTrue(validate_program(program, training_days=4, trial=True)["valid"])

    def test_trial_program_must_span_exactly_one_week(self):
        result = validate_program(make_program((3, 2)), trial=True)
        self.assertIn("trial_length", codes(result))

        stretched = make_program((1,), total=2)
        stretched["phases"][0]["durationWeeks"] = 2
        self.assertIn("trial_length", codes(validate_program(stretched, trial=True)))

    def test_unhashable_phase_number_is_reported_not_raised(self):
        program = make_program()
        program["phases"][0]["phaseNumber"] = [1]
        program["phases"][1]["phaseNumber"] = {"n": 2}
        result = validate_program(program)
        self.assertFalse(result["valid"])
        self.assertIn("invalid_type", codes(result))
        self.assertNotIn("duplicate_phase", codes(result))

    def test_non_string_exercise_name_is_not_an_anchor(self):
        program = make_program()
        exercise = program["phases"][0]["weeks"][0]["days"][0]["exercises"][0]
        del exercise["category"]
        exercise["name"] = ["Back Squat"]
        result = validate_program(program)
        self.assertIn("missing_anchor_lift", codes(result))

    def test_non_object_program_is_rejected(self):
        result = validate_program(["not", "a", "program"])
        self.assertFalse(result["valid"])
        self.assertEqual(result["violations"][0]["path"], "program")

    def test_validation_does_not_modify_program(self):
        program = make_program((3, 2), total=9)
        snapshot = copy.deepcopy(program)
        validate_program(program, training_days=5)
        self.assertEqual(program, snapshot)

    def test_valid_program_survives_json_round_trip(self):
        program = make_program()
        reparsed = json.loads(json.dumps(program))
        self.assertEqual(reparsed, program)
        self.assertTrue(validate_program(reparsed, training_days=3)["valid"])


class SubContractValidatorTests(unittest.TestCase):
    def test_week_validation(self):
        self.assertTrue(validate_week(make_week(2), training_days=3)["valid"])
        self.assertIn("training_day_count", codes(validate_week(make_week(2), training_days=4)))

    def test_day_validation(self):
        self.assertTrue(validate_workout_day(make_day(1))["valid"])
        day = make_day(1)
        day["exercises"][0]["rpe"] = 11
        self.assertIn("out_of_range", codes(validate_workout_day(day)))


if __name__ == "__main__":
    unittest.main()
