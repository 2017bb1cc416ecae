"""
Structural validation for generated training programs.

The validator only reports; it never repairs. A failing result is handled
by the caller like any other failed generation or adaptation attempt.
"""

import re

EXERCISE_CATEGORIES = (
    "Compound",
    "Isolation",
    "Cardio",
    "Mobility",
    "Core",
    "Warm-up",
    "Cool-down",
    "Anchor_Lift",
    "Power",
    "Corrective",
)

DAY_FOCUSES = (
    "Upper Body",
    "Lower Body",
    "Push",
    "Pull",
    "Legs",
    "Full Body",
    "Cardio",
    "Core",
    "Arms",
    "Back",
    "Chest",
    "Shoulders",
    "Glutes",
    "Recovery/Mobility",
    "Sport-Specific",
    "Rest Day",
    "Lower Body Endurance",
    "Squat",
    "Bench",
    "Deadlift",
    "Overhead Press",
)

ANCHOR_CATEGORIES = ("Anchor_Lift", "Compound", "Power")

# Movement names that count as compound anchors when the category is missing.
COMPOUND_MOVEMENT_RE = re.compile(
    r"squat|deadlift|bench|press|row|pull-?up|chin-?up|lunge|clean|snatch|thrust|dip",
    re.IGNORECASE,
)

MAX_PROGRAM_WEEKS = 16
MAX_PHASE_WEEKS = 12


def _add_violation(violations, path, code, message):
    violations.append(
        {
            "path": path,
            "code": code,
            "message": message,
        }
    )


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _require_text(obj, key, path, violations):
    value = obj.get(key)
    if not isinstance(value, str) or not value.strip():
        _add_violation(violations, f"{path}.{key}", "missing_field", f"{key} must be a non-empty string.")
        return False
    return True


def _require_list(obj, key, path, violations, required=True):
    value = obj.get(key)
    if value is None and not required:
        return []
    if not isinstance(value, list):
        _add_violation(violations, f"{path}.{key}", "invalid_type", f"{key} must be a list.")
        return None
    return value


def is_anchor_exercise(exercise):
    if not isinstance(exercise, dict):
        return False
    if exercise.get("category") in ANCHOR_CATEGORIES:
        return True
    name = exercise.get("name")
    return isinstance(name, str) and bool(COMPOUND_MOVEMENT_RE.search(name))


def _validate_exercise(exercise, path, violations):
    if not isinstance(exercise, dict):
        _add_violation(violations, path, "invalid_type", "Exercise must be an object.")
        return

    _require_text(exercise, "name", path, violations)

    sets = exercise.get("sets")
    if not _is_number(sets):
        _add_violation(violations, f"{path}.sets", "invalid_type", "sets must be numeric.")
    elif sets < 1:
        _add_violation(violations, f"{path}.sets", "out_of_range", "sets must be at least 1.")

    reps = exercise.get("reps")
    if reps is None or (not _is_number(reps) and not isinstance(reps, str)):
        _add_violation(violations, f"{path}.reps", "invalid_type", "reps must be a number or string.")

    rpe = exercise.get("rpe")
    if rpe is not None:
        if not _is_number(rpe):
            _add_violation(violations, f"{path}.rpe", "invalid_type", "rpe must be numeric.")
        elif not 1 <= rpe <= 10:
            _add_violation(violations, f"{path}.rpe", "out_of_range", "rpe must be between 1 and 10.")

    weight = exercise.get("weight")
    if weight is not None and not _is_number(weight) and not isinstance(weight, str):
        _add_violation(violations, f"{path}.weight", "invalid_type", "weight must be a number or string.")

    category = exercise.get("category")
    if category is not None and category not in EXERCISE_CATEGORIES:
        _add_violation(
            violations,
            f"{path}.category",
            "invalid_enum",
            f"Unknown exercise category '{category}'.",
        )


def _validate_day(day, path, violations, require_anchor_lifts):
    if not isinstance(day, dict):
        _add_violation(violations, path, "invalid_type", "Day must be an object.")
        return

    day_of_week = day.get("dayOfWeek")
    if not _is_int(day_of_week):
        _add_violation(violations, f"{path}.dayOfWeek", "invalid_type", "dayOfWeek must be an integer.")
    elif not 1 <= day_of_week <= 7:
        _add_violation(violations, f"{path}.dayOfWeek", "out_of_range", "dayOfWeek must be between 1 and 7.")

    focus = day.get("focus")
    if focus not in DAY_FOCUSES:
        _add_violation(violations, f"{path}.focus", "invalid_enum", f"Unknown day focus '{focus}'.")

    is_rest = day.get("isRestDay", False)
    if not isinstance(is_rest, bool):
        _add_violation(violations, f"{path}.isRestDay", "invalid_type", "isRestDay must be a boolean.")
        is_rest = False

    duration = day.get("estimatedDurationMinutes")
    if duration is not None:
        if not _is_number(duration):
            _add_violation(
                violations, f"{path}.estimatedDurationMinutes", "invalid_type",
                "estimatedDurationMinutes must be numeric.",
            )
        elif not 15 <= duration <= 180:
            _add_violation(
                violations, f"{path}.estimatedDurationMinutes", "out_of_range",
                "estimatedDurationMinutes must be between 15 and 180.",
            )

    exercises = _require_list(day, "exercises", path, violations, required=not is_rest)
    if exercises is None:
        return
    for index, exercise in enumerate(exercises):
        _validate_exercise(exercise, f"{path}.exercises[{index}]", violations)

    for key in ("warmUp", "coolDown"):
        extras = _require_list(day, key, path, violations, required=False)
        for index, exercise in enumerate(extras or []):
            _validate_exercise(exercise, f"{path}.{key}[{index}]", violations)

    if is_rest:
        return
    if not exercises:
        _add_violation(violations, f"{path}.exercises", "empty_day", "Training day has no exercises.")
    elif require_anchor_lifts and not is_anchor_exercise(exercises[0]):
        _add_violation(
            violations,
            f"{path}.exercises[0]",
            "missing_anchor_lift",
            "First exercise of a training day must be a compound anchor lift.",
        )


def _validate_week(week, path, violations, training_days, trial, require_anchor_lifts):
    if not isinstance(week, dict):
        _add_violation(violations, path, "invalid_type", "Week must be an object.")
        return

    if not _is_int(week.get("weekNumber")) or week.get("weekNumber") < 1:
        _add_violation(violations, f"{path}.weekNumber", "invalid_type", "weekNumber must be a positive integer.")

    days = _require_list(week, "days", path, violations)
    if days is None:
        return
    if not days:
        _add_violation(violations, f"{path}.days", "empty_week", "Week has no days.")

    seen = set()
    training_count = 0
    for index, day in enumerate(days):
        day_path = f"{path}.days[{index}]"
        _validate_day(day, day_path, violations, require_anchor_lifts)
        if not isinstance(day, dict):
            continue
        day_of_week = day.get("dayOfWeek")
        if _is_int(day_of_week):
            if day_of_week in seen:
                _add_violation(
                    violations, f"{day_path}.dayOfWeek", "duplicate_day",
                    f"dayOfWeek {day_of_week} appears more than once.",
                )
            seen.add(day_of_week)
        if day.get("isRestDay") is not True:
            training_count += 1

    if training_days and not trial and training_count != training_days:
        _add_violation(
            violations,
            f"{path}.days",
            "training_day_count",
            f"Expected {training_days} training days, found {training_count}.",
        )


def _result(violations, checked):
    summary = (
        f"Validation: {checked} checked, {len(violations)} violation(s)."
    )
    return {
        "valid": not violations,
        "violations": violations,
        "summary": summary,
    }


def validate_workout_day(day, require_anchor_lifts=False):
    """Validate a single WorkoutDay."""
    violations = []
    _validate_day(day, "day", violations, require_anchor_lifts)
    return _result(violations, "1 day")


def validate_week(week, training_days=None, require_anchor_lifts=False):
    """Validate a single TrainingWeek, as returned by weekly adaptation."""
    violations = []
    _validate_week(week, "week", violations, training_days, False, require_anchor_lifts)
    return _result(violations, "1 week")


def validate_program(program, training_days=None, trial=False, require_anchor_lifts=True):
    """
    Validate a complete TrainingProgram tree.

    Args:
        program: Parsed JSON object.
        training_days: Expected training (non-rest) days per week, if known.
        trial: Single-week preview program; requires exactly one week and skips
            the training-day count check.
        require_anchor_lifts: Require every training day to open with a compound.

    Returns:
        Dict with valid, violations ([{path, code, message}]) and summary.
    """
    violations = []
    if not isinstance(program, dict):
        _add_violation(violations, "program", "invalid_type", "Program must be a JSON object.")
        return _result(violations, "0 weeks")

    _require_text(program, "programName", "program", violations)

    total = program.get("durationWeeksTotal")
    if not _is_int(total):
        _add_violation(violations, "program.durationWeeksTotal", "invalid_type", "durationWeeksTotal must be an integer.")
        total = None
    elif not 1 <= total <= MAX_PROGRAM_WEEKS:
        _add_violation(
            violations, "program.durationWeeksTotal", "out_of_range",
            f"durationWeeksTotal must be between 1 and {MAX_PROGRAM_WEEKS}.",
        )

    frequency = program.get("trainingFrequency")
    if frequency is not None and (not _is_int(frequency) or not 1 <= frequency <= 7):
        _add_violation(violations, "program.trainingFrequency", "out_of_range", "trainingFrequency must be 1-7.")

    phases = _require_list(program, "phases", "program", violations)
    if phases is None:
        return _result(violations, "0 weeks")
    if not phases:
        _add_violation(violations, "program.phases", "empty_program", "Program has no phases.")

    phase_total = 0
    week_count = 0
    phase_numbers = set()
    for p_index, phase in enumerate(phases):
        path = f"program.phases[{p_index}]"
        if not isinstance(phase, dict):
            _add_violation(violations, path, "invalid_type", "Phase must be an object.")
            continue

        _require_text(phase, "phaseName", path, violations)

        number = phase.get("phaseNumber")
        if number is not None and not _is_int(number):
            _add_violation(violations, f"{path}.phaseNumber", "invalid_type", "phaseNumber must be an integer.")
        elif number is not None:
            if number in phase_numbers:
                _add_violation(violations, f"{path}.phaseNumber", "duplicate_phase", f"phaseNumber {number} repeats.")
            phase_numbers.add(number)

        duration = phase.get("durationWeeks")
        if not _is_int(duration):
            _add_violation(violations, f"{path}.durationWeeks", "invalid_type", "durationWeeks must be an integer.")
            duration = None
        elif not 1 <= duration <= MAX_PHASE_WEEKS:
            _add_violation(
                violations, f"{path}.durationWeeks", "out_of_range",
                f"durationWeeks must be between 1 and {MAX_PHASE_WEEKS}.",
            )
        if duration is not None:
            phase_total += duration

        weeks = _require_list(phase, "weeks", path, violations)
        if weeks is None:
            continue
        week_count += len(weeks)
        if duration is not None and len(weeks) != duration:
            _add_violation(
                violations,
                f"{path}.weeks",
                "phase_week_mismatch",
                f"Phase declares {duration} week(s) but contains {len(weeks)}.",
            )
        for w_index, week in enumerate(weeks):
            _validate_week(
                week,
                f"{path}.weeks[{w_index}]",
                violations,
                training_days,
                trial,
                require_anchor_lifts,
            )

    if total is not None and phases and total != phase_total:
        _add_violation(
            violations,
            "program.durationWeeksTotal",
            "duration_mismatch",
            f"durationWeeksTotal is {total} but phases sum to {phase_total}.",
        )

    if trial and (total != 1 or week_count != 1):
        _add_violation(
            violations,
            "program.durationWeeksTotal",
            "trial_length",
            f"Trial programs must span exactly one week (durationWeeksTotal {total}, {week_count} week(s)).",
        )

    return _result(violations, f"{week_count} week(s)")
