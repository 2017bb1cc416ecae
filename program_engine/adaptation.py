"""
Feedback-driven adaptation of one upcoming week or one planned day.

Both flows make a single completion call with no tier fallback. The result
is validated and bounds-checked; anything that fails leaves the original
program or workout untouched.
"""

import copy
import json
import logging

from program_engine.completion import parse_json_response
from program_engine.program_validator import validate_week, validate_workout_day

logger = logging.getLogger(__name__)

FEEDBACK_INSTRUCTIONS = {
    "easy": (
        "The client found last week EASY. Increase load on the main lifts by 2.5-5% "
        "OR add one set to a single accessory exercise."
    ),
    "good": (
        "The client found last week GOOD. Apply standard linear progression: +2.5% "
        "load on the primary compound lift of each day. Keep everything else the same."
    ),
    "hard": (
        "The client found last week HARD. Decrease load on the main lifts by 5-10% "
        "OR remove one set from the final accessory exercise of each day. Never add sets."
    ),
}

# feedback -> (min set delta, max set delta) per exercise
FEEDBACK_SET_BOUNDS = {
    "easy": (0, 1),
    "good": (0, 1),
    "hard": (None, 0),
}

REDUCE_INTENSITY = "REDUCE_INTENSITY"
SLIGHT_INCREASE = "SLIGHT_INCREASE"
MAINTAIN_WITH_MINOR_ADJUSTMENTS = "MAINTAIN_WITH_MINOR_ADJUSTMENTS"

SLEEP_OPTIONS = ("Poor", "Average", "Great")
ENERGY_OPTIONS = ("Sore/Tired", "Feeling Good", "Ready to Go")

REDUCE_SIGNALS = {"Poor", "Sore/Tired"}
INCREASE_SIGNALS = {"Great", "Ready to Go"}

STRATEGY_BOUNDS = {
    REDUCE_INTENSITY: {
        "sets": (-2, 0),
        "rpe": (-2, 0),
        "weight_percent": (-20, 0),
        "instruction": (
            "Reduce training stress: remove 1-2 sets from each exercise (never below 1 set), "
            "lower target RPE by 1-2 points, and reduce loads by 10-20%."
        ),
    },
    SLIGHT_INCREASE: {
        "sets": (0, 1),
        "rpe": (0, 1),
        "weight_percent": (0, 5),
        "instruction": (
            "The client is well recovered: add at most 1 set to the main lift, raise target "
            "RPE by up to 1 point, and increase loads by 2-5%."
        ),
    },
    MAINTAIN_WITH_MINOR_ADJUSTMENTS: {
        "sets": (0, 0),
        "rpe": (-0.5, 0.5),
        "weight_percent": (-2.5, 2.5),
        "instruction": (
            "Keep the session as planned. Do not change set counts; RPE may move by at most "
            "0.5 and loads by at most 2.5%."
        ),
    },
}


def select_readiness_strategy(sleep_quality, energy_level):
    """
    Map daily readiness answers to an adjustment strategy.

    Any reduce signal wins; otherwise any increase signal gives a slight
    increase; everything else keeps the plan with minor adjustments.
    """
    signals = {sleep_quality, energy_level}
    if signals & REDUCE_SIGNALS:
        return REDUCE_INTENSITY
    if signals & INCREASE_SIGNALS:
        return SLIGHT_INCREASE
    return MAINTAIN_WITH_MINOR_ADJUSTMENTS


def iter_weeks(program):
    """Yield (phase_index, week_index, week) in program order."""
    for p_index, phase in enumerate((program or {}).get("phases") or []):
        for w_index, week in enumerate(phase.get("weeks") or []):
            yield p_index, w_index, week


def find_next_week(program, current_week):
    """
    Locate the week after `current_week` (1-based position in program order).

    Returns:
        (phase_index, week_index, week) or None when the program has no more weeks.
    """
    target = max(0, int(current_week or 0))
    for position, location in enumerate(iter_weeks(program)):
        if position == target:
            return location
    return None


def _exercise_keys(day):
    """Yield ((name, occurrence), index, exercise); repeated names count up from 0."""
    seen = {}
    for index, exercise in enumerate((day or {}).get("exercises") or []):
        if not isinstance(exercise, dict) or not isinstance(exercise.get("name"), str):
            continue
        name = exercise["name"].strip().lower()
        occurrence = seen.get(name, 0)
        seen[name] = occurrence + 1
        yield (name, occurrence), index, exercise


def _exercise_map(day):
    return {key: exercise for key, _, exercise in _exercise_keys(day)}


def _day_key(day):
    value = day.get("dayOfWeek")
    return value if isinstance(value, (int, float, str, type(None))) else repr(value)


def _day_layout(week):
    layout = {}
    for day in (week or {}).get("days") or []:
        if isinstance(day, dict):
            layout[_day_key(day)] = bool(day.get("isRestDay"))
    return layout


def check_day_layout(original_week, adapted_week, path="week"):
    """Adapted week must keep the same dayOfWeek values and rest days."""
    before, after = _day_layout(original_week), _day_layout(adapted_week)
    if before == after:
        return []
    return [{
        "path": f"{path}.days",
        "code": "day_layout_changed",
        "message": (
            f"Training/rest days changed from {sorted(before.items(), key=str)} "
            f"to {sorted(after.items(), key=str)}."
        ),
    }]


def _number(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def check_exercise_bounds(original_day, adapted_day, set_bounds, rpe_bounds=None, path="day"):
    """
    Compare matching exercises between two versions of a day.

    Exercises match by name and, when a name repeats (top set plus back-off
    sets), by its occurrence within the day.

    Args:
        set_bounds: (min_delta, max_delta); None means unbounded on that side.
        rpe_bounds: Optional (min_delta, max_delta) for numeric RPE values.

    Returns:
        List of violation dicts.
    """
    violations = []
    original = _exercise_map(original_day)
    for key, index, exercise in _exercise_keys(adapted_day):
        before = original.get(key)
        if before is None:
            continue
        name = exercise.get("name")
        checks = [("sets", set_bounds)]
        if rpe_bounds:
            checks.append(("rpe", rpe_bounds))
        for field, bounds in checks:
            old, new = _number(before.get(field)), _number(exercise.get(field))
            if old is None or new is None:
                continue
            low, high = bounds
            delta = new - old
            if (low is not None and delta < low) or (high is not None and delta > high):
                violations.append({
                    "path": f"{path}.exercises[{index}].{field}",
                    "code": f"{field}_out_of_bounds",
                    "message": f"{name}: {field} changed from {old} to {new}, allowed delta {low}..{high}.",
                })
        if _number(exercise.get("sets")) is not None and exercise["sets"] < 1:
            violations.append({
                "path": f"{path}.exercises[{index}].sets",
                "code": "sets_out_of_bounds",
                "message": f"{name}: sets cannot drop below 1.",
            })
    return violations


def _unwrap(data, key):
    if isinstance(data.get(key), dict):
        return data[key]
    return data


def _summarize_history(history, limit=20):
    lines = []
    for entry in (history or [])[-limit:]:
        lines.append(
            f"- {entry.get('exercise_name')}: {entry.get('weight_kg')} kg x {entry.get('reps')}"
            + (f" @ RPE {entry['rpe']}" if entry.get("rpe") is not None else "")
        )
    return "\n".join(lines) or "- No sets logged yet."


class AdaptationEngine:
    """Adapts a single week from weekly feedback or a single day from readiness."""

    def __init__(self, completion_client, config=None):
        self.completion_client = completion_client
        self.config = config or {}
        settings = self.config.get("adaptation", {}) or {}
        self.weekly_temperature = settings.get("weekly_temperature", 0.3)
        self.daily_temperature = settings.get("daily_temperature", 0.2)
        self.weekly_max_tokens = settings.get("weekly_max_tokens", 4000)
        self.daily_max_tokens = settings.get("daily_max_tokens", 2000)

    # -- weekly -----------------------------------------------------------

    def build_weekly_prompt(self, week, feedback, recent_history=None):
        return "\n\n".join([
            "You are an expert strength coach. Adapt the next week of this training program "
            "based on the client's feedback.",
            f"FEEDBACK: {feedback}\nINSTRUCTION: {FEEDBACK_INSTRUCTIONS[feedback]}",
            "RECENT LOGGED SETS:\n" + _summarize_history(recent_history),
            "WEEK TO ADAPT:\n" + json.dumps(week, indent=2),
            "Keep the same days, dayOfWeek values, focus and exercise order. "
            "Return ONLY the adapted week as a JSON object with the same structure.",
        ])

    def adapt_next_week(self, program, feedback, current_week, recent_history=None):
        """
        Adapt the week following `current_week` from easy/good/hard feedback.

        Returns:
            Dict with success, program (new program on success, the input
            program otherwise), week, error and violations.
        """
        feedback = (feedback or "").strip().lower()
        if feedback not in FEEDBACK_INSTRUCTIONS:
            return self._week_failure(program, f"Unknown feedback '{feedback}'.")

        location = find_next_week(program, current_week)
        if location is None:
            return self._week_failure(program, f"No week follows week {current_week}.")
        p_index, w_index, week = location

        prompt = self.build_weekly_prompt(week, feedback, recent_history)
        try:
            raw = self.completion_client.complete(
                prompt,
                temperature=self.weekly_temperature,
                max_tokens=self.weekly_max_tokens,
                json_only=True,
            )
            adapted = _unwrap(parse_json_response(raw), "week")
        except Exception as exc:
            logger.warning("Weekly adaptation failed: %s", exc)
            return self._week_failure(program, f"Failed to generate valid week adaptation: {exc}")

        adapted["weekNumber"] = week.get("weekNumber", adapted.get("weekNumber"))
        training_days = sum(1 for day in week.get("days") or [] if not day.get("isRestDay"))
        validation = validate_week(adapted, training_days=training_days or None)
        violations = list(validation["violations"])
        violations.extend(check_day_layout(week, adapted))

        originals = {_day_key(day): day for day in week.get("days") or [] if isinstance(day, dict)}
        for index, day in enumerate(adapted.get("days") or []):
            if not isinstance(day, dict):
                continue
            original_day = originals.get(_day_key(day))
            if original_day is None or original_day.get("isRestDay"):
                if not day.get("isRestDay"):
                    violations.append({
                        "path": f"week.days[{index}].dayOfWeek",
                        "code": "unmatched_day",
                        "message": f"Day {day.get('dayOfWeek')} has no counterpart in the original week.",
                    })
                continue
            violations.extend(check_exercise_bounds(
                original_day,
                day,
                FEEDBACK_SET_BOUNDS[feedback],
                path=f"week.days[{index}]",
            ))

        if violations:
            logger.warning("Rejected %s-feedback adaptation with %d violation(s)", feedback, len(violations))
            return self._week_failure(program, "Adapted week failed validation.", violations)

        updated = copy.deepcopy(program)
        updated["phases"][p_index]["weeks"][w_index] = adapted
        logger.info("Adapted week %s with %s feedback", adapted["weekNumber"], feedback)
        return {
            "success": True,
            "program": updated,
            "week": adapted,
            "error": None,
            "violations": [],
        }

    @staticmethod
    def _week_failure(program, error, violations=None):
        return {
            "success": False,
            "program": program,
            "week": None,
            "error": error,
            "violations": violations or [],
        }

    # -- daily ------------------------------------------------------------

    def build_daily_prompt(self, workout, sleep_quality, energy_level, strategy):
        bounds = STRATEGY_BOUNDS[strategy]
        return "\n\n".join([
            "You are an expert strength coach. Adapt the following workout to the client's "
            "readiness today.",
            f"Sleep quality: {sleep_quality}\nEnergy/soreness: {energy_level}",
            f"STRATEGY: {strategy}\n{bounds['instruction']}",
            (
                f"Bounds: sets {bounds['sets'][0]:+d} to {bounds['sets'][1]:+d}, "
                f"RPE {bounds['rpe'][0]:+g} to {bounds['rpe'][1]:+g}, "
                f"load {bounds['weight_percent'][0]:+g}% to {bounds['weight_percent'][1]:+g}%."
            ),
            "Keep warmUp and coolDown exactly as they are.",
            "WORKOUT:\n" + json.dumps(workout, indent=2),
            "Return ONLY the adapted workout as a JSON object with the same structure.",
        ])

    def adapt_daily_workout(self, workout, sleep_quality, energy_level):
        """
        Adjust today's workout to readiness.

        Returns:
            Dict with success, workout (adapted or original), strategy, error
            and violations.
        """
        if sleep_quality not in SLEEP_OPTIONS:
            return self._day_failure(workout, None, f"Unknown sleep quality '{sleep_quality}'.")
        if energy_level not in ENERGY_OPTIONS:
            return self._day_failure(workout, None, f"Unknown energy level '{energy_level}'.")

        strategy = select_readiness_strategy(sleep_quality, energy_level)
        bounds = STRATEGY_BOUNDS[strategy]
        prompt = self.build_daily_prompt(workout, sleep_quality, energy_level, strategy)

        try:
            raw = self.completion_client.complete(
                prompt,
                temperature=self.daily_temperature,
                max_tokens=self.daily_max_tokens,
                json_only=True,
            )
            adapted = _unwrap(parse_json_response(raw), "workout")
        except Exception as exc:
            logger.warning("Daily adaptation failed: %s", exc)
            return self._day_failure(workout, strategy, f"Failed to generate valid workout adaptation: {exc}")

        for key in ("warmUp", "coolDown"):
            if key in workout:
                adapted[key] = copy.deepcopy(workout[key])
            else:
                adapted.pop(key, None)

        validation = validate_workout_day(adapted)
        violations = list(validation["violations"])
        violations.extend(check_exercise_bounds(workout, adapted, bounds["sets"], bounds["rpe"]))
        if violations:
            logger.warning("Rejected %s adaptation with %d violation(s)", strategy, len(violations))
            return self._day_failure(
                workout, strategy, "Failed to generate valid workout adaptation.", violations
            )

        logger.info("Adapted daily workout with %s", strategy)
        return {
            "success": True,
            "workout": adapted,
            "strategy": strategy,
            "error": None,
            "violations": [],
        }

    @staticmethod
    def _day_failure(workout, strategy, error, violations=None):
        return {
            "success": False,
            "workout": workout,
            "strategy": strategy,
            "error": error,
            "violations": violations or [],
        }
