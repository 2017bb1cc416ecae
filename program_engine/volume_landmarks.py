"""
Individualized weekly set landmarks (MEV / MAV / MRV) per muscle group.

Landmarks start from a population baseline and are scaled by training age,
recovery capacity, life stress and the user's volume tolerance.
"""

import math

MUSCLE_GROUP_BASE_VOLUMES = {
    "chest": {"MEV": 8, "MAV": 18, "MRV": 26},
    "back": {"MEV": 10, "MAV": 20, "MRV": 30},
    "shoulders": {"MEV": 8, "MAV": 16, "MRV": 24},
    "arms": {"MEV": 6, "MAV": 14, "MRV": 22},
    "quads": {"MEV": 8, "MAV": 16, "MRV": 24},
    "hamstrings": {"MEV": 6, "MAV": 12, "MRV": 18},
    "glutes": {"MEV": 6, "MAV": 12, "MRV": 18},
    "calves": {"MEV": 8, "MAV": 16, "MRV": 25},
    "abs": {"MEV": 0, "MAV": 16, "MRV": 25},
}

# Used for muscle groups missing from the table above.
DEFAULT_BASE_VOLUME = {"MEV": 8, "MAV": 16, "MRV": 24}


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def training_age_multiplier(training_age):
    """Grows linearly from 1.0 at zero years to 1.8 at two years, then plateaus."""
    age = max(0.0, float(training_age or 0))
    return 1.0 + (min(age, 2.0) / 2.0) * 0.8


def recovery_multiplier(recovery_capacity):
    if recovery_capacity <= 3:
        return 0.7
    if recovery_capacity <= 7:
        return 1.0
    return 1.3


def stress_multiplier(stress_level):
    if stress_level <= 2:
        return 1.1
    if stress_level <= 4:
        return 1.0
    if stress_level <= 6:
        return 0.9
    if stress_level <= 8:
        return 0.7
    return 0.6


def volume_multiplier(params):
    """
    Combined landmark multiplier for a set of volume parameters.

    Args:
        params: Dict with training_age, recovery_capacity, stress_level and
            volume_tolerance.

    Returns:
        Float multiplier applied to every baseline landmark.
    """
    return (
        training_age_multiplier(params.get("training_age", 0))
        * recovery_multiplier(params.get("recovery_capacity", 5))
        * stress_multiplier(params.get("stress_level", 5))
        * float(params.get("volume_tolerance", 1.0))
    )


def calculate_muscle_landmarks(params, muscle_group):
    """Return {"MEV", "MAV", "MRV"} for one muscle group."""
    base = MUSCLE_GROUP_BASE_VOLUMES.get((muscle_group or "").lower(), DEFAULT_BASE_VOLUME)
    multiplier = volume_multiplier(params)
    return {
        "MEV": _round_half_up(base["MEV"] * multiplier),
        "MAV": _round_half_up(base["MAV"] * multiplier),
        "MRV": _round_half_up(base["MRV"] * multiplier),
    }


def calculate_all_muscle_landmarks(params):
    """Landmarks for every muscle group in the baseline table."""
    return {
        muscle: calculate_muscle_landmarks(params, muscle)
        for muscle in MUSCLE_GROUP_BASE_VOLUMES
    }


def format_landmarks_for_prompt(landmarks):
    lines = []
    for muscle, values in landmarks.items():
        lines.append(
            f"- {muscle.capitalize()}: MEV {values['MEV']}, MAV {values['MAV']}, "
            f"MRV {values['MRV']} sets/week"
        )
    return "\n".join(lines)
