"""
Turns raw onboarding answers into an enhanced, physiologically enriched profile.

Nothing here is persisted: the enhanced profile is rebuilt on every
generation or adaptation call from the submitted answers.
"""

import logging
import re

from program_engine.periodization import select_periodization_model
from program_engine.units import LIFT_FIELDS, to_kg
from program_engine.volume_landmarks import calculate_all_muscle_landmarks
from program_engine.weak_points import analyze_weak_points

logger = logging.getLogger(__name__)

EXPERIENCE_TRAINING_AGE = {
    "beginner": 0.25,
    "intermediate": 1.25,
    "advanced": 3.0,
}

RPE_TARGETS = {
    "hypertrophy": [7, 9],
    "strength": [8, 10],
}

AUTOREGULATION_RULES = {
    "ready_to_go": 1,
    "feeling_good": 0,
    "sore_tired": -1,
}

# recovery capacity band -> (recovery_rate, fatigue_threshold)
RECOVERY_PROFILE_BANDS = {
    "low": (0.8, 5),
    "moderate": (1.0, 7),
    "high": (1.2, 8),
}

INJURY_PATTERNS = [
    (
        re.compile(r"knee|patella", re.IGNORECASE),
        "Knees",
        ["High-impact plyometrics", "Deep squats if painful"],
    ),
    (
        re.compile(r"back|spine|disc", re.IGNORECASE),
        "Lower Back",
        ["Heavy deadlifts from floor", "Barbell back squats"],
    ),
    (
        re.compile(r"shoulder|rotator cuff", re.IGNORECASE),
        "Shoulders",
        ["Overhead pressing", "Behind-the-neck movements"],
    ),
]

VALID_ASSESSMENT_TYPES = ("actual_1rm", "estimated_1rm", "unsure")


def normalize_onboarding_responses(responses):
    """
    Return a copy of the onboarding answers with lift values in kilograms.

    Args:
        responses: Dict of onboarding answers. `weight_unit` describes the unit
            the lifts were entered in.

    Returns:
        New dict with `weight_unit` set to "kg" and the entered unit kept as
        `display_unit`, so normalizing twice changes nothing. The input is
        left untouched.
    """
    normalized = dict(responses or {})
    unit = normalized.get("weight_unit") or "kg"
    normalized.setdefault("display_unit", unit)
    normalized["weight_unit"] = "kg"

    for field in LIFT_FIELDS:
        value = normalized.get(field)
        if value in (None, ""):
            normalized[field] = None
            continue
        try:
            normalized[field] = to_kg(float(value), unit)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s value: %r", field, value)
            normalized[field] = None

    frequency = normalized.get("training_frequency_days")
    try:
        frequency = int(frequency)
    except (TypeError, ValueError):
        frequency = 3
    normalized["training_frequency_days"] = min(7, max(1, frequency))

    if normalized.get("strength_assessment_type") not in VALID_ASSESSMENT_TYPES:
        normalized["strength_assessment_type"] = "unsure"

    normalized["equipment"] = list(normalized.get("equipment") or [])
    normalized["injuries_limitations"] = normalized.get("injuries_limitations") or ""
    return normalized


def infer_training_age(experience_level):
    return EXPERIENCE_TRAINING_AGE.get((experience_level or "").strip().lower(), 0.25)


def infer_recovery_capacity(onboarding):
    """Score recovery capacity 3/6/9 from weekly frequency and session length."""
    score = 0
    frequency = onboarding.get("training_frequency_days") or 3
    if frequency >= 6:
        score += 3
    elif frequency >= 4:
        score += 2
    else:
        score += 1

    duration = onboarding.get("session_duration") or ""
    if duration in ("60-75 minutes", "75+ minutes"):
        score += 3
    elif duration == "45-60 minutes":
        score += 2
    else:
        score += 1

    if score >= 5:
        return 9
    if score >= 3:
        return 6
    return 3


def infer_stress_level(onboarding):
    frequency = onboarding.get("training_frequency_days") or 3
    if frequency >= 6:
        return 3
    if frequency >= 4:
        return 6
    return 8


def infer_volume_parameters(experience_level, onboarding):
    return {
        "training_age": infer_training_age(experience_level),
        "recovery_capacity": infer_recovery_capacity(onboarding),
        "stress_level": infer_stress_level(onboarding),
        "volume_tolerance": 1.0,
    }


def parse_injury_limitations(text):
    """Map free-text injuries to affected areas and movements to avoid."""
    areas = []
    contraindications = []
    for pattern, area, avoid in INJURY_PATTERNS:
        if text and pattern.search(text):
            areas.append(area)
            contraindications.extend(avoid)
    return {
        "identified_areas": areas,
        "contraindications": contraindications,
    }


def infer_rpe_profile(primary_goal):
    goal = (primary_goal or "").lower()
    targets = RPE_TARGETS["strength"] if "strength" in goal else RPE_TARGETS["hypertrophy"]
    return {
        "session_rpe_targets": list(targets),
        "autoregulation_rules": dict(AUTOREGULATION_RULES),
    }


def infer_recovery_profile(recovery_capacity):
    if recovery_capacity <= 3:
        band = "low"
    elif recovery_capacity <= 7:
        band = "moderate"
    else:
        band = "high"
    rate, threshold = RECOVERY_PROFILE_BANDS[band]
    return {
        "recovery_rate": rate,
        "fatigue_threshold": threshold,
        "sleep_quality": 7,
        "recovery_modalities": [],
    }


def enhance_user_profile(user, onboarding):
    """
    Build the enhanced profile for one user.

    Args:
        user: Dict with at least `name` and `experience_level`.
        onboarding: Onboarding answers (raw or already normalized).

    Returns:
        Dict combining user fields, normalized onboarding answers and the
        derived volume, RPE, recovery and injury sections.
    """
    user = user or {}
    answers = normalize_onboarding_responses(onboarding)
    volume_parameters = infer_volume_parameters(user.get("experience_level"), answers)

    profile = dict(user)
    profile["onboarding"] = answers
    profile["volume_parameters"] = volume_parameters
    profile["rpe_profile"] = infer_rpe_profile(answers.get("primary_goal"))
    profile["recovery_profile"] = infer_recovery_profile(volume_parameters["recovery_capacity"])
    profile["injury_analysis"] = parse_injury_limitations(answers["injuries_limitations"])
    return profile


def process_user_data(user, onboarding):
    """
    Run the scientific pre-analysis for a generation request.

    Returns:
        Dict with enhanced_profile, volume_landmarks, weak_point_analysis and
        periodization_model.
    """
    profile = enhance_user_profile(user, onboarding)
    answers = profile["onboarding"]
    landmarks = calculate_all_muscle_landmarks(profile["volume_parameters"])
    weak_points = analyze_weak_points(
        {
            "squat": answers.get("squat_1rm"),
            "bench": answers.get("bench_1rm"),
            "deadlift": answers.get("deadlift_1rm"),
            "overhead_press": answers.get("overhead_press_1rm"),
        },
        experience_level=profile.get("experience_level"),
        primary_goal=answers.get("primary_goal"),
        injuries=answers.get("injuries_limitations"),
    )
    model = select_periodization_model(profile.get("experience_level"), answers.get("primary_goal"))

    logger.info(
        "Processed profile: model=%s weak_point=%s",
        model,
        weak_points["primary_weak_point"],
    )
    return {
        "enhanced_profile": profile,
        "volume_landmarks": landmarks,
        "weak_point_analysis": weak_points,
        "periodization_model": model,
    }
