"""
Periodization model selection, program length and phase progression.
"""

STRENGTH_BLOCK = "Strength-Focused Block Periodization"
HYPERTROPHY_BLOCK = "Hypertrophy-Focused Block Periodization"
LINEAR_PROGRESSION = "Linear Progression Model"
BALANCED_BLOCK = "Balanced Block Periodization"

DEFAULT_PROGRAM_WEEKS = 6
TRIAL_PROGRAM_WEEKS = 1
TRIAL_SAMPLE_WEEK = 3

PROGRAM_DURATION_BY_GOAL = {
    "General Fitness: Foundational Strength": 4,
    "Muscle Gain: General": 6,
    "Muscle Gain: Hypertrophy": 6,
    "Strength Gain: General": 6,
    "Strength Gain: Powerlifting Peak": 6,
    "Endurance Improvement: Gym Cardio": 5,
    "Sport-Specific S&C: Explosive Power": 6,
    "Weight Loss: Gym Based": 5,
    "Bodyweight Mastery": 6,
    "Recomposition: Lean Mass & Fat Loss": 6,
    "General Fitness": 4,
    "Muscle Gain": 6,
    "Strength Gain": 6,
    "Endurance Improvement": 5,
    "Sport-Specific": 6,
}

ENHANCED_PERIODIZATION_MODELS = {
    "hypertrophyFocused": {
        "name": HYPERTROPHY_BLOCK,
        "phases": [
            {"name": "Accumulation", "weeks": 3, "volume_progression": "ramping", "intensity_range": [65, 75]},
            {"name": "Intensification", "weeks": 2, "volume_progression": "stable", "intensity_range": [75, 85]},
            {"name": "Deload", "weeks": 1, "volume_progression": "stable", "intensity_range": [55, 65]},
        ],
    },
    "strengthFocused": {
        "name": STRENGTH_BLOCK,
        "phases": [
            {"name": "Accumulation", "weeks": 2, "volume_progression": "stable", "intensity_range": [70, 80]},
            {"name": "Realization", "weeks": 3, "volume_progression": "linear", "intensity_range": [85, 95]},
            {"name": "Deload", "weeks": 1, "volume_progression": "stable", "intensity_range": [55, 65]},
        ],
    },
    "generalFitness": {
        "name": LINEAR_PROGRESSION,
        "phases": [
            {"name": "Foundation", "weeks": 4, "volume_progression": "ramping", "intensity_range": [60, 75]},
        ],
    },
}

ADAPTATION_RATES = {
    "strength": 1.025,
    "peaking": 1.03,
    "hypertrophy": 1.01,
}


def select_periodization_model(experience_level, primary_goal):
    """Pick the periodization model name; first matching rule wins."""
    goal = primary_goal or ""
    if "Strength" in goal or "Powerlifting" in goal:
        return STRENGTH_BLOCK
    if "Muscle Gain" in goal or "Hypertrophy" in goal:
        return HYPERTROPHY_BLOCK
    if "General Fitness" in goal or (experience_level or "").lower() == "beginner":
        return LINEAR_PROGRESSION
    return BALANCED_BLOCK


def get_program_duration(primary_goal, has_paid_access=True):
    """Program length in weeks. Trial users always get a single week."""
    if not has_paid_access:
        return TRIAL_PROGRAM_WEEKS
    return PROGRAM_DURATION_BY_GOAL.get(primary_goal or "", DEFAULT_PROGRAM_WEEKS)


def model_template_for(model_name):
    for key, template in ENHANCED_PERIODIZATION_MODELS.items():
        if template["name"] == model_name:
            return key, template
    return None, None


def generate_phase_progression(phase):
    """
    Expand a phase template into per-week volume and intensity targets.

    Args:
        phase: Dict with name, weeks, volume_progression and intensity_range.

    Returns:
        List of dicts with week, volume_multiplier and intensity_percent.
    """
    weeks = int(phase.get("weeks") or 1)
    low, high = phase.get("intensity_range") or [70, 80]
    progression = phase.get("volume_progression") or "stable"
    result = []

    for index in range(1, weeks + 1):
        if progression == "ramping":
            volume = 0.8 + 0.3 * (index / weeks)
        elif progression == "linear":
            volume = 1.0 - 0.1 * ((index - 1) / ((weeks - 1) or 1))
        else:
            volume = 1.0
        fraction = (index - 1) / ((weeks - 1) or 1)
        result.append({
            "week": index,
            "volume_multiplier": round(volume, 3),
            "intensity_percent": round(low + (high - low) * fraction, 1),
        })
    return result


def calculate_optimal_deload(recovery_profile, current_fatigue, previous_phase=None):
    """
    Choose a passive or active deload.

    Passive (full rest) when fatigue runs 20% past threshold or recovery is slow;
    otherwise an active week with trimmed volume and intensity.
    """
    threshold = recovery_profile.get("fatigue_threshold") or 7
    rate = recovery_profile.get("recovery_rate") or 1.0

    if current_fatigue / threshold > 1.2 or rate < 0.8:
        return {
            "type": "passive",
            "duration_days": 3,
            "volume_reduction": 100,
            "intensity_reduction": 100,
        }

    deload = {
        "type": "active",
        "duration_days": 7,
        "volume_reduction": 50,
        "intensity_reduction": 40,
    }
    if previous_phase and "peak" in previous_phase.lower():
        deload["volume_reduction"] = 60
        deload["intensity_reduction"] = 50
    return deload


def project_adaptation(current_max, phase_type, weeks):
    """Projected 1RM after `weeks` of a phase."""
    rate = ADAPTATION_RATES.get((phase_type or "").lower(), 1.0)
    return round(current_max * (rate ** max(0, weeks)), 1)
