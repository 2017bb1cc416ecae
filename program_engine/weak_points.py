"""
Weak-point diagnosis from 1RM ratios, experience, goal and injury notes.

Two analyzers share one result shape:
- analyze_weak_points: priority-ranked ratio rules (used by generation).
- analyze_strength_standards: ratio standards with severity grading.
"""

import logging

logger = logging.getLogger(__name__)

POSTERIOR_CHAIN_RATIO = 1.10
PRESSING_RATIO = 0.50
OVERHEAD_RATIO = 0.50
CORE_SQUAT_THRESHOLD_KG = 150

DEFAULT_RESULT = {
    "primary_weak_point": "General Muscle Balance",
    "secondary_weak_point": None,
    "weak_point_description": (
        "Not enough strength data to compare lifts. Programming focuses on "
        "balanced development across all movement patterns."
    ),
    "recommended_accessories": [
        "Face Pulls",
        "Single-Leg Romanian Deadlifts",
        "Dead Bugs",
        "Dumbbell Rows",
    ],
    "rationale": "At least two lift estimates are required for ratio analysis.",
    "priority": None,
}

STRENGTH_RATIO_STANDARDS = {
    "bench_to_deadlift": {"minimum": 0.6, "weak_point": "WEAK_HORIZONTAL_PRESS"},
    "squat_to_deadlift": {"minimum": 0.75, "weak_point": "WEAK_POSTERIOR_CHAIN"},
    "overhead_to_bench": {"minimum": 0.6, "weak_point": "WEAK_VERTICAL_PRESS"},
}

WEAK_POINT_PROTOCOLS = {
    "WEAK_POSTERIOR_CHAIN": {
        "label": "Posterior Chain Weakness",
        "exercises": ["Romanian Deadlifts", "Good Mornings", "Glute-Ham Raises", "Hip Thrusts"],
    },
    "WEAK_HORIZONTAL_PRESS": {
        "label": "Upper Body Pressing Weakness",
        "exercises": [
            "Dumbbell Bench Press",
            "Incline Barbell Press",
            "Weighted Dips",
            "Push-ups (Weighted or Variations)",
        ],
    },
    "WEAK_VERTICAL_PRESS": {
        "label": "Overhead Pressing Weakness",
        "exercises": [
            "Seated Dumbbell Press",
            "Arnold Press",
            "Lateral Raises",
            "Close-Grip Bench Press",
        ],
    },
}

REASSESSMENT_WEEKS = {"High": 8, "Moderate": 12}


def _lift(lifts, key):
    value = (lifts or {}).get(key)
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _candidate(label, priority, description, accessories, rationale, override=False):
    return {
        "label": label,
        "priority": priority,
        "description": description,
        "accessories": accessories,
        "rationale": rationale,
        "override": override,
    }


def _ratio_candidates(squat, bench, deadlift, overhead, experience_level, primary_goal, injuries):
    candidates = []
    injury_text = (injuries or "").lower()
    goal = (primary_goal or "").lower()

    if deadlift and squat and deadlift / squat < POSTERIOR_CHAIN_RATIO:
        candidates.append(_candidate(
            "Posterior Chain Weakness",
            1,
            "Deadlift is low relative to squat, pointing to weak hamstrings, glutes and spinal erectors.",
            ["Romanian Deadlifts", "Good Mornings", "Glute-Ham Raises", "Hip Thrusts"],
            f"Deadlift:squat ratio {deadlift / squat:.2f} is below {POSTERIOR_CHAIN_RATIO:.2f}.",
        ))

    if bench and squat and bench / squat < PRESSING_RATIO:
        candidates.append(_candidate(
            "Upper Body Pressing Weakness",
            2,
            "Bench press lags behind lower-body strength.",
            ["Dumbbell Bench Press", "Incline Barbell Press", "Weighted Dips", "Close-Grip Bench Press"],
            f"Bench:squat ratio {bench / squat:.2f} is below {PRESSING_RATIO:.2f}.",
        ))

    if overhead and bench and overhead / bench < OVERHEAD_RATIO:
        candidates.append(_candidate(
            "Overhead Pressing Weakness",
            3,
            "Overhead press lags behind horizontal pressing.",
            ["Seated Dumbbell Press", "Arnold Press", "Lateral Raises", "Z-Press"],
            f"Overhead:bench ratio {overhead / bench:.2f} is below {OVERHEAD_RATIO:.2f}.",
        ))

    if bench and "shoulder" not in injury_text:
        candidates.append(_candidate(
            "Push/Pull Imbalance",
            4,
            "Pressing-dominant programs tend to under-train the upper back.",
            ["Face Pulls", "Chest-Supported Rows", "Band Pull-Aparts", "Rear Delt Flyes"],
            "Proactive pulling volume to balance bench pressing.",
        ))

    if (experience_level or "").lower() == "advanced" and squat and squat > CORE_SQUAT_THRESHOLD_KG:
        candidates.append(_candidate(
            "Core Stability",
            5,
            "Heavy squatting demands more trunk stiffness.",
            ["Pallof Press", "Ab Wheel Rollouts", "Suitcase Carries", "Dead Bugs"],
            f"Advanced lifter squatting above {CORE_SQUAT_THRESHOLD_KG} kg.",
        ))

    if "hypertrophy" in goal or "muscle gain" in goal:
        candidates.append(_candidate(
            "Muscle Specialization",
            6,
            "Hypertrophy goal benefits from targeted isolation volume.",
            ["Lateral Raises", "Incline Dumbbell Curls", "Overhead Triceps Extensions", "Leg Extensions"],
            "Goal emphasizes muscle gain.",
        ))

    if "knee" in injury_text:
        candidates.append(_candidate(
            "Knee & Hip Stability",
            2,
            "Reported knee issues call for hip and knee control work.",
            ["Terminal Knee Extensions", "Spanish Squats", "Lateral Band Walks", "Step-Ups"],
            "Injury notes mention the knee.",
        ))

    if "back" in injury_text or "spine" in injury_text:
        candidates.append(_candidate(
            "Spinal Stability",
            1,
            "Reported back issues make trunk stability the first priority.",
            ["Bird Dogs", "McGill Curl-Ups", "Side Planks", "Pallof Press"],
            "Injury notes mention the back or spine.",
            override=True,
        ))

    if "shoulder" in injury_text:
        candidates.append(_candidate(
            "Shoulder Stability",
            2,
            "Reported shoulder issues call for rotator cuff and scapular work.",
            ["External Rotations", "Face Pulls", "Scapular Push-Ups", "Y-T-W Raises"],
            "Injury notes mention the shoulder.",
        ))

    return candidates


def _rank(candidates):
    # Lowest priority first; an override wins ties, then rule order.
    indexed = list(enumerate(candidates))
    indexed.sort(key=lambda item: (item[1]["priority"], not item[1]["override"], item[0]))
    return [candidate for _, candidate in indexed]


def _build_result(primary, secondary, analysis_type):
    return {
        "primary_weak_point": primary["label"],
        "secondary_weak_point": secondary["label"] if secondary else None,
        "weak_point_description": primary["description"],
        "recommended_accessories": list(primary["accessories"]),
        "rationale": primary["rationale"],
        "priority": primary["priority"],
        "analysis_type": analysis_type,
    }


def default_weak_point_result(analysis_type="ratio"):
    result = dict(DEFAULT_RESULT)
    result["recommended_accessories"] = list(DEFAULT_RESULT["recommended_accessories"])
    result["analysis_type"] = analysis_type
    return result


def analyze_weak_points(lifts, experience_level=None, primary_goal=None, injuries=None):
    """
    Pick the single most urgent weak point.

    Args:
        lifts: Dict with squat, bench, deadlift and overhead_press 1RMs in kg.
        experience_level: Beginner / Intermediate / Advanced.
        primary_goal: Goal string from onboarding.
        injuries: Free-text injury notes.

    Returns:
        Weak-point result dict. Fewer than two positive lifts returns the
        General Muscle Balance default.
    """
    squat = _lift(lifts, "squat")
    bench = _lift(lifts, "bench")
    deadlift = _lift(lifts, "deadlift")
    overhead = _lift(lifts, "overhead_press")

    available = [value for value in (squat, bench, deadlift, overhead) if value]
    if len(available) < 2:
        logger.info("Only %d lift estimate(s); using default weak point.", len(available))
        return default_weak_point_result("ratio")

    ranked = _rank(_ratio_candidates(
        squat, bench, deadlift, overhead, experience_level, primary_goal, injuries
    ))
    if not ranked:
        return default_weak_point_result("ratio")

    secondary = ranked[1] if len(ranked) > 1 else None
    return _build_result(ranked[0], secondary, "ratio")


def analyze_strength_standards(lifts):
    """
    Compare lift ratios against strength standards.

    Severity is High when a ratio falls below 90% of its minimum, Moderate
    otherwise. The worst deficit becomes the primary weak point.
    """
    squat = _lift(lifts, "squat")
    bench = _lift(lifts, "bench")
    deadlift = _lift(lifts, "deadlift")
    overhead = _lift(lifts, "overhead_press")

    available = [value for value in (squat, bench, deadlift, overhead) if value]
    if len(available) < 2:
        return default_weak_point_result("standards")

    ratios = {
        "bench_to_deadlift": bench / deadlift if bench and deadlift else None,
        "squat_to_deadlift": squat / deadlift if squat and deadlift else None,
        "overhead_to_bench": overhead / bench if overhead and bench else None,
    }

    findings = []
    for name, ratio in ratios.items():
        standard = STRENGTH_RATIO_STANDARDS[name]
        if ratio is None or ratio >= standard["minimum"]:
            continue
        severity = "High" if ratio < standard["minimum"] * 0.9 else "Moderate"
        protocol = WEAK_POINT_PROTOCOLS[standard["weak_point"]]
        findings.append({
            "label": protocol["label"],
            "priority": 1 if severity == "High" else 2,
            "description": (
                f"{name.replace('_', ' ')} ratio {ratio:.2f} is below the "
                f"{standard['minimum']:.2f} standard ({severity} severity)."
            ),
            "accessories": protocol["exercises"],
            "rationale": (
                f"Reassess in {REASSESSMENT_WEEKS.get(severity, 16)} weeks."
            ),
            "override": False,
            "deficit": standard["minimum"] - ratio,
        })

    if not findings:
        return {
            "primary_weak_point": "Balanced Strength Profile",
            "secondary_weak_point": None,
            "weak_point_description": "All measured ratios meet their standards.",
            "recommended_accessories": [],
            "rationale": f"Reassess in {REASSESSMENT_WEEKS.get(None, 16)} weeks.",
            "priority": None,
            "analysis_type": "standards",
        }

    findings.sort(key=lambda finding: (finding["priority"], -finding["deficit"]))
    secondary = findings[1] if len(findings) > 1 else None
    return _build_result(findings[0], secondary, "standards")


def format_weak_points_for_prompt(result):
    if not result:
        return "No weak-point analysis available."
    lines = [
        f"Primary weak point: {result['primary_weak_point']}",
        f"Description: {result['weak_point_description']}",
        f"Recommended accessories: {', '.join(result['recommended_accessories']) or 'none'}",
        f"Rationale: {result['rationale']}",
    ]
    if result.get("secondary_weak_point"):
        lines.insert(1, f"Secondary weak point: {result['secondary_weak_point']}")
    return "\n".join(lines)
