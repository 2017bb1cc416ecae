"""
Prompt assembly for program generation.

A prompt is a list of named sections. Each complexity tier declares which
sections it uses, so the tiers can be built and tested independently.
"""

import json

from program_engine.autoregulation import build_autoregulation_notes
from program_engine.periodization import (
    TRIAL_SAMPLE_WEEK,
    calculate_optimal_deload,
    generate_phase_progression,
    get_program_duration,
    model_template_for,
)
from program_engine.program_validator import DAY_FOCUSES, EXERCISE_CATEGORIES
from program_engine.volume_landmarks import format_landmarks_for_prompt
from program_engine.weak_points import format_weak_points_for_prompt

TIERS = ("full", "simplified", "basic")

TIER_SECTIONS = {
    "full": [
        "role",
        "guidelines",
        "user_analysis",
        "volume_landmarks",
        "weak_points",
        "periodization",
        "autoregulation",
        "constraints",
        "program_length",
        "schema",
        "output",
    ],
    "simplified": [
        "role",
        "user_bullets",
        "requirements",
        "program_length",
        "schema",
        "output",
    ],
    "basic": [
        "role",
        "basic_request",
        "program_length",
        "schema",
        "output",
    ],
}

GUIDELINE_TITLES = {
    "volume_framework": "VOLUME FRAMEWORK",
    "autoregulation": "AUTOREGULATION",
    "periodization": "PERIODIZATION",
    "weak_point_intervention": "WEAK POINT INTERVENTION",
    "fatigue_management": "FATIGUE MANAGEMENT",
    "exercise_selection": "EXERCISE SELECTION",
    "coaching_cues": "COACHING CUES",
}

MANDATORY_CONSTRAINTS = [
    (
        "VOLUME LANDMARK COMPLIANCE",
        "Weekly sets per muscle group must start at or above MEV, progress toward MAV "
        "and never exceed MRV.",
    ),
    (
        "PERIODIZATION INTEGRATION",
        "Structure phases and weeks according to the selected periodization model, "
        "with volume and intensity changing across phases.",
    ),
    (
        "WEAK POINT PRIORITIZATION",
        "Program the recommended weak-point accessories directly after the anchor lift "
        "on at least two days per week.",
    ),
    (
        "AUTOREGULATION",
        "Give every main exercise an RPE target and note how to adjust it for readiness.",
    ),
    (
        "EXERCISE TIER HIERARCHY",
        "Order each day from anchor lift, to compound variations, to isolation and "
        "corrective work.",
    ),
    (
        "MANDATORY ANCHOR LIFTS",
        "The first exercise of every training day must be a compound anchor lift with "
        "category \"Anchor_Lift\".",
    ),
]

SCHEMA_EXAMPLE = {
    "programName": "string",
    "description": "string",
    "durationWeeksTotal": 6,
    "trainingFrequency": 4,
    "phases": [
        {
            "phaseName": "string",
            "phaseNumber": 1,
            "durationWeeks": 3,
            "notes": "string",
            "weeks": [
                {
                    "weekNumber": 1,
                    "notes": "string",
                    "days": [
                        {
                            "dayOfWeek": 1,
                            "focus": "Lower Body",
                            "isRestDay": False,
                            "estimatedDurationMinutes": 60,
                            "warmUp": [{"name": "string", "sets": 1, "reps": "5 min", "category": "Warm-up"}],
                            "exercises": [
                                {
                                    "name": "Back Squat",
                                    "sets": 4,
                                    "reps": "5",
                                    "rest": "3 min",
                                    "rpe": 8,
                                    "weight": "80 kg",
                                    "category": "Anchor_Lift",
                                    "notes": "string",
                                }
                            ],
                            "coolDown": [{"name": "string", "sets": 1, "reps": "5 min", "category": "Cool-down"}],
                        }
                    ],
                }
            ],
        }
    ],
}


def schema_documentation():
    """Output contract shared by every tier."""
    return "\n".join([
        "OUTPUT SCHEMA:",
        json.dumps(SCHEMA_EXAMPLE, indent=2),
        "Rules:",
        "- durationWeeksTotal must equal the sum of every phase's durationWeeks.",
        "- Each phase must contain exactly durationWeeks entries in weeks.",
        "- dayOfWeek is an integer 1-7 and unique within a week.",
        "- Non-rest days need at least one exercise; rest days use focus \"Rest Day\".",
        "- sets, weekNumber, durationWeeks and durationWeeksTotal are numbers, not strings.",
        f"- focus must be one of: {', '.join(DAY_FOCUSES)}.",
        f"- category must be one of: {', '.join(EXERCISE_CATEGORIES)}.",
        "- All weights are in kilograms.",
    ])


class PromptComposer:
    """Builds generation prompts for a given complexity tier and access level."""

    def __init__(self, guidelines=None):
        """
        Args:
            guidelines: Mapping of guideline key -> text (None entries are skipped).
        """
        self.guidelines = guidelines or {}

    def compose(
        self,
        tier,
        profile,
        volume_landmarks,
        weak_point_analysis,
        periodization_model,
        has_paid_access,
    ):
        if tier not in TIER_SECTIONS:
            raise ValueError(f"Unknown complexity tier: {tier}")

        context = {
            "profile": profile or {},
            "answers": (profile or {}).get("onboarding", {}) or {},
            "landmarks": volume_landmarks or {},
            "weak_points": weak_point_analysis,
            "model": periodization_model,
            "paid": bool(has_paid_access),
        }

        sections = []
        for name in TIER_SECTIONS[tier]:
            text = getattr(self, f"_section_{name}")(context)
            if text:
                sections.append(text)
        return "\n\n".join(sections)

    # -- sections ---------------------------------------------------------

    def _section_role(self, context):
        return (
            "You are an expert strength and conditioning coach. Design a personalized "
            "resistance-training program for the client below."
        )

    def _section_guidelines(self, context):
        blocks = []
        for key, title in GUIDELINE_TITLES.items():
            text = self.guidelines.get(key)
            if text:
                blocks.append(f"### {title}\n{text}")
        if not blocks:
            return ""
        return "SCIENTIFIC FRAMEWORK:\n\n" + "\n\n".join(blocks)

    def _section_user_analysis(self, context):
        profile = context["profile"]
        answers = context["answers"]
        volume = profile.get("volume_parameters", {})
        recovery = profile.get("recovery_profile", {})
        rpe = profile.get("rpe_profile", {})
        injuries = profile.get("injury_analysis", {})
        lines = [
            "USER PROFILE:",
            f"- Name: {profile.get('name') or 'Client'}",
            f"- Experience level: {profile.get('experience_level') or 'Unknown'}",
            f"- Primary goal: {answers.get('primary_goal') or 'General Fitness'}",
            f"- Secondary goal: {answers.get('secondary_goal') or 'None'}",
            f"- Training days per week: {answers.get('training_frequency_days')}",
            f"- Session duration: {answers.get('session_duration') or 'Not specified'}",
            f"- Equipment: {', '.join(answers.get('equipment') or []) or 'Not specified'}",
            f"- Injuries/limitations: {answers.get('injuries_limitations') or 'None'}",
            f"- Exercise preferences: {answers.get('exercise_preferences') or 'None'}",
            f"- Training age: {volume.get('training_age')} years",
            f"- Recovery capacity: {volume.get('recovery_capacity')}/10",
            f"- Stress level: {volume.get('stress_level')}/10",
            f"- Recovery rate: {recovery.get('recovery_rate')}, fatigue threshold: {recovery.get('fatigue_threshold')}/10",
            f"- Session RPE targets: {rpe.get('session_rpe_targets')}",
        ]
        lifts = self._lift_summary(answers)
        if lifts:
            lines.append(f"- Strength (1RM, kg): {lifts}")
        if injuries.get("contraindications"):
            lines.append(f"- Avoid: {', '.join(injuries['contraindications'])}")
        return "\n".join(lines)

    def _section_volume_landmarks(self, context):
        if not context["landmarks"]:
            return ""
        return "VOLUME LANDMARKS (weekly sets):\n" + format_landmarks_for_prompt(context["landmarks"])

    def _section_weak_points(self, context):
        return "WEAK POINT ANALYSIS:\n" + format_weak_points_for_prompt(context["weak_points"])

    def _section_periodization(self, context):
        lines = [f"PERIODIZATION MODEL: {context['model']}"]
        _, template = model_template_for(context["model"])
        if template and context["paid"]:
            lines.append("Phase targets (volume multiplier, % of 1RM):")
            for phase in template["phases"]:
                weeks = ", ".join(
                    f"wk{step['week']} x{step['volume_multiplier']:g} @ {step['intensity_percent']:g}%"
                    for step in generate_phase_progression(phase)
                )
                lines.append(f"- {phase['name']} ({phase['weeks']} wk): {weeks}")
        return "\n".join(lines)

    def _section_autoregulation(self, context):
        notes = build_autoregulation_notes()
        recovery = context["profile"].get("recovery_profile")
        if not recovery:
            return notes
        deload = calculate_optimal_deload(recovery, 0)
        return (
            f"{notes}\nPlanned deload: {deload['type']}, {deload['duration_days']} days, "
            f"volume -{deload['volume_reduction']}%, intensity -{deload['intensity_reduction']}%."
        )

    def _section_constraints(self, context):
        lines = ["MANDATORY CONSTRAINTS:"]
        for index, (title, text) in enumerate(MANDATORY_CONSTRAINTS, start=1):
            lines.append(f"{index}. {title}: {text}")
        return "\n".join(lines)

    def _section_user_bullets(self, context):
        profile = context["profile"]
        answers = context["answers"]
        weak = context["weak_points"] or {}
        lines = [
            "CLIENT:",
            f"- {profile.get('experience_level') or 'Unknown'} lifter, goal: {answers.get('primary_goal') or 'General Fitness'}",
            f"- {answers.get('training_frequency_days')} training days/week, {answers.get('session_duration') or 'flexible'} sessions",
            f"- Equipment: {', '.join(answers.get('equipment') or []) or 'Not specified'}",
            f"- Injuries: {answers.get('injuries_limitations') or 'None'}",
            f"- Periodization: {context['model']}",
        ]
        if weak.get("primary_weak_point"):
            lines.append(f"- Weak point: {weak['primary_weak_point']}")
        landmarks = context["landmarks"]
        if landmarks:
            ranges = ", ".join(
                f"{muscle} {values['MEV']}-{values['MRV']}" for muscle, values in landmarks.items()
            )
            lines.append(f"- Weekly set range per muscle: {ranges}")
        return "\n".join(lines)

    def _section_requirements(self, context):
        return "\n".join([
            "REQUIREMENTS:",
            "- Respect the weekly set ranges above.",
            "- Start each training day with a compound anchor lift.",
            "- Use RPE 6-8 for most working sets.",
            "- Include accessories for the weak point.",
        ])

    def _section_basic_request(self, context):
        profile = context["profile"]
        answers = context["answers"]
        return "\n".join([
            f"Client: {profile.get('name') or 'Client'}",
            f"Goal: {answers.get('primary_goal') or 'General Fitness'}",
            f"Equipment: {', '.join(answers.get('equipment') or []) or 'Not specified'}",
            f"Training days per week: {answers.get('training_frequency_days')}",
            "Start every training day with a compound movement.",
        ])

    def _section_program_length(self, context):
        answers = context["answers"]
        if not context["paid"]:
            total = get_program_duration(answers.get("primary_goal"), True)
            return (
                "FREE TRIAL USER - EXAMPLE WEEK ONLY:\n"
                f"Generate exactly one sample week as a preview of a {total}-week program. "
                f"Write it as week {TRIAL_SAMPLE_WEEK} of the full program (weekNumber {TRIAL_SAMPLE_WEEK}), "
                "inside a single phase with durationWeeks 1, and set durationWeeksTotal to 1. "
                "Mention in the description that this is a preview of the full program."
            )
        weeks = get_program_duration(answers.get("primary_goal"), True)
        days = answers.get("training_frequency_days")
        return (
            f"PROGRAM LENGTH: {weeks} weeks total (durationWeeksTotal = {weeks}), "
            f"{days} training days per week; remaining days are rest days."
        )

    def _section_schema(self, context):
        return schema_documentation()

    def _section_output(self, context):
        return "Return ONLY the JSON object. No markdown, no commentary."

    @staticmethod
    def _lift_summary(answers):
        parts = []
        for label, key in (
            ("squat", "squat_1rm"),
            ("bench", "bench_1rm"),
            ("deadlift", "deadlift_1rm"),
            ("overhead press", "overhead_press_1rm"),
        ):
            if answers.get(key):
                parts.append(f"{label} {answers[key]:g}")
        if not parts:
            return ""
        assessment = answers.get("strength_assessment_type") or "unsure"
        return f"{', '.join(parts)} ({assessment})"
