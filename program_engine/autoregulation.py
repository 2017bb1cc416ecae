"""
Autoregulation helpers: RPE guidance text, fatigue tracking and load adjustment.
"""

from program_engine.units import round_to_increment

FATIGUE_DECAY_RATE = 0.3

PHASE_RPE_TARGETS = {
    "Accumulation": "6-8",
    "Intensification": "7-9",
    "Realization": "8-10",
    "Deload": "4-6",
}


def build_autoregulation_notes(phase_name=None):
    """Readiness-based adjustment guidance embedded in prompts and notes."""
    lines = ["Autoregulation guidance:"]
    if phase_name and phase_name in PHASE_RPE_TARGETS:
        lines.append(f"- {phase_name} phase target RPE: {PHASE_RPE_TARGETS[phase_name]}")
    else:
        for name, target in PHASE_RPE_TARGETS.items():
            lines.append(f"- {name} phase target RPE: {target}")
    lines.extend([
        "- High readiness: add 2-5% load or 1-2 sets to the main lift.",
        "- Normal readiness: train as prescribed.",
        "- Low readiness: reduce intensity 10-20% or volume 20-30%.",
    ])
    return "\n".join(lines)


def track_cumulative_fatigue(previous_fatigue, session_fatigue, recovery_rate=1.0):
    """Exponentially decayed fatigue carried into the next session."""
    rate = recovery_rate or 1.0
    decayed = previous_fatigue * (1 - FATIGUE_DECAY_RATE / rate)
    return round(max(0.0, decayed) + session_fatigue, 2)


def analyze_rpe_trend(rpe_values):
    """Return 'increasing', 'decreasing' or 'stable' (fewer than 3 values is stable)."""
    values = [float(value) for value in (rpe_values or []) if value is not None]
    if len(values) < 3:
        return "stable"
    delta = values[-1] - values[0]
    if delta > 1:
        return "increasing"
    if delta < -1:
        return "decreasing"
    return "stable"


def calculate_adaptive_load(base_load, week_number, recovery_rate=1.0, last_rpe=None):
    """
    Adjust a planned load for accumulated fatigue and the last session's RPE.

    Args:
        base_load: Planned load in kg.
        week_number: 1-based week within the block.
        recovery_rate: Recovery profile rate (higher recovers faster).
        last_rpe: RPE reported for the previous exposure, if any.

    Returns:
        Load in kg rounded to 2.5 kg.
    """
    rate = recovery_rate or 1.0
    load = base_load * (1 - (max(1, week_number) - 1) * 0.05 / rate)
    if last_rpe is not None:
        if last_rpe > 8.5:
            load *= 0.95
        elif last_rpe < 7.5:
            load *= 1.03
    return round_to_increment(load, 2.5)


def determine_deload_need(cumulative_fatigue, fatigue_threshold, rpe_values=None):
    if cumulative_fatigue > fatigue_threshold:
        return {
            "needs_deload": True,
            "type": "volume",
            "duration_days": 7,
            "reduction_percent": 50,
            "reason": "Cumulative fatigue above threshold.",
        }
    if analyze_rpe_trend(rpe_values) == "increasing":
        return {
            "needs_deload": True,
            "type": "intensity",
            "duration_days": 7,
            "reduction_percent": 20,
            "reason": "RPE rising at constant loads.",
        }
    return {
        "needs_deload": False,
        "type": None,
        "duration_days": 0,
        "reduction_percent": 0,
        "reason": "Fatigue within tolerance.",
    }
