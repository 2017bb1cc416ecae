"""
Weight unit helpers. Everything inside the engine is kilograms.
"""

KG_TO_LBS = 2.20462
LBS_TO_KG = 0.453592

LIFT_FIELDS = ("squat_1rm", "bench_1rm", "deadlift_1rm", "overhead_press_1rm")


def to_kg(value, unit="kg"):
    """Convert a weight in `unit` to kilograms. None passes through."""
    if value is None:
        return None
    if (unit or "kg").lower() in ("lb", "lbs", "pounds"):
        return round(float(value) * LBS_TO_KG, 2)
    return float(value)


def from_kg(value, unit="kg"):
    """Convert kilograms to `unit` for display."""
    if value is None:
        return None
    if (unit or "kg").lower() in ("lb", "lbs", "pounds"):
        return round(float(value) * KG_TO_LBS, 1)
    return float(value)


def round_to_increment(value, increment=2.5):
    """Round a load to the nearest plate increment."""
    if not increment:
        return value
    return round(value / increment) * increment
