"""
Personal-record detection for a newly logged set.
"""

HEAVIEST_WEIGHT = "heaviest-weight"
MOST_REPS = "most-reps"
HEAVIEST_AT_REPS = "heaviest-at-reps"

BRZYCKI_MAX_REPS = 12


def estimate_one_rep_max(weight, reps):
    """Brzycki estimate; reps above 12 are capped since the formula degrades."""
    if not weight or not reps or reps < 1:
        return 0.0
    if reps == 1:
        return round(float(weight), 1)
    reps = min(reps, BRZYCKI_MAX_REPS)
    return round(weight / (1.0278 - 0.0278 * reps), 1)


def _pairs(history):
    pairs = []
    for entry in history or []:
        if isinstance(entry, dict):
            weight, reps = entry.get("weight_kg", entry.get("weight")), entry.get("reps")
        else:
            weight, reps = entry
        if weight is None or reps is None:
            continue
        pairs.append((float(weight), int(reps)))
    return pairs


def detect_personal_record(exercise_name, weight, reps, history):
    """
    Classify a logged set against the lifter's history for the same exercise.

    Args:
        exercise_name: Exercise the set belongs to.
        weight: Weight lifted in kg.
        reps: Reps completed.
        history: Prior sets as (weight, reps) tuples or dicts with weight_kg/reps.

    Returns:
        Dict with is_pb, pb_type (or None), previous_best, estimated_1rm.
    """
    pairs = _pairs(history)
    result = {
        "exercise_name": exercise_name,
        "is_pb": False,
        "pb_type": None,
        "previous_best": None,
        "estimated_1rm": estimate_one_rep_max(weight, reps),
    }
    if not pairs:
        return result

    heaviest = max(pair_weight for pair_weight, _ in pairs)
    most_reps = max(pair_reps for _, pair_reps in pairs)
    at_reps = [pair_weight for pair_weight, pair_reps in pairs if pair_reps == reps]

    if weight > heaviest:
        result.update(is_pb=True, pb_type=HEAVIEST_WEIGHT, previous_best=heaviest)
    elif reps > most_reps:
        result.update(is_pb=True, pb_type=MOST_REPS, previous_best=most_reps)
    elif at_reps and weight > max(at_reps):
        result.update(is_pb=True, pb_type=HEAVIEST_AT_REPS, previous_best=max(at_reps))
    return result
