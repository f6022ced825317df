"""
Priority Matrix: Scaling Transform
Optional min-max stretch of impact and/or effort onto [1, 5] across the
currently filtered features, for visual spread on the matrix.
"""

SCALE_LO, SCALE_HI = 1, 5

ORIGINAL_FIELDS = {'avgImpact': 'originalAvgImpact', 'avgEffort': 'originalAvgEffort'}


def scale_metric(features, metric, enabled=True):
    """Remap `metric` linearly from [min, max] of the set onto [1, 5].

    Returns new records; the input list is never modified, so the unscaled
    aggregate is always there for the next recompute. Uniform values (min ==
    max) are left as they are, without an original field.
    """
    if not enabled or not features:
        return features
    original_key = ORIGINAL_FIELDS[metric]
    values = [f[metric] for f in features]
    lo, hi = min(values), max(values)
    if lo == hi:
        return features

    span = SCALE_HI - SCALE_LO
    return [
        {**f,
         metric: SCALE_LO + (f[metric] - lo) / (hi - lo) * span,
         original_key: f[metric]}
        for f in features
    ]


def scale_impact(features, enabled):
    return scale_metric(features, 'avgImpact', enabled)


def scale_effort(features, enabled):
    return scale_metric(features, 'avgEffort', enabled)


def apply_scaling(features, scaling_state):
    scaled = scale_impact(features, scaling_state.impact)
    return scale_effort(scaled, scaling_state.effort)
