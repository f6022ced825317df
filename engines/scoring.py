"""
Priority Matrix: Scoring & Classification Engine
Weighted composite score (impact and preference as bonus, effort as
penalty) and Impact/Effort quadrant from fixed midpoint thresholds.
"""
from engines.data_loader import clamp

QUADRANT_THRESHOLD = 3
QUADRANTS = ('quick-wins', 'major-projects', 'fill-ins', 'thankless-tasks')
QUADRANT_TITLES = {
    'quick-wins': 'Quick Wins - High Impact, Low Effort',
    'major-projects': 'Major Projects - High Impact, High Effort',
    'fill-ins': 'Fill-ins - Low Impact, Low Effort',
    'thankless-tasks': 'Thankless Tasks - Low Impact, High Effort',
}

SORT_KEYS = {
    'score': lambda f: f['score'],
    'impact': lambda f: f['avgImpact'],
    'effort': lambda f: f['avgEffort'],
    'name': lambda f: f['name'].lower(),
}


def calculate_score(feature, weights):
    """Composite score in [0, 100].

    Each term is a 0-1 metric times its weight as a fraction of 100; the sum
    is shifted by +1 and scaled by 50, then clamped. Weights need not add up
    to 100.
    """
    impact_term = (feature['avgImpact'] / 5) * (weights.impact / 100)
    effort_penalty = (feature['avgEffort'] / 5) * (weights.effort / 100)
    preference_bonus = (feature['selectionRate'] / 100) * (weights.preference / 100)
    raw = (impact_term + preference_bonus - effort_penalty + 1) * 50
    return clamp(raw, 0, 100)


def classify_quadrant(avg_impact, avg_effort):
    # strict: a value of exactly 3 is neither high impact nor low effort
    high_impact = avg_impact > QUADRANT_THRESHOLD
    low_effort = avg_effort < QUADRANT_THRESHOLD
    if high_impact and low_effort:
        return 'quick-wins'
    if high_impact:
        return 'major-projects'
    if low_effort:
        return 'fill-ins'
    return 'thankless-tasks'


def score_features(features, weights, with_quadrant=True):
    scored = []
    for f in features:
        rec = {**f, 'score': calculate_score(f, weights)}
        if with_quadrant:
            rec['quadrant'] = classify_quadrant(f['avgImpact'], f['avgEffort'])
        scored.append(rec)
    return scored


def sort_features(features, field='score', direction='desc'):
    """Stable sort; equal keys keep input order in both directions."""
    key = SORT_KEYS.get(field, SORT_KEYS['score'])
    return sorted(features, key=key, reverse=(direction != 'asc'))


def quadrant_features(features, quadrant):
    """Features of one quadrant, best score first."""
    if quadrant not in QUADRANT_TITLES:
        raise ValueError(f"unknown quadrant '{quadrant}'")
    members = [f for f in features if f.get('quadrant') == quadrant]
    return sort_features(members, 'score', 'desc')


def quadrant_summary(features):
    summary = {q: 0 for q in QUADRANTS}
    for f in features:
        if f.get('quadrant') in summary:
            summary[f['quadrant']] += 1
    return summary
