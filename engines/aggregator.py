"""
Priority Matrix: Feature Aggregator
Collapses per-person evaluations into one record per feature with mean
impact, mean effort and selection rate.
"""
from engines.data_loader import normalize_area
from engines.models import Evaluation


def aggregate_features(store):
    """One AggregatedFeature per distinct feature name, in first-encounter order.

    Accepts an EvaluationStore or any iterable of Evaluation. Anything else
    (None, non-iterable, wrong record types) contributes nothing.
    """
    if store is None:
        return []
    source = getattr(store, 'evaluations', store)
    try:
        evaluations = list(source)
    except TypeError:
        return []

    features = {}
    for ev in evaluations:
        if not isinstance(ev, Evaluation):
            continue
        feat = features.get(ev.feature_name)
        if feat is None:
            feat = features[ev.feature_name] = {
                'name': ev.feature_name,
                'description': ev.description,
                'macro_area': normalize_area(ev.macro_area),
                'evaluations': [],
                'avgImpact': 0,
                'avgEffort': 0,
                'selectionRate': 0,
                'people': [],
            }
        feat['evaluations'].append({
            'person': ev.person, 'impact': ev.impact,
            'effort': ev.effort, 'selected': ev.selected,
        })
        feat['people'].append({'name': ev.person, 'selected': ev.selected})

    for feat in features.values():
        feat['avgImpact'], feat['avgEffort'], feat['selectionRate'] = summarize(feat['evaluations'])
    return list(features.values())


def summarize(evaluations):
    """(avgImpact, avgEffort, selectionRate) over a non-empty evaluation list."""
    n = len(evaluations)
    avg_impact = sum(e['impact'] for e in evaluations) / n
    avg_effort = sum(e['effort'] for e in evaluations) / n
    selection_rate = sum(1 for e in evaluations if e['selected']) / n * 100
    return avg_impact, avg_effort, selection_rate
