"""
Priority Matrix: Filter Engine
Restricts the aggregated features to the active people, macro areas and
feature names. Filtering changes the statistical basis: averages and
selection rate are recomputed from the active people's raw evaluations.
"""
from engines.aggregator import aggregate_features, summarize
from engines.data_loader import area_color
from engines.models import FilterState

FILTER_KINDS = {'person': 'people', 'area': 'macro_areas', 'feature': 'features'}


def initial_filters(store):
    """Everything included: all people, all (normalized) areas, all features."""
    features = aggregate_features(store)
    return FilterState(
        people=frozenset(getattr(store, 'people', ()) or ()),
        macro_areas=frozenset(f['macro_area'] for f in features),
        features=frozenset(f['name'] for f in features),
    )


def toggle_filter(filter_state, kind, value, included):
    """Return a new FilterState with `value` added to or removed from one set."""
    attr = FILTER_KINDS.get(kind) if isinstance(kind, str) else None
    if attr is None:
        raise ValueError(f"unknown filter kind '{kind}' (expected one of {sorted(FILTER_KINDS)})")
    if not isinstance(value, str):
        raise ValueError(f"filter value must be a name, got {type(value).__name__}")
    current = getattr(filter_state, attr)
    updated = current | {value} if included else current - {value}
    return FilterState(**{
        'people': filter_state.people,
        'macro_areas': filter_state.macro_areas,
        'features': filter_state.features,
        attr: frozenset(updated),
    })


def apply_filters(features, filter_state):
    """Surviving features, each re-aggregated over active-person evaluations only.

    A feature nobody active has evaluated is dropped rather than shown with
    a 0/0 selection rate.
    """
    result = []
    for feat in features:
        if feat['macro_area'] not in filter_state.macro_areas:
            continue
        if feat['name'] not in filter_state.features:
            continue
        active = [e for e in feat['evaluations'] if e['person'] in filter_state.people]
        if not active:
            continue
        avg_impact, avg_effort, selection_rate = summarize(active)
        result.append({
            **feat,
            'evaluations': active,
            'avgImpact': avg_impact,
            'avgEffort': avg_effort,
            'selectionRate': selection_rate,
        })
    return result


def selection_counts(features, filter_state):
    """Total filtered features vs. those selected by at least one active person."""
    selected = sum(
        1 for f in features
        if any(p['selected'] and p['name'] in filter_state.people for p in f['people'])
    )
    return {'total': len(features), 'selected': selected}


def filter_options(store, features, filter_state):
    """Filter panel contents: people and macro areas with counts and checkbox state.

    `features` is the unfiltered aggregate, so area counts don't collapse as
    boxes get unticked.
    """
    evaluations = getattr(store, 'evaluations', ()) or ()
    per_person = {}
    for ev in evaluations:
        per_person[ev.person] = per_person.get(ev.person, 0) + 1
    people = [
        {'name': p, 'featureCount': per_person.get(p, 0), 'included': p in filter_state.people}
        for p in sorted(getattr(store, 'people', ()) or ())
    ]

    area_counts = {}
    for f in features:
        area_counts[f['macro_area']] = area_counts.get(f['macro_area'], 0) + 1
    areas = [
        {'name': a, 'count': c, 'color': area_color(a), 'included': a in filter_state.macro_areas}
        for a, c in sorted(area_counts.items())
    ]
    return {'people': people, 'macroAreas': areas}
