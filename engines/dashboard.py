"""
Priority Matrix: Dashboard Pipeline
State transitions for every UI event and the single recompute path

    raw store -> aggregate -> filter -> scale -> score/classify

Nothing is cached between events: each view is re-derived from the raw
evaluations of the store.
"""
import logging

from engines.aggregator import aggregate_features
from engines.data_loader import MACRO_AREA_COLORS, FALLBACK_COLOR, area_color
from engines.filters import apply_filters, filter_options, initial_filters, selection_counts, toggle_filter
from engines.models import (DEFAULT_WEIGHTS, SORT_DIRECTIONS, SORT_FIELDS, VIEWS,
                            DashboardState, ScalingState, WeightState, coerce_weight)
from engines.scaling import apply_scaling
from engines.scoring import (QUADRANT_TITLES, quadrant_features, quadrant_summary,
                             score_features, sort_features)


def initial_state(store, params=None):
    """Fresh state for a newly loaded store: everything included, default weights."""
    params = params or {}
    weights = WeightState.from_dict({k: params.get(f'{k}Weight', DEFAULT_WEIGHTS[k]) for k in DEFAULT_WEIGHTS})
    return DashboardState(filters=initial_filters(store), weights=weights)


# ══════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════

def _set_weight(state, event):
    name = event.get('weight')
    if not isinstance(name, str) or name not in DEFAULT_WEIGHTS:
        raise ValueError(f"unknown weight '{name}'")
    value = coerce_weight(event.get('value'))
    if value is None:
        logging.warning(f"Ignoring invalid {name} weight {event.get('value')!r}, keeping {getattr(state.weights, name)}")
        return state
    weights = WeightState(**{**{k: getattr(state.weights, k) for k in DEFAULT_WEIGHTS}, name: value})
    return state.evolve(weights=weights)


def _toggle_filter(state, event):
    if 'value' not in event:
        raise ValueError('toggle_filter needs a value')
    included = bool(event.get('included', True))
    return state.evolve(filters=toggle_filter(state.filters, event.get('kind'), event['value'], included))


def _toggle_impact_scaling(state, event):
    return state.evolve(scaling=ScalingState(impact=not state.scaling.impact, effort=state.scaling.effort))


def _toggle_effort_scaling(state, event):
    return state.evolve(scaling=ScalingState(impact=state.scaling.impact, effort=not state.scaling.effort))


def _switch_view(state, event):
    view = event.get('view')
    if view not in VIEWS:
        raise ValueError(f"unknown view '{view}'")
    # The quadrant panel only lives under the matrix.
    selected = state.selected_quadrant if view == 'matrix' else None
    return state.evolve(view=view, selected_quadrant=selected)


def _sort_table(state, event):
    sort_field = event.get('field', state.sort_field)
    direction = event.get('direction', state.sort_direction)
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"unknown sort field '{sort_field}'")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"unknown sort direction '{direction}'")
    return state.evolve(sort_field=sort_field, sort_direction=direction)


def _select_quadrant(state, event):
    quadrant = event.get('quadrant')
    if not isinstance(quadrant, str) or quadrant not in QUADRANT_TITLES:
        raise ValueError(f"unknown quadrant '{quadrant}'")
    if state.selected_quadrant == quadrant:
        return state.evolve(selected_quadrant=None)
    return state.evolve(selected_quadrant=quadrant)


def _deselect_quadrant(state, event):
    return state.evolve(selected_quadrant=None)


EVENT_HANDLERS = {
    'set_weight': _set_weight,
    'toggle_filter': _toggle_filter,
    'toggle_impact_scaling': _toggle_impact_scaling,
    'toggle_effort_scaling': _toggle_effort_scaling,
    'switch_view': _switch_view,
    'sort_table': _sort_table,
    'select_quadrant': _select_quadrant,
    'deselect_quadrant': _deselect_quadrant,
}


def apply_event(state, event):
    """(state, event) -> state'. Raises ValueError for events it can't apply."""
    if not isinstance(event, dict):
        raise ValueError('event must be an object')
    event_type = event.get('type')
    handler = EVENT_HANDLERS.get(event_type) if isinstance(event_type, str) else None
    if handler is None:
        raise ValueError(f"unknown event type '{event_type}'")
    return handler(state, event)


# ══════════════════════════════════════════════════════════════
#  RECOMPUTE
# ══════════════════════════════════════════════════════════════

def compute_view(store, filters, weights, scaling):
    """Scored, classified features for the given state, in encounter order."""
    features = aggregate_features(store)
    filtered = apply_filters(features, filters)
    scaled = apply_scaling(filtered, scaling)
    return score_features(scaled, weights)


def build_view(store, state, load_error=None):
    """Everything the front end renders for one state."""
    all_features = aggregate_features(store)
    scored = compute_view(store, state.filters, state.weights, state.scaling)
    for f in scored:
        f['color'] = area_color(f['macro_area'])

    # Table rows share the matrix values, scaled when scaling is on;
    # originalAvgImpact/originalAvgEffort carry the raw means.
    features = scored
    if state.view == 'table':
        features = sort_features(scored, state.sort_field, state.sort_direction)

    view = {
        'features': features,
        'matrixPoints': [
            {'x': f['avgEffort'], 'y': f['avgImpact'], 'name': f['name'],
             'color': f['color'], 'score': f['score'], 'quadrant': f['quadrant']}
            for f in scored
        ],
        'quadrantSummary': quadrant_summary(scored),
        'quadrantFeatures': [],
        'quadrantTitle': None,
        'counts': selection_counts(scored, state.filters),
        'weights': state.weights.to_dict(),
        'scaling': state.scaling.to_dict(),
        'filters': filter_options(store, all_features, state.filters),
        'macroAreaColors': MACRO_AREA_COLORS,
        'fallbackColor': FALLBACK_COLOR,
        'state': state.to_dict(),
        'loadError': load_error,
    }
    if state.selected_quadrant:
        view['quadrantFeatures'] = quadrant_features(scored, state.selected_quadrant)
        view['quadrantTitle'] = QUADRANT_TITLES[state.selected_quadrant]
    return view
