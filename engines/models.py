"""
Priority Matrix: Data Model
Raw evaluation records, the immutable evaluation store, and the
serializable dashboard state passed through the recompute pipeline.
"""
import math
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

DEFAULT_WEIGHTS = {'impact': 40, 'effort': 30, 'preference': 30}

VIEWS = ('matrix', 'table')
SORT_FIELDS = ('score', 'impact', 'effort', 'name')
SORT_DIRECTIONS = ('asc', 'desc')


def coerce_weight(value):
    """Non-negative int from slider input, or None if the input is unusable."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        try:
            value = int(value)
        except ValueError:
            try:
                value = float(value)
            except ValueError:
                return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return None
    return value


@dataclass(frozen=True)
class Evaluation:
    """One person's judgment of one feature."""
    person: str
    feature_name: str
    description: str
    macro_area: str
    impact: float
    effort: float
    selected: bool


@dataclass(frozen=True)
class EvaluationStore:
    """Snapshot of one data load. People keep input order."""
    people: Tuple[str, ...] = ()
    evaluations: Tuple[Evaluation, ...] = ()
    source: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.evaluations


@dataclass(frozen=True)
class FilterState:
    people: FrozenSet[str] = frozenset()
    macro_areas: FrozenSet[str] = frozenset()
    features: FrozenSet[str] = frozenset()

    def to_dict(self):
        return {
            'people': sorted(self.people),
            'macroAreas': sorted(self.macro_areas),
            'features': sorted(self.features),
        }

    @classmethod
    def from_dict(cls, d):
        d = d or {}
        return cls(
            people=frozenset(d.get('people', [])),
            macro_areas=frozenset(d.get('macroAreas', [])),
            features=frozenset(d.get('features', [])),
        )


@dataclass(frozen=True)
class WeightState:
    impact: int = DEFAULT_WEIGHTS['impact']
    effort: int = DEFAULT_WEIGHTS['effort']
    preference: int = DEFAULT_WEIGHTS['preference']

    @property
    def total(self) -> int:
        return self.impact + self.effort + self.preference

    @property
    def is_valid(self) -> bool:
        # Informational only: scoring runs whatever the total is.
        return self.total == 100

    def to_dict(self):
        return {'impact': self.impact, 'effort': self.effort, 'preference': self.preference,
                'total': self.total, 'valid': self.is_valid}

    @classmethod
    def from_dict(cls, d):
        d = d or {}
        weights = {}
        for k, default in DEFAULT_WEIGHTS.items():
            value = coerce_weight(d.get(k, default))
            weights[k] = default if value is None else value
        return cls(**weights)


@dataclass(frozen=True)
class ScalingState:
    impact: bool = False
    effort: bool = False

    def to_dict(self):
        return {'impact': self.impact, 'effort': self.effort}

    @classmethod
    def from_dict(cls, d):
        d = d or {}
        return cls(impact=bool(d.get('impact', False)), effort=bool(d.get('effort', False)))


@dataclass(frozen=True)
class DashboardState:
    """Everything the user can change. Transitions return a new value."""
    filters: FilterState = field(default_factory=FilterState)
    weights: WeightState = field(default_factory=WeightState)
    scaling: ScalingState = field(default_factory=ScalingState)
    view: str = 'matrix'
    sort_field: str = 'score'
    sort_direction: str = 'desc'
    selected_quadrant: Optional[str] = None

    def evolve(self, **changes):
        return replace(self, **changes)

    def to_dict(self):
        return {
            'filters': self.filters.to_dict(),
            'weights': self.weights.to_dict(),
            'scaling': self.scaling.to_dict(),
            'view': self.view,
            'sortField': self.sort_field,
            'sortDirection': self.sort_direction,
            'selectedQuadrant': self.selected_quadrant,
        }

    @classmethod
    def from_dict(cls, d):
        """Inverse of to_dict. Bad weights fall back to defaults."""
        d = d or {}
        return cls(
            filters=FilterState.from_dict(d.get('filters')),
            weights=WeightState.from_dict(d.get('weights')),
            scaling=ScalingState.from_dict(d.get('scaling')),
            view=d.get('view', 'matrix'),
            sort_field=d.get('sortField', 'score'),
            sort_direction=d.get('sortDirection', 'desc'),
            selected_quadrant=d.get('selectedQuadrant'),
        )
