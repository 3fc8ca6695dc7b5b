"""
FilterEngine - applies filter specifications to the sales frame.
Manages a stack of filters: categorical field matches first, then periods.
"""

import uuid
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .entities import Period


def filter_by_period(frame: pd.DataFrame, period: Optional[Period]) -> pd.DataFrame:
    """Rows whose transaction_date falls in the period's month and/or year."""
    if period is None or frame.empty:
        return frame
    dates = frame['transaction_date']
    mask = pd.Series(True, index=frame.index)
    if period.month_number:
        mask &= dates.dt.month == period.month_number
    if period.year:
        mask &= dates.dt.year == int(period.year)
    return frame[mask]


class FilterEngine:
    """
    Executes filter specs against a frame. Data is passed in at apply time;
    the engine doesn't own the data.

    Spec shapes:
        {"filter_type": "include"|"exclude", "field": "<column>", "condition": <value>}
        {"filter_type": "include", "field": "period", "condition": Period(...)}

    Usage:
        engine = FilterEngine.from_entities({'customer': 'Acme'}, Period('april', 2024))
        subset = engine.apply(frame)
    """

    def __init__(self):
        self.active_filters: List[Dict] = []

    @classmethod
    def from_entities(cls, text_filters: Optional[Mapping[str, Any]] = None,
                      period: Optional[Period] = None) -> 'FilterEngine':
        engine = cls()
        for column, value in (text_filters or {}).items():
            engine.add_filter({'field': column, 'condition': value, 'filter_type': 'include'})
        if period is not None:
            engine.add_filter({'field': 'period', 'condition': period, 'filter_type': 'include'})
        return engine

    def add_filter(self, filter_spec: Dict) -> str:
        """
        Add a filter to the stack.

        Preserves an existing 'id' if already present. Assigns a new UUID otherwise.

        Returns:
            The filter's assigned ID
        """
        filter_id = filter_spec.get('id') or str(uuid.uuid4())
        filter_spec = {'filter_type': 'include', **filter_spec, 'id': filter_id}
        self.active_filters.append(filter_spec)
        return filter_id

    def get_active_filters(self) -> List[Dict]:
        """Return current filter stack."""
        return self.active_filters

    def describe(self) -> Dict[str, str]:
        """Human-readable {field: value} labels, echoed back in answers."""
        labels = {}
        for spec in self.active_filters:
            condition = spec['condition']
            label = condition.label if isinstance(condition, Period) else str(condition)
            if spec['filter_type'] == 'exclude':
                label = f"not {label}"
            labels[spec['field']] = label
        return labels

    def apply(self, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Apply all enabled filters. Field matches are AND-combined and run
        before period filters.
        """
        field_specs = [f for f in self.active_filters if f['field'] != 'period']
        period_specs = [f for f in self.active_filters if f['field'] == 'period']
        result = frame
        for filter_spec in field_specs + period_specs:
            if not filter_spec.get('enabled', True):
                continue
            result = self._apply_single(result, filter_spec)
        return result

    def _apply_single(self, frame: pd.DataFrame, filter_spec: Dict) -> pd.DataFrame:
        field = filter_spec['field']
        condition = filter_spec['condition']
        filter_type = filter_spec['filter_type']

        if field == 'period':
            matched = filter_by_period(frame, condition)
            return matched if filter_type == 'include' else frame.drop(matched.index)
        return self._apply_field_match(frame, field, condition, filter_type)

    def _apply_field_match(self, frame, field, condition, filter_type) -> pd.DataFrame:
        if field not in frame.columns:
            raise KeyError(f"Unknown filter field: {field}")
        matches = frame[field] == condition
        if filter_type == 'include':
            return frame[matches]
        return frame[~matches]
