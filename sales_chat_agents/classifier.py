"""
Query classification - ordered keyword rule tables.

Each table is a list of (predicate, result) pairs evaluated in order; the
first predicate that holds wins. Priority is therefore the table order, e.g.
"top sales this month" is ranking, not temporal analysis.
"""

from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .utils import contains_any


class Intent(str, Enum):
    COMPARISON = 'comparison'
    INFORMATION = 'information'
    RANKING = 'ranking'
    CALCULATION = 'calculation'
    TEMPORAL_ANALYSIS = 'temporal_analysis'
    CLARIFICATION = 'clarification'
    GENERAL = 'general'


class Operation(str, Enum):
    AGGREGATE = 'aggregate'
    AVERAGE = 'average'
    COUNT = 'count'
    TOP = 'top'
    BOTTOM = 'bottom'
    BREAKDOWN = 'breakdown'
    COMPARE = 'compare'
    LIST = 'list'


Predicate = Callable[[str], bool]


def keywords(*words: str) -> Predicate:
    """Predicate that holds when the lower-cased query contains any of `words`."""
    return lambda text: contains_any(text, words)


COMPARISON_KEYWORDS = ('vs', 'versus', 'compare', 'comparison')

INTENT_RULES: List[Tuple[Predicate, Intent]] = [
    (keywords(*COMPARISON_KEYWORDS), Intent.COMPARISON),
    (keywords('what is', 'show me', 'tell me'), Intent.INFORMATION),
    (keywords('top', 'best', 'highest', 'nett'), Intent.RANKING),
    (keywords('how much', 'total'), Intent.CALCULATION),
    (keywords('month', 'period', 'wise', 'breakdown'), Intent.TEMPORAL_ANALYSIS),
    (keywords('not', 'instead', 'but'), Intent.CLARIFICATION),
]

OPERATION_RULES: List[Tuple[Predicate, Operation]] = [
    (keywords('total', 'sum', 'overall', 'all'), Operation.AGGREGATE),
    (keywords('average', 'avg', 'mean'), Operation.AVERAGE),
    (keywords('count', 'number', 'how many'), Operation.COUNT),
    (keywords('top', 'highest', 'best', 'maximum', 'max'), Operation.TOP),
    (keywords('bottom', 'lowest', 'worst', 'minimum', 'min'), Operation.BOTTOM),
    (keywords('breakdown', 'wise', 'by', 'split', 'group'), Operation.BREAKDOWN),
    (keywords(*COMPARISON_KEYWORDS), Operation.COMPARE),
]

# Frame column to group by; 'transaction_date' groups by calendar day
GROUPING_RULES: List[Tuple[Predicate, str]] = [
    (keywords('month', 'monthly'), 'month'),
    (keywords('customer', 'client', 'party'), 'customer'),
    (keywords('item', 'product', 'goods'), 'item'),
    (keywords('category', 'stock group', 'group'), 'category'),
    (keywords('region', 'location', 'area'), 'region'),
    (keywords('date', 'day', 'daily'), 'transaction_date'),
]


def first_match(rules: Sequence[Tuple[Predicate, object]], text: str, default=None):
    for predicate, result in rules:
        if predicate(text):
            return result
    return default


def classify_intent(lower_query: str) -> Intent:
    return first_match(INTENT_RULES, lower_query, Intent.GENERAL)


def detect_operation(lower_query: str) -> Operation:
    return first_match(OPERATION_RULES, lower_query, Operation.LIST)


def detect_group_by(lower_query: str) -> Optional[str]:
    return first_match(GROUPING_RULES, lower_query)
