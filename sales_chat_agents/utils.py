"""
Utility functions for sales-chat-agents.
"""

import re
from typing import Any, Iterable, List, Optional

import numpy as np

MONTH_NAMES = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
]

YEAR_PATTERN = re.compile(r'\b(20\d{2})\b')


def distinct_values(entities: Iterable[Any], key: str) -> List[Any]:
    """
    Return the distinct values of `key` in first-seen order.

    Empty values (None, '') are skipped so they never become matchable
    vocabulary entries.

    Example:
        distinct_values(records, 'customer')  # ['Acme Traders', 'Zen Foods', ...]

    Args:
        entities: Records (dataclasses or dicts)
        key: Field name to collect

    Returns:
        List of unique values, in the order they first appear.
    """
    seen = {}
    for entity in entities:
        v = entity.get(key) if isinstance(entity, dict) else getattr(entity, key, None)
        if v is None or v == '':
            continue
        if v not in seen:
            seen[v] = True
    return list(seen)


def safe_divide(numerator: float, denominator: float) -> Optional[float]:
    """Divide, returning None instead of a non-finite value on a zero/NaN denominator."""
    if denominator is None or denominator == 0 or not np.isfinite(denominator):
        return None
    result = numerator / denominator
    return float(result) if np.isfinite(result) else None


def contains_keyword(text: str, keyword: str) -> bool:
    """
    Word-prefix keyword match: 'month' matches 'monthly' but 'vs' does not
    match inside another word.
    """
    return re.search(r'\b' + re.escape(keyword), text) is not None


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(contains_keyword(text, kw) for kw in keywords)


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word (or whole-phrase) containment, case-sensitive on the inputs given."""
    if not phrase:
        return False
    return re.search(r'(?<!\w)' + re.escape(phrase) + r'(?!\w)', text) is not None


def title_case_month(month: str) -> str:
    return month[:1].upper() + month[1:]
