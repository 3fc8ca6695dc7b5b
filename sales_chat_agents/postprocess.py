"""
Post-processing for text returned by the LLM collaborator.

A pure text pipeline, independent of how the text was obtained:

    correct_currency -> clarify_paired_amounts -> truncate_off_topic -> cap_words
"""

import json
import logging
import re
from collections import Counter
from dataclasses import asdict, is_dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .utils import contains_phrase

logger = logging.getLogger(__name__)

RUPEE = '₹'
DOLLAR = '$'
FALLBACK_SYMBOL = RUPEE
CURRENCY_SAMPLE_SIZE = 10

CURRENCY_NAMES = {
    RUPEE: 'Indian Rupees',
    DOLLAR: 'US Dollars',
}

OFF_TOPIC_MARKERS = (
    'sqlalchemy', 'python', 'academic', 'research paper', 'study', 'abstract',
    'methodology', 'literature review', 'peer-reviewed', 'scholarly',
    'university', 'phd', 'dissertation', 'thesis',
)

# Only cut when at least this much text survives before the cut point
MIN_KEPT_CHARS = 50

# Target symbol -> ordered (pattern, replacement, flags) rewrites of the other currency
CURRENCY_REWRITES = {
    RUPEE: [
        (r'\$(\d{1,3}(?:,\d{3})*(?:\.\d{2})?)', r'₹\1', 0),
        (r'\$(\d+)', r'₹\1', 0),
        (r'\$\s*(\d)', r'₹\1', 0),
        (r'\bUS\s*Dollars?\b', 'Indian Rupees', re.IGNORECASE),
        (r'(\d+)\s*dollars?', r'\1 rupees', re.IGNORECASE),
        (r'dollars?\s*(\d+)', r'₹\1', re.IGNORECASE),
        (r'\bdollars?\b', 'rupees', re.IGNORECASE),
        (r'\bUSD\b', 'INR', re.IGNORECASE),
    ],
    DOLLAR: [
        (r'₹(\d{1,3}(?:,\d{2,3})*(?:\.\d{2})?)', r'$\1', 0),
        (r'₹(\d+)', r'$\1', 0),
        (r'₹\s*(\d)', r'$\1', 0),
        (r'\bIndian\s*Rupees?\b', 'US Dollars', re.IGNORECASE),
        (r'(\d+)\s*rupees?', r'\1 dollars', re.IGNORECASE),
        (r'rupees?\s*(\d+)', r'$\1', re.IGNORECASE),
        (r'\brupees?\b', 'dollars', re.IGNORECASE),
        (r'\bINR\b', 'USD', re.IGNORECASE),
    ],
}


def _as_mapping(record: Any) -> Mapping:
    if is_dataclass(record):
        return asdict(record)
    return record


def _country_symbol(country: Any) -> Optional[str]:
    text = str(country).lower()
    if contains_phrase(text, 'india'):
        return RUPEE
    if contains_phrase(text, 'usa') or contains_phrase(text, 'united states'):
        return DOLLAR
    return None


def detect_currency(records: Sequence[Any], fallback: str = FALLBACK_SYMBOL) -> str:
    """
    Currency symbol of the dataset, from the first 10 records.

    The country field decides by majority vote; without usable countries,
    textual markers in the sample (rupee/INR/₹ or dollar/USD/$) decide;
    otherwise the fallback symbol is used.
    """
    sample = [_as_mapping(r) for r in list(records)[:CURRENCY_SAMPLE_SIZE]]
    if not sample:
        return fallback

    votes = Counter()
    for record in sample:
        country = record.get('country')
        symbol = _country_symbol(country) if country else None
        if symbol:
            votes[symbol] += 1
    if votes:
        return votes.most_common(1)[0][0]

    text = json.dumps(sample, default=str, ensure_ascii=False).lower()
    if any(marker in text for marker in ('rupee', 'inr', RUPEE)):
        return RUPEE
    if any(marker in text for marker in ('dollar', 'usd', DOLLAR)):
        return DOLLAR
    return fallback


def correct_currency(text: str, symbol: str) -> str:
    """Rewrite every marker of the other known currency into `symbol`'s."""
    rewrites = CURRENCY_REWRITES.get(symbol)
    if not rewrites:
        return text
    corrected = text
    for pattern, replacement, flags in rewrites:
        corrected = re.sub(pattern, replacement, corrected, flags=flags)
    if corrected != text:
        logger.info("Corrected currency markers to %s", symbol)
    return corrected


def _to_number(amount: str) -> float:
    return float(amount.replace(',', ''))


def clarify_paired_amounts(text: str, symbol: str) -> str:
    """
    'X (Y)' amount pairs are ambiguous. A second amount much larger than the
    first (> 1.5x) is labelled as profit; otherwise it is dropped.
    """
    sym = re.escape(symbol)
    amount = r'(\d[\d,]*(?:\.\d+)?)'
    pattern = re.compile(f"{sym}{amount}\\s*\\({sym}{amount}\\)")

    def relabel(match):
        first, second = match.group(1), match.group(2)
        if _to_number(second) > _to_number(first) * 1.5:
            return f"{symbol}{first} (Profit: {symbol}{second})"
        return f"{symbol}{first}"

    return pattern.sub(relabel, text)


def first_off_topic_marker(text: str) -> Optional[Tuple[int, str]]:
    lower = text.lower()
    hits = [(lower.find(m), m) for m in OFF_TOPIC_MARKERS if m in lower]
    return min(hits) if hits else None


def truncate_off_topic(text: str) -> str:
    """
    Cut the text at the last sentence boundary before the first off-topic
    marker. Left unchanged when 50 characters or fewer would survive.
    """
    hit = first_off_topic_marker(text)
    if hit is None:
        return text
    index, marker = hit
    head = text[:index]
    boundary = max(head.rfind('.'), head.rfind('\n'), head.rfind('!'), head.rfind('?'))
    if boundary > MIN_KEPT_CHARS:
        logger.info("Truncated off-topic content starting at %r", marker)
        return head[:boundary + 1].strip()
    return text


def cap_words(text: str, limit: int = 200) -> str:
    words: List[str] = text.split()
    if len(words) <= limit:
        return text
    return ' '.join(words[:limit]) + '...'


def postprocess_response(text: str, symbol: str = FALLBACK_SYMBOL, word_limit: int = 200) -> str:
    text = correct_currency(text, symbol)
    text = clarify_paired_amounts(text, symbol)
    text = truncate_off_topic(text)
    return cap_words(text, word_limit)
