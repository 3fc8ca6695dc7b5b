"""
Entity resolution - pulls structured entities out of free text.

Every extractor is best-effort: absence is an unset field, never an error.
Categorical names are resolved against the dataset's vocabulary in three
passes: whole-word containment (longest match wins), then containment of the
cleaned query inside a value, then word overlap. Fuzzy passes only run when
no column produced a whole-word match.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .classifier import keywords
from .utils import MONTH_NAMES, YEAR_PATTERN, contains_phrase, title_case_month
from .vocabulary import ENTITY_COLUMNS, Vocabulary

STOPWORDS = frozenset("""
a about all amount an analysis and any are area avg best between bottom breakdown but by
category categories client clients compare comparison count customer customers daily data
date dates day detail details display does each find for from get give goods group groups
had has have highest how i in instead is item items last list location lowest many me mean
month monthly months much my need nett net not number of on or order orders our overall party
per period please product products qty quantity region regions report revenue sale sales see
selling show sold split stock sum summary tell than that the their this to top total
transaction transactions trend units value values versus vs want was were what which who
wise with worst year years
""".split())

MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class Period:
    """A calendar month and/or year. A missing year matches every year."""

    month: Optional[str] = None
    year: Optional[int] = None

    @property
    def month_number(self) -> Optional[int]:
        return MONTH_NAMES.index(self.month) + 1 if self.month else None

    @property
    def label(self) -> str:
        parts = []
        if self.month:
            parts.append(title_case_month(self.month))
        if self.year:
            parts.append(str(self.year))
        return ' '.join(parts) or 'all time'


@dataclass
class Entities:
    customer: Optional[str] = None
    product: Optional[str] = None
    stock_group: Optional[str] = None
    region: Optional[str] = None
    date: Optional[Period] = None
    count: Optional[int] = None
    metric: str = 'amount'
    periods: List[Period] = field(default_factory=list)

    def text_filters(self) -> Dict[str, str]:
        """Resolved categorical entities keyed by frame column."""
        pairs = (('customer', self.customer), ('item', self.product),
                 ('category', self.stock_group), ('region', self.region))
        return {column: value for column, value in pairs if value}


# Checked in order; first hit decides the metric column
METRIC_RULES = [
    (keywords('revenue', 'sales', 'amount'), 'amount'),
    (keywords('orders', 'order'), 'master_id'),
    (keywords('quantity', 'units'), 'quantity'),
    (keywords('customers', 'customer'), 'customer'),
    (keywords('masterid', 'master id', 'transaction id'), 'master_id'),
    (keywords('cp_date', 'cp date', 'transaction date'), 'transaction_date'),
    (keywords('item', 'product'), 'item'),
    (keywords('category', 'stock group', 'stockgroup'), 'category'),
    (keywords('region', 'location'), 'region'),
    (keywords('issales', 'is sales'), 'is_sale'),
]


def detect_metric(lower_query: str, default: str = 'amount') -> str:
    for predicate, column in METRIC_RULES:
        if predicate(lower_query):
            return column
    return default


def extract_count(query: str, default: Optional[int] = None) -> Optional[int]:
    """First integer literal that is not a 20xx year."""
    for match in re.finditer(r'\d+', query):
        token = match.group(0)
        if YEAR_PATTERN.fullmatch(token):
            continue
        return int(token)
    return default


def extract_months(lower_query: str) -> List[str]:
    """Month names in the order they appear in the query."""
    found = []
    for month in MONTH_NAMES:
        m = re.search(r'\b' + month + r'\b', lower_query)
        if m:
            found.append((m.start(), month))
    return [month for _, month in sorted(found)]


def extract_years(query: str) -> List[int]:
    return [int(y) for y in YEAR_PATTERN.findall(query)]


def extract_periods(lower_query: str) -> Tuple[List[Period], Optional[Period]]:
    """
    Returns:
        (periods, date) - one Period per month mentioned, with years aligned
        positionally when several years are given; and the single
        month/year filter (first month, first year) if either is present.
    """
    months = extract_months(lower_query)
    years = extract_years(lower_query)

    periods = []
    for i, month in enumerate(months):
        if len(years) > 1 and i < len(years):
            year = years[i]
        else:
            year = years[0] if years else None
        periods.append(Period(month=month, year=year))

    date_filter = None
    if months or years:
        date_filter = Period(month=months[0] if months else None, year=years[0] if years else None)
    return periods, date_filter


def clean_query(lower_query: str) -> str:
    """Drop stopwords, numbers and month names, leaving candidate name words."""
    tokens = re.findall(r"[a-z0-9&.'-]+", lower_query.replace('-', ' '))
    kept = [t for t in tokens
            if t not in STOPWORDS and t not in MONTH_NAMES and not t.isdigit()]
    return ' '.join(kept).strip()


def exact_match(lower_query: str, candidates: Sequence[str]) -> Optional[str]:
    """
    Whole-word containment of a value in the query. Longest value wins.
    Values that are themselves filler words ("a", "all", ...) never match.
    """
    hits = [c for c in candidates
            if c.lower() not in STOPWORDS and contains_phrase(lower_query, c.lower())]
    if not hits:
        return None
    return max(hits, key=len)


def _words(text: str) -> List[str]:
    return [w for w in re.split(r'\s+', text.lower()) if len(w) >= MIN_TOKEN_LENGTH]


def _words_overlap(a: str, b: str) -> bool:
    if a == b:
        return True
    shorter = min(len(a), len(b))
    return shorter >= 4 and (a.startswith(b) or b.startswith(a))


def fuzzy_match(cleaned_query: str, candidates: Sequence[str]) -> Optional[str]:
    """Value-contains-query, then word overlap. First candidate wins."""
    if len(cleaned_query) < MIN_TOKEN_LENGTH:
        return None
    for candidate in candidates:
        if cleaned_query in candidate.lower():
            return candidate

    query_words = _words(cleaned_query)
    if not query_words:
        return None
    for candidate in candidates:
        candidate_words = _words(candidate)
        if any(_words_overlap(q, c) for q in query_words for c in candidate_words):
            return candidate
    return None


def match_entities(lower_query: str, vocabulary: Vocabulary) -> Dict[str, Optional[str]]:
    """Resolve one value (or None) per categorical column."""
    matches = {col: exact_match(lower_query, vocabulary.values_for(col)) for col in ENTITY_COLUMNS}
    if any(matches.values()):
        return matches

    cleaned = clean_query(lower_query)
    return {col: fuzzy_match(cleaned, vocabulary.values_for(col)) for col in ENTITY_COLUMNS}


def match_column(query: str, vocabulary: Vocabulary, column: str) -> Optional[str]:
    """Single-column lookup used by the column handlers (all three passes)."""
    lower = query.lower()
    values = vocabulary.values_for(column)
    return exact_match(lower, values) or fuzzy_match(clean_query(lower), values)


def resolve_entities(query: str, vocabulary: Vocabulary) -> Entities:
    lower = query.lower()
    matches = match_entities(lower, vocabulary)
    periods, date_filter = extract_periods(lower)
    return Entities(
        customer=matches['customer'],
        product=matches['item'],
        stock_group=matches['category'],
        region=matches['region'],
        date=date_filter,
        count=extract_count(query),
        metric=detect_metric(lower),
        periods=periods,
    )
