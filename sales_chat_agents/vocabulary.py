"""
Vocabulary - the dynamic set of entity names a query can refer to, derived
from the dataset at query time.
"""

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Dict, List, Sequence

from .records import SalesRecord
from .utils import distinct_values

ENTITY_COLUMNS = ('customer', 'item', 'category', 'region')


@dataclass(frozen=True)
class Vocabulary:
    """Distinct categorical values plus a numeric/text/date column partition."""

    values: Dict[str, List[str]] = field(default_factory=dict)
    numeric_columns: List[str] = field(default_factory=list)
    text_columns: List[str] = field(default_factory=list)
    date_columns: List[str] = field(default_factory=list)

    @property
    def customers(self) -> List[str]:
        return self.values.get('customer', [])

    @property
    def items(self) -> List[str]:
        return self.values.get('item', [])

    @property
    def categories(self) -> List[str]:
        return self.values.get('category', [])

    @property
    def regions(self) -> List[str]:
        return self.values.get('region', [])

    def values_for(self, column: str) -> List[str]:
        return self.values.get(column, [])

    @property
    def is_empty(self) -> bool:
        return not any(self.values.values())


def partition_columns(sample: SalesRecord):
    """
    Split the record's columns by the runtime type of the sample's values.
    Id-like numeric columns are not measures and are left out of numeric.

    Returns:
        (numeric_columns, text_columns, date_columns)
    """
    numeric, text, dates = [], [], []
    for f in fields(sample):
        value = getattr(sample, f.name)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            if 'id' not in f.name:
                numeric.append(f.name)
        elif isinstance(value, date):
            dates.append(f.name)
        elif isinstance(value, str):
            text.append(f.name)
    return numeric, text, dates


def extract_vocabulary(records: Sequence[SalesRecord]) -> Vocabulary:
    """Build the vocabulary. An empty dataset yields empty sets."""
    if not records:
        return Vocabulary(values={col: [] for col in ENTITY_COLUMNS})

    numeric, text, dates = partition_columns(records[0])
    return Vocabulary(
        values={col: distinct_values(records, col) for col in ENTITY_COLUMNS},
        numeric_columns=numeric,
        text_columns=text,
        date_columns=dates,
    )
