"""
SalesDataset - one validated dataset with everything derived from it once:
the pandas frame the executor works on, the vocabulary and the metrics.
"""

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .records import Metrics, SalesRecord, compute_metrics, normalize_records
from .vocabulary import Vocabulary, extract_vocabulary

FRAME_COLUMNS = [
    'customer', 'item', 'category', 'region', 'amount', 'quantity',
    'master_id', 'transaction_date', 'is_sale', 'country',
]


def records_to_frame(records: List[SalesRecord]) -> pd.DataFrame:
    """Records -> DataFrame with a datetime64 transaction_date column."""
    if not records:
        frame = pd.DataFrame(columns=FRAME_COLUMNS)
        frame['amount'] = frame['amount'].astype(float)
        frame['quantity'] = frame['quantity'].astype(float)
        frame['transaction_date'] = pd.to_datetime(frame['transaction_date'])
        return frame
    frame = pd.DataFrame([asdict(r) for r in records], columns=FRAME_COLUMNS)
    frame['transaction_date'] = pd.to_datetime(frame['transaction_date'])
    return frame


class SalesDataset:
    """
    Read-only view over the hosting app's sales data.

    Usage:
        dataset = SalesDataset.from_rows(rows)            # metrics computed
        dataset = SalesDataset.from_rows(rows, metrics)   # caller's metrics
    """

    def __init__(self, records: List[SalesRecord], metrics: Optional[Metrics] = None):
        self.records = list(records)
        self.frame = records_to_frame(self.records)
        self.vocabulary: Vocabulary = extract_vocabulary(self.records)
        self.metrics = metrics if metrics is not None else compute_metrics(self.records)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]],
                  metrics: Optional[Union[Metrics, Mapping[str, Any]]] = None) -> 'SalesDataset':
        if metrics is not None and not isinstance(metrics, Metrics):
            metrics = Metrics.from_dict(metrics)
        return cls(normalize_records(rows), metrics)

    @classmethod
    def from_records(cls, records: Iterable[SalesRecord], metrics: Optional[Metrics] = None) -> 'SalesDataset':
        """Already-validated records, e.g. a subset of another dataset."""
        return cls(list(records), metrics)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def __len__(self) -> int:
        return len(self.records)

    def date_range(self) -> Optional[Tuple[date, date]]:
        if self.is_empty:
            return None
        dates = [r.transaction_date for r in self.records]
        return min(dates), max(dates)

    def to_rows(self) -> List[Dict[str, Any]]:
        """JSON-friendly rows (dates as ISO strings)."""
        rows = []
        for r in self.records:
            row = asdict(r)
            row['transaction_date'] = r.transaction_date.isoformat()
            rows.append(row)
        return rows
