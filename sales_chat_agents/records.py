"""
Sales record model - the strict shape of one transaction line, validated once
at ingestion, plus the precomputed aggregate metrics the dashboard supplies.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .utils import safe_divide


class SalesDataError(ValueError):
    """Raised when the dataset is malformed (missing or unparseable fields)."""


@dataclass(frozen=True)
class SalesRecord:
    """One line item. Several records may share a master_id (one order)."""

    customer: str
    item: str
    category: str
    region: str
    amount: float
    quantity: float
    master_id: Union[str, int]
    transaction_date: date
    is_sale: bool = True
    country: Optional[str] = None


@dataclass(frozen=True)
class Metrics:
    """Aggregate KPIs over the full dataset."""

    total_revenue: float = 0.0
    total_orders: int = 0
    total_quantity: float = 0.0
    unique_customers: int = 0
    avg_order_value: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Metrics':
        """Accepts both snake_case and the dashboard's camelCase keys."""
        def pick(snake, camel, default=0):
            value = data.get(snake, data.get(camel, default))
            return default if value is None else value

        return cls(
            total_revenue=float(pick('total_revenue', 'totalRevenue')),
            total_orders=int(pick('total_orders', 'totalOrders')),
            total_quantity=float(pick('total_quantity', 'totalQuantity')),
            unique_customers=int(pick('unique_customers', 'uniqueCustomers')),
            avg_order_value=float(pick('avg_order_value', 'avgOrderValue')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Source field spellings -> SalesRecord field
FIELD_ALIASES = {
    'masterid': 'master_id',
    'masterId': 'master_id',
    'cp_date': 'transaction_date',
    'date': 'transaction_date',
    'transactionDate': 'transaction_date',
    'issales': 'is_sale',
    'isSale': 'is_sale',
    'isSales': 'is_sale',
}

REQUIRED_FIELDS = ('customer', 'amount', 'quantity', 'master_id', 'transaction_date')
TEXT_FIELDS = ('customer', 'item', 'category', 'region')


def _canonical(row: Mapping[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, value in row.items():
        name = FIELD_ALIASES.get(key, key)
        # first spelling wins when a row carries both (e.g. cp_date and date)
        if name not in out or out[name] in (None, ''):
            out[name] = value
    return out


def _to_number(value: Any, field_name: str, index: int) -> float:
    if isinstance(value, bool):
        raise SalesDataError(f"Record {index}: {field_name} must be numeric, got a boolean")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(',', '').strip())
    except ValueError:
        raise SalesDataError(f"Record {index}: {field_name} is not a number: {value!r}")


def _to_date(value: Any, index: int) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError):
        raise SalesDataError(f"Record {index}: transaction_date is not a date: {value!r}")
    if pd.isna(parsed):
        raise SalesDataError(f"Record {index}: transaction_date is missing")
    return parsed.date()


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'y')
    return bool(value)


def normalize_record(row: Mapping[str, Any], index: int = 0) -> SalesRecord:
    """
    Validate and normalize one raw row.

    Raises:
        SalesDataError: a required field is missing or unparseable
    """
    if isinstance(row, SalesRecord):
        return row
    if not isinstance(row, Mapping):
        raise SalesDataError(f"Record {index}: expected a mapping, got {type(row).__name__}")

    data = _canonical(row)
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, '')]
    if missing:
        raise SalesDataError(f"Record {index}: missing required field(s): {', '.join(missing)}")

    text = {f: str(data.get(f) or '').strip() for f in TEXT_FIELDS}
    country = data.get('country')

    return SalesRecord(
        customer=text['customer'],
        item=text['item'],
        category=text['category'],
        region=text['region'],
        amount=_to_number(data['amount'], 'amount', index),
        quantity=_to_number(data['quantity'], 'quantity', index),
        master_id=data['master_id'],
        transaction_date=_to_date(data['transaction_date'], index),
        is_sale=_to_bool(data.get('is_sale', True)),
        country=str(country).strip() if country not in (None, '') else None,
    )


def normalize_records(rows: Iterable[Mapping[str, Any]]) -> List[SalesRecord]:
    """Validate a whole dataset. Order is preserved."""
    if rows is None:
        return []
    return [normalize_record(row, i) for i, row in enumerate(rows)]


def compute_metrics(records: List[SalesRecord]) -> Metrics:
    """Derive dashboard KPIs from the full dataset."""
    if not records:
        return Metrics()
    total_revenue = sum(r.amount for r in records)
    total_orders = len({r.master_id for r in records})
    return Metrics(
        total_revenue=total_revenue,
        total_orders=total_orders,
        total_quantity=sum(r.quantity for r in records),
        unique_customers=len({r.customer for r in records}),
        avg_order_value=safe_divide(total_revenue, total_orders) or 0.0,
    )
