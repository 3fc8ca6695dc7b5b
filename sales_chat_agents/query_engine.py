"""
QueryEngine - grouped aggregation, ranking and comparison over the sales frame.

Every operation takes an already-filtered frame and returns a ResultSet. An
empty frame always yields a NO_DATA result, never an exception or a NaN.
Sorting is stable, so ties keep dataset order.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .classifier import Operation
from .context import DataType
from .entities import Period
from .filter_engine import filter_by_period
from .results import ResultKind, ResultSet
from .utils import safe_divide

UNKNOWN = 'Unknown'

# Frame metric column -> aggregated value key
VALUE_KEYS = {
    'amount': 'revenue',
    'quantity': 'quantity',
    'master_id': 'orders',
}

VALUE_NAMES = {
    'revenue': 'Revenue',
    'quantity': 'Quantity',
    'orders': 'Orders',
}

GROUP_HEADERS = {
    'customer': 'Customer',
    'item': 'Item',
    'category': 'Stock Group',
    'region': 'Region',
    'month': 'Month',
    'transaction_date': 'Date',
}

GROUP_PLURALS = {
    'customer': 'Customers',
    'item': 'Products',
    'category': 'Stock Groups',
    'region': 'Regions',
    'month': 'Months',
    'transaction_date': 'Sales Dates',
}

DIMENSIONS = {
    'customer': DataType.CUSTOMER,
    'item': DataType.PRODUCT,
    'category': DataType.STOCKGROUP,
    'transaction_date': DataType.DATE,
}


def date_range(frame: pd.DataFrame) -> Optional[Tuple[date, date]]:
    if frame.empty:
        return None
    dates = frame['transaction_date']
    return dates.min().date(), dates.max().date()


def no_data(subject: str, full_frame: Optional[pd.DataFrame] = None, operation: str = '') -> ResultSet:
    """NO_DATA result; carries the available date range when the full frame is known."""
    result = ResultSet.no_data(f"No sales data found for {subject}.", operation=operation)
    span = date_range(full_frame) if full_frame is not None else None
    if span:
        result.totals = {'start': span[0], 'end': span[1]}
    return result


def _group_keys(frame: pd.DataFrame, group_by: str) -> pd.Series:
    if group_by == 'month':
        return frame['transaction_date'].dt.to_period('M')
    if group_by == 'transaction_date':
        return frame['transaction_date'].dt.normalize()
    return frame[group_by].fillna('').astype(str).replace('', UNKNOWN)


def _group_label(key, group_by: str):
    if group_by == 'month':
        return key.strftime('%B %Y')
    if group_by == 'transaction_date':
        return key.date()
    return key


def group_stats(frame: pd.DataFrame, group_by: str) -> pd.DataFrame:
    """
    Per-group revenue, quantity, distinct orders and record count, in order
    of first appearance. Month groups are calendar month + year.
    """
    keys = _group_keys(frame, group_by).rename('group')
    return frame.groupby(keys, sort=False).agg(
        revenue=('amount', 'sum'),
        quantity=('quantity', 'sum'),
        orders=('master_id', 'nunique'),
        transactions=('amount', 'size'),
    )


def _stats_rows(stats: pd.DataFrame, group_by: str, keys: Sequence[str]) -> List[Dict]:
    rows = []
    for key, values in stats.iterrows():
        row = {'label': _group_label(key, group_by)}
        for k in keys:
            v = values[k]
            row[k] = int(v) if k in ('orders', 'transactions') else float(v)
        rows.append(row)
    return rows


def subset_totals(frame: pd.DataFrame, *keys: str) -> Dict:
    available = {
        'revenue': lambda: float(frame['amount'].sum()),
        'quantity': lambda: float(frame['quantity'].sum()),
        'orders': lambda: int(frame['master_id'].nunique()),
        'transactions': lambda: int(len(frame)),
        'customers': lambda: int(frame['customer'].nunique()),
        'items': lambda: int(frame['item'].nunique()),
    }
    return {k: available[k]() for k in keys}


def breakdown(frame: pd.DataFrame, group_by: str, filters: Optional[Dict[str, str]] = None) -> ResultSet:
    """
    One row per group. Months are listed chronologically, everything else
    by descending revenue.
    """
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='breakdown')

    stats = group_stats(frame, group_by)
    if group_by == 'month':
        stats = stats.sort_index()
        title = 'Month-wise Breakdown'
    else:
        stats = stats.sort_values('revenue', ascending=False, kind='mergesort')
        title = f"Breakdown by {GROUP_HEADERS.get(group_by, group_by)}"

    keys = ['revenue', 'orders', 'quantity', 'transactions']
    return ResultSet(
        kind=ResultKind.TABLE,
        operation='breakdown',
        title=title,
        columns=['label'] + keys,
        rows=_stats_rows(stats, group_by, keys),
        labels={'label': GROUP_HEADERS.get(group_by, group_by)},
        filters=dict(filters or {}),
        dimension=DIMENSIONS.get(group_by),
    )


def top_transactions(frame: pd.DataFrame, limit: int = 5, bottom: bool = False,
                     title: Optional[str] = None, layout: str = 'table',
                     dimension: DataType = DataType.TRANSACTION) -> ResultSet:
    """Individual records ranked by amount."""
    if frame.empty:
        return ResultSet.no_data("No transactions found.", operation='ranking')

    ordered = frame.sort_values('amount', ascending=False, kind='mergesort')
    if bottom:
        ordered = ordered.iloc[::-1]
    rows = [
        {
            'customer': r.customer,
            'item': r.item or UNKNOWN,
            'amount': float(r.amount),
            'date': r.transaction_date.date(),
        }
        for r in ordered.head(limit).itertuples(index=False)
    ]
    return ResultSet(
        kind=ResultKind.TABLE,
        operation='ranking',
        title=title or f"{'Bottom' if bottom else 'Top'} {limit} Transactions",
        columns=['customer', 'item', 'amount', 'date'],
        rows=rows,
        layout=layout,
        ranked=True,
        dimension=dimension,
        count=limit,
    )


def ranking(frame: pd.DataFrame, group_by: Optional[str], metric: str = 'amount', limit: int = 5,
            bottom: bool = False, filters: Optional[Dict[str, str]] = None,
            title: Optional[str] = None, layout: str = 'table') -> ResultSet:
    """
    Top/bottom `limit` groups by the aggregated metric (sum of amount or
    quantity, distinct count of master_id). Without a grouping dimension,
    individual transactions are ranked by amount.

    The bottom ranking is the exact reverse of the full top ranking.
    """
    if group_by is None:
        result = top_transactions(frame, limit, bottom, layout=layout)
        result.filters = dict(filters or {})
        return result
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='ranking')

    value_key = VALUE_KEYS.get(metric, 'revenue')
    stats = group_stats(frame, group_by)
    ordered = stats.sort_values(value_key, ascending=False, kind='mergesort')
    if bottom:
        ordered = ordered.iloc[::-1]

    if title is None:
        title = (f"{'Bottom' if bottom else 'Top'} {limit} {GROUP_PLURALS.get(group_by, group_by)}"
                 f" by {VALUE_NAMES[value_key]}")
    return ResultSet(
        kind=ResultKind.TABLE,
        operation='ranking',
        title=title,
        columns=['label', value_key],
        rows=_stats_rows(ordered.head(limit), group_by, [value_key]),
        labels={'label': GROUP_HEADERS.get(group_by, group_by)},
        filters=dict(filters or {}),
        layout=layout,
        ranked=True,
        dimension=DIMENSIONS.get(group_by),
        count=limit,
    )


def leader(frame: pd.DataFrame, group_by: str) -> Optional[Tuple[str, float, int]]:
    """(best group, its revenue, number of groups), or None for an empty frame."""
    if frame.empty:
        return None
    stats = group_stats(frame, group_by).sort_values('revenue', ascending=False, kind='mergesort')
    return _group_label(stats.index[0], group_by), float(stats['revenue'].iloc[0]), len(stats)


def aggregate(frame: pd.DataFrame, filters: Optional[Dict[str, str]] = None) -> ResultSet:
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='aggregate')
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='aggregate',
        title='Aggregate Analysis',
        totals=subset_totals(frame, 'revenue', 'quantity', 'orders', 'transactions', 'customers'),
        labels={'revenue': 'Total Revenue', 'quantity': 'Total Quantity', 'orders': 'Total Orders',
                'transactions': 'Total Transactions', 'customers': 'Unique Customers'},
        filters=dict(filters or {}),
    )


def average(frame: pd.DataFrame, filters: Optional[Dict[str, str]] = None) -> ResultSet:
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='average')
    n = len(frame)
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='average',
        title='Average Analysis',
        totals={
            'avg_revenue': safe_divide(float(frame['amount'].sum()), n),
            'avg_quantity': safe_divide(float(frame['quantity'].sum()), n),
        },
        labels={'avg_revenue': 'Average Revenue per Transaction',
                'avg_quantity': 'Average Quantity per Transaction'},
        filters=dict(filters or {}),
    )


def count(frame: pd.DataFrame, group_by: Optional[str] = None,
          filters: Optional[Dict[str, str]] = None) -> ResultSet:
    """Distinct values of the grouping dimension, or the number of transactions."""
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='count')
    if group_by:
        n = int(_group_keys(frame, group_by).nunique())
        label = f"Count of unique {GROUP_PLURALS.get(group_by, group_by).lower()}"
    else:
        n = int(len(frame))
        label = 'Total transactions'
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='count',
        totals={'count': n},
        labels={'count': label},
        filters=dict(filters or {}),
    )


def _period_totals(frame: pd.DataFrame, periods: Sequence[Period]) -> List[Tuple[Period, pd.DataFrame]]:
    return [(p, filter_by_period(frame, p)) for p in periods]


def growth_percent(before: float, after: float) -> Optional[float]:
    """(after - before) / before * 100, or None when the base is zero."""
    ratio = safe_divide(after - before, before)
    return None if ratio is None else ratio * 100


def comparison(frame: pd.DataFrame, periods: Sequence[Period],
               filters: Optional[Dict[str, str]] = None) -> ResultSet:
    """Revenue and transactions for two periods plus the growth between them."""
    if len(periods) < 2:
        return ResultSet.text("Please specify two periods to compare (e.g., 'april vs may')",
                              operation='compare')
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='compare')

    (first, first_rows), (second, second_rows) = _period_totals(frame, periods[:2])
    first_total = float(first_rows['amount'].sum())
    second_total = float(second_rows['amount'].sum())
    return ResultSet(
        kind=ResultKind.TABLE,
        operation='compare',
        title=f"{first.label} vs {second.label} Comparison",
        columns=['label', 'revenue', 'transactions'],
        rows=[
            {'label': first.label, 'revenue': first_total, 'transactions': len(first_rows)},
            {'label': second.label, 'revenue': second_total, 'transactions': len(second_rows)},
        ],
        totals={'growth': growth_percent(first_total, second_total)},
        labels={'label': 'Period'},
        filters=dict(filters or {}),
    )


def smart_summary(frame: pd.DataFrame, filters: Optional[Dict[str, str]] = None) -> ResultSet:
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation='summary')
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='summary',
        title='Summary',
        totals=subset_totals(frame, 'revenue', 'quantity', 'orders', 'transactions'),
        filters=dict(filters or {}),
    )


def entity_summary(frame: pd.DataFrame, title: str, note: str = '',
                   dimension: Optional[DataType] = None, with_customers: bool = False) -> ResultSet:
    """Revenue / orders / quantity / transactions for one entity's subset."""
    if frame.empty:
        return ResultSet.no_data(f"No sales data found for {title}.", operation='summary')
    keys = ['revenue', 'orders', 'quantity']
    if with_customers:
        keys.append('customers')
    keys.append('transactions')
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='summary',
        title=title,
        totals=subset_totals(frame, *keys),
        labels={'revenue': 'Total Revenue', 'orders': 'Total Orders', 'quantity': 'Total Quantity',
                'customers': 'Unique Customers', 'transactions': 'Total Transactions'},
        note=note,
        dimension=dimension,
        count=1 if dimension else None,
    )


def month_wise_entity(frame: pd.DataFrame, title: str,
                      dimension: Optional[DataType] = DataType.CUSTOMER) -> ResultSet:
    """Overall figures for one entity followed by its month-by-month table."""
    if frame.empty:
        return ResultSet.no_data(f"No sales data found for {title}.", operation='breakdown')
    overall = entity_summary(frame, 'Overall Performance')
    monthly = breakdown(frame, 'month')
    return ResultSet(
        kind=ResultKind.COMPOSITE,
        operation='breakdown',
        title=f"{title} Analysis",
        sections=[overall, monthly],
        dimension=dimension,
        count=1 if dimension else None,
    )


def top_customers_for_product(frame: pd.DataFrame, product: str, limit: int = 5) -> ResultSet:
    if frame.empty:
        return ResultSet.no_data(f'No sales data found for "{product}".', operation='ranking')
    leaders = ranking(frame, 'customer', 'amount', limit, title=f"Top {limit} Customers for {product}")
    summary = entity_summary(frame, f"{product} Summary")
    return ResultSet(
        kind=ResultKind.COMPOSITE,
        operation='ranking',
        sections=[leaders, summary],
        dimension=DataType.CUSTOMER,
        count=limit,
    )


def top_groups_in_period(full_frame: pd.DataFrame, period: Period, group_by: str,
                         limit: int, title: str) -> ResultSet:
    """Ranked groups inside one period, followed by that period's total revenue."""
    subset = filter_by_period(full_frame, period)
    if subset.empty:
        return no_data(period.label, full_frame, operation='ranking')
    result = ranking(subset, group_by, 'amount', limit, title=title)
    result.totals = {'revenue': float(subset['amount'].sum())}
    result.labels['revenue'] = f"Total Revenue for {period.label}"
    return result


def top_dates(full_frame: pd.DataFrame, period: Optional[Period], limit: int = 3) -> ResultSet:
    if period is None:
        return ranking(full_frame, 'transaction_date', 'amount', limit,
                       title=f"Top {limit} Sales Dates by Revenue")
    return top_groups_in_period(full_frame, period, 'transaction_date', limit,
                                title=f"Top {limit} Sales Dates - {period.label}")


def comparison_with_leaders(frame: pd.DataFrame, first: Period, second: Period, leaders: int = 5) -> ResultSet:
    """Top customers of each period side by side, then totals and growth."""
    if frame.empty:
        return ResultSet.no_data("No sales data available to compare.", operation='compare')

    sections = []
    totals = {}
    labels = {}
    for i, (period, rows) in enumerate(_period_totals(frame, [first, second])):
        title = f"{period.label} Top Customers"
        if rows.empty:
            sections.append(ResultSet.no_data(f"No sales data found for {period.label}."))
        else:
            sections.append(ranking(rows, 'customer', 'amount', leaders, title=title))
        totals[f"revenue:{i}"] = float(rows['amount'].sum())
        labels[f"revenue:{i}"] = f"{period.label} Total"

    totals['growth'] = growth_percent(totals['revenue:0'], totals['revenue:1'])
    sections.append(ResultSet(kind=ResultKind.SUMMARY, operation='compare', title='Summary',
                              totals=totals, labels=labels))
    return ResultSet(
        kind=ResultKind.COMPOSITE,
        operation='compare',
        title=f"{first.label} vs {second.label} - Top Customer Sales Comparison",
        sections=sections,
        dimension=DataType.CUSTOMER,
        count=leaders,
    )


def trend(frame: pd.DataFrame) -> ResultSet:
    """Revenue of the chronologically first half of the records against the second half."""
    if frame.empty:
        return ResultSet.no_data("No sales data available for trend analysis.", operation='trend')
    ordered = frame.sort_values('transaction_date', kind='mergesort')
    half = len(ordered) // 2
    first = float(ordered.iloc[:half]['amount'].sum())
    second = float(ordered.iloc[half:]['amount'].sum())
    growth = growth_percent(first, second)
    if growth is None:
        direction = 'not comparable'
    else:
        direction = 'increasing' if growth > 0 else 'decreasing'
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='trend',
        title='Revenue Trend',
        totals={'revenue:first': first, 'revenue:second': second, 'growth': growth, 'trend': direction},
        labels={'revenue:first': 'First half', 'revenue:second': 'Second half', 'trend': 'Trend'},
        note='Comparing the first half of your data period to the second half.',
    )


def debug_info(frame: pd.DataFrame) -> ResultSet:
    """Record counts, date range and the real top 5 customers."""
    if frame.empty:
        return ResultSet.no_data("No data available to analyze.", operation='debug')
    start, end = date_range(frame)
    stats = group_stats(frame, 'customer').sort_values('revenue', ascending=False, kind='mergesort')
    overview = ResultSet(
        kind=ResultKind.SUMMARY,
        totals={'records': len(frame), 'customers': int(frame['customer'].nunique()), 'start': start, 'end': end},
        labels={'records': 'Total Records', 'customers': 'Unique Customers',
                'start': 'First Transaction', 'end': 'Last Transaction'},
    )
    top = ResultSet(
        kind=ResultKind.TABLE,
        title='Top 5 Customers (Actual)',
        columns=['label', 'revenue', 'transactions'],
        rows=_stats_rows(stats.head(5), 'customer', ['revenue', 'transactions']),
        labels={'label': 'Customer'},
    )
    return ResultSet(kind=ResultKind.COMPOSITE, operation='debug', title='Actual Data Debug Info',
                     sections=[overview, top])


def execute(operation: Operation, frame: pd.DataFrame, group_by: Optional[str] = None,
            metric: str = 'amount', limit: int = 10, periods: Sequence[Period] = (),
            filters: Optional[Dict[str, str]] = None) -> ResultSet:
    """
    Run one generic operation on an already-filtered frame.

    Args:
        operation: What to compute
        frame: Working subset
        group_by: Frame column, 'month' or None
        metric: Frame column to rank by (amount, quantity, master_id)
        limit: Row cap for rankings
        periods: Periods for COMPARE
        filters: Applied-filter labels echoed back to the user

    Returns:
        ResultSet (NO_DATA when the frame is empty)
    """
    if frame.empty:
        return ResultSet.no_data("No sales data found for the selected filters.", operation=operation.value)

    if operation == Operation.BREAKDOWN and group_by:
        return breakdown(frame, group_by, filters)
    if operation in (Operation.TOP, Operation.BOTTOM):
        return ranking(frame, group_by, metric, limit, operation == Operation.BOTTOM, filters)
    if operation == Operation.AGGREGATE:
        return aggregate(frame, filters)
    if operation == Operation.AVERAGE:
        return average(frame, filters)
    if operation == Operation.COUNT:
        return count(frame, group_by, filters)
    if operation == Operation.COMPARE:
        return comparison(frame, periods, filters)
    return smart_summary(frame, filters)
