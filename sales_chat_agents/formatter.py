"""
Response formatter - renders a ResultSet as Markdown-like text.

Pure functions only: the same ResultSet and settings always give the same
string. Values are formatted by their key (revenue -> currency, quantity ->
units, growth -> percent, ...); a key may carry a ':suffix' to keep several
values of the same kind apart (e.g. 'revenue:0', 'revenue:1').
"""

import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from .config import INDIAN, WESTERN, FormatSettings
from .results import ResultKind, ResultSet

VALUE_FORMATS = {
    'revenue': 'currency',
    'amount': 'currency',
    'avg_revenue': 'currency',
    'avg_order_value': 'currency',
    'quantity': 'quantity',
    'avg_quantity': 'decimal_quantity',
    'orders': 'count',
    'transactions': 'count',
    'customers': 'count',
    'items': 'count',
    'groups': 'count',
    'regions': 'count',
    'records': 'count',
    'count': 'count',
    'months': 'count',
    'growth': 'percent',
    'date': 'date',
    'start': 'date',
    'end': 'date',
}

DEFAULT_LABELS = {
    'rank': '#',
    'label': 'Name',
    'revenue': 'Revenue',
    'amount': 'Amount',
    'quantity': 'Quantity',
    'orders': 'Orders',
    'transactions': 'Transactions',
    'customers': 'Unique Customers',
    'customer': 'Customer',
    'item': 'Item',
    'date': 'Date',
    'growth': 'Growth',
    'avg_order_value': 'Average Order Value',
    'count': 'Count',
    'records': 'Records',
    'start': 'From',
    'end': 'To',
}

DEFAULT_SETTINGS = FormatSettings()


def group_digits(digits: str, grouping: str = INDIAN) -> str:
    """
    Insert thousands separators into a string of digits.

    Indian grouping keeps the last three digits together and pairs the rest
    (12,34,567); Western grouping uses threes throughout (1,234,567).
    """
    if len(digits) <= 3:
        return digits
    if grouping == WESTERN:
        return f"{int(digits):,}"

    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ','.join(pairs + [tail])


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return not math.isfinite(float(value))
    except (TypeError, ValueError):
        return True


def format_number(value: float, decimals: int = 2, grouping: str = INDIAN) -> str:
    if _is_missing(value):
        return 'n/a'
    text = f"{abs(float(value)):.{decimals}f}"
    whole, _, fraction = text.partition('.')
    sign = '-' if float(value) < 0 and float(text) != 0 else ''
    grouped = group_digits(whole, grouping)
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


def format_currency(value: Optional[float], settings: FormatSettings = DEFAULT_SETTINGS) -> str:
    """Symbol + two decimals, e.g. ₹1,23,456.00. Missing or non-finite -> 'n/a'."""
    if _is_missing(value):
        return 'n/a'
    number = format_number(abs(value), 2, settings.grouping)
    sign = '-' if value < 0 else ''
    return f"{sign}{settings.currency_symbol}{number}"


def format_quantity(value: Optional[float], settings: FormatSettings = DEFAULT_SETTINGS) -> str:
    if _is_missing(value):
        return 'n/a'
    return f"{format_number(round(float(value)), 0, settings.grouping)}{settings.unit_suffix}"


def format_decimal_quantity(value: Optional[float], settings: FormatSettings = DEFAULT_SETTINGS) -> str:
    if _is_missing(value):
        return 'n/a'
    return f"{format_number(value, 2, settings.grouping)}{settings.unit_suffix}"


def format_count(value: Optional[int], settings: FormatSettings = DEFAULT_SETTINGS) -> str:
    if _is_missing(value):
        return 'n/a'
    return format_number(int(value), 0, settings.grouping)


def format_percent(value: Optional[float]) -> str:
    if _is_missing(value):
        return 'n/a'
    return f"{float(value):.2f}%"


def format_date(value) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%Y')
    return str(value)


def format_value(key: str, value: Any, settings: FormatSettings = DEFAULT_SETTINGS) -> str:
    kind = VALUE_FORMATS.get(key.partition(':')[0])
    if kind == 'currency':
        return format_currency(value, settings)
    if kind == 'quantity':
        return format_quantity(value, settings)
    if kind == 'decimal_quantity':
        return format_decimal_quantity(value, settings)
    if kind == 'count':
        return format_count(value, settings)
    if kind == 'percent':
        return format_percent(value)
    if kind == 'date':
        return format_date(value)
    if value is None or value == '':
        return 'Unknown'
    return str(value)


def markdown_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines = [
        '| ' + ' | '.join(headers) + ' |',
        '|' + '|'.join('-' * (len(h) + 2) for h in headers) + '|',
    ]
    for row in rows:
        lines.append('| ' + ' | '.join(row) + ' |')
    return '\n'.join(lines)


def _label(result: ResultSet, key: str) -> str:
    if key in result.labels:
        return result.labels[key]
    return DEFAULT_LABELS.get(key.partition(':')[0], key.replace('_', ' ').title())


def _heading(title: str) -> str:
    return f"**{title}:**" if title else ''


def _filters_line(filters: Dict[str, str]) -> str:
    if not filters:
        return ''
    return '**Filters Applied:** ' + ', '.join(f"{k}={v}" for k, v in filters.items())


def _bullets(result: ResultSet, settings: FormatSettings) -> List[str]:
    return [f"• {_label(result, k)}: {format_value(k, v, settings)}" for k, v in result.totals.items()]


def _rows_as_list(result: ResultSet, settings: FormatSettings) -> List[str]:
    lines = []
    for i, row in enumerate(result.rows, start=1):
        first, *rest = result.columns
        parts = [f"**{format_value(first, row.get(first), settings)}**"]
        parts.extend(format_value(k, row.get(k), settings) for k in rest)
        prefix = f"{i}. " if result.ranked else '• '
        lines.append(prefix + ' - '.join(parts))
    return lines


def _rows_as_table(result: ResultSet, settings: FormatSettings) -> str:
    headers = [_label(result, k) for k in result.columns]
    rows = [[format_value(k, row.get(k), settings) for k in result.columns] for row in result.rows]
    if result.ranked:
        headers = ['#'] + headers
        rows = [[str(i)] + r for i, r in enumerate(rows, start=1)]
    return markdown_table(headers, rows)


def _join(blocks: Sequence[str]) -> str:
    return '\n\n'.join(b for b in blocks if b)


def render(result: ResultSet, settings: Optional[FormatSettings] = None) -> str:
    """Render a ResultSet. Never raises for well-formed results."""
    settings = settings or DEFAULT_SETTINGS

    if result.kind == ResultKind.NO_DATA:
        text = result.message or 'No data found.'
        if 'start' in result.totals and 'end' in result.totals:
            text += (f" Available data ranges from {format_date(result.totals['start'])}"
                     f" to {format_date(result.totals['end'])}.")
        return text

    if result.kind == ResultKind.MESSAGE:
        return result.message

    if result.kind == ResultKind.COMPOSITE:
        return _join([_heading(result.title)] + [render(s, settings) for s in result.sections] + [result.note])

    blocks = [_heading(result.title), _filters_line(result.filters)]
    if result.kind == ResultKind.TABLE:
        if not result.rows:
            blocks.append('No results found.')
        elif result.layout == 'list':
            blocks.append('\n'.join(_rows_as_list(result, settings)))
        else:
            blocks.append(_rows_as_table(result, settings))
    blocks.append('\n'.join(_bullets(result, settings)))
    blocks.append(result.note)
    return _join(blocks)
