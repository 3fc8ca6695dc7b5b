"""
Column handlers - narrow, pattern-specific answer strategies tried in order
after the structured path. Each takes a QueryRequest and returns a
ResultSet, or None to pass.
"""

from typing import Callable, List, Optional, Tuple

from . import query_engine as qe
from .classifier import Operation, detect_group_by, detect_operation
from .context import DataType
from .entities import exact_match, extract_count, extract_periods, match_column
from .filter_engine import FilterEngine
from .query_analysis import QueryRequest
from .results import ResultKind, ResultSet
from .utils import MONTH_NAMES, YEAR_PATTERN, safe_divide
from .vocabulary import ENTITY_COLUMNS

Handler = Callable[[QueryRequest], Optional[ResultSet]]

GENERIC_TOP_DEFAULT = 3
COLUMN_TOP_DEFAULT = 5
UNIVERSAL_LIMIT = 10

# derived figure -> (numerator, denominator) over the filtered rows
AVERAGES = {
    'avg_order_value': ('revenue', 'orders'),
    'avg_quantity': ('quantity', 'orders'),
}

COMPARE_HINT = (
    'I can help you compare data! Please be more specific. For example: '
    '"Compare revenue by stock group" or "april vs may top customer sales".'
)

HELP_TEXT = """I can help you analyze your sales data! Here are the **available columns** you can ask about:

**📊 Available Data Columns:**
• **customer** - Customer names
• **item** - Product/item names
• **amount** - Revenue/sales amounts
• **quantity** - Quantities sold
• **category** - Stock groups/categories
• **region** - Sales regions
• **masterid** - Transaction IDs
• **cp_date** - Transaction dates
• **issales** - Sales flag

Your dataset contains **{records}** records.

**🎯 Query Examples:**
• **Customer:** "top 5 customers", "month wise sales for <customer>"
• **Item:** "top 10 items by quantity", "top 5 customers for <item>"
• **Amount:** "total revenue", "highest amount transactions"
• **Category:** "top 3 stock groups"
• **Region:** "sales by region"
• **Date:** "april sales", "best sales date top 3 in the month of april", "april vs may"

**🛠️ Debug Commands:**
• "debug" - Show actual data statistics

**💡 Tips:**
• Use "top N" for rankings (top 5, top 10)
• Include time periods (april, 2024, month wise)
• After a ranking, "top 5" re-runs it with a new count"""

FALLBACK_TEXT = """I'm not sure I understood that. I can help you analyze:

• **Customer Analysis:** "<customer> sales", "top 5 customers"
• **Product Analysis:** "<product> sales", "top 10 products"
• **Period Analysis:** "April sales", "2024 sales", "april vs may"
• **Transaction Analysis:** "top 5 sales transactions"
• **Overall Metrics:** "total revenue", "how many orders"
• **Month-wise Breakdown:** "month wise sales for <customer>"

Type "help" for more options!"""


def _has_number(request: QueryRequest) -> bool:
    return extract_count(request.query) is not None


def _dated_frame(request: QueryRequest):
    """Full frame narrowed by the query's month/year, if any."""
    engine = FilterEngine.from_entities(period=request.entities.date)
    return engine.apply(request.frame), engine.describe()


def _filtered(request: QueryRequest):
    """Full frame narrowed by every entity the query names and its month/year."""
    entities = request.entities
    engine = FilterEngine.from_entities(entities.text_filters(), entities.date)
    return engine.apply(request.frame), engine.describe()


def _figures(request: QueryRequest, operation: str, overall: dict, labels: dict) -> ResultSet:
    """
    Summary figures keyed like `overall`. An unfiltered query gets `overall`
    (the dataset metrics); a filtered one gets the same keys recomputed over
    the matching rows, or NO_DATA when none match.
    """
    frame, filters = _filtered(request)
    if not filters:
        return ResultSet(kind=ResultKind.SUMMARY, operation=operation, totals=overall, labels=labels)
    if frame.empty:
        return qe.no_data(', '.join(filters.values()), request.frame, operation)

    base = qe.subset_totals(frame, 'revenue', 'quantity', 'orders', 'transactions', 'customers', 'items')
    totals = {}
    for key in overall:
        if key in AVERAGES:
            numerator, denominator = AVERAGES[key]
            totals[key] = safe_divide(base[numerator], base[denominator])
        else:
            totals[key] = base[key]
    return ResultSet(kind=ResultKind.SUMMARY, operation=operation, totals=totals, labels=labels,
                     filters=filters)


def _top_list(frame, group_by: str, n: int, noun: str) -> ResultSet:
    return qe.ranking(frame, group_by, 'amount', n, layout='list', title=f"Top {n} {noun} by Revenue")


def _leader_answer(frame, group_by: str, noun: str, dimension: Optional[DataType],
                   note: str = '', with_count: bool = False) -> ResultSet:
    best = qe.leader(frame, group_by)
    if best is None:
        return ResultSet.no_data("No sales data available.")
    label, revenue, groups = best
    totals = {'revenue': revenue}
    labels = {}
    if with_count:
        totals = {'groups': groups, 'revenue': revenue}
        labels['groups'] = f"Number of {noun.lower()}s"
    return ResultSet(kind=ResultKind.SUMMARY, operation='ranking', title=f'Top {noun}: "{label}"',
                     totals=totals, labels=labels, note=note, dimension=dimension,
                     count=1 if dimension else None)


def complex_top_n(request: QueryRequest) -> Optional[ResultSet]:
    """'top N ...' with an explicit dimension, optionally inside a month/year."""
    if not (request.mentions('top') and _has_number(request)):
        return None
    n = extract_count(request.query, GENERIC_TOP_DEFAULT)
    frame, filters = _dated_frame(request)

    if request.mentions('customer') and request.mentions('transaction'):
        result = qe.top_transactions(frame, n, title=f"Top {n} Customer Transactions", layout='list')
    elif request.mentions('customer'):
        result = _top_list(frame, 'customer', n, 'Customers')
    elif request.mentions('product', 'item'):
        result = _top_list(frame, 'item', n, 'Products')
    elif request.mentions('transaction'):
        result = qe.top_transactions(frame, n, layout='list')
    else:
        return None
    result.filters = filters
    return result


def follow_up(request: QueryRequest) -> Optional[ResultSet]:
    """
    'top N' / 'show N' / 'need N' without a dimension of its own re-runs the
    last answered grouping with the new count.
    """
    context = request.context
    if not context.has_dimension:
        return None
    if not (request.mentions('top', 'need', 'show') and _has_number(request)):
        return None
    if detect_group_by(request.lower) is not None or request.mentions('transaction'):
        return None

    n = extract_count(request.query, GENERIC_TOP_DEFAULT)
    frame, filters = _dated_frame(request)
    data_type = context.last_data_type

    if data_type == DataType.STOCKGROUP:
        result = _top_list(frame, 'category', n, 'Stock Groups')
    elif data_type == DataType.CUSTOMER:
        result = _top_list(frame, 'customer', n, 'Customers')
    elif data_type == DataType.PRODUCT:
        result = _top_list(frame, 'item', n, 'Products')
    elif data_type == DataType.TRANSACTION:
        result = qe.top_transactions(frame, n, layout='list')
    elif data_type == DataType.MASTERID:
        result = qe.top_transactions(frame, n, title=f"Top {n} Transactions by ID", layout='list',
                                     dimension=DataType.MASTERID)
    elif data_type == DataType.DATE:
        result = qe.ranking(frame, 'transaction_date', 'amount', n, layout='list',
                            title=f"Top {n} Sales Dates by Revenue")
    elif data_type == DataType.ISSALES:
        sales_only = frame[frame['is_sale'].astype(bool)]
        result = qe.top_transactions(sales_only, n, title=f"Top {n} Sales Transactions (issales=true)",
                                     layout='list', dimension=DataType.ISSALES)
    else:
        return None
    result.filters = filters
    return result


def masterid_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('masterid', 'master id', 'transaction id'):
        return None
    frame = request.frame
    if request.mentions('total', 'count', 'how many'):
        return ResultSet(kind=ResultKind.SUMMARY, operation='count',
                         totals={'count': int(frame['master_id'].nunique())},
                         labels={'count': 'Total unique transactions (masterid)'},
                         dimension=DataType.MASTERID)
    if request.mentions('top', 'highest'):
        n = extract_count(request.query, COLUMN_TOP_DEFAULT)
        return qe.top_transactions(frame, n, title=f"Top {n} Transactions by ID", layout='list',
                                   dimension=DataType.MASTERID)
    return None


def issales_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('issales', 'is sales'):
        return None
    is_sale = {'field': 'is_sale', 'condition': True}
    sales = FilterEngine()
    sales.add_filter(dict(is_sale, filter_type='include'))
    others = FilterEngine()
    others.add_filter(dict(is_sale, filter_type='exclude'))
    sales_rows = sales.apply(request.frame)
    other_rows = others.apply(request.frame)

    if request.mentions('total', 'count'):
        totals = {'count:sales': len(sales_rows), 'count:other': len(other_rows)}
        labels = {'count:sales': 'Sales transactions (issales=true)',
                  'count:other': 'Non-sales transactions (issales=false)'}
    elif request.mentions('revenue'):
        totals = {'revenue:sales': float(sales_rows['amount'].sum()),
                  'revenue:other': float(other_rows['amount'].sum())}
        labels = {'revenue:sales': 'Sales revenue (issales=true)',
                  'revenue:other': 'Non-sales revenue (issales=false)'}
    else:
        return None
    return ResultSet(kind=ResultKind.SUMMARY, operation='count', totals=totals, labels=labels,
                     dimension=DataType.ISSALES)


def date_range_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('cp_date', 'transaction date', 'date'):
        return None
    if request.mentions('range', 'period'):
        start, end = request.dataset.date_range()
        return ResultSet(kind=ResultKind.SUMMARY, operation='summary', title='Date range',
                         totals={'start': start, 'end': end})
    if request.mentions('top', 'best'):
        n = extract_count(request.query, COLUMN_TOP_DEFAULT)
        return qe.ranking(request.frame, 'transaction_date', 'amount', n, layout='list',
                          title=f"Top {n} Sales Dates by Revenue")
    return None


def month_wise_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('month wise', 'month-wise', 'monthly'):
        return None
    result = qe.breakdown(request.frame, 'month')
    result.title = 'Month-wise Sales Breakdown'
    return result


def revenue_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('revenue', 'sales', 'income'):
        return None
    metrics = request.dataset.metrics
    if request.mentions('total', 'how much'):
        return _figures(request, 'aggregate',
                        {'revenue': metrics.total_revenue, 'transactions': len(request.dataset)},
                        {'revenue': 'Total Revenue', 'transactions': 'Calculated from transactions'})
    if request.mentions('average', 'avg'):
        return _figures(request, 'average',
                        {'avg_order_value': metrics.avg_order_value, 'orders': metrics.total_orders},
                        {'orders': 'Based on orders'})
    if request.mentions('highest', 'top', 'best'):
        frame, filters = _filtered(request)
        if filters and frame.empty:
            return qe.no_data(', '.join(filters.values()), request.frame, 'ranking')
        result = qe.top_transactions(frame, 1, title='Highest Single Transaction', layout='list')
        result.filters = filters
        return result
    return None


def orders_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('order') or request.mentions('average'):
        return None
    if request.mentions('total', 'how many', 'number'):
        metrics = request.dataset.metrics
        return _figures(request, 'count',
                        {'orders': metrics.total_orders, 'revenue': metrics.total_revenue},
                        {'orders': 'Total Orders', 'revenue': 'Revenue from these orders'})
    return None


def customer_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('customer'):
        return None
    metrics = request.dataset.metrics
    if request.mentions('total', 'how many', 'number', 'unique'):
        return _figures(request, 'count',
                        {'customers': metrics.unique_customers, 'revenue': metrics.total_revenue},
                        {'revenue': 'Total revenue from all customers'})
    if request.mentions('top', 'best', 'biggest'):
        if request.mentions('top') and _has_number(request):
            return _top_list(request.frame, 'customer', extract_count(request.query), 'Customers')
        return _leader_answer(request.frame, 'customer', 'Customer', DataType.CUSTOMER,
                              note='Ask me for "top 3 customers" to see more!')
    return None


def product_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('product', 'item'):
        return None
    if request.mentions('top', 'best', 'popular'):
        if request.mentions('top') and _has_number(request):
            return _top_list(request.frame, 'item', extract_count(request.query), 'Products')
        return _leader_answer(request.frame, 'item', 'Selling Item', DataType.PRODUCT,
                              note='Ask me for "top 3 products" to see more!')
    if request.mentions('how many', 'total', 'number'):
        return _figures(request, 'count',
                        {'items': int(request.frame['item'].nunique()),
                         'quantity': request.dataset.metrics.total_quantity},
                        {'items': 'Unique items', 'quantity': 'Total quantity sold'})
    return None


def quantity_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('quantity', 'units', 'pieces'):
        return None
    metrics = request.dataset.metrics
    return _figures(request, 'aggregate',
                    {'quantity': metrics.total_quantity, 'orders': metrics.total_orders,
                     'avg_quantity': safe_divide(metrics.total_quantity, metrics.total_orders)},
                    {'quantity': 'Total quantity sold', 'orders': 'Across orders',
                     'avg_quantity': 'Average per order'})


def _names_specific(request: QueryRequest, column: str) -> bool:
    return exact_match(request.lower, request.dataset.vocabulary.values_for(column)) is not None


def stock_group_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('stock group', 'category', 'group'):
        return None
    if request.mentions('top') and _has_number(request):
        return _top_list(request.frame, 'category', extract_count(request.query), 'Stock Groups')
    if _names_specific(request, 'category'):
        return None
    return _leader_answer(request.frame, 'category', 'Stock Group', DataType.STOCKGROUP,
                          note='Ask me for "top 3" or "top 5" to see more!', with_count=True)


def region_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('region', 'area', 'location') or _names_specific(request, 'region'):
        return None
    if detect_operation(request.lower) == Operation.BREAKDOWN:
        return None
    return _leader_answer(request.frame, 'region', 'Region', None, with_count=True)


def date_specific_handler(request: QueryRequest) -> Optional[ResultSet]:
    """A named month and/or year gets that period's figures; otherwise the data span."""
    lower = request.lower
    mentions_time = (request.mentions('when', 'date', 'period', 'month', *MONTH_NAMES)
                     or YEAR_PATTERN.search(lower) is not None)
    if not mentions_time:
        return None

    _, period = extract_periods(lower)
    if period is not None:
        subset = FilterEngine.from_entities(period=period).apply(request.frame)
        if subset.empty:
            return qe.no_data(period.label, request.frame)
        return qe.entity_summary(subset, f"Sales data for {period.label}", with_customers=True)

    start, end = request.dataset.date_range()
    return ResultSet(kind=ResultKind.SUMMARY, operation='summary', title='Data Period',
                     totals={'start': start, 'end': end,
                             'months': (end - start).days // 30,
                             'revenue': request.dataset.metrics.total_revenue},
                     labels={'months': 'Approximate months', 'revenue': 'Revenue in this period'})


def compare_hint_handler(request: QueryRequest) -> Optional[ResultSet]:
    if request.mentions('compare', 'vs', 'versus'):
        return ResultSet.text(COMPARE_HINT, operation='compare')
    return None


def trend_handler(request: QueryRequest) -> Optional[ResultSet]:
    if request.mentions('trend', 'growth', 'increasing', 'decreasing'):
        return qe.trend(request.frame)
    return None


def summary_handler(request: QueryRequest) -> Optional[ResultSet]:
    if not request.mentions('summary', 'overview', 'tell me about'):
        return None
    metrics = request.dataset.metrics
    return ResultSet(kind=ResultKind.SUMMARY, operation='summary', title="Here's your sales summary",
                     totals={'revenue': metrics.total_revenue, 'orders': metrics.total_orders,
                             'customers': metrics.unique_customers, 'quantity': metrics.total_quantity,
                             'avg_order_value': metrics.avg_order_value, 'records': len(request.dataset)},
                     labels={'revenue': 'Total Revenue', 'orders': 'Total Orders',
                             'quantity': 'Total Quantity', 'records': 'Transactions'})


# Column -> (keywords that ask about it, display noun)
ENTITY_ANALYSIS = [
    ('customer', ('customer',), 'Customer'),
    ('item', ('product', 'item'), 'Product'),
    ('category', ('stock group', 'category'), 'Stock Group'),
    ('region', ('region',), 'Region'),
]

ENTITY_DIMENSIONS = {
    'customer': DataType.CUSTOMER,
    'item': DataType.PRODUCT,
    'category': DataType.STOCKGROUP,
}


def entity_analysis_handler(request: QueryRequest) -> Optional[ResultSet]:
    """Figures for one customer / product / stock group / region named in the query."""
    vocabulary = request.dataset.vocabulary
    frame = request.frame
    month_wise = request.mentions('month', 'wise')

    if request.mentions('customer') and month_wise:
        name = match_column(request.query, vocabulary, 'customer')
        if name:
            return qe.month_wise_entity(frame[frame['customer'] == name], f'Customer "{name}"')

    if month_wise and not request.mentions('customer', 'product', 'item'):
        result = qe.breakdown(frame, 'month')
        result.title = 'Month-wise Sales Breakdown'
        return result

    if request.mentions('top', 'how many'):
        return None
    for column, words, noun in ENTITY_ANALYSIS:
        if not request.mentions(*words):
            continue
        name = match_column(request.query, vocabulary, column)
        if not name:
            continue
        note = ''
        if column == 'customer':
            note = 'Ask for "month wise sales for [customer name]" to see detailed breakdown!'
        return qe.entity_summary(frame[frame[column] == name], f'{noun} "{name}" analysis', note=note,
                                 dimension=ENTITY_DIMENSIONS.get(column))
    return None


def _universal_metric(request: QueryRequest) -> str:
    if request.mentions('quantity', 'units', 'qty'):
        return 'quantity'
    if request.mentions('order', 'transaction'):
        return 'master_id'
    return 'amount'


def universal_handler(request: QueryRequest) -> Optional[ResultSet]:
    """
    Generic operation pipeline: detect operation, grouping, metric and limit,
    filter by every categorical value named verbatim plus the month/year,
    then execute. A plain listing is left to the later stages.
    """
    lower = request.lower
    operation = detect_operation(lower)
    if operation == Operation.LIST:
        return None

    text_filters = {}
    for column in ENTITY_COLUMNS:
        value = exact_match(lower, request.dataset.vocabulary.values_for(column))
        if value:
            text_filters[column] = value

    periods, date_filter = extract_periods(lower)
    if operation == Operation.COMPARE:
        engine = FilterEngine.from_entities(text_filters)
    else:
        engine = FilterEngine.from_entities(text_filters, date_filter)

    return qe.execute(
        operation,
        engine.apply(request.frame),
        group_by=detect_group_by(lower),
        metric=_universal_metric(request),
        limit=extract_count(request.query, UNIVERSAL_LIMIT),
        periods=periods,
        filters=engine.describe(),
    )


def debug_handler(request: QueryRequest) -> Optional[ResultSet]:
    if request.mentions('debug', 'show actual', 'real data'):
        return qe.debug_info(request.frame)
    return None


def help_handler(request: QueryRequest) -> Optional[ResultSet]:
    if request.mentions('help', 'what can you', 'how to'):
        return ResultSet.text(HELP_TEXT.format(records=len(request.dataset)), operation='help')
    return None


def fallback(request: QueryRequest) -> ResultSet:
    return ResultSet.text(FALLBACK_TEXT, operation='fallback')


COLUMN_HANDLERS: List[Tuple[str, Handler]] = [
    ('complex_top_n', complex_top_n),
    ('masterid', masterid_handler),
    ('issales', issales_handler),
    ('date_range', date_range_handler),
    ('month_wise', month_wise_handler),
    ('revenue', revenue_handler),
    ('orders', orders_handler),
    ('customer', customer_handler),
    ('product', product_handler),
    ('quantity', quantity_handler),
    ('stock_group', stock_group_handler),
    ('region', region_handler),
    ('date_specific', date_specific_handler),
    ('compare_hint', compare_hint_handler),
    ('trend', trend_handler),
    ('summary', summary_handler),
    ('entity_analysis', entity_analysis_handler),
    ('universal', universal_handler),
]

COMMAND_HANDLERS: List[Tuple[str, Handler]] = [
    ('debug', debug_handler),
    ('help', help_handler),
]
