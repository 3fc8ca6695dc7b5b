"""
Structured answer path - turns a QueryAnalysis (intent + entities +
modifiers) into a ResultSet, or None when the analysis doesn't pin down an
answer and the dispatcher should try the next stage.
"""

import logging
from typing import Optional

from . import query_engine as qe
from .classifier import Intent
from .context import DataType, Topic
from .filter_engine import FilterEngine
from .query_analysis import QueryRequest
from .results import ResultKind, ResultSet

logger = logging.getLogger(__name__)

RANKING_DEFAULT = 5
DATES_DEFAULT = 3
PERIOD_LEADERS = 10

CLARIFICATION_HELP = (
    "I understand you want a different view. Could you please clarify:\n\n"
    "• For transaction-wise top sales: \"top 5 sales transactions\"\n"
    "• For customer-wise top sales: \"top 5 customers by sales\"\n"
    "• For product-wise top sales: \"top 5 products by sales\"\n"
    "• For period comparisons: \"april vs may top customer sales\"\n\n"
    "What specific data would you like to see?"
)


def _scoped(request: QueryRequest, with_date: bool = True):
    """
    The working subset: stock group / region entities always narrow it; the
    single month/year filter only when `with_date`.
    """
    entities = request.entities
    text_filters = {k: v for k, v in entities.text_filters().items() if k in ('category', 'region')}
    engine = FilterEngine.from_entities(text_filters, entities.date if with_date else None)
    return engine.apply(request.frame), engine.describe()


def _unknown_entity(kind: str, name: str, values) -> ResultSet:
    sample = ', '.join(values[:5])
    return ResultSet.no_data(
        f'I couldn\'t find any sales data for "{name}". Available {kind} include: {sample}...')


def _entity_rows(request: QueryRequest, column: str, name: str, kind: str, values):
    """
    (rows, filter labels, missing) for one named customer/product inside the
    working subset. `missing` is the NO_DATA answer when no rows remain: an
    unknown name when the dataset has none for it, otherwise no data for the
    name in the stated period/group/region.
    """
    frame, filters = _scoped(request)
    subset = frame[frame[column] == name]
    if not subset.empty:
        return subset, filters, None
    if not (request.frame[column] == name).any():
        return subset, filters, _unknown_entity(kind, name, values)
    scope = ', '.join(filters.values())
    return subset, filters, qe.no_data(f"{name} in {scope}" if scope else name, request.frame)


def customer_answer(request: QueryRequest) -> Optional[ResultSet]:
    entities = request.entities
    analysis = request.analysis
    name = entities.customer
    customers = request.dataset.vocabulary.customers

    if analysis.modifiers.month_wise:
        subset, _, missing = _entity_rows(request, 'customer', name, 'customers', customers)
        if missing is not None:
            return missing
        return qe.month_wise_entity(subset, f'Customer "{name}"')

    if analysis.intent in (Intent.INFORMATION, Intent.CALCULATION):
        subset, filters, missing = _entity_rows(request, 'customer', name, 'customers', customers)
        if missing is not None:
            return missing
        result = qe.entity_summary(
            subset, f"{name} Sales Information",
            note=f'Ask for "month wise sales for {name}" to see detailed breakdown by month.',
            dimension=DataType.CUSTOMER)
        result.filters = filters
        return result
    return None


def product_answer(request: QueryRequest) -> Optional[ResultSet]:
    entities = request.entities
    name = entities.product
    subset, filters, missing = _entity_rows(request, 'item', name, 'products',
                                            request.dataset.vocabulary.items)
    if missing is not None:
        return missing

    if request.mentions('customer'):
        return qe.top_customers_for_product(subset, name, entities.count or RANKING_DEFAULT)

    result = qe.entity_summary(
        subset, f"{name} Sales Information",
        note=f'Ask for "top 5 customers for {name}" to see customer breakdown!',
        dimension=DataType.PRODUCT)
    result.labels['quantity'] = 'Total Quantity Sold'
    result.filters = filters
    return result


def ranking_answer(request: QueryRequest) -> Optional[ResultSet]:
    entities = request.entities
    periods = entities.periods
    single_period = periods[0] if len(periods) == 1 else None

    if single_period and request.mentions('best sales date') and request.mentions('month'):
        frame, _ = _scoped(request, with_date=False)
        return qe.top_dates(frame, single_period, entities.count or DATES_DEFAULT)

    if single_period and request.mentions('sales') and request.mentions('month'):
        frame, _ = _scoped(request, with_date=False)
        n = entities.count or RANKING_DEFAULT
        return qe.top_groups_in_period(frame, single_period, 'customer', n,
                                       title=f"Top {n} Sales - {single_period.label} (Customer-wise)")

    frame, filters = _scoped(request)

    if request.mentions('sales') and not request.mentions('customer', 'product', 'item', 'month'):
        n = entities.count or RANKING_DEFAULT
        result = qe.top_transactions(frame, n, title=f"Top {n} Sales (Transaction-wise)")
        result.filters = filters
        return result

    if request.mentions('items') and request.mentions('quantity'):
        n = entities.count or RANKING_DEFAULT
        return qe.ranking(frame, 'item', 'quantity', n, filters=filters,
                          title=f"Top {n} Items by Quantity Sold")

    if request.mentions('items') and request.mentions('revenue', 'sales'):
        n = entities.count or RANKING_DEFAULT
        return qe.ranking(frame, 'item', 'amount', n, filters=filters, title=f"Top {n} Items by Revenue")

    if entities.count and (entities.metric == 'customer' or request.mentions('customer')):
        return qe.ranking(frame, 'customer', 'amount', entities.count, filters=filters, layout='list')
    return None


def comparison_answer(request: QueryRequest) -> ResultSet:
    first, second = request.entities.periods[:2]
    frame, _ = _scoped(request, with_date=False)
    return qe.comparison_with_leaders(frame, first, second, leaders=RANKING_DEFAULT)


def temporal_answer(request: QueryRequest) -> ResultSet:
    period = request.entities.periods[0]
    frame, _ = _scoped(request, with_date=False)
    return qe.top_groups_in_period(frame, period, 'customer', PERIOD_LEADERS,
                                   title=f"Top Customer Sales - {period.label}")


def clarification_answer(request: QueryRequest) -> ResultSet:
    context = request.context
    sales_context = context.last_topic == Topic.SALES or context.last_data_type == DataType.TRANSACTION
    if sales_context and request.mentions('not') and request.mentions('item'):
        n = request.entities.count or RANKING_DEFAULT
        frame, _ = _scoped(request)
        return qe.top_transactions(frame, n, title=f"Top {n} Sales (Transaction-wise)")
    return ResultSet.text(CLARIFICATION_HELP, operation='clarification')


def overall_answer(request: QueryRequest) -> ResultSet:
    metrics = request.dataset.metrics
    start, end = request.dataset.date_range()
    return ResultSet(
        kind=ResultKind.SUMMARY,
        operation='summary',
        title='Overall Sales Information',
        totals={
            'revenue': metrics.total_revenue,
            'orders': metrics.total_orders,
            'quantity': metrics.total_quantity,
            'customers': metrics.unique_customers,
            'avg_order_value': metrics.avg_order_value,
            'start': start,
            'end': end,
        },
        labels={'revenue': 'Total Revenue', 'orders': 'Total Orders', 'quantity': 'Total Quantity',
                'start': 'Data From', 'end': 'Data To'},
    )


def answer_structured(request: QueryRequest) -> Optional[ResultSet]:
    """
    Try the intent-driven answers in priority order: named customer, named
    product, ranking, two-period comparison, single-period analysis,
    clarification, overall information.
    """
    analysis = request.analysis
    entities = analysis.entities
    intent = analysis.intent
    logger.debug("Analysis for %r: intent=%s entities=%s", request.query, intent.value, entities)

    if entities.customer:
        result = customer_answer(request)
        if result is not None:
            return result

    if entities.product:
        return product_answer(request)

    if intent == Intent.RANKING:
        result = ranking_answer(request)
        if result is not None:
            return result

    if intent == Intent.COMPARISON and len(entities.periods) >= 2:
        return comparison_answer(request)

    if intent == Intent.TEMPORAL_ANALYSIS and len(entities.periods) == 1:
        return temporal_answer(request)

    if intent == Intent.CLARIFICATION:
        return clarification_answer(request)

    if intent == Intent.INFORMATION and request.mentions('revenue', 'sales'):
        return overall_answer(request)
    return None
