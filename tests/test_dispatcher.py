from sales_chat_agents import ConversationContext, DataType, Topic, answer_query, resolve_query


def test_total_revenue(scenario, settings):
    text, _ = answer_query("total revenue", scenario, settings=settings)
    assert '• Total Revenue: ₹350.00' in text


def test_top_customer(scenario, settings):
    text, context = answer_query("top 1 customers", scenario, settings=settings)
    assert text == '**Top 1 Customers by Revenue:**\n\n1. **B** - ₹200.00'
    assert context.last_data_type == DataType.CUSTOMER
    assert context.last_count == 1


def test_two_period_comparison(scenario, settings):
    text, _ = answer_query("april vs may", scenario, settings=settings)
    assert '• April Total: ₹150.00' in text
    assert '• May Total: ₹200.00' in text
    assert '• Growth: 33.33%' in text


def test_follow_up_reuses_last_dimension(ledger, settings):
    _, context = answer_query("top 3 customers", ledger, settings=settings)
    assert context == ConversationContext(Topic.CUSTOMER, DataType.CUSTOMER, 3)

    result, stage = resolve_query("top 5", ledger, context)
    assert stage == 'follow_up'
    assert result.dimension == DataType.CUSTOMER
    assert result.count == 5

    text, context = answer_query("top 5", ledger, context, settings)
    assert text.startswith('**Top 5 Customers by Revenue:**')
    assert context.last_count == 5


def test_follow_up_needs_context(ledger):
    _, stage = resolve_query("top 5", ledger)
    assert stage != 'follow_up'


def test_context_kept_when_answer_has_no_dimension(ledger, settings):
    context = ConversationContext.for_dimension(DataType.PRODUCT, 4)
    _, new_context = answer_query("total revenue", ledger, context, settings)
    assert new_context is context


def test_empty_dataset(empty, settings):
    for query in ("total revenue", "top 5 customers", "april vs may", "help", ""):
        text, context = answer_query(query, empty, settings=settings)
        assert text == 'No data available to analyze.'
        assert context == ConversationContext()


def test_transaction_ranking(ledger, settings):
    text, context = answer_query("top 5 sales transactions", ledger, settings=settings)
    assert text.startswith('**Top 5 Sales (Transaction-wise):**')
    assert '| 1 | Shree Builders | Cement Bag | ₹8,000.00 | 05/05/2024 |' in text
    assert context.last_data_type == DataType.TRANSACTION


def test_named_customer_information(ledger, settings):
    text, context = answer_query("tell me about acme traders", ledger, settings=settings)
    assert text.startswith('**Acme Traders Sales Information:**')
    assert '• Total Revenue: ₹10,000.00' in text
    assert context.last_data_type == DataType.CUSTOMER


def test_breakdown_by_region(ledger, settings):
    result, stage = resolve_query("sales by region", ledger)
    assert stage == 'universal'
    assert result.column_values('label') == ['North', 'West', 'South', 'East']


def test_period_without_data_reports_range(ledger, settings):
    text, _ = answer_query("top sales in month of march", ledger, settings=settings)
    assert text == ('No sales data found for March. '
                    'Available data ranges from 02/04/2024 to 03/04/2025.')


def test_help_mentions_record_count(ledger):
    text, _ = answer_query("help", ledger)
    assert 'Your dataset contains **8** records.' in text


def test_unrecognized_query_falls_back(ledger):
    result, stage = resolve_query("hello there", ledger)
    assert stage == 'fallback'
    assert result.message.startswith("I'm not sure I understood that.")


def test_total_revenue_for_month(ledger, settings):
    result, stage = resolve_query("total revenue in april 2024", ledger)
    assert stage == 'revenue'
    assert result.totals == {'revenue': 9000.0, 'transactions': 3}

    text, _ = answer_query("total revenue in april 2024", ledger, settings=settings)
    assert '**Filters Applied:** period=April 2024' in text
    assert '• Total Revenue: ₹9,000.00' in text


def test_total_revenue_for_region(ledger, settings):
    text, _ = answer_query("total revenue for north region", ledger, settings=settings)
    assert '**Filters Applied:** region=North' in text
    assert '• Total Revenue: ₹10,000.00' in text
    assert '• Calculated from transactions: 3' in text


def test_total_sales_for_stock_group(ledger):
    result, _ = resolve_query("total sales for cement", ledger)
    assert result.totals['revenue'] == 12000.0
    assert result.filters == {'category': 'Cement'}


def test_order_and_quantity_totals_follow_month(ledger, settings):
    text, _ = answer_query("how many orders in may", ledger, settings=settings)
    assert '• Total Orders: 2' in text
    assert '• Revenue from these orders: ₹10,000.00' in text

    result, _ = resolve_query("total quantity in june", ledger)
    assert result.totals == {'quantity': 18.0, 'orders': 2, 'avg_quantity': 9.0}
    assert result.filters == {'period': 'June'}


def test_customer_count_follows_month(ledger):
    result, _ = resolve_query("how many customers in april", ledger)
    assert result.totals['customers'] == 3
    assert result.totals['revenue'] == 10500.0


def test_filtered_total_without_rows_reports_range(ledger, settings):
    text, _ = answer_query("total revenue in march", ledger, settings=settings)
    assert text == ('No sales data found for March. '
                    'Available data ranges from 02/04/2024 to 03/04/2025.')


def test_unfiltered_total_uses_dataset_metrics(ledger):
    result, _ = resolve_query("total revenue", ledger)
    assert result.filters == {}
    assert result.totals['revenue'] == ledger.metrics.total_revenue


def test_known_customer_outside_period(ledger, settings):
    text, _ = answer_query("tell me about acme traders in march", ledger, settings=settings)
    assert text == ('No sales data found for Acme Traders in March. '
                    'Available data ranges from 02/04/2024 to 03/04/2025.')


def test_known_product_outside_period(ledger, settings):
    text, _ = answer_query("tell me about pvc pipe in may", ledger, settings=settings)
    assert text.startswith('No sales data found for PVC Pipe in May.')


def test_product_count_follows_month(ledger):
    result, stage = resolve_query("how many products in april", ledger)
    assert stage == 'product'
    assert result.totals == {'items': 3, 'quantity': 50.0}
