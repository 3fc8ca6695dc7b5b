import pandas as pd
import pytest

from sales_chat_agents import Operation, Period, ResultKind
from sales_chat_agents import query_engine as qe
from sales_chat_agents.filter_engine import FilterEngine


def test_breakdown_is_repeatable_and_leaves_frame_alone(ledger):
    before = ledger.frame.copy()
    first = qe.breakdown(ledger.frame, 'customer')
    second = qe.breakdown(ledger.frame, 'customer')
    assert first.rows == second.rows
    assert ledger.frame.equals(before)


def test_breakdown_orders(ledger):
    by_customer = qe.breakdown(ledger.frame, 'customer')
    assert by_customer.column_values('label') == ['Acme Traders', 'Shree Builders', 'Zen Foods', 'Kiran Hardware']
    assert by_customer.rows[0]['orders'] == 2
    assert by_customer.rows[0]['transactions'] == 3

    by_month = qe.breakdown(ledger.frame, 'month')
    assert by_month.column_values('label') == ['April 2024', 'May 2024', 'June 2024', 'April 2025']


@pytest.mark.parametrize("spec", [
    {'customer': 'Zen Foods'},
    {'region': 'North'},
    {'category': 'Pipes'},
])
def test_aggregate_matches_filtered_sum(ledger, spec):
    subset = FilterEngine.from_entities(spec).apply(ledger.frame)
    result = qe.aggregate(subset)
    assert result.totals['revenue'] == pytest.approx(subset['amount'].sum())


def test_ranking_is_sorted_and_capped(ledger):
    result = qe.ranking(ledger.frame, 'customer', 'amount', 3)
    revenues = result.column_values('revenue')
    assert len(revenues) == 3
    assert revenues == sorted(revenues, reverse=True)
    assert result.count == 3

    everything = qe.ranking(ledger.frame, 'customer', 'amount', 10)
    assert len(everything.rows) == 4


def test_bottom_ranking_reverses_full_top_ranking(ledger):
    top = qe.ranking(ledger.frame, 'item', 'quantity', 10)
    bottom = qe.ranking(ledger.frame, 'item', 'quantity', 10, bottom=True)
    assert bottom.column_values('label') == list(reversed(top.column_values('label')))


def test_ranking_ties_keep_dataset_order(ledger):
    result = qe.ranking(ledger.frame, 'item', 'quantity', 4)
    assert result.column_values('label') == ['Binding Wire', 'Cement Bag', 'PVC Pipe', 'Steel Rod']
    assert result.column_values('quantity') == [60, 60, 18, 10]


def test_ranking_orders_by_distinct_orders(ledger):
    result = qe.ranking(ledger.frame, 'customer', 'master_id', 1)
    assert result.rows == [{'label': 'Zen Foods', 'orders': 3}]


def test_ranking_without_grouping_ranks_transactions(ledger):
    result = qe.ranking(ledger.frame, None, 'amount', 2)
    assert result.column_values('amount') == [8000, 5000]


@pytest.mark.parametrize("operation", list(Operation))
def test_empty_frame_is_no_data(empty, operation):
    result = qe.execute(operation, empty.frame, group_by='customer', periods=[Period('april'), Period('may')])
    assert result.kind == ResultKind.NO_DATA


def test_empty_frame_helpers_never_raise(empty):
    assert qe.ranking(empty.frame, 'customer').is_no_data
    assert qe.top_transactions(empty.frame).is_no_data
    assert qe.trend(empty.frame).is_no_data
    assert qe.leader(empty.frame, 'customer') is None
    assert qe.top_groups_in_period(empty.frame, Period('april'), 'customer', 5, 'x').is_no_data


def test_growth_percent():
    assert qe.growth_percent(150, 200) == pytest.approx(33.3333, rel=1e-4)
    assert qe.growth_percent(0, 200) is None


def test_comparison_with_empty_base_period(ledger):
    result = qe.comparison(ledger.frame, [Period('march', 2024), Period('april', 2024)])
    assert result.column_values('revenue') == [0, 9000]
    assert result.totals['growth'] is None


def test_comparison_needs_two_periods(ledger):
    result = qe.comparison(ledger.frame, [Period('april')])
    assert result.kind == ResultKind.MESSAGE


def test_count_and_average(ledger):
    assert qe.count(ledger.frame, 'region').totals == {'count': 4}
    assert qe.count(ledger.frame).totals == {'count': 8}
    average = qe.average(ledger.frame)
    assert average.totals['avg_revenue'] == pytest.approx(3000)


def test_top_groups_in_period_reports_period_total(ledger):
    result = qe.top_groups_in_period(ledger.frame, Period('april', 2024), 'customer', 10, 'April')
    assert result.column_values('label') == ['Acme Traders', 'Zen Foods']
    assert result.totals == {'revenue': 9000}


def test_missing_period_carries_available_range(ledger):
    result = qe.top_groups_in_period(ledger.frame, Period('march'), 'customer', 10, 'March')
    assert result.is_no_data
    assert result.totals['start'] == pd.Timestamp('2024-04-02').date()


def test_comparison_with_leaders(scenario):
    result = qe.comparison_with_leaders(scenario.frame, Period('april'), Period('may'))
    assert result.kind == ResultKind.COMPOSITE
    summary = result.sections[-1]
    assert summary.totals['revenue:0'] == 150
    assert summary.totals['revenue:1'] == 200
    assert summary.totals['growth'] == pytest.approx(33.3333, rel=1e-4)


def test_trend_halves(ledger):
    result = qe.trend(ledger.frame)
    assert result.totals['revenue:first'] == 17000
    assert result.totals['revenue:second'] == 7000
    assert result.totals['trend'] == 'decreasing'
