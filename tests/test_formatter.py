from datetime import date

import pytest

from sales_chat_agents import FormatSettings, ResultKind, ResultSet, render
from sales_chat_agents import query_engine as qe
from sales_chat_agents.config import WESTERN
from sales_chat_agents.formatter import (
    format_currency, format_date, format_percent, format_quantity, format_value, group_digits,
)

DOLLARS = FormatSettings(currency_symbol='$', grouping=WESTERN)


def test_indian_and_western_grouping():
    assert group_digits('123') == '123'
    assert group_digits('1234567') == '12,34,567'
    assert group_digits('123456789') == '12,34,56,789'
    assert group_digits('1234567', WESTERN) == '1,234,567'


def test_currency():
    assert format_currency(1234567.5) == '₹12,34,567.50'
    assert format_currency(1234567.5, DOLLARS) == '$1,234,567.50'
    assert format_currency(-500) == '-₹500.00'


def test_missing_values_render_as_na():
    assert format_currency(None) == 'n/a'
    assert format_currency(float('nan')) == 'n/a'
    assert format_percent(None) == 'n/a'
    assert format_value('growth', None) == 'n/a'


def test_value_kinds():
    assert format_quantity(12.0) == '12 units'
    assert format_percent(100 / 3) == '33.33%'
    assert format_date(date(2024, 4, 2)) == '02/04/2024'
    assert format_value('revenue:0', 150) == '₹150.00'
    assert format_value('customers', 1234) == '1,234'
    assert format_value('label', '') == 'Unknown'


def test_unknown_grouping_is_rejected():
    with pytest.raises(ValueError):
        FormatSettings(grouping='roman')


def test_render_ranked_table(ledger):
    text = render(qe.ranking(ledger.frame, 'customer', 'amount', 2))
    assert text.startswith('**Top 2 Customers by Revenue:**')
    assert '| # | Customer | Revenue |' in text
    assert '| 1 | Acme Traders | ₹10,000.00 |' in text
    assert '| 2 | Shree Builders | ₹8,000.00 |' in text


def test_render_list_with_filters(ledger, settings):
    result = qe.ranking(ledger.frame, 'customer', 'amount', 1, layout='list', filters={'region': 'North'})
    assert render(result, settings) == (
        '**Top 1 Customers by Revenue:**\n\n'
        '**Filters Applied:** region=North\n\n'
        '1. **Acme Traders** - ₹10,000.00'
    )


def test_render_no_data_with_range(ledger):
    text = render(qe.no_data('March 2024', ledger.frame))
    assert text == ('No sales data found for March 2024. '
                    'Available data ranges from 02/04/2024 to 03/04/2025.')


def test_render_summary_bullets():
    result = ResultSet(kind=ResultKind.SUMMARY, title='Totals',
                       totals={'revenue': 350.0, 'growth': None}, labels={'revenue': 'Total Revenue'})
    assert render(result) == '**Totals:**\n\n• Total Revenue: ₹350.00\n• Growth: n/a'


def test_render_is_pure(ledger):
    result = qe.breakdown(ledger.frame, 'month')
    assert render(result) == render(result)
    assert 'nan' not in render(result).lower()
