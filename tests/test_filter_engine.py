import pytest

from sales_chat_agents import FilterEngine, Period
from sales_chat_agents.filter_engine import filter_by_period


def test_from_entities_combines_fields_and_period(ledger):
    engine = FilterEngine.from_entities({'customer': 'Zen Foods'}, Period('april', 2024))
    subset = engine.apply(ledger.frame)
    assert list(subset['amount']) == [3000]
    assert engine.describe() == {'customer': 'Zen Foods', 'period': 'April 2024'}


def test_yearless_period_matches_every_year(ledger):
    subset = filter_by_period(ledger.frame, Period('april'))
    assert len(subset) == 4
    assert subset['amount'].sum() == 10500


def test_period_filter_is_idempotent(ledger):
    period = Period('april', 2024)
    once = filter_by_period(ledger.frame, period)
    twice = filter_by_period(once, period)
    assert twice.equals(once)


def test_exclude_filter(ledger):
    engine = FilterEngine()
    engine.add_filter({'field': 'is_sale', 'condition': True, 'filter_type': 'exclude'})
    subset = engine.apply(ledger.frame)
    assert list(subset['master_id']) == ['m7']
    assert engine.describe() == {'is_sale': 'not True'}


def test_disabled_filters_are_skipped(ledger):
    engine = FilterEngine()
    engine.add_filter({'field': 'region', 'condition': 'North', 'enabled': False})
    assert len(engine.apply(ledger.frame)) == len(ledger)


def test_add_filter_keeps_existing_id():
    engine = FilterEngine()
    assert engine.add_filter({'id': 'f1', 'field': 'region', 'condition': 'North'}) == 'f1'
    assert engine.get_active_filters()[0]['filter_type'] == 'include'


def test_unknown_field_raises(ledger):
    engine = FilterEngine.from_entities({'colour': 'red'})
    with pytest.raises(KeyError):
        engine.apply(ledger.frame)
