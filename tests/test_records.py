from datetime import date

import pytest

from sales_chat_agents import Metrics, SalesDataError, SalesDataset, compute_metrics, normalize_records
from sales_chat_agents.records import normalize_record


def test_normalize_record_accepts_source_spellings():
    record = normalize_record({"customer": " Acme ", "amount": "1,200.50", "quantity": 3,
                               "masterid": 7, "cp_date": "2024-04-02", "issales": "false"})
    assert record.customer == "Acme"
    assert record.amount == 1200.5
    assert record.master_id == 7
    assert record.transaction_date == date(2024, 4, 2)
    assert record.is_sale is False
    assert record.item == ""


def test_missing_required_field_raises():
    with pytest.raises(SalesDataError, match="amount"):
        normalize_records([{"customer": "A", "quantity": 1, "masterId": 1, "date": "2024-04-01"}])


def test_unparseable_values_raise():
    with pytest.raises(SalesDataError):
        normalize_record({"customer": "A", "amount": "lots", "quantity": 1, "masterId": 1, "date": "2024-04-01"})
    with pytest.raises(SalesDataError):
        normalize_record({"customer": "A", "amount": 1, "quantity": 1, "masterId": 1, "date": "someday"})


def test_computed_metrics(scenario):
    metrics = scenario.metrics
    assert metrics.total_revenue == 350
    assert metrics.total_orders == 3
    assert metrics.total_quantity == 4
    assert metrics.unique_customers == 2
    assert metrics.avg_order_value == pytest.approx(116.6667, rel=1e-4)


def test_metrics_from_camel_case():
    metrics = Metrics.from_dict({"totalRevenue": 10, "totalOrders": 2, "avgOrderValue": 5})
    assert metrics.total_revenue == 10.0
    assert metrics.total_orders == 2
    assert metrics.avg_order_value == 5.0
    assert metrics.unique_customers == 0


def test_caller_metrics_are_kept():
    dataset = SalesDataset.from_rows([], {"totalRevenue": 99})
    assert dataset.metrics.total_revenue == 99


def test_empty_dataset(empty):
    assert empty.is_empty
    assert len(empty) == 0
    assert empty.date_range() is None
    assert empty.frame.empty
    assert compute_metrics([]) == Metrics()


def test_dataset_views(ledger):
    assert len(ledger) == 8
    assert ledger.date_range() == (date(2024, 4, 2), date(2025, 4, 3))
    assert str(ledger.frame['transaction_date'].dtype).startswith('datetime64')
    assert ledger.to_rows()[0]['transaction_date'] == '2024-04-02'


def test_from_records_recomputes_metrics(ledger):
    north = [r for r in ledger.records if r.region == 'North']
    subset = SalesDataset.from_records(north)
    assert len(subset) == 3
    assert subset.metrics.total_revenue == 10000
    assert subset.vocabulary.customers == ['Acme Traders']
