import pytest

from sales_chat_agents import FormatSettings, SalesDataset

SCENARIO_ROWS = [
    {"customer": "A", "amount": 100, "quantity": 2, "masterId": 1, "date": "2024-04-01"},
    {"customer": "B", "amount": 200, "quantity": 1, "masterId": 2, "date": "2024-05-01"},
    {"customer": "A", "amount": 50, "quantity": 1, "masterId": 3, "date": "2024-04-15"},
]

LEDGER_ROWS = [
    {"masterid": "m1", "customer": "Acme Traders", "item": "Steel Rod", "category": "Steel", "region": "North",
     "amount": 5000, "quantity": 10, "cp_date": "2024-04-02", "issales": True, "country": "India"},
    {"masterid": "m1", "customer": "Acme Traders", "item": "Binding Wire", "category": "Wire", "region": "North",
     "amount": 1000, "quantity": 20, "cp_date": "2024-04-02", "issales": True, "country": "India"},
    {"masterid": "m2", "customer": "Zen Foods", "item": "PVC Pipe", "category": "Pipes", "region": "South",
     "amount": 3000, "quantity": 15, "cp_date": "2024-04-10", "issales": True, "country": "India"},
    {"masterid": "m3", "customer": "Shree Builders", "item": "Cement Bag", "category": "Cement", "region": "West",
     "amount": 8000, "quantity": 40, "cp_date": "2024-05-05", "issales": True, "country": "India"},
    {"masterid": "m4", "customer": "Zen Foods", "item": "Binding Wire", "category": "Wire", "region": "South",
     "amount": 2000, "quantity": 40, "cp_date": "2024-05-20", "issales": True, "country": "India"},
    {"masterid": "m6", "customer": "Acme Traders", "item": "Cement Bag", "category": "Cement", "region": "North",
     "amount": 4000, "quantity": 20, "cp_date": "2024-06-11", "issales": True, "country": "India"},
    {"masterid": "m7", "customer": "Zen Foods", "item": "PVC Pipe", "category": "Pipes", "region": "South",
     "amount": -500, "quantity": -2, "cp_date": "2024-06-15", "issales": False, "country": "India"},
    {"masterid": "m5", "customer": "Kiran Hardware", "item": "PVC Pipe", "category": "Pipes", "region": "East",
     "amount": 1500, "quantity": 5, "cp_date": "2025-04-03", "issales": True, "country": "India"},
]


@pytest.fixture
def scenario():
    """The three-record dataset: A 100 + 50 in April, B 200 in May."""
    return SalesDataset.from_rows(SCENARIO_ROWS)


@pytest.fixture
def ledger():
    return SalesDataset.from_rows(LEDGER_ROWS)


@pytest.fixture
def empty():
    return SalesDataset.from_rows([])


@pytest.fixture
def settings():
    return FormatSettings()
