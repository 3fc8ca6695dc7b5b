from sales_chat_agents import extract_vocabulary


def test_values_in_first_seen_order(ledger):
    vocabulary = ledger.vocabulary
    assert vocabulary.customers == ['Acme Traders', 'Zen Foods', 'Shree Builders', 'Kiran Hardware']
    assert vocabulary.items == ['Steel Rod', 'Binding Wire', 'PVC Pipe', 'Cement Bag']
    assert vocabulary.categories == ['Steel', 'Wire', 'Pipes', 'Cement']
    assert vocabulary.regions == ['North', 'South', 'West', 'East']


def test_blank_values_are_not_vocabulary(scenario):
    assert scenario.vocabulary.customers == ['A', 'B']
    assert scenario.vocabulary.items == []


def test_column_partition(scenario):
    vocabulary = scenario.vocabulary
    assert vocabulary.numeric_columns == ['amount', 'quantity']
    assert vocabulary.date_columns == ['transaction_date']
    assert 'customer' in vocabulary.text_columns
    assert 'master_id' not in vocabulary.numeric_columns


def test_empty_vocabulary():
    vocabulary = extract_vocabulary([])
    assert vocabulary.is_empty
    assert vocabulary.customers == []
    assert vocabulary.numeric_columns == []
