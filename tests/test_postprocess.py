from sales_chat_agents.postprocess import (
    cap_words, clarify_paired_amounts, correct_currency, detect_currency, postprocess_response,
    truncate_off_topic,
)


def test_detect_currency_by_country_majority():
    assert detect_currency([{'country': 'India'}] * 3 + [{'country': 'USA'}]) == '₹'
    assert detect_currency([{'country': 'United States'}] * 2 + [{'country': 'India'}]) == '$'


def test_detect_currency_matches_whole_country_names():
    assert detect_currency([{'country': 'Jerusalem'}], fallback='€') == '€'
    assert detect_currency([{'country': 'Busan'}, {'country': 'USA'}], fallback='€') == '$'


def test_detect_currency_from_records(ledger):
    assert detect_currency(ledger.records) == '₹'


def test_detect_currency_from_text_markers():
    assert detect_currency([{'customer': 'X', 'note': 'paid in USD'}]) == '$'
    assert detect_currency([{'customer': 'X', 'note': 'paid in rupees'}]) == '₹'


def test_detect_currency_fallback():
    assert detect_currency([]) == '₹'
    assert detect_currency([{'customer': 'X'}], fallback='€') == '€'


def test_correct_currency_to_rupees():
    assert correct_currency("Total: $1,234.50 USD", '₹') == "Total: ₹1,234.50 INR"
    assert correct_currency("worth 500 dollars", '₹') == "worth 500 rupees"
    assert correct_currency("paid in US Dollars", '₹') == "paid in Indian Rupees"


def test_correct_currency_to_dollars():
    assert correct_currency("₹200 or 3 rupees", '$') == "$200 or 3 dollars"
    assert correct_currency("in Indian Rupees (INR)", '$') == "in US Dollars (USD)"


def test_correct_currency_leaves_matching_text_alone():
    text = "Acme Traders bought ₹10,000.00 worth of steel."
    assert correct_currency(text, '₹') == text


def test_paired_amounts():
    assert clarify_paired_amounts("Revenue ₹100 (₹500)", '₹') == "Revenue ₹100 (Profit: ₹500)"
    assert clarify_paired_amounts("Revenue ₹1,000 (₹1,200)", '₹') == "Revenue ₹1,000"


def test_truncate_off_topic():
    text = ("Acme Traders led April with strong steel rod orders this month. "
            "A recent study of regional markets suggests otherwise.")
    assert truncate_off_topic(text) == "Acme Traders led April with strong steel rod orders this month."


def test_truncate_keeps_short_heads():
    text = "Sales are up. A python script could tell more."
    assert truncate_off_topic(text) == text


def test_cap_words():
    text = ' '.join(['word'] * 205)
    capped = cap_words(text, 200)
    assert capped.endswith('...')
    assert len(capped.split()) == 200
    assert cap_words("short answer", 200) == "short answer"


def test_postprocess_pipeline():
    assert postprocess_response("Top customer spent $200 (USD).", '₹') == "Top customer spent ₹200 (INR)."
