import importlib
import sys
from pathlib import Path

import pytest

TESTAPP_DIR = Path(__file__).parent.parent / 'testapp'


@pytest.fixture
def client(monkeypatch):
    pytest.importorskip('flask')
    pytest.importorskip('dotenv')
    monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
    monkeypatch.syspath_prepend(str(TESTAPP_DIR))
    for name in ('app', 'data'):
        sys.modules.pop(name, None)
    module = importlib.import_module('app')
    # load_dotenv may have picked up a key from a local .env
    module.chat_bot.llm_bot = None
    return module.app.test_client()


def test_data_route(client):
    payload = client.get('/api/data').get_json()
    assert payload['total'] == 17
    assert payload['range'] == ['2024-04-02', '2024-06-28']


def test_chat_route_updates_context(client):
    response = client.post('/api/chat', json={'message': 'top 3 customers'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['answer'].startswith('**Top 3 Customers by Revenue:**')
    assert body['source'] == 'local'

    context = client.get('/api/context').get_json()
    assert context['context'] == {'lastTopic': 'customer', 'lastDataType': 'customer', 'lastCount': 3}
    assert context['history'] == 2


def test_chat_requires_message(client):
    assert client.post('/api/chat', json={'message': ' '}).status_code == 400


def test_clear_route(client):
    client.post('/api/chat', json={'message': 'top 3 customers'})
    assert client.post('/api/chat/clear').get_json() == {'ok': True}
    assert client.get('/api/context').get_json()['context']['lastDataType'] is None


def test_bad_rows_are_rejected(client):
    response = client.post('/api/data', json={'data': [{'customer': 'X'}]})
    assert response.status_code == 400
    assert 'missing required field' in response.get_json()['error']
