"""
Test app for sales-chat-agents.
A simple Flask app serving the sample sales ledger and a chat endpoint.
"""

import sys
import os
import logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from flask import Flask, request, jsonify
from dotenv import load_dotenv

load_dotenv()

from sales_chat_agents import SalesChatBot, SalesDataset, SalesDataError, SalesLLMBot
from data import SAMPLE_SALES, SAMPLE_METRICS

logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO'))
logger = logging.getLogger(__name__)

app = Flask(__name__)


def _make_llm_bot():
    """Claude is optional: without a key every turn is answered locally."""
    if not os.getenv('ANTHROPIC_API_KEY'):
        return None
    try:
        return SalesLLMBot()
    except ValueError as e:
        logger.warning("LLM disabled: %s", e)
        return None


# --- State (in-memory, single-user for testing) ---
chat_bot = SalesChatBot(SalesDataset.from_rows(SAMPLE_SALES, SAMPLE_METRICS), llm_bot=_make_llm_bot())


# --- Data ---

@app.route('/api/data')
def get_data():
    dataset = chat_bot.dataset
    date_range = dataset.date_range()
    return jsonify({
        'data': dataset.to_rows(),
        'total': len(dataset),
        'metrics': dataset.metrics.to_dict(),
        'range': [d.isoformat() for d in date_range] if date_range else None,
    })


@app.route('/api/data', methods=['POST'])
def load_data():
    payload = request.json or {}
    try:
        dataset = chat_bot.load_dataset(payload.get('data', []), payload.get('metrics'))
    except SalesDataError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'total': len(dataset)})


# --- Chat ---

@app.route('/api/chat', methods=['POST'])
def chat():
    message = (request.json or {}).get('message', '').strip()
    if not message:
        return jsonify({'error': 'No message provided'}), 400

    result = chat_bot.process_message(message)
    if not result['success']:
        return jsonify({'error': result['error']}), 500
    return jsonify(result['response'])


@app.route('/api/chat/clear', methods=['POST'])
def clear_chat():
    chat_bot.clear()
    return jsonify({'ok': True})


@app.route('/api/context')
def get_context():
    return jsonify({
        'context': chat_bot.context.to_dict(),
        'history': len(chat_bot.history),
        'llm': chat_bot.llm_bot is not None,
    })


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5050))
    print(f"Starting sales-chat-agents test app at http://localhost:{port}")
    app.run(debug=True, port=port)
