"""
SalesChatBot - one chat session over one sales dataset.

Each turn goes to the LLM collaborator when one is configured, and to the
local rule-based dispatcher otherwise or when the LLM call fails. Turns are
serialized: a second message waits until the first has been answered.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import Config, FormatSettings
from .context import ConversationContext, DataType, Topic
from .dataset import SalesDataset
from .dispatcher import answer_query
from .postprocess import detect_currency, postprocess_response
from .utils import contains_any, contains_keyword

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "⚠️ LLM Error: {error}\n\nFalling back to local processing..."


def context_after_llm(query: str, context: ConversationContext) -> ConversationContext:
    """
    Free-text answers carry no dimension, so the context is inferred from the
    query's keywords. The last count is kept.
    """
    lower = query.lower()
    if contains_keyword(lower, 'sales') and not contains_any(lower, ['customer', 'product', 'item']):
        return replace(context, last_topic=Topic.SALES, last_data_type=DataType.TRANSACTION)
    if contains_keyword(lower, 'customer'):
        return replace(context, last_topic=Topic.CUSTOMER, last_data_type=DataType.CUSTOMER)
    if contains_any(lower, ['product', 'item']):
        return replace(context, last_topic=Topic.PRODUCT, last_data_type=DataType.PRODUCT)
    return context


class SalesChatBot:
    """
    Session object: dataset, conversation context, message history and an
    optional SalesLLMBot.

    Usage:
        bot = SalesChatBot(SalesDataset.from_rows(rows))
        result = bot.process_message("top 5 customers")
        result['response']['answer']

        bot = SalesChatBot(dataset, llm_bot=SalesLLMBot())
    """

    def __init__(self, dataset: SalesDataset, llm_bot=None,
                 settings: Optional[FormatSettings] = None,
                 word_limit: int = Config.RESPONSE_WORD_LIMIT):
        self.dataset = dataset
        self.llm_bot = llm_bot
        self.settings = settings or FormatSettings.from_env()
        self.word_limit = word_limit
        self.context = ConversationContext()
        self.history: List[Dict[str, str]] = []
        self.is_typing = False
        self._lock = threading.Lock()

    def load_dataset(self, rows: Iterable[Mapping[str, Any]],
                     metrics: Optional[Mapping[str, Any]] = None) -> SalesDataset:
        """Replace the session's data. Raises SalesDataError on malformed rows."""
        dataset = SalesDataset.from_rows(rows, metrics)
        with self._lock:
            self.dataset = dataset
        logger.info("Loaded %d sales records", len(dataset))
        return dataset

    def clear(self):
        """Start a new conversation over the same data."""
        with self._lock:
            self.history = []
            self.context = ConversationContext()

    def _answer_locally(self, message: str) -> str:
        answer, self.context = answer_query(message, self.dataset, self.context, self.settings)
        return answer

    def _answer_with_llm(self, message: str) -> str:
        raw = self.llm_bot.answer(message, self.dataset, self.context, self.history)
        symbol = detect_currency(self.dataset.records, fallback=self.settings.currency_symbol)
        answer = postprocess_response(raw, symbol, self.word_limit)
        self.context = context_after_llm(message, self.context)
        return answer

    def process_message(self, message: str) -> Dict:
        """
        Answer one user message.

        Returns:
            {"success": True, "response": {"answer", "source", "notice", "context", "metadata"}}
            or {"success": False, "error": "..."}
        """
        if not message or not message.strip():
            return {'success': False, 'error': 'Empty message'}

        with self._lock:
            self.is_typing = True
            try:
                notice = None
                source = 'local'
                if self.llm_bot is not None and not self.dataset.is_empty:
                    try:
                        answer = self._answer_with_llm(message)
                        source = 'llm'
                    except RuntimeError as e:
                        logger.warning("LLM request failed, answering locally: %s", e)
                        notice = FALLBACK_NOTICE.format(error=e)
                        answer = self._answer_locally(message)
                else:
                    answer = self._answer_locally(message)

                self.history.append({'role': 'user', 'content': message})
                self.history.append({'role': 'assistant', 'content': answer})

                return {
                    'success': True,
                    'response': {
                        'answer': answer,
                        'source': source,
                        'notice': notice,
                        'context': self.context.to_dict(),
                        'metadata': {
                            'records': len(self.dataset),
                            'timestamp': datetime.now(timezone.utc).isoformat(),
                        },
                    },
                }
            except Exception as e:
                logger.exception("Failed to answer %r", message)
                return {'success': False, 'error': f'Unexpected error: {str(e)}'}
            finally:
                self.is_typing = False
