"""
SalesLLMBot - free-text answers about the sales data from Claude.

The bot only produces raw text. Currency correction, off-topic trimming and
the word cap are applied afterwards by postprocess.py; falling back to the
local rule-based answers is the session's job (see SalesChatBot).
"""

import json
from typing import Dict, List, Optional

from .base import DEFAULT_MODEL, LLMBaseAgent
from .config import Config
from .context import ConversationContext
from .dataset import SalesDataset
from .postprocess import CURRENCY_NAMES, detect_currency


class SalesLLMBot(LLMBaseAgent):
    """
    Answers sales questions with the whole dataset in the prompt.

    Usage:
        bot = SalesLLMBot()
        text = bot.answer("who bought the most in april?", dataset, context, history)
    """

    def __init__(self, model=DEFAULT_MODEL, history_turns: int = Config.HISTORY_TURNS,
                 word_limit: int = Config.RESPONSE_WORD_LIMIT):
        super().__init__(model=model)
        self.history_turns = history_turns
        self.word_limit = word_limit

    def build_system_prompt(self, currency_symbol: str) -> str:
        currency_name = CURRENCY_NAMES.get(currency_symbol, currency_symbol)
        return f"""You are a sales data analyst for a small business. Answer ONLY from the sales data you are given.

Currency:
- Every amount is in {currency_name} ({currency_symbol})
- Always write amounts as {currency_symbol}1,234.56 and never use any other currency symbol or name
- Show one amount per figure, never "X (Y)" pairs

Answers:
- Keep answers under {self.word_limit} words
- Use markdown tables for lists of more than three rows: | Rank | Name | Amount |
- Use the conversation context to resolve follow-ups such as "top 5" or "what about may"
- If the data cannot answer the question, say so in one sentence

Scope:
- Talk only about this business's sales: customers, products, stock groups, regions, dates and amounts
- Refuse anything else (programming, academic writing, general knowledge) in one sentence"""

    def build_messages(self, query: str, dataset: SalesDataset,
                       context: ConversationContext,
                       history: Optional[List[Dict]] = None) -> List[Dict]:
        """
        Prior turns (last `history_turns`) followed by the user query with
        the data, metrics and context attached.
        """
        messages = []
        for msg in (history or [])[-self.history_turns:]:
            if not messages and msg['role'] != 'user':
                continue
            messages.append({"role": msg['role'], "content": msg['content']})

        content = (
            f"Sales data ({len(dataset)} records):\n"
            f"{json.dumps(dataset.to_rows(), default=str, ensure_ascii=False)}\n\n"
            f"Metrics:\n{json.dumps(dataset.metrics.to_dict(), indent=2, default=str)}\n\n"
            f"Conversation context:\n{json.dumps(context.to_dict(), indent=2)}\n\n"
            f"Question: {query}"
        )
        messages.append({"role": "user", "content": content})
        return messages

    def answer(self, query: str, dataset: SalesDataset,
               context: Optional[ConversationContext] = None,
               history: Optional[List[Dict]] = None) -> str:
        """
        Ask Claude about the dataset.

        Args:
            query: The user's question
            dataset: Session dataset, sent in full
            context: Conversation context of the session
            history: Prior {"role", "content"} messages

        Returns:
            Raw answer text

        Raises:
            RuntimeError: the API call failed (see LLMBaseAgent.call_api)
        """
        context = context or ConversationContext()
        symbol = detect_currency(dataset.records, fallback=Config.CURRENCY_SYMBOL)
        messages = self.build_messages(query, dataset, context, history)
        return self.call_api(self.build_system_prompt(symbol), messages)
