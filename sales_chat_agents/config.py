"""
Configuration for sales-chat-agents.

Everything is read from environment variables with sensible defaults so the
library works out of the box; apps may load a .env file first (see testapp).
"""

import os
from dataclasses import dataclass

INDIAN = 'indian'
WESTERN = 'western'


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


class Config:
    """Environment-backed settings."""

    MODEL = os.getenv('SALES_CHAT_MODEL', 'claude-sonnet-4-6')
    LLM_MAX_TOKENS = _env_int('SALES_CHAT_MAX_TOKENS', 1000)
    LLM_TIMEOUT_SECONDS = _env_int('SALES_CHAT_LLM_TIMEOUT', 30)
    LLM_MAX_RETRIES = _env_int('SALES_CHAT_LLM_RETRIES', 1)
    HISTORY_TURNS = _env_int('SALES_CHAT_HISTORY_TURNS', 10)
    RESPONSE_WORD_LIMIT = _env_int('SALES_CHAT_WORD_LIMIT', 200)

    CURRENCY_SYMBOL = os.getenv('SALES_CHAT_CURRENCY', '₹')
    NUMBER_GROUPING = os.getenv('SALES_CHAT_NUMBER_GROUPING', INDIAN).lower()


@dataclass(frozen=True)
class FormatSettings:
    """
    How numbers are rendered in answers.

    currency_symbol is a placeholder prefix; no conversion ever happens.
    grouping is 'indian' (12,34,567.00) or 'western' (1,234,567.00).
    """

    currency_symbol: str = '₹'
    grouping: str = INDIAN
    unit_suffix: str = ' units'

    def __post_init__(self):
        if self.grouping not in (INDIAN, WESTERN):
            raise ValueError(f"Unsupported digit grouping: {self.grouping}")

    @classmethod
    def from_env(cls) -> 'FormatSettings':
        return cls(currency_symbol=Config.CURRENCY_SYMBOL, grouping=Config.NUMBER_GROUPING)
