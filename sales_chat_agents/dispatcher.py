"""
Dispatcher - runs the answer strategies in order and returns the first answer.

    structured path -> context follow-up -> column handlers -> debug/help -> fallback

The conversation context is read by the strategies and replaced, never
merged, when an answer names a dimension.
"""

import logging
from typing import List, Optional, Tuple

from .config import FormatSettings
from .context import ConversationContext
from .dataset import SalesDataset
from .formatter import render
from .handlers import COLUMN_HANDLERS, COMMAND_HANDLERS, Handler, fallback, follow_up
from .intent_handlers import answer_structured
from .query_analysis import QueryRequest
from .results import ResultSet

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data available to analyze."
EMPTY_QUERY_MESSAGE = "Please type a question about your sales data."

STAGES: List[Tuple[str, Handler]] = (
    [('structured', answer_structured), ('follow_up', follow_up)]
    + COLUMN_HANDLERS
    + COMMAND_HANDLERS
)


def resolve_query(query: str, dataset: SalesDataset,
                  context: Optional[ConversationContext] = None) -> Tuple[ResultSet, str]:
    """
    Find the answer for one query.

    Returns:
        (result, stage name) - the stage is 'fallback' when nothing matched
    """
    context = context or ConversationContext()
    if dataset.is_empty:
        return ResultSet.no_data(NO_DATA_MESSAGE), 'no_data'
    if not query or not query.strip():
        return ResultSet.text(EMPTY_QUERY_MESSAGE), 'empty'

    request = QueryRequest.build(query, dataset, context)
    for name, handler in STAGES:
        result = handler(request)
        if result is not None:
            logger.debug("Query %r answered by stage '%s' (%s)", query, name, result.kind.value)
            return result, name
    logger.debug("No stage matched %r, using fallback", query)
    return fallback(request), 'fallback'


def next_context(result: ResultSet, context: ConversationContext) -> ConversationContext:
    """A new context when the answer names a dimension, otherwise the old one."""
    if result.dimension is None:
        return context
    return ConversationContext.for_dimension(result.dimension, result.count)


def answer_query(query: str, dataset: SalesDataset,
                 context: Optional[ConversationContext] = None,
                 settings: Optional[FormatSettings] = None) -> Tuple[str, ConversationContext]:
    """
    Answer a free-text question about the dataset.

    Args:
        query: Raw user text
        dataset: The session's dataset
        context: Current conversation context (a fresh one when None)
        settings: Number/currency rendering settings

    Returns:
        (answer text, context to use for the next turn)
    """
    context = context or ConversationContext()
    result, _ = resolve_query(query, dataset, context)
    return render(result, settings), next_context(result, context)
