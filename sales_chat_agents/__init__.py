from .base import LLMBaseAgent
from .config import Config, FormatSettings
from .records import SalesDataError, SalesRecord, Metrics, normalize_records, compute_metrics
from .dataset import SalesDataset
from .vocabulary import Vocabulary, extract_vocabulary
from .classifier import Intent, Operation, classify_intent, detect_operation, detect_group_by
from .entities import Period, Entities, resolve_entities
from .context import ConversationContext, DataType, Topic
from .filter_engine import FilterEngine
from .results import ResultKind, ResultSet
from .formatter import render
from .dispatcher import answer_query, resolve_query
from .postprocess import detect_currency, postprocess_response
from .llm_bot import SalesLLMBot
from .chat_bot import SalesChatBot

__all__ = [
    "LLMBaseAgent",
    "Config",
    "FormatSettings",
    "SalesDataError",
    "SalesRecord",
    "Metrics",
    "normalize_records",
    "compute_metrics",
    "SalesDataset",
    "Vocabulary",
    "extract_vocabulary",
    "Intent",
    "Operation",
    "classify_intent",
    "detect_operation",
    "detect_group_by",
    "Period",
    "Entities",
    "resolve_entities",
    "ConversationContext",
    "DataType",
    "Topic",
    "FilterEngine",
    "ResultKind",
    "ResultSet",
    "render",
    "answer_query",
    "resolve_query",
    "detect_currency",
    "postprocess_response",
    "SalesLLMBot",
    "SalesChatBot",
]
