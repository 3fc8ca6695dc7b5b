"""
QueryAnalysis - the per-turn structured reading of a question:
intent + entities + modifiers. Built fresh for every query, never retained.
"""

from dataclasses import dataclass, field

from .classifier import Intent, classify_intent
from .context import ConversationContext
from .dataset import SalesDataset
from .entities import Entities, resolve_entities
from .utils import contains_any
from .vocabulary import Vocabulary


@dataclass
class Modifiers:
    month_wise: bool = False
    top_n: bool = False
    total: bool = False
    average: bool = False
    specific: bool = False
    comparison: bool = False
    breakdown: bool = False


@dataclass
class QueryAnalysis:
    query: str
    intent: Intent
    entities: Entities = field(default_factory=Entities)
    modifiers: Modifiers = field(default_factory=Modifiers)

    @property
    def lower(self) -> str:
        return self.query.lower()

    def mentions(self, *words: str) -> bool:
        return contains_any(self.lower, words)


@dataclass
class QueryRequest:
    """Everything one answer strategy may look at. Read-only."""

    query: str
    dataset: SalesDataset
    context: ConversationContext
    analysis: QueryAnalysis

    @classmethod
    def build(cls, query: str, dataset: SalesDataset, context: ConversationContext) -> 'QueryRequest':
        return cls(query, dataset, context, analyze_query(query, dataset.vocabulary))

    @property
    def lower(self) -> str:
        return self.query.lower()

    @property
    def frame(self):
        return self.dataset.frame

    @property
    def entities(self) -> Entities:
        return self.analysis.entities

    def mentions(self, *words: str) -> bool:
        return contains_any(self.lower, words)


def analyze_query(query: str, vocabulary: Vocabulary) -> QueryAnalysis:
    lower = query.lower()
    intent = classify_intent(lower)
    entities = resolve_entities(query, vocabulary)

    modifiers = Modifiers(
        month_wise=contains_any(lower, ('month', 'wise')),
        top_n=contains_any(lower, ('top',)) and entities.count is not None,
        total=contains_any(lower, ('total', 'sum')),
        average=contains_any(lower, ('average', 'avg')),
        specific=bool(entities.customer or entities.product),
        comparison=intent == Intent.COMPARISON,
        breakdown=intent == Intent.TEMPORAL_ANALYSIS,
    )
    return QueryAnalysis(query=query, intent=intent, entities=entities, modifiers=modifiers)
