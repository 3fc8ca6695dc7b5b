"""
ResultSet - what the executor produces and the formatter renders.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .context import DataType


class ResultKind(str, Enum):
    TABLE = 'table'          # ranked / grouped rows
    SUMMARY = 'summary'      # a handful of labelled figures
    COMPOSITE = 'composite'  # several sections under one heading
    MESSAGE = 'message'      # free text (help, hints, one-line answers)
    NO_DATA = 'no_data'


@dataclass
class ResultSet:
    """
    kind decides the rendering; rows/totals hold raw numbers keyed by metric
    name (revenue, quantity, orders, ...) so callers can inspect values
    without parsing text.

    dimension/count are set when the answer establishes a grouping the
    conversation context should remember.
    """

    kind: ResultKind
    operation: str = ''
    title: str = ''
    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    totals: Dict[str, Any] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    filters: Dict[str, str] = field(default_factory=dict)
    layout: str = 'table'    # 'table' or 'list' for TABLE results
    ranked: bool = False
    note: str = ''
    message: str = ''
    sections: List['ResultSet'] = field(default_factory=list)
    dimension: Optional[DataType] = None
    count: Optional[int] = None

    @classmethod
    def no_data(cls, message: str, operation: str = '') -> 'ResultSet':
        return cls(kind=ResultKind.NO_DATA, operation=operation, message=message)

    @classmethod
    def text(cls, message: str, operation: str = 'message',
             dimension: Optional[DataType] = None, count: Optional[int] = None) -> 'ResultSet':
        return cls(kind=ResultKind.MESSAGE, operation=operation, message=message,
                   dimension=dimension, count=count)

    @property
    def is_no_data(self) -> bool:
        return self.kind == ResultKind.NO_DATA

    def column_values(self, key: str) -> List[Any]:
        return [row.get(key) for row in self.rows]
