"""
ConversationContext - single-slot memory of the last answered dimension.

The context is immutable; a successful answer that names a dimension
produces a brand new context which the session swaps in. Nothing expires:
a later query inherits whatever was last set.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DataType(str, Enum):
    CUSTOMER = 'customer'
    PRODUCT = 'product'
    STOCKGROUP = 'stockgroup'
    TRANSACTION = 'transaction'
    DATE = 'date'
    MASTERID = 'masterid'
    ISSALES = 'issales'


class Topic(str, Enum):
    CUSTOMER = 'customer'
    PRODUCT = 'product'
    STOCKGROUP = 'stockgroup'
    SALES = 'sales'
    DATE = 'date'
    TRANSACTION = 'transaction'


TOPIC_FOR = {
    DataType.CUSTOMER: Topic.CUSTOMER,
    DataType.PRODUCT: Topic.PRODUCT,
    DataType.STOCKGROUP: Topic.STOCKGROUP,
    DataType.TRANSACTION: Topic.SALES,
    DataType.DATE: Topic.DATE,
    DataType.MASTERID: Topic.TRANSACTION,
    DataType.ISSALES: Topic.SALES,
}


@dataclass(frozen=True)
class ConversationContext:
    last_topic: Optional[Topic] = None
    last_data_type: Optional[DataType] = None
    last_count: Optional[int] = None

    @classmethod
    def for_dimension(cls, data_type: DataType, count: Optional[int] = None,
                      topic: Optional[Topic] = None) -> 'ConversationContext':
        data_type = DataType(data_type)
        return cls(last_topic=topic or TOPIC_FOR[data_type], last_data_type=data_type, last_count=count)

    @property
    def has_dimension(self) -> bool:
        return self.last_topic is not None and self.last_data_type is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lastTopic': self.last_topic.value if self.last_topic else None,
            'lastDataType': self.last_data_type.value if self.last_data_type else None,
            'lastCount': self.last_count,
        }
