from .capabilities import DialectFeature, WeekDay
from .errors import (
    AdapterConnectionError,
    ConfigurationError,
    ConnectionErrorHint,
    DialectAdapterError,
    ErrorCode,
    ExecutionError,
    UnsupportedOperationError,
)
from .interfaces import SqlDialectAdapter
from .models import (
    AdapterError,
    ColumnDescriptor,
    ConnectionDescriptor,
    ConnectionOptions,
    Expression,
    LogicalType,
    OrderItem,
    QueryResult,
    SelectItem,
    SelectQuery,
    SqlFragment,
    TableDescriptor,
)
from .registry import DialectRegistry
from .settings import DialectSettings

__all__ = [
    "SqlDialectAdapter",
    "DialectRegistry",
    "DialectSettings",
    "DialectFeature",
    "WeekDay",
    "LogicalType",
    "ColumnDescriptor",
    "TableDescriptor",
    "ConnectionOptions",
    "ConnectionDescriptor",
    "Expression",
    "SelectItem",
    "OrderItem",
    "SelectQuery",
    "SqlFragment",
    "QueryResult",
    "AdapterError",
    "ErrorCode",
    "ConnectionErrorHint",
    "DialectAdapterError",
    "ConfigurationError",
    "UnsupportedOperationError",
    "AdapterConnectionError",
    "ExecutionError",
]
