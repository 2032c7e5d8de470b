from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Set, Union

import sqlglot
from sqlglot.errors import SqlglotError

from .capabilities import DialectFeature, WeekDay
from .errors import ConnectionErrorHint, UnsupportedOperationError
from .models import (
    ConnectionDescriptor,
    ConnectionOptions,
    Expression,
    LogicalType,
    QueryResult,
    SelectQuery,
    SqlFragment,
    TableDescriptor,
)


class SqlDialectAdapter(ABC):
    """Canonical interface every SQL dialect adapter must implement.

    One method per host-facing operation. Implementations are selected
    through a ``DialectRegistry`` at construction time.
    """

    # sqlglot dialect used for reading / pretty-printing native SQL
    sqlglot_dialect: str = "mysql"

    @abstractmethod
    def get_dialect(self) -> str:
        """Return the normalized dialect string (e.g. 'clickzetta')."""
        pass

    @abstractmethod
    def supports(self, feature: Union[DialectFeature, str]) -> bool:
        """Answer a host feature-flag query."""
        pass

    @abstractmethod
    def db_start_of_week(self) -> WeekDay:
        """Start of week the adapter numbers and truncates weeks with."""
        pass

    @abstractmethod
    def map_type(self, native_type_name: str) -> LogicalType:
        """Map a native column type name to a logical type."""
        pass

    @abstractmethod
    def build_connection(self, options: Union[ConnectionOptions, Mapping[str, Any]]) -> ConnectionDescriptor:
        """Build the connection URL and driver property string."""
        pass

    @abstractmethod
    def can_connect(self, options: Union[ConnectionOptions, Mapping[str, Any]]) -> bool:
        """Setup-time connection check."""
        pass

    @abstractmethod
    def humanize_connection_error(self, message: str) -> Union[ConnectionErrorHint, str]:
        """Turn a raw driver error message into a hint the host can display."""
        pass

    @abstractmethod
    def translate(self, node: Expression) -> SqlFragment:
        """Translate one canonical expression node into a SQL fragment."""
        pass

    @abstractmethod
    def paginate(self, query: SelectQuery, page: int, items: int) -> SqlFragment:
        """Render ``query`` restricted to one 1-based page of ``items`` rows."""
        pass

    @abstractmethod
    def list_schemas(self, connection: Any) -> List[str]:
        pass

    @abstractmethod
    def list_tables(self, connection: Any, schema: str) -> Set[TableDescriptor]:
        pass

    @abstractmethod
    def describe_database(self, connection: Any) -> Set[TableDescriptor]:
        pass

    @abstractmethod
    def describe_table(self, connection: Any, schema: Optional[str], table: str) -> TableDescriptor:
        pass

    @abstractmethod
    def describe_table_fks(self, connection: Any, schema: Optional[str], table: str) -> Set[Any]:
        pass

    @abstractmethod
    def execute(
        self,
        native_sql: str,
        row_limit: Optional[int] = None,
        caller_identity: Optional[str] = None,
        remark: Optional[str] = None,
    ) -> QueryResult:
        """Execute native SQL through the host execution primitive."""
        pass

    def require(self, feature: Union[DialectFeature, str]) -> None:
        """Raise if ``feature`` is declared unsupported."""
        if not self.supports(feature):
            name = feature.value if isinstance(feature, DialectFeature) else feature
            raise UnsupportedOperationError(f"{self.get_dialect()} does not support '{name}'")

    def prettify(self, sql: str) -> str:
        """Pretty-print native SQL for display; unparseable SQL is returned as is."""
        try:
            statements = sqlglot.transpile(
                sql, read=self.sqlglot_dialect, write=self.sqlglot_dialect, pretty=True
            )
        except SqlglotError:
            return sql
        if not statements:
            return sql
        return ";\n".join(statements)
