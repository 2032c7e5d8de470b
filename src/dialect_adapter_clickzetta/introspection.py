"""
Schema / table / column enumeration through SHOW and DESCRIBE statements.

Identifiers are interpolated into the statements as backtick-quoted text; the
engine has no bound parameters for identifiers. Names come from the engine's
own enumeration, not from end users.
"""
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import text

from dialect_adapter_sdk.logger import get_logger
from dialect_adapter_sdk.models import ColumnDescriptor, TableDescriptor

from .quoting import quote_identifier, quote_path
from .types import map_type, normalize_native_type

logger = get_logger(__name__)

SCHEMA_NAME_KEYS = ("schema_name", "database_name", "namespace")
TABLE_NAME_KEYS = ("table_name", "tablename")
COLUMN_NAME_KEYS = ("column_name", "col_name")
COLUMN_TYPE_KEYS = ("data_type", "type")


def _first(row: Dict[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def valid_describe_row(name: Optional[str], data_type: Optional[str]) -> bool:
    """DESCRIBE emits partition / metadata sections inline as blank or '#'-prefixed rows."""
    for value in (name, data_type):
        if value is None:
            return False
        value = str(value).strip()
        if not value or value.startswith("#"):
            return False
    return True


class SchemaIntrospector:
    def __init__(self, schema: Optional[str] = None, excluded_schemas: Optional[Iterable[str]] = None):
        self.schema = schema
        if excluded_schemas is None:
            excluded_schemas = {"information_schema"}
        self.excluded_schemas = {name.lower() for name in excluded_schemas}

    def _query(self, connection: Any, sql: str) -> List[Dict[str, Any]]:
        logger.debug(f"Introspection query: {sql}")
        result = connection.execute(text(sql))
        return [dict(row) for row in result.mappings().all()]

    def list_schemas(self, connection: Any) -> List[str]:
        schemas = []
        for row in self._query(connection, "SHOW SCHEMAS"):
            name = _first(row, SCHEMA_NAME_KEYS)
            if name is None and row:
                name = next(iter(row.values()))
            if not name or str(name).lower() in self.excluded_schemas:
                continue
            schemas.append(str(name))
        return schemas

    def list_tables(self, connection: Any, schema: str) -> Set[TableDescriptor]:
        tables = set()
        for row in self._query(connection, f"SHOW TABLES IN {quote_identifier(schema)}"):
            name = _first(row, TABLE_NAME_KEYS)
            if not name:
                continue
            tables.add(TableDescriptor(name=name, schema_name=_first(row, SCHEMA_NAME_KEYS) or schema))
        return tables

    def describe_database(self, connection: Any) -> Set[TableDescriptor]:
        """
        All tables visible to the adapter.

        When a schema is configured only that schema is enumerated; otherwise
        every schema outside the exclusion set is.
        """
        if self.schema:
            return self.list_tables(connection, self.schema)

        tables = set()
        for schema in self.list_schemas(connection):
            tables |= self.list_tables(connection, schema)
        return tables

    def describe_table(self, connection: Any, schema: Optional[str], table: str) -> TableDescriptor:
        path = [schema, table] if schema else [table]
        rows = self._query(connection, f"DESCRIBE {quote_path(path)}")

        columns = set()
        for position, row in enumerate(rows):
            name = _first(row, COLUMN_NAME_KEYS)
            data_type = _first(row, COLUMN_TYPE_KEYS)
            if not valid_describe_row(name, data_type):
                continue
            columns.add(ColumnDescriptor(
                name=name,
                native_type=normalize_native_type(data_type),
                logical_type=map_type(data_type),
                ordinal_position=position,
            ))

        return TableDescriptor(name=table, schema_name=schema, columns=frozenset(columns))

    def describe_table_fks(self, connection: Any, schema: Optional[str], table: str) -> Set[Any]:
        # the engine has no foreign key constraints
        return set()

    def db_default_timezone(self, connection: Any) -> Optional[str]:
        result = connection.execute(text("SELECT current_timezone()"))
        return result.scalar()
