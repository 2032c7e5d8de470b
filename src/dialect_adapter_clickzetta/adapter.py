import re
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError

from dialect_adapter_sdk import (
    ConnectionDescriptor,
    ConnectionOptions,
    DialectFeature,
    DialectSettings,
    Expression,
    LogicalType,
    QueryResult,
    SelectQuery,
    SqlDialectAdapter,
    SqlFragment,
    TableDescriptor,
    WeekDay,
)
from dialect_adapter_sdk.errors import (
    AdapterConnectionError,
    ConfigurationError,
    ConnectionErrorHint,
)
from dialect_adapter_sdk.logger import get_logger

from . import connection as connection_builder
from . import pagination
from .execution import HostExecutor, QueryExecutionAdapter, SQLAlchemyExecutor
from .introspection import SchemaIntrospector
from .translator import ClickZettaTranslator
from .types import map_type

logger = get_logger(__name__)

FEATURES: Dict[DialectFeature, bool] = {
    DialectFeature.DATETIME_DIFF: True,
    DialectFeature.NOW: True,
    DialectFeature.CONVERT_TIMEZONE: False,
    DialectFeature.CONNECTION_IMPERSONATION: False,
    DialectFeature.CONNECTION_IMPERSONATION_REQUIRES_ROLE: False,
    DialectFeature.FOREIGN_KEYS: False,
    DialectFeature.PERCENTILE_AGGREGATIONS: True,
    DialectFeature.REGEX: True,
}

_OBJECT_DOES_NOT_EXIST = re.compile(r"Object does not exist", re.DOTALL)


class ClickZettaAdapter(SqlDialectAdapter):
    """
    SqlDialectAdapter for the ClickZetta Lakehouse engine.

    The adapter is constructed with the host's connection options and
    settings; every call receives its context explicitly. Query execution goes
    through ``executor`` when the host supplies one, otherwise through a
    SQLAlchemy engine created from the connection options on first use.
    """

    def __init__(
        self,
        connection_options: Optional[Union[ConnectionOptions, Mapping[str, Any]]] = None,
        settings: Optional[DialectSettings] = None,
        executor: Optional[HostExecutor] = None,
        engine: Optional[Engine] = None,
    ):
        self.settings = settings or DialectSettings()
        self.connection_options = (
            connection_builder.coerce_options(connection_options) if connection_options is not None else None
        )
        self.schema = self.connection_options.schema_name if self.connection_options else None
        self.engine = engine
        self._executor = executor
        self._execution: Optional[QueryExecutionAdapter] = None

        self.translator = ClickZettaTranslator(start_of_week=self.settings.start_of_week)
        self.introspector = SchemaIntrospector(
            schema=self.schema,
            excluded_schemas=self.settings.excluded_schemas,
        )

    def __str__(self):
        return f"{self.get_dialect()} ({self.schema or 'all schemas'})"

    # --- host feature flags ------------------------------------------------------

    def get_dialect(self) -> str:
        return "clickzetta"

    def supports(self, feature: Union[DialectFeature, str]) -> bool:
        try:
            feature = DialectFeature(feature)
        except ValueError:
            return False
        return FEATURES.get(feature, False)

    def db_start_of_week(self) -> WeekDay:
        return self.settings.start_of_week

    # --- types & connection ------------------------------------------------------

    def map_type(self, native_type_name: str) -> LogicalType:
        return map_type(native_type_name)

    def build_connection(self, options: Optional[Union[ConnectionOptions, Mapping[str, Any]]] = None) -> ConnectionDescriptor:
        options = options if options is not None else self.connection_options
        if options is None:
            raise ConfigurationError(f"No connection options configured for {self}")
        return connection_builder.build_connection(options)

    def connection_pool_properties(self) -> Dict[str, str]:
        return connection_builder.connection_pool_properties()

    def can_connect(self, options: Union[ConnectionOptions, Mapping[str, Any]]) -> bool:
        """
        Lenient setup check: only the required fields are validated and the
        answer is always True. Real validation happens on the first query.
        """
        connection_builder.validate_options(connection_builder.coerce_options(options))
        return True

    def humanize_connection_error(self, message: str) -> Union[ConnectionErrorHint, str]:
        if message and _OBJECT_DOES_NOT_EXIST.search(message):
            return ConnectionErrorHint.DATABASE_NAME_INCORRECT
        return message

    def classify_connection_error(self, exc: Exception) -> AdapterConnectionError:
        humanized = self.humanize_connection_error(str(exc))
        hint = humanized if isinstance(humanized, ConnectionErrorHint) else None
        return AdapterConnectionError(str(exc), hint=hint, raw=exc)

    def connect(self) -> None:
        descriptor = self.build_connection()
        try:
            self.engine = create_engine(descriptor.sqlalchemy_url, pool_pre_ping=True)
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to {self}: {e}")
            raise self.classify_connection_error(e) from e

    # --- translation -------------------------------------------------------------

    def translate(self, node: Expression) -> SqlFragment:
        return self.translator.translate(node)

    def paginate(self, query: SelectQuery, page: int, items: int) -> SqlFragment:
        return pagination.paginate(query, page, items)

    def limit(self, query: SelectQuery, items: int) -> SqlFragment:
        return pagination.limit(query, items)

    # --- introspection -----------------------------------------------------------

    def list_schemas(self, connection: Any) -> List[str]:
        return self.introspector.list_schemas(connection)

    def list_tables(self, connection: Any, schema: str) -> Set[TableDescriptor]:
        return self.introspector.list_tables(connection, schema)

    def describe_database(self, connection: Any) -> Set[TableDescriptor]:
        return self.introspector.describe_database(connection)

    def describe_table(self, connection: Any, schema: Optional[str], table: str) -> TableDescriptor:
        return self.introspector.describe_table(connection, schema, table)

    def describe_table_fks(self, connection: Any, schema: Optional[str], table: str) -> Set[Any]:
        return self.introspector.describe_table_fks(connection, schema, table)

    def db_default_timezone(self, connection: Any) -> Optional[str]:
        return self.introspector.db_default_timezone(connection)

    # --- execution ---------------------------------------------------------------

    @property
    def execution(self) -> QueryExecutionAdapter:
        if self._execution is None:
            executor = self._executor
            if executor is None:
                if self.engine is None:
                    self.connect()
                executor = SQLAlchemyExecutor(self.engine)
            self._execution = QueryExecutionAdapter(
                executor,
                default_schema=self.schema or self.settings.default_schema,
                session_tagging=self.settings.session_tagging,
            )
        return self._execution

    def execute(
        self,
        native_sql: str,
        row_limit: Optional[int] = None,
        caller_identity: Optional[str] = None,
        remark: Optional[str] = None,
    ) -> QueryResult:
        return self.execution.execute(
            native_sql,
            row_limit=row_limit,
            caller_identity=caller_identity,
            remark=remark,
        )
