import time
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from dialect_adapter_sdk.errors import ExecutionError
from dialect_adapter_sdk.logger import get_logger, query_context, trace_context
from dialect_adapter_sdk.models import QueryResult

from .quoting import quote_identifier, quote_string

logger = get_logger(__name__)

# (sql, row_limit) -> QueryResult, supplied by the host
HostExecutor = Callable[[str, Optional[int]], QueryResult]


def coerce_temporal(value: Any) -> Any:
    """
    Pin DATE / TIMESTAMP values to UTC.

    The driver hands back zone-less values; naive datetimes keep their wall
    clock and are labelled UTC, dates become midnight UTC, aware datetimes are
    converted to UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value


class SQLAlchemyExecutor:
    """Default host execution primitive backed by a SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def __call__(self, sql: str, row_limit: Optional[int] = None) -> QueryResult:
        start = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                # exec_driver_sql: no bind-parameter parsing of ':' inside the statement
                result = conn.exec_driver_sql(sql)
                if result.returns_rows:
                    if row_limit is None:
                        fetched = result.fetchall()
                    elif row_limit > 0:
                        fetched = result.fetchmany(row_limit)
                    else:
                        # DB-API fetchmany(0) is not guaranteed to return nothing
                        fetched = []
                    rows = [list(row) for row in fetched]
                    cols = list(result.keys())
                    row_count = len(rows)
                else:
                    rows = []
                    cols = []
                    row_count = result.rowcount
        except SQLAlchemyError as e:
            raise ExecutionError(str(e), raw=e) from e

        duration = time.perf_counter() - start
        return QueryResult(
            columns=cols,
            rows=rows,
            row_count=row_count,
            execution_time_ms=duration * 1000,
        )


class QueryExecutionAdapter:
    def __init__(self, executor: HostExecutor, default_schema: str = "public", session_tagging: bool = True):
        self.executor = executor
        self.default_schema = default_schema
        self.session_tagging = session_tagging

    def strip_schema_qualifier(self, sql: str) -> str:
        """Drop every `default_schema`. prefix; the physical layer does not expose that schema name."""
        return sql.replace(f"{quote_identifier(self.default_schema)}.", "")

    def prepare(self, sql: str, caller_identity: Optional[str] = None, remark: Optional[str] = None) -> str:
        prepared = self.strip_schema_qualifier(sql)
        if remark:
            remark = " ".join(remark.splitlines())
            prepared = f"-- {remark}\n{prepared}"
        if self.session_tagging and caller_identity:
            prepared = f"set query_tag={quote_string(caller_identity)};\n{prepared}"
        return prepared

    def execute(
        self,
        native_sql: str,
        row_limit: Optional[int] = None,
        caller_identity: Optional[str] = None,
        remark: Optional[str] = None,
    ) -> QueryResult:
        with trace_context(uuid.uuid4().hex), query_context("clickzetta", caller_identity):
            sql = self.prepare(native_sql, caller_identity=caller_identity, remark=remark)
            logger.info("Executing ClickZetta Lakehouse query", extra={"sql": sql, "row_limit": row_limit})
            result = self.executor(sql, row_limit)
            rows = [[coerce_temporal(value) for value in row] for row in result.rows]
            return result.model_copy(update={"rows": rows})
