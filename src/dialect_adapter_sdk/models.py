from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class LogicalType(str, Enum):
    """Engine-independent column type used by the host for display and analytics."""

    DECIMAL = "decimal"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "date_time"
    DICTIONARY = "dictionary"
    ARRAY = "array"
    STRUCT = "struct"
    BINARY = "binary"
    UNKNOWN = "unknown"


class ColumnDescriptor(BaseModel):
    name: str
    native_type: str
    logical_type: LogicalType
    ordinal_position: int

    model_config = ConfigDict(frozen=True)


class TableDescriptor(BaseModel):
    name: str
    schema_name: Optional[str] = None
    columns: FrozenSet[ColumnDescriptor] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True)

    @property
    def full_name(self) -> str:
        if self.schema_name:
            return f"{self.schema_name}.{self.name}"
        return self.name


class ConnectionOptions(BaseModel):
    """Connection details as supplied by the host.

    Accepts both the snake_case field names and the camelCase keys the host
    stores (``virtualCluster``, ``schema``).
    """

    instance: Optional[str] = None
    service: Optional[str] = None
    workspace: Optional[str] = None
    user: Optional[str] = None
    password: Optional[SecretStr] = None
    virtual_cluster: Optional[str] = Field(default=None, alias="virtualCluster")
    schema_name: Optional[str] = Field(default=None, alias="schema")
    additional: Optional[str] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ConnectionDescriptor(BaseModel):
    """Connection URL plus the ``&``-joined driver property string."""

    url: str
    properties: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def jdbc_url(self) -> str:
        return f"jdbc:{self.sqlalchemy_url}"

    @property
    def sqlalchemy_url(self) -> str:
        if not self.properties:
            return self.url
        return f"{self.url}?{self.properties}"


ExpressionArg = Union["Expression", bool, int, float, str, None]


class Expression(BaseModel):
    """One node of the host's canonical query IR.

    ``args`` holds nested nodes, already-compiled SQL strings, or plain
    numbers / booleans / None. Quoted string values must be wrapped in a
    ``literal`` node.
    """

    op: str
    args: List[ExpressionArg] = Field(default_factory=list)
    unit: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def literal(cls, value: Any) -> "Expression":
        return cls(op="literal", args=[value])

    @classmethod
    def field(cls, *path: str) -> "Expression":
        return cls(op="field", args=list(path))


Expression.model_rebuild()


class SelectItem(BaseModel):
    expression: str
    alias: Optional[str] = None


class OrderItem(BaseModel):
    expression: str
    direction: Literal["ASC", "DESC"] = "ASC"


class SelectQuery(BaseModel):
    """Structured select statement used as pagination input."""

    select: List[SelectItem]
    from_: str = Field(alias="from")
    where: Optional[str] = None
    group_by: List[str] = Field(default_factory=list)
    order_by: List[OrderItem] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SqlFragment(BaseModel):
    sql: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.sql


class QueryResult(BaseModel):
    """Normalized results from a datasource execution."""
    columns: List[str]
    rows: List[List[Any]]
    row_count: int
    execution_time_ms: Optional[float] = None


class AdapterError(BaseModel):
    """Standardized error envelope for adapter failures."""
    code: str
    message: str
    retriable: bool
    raw: Optional[Any] = None
