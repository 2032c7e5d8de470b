from dialect_adapter_sdk import DialectRegistry

from .adapter import ClickZettaAdapter
from .execution import QueryExecutionAdapter, SQLAlchemyExecutor, coerce_temporal
from .introspection import SchemaIntrospector
from .translator import ClickZettaTranslator
from .types import map_type, normalize_native_type

__all__ = [
    "ClickZettaAdapter",
    "ClickZettaTranslator",
    "SchemaIntrospector",
    "QueryExecutionAdapter",
    "SQLAlchemyExecutor",
    "coerce_temporal",
    "map_type",
    "normalize_native_type",
    "default_registry",
]


def default_registry() -> DialectRegistry:
    """Registry with the dialects shipped in this distribution."""
    registry = DialectRegistry()
    registry.register("clickzetta", ClickZettaAdapter)
    return registry
