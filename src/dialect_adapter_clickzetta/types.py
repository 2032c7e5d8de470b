import re

from dialect_adapter_sdk.models import LogicalType

# Keys are the lowercased base type name, without precision, scale or generic parameters.
NATIVE_TYPE_MAP = {
    "decimal": LogicalType.DECIMAL,
    "int": LogicalType.INTEGER,
    "integer": LogicalType.INTEGER,
    "smallint": LogicalType.INTEGER,
    "tinyint": LogicalType.INTEGER,
    "bigint": LogicalType.BIG_INTEGER,
    "float": LogicalType.FLOAT,
    "double": LogicalType.FLOAT,
    "varchar": LogicalType.TEXT,
    "char": LogicalType.TEXT,
    "string": LogicalType.TEXT,
    "boolean": LogicalType.BOOLEAN,
    "date": LogicalType.DATE,
    "timestamp": LogicalType.DATE_TIME,
    "timestamp_ltz": LogicalType.DATE_TIME,
    "timestamp_ntz": LogicalType.DATE_TIME,
    "map": LogicalType.DICTIONARY,
    "array": LogicalType.ARRAY,
    "struct": LogicalType.STRUCT,
    "binary": LogicalType.BINARY,
}

_BASE_TYPE_END = re.compile(r"[\s(<]")


def normalize_native_type(native_type_name: str) -> str:
    """Reduce a raw type name such as ``DECIMAL(10, 2)`` or ``array<int>`` to ``decimal`` / ``array``."""
    if not native_type_name:
        return ""
    return _BASE_TYPE_END.split(native_type_name.strip(), maxsplit=1)[0].lower()


def map_type(native_type_name: str) -> LogicalType:
    """Look up the logical type for a native type name; unknown names map to UNKNOWN."""
    return NATIVE_TYPE_MAP.get(normalize_native_type(native_type_name), LogicalType.UNKNOWN)
