"""Identifier and literal quoting for ClickZetta SQL (MySQL-style backticks)."""
from typing import Iterable


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def quote_path(parts: Iterable[str]) -> str:
    """Quote each component of a dotted identifier path, e.g. schema.table.column."""
    return ".".join(quote_identifier(part) for part in parts)


def quote_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"
