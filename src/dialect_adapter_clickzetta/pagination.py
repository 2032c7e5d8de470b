import re
from typing import List, Optional

from dialect_adapter_sdk.logger import get_logger
from dialect_adapter_sdk.models import SelectItem, SelectQuery, SqlFragment

from .quoting import quote_identifier

logger = get_logger(__name__)

ROWNUM_COLUMN = "__rownum__"

_IDENTIFIER = r"(?:`(?:[^`]|``)*`|[A-Za-z_][A-Za-z0-9_]*)"
# `schema`.`table`.`column`, bare names, `t`.* and *
_COLUMN_REFERENCE = re.compile(rf"(?:{_IDENTIFIER}(?:\.{_IDENTIFIER})*(?:\.\*)?|\*)")


def _select_item_sql(query: SelectQuery) -> List[str]:
    items = []
    for item in query.select:
        if item.alias:
            items.append(f"{item.expression} AS {quote_identifier(item.alias)}")
        else:
            items.append(item.expression)
    return items


def _name_computed_items(query: SelectQuery) -> SelectQuery:
    """Alias unaliased items that are not column references as `_col<position>`."""
    items = []
    for position, item in enumerate(query.select):
        if item.alias or _COLUMN_REFERENCE.fullmatch(item.expression.strip()):
            items.append(item)
        else:
            items.append(item.model_copy(update={"alias": f"_col{position}"}))
    return query.model_copy(update={"select": items})


def _outer_name(item: SelectItem) -> str:
    """Name ``item`` is visible as from the enclosing SELECT."""
    if item.alias:
        return quote_identifier(item.alias)
    expression = item.expression.strip()
    if expression.endswith("*"):
        return "*"
    last = re.findall(_IDENTIFIER, expression)[-1]
    if last.startswith("`"):
        return last
    return quote_identifier(last)


def _order_sql(query: SelectQuery) -> str:
    return ", ".join(f"{order.expression} {order.direction}" for order in query.order_by)


def render_select(query: SelectQuery, extra_items: Optional[List[str]] = None) -> str:
    """Render ``query`` as a single-line SELECT statement."""
    items = _select_item_sql(query) + list(extra_items or [])
    sql = f"SELECT {', '.join(items)} FROM {query.from_}"
    if query.where:
        sql += f" WHERE {query.where}"
    if query.group_by:
        sql += f" GROUP BY {', '.join(query.group_by)}"
    if query.order_by:
        sql += f" ORDER BY {_order_sql(query)}"
    return sql


def limit(query: SelectQuery, items: int) -> SqlFragment:
    if items < 1:
        raise ValueError(f"limit must be positive, got {items}")
    return SqlFragment(sql=f"{render_select(query)} LIMIT {int(items)}")


def paginate(query: SelectQuery, page: int, items: int) -> SqlFragment:
    """
    Restrict ``query`` to page ``page`` (1-based) of ``items`` rows.

    The first page is a plain LIMIT. Later pages number the rows with
    row_number() over the query's own ORDER BY inside a subquery, keep rows
    past the offset and re-apply the limit. Without an ORDER BY the row
    numbering, and therefore page membership, is up to the engine.
    """
    if page < 1 or items < 1:
        raise ValueError(f"page and items must be positive, got page={page} items={items}")

    offset = (page - 1) * items
    if offset == 0:
        return limit(query, items)

    if not query.order_by:
        logger.warning("Paginating a query without ORDER BY; page contents are not deterministic")
    query = _name_computed_items(query)
    window = f"row_number() OVER (ORDER BY {_order_sql(query)})" if query.order_by else "row_number() OVER ()"

    inner = render_select(query, extra_items=[f"{window} AS {quote_identifier(ROWNUM_COLUMN)}"])
    outer_items = ", ".join(_outer_name(item) for item in query.select)
    rownum = quote_identifier(ROWNUM_COLUMN)
    return SqlFragment(
        sql=f"SELECT {outer_items} FROM ({inner}) WHERE {rownum} > {offset} LIMIT {items}"
    )
