import logging

import pytest
from sqlalchemy import create_engine

from dialect_adapter_sdk.models import OrderItem, SelectItem, SelectQuery
from dialect_adapter_clickzetta.pagination import limit, paginate

NAME = "`metabase`.`categories`.`name`"
ID = "`metabase`.`categories`.`id`"
TABLE = "`metabase`.`categories`"


@pytest.fixture
def query():
    return SelectQuery(
        select=[SelectItem(expression=NAME, alias="name"), SelectItem(expression=ID, alias="id")],
        from_=TABLE,
        order_by=[OrderItem(expression=ID, direction="ASC")],
    )


def test_first_page_is_plain_limit(query):
    sql = paginate(query, page=1, items=5).sql

    assert sql == f"SELECT {NAME} AS `name`, {ID} AS `id` FROM {TABLE} ORDER BY {ID} ASC LIMIT 5"


def test_later_page_uses_row_number_window(query):
    # Arrange
    inner = (
        f"SELECT {NAME} AS `name`, {ID} AS `id`, "
        f"row_number() OVER (ORDER BY {ID} ASC) AS `__rownum__` "
        f"FROM {TABLE} ORDER BY {ID} ASC"
    )

    # Act
    sql = paginate(query, page=2, items=5).sql

    # Assert
    assert sql == f"SELECT `name`, `id` FROM ({inner}) WHERE `__rownum__` > 5 LIMIT 5"


def test_offset_is_page_minus_one_times_items(query):
    sql = paginate(query, page=4, items=30).sql

    assert sql.endswith("WHERE `__rownum__` > 90 LIMIT 30")


def test_outer_select_excludes_rownum_column(query):
    sql = paginate(query, page=3, items=10).sql

    assert sql.startswith("SELECT `name`, `id` FROM (")


def test_where_and_group_by_are_kept_inside_the_window():
    # Arrange
    query = SelectQuery.model_validate({
        "select": [
            {"expression": "`v`.`category_id`"},
            {"expression": "count(*)", "alias": "count"},
        ],
        "from": "`metabase`.`venues` `v`",
        "where": "`v`.`price` > 1",
        "group_by": ["`v`.`category_id`"],
        "order_by": [{"expression": "count(*)", "direction": "DESC"}],
    })

    # Act
    sql = paginate(query, page=2, items=2).sql

    # Assert
    assert sql == (
        "SELECT `category_id`, `count` FROM ("
        "SELECT `v`.`category_id`, count(*) AS `count`, "
        "row_number() OVER (ORDER BY count(*) DESC) AS `__rownum__` "
        "FROM `metabase`.`venues` `v` WHERE `v`.`price` > 1 GROUP BY `v`.`category_id` ORDER BY count(*) DESC"
        ") WHERE `__rownum__` > 2 LIMIT 2"
    )


def test_missing_order_by_logs_warning(caplog):
    # Arrange
    query = SelectQuery(select=[SelectItem(expression="id")], from_="t")

    # Act
    with caplog.at_level(logging.WARNING):
        sql = paginate(query, page=2, items=3).sql

    # Assert
    assert "row_number() OVER () AS `__rownum__`" in sql
    assert "without ORDER BY" in caplog.text


def test_star_select_is_not_quoted_in_outer_query():
    query = SelectQuery(select=[SelectItem(expression="*")], from_="t", order_by=[OrderItem(expression="id")])

    sql = paginate(query, page=2, items=1).sql

    assert sql.startswith("SELECT * FROM (SELECT *, row_number()")


@pytest.mark.parametrize("page, items", [(0, 5), (1, 0), (-1, 5)])
def test_non_positive_page_or_items_is_rejected(query, page, items):
    with pytest.raises(ValueError):
        paginate(query, page=page, items=items)


def test_limit(query):
    assert limit(query, 2000).sql.endswith(f"ORDER BY {ID} ASC LIMIT 2000")
    with pytest.raises(ValueError):
        limit(query, 0)


def test_computed_items_without_alias_are_named_for_the_outer_select():
    # Arrange
    query = SelectQuery(
        select=[SelectItem(expression="CAST(`t`.`x` AS INT)"), SelectItem(expression="`t`.`x`")],
        from_="`t`",
        order_by=[OrderItem(expression="`t`.`x`")],
    )

    # Act
    sql = paginate(query, page=2, items=1).sql

    # Assert
    assert sql == (
        "SELECT `_col0`, `x` FROM ("
        "SELECT CAST(`t`.`x` AS INT) AS `_col0`, `t`.`x`, "
        "row_number() OVER (ORDER BY `t`.`x` ASC) AS `__rownum__` "
        "FROM `t` ORDER BY `t`.`x` ASC"
        ") WHERE `__rownum__` > 1 LIMIT 1"
    )


def test_later_page_with_computed_item_runs_on_a_sql_engine():
    # Arrange
    query = SelectQuery(
        select=[SelectItem(expression="CAST(`t`.`x` AS INT)"), SelectItem(expression="`t`.`x`")],
        from_="`t`",
        order_by=[OrderItem(expression="`t`.`x`")],
    )
    sql = paginate(query, page=2, items=1).sql
    engine = create_engine("sqlite://")

    # Act
    with engine.connect() as conn:
        conn.exec_driver_sql("CREATE TABLE t (x TEXT)")
        conn.exec_driver_sql("INSERT INTO t VALUES ('1'), ('2'), ('3')")
        rows = [tuple(row) for row in conn.exec_driver_sql(sql).fetchall()]

    # Assert
    assert rows == [(2, "2")]


def test_quoted_column_name_containing_a_dot_keeps_its_quoting():
    query = SelectQuery(
        select=[SelectItem(expression="`t`.`a.b`")],
        from_="`t`",
        order_by=[OrderItem(expression="`t`.`a.b`")],
    )

    sql = paginate(query, page=2, items=1).sql

    assert sql.startswith("SELECT `a.b` FROM (SELECT `t`.`a.b`, row_number()")
