import pytest
import sqlalchemy
from sqlalchemy.exc import NoSuchModuleError

from dialect_adapter_sdk import DialectFeature, DialectSettings, Expression, QueryResult, WeekDay
from dialect_adapter_sdk.errors import (
    AdapterConnectionError,
    ConfigurationError,
    ConnectionErrorHint,
    UnsupportedOperationError,
)
from dialect_adapter_clickzetta import ClickZettaAdapter


@pytest.mark.parametrize(
    "feature, expected",
    [
        (DialectFeature.DATETIME_DIFF, True),
        (DialectFeature.NOW, True),
        (DialectFeature.PERCENTILE_AGGREGATIONS, True),
        (DialectFeature.REGEX, True),
        (DialectFeature.CONVERT_TIMEZONE, False),
        (DialectFeature.CONNECTION_IMPERSONATION, False),
        (DialectFeature.CONNECTION_IMPERSONATION_REQUIRES_ROLE, False),
        (DialectFeature.FOREIGN_KEYS, False),
    ],
)
def test_feature_flags(adapter, feature, expected):
    assert adapter.supports(feature) is expected
    assert adapter.supports(feature.value) is expected


def test_require_unsupported_feature_raises(adapter):
    adapter.require(DialectFeature.REGEX)
    with pytest.raises(UnsupportedOperationError):
        adapter.require(DialectFeature.CONVERT_TIMEZONE)


def test_dialect_name_and_start_of_week(adapter):
    assert adapter.get_dialect() == "clickzetta"
    assert adapter.db_start_of_week() == WeekDay.SUNDAY
    assert str(adapter) == "clickzetta (all schemas)"


def test_start_of_week_setting_reaches_translator(connection_details):
    # Arrange
    adapter = ClickZettaAdapter(
        connection_options=connection_details,
        settings=DialectSettings(start_of_week="monday"),
    )

    # Act
    sql = adapter.translate(Expression(op="date", unit="week", args=["x"])).sql

    # Assert
    assert adapter.db_start_of_week() == WeekDay.MONDAY
    assert sql == "date_trunc('week', CAST(x AS TIMESTAMP))"


@pytest.mark.parametrize(
    "message",
    [
        "Object does not exist: workspace ws",
        "CZLH-42000: Error\nObject does not exist\nat line 1",
    ],
)
def test_humanize_missing_object(adapter, message):
    assert adapter.humanize_connection_error(message) == ConnectionErrorHint.DATABASE_NAME_INCORRECT


def test_humanize_passes_other_messages_through(adapter):
    assert adapter.humanize_connection_error("Connection refused") == "Connection refused"


def test_can_connect_is_lenient(adapter, connection_details):
    assert adapter.can_connect(dict(connection_details, password="wrong")) is True


def test_can_connect_validates_required_fields(adapter):
    with pytest.raises(ConfigurationError):
        adapter.can_connect({"instance": "i", "service": "s"})


def test_build_connection_requires_options(settings):
    with pytest.raises(ConfigurationError):
        ClickZettaAdapter(settings=settings).build_connection()


def test_connect_builds_engine_from_descriptor(monkeypatch, settings, connection_details):
    # Arrange
    calls = {}

    def fake_create_engine(url, **kwargs):
        calls["url"] = url
        calls["kwargs"] = kwargs
        return "engine"

    monkeypatch.setattr("dialect_adapter_clickzetta.adapter.create_engine", fake_create_engine)
    adapter = ClickZettaAdapter(connection_options=dict(connection_details, schema="metabase"), settings=settings)

    # Act
    adapter.connect()

    # Assert
    assert adapter.engine == "engine"
    assert calls["url"] == (
        "clickzetta://inst.api.clickzetta.com/ws/metabase"
        "?user=analyst&password=hunter2&virtualCluster=default&schema=metabase"
    )
    assert calls["kwargs"] == {"pool_pre_ping": True}


def test_connect_classifies_driver_errors(monkeypatch, adapter):
    def fake_create_engine(url, **kwargs):
        raise NoSuchModuleError("Object does not exist: workspace ws")

    monkeypatch.setattr("dialect_adapter_clickzetta.adapter.create_engine", fake_create_engine)

    with pytest.raises(AdapterConnectionError) as exc_info:
        adapter.connect()

    assert exc_info.value.hint == ConnectionErrorHint.DATABASE_NAME_INCORRECT
    assert isinstance(exc_info.value.raw, NoSuchModuleError)


def test_execute_uses_host_executor(settings, connection_details):
    # Arrange
    calls = []

    def host_executor(sql, row_limit):
        calls.append((sql, row_limit))
        return QueryResult(columns=["id"], rows=[[1]], row_count=1)

    adapter = ClickZettaAdapter(
        connection_options=dict(connection_details, schema="metabase"),
        settings=settings,
        executor=host_executor,
    )

    # Act
    result = adapter.execute("SELECT * FROM `metabase`.`venues`", row_limit=5, caller_identity="a@b.c")

    # Assert
    assert calls == [("set query_tag='a@b.c';\nSELECT * FROM `venues`", 5)]
    assert result.rows == [[1]]


def test_execute_strips_settings_default_schema_without_configured_schema(settings, connection_details):
    calls = []
    adapter = ClickZettaAdapter(
        connection_options=connection_details,
        settings=settings,
        executor=lambda sql, limit: calls.append(sql) or QueryResult(columns=[], rows=[], row_count=0),
    )

    adapter.execute("SELECT * FROM `public`.`venues`")

    assert calls == ["SELECT * FROM `venues`"]


def test_execute_connects_lazily_through_sqlalchemy(monkeypatch, adapter):
    # Arrange
    real_create_engine = sqlalchemy.create_engine
    monkeypatch.setattr(
        "dialect_adapter_clickzetta.adapter.create_engine",
        lambda url, **kwargs: real_create_engine("sqlite://"),
    )

    # Act
    result = adapter.execute("SELECT 1 AS one")

    # Assert
    assert adapter.engine is not None
    assert result.columns == ["one"]
    assert result.rows == [[1]]


def test_prettify_formats_sql(adapter):
    pretty = adapter.prettify("select a, b from t where a = 1")

    assert pretty.startswith("SELECT")
    assert "\n" in pretty


def test_prettify_returns_unparseable_sql_unchanged(adapter):
    assert adapter.prettify("SELECT 'unterminated") == "SELECT 'unterminated"


def test_limit_and_paginate_delegate(adapter):
    from dialect_adapter_sdk import SelectItem, SelectQuery

    query = SelectQuery(select=[SelectItem(expression="id")], from_="t")

    assert adapter.limit(query, 3).sql == "SELECT id FROM t LIMIT 3"
    assert adapter.paginate(query, 1, 3).sql == "SELECT id FROM t LIMIT 3"
