"""
Standard compliance test suite for dialect adapters.
Any new adapter should subclass ``AdapterComplianceSuite`` and override the
``adapter`` fixture.
"""
from typing import Any, Dict, Optional

import pytest
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .capabilities import DialectFeature, WeekDay
from .errors import UnsupportedOperationError
from .interfaces import SqlDialectAdapter
from .models import Expression, LogicalType, OrderItem, SelectItem, SelectQuery


class ConnectionFixtureSettings(BaseSettings):
    """Connection parameters for integration tests, read from MB_CLICKZETTA_TEST_* variables."""

    model_config = SettingsConfigDict(env_prefix="MB_CLICKZETTA_TEST_", extra="ignore")

    instance: str = "instance"
    service: str = "singdata.com"
    workspace: str = "example"
    user: str = "user"
    password: str = "password"
    virtual_cluster: str = Field(default="default", validation_alias="MB_CLICKZETTA_TEST_VIRTUALCLUSTER")
    schema_name: Optional[str] = Field(default="metabase", validation_alias="MB_CLICKZETTA_TEST_SCHEMA")
    additional: Optional[str] = "transpile=127.0.0.1:8531"

    def to_connection_details(self) -> Dict[str, Any]:
        """Connection details in the camelCase shape the host stores."""
        return {
            "instance": self.instance,
            "service": self.service,
            "workspace": self.workspace,
            "user": self.user,
            "password": self.password,
            "virtualCluster": self.virtual_cluster,
            "schema": self.schema_name,
            "additional": self.additional,
        }


class AdapterComplianceSuite:
    @pytest.fixture
    def adapter(self) -> SqlDialectAdapter:
        """Override this fixture in subclass to return the adapter under test."""
        raise NotImplementedError

    def test_dialect_name(self, adapter):
        assert isinstance(adapter.get_dialect(), str)
        assert adapter.get_dialect()

    def test_feature_flags_are_booleans(self, adapter):
        for feature in DialectFeature:
            assert isinstance(adapter.supports(feature), bool)

    def test_unknown_feature_is_unsupported(self, adapter):
        assert adapter.supports("no-such-feature") is False
        with pytest.raises(UnsupportedOperationError):
            adapter.require("no-such-feature")

    def test_start_of_week_is_a_weekday(self, adapter):
        assert isinstance(adapter.db_start_of_week(), WeekDay)

    def test_type_mapping_is_total(self, adapter):
        assert adapter.map_type("definitely_not_a_type") == LogicalType.UNKNOWN
        assert adapter.map_type("") == LogicalType.UNKNOWN

    def test_unknown_expression_op_is_rejected(self, adapter):
        with pytest.raises(UnsupportedOperationError):
            adapter.translate(Expression(op="definitely-not-an-op"))

    def test_first_page_is_a_plain_limit(self, adapter):
        query = SelectQuery(
            select=[SelectItem(expression="id")],
            from_="t",
            order_by=[OrderItem(expression="id")],
        )
        sql = adapter.paginate(query, page=1, items=5).sql
        assert sql.endswith("LIMIT 5")
        assert "row_number" not in sql.lower()

    def test_foreign_keys_match_feature_flag(self, adapter):
        if adapter.supports(DialectFeature.FOREIGN_KEYS):
            pytest.skip("adapter reports foreign keys")
        assert adapter.describe_table_fks(None, "schema", "table") == set()
