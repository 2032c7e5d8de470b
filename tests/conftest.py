import sys
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC))

from dialect_adapter_sdk import DialectSettings  # noqa: E402
from dialect_adapter_clickzetta import ClickZettaAdapter  # noqa: E402


@pytest.fixture
def fake_connection():
    """Factory for a connection whose execute() answers each statement text from a dict of rows."""

    def _make(results: Dict[str, List[Dict[str, Any]]]) -> MagicMock:
        conn = MagicMock()

        def _execute(statement):
            result = MagicMock()
            result.mappings.return_value.all.return_value = results[str(statement)]
            return result

        conn.execute.side_effect = _execute
        return conn

    return _make


@pytest.fixture
def settings():
    return DialectSettings(
        start_of_week="sunday",
        default_schema="public",
        excluded_schemas={"information_schema"},
        session_tagging=True,
    )


@pytest.fixture
def connection_details():
    return {
        "instance": "inst",
        "service": "api.clickzetta.com",
        "workspace": "ws",
        "user": "analyst",
        "password": "hunter2",
        "virtualCluster": "default",
    }


@pytest.fixture
def adapter(settings, connection_details):
    return ClickZettaAdapter(connection_options=connection_details, settings=settings)
