from __future__ import annotations

from importlib.metadata import entry_points
from typing import Any, Dict, List, Type

from .errors import ConfigurationError
from .interfaces import SqlDialectAdapter
from .logger import get_logger

logger = get_logger(__name__)

ENTRY_POINT_GROUP = "dialect_adapter.dialects"


class DialectRegistry:
    """
    Explicit mapping of dialect names to SqlDialectAdapter classes.

    Hosts build one registry, register the dialects they ship with (or
    discover installed ones) and create adapters by name.
    """

    def __init__(self):
        self._adapters: Dict[str, Type[SqlDialectAdapter]] = {}

    def register(self, name: str, adapter_cls: Type[SqlDialectAdapter]) -> None:
        key = name.lower()
        if key in self._adapters and self._adapters[key] is not adapter_cls:
            logger.warning(f"Replacing dialect adapter registered as '{key}'")
        self._adapters[key] = adapter_cls

    def get(self, name: str) -> Type[SqlDialectAdapter]:
        """
        Retrieves the adapter class registered under ``name``.

        Raises:
            ConfigurationError: if no adapter is registered under that name.
        """
        key = name.lower()
        if key not in self._adapters:
            raise ConfigurationError(
                f"No dialect adapter found for '{key}'. "
                f"Available: {self.names()}."
            )
        return self._adapters[key]

    def create(self, name: str, **kwargs: Any) -> SqlDialectAdapter:
        adapter_cls = self.get(name)
        return adapter_cls(**kwargs)

    def names(self) -> List[str]:
        return sorted(self._adapters)

    def discover(self) -> Dict[str, Type[SqlDialectAdapter]]:
        """Registers adapters installed under the 'dialect_adapter.dialects' entry point group.

        Returns:
            Dict[str, Type[SqlDialectAdapter]]: the adapters loaded by this call.
        """
        loaded = {}
        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                adapter_cls = ep.load()
            except ImportError as e:
                logger.error(f"Failed to load dialect adapter {ep.name}: {e}")
                continue
            self.register(ep.name, adapter_cls)
            loaded[ep.name] = adapter_cls
        return loaded
