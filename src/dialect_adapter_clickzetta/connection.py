from typing import Any, Dict, List, Mapping, Union

from dialect_adapter_sdk.errors import ConfigurationError
from dialect_adapter_sdk.logger import get_logger
from dialect_adapter_sdk.models import ConnectionDescriptor, ConnectionOptions

logger = get_logger(__name__)

SCHEME = "clickzetta"
REQUIRED_FIELDS = ("instance", "service", "workspace")


def coerce_options(options: Union[ConnectionOptions, Mapping[str, Any]]) -> ConnectionOptions:
    if isinstance(options, ConnectionOptions):
        return options
    return ConnectionOptions.model_validate(dict(options))


def validate_options(options: ConnectionOptions) -> None:
    """Presence check of the fields the URL cannot be built without."""
    missing = [name for name in REQUIRED_FIELDS if not getattr(options, name)]
    if missing:
        raise ConfigurationError(
            f"Missing required connection field(s): {', '.join(missing)}"
        )


def build_url(options: ConnectionOptions) -> str:
    url = f"{SCHEME}://{options.instance}.{options.service}/{options.workspace}"
    if options.schema_name:
        url = f"{url}/{options.schema_name}"
    return url


def build_properties(options: ConnectionOptions) -> str:
    """
    Joins the driver properties with ``&``.

    Values are not escaped and ``additional`` is appended verbatim. When
    ``additional`` repeats an explicit key the engine driver decides which
    occurrence wins.
    """
    password = options.password.get_secret_value() if options.password else None
    pairs = [
        ("user", options.user),
        ("password", password),
        ("virtualCluster", options.virtual_cluster),
        ("schema", options.schema_name),
    ]
    parts: List[str] = [f"{key}={value}" for key, value in pairs if value]

    if options.additional:
        duplicates = set(_keys(options.additional)) & {key for key, value in pairs if value}
        if duplicates:
            logger.debug(f"Additional connection options repeat explicit keys: {sorted(duplicates)}")
        parts.append(options.additional)

    return "&".join(parts)


def build_connection(options: Union[ConnectionOptions, Mapping[str, Any]]) -> ConnectionDescriptor:
    options = coerce_options(options)
    validate_options(options)
    return ConnectionDescriptor(url=build_url(options), properties=build_properties(options))


def connection_pool_properties() -> Dict[str, str]:
    return {"preferredTestQuery": "SELECT 1"}


def _keys(raw: str) -> List[str]:
    return [part.split("=", 1)[0] for part in raw.lstrip("?&").split("&") if part]
