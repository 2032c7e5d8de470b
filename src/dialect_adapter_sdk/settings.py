from typing import Annotated, Set

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .capabilities import WeekDay

# Load environment variables from .env into os.environ
load_dotenv()


class DialectSettings(BaseSettings):
    """Dialect adapter configuration backed by environment variables."""

    model_config = SettingsConfigDict(env_prefix="DIALECT_ADAPTER_", extra="ignore")

    start_of_week: WeekDay = Field(
        default=WeekDay.SUNDAY,
        description="First day of the week used for week truncation and day-of-week numbering.",
    )
    default_schema: str = Field(
        default="public",
        description="Schema whose backtick-quoted qualifier is stripped from native SQL before execution.",
    )
    excluded_schemas: Annotated[Set[str], NoDecode] = Field(
        default_factory=lambda: {"information_schema"},
        description="Comma-separated schemas skipped during full-catalog enumeration.",
    )
    session_tagging: bool = Field(
        default=True,
        description="Prefix executed SQL with a query_tag assignment carrying the caller identity.",
    )
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("excluded_schemas", mode="before")
    @classmethod
    def _split_schemas(cls, value):
        if isinstance(value, str):
            return {part.strip().lower() for part in value.split(",") if part.strip()}
        return {str(part).lower() for part in value}

    def configure_logging(self) -> None:
        """Apply ``log_level`` and ``log_json`` to the root logger."""
        from .logger import configure_logging

        configure_logging(level=self.log_level.upper(), json_format=self.log_json)
