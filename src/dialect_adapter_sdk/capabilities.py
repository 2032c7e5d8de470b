from enum import Enum


class DialectFeature(str, Enum):
    """Feature flags a host may query on a dialect adapter."""

    DATETIME_DIFF = "datetime-diff"
    NOW = "now"
    CONVERT_TIMEZONE = "convert-timezone"
    CONNECTION_IMPERSONATION = "connection-impersonation"
    CONNECTION_IMPERSONATION_REQUIRES_ROLE = "connection-impersonation-requires-role"
    FOREIGN_KEYS = "foreign-keys"
    PERCENTILE_AGGREGATIONS = "percentile-aggregations"
    REGEX = "regex"


class WeekDay(str, Enum):
    """Day names accepted as a start of week."""

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @property
    def index(self) -> int:
        """Zero-based position with Sunday as 0."""
        return list(WeekDay).index(self)
