"""
Translation of canonical expression nodes into ClickZetta SQL fragments.

Every supported ``Expression.op`` has one handler in ``ClickZettaTranslator``;
handlers render their arguments recursively and substitute them into fixed
templates. The translator holds no mutable state, only the configured start
of week, so one instance can be shared between callers.
"""
from typing import Callable, Dict, Tuple

from dialect_adapter_sdk.capabilities import WeekDay
from dialect_adapter_sdk.errors import UnsupportedOperationError
from dialect_adapter_sdk.models import Expression, ExpressionArg, SqlFragment

from .quoting import quote_path, quote_string

# date_trunc('week', ...) truncates to Monday, dayofweek(...) numbers Sunday as 1
ENGINE_WEEK_START = WeekDay.MONDAY
ENGINE_DAY_OF_WEEK_START = WeekDay.SUNDAY

TRUNCATION_UNITS = ("minute", "hour", "day", "week", "month", "quarter", "year")

EXTRACTION_TEMPLATES = {
    "minute-of-hour": "minute({x})",
    "hour-of-day": "hour({x})",
    "day-of-month": "dayofmonth({x})",
    "day-of-year": "CAST(date_format({x}, 'D') AS INT)",
    "month-of-year": "month({x})",
    "quarter-of-year": "quarter({x})",
    "week-of-year-iso": "weekofyear({x})",
}

INTERVAL_UNITS = ("millisecond", "second", "minute", "hour", "day", "week", "month", "quarter", "year")

DATETIME_DIFF_BASES = {
    "month": "CAST(months_between({y}, {x}) AS INT)",
    "day": "datediff({y}, {x})",
    "second": "unix_timestamp({y}) - unix_timestamp({x})",
}

# unit -> (base unit, integer divisor); DIV truncates toward zero, so -14 months is -1 year
DATETIME_DIFF_DERIVATIONS: Dict[str, Tuple[str, int]] = {
    "year": ("month", 12),
    "quarter": ("month", 3),
    "week": ("day", 7),
    "hour": ("second", 3600),
    "minute": ("second", 60),
}

UNIX_TIMESTAMP_DIVISORS = {
    "seconds": None,
    "milliseconds": 1000,
    "microseconds": 1000000,
}


def start_of_week_offset(start_of_week: WeekDay) -> int:
    """Days to shift a timestamp forward so the engine's Monday-based week lines up with ``start_of_week``."""
    return (ENGINE_WEEK_START.index - start_of_week.index) % 7


def datetime_diff_chain(unit: str) -> Tuple[str, int]:
    """Resolve ``unit`` to the base difference it is derived from and the divisor applied to it."""
    if unit in DATETIME_DIFF_BASES:
        return unit, 1
    if unit in DATETIME_DIFF_DERIVATIONS:
        return DATETIME_DIFF_DERIVATIONS[unit]
    raise UnsupportedOperationError(f"Unsupported datetime-diff unit: {unit}")


class ClickZettaTranslator:
    def __init__(self, start_of_week: WeekDay = WeekDay.SUNDAY):
        self.start_of_week = WeekDay(start_of_week)
        self._handlers: Dict[str, Callable[[Expression], str]] = {
            "literal": self._literal,
            "field": self._field,
            "now": self._now,
            "date": self._date,
            "interval-add": self._interval_add,
            "datetime-diff": self._datetime_diff,
            "replace": self._replace,
            "regex-match-first": self._regex_match_first,
            "median": self._median,
            "percentile": self._percentile,
            "unix-timestamp": self._unix_timestamp,
        }

    @property
    def supported_ops(self):
        return frozenset(self._handlers)

    def translate(self, node: Expression) -> SqlFragment:
        return SqlFragment(sql=self.render(node))

    def render(self, arg: ExpressionArg) -> str:
        """Render a node or a plain argument to SQL text."""
        if isinstance(arg, Expression):
            handler = self._handlers.get(arg.op)
            if handler is None:
                raise UnsupportedOperationError(f"Unsupported expression op: {arg.op}")
            return handler(arg)
        if arg is None:
            return "NULL"
        if isinstance(arg, bool):
            return "TRUE" if arg else "FALSE"
        if isinstance(arg, (int, float)):
            return str(arg)
        # already compiled SQL
        return arg

    # --- helpers -----------------------------------------------------------------

    def _args(self, node: Expression, count: int):
        if len(node.args) != count:
            raise ValueError(f"'{node.op}' expects {count} argument(s), got {len(node.args)}")
        return [self.render(arg) for arg in node.args]

    @staticmethod
    def _timestamp(sql: str) -> str:
        return f"CAST({sql} AS TIMESTAMP)"

    @staticmethod
    def _dateadd(unit: str, amount, sql: str) -> str:
        return f"dateadd({unit}, {amount}, {sql})"

    # --- handlers ----------------------------------------------------------------

    def _literal(self, node: Expression) -> str:
        (value,) = node.args
        if isinstance(value, str):
            return quote_string(value)
        return self.render(value)

    def _field(self, node: Expression) -> str:
        return quote_path(str(part) for part in node.args)

    def _now(self, node: Expression) -> str:
        return "current_timestamp()"

    def _date(self, node: Expression) -> str:
        (x,) = self._args(node, 1)
        unit = node.unit or "default"
        ts = self._timestamp(x)

        if unit == "default":
            return ts
        if unit == "week":
            return self._week(ts)
        if unit in TRUNCATION_UNITS:
            return f"date_trunc('{unit}', {ts})"
        if unit == "day-of-week":
            return self._day_of_week(ts)
        if unit in EXTRACTION_TEMPLATES:
            return EXTRACTION_TEMPLATES[unit].format(x=ts)
        raise UnsupportedOperationError(f"Unsupported date unit: {unit}")

    def _week(self, ts: str) -> str:
        offset = start_of_week_offset(self.start_of_week)
        if offset == 0:
            return f"date_trunc('week', {ts})"
        shifted = self._dateadd("day", offset, ts)
        return self._dateadd("day", -offset, f"date_trunc('week', {shifted})")

    def _day_of_week(self, ts: str) -> str:
        shift = (self.start_of_week.index - ENGINE_DAY_OF_WEEK_START.index) % 7
        if shift == 0:
            return f"dayofweek({ts})"
        return f"((dayofweek({ts}) + {6 - shift}) % 7) + 1"

    def _interval_add(self, node: Expression) -> str:
        if len(node.args) != 2:
            raise ValueError(f"'{node.op}' expects 2 argument(s), got {len(node.args)}")
        base, amount = node.args
        unit = node.unit
        if unit not in INTERVAL_UNITS:
            raise UnsupportedOperationError(f"Unsupported interval unit: {unit}")
        if isinstance(amount, (int, float)) and not isinstance(amount, bool):
            amount_sql = str(int(amount))
        else:
            amount_sql = self.render(amount)
        return self._dateadd(unit, amount_sql, self._timestamp(self.render(base)))

    def _datetime_diff(self, node: Expression) -> str:
        x, y = self._args(node, 2)
        base_unit, divisor = datetime_diff_chain(node.unit)
        base = DATETIME_DIFF_BASES[base_unit].format(x=x, y=y)
        if divisor == 1:
            return base
        return f"({base}) DIV {divisor}"

    def _replace(self, node: Expression) -> str:
        arg, pattern, replacement = self._args(node, 3)
        return f"regexp_replace({arg}, {pattern}, {replacement})"

    def _regex_match_first(self, node: Expression) -> str:
        arg, pattern = self._args(node, 2)
        return f"regexp_extract({arg}, {pattern}, 0)"

    def _median(self, node: Expression) -> str:
        (arg,) = self._args(node, 1)
        return f"percentile({arg}, 0.5)"

    def _percentile(self, node: Expression) -> str:
        arg, fraction = self._args(node, 2)
        return f"percentile({arg}, {fraction})"

    def _unix_timestamp(self, node: Expression) -> str:
        (x,) = self._args(node, 1)
        unit = node.unit or "seconds"
        if unit not in UNIX_TIMESTAMP_DIVISORS:
            raise UnsupportedOperationError(f"Unsupported unix timestamp unit: {unit}")
        divisor = UNIX_TIMESTAMP_DIVISORS[unit]
        if divisor:
            x = f"{x} / {divisor}"
        return self._timestamp(f"from_unixtime({x})")
