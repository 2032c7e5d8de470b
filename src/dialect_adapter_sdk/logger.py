import contextvars
import json
import logging
from contextlib import contextmanager
from typing import Optional

_trace_id_ctx = contextvars.ContextVar("trace_id", default=None)
_dialect_ctx = contextvars.ContextVar("dialect", default=None)
_caller_identity_ctx = contextvars.ContextVar("caller_identity", default=None)


class TraceContextFilter(logging.Filter):
    """Stamps trace_id, dialect and caller_identity from the current context onto the record."""
    def filter(self, record):
        record.trace_id = _trace_id_ctx.get()
        record.dialect = _dialect_ctx.get()
        record.caller_identity = _caller_identity_ctx.get()
        return True


@contextmanager
def trace_context(trace_id: str):
    """Context manager to set the trace_id for the current context."""
    token = _trace_id_ctx.set(trace_id)
    try:
        yield
    finally:
        _trace_id_ctx.reset(token)


@contextmanager
def query_context(dialect: str, caller_identity: Optional[str] = None):
    """Tags records logged while a query runs with the dialect and the identity it runs for."""
    dialect_token = _dialect_ctx.set(dialect)
    identity_token = _caller_identity_ctx.set(caller_identity)
    try:
        yield
    finally:
        _caller_identity_ctx.reset(identity_token)
        _dialect_ctx.reset(dialect_token)


def current_trace_id():
    return _trace_id_ctx.get()


class JsonFormatter(logging.Formatter):
    """Formatter that renders each LogRecord as a single JSON object."""

    _STANDARD_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "funcName", "levelname", "levelno", "lineno", "module",
        "msecs", "message", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread", "threadName",
        "taskName", "trace_id", "dialect", "caller_identity",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "trace_id", None):
            log_record["trace_id"] = record.trace_id
        for key in ("dialect", "caller_identity"):
            if getattr(record, key, None):
                log_record[key] = getattr(record, key)

        # Anything passed through `extra=` ends up as a record attribute
        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                log_record[key] = value

        return json.dumps(log_record, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False):
    """Configures the root logger.

    Args:
        level (str): The logging level (default: INFO).
        json_format (bool): Whether to use JSON formatting (default: False).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(TraceContextFilter())

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - [%(trace_id)s] - %(name)s - %(levelname)s - %(message)s"
        ))

    root_logger.addHandler(handler)

    # sqlalchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Gets a named logger."""
    return logging.getLogger(name)
