"""
Log filters: correlation id, static extra fields, query context.

The correlation id lives in a ContextVar, so concurrent query
invocations on one event loop keep their own id.
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional


_correlation_id: ContextVar[Optional[str]] = ContextVar("rest_query_correlation_id", default=None)

# Fields every record of the engine carries (None when not known)
QUERY_CONTEXT_FIELDS = ("method", "url", "attempt")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:16]


def set_correlation_id(correlation_id: str) -> None:
    """
    Set correlation ID for the current context.

    Example:
        >>> set_correlation_id("q-12345")
        >>> get_correlation_id()
        'q-12345'
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current context, or None."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation id for the duration of a block.

    Example:
        >>> with correlation_scope() as cid:
        ...     logger.info("query started")  # carries correlation_id=cid
    """
    cid = correlation_id or new_correlation_id()
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to records when one is bound."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to every record.

    Fields already present on the record win.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class QueryContextFilter(logging.Filter):
    """
    Normalizes query context fields.

    Records logged without ``method``/``url``/``attempt`` get them as None,
    so JSON output has a stable shape.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for name in QUERY_CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True
