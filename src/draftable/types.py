"""Column types for publish timestamps."""

from __future__ import annotations

from sqlalchemy import Column, DateTime
from sqlalchemy.types import TypeDecorator

from .clock import to_utc


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime.

    - Binds are converted to UTC before they reach the driver
    - Results from backends that drop tzinfo (SQLite) are tagged UTC again
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return to_utc(value)


def published_at_column(**kwargs) -> Column:
    """Nullable publish timestamp column; records start out as drafts."""
    kwargs.setdefault("nullable", True)
    kwargs.setdefault("default", None)
    kwargs.setdefault("index", True)
    return Column(UTCDateTime(), **kwargs)
