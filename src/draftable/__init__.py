"""Draft vs. published visibility for SQLAlchemy records."""

from .clock import FixedClock, SystemClock, now, set_clock, use_clock
from .exceptions import (
    ConfigurationError,
    DraftableError,
    TimestampParseError,
    UnboundRecordError,
)
from .mixins import Draftable
from .policy import (
    HasPublicationState,
    PublicationPolicy,
    PublicationStatus,
    only_drafts,
    with_drafts,
)
from .scopes import ScopedQuery, add_global_scope, global_scopes, remove_global_scope
from .types import UTCDateTime, published_at_column

__all__ = [
    "ConfigurationError",
    "Draftable",
    "DraftableError",
    "FixedClock",
    "HasPublicationState",
    "PublicationPolicy",
    "PublicationStatus",
    "ScopedQuery",
    "SystemClock",
    "TimestampParseError",
    "UTCDateTime",
    "UnboundRecordError",
    "add_global_scope",
    "global_scopes",
    "now",
    "only_drafts",
    "published_at_column",
    "remove_global_scope",
    "set_clock",
    "use_clock",
    "with_drafts",
]
