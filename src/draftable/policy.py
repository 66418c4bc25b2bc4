"""Publication policy: draft vs. published visibility keyed by a timestamp column.

A record is published when its publish timestamp is set and not in the future.
Nothing else is stored; the state is recomputed against the clock every time it
is read, so a scheduled record becomes published without a second write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Protocol

from sqlalchemy import and_, inspect as sa_inspect, or_
from sqlalchemy.orm import Mapper
from sqlalchemy.sql import ColumnElement

from .clock import TimestampInput, now, parse_timestamp, to_utc
from .config import settings
from .exceptions import ConfigurationError
from .scopes import ScopedQuery, add_global_scope

logger = logging.getLogger(__name__)


class PublicationStatus(str, Enum):
    """Derived publication state"""

    DRAFT = "DRAFT"  # no publish timestamp
    SCHEDULED = "SCHEDULED"  # publish timestamp in the future
    PUBLISHED = "PUBLISHED"


class HasPublicationState(Protocol):
    """A mapped record type carrying a publish timestamp.

    ``PUBLISHED_AT_COLUMN`` overrides the timestamp attribute name; when it is
    unset the ``published_at_column`` setting applies.
    """

    PUBLISHED_AT_COLUMN: Optional[str]

    def save(self, session=None): ...


@dataclass(frozen=True)
class PublicationPolicy:
    """Column binding and predicates for one record type."""

    model: type
    column_name: str
    scope_name: str

    @classmethod
    def for_model(cls, model: type, mapper: Optional[Mapper] = None) -> "PublicationPolicy":
        """Resolve the policy of ``model`` from its class constant and settings.

        Raises:
            ConfigurationError: If the resolved column is not mapped on ``model``
        """
        mapper = mapper if mapper is not None else sa_inspect(model)
        column_name = getattr(model, "PUBLISHED_AT_COLUMN", None) or settings.published_at_column
        if column_name not in mapper.columns:
            raise ConfigurationError(
                f"{model.__name__} has no mapped column '{column_name}' to store its publish timestamp"
            )
        return cls(model=model, column_name=column_name, scope_name=settings.published_scope_name)

    @property
    def column(self):
        return getattr(self.model, self.column_name)

    @property
    def table_column(self):
        return sa_inspect(self.model).columns[self.column_name]

    @property
    def qualified_column_name(self) -> str:
        return f"{self.table_column.table.name}.{self.table_column.name}"

    def decide_column_name(self, query: ScopedQuery) -> str:
        """Qualified table column name when ``query`` joins other tables, bare name otherwise.

        Both forms name the database column, which can differ from the mapped
        attribute in ``column_name``.
        """
        if query.has_joins():
            return self.qualified_column_name
        return self.table_column.name

    def visible_criteria(self, at: Optional[datetime] = None) -> ColumnElement:
        at = at if at is not None else now()
        return and_(self.column.is_not(None), self.column <= at)

    def draft_criteria(self, at: Optional[datetime] = None) -> ColumnElement:
        at = at if at is not None else now()
        return or_(self.column.is_(None), self.column > at)

    def scope(self, model: type) -> ColumnElement:
        return self.visible_criteria()

    def get(self, record) -> Optional[datetime]:
        return getattr(record, self.column_name)

    def set(self, record, value: Optional[datetime]) -> None:
        setattr(record, self.column_name, value)

    def is_published(self, record, at: Optional[datetime] = None) -> bool:
        value = self.get(record)
        if value is None:
            return False
        at = to_utc(at) if at is not None else now()
        return to_utc(value) <= at

    def status(self, record, at: Optional[datetime] = None) -> PublicationStatus:
        if self.get(record) is None:
            return PublicationStatus.DRAFT
        if self.is_published(record, at):
            return PublicationStatus.PUBLISHED
        return PublicationStatus.SCHEDULED


_policies: Dict[type, PublicationPolicy] = {}


def install_policy(mapper: Mapper, model: type) -> PublicationPolicy:
    """Bind a policy to a newly mapped record type and register its default scope."""
    policy = PublicationPolicy.for_model(model, mapper)
    _policies[model] = policy
    add_global_scope(model, policy.scope_name, policy.scope)
    logger.debug(f"Installed publication policy on {model.__name__} (column={policy.column_name})")
    return policy


def policy_for(model: type) -> PublicationPolicy:
    try:
        return _policies[model]
    except KeyError:
        raise ConfigurationError(f"{model.__name__} is not a mapped draftable record type") from None


def with_drafts(query: ScopedQuery) -> ScopedQuery:
    """Drop the default-visibility scope so drafts and published records both match."""
    return query.without_global_scope(policy_for(query.model).scope_name)


def only_drafts(query: ScopedQuery) -> ScopedQuery:
    """Match only records that are currently drafts, scheduled ones included."""
    policy = policy_for(query.model)
    return with_drafts(query).where(lambda q: policy.draft_criteria())


def is_published(record: HasPublicationState, at: Optional[datetime] = None) -> bool:
    return policy_for(type(record)).is_published(record, at)


def is_draft(record: HasPublicationState, at: Optional[datetime] = None) -> bool:
    return not is_published(record, at)


def set_published_at(record: HasPublicationState, date: TimestampInput):
    policy = policy_for(type(record))
    value = parse_timestamp(date)
    policy.set(record, value)
    logger.debug(f"{type(record).__name__}.{policy.column_name} set to {value}")
    return record


def set_published(record: HasPublicationState, published: bool = True):
    if not published:
        return set_published_at(record, None)
    if is_draft(record):
        return set_published_at(record, now())
    return record
