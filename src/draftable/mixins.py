"""Draftable mixin for declarative models.

Usage:
    class Article(Draftable, Base):
        __tablename__ = "articles"

        id = Column(Integer, primary_key=True)
        published_at = published_at_column()

    Article.query().all(session)          # published only
    Article.with_drafts().all(session)    # everything
    Article.only_drafts().all(session)    # drafts and scheduled records

    article.publish_at("2030-01-01")      # scheduled; becomes visible on its own
"""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, object_session

from . import policy as _policy
from .clock import TimestampInput
from .exceptions import UnboundRecordError
from .policy import PublicationPolicy, PublicationStatus
from .scopes import ScopedQuery

logger = logging.getLogger(__name__)


class Draftable:
    """Adds draft/published visibility to a mapped class.

    The mapped class must declare the publish timestamp column itself (see
    ``draftable.types.published_at_column``). Set ``PUBLISHED_AT_COLUMN`` to
    use a column other than ``published_at``.
    """

    PUBLISHED_AT_COLUMN: ClassVar[Optional[str]] = None

    @classmethod
    def publication_policy(cls) -> PublicationPolicy:
        return _policy.policy_for(cls)

    @classmethod
    def published_at_column_name(cls) -> str:
        return cls.publication_policy().column_name

    @classmethod
    def qualified_published_at_column_name(cls) -> str:
        return cls.publication_policy().qualified_column_name

    @classmethod
    def decide_published_at_column(cls, query: ScopedQuery) -> str:
        return cls.publication_policy().decide_column_name(query)

    @classmethod
    def query(cls) -> ScopedQuery:
        """Query with every global scope applied, so drafts are excluded."""
        return ScopedQuery(cls)

    @classmethod
    def with_drafts(cls, query: Optional[ScopedQuery] = None) -> ScopedQuery:
        return _policy.with_drafts(query if query is not None else cls.query())

    @classmethod
    def only_drafts(cls, query: Optional[ScopedQuery] = None) -> ScopedQuery:
        return _policy.only_drafts(query if query is not None else cls.query())

    def is_published(self) -> bool:
        return _policy.is_published(self)

    def is_draft(self) -> bool:
        return not self.is_published()

    def publication_status(self) -> PublicationStatus:
        return self.publication_policy().status(self)

    def set_published_at(self, date: TimestampInput):
        """Set the publish timestamp in memory. Strings are parsed as ISO-8601."""
        return _policy.set_published_at(self, date)

    def set_published(self, published: bool = True):
        """Publish now (unless already published) or clear the timestamp, in memory."""
        return _policy.set_published(self, published)

    def save(self, session: Optional[Session] = None):
        """Persist the record in ``session`` or the session it is attached to."""
        session = session if session is not None else object_session(self)
        if session is None:
            raise UnboundRecordError(
                f"{type(self).__name__} is not attached to a session; pass one to save()"
            )
        session.add(self)
        try:
            session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save {type(self).__name__}: {e}")
            raise
        return self

    def publish_at(self, date: TimestampInput, session: Optional[Session] = None):
        """Set the publish timestamp and save. A future date schedules the record."""
        self.set_published_at(date)
        return self.save(session)

    def publish(self, published: bool = True, session: Optional[Session] = None):
        self.set_published(published)
        return self.save(session)

    def draft(self, session: Optional[Session] = None):
        return self.publish(False, session=session)


@event.listens_for(Draftable, "after_mapper_constructed", propagate=True)
def _install_publication_policy(mapper, class_):
    _policy.install_policy(mapper, class_)
