"""Tests for the persisting publication operations."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from draftable.clock import to_utc
from draftable.exceptions import UnboundRecordError
from tests.draftable.models import Article


@pytest.fixture
def draft_article(db_session, clock):
    article = Article(title="Draft")
    db_session.add(article)
    db_session.commit()
    return article


class TestPublishAt:
    def test_past_date_publishes_and_persists(self, db_session, draft_article):
        assert draft_article.is_draft() is True
        assert Article.query().count(db_session) == 0
        assert Article.only_drafts().count(db_session) == 1

        result = draft_article.publish_at("2020-01-01")

        assert result is draft_article
        assert draft_article.is_published() is True
        assert [a.title for a in Article.query().all(db_session)] == ["Draft"]

    def test_timestamp_survives_reload(self, db_session, db_engine, draft_article):
        target = datetime(2020, 1, 1, 8, 30, tzinfo=timezone.utc)
        draft_article.publish_at(target)
        db_session.expire_all()

        reloaded = db_session.get(Article, draft_article.id)
        assert reloaded.published_at == target
        assert reloaded.published_at.tzinfo is not None

    def test_future_date_schedules(self, db_session, clock, draft_article):
        draft_article.publish_at(clock.now() + timedelta(hours=1))

        assert draft_article.is_draft() is True
        assert Article.query().count(db_session) == 0

        clock.advance(hours=1)

        assert draft_article.is_published() is True
        assert Article.query().count(db_session) == 1

    def test_explicit_session_is_used(self, db_session, clock):
        article = Article(title="Detached")
        article.publish_at("2021-06-01", session=db_session)
        assert Article.query().first(db_session).title == "Detached"


class TestPublishAndDraft:
    def test_publish_persists_current_time(self, db_session, clock, draft_article):
        draft_article.publish()
        db_session.expire_all()
        assert to_utc(draft_article.published_at) == clock.now()
        assert Article.query().count(db_session) == 1

    def test_publish_is_idempotent(self, db_session, clock, draft_article):
        draft_article.publish()
        first = draft_article.published_at
        clock.advance(minutes=10)
        draft_article.publish()
        assert draft_article.published_at == first

    def test_publish_false_and_draft_clear_timestamp(self, db_session, clock, draft_article):
        draft_article.publish()
        draft_article.publish(False)
        assert draft_article.published_at is None

        draft_article.publish()
        assert draft_article.draft() is draft_article
        assert draft_article.published_at is None
        assert Article.only_drafts().count(db_session) == 1


class TestSave:
    def test_save_without_session_raises(self, clock):
        article = Article(title="Orphan")
        with pytest.raises(UnboundRecordError, match="not attached to a session"):
            article.publish()
        # the in-memory change is kept; only the write failed
        assert article.published_at == clock.now()

    def test_commit_failure_propagates(self, clock):
        session = Mock()
        session.commit.side_effect = OperationalError("UPDATE articles", {}, Exception("db down"))

        article = Article(title="Unlucky")
        with pytest.raises(OperationalError):
            article.publish_at("2020-01-01", session=session)

        session.add.assert_called_once_with(article)
        session.commit.assert_called_once()

    def test_each_operation_commits_once(self, clock):
        session = Mock()
        article = Article(title="Counted")

        article.publish(session=session)
        article.draft(session=session)
        article.publish_at("2030-01-01", session=session)

        assert session.commit.call_count == 3
