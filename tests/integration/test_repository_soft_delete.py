import pytest

from repokit.errors import UnsupportedOperationError
from tests.fixtures.domain import Article


def test_delete_soft_deletes_and_hides_record(articles, article_factory, db_session):
    created = article_factory("Trash me")
    assert articles.delete(created.get_id()) is True

    assert articles.find_by_id(created.get_id()) is None
    assert articles.find_all() == []
    assert articles.count() == 0
    assert articles.exists({"title": "Trash me"}) is False

    row = db_session.get(Article, created.get_id())
    assert row is not None
    assert row.trashed is True


def test_deleting_twice_reports_missing(articles, article_factory):
    created = article_factory("Once")
    assert articles.delete(created.get_id()) is True
    assert articles.delete(created.get_id()) is False


def test_find_trashed(articles, article_factory):
    keep = article_factory("Keep")
    gone = article_factory("Gone")
    articles.delete(gone.get_id())

    trashed = articles.find_trashed()
    assert [e.get_title() for e in trashed] == ["Gone"]
    assert trashed[0].get_deleted_at() is not None

    assert articles.find_trashed_by_id(gone.get_id()).get_title() == "Gone"
    assert articles.find_trashed_by_id(keep.get_id()) is None


def test_restore_brings_record_back(articles, article_factory):
    created = article_factory("Come back")
    articles.delete(created.get_id())

    restored = articles.restore(created.get_id())
    assert restored.get_title() == "Come back"
    assert restored.get_deleted_at() is None
    assert articles.find_by_id(created.get_id()) is not None
    assert articles.find_trashed() == []


def test_restore_missing_returns_none(articles, dispatcher):
    assert articles.restore(4242) is None
    assert "articles.entity.restored" not in dispatcher.topics


def test_restore_live_record_is_a_no_op(articles, article_factory, dispatcher):
    created = article_factory("Alive")
    result = articles.restore(created.get_id())
    assert result.get_title() == "Alive"
    assert "articles.entity.restored" not in dispatcher.topics


def test_force_delete_removes_row(articles, article_factory, db_session):
    created = article_factory("Forever gone")
    assert articles.force_delete(created.get_id()) is True
    assert db_session.get(Article, created.get_id()) is None


def test_force_delete_removes_trashed_row(articles, article_factory, db_session):
    created = article_factory("Trashed first")
    articles.delete(created.get_id())
    assert articles.force_delete(created.get_id()) is True
    assert articles.find_trashed() == []
    assert db_session.get(Article, created.get_id()) is None


def test_hard_delete_for_models_without_soft_delete(tags):
    tag = tags.create({"label": "python"})
    assert tags.delete(tag.get_id()) is True
    assert tags.find_by_id(tag.get_id()) is None
    assert tags.count() == 0


def test_trashed_operations_unsupported_without_soft_delete(tags):
    tag = tags.create({"label": "sql"})
    with pytest.raises(UnsupportedOperationError):
        tags.find_trashed()
    with pytest.raises(UnsupportedOperationError):
        tags.find_trashed_by_id(tag.get_id())
    with pytest.raises(UnsupportedOperationError):
        tags.restore(tag.get_id())
