from tests.fixtures.domain import ArticleEntity, ArticleFilter


def test_create_emits_created_with_entity(articles, dispatcher):
    entity = articles.create({"title": "Evented"})
    assert dispatcher.events == [("articles.entity.created", entity)]
    assert isinstance(dispatcher.events[0][1], ArticleEntity)


def test_update_emits_updated_with_new_state(articles, article_factory, dispatcher):
    created = article_factory("Old")
    articles.update(created.get_id(), {"title": "New"})

    topic, payload = dispatcher.events[-1]
    assert topic == "articles.entity.updated"
    assert payload.get_title() == "New"


def test_delete_emits_deleted_with_pre_delete_state(articles, article_factory, dispatcher):
    created = article_factory("Doomed")
    articles.delete(created.get_id())

    topic, payload = dispatcher.events[-1]
    assert topic == "articles.entity.deleted"
    assert payload.get_title() == "Doomed"
    assert payload.get_deleted_at() is None


def test_restore_emits_restored_once(articles, article_factory, dispatcher):
    created = article_factory("Back")
    articles.delete(created.get_id())
    articles.restore(created.get_id())

    assert dispatcher.topics.count("articles.entity.restored") == 1
    assert dispatcher.events[-1][1].get_title() == "Back"


def test_force_delete_emits_permanently_deleted(articles, article_factory, dispatcher):
    created = article_factory("Gone")
    articles.force_delete(created.get_id())
    assert dispatcher.topics[-1] == "articles.entity.permanently_deleted"


def test_bulk_create_emits_one_event_per_record(articles, dispatcher):
    created = articles.bulk_create([{"title": "a"}, {"title": "b"}])
    assert dispatcher.topics == ["articles.entity.created", "articles.entity.created"]
    assert [payload for _, payload in dispatcher.events] == created


def test_condition_and_filter_bulk_operations_emit_nothing(articles, article_factory, dispatcher):
    article_factory("a", status="draft")
    article_factory("b", status="draft")
    dispatcher.events.clear()

    articles.bulk_update({"status": "draft"}, {"views": 1})
    articles.update_by_filter(ArticleFilter(status="draft"), {"views": 2})
    articles.delete_by_filter(ArticleFilter(status="draft"))
    articles.bulk_delete({"status": "draft"})

    assert dispatcher.events == []


def test_failed_lookups_emit_nothing(articles, dispatcher):
    articles.update(999, {"title": "x"})
    articles.delete(999)
    articles.force_delete(999)
    assert dispatcher.events == []


def test_events_are_prefixed_per_repository(tags, dispatcher):
    tags.create({"label": "orm"})
    assert dispatcher.topics == ["tags.entity.created"]


def test_wildcard_listener_sees_all_repositories(articles, tags, dispatcher):
    seen = []
    dispatcher.listen("*.entity.created", lambda topic, payload: seen.append(topic))
    articles.create({"title": "x"})
    tags.create({"label": "y"})
    assert seen == ["articles.entity.created", "tags.entity.created"]
