import pytest
from sqlalchemy.orm import Session

from repokit.config import refresh_settings
from repokit.db.database import create_engine_from_settings, get_session_factory
from repokit.db.models import Base
from repokit.services.event_dispatcher import EventDispatcher
from tests.fixtures.domain import ArticleRepository, TagRepository


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Each test starts from default settings regardless of the outer environment."""
    for env_name in (
        "REPOKIT_DATABASE_URL",
        "REPOKIT_DB_ECHO",
        "REPOKIT_STRICT_HYDRATION",
        "REPOKIT_DEFAULT_PER_PAGE",
    ):
        monkeypatch.delenv(env_name, raising=False)
    refresh_settings()
    yield
    refresh_settings()


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the schema created."""
    eng = create_engine_from_settings("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def db_session(engine) -> Session:
    db = get_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()


class RecordingDispatcher(EventDispatcher):
    """Dispatcher that remembers every (topic, payload) it was asked to publish."""

    def __init__(self):
        super().__init__()
        self.events = []

    def dispatch(self, topic, payload=None):
        self.events.append((topic, payload))
        super().dispatch(topic, payload)

    @property
    def topics(self):
        return [topic for topic, _ in self.events]


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def articles(db_session, dispatcher):
    return ArticleRepository(db_session, notifier=dispatcher)


@pytest.fixture
def tags(db_session, dispatcher):
    return TagRepository(db_session, notifier=dispatcher)


@pytest.fixture
def article_factory(articles):
    def _create(title: str = "Hello", **fields):
        return articles.create({"title": title, **fields})
    return _create
