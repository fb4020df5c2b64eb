import os
import tempfile

os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="webzine-media-"))
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com,editor@example.com")
os.environ.setdefault("ADMIN_ACCOUNT_EMAIL", "admin@example.com")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, sessionmaker
from sqlalchemy.pool import StaticPool

from auth.services import AuthService
from config import settings
from content.dedup import recent_likes, recent_views
from content.models import Author, Content
from database import Base, get_db
from main import app
from media.storage import LocalStorage, get_storage

ADMIN_PASSWORD = "correct horse"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD


@pytest.fixture(scope="session")
def admin_password_hash():
    return AuthService.hash_password(ADMIN_PASSWORD)


@pytest.fixture(autouse=True)
def setup_database(monkeypatch, admin_password_hash):
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", admin_password_hash)
    recent_views.clear()
    recent_likes.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "media"), "/media")


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, AuthService.create_session_token("admin@example.com"))
    return client


@pytest.fixture
def make_content(db):
    def _make(**overrides):
        values = {
            "title": "봄내 산책",
            "content": "<p>호숫가를 따라 걸었다.</p>",
            "category": "essay",
            "author_name": "김유정",
            "is_published": True,
        }
        values.update(overrides)
        author = db.query(Author).filter(Author.name == values["author_name"]).first()
        if author is None:
            author = Author(name=values["author_name"])
            db.add(author)
            db.flush()
        content = Content(author_id=author.id, **values)
        db.add(content)
        db.commit()
        db.refresh(content)
        return content
    return _make


@pytest.fixture
def failing_query(monkeypatch):
    """Make one ``Query`` method fail the way a locked or unreachable database does."""
    def _fail(method):
        def _raise(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        monkeypatch.setattr(Query, method, _raise)
    return _fail
