import os

# Must be set before the app modules read the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_BACKGROUND_JOBS"] = "false"
os.environ.setdefault("TMDB_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cinescope.database import Base, get_db
from cinescope.exceptions import NotFoundError, UpstreamFetchError
from cinescope.main import app
from cinescope.models.user import User
from cinescope.utils.dependencies import get_tmdb_client
from cinescope.utils.security import create_access_token, hash_password

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeTMDBClient:
    """
    In-memory stand-in for TMDBClient.

    Listings are registered as a list of pages (each a list of items); every
    call is recorded in `calls`.
    """

    def __init__(self):
        self.listings = {}
        self.details = {}
        self.seasons = {}
        self.genre_lists = {
            "movie": [{"id": 28, "name": "Action"}, {"id": 35, "name": "Comedy"}],
            "tv": [{"id": 18, "name": "Drama"}],
        }
        self.failing = set()
        self.calls = []

    def add_listing(self, path, pages, total_pages=None, total_results=None):
        self.listings[path] = {
            "pages": pages,
            "total_pages": len(pages) if total_pages is None else total_pages,
            "total_results": sum(len(p) for p in pages) if total_results is None else total_results,
        }

    def fail(self, path):
        self.failing.add(path)

    def fetch_calls(self, path):
        return [call[2] for call in self.calls if call[0] == "fetch" and call[1] == path]

    def detail_calls(self, kind, item_id):
        return [call for call in self.calls if call == ("detail", kind, item_id)]

    def fetch(self, resource_path, page=1, params=None):
        self.calls.append(("fetch", resource_path, page, dict(params or {})))
        if resource_path in self.failing:
            raise UpstreamFetchError(resource_path, "503 Server Error", status_code=503)
        listing = self.listings.get(resource_path, {"pages": [], "total_pages": 0, "total_results": 0})
        pages = listing["pages"]
        return {
            "results": list(pages[page - 1]) if 1 <= page <= len(pages) else [],
            "page": page,
            "total_pages": listing["total_pages"],
            "total_results": listing["total_results"],
        }

    def search(self, kind, query, page=1, params=None):
        return self.fetch(f"/search/{kind}", page, params)

    def discover(self, kind, page=1, params=None):
        return self.fetch(f"/discover/{kind}", page, params)

    def trending(self, kind, time_window="week", page=1):
        return self.fetch(f"/trending/{kind}/{time_window}", page)

    def fetch_detail(self, kind, item_id):
        self.calls.append(("detail", kind, item_id))
        endpoint = f"/{kind}/{item_id}"
        if endpoint in self.failing:
            raise UpstreamFetchError(endpoint, "timed out")
        if (kind, item_id) not in self.details:
            raise NotFoundError(endpoint)
        return self.details[(kind, item_id)]

    def tv_season(self, show_id, season_number):
        endpoint = f"/tv/{show_id}/season/{season_number}"
        if (show_id, season_number) not in self.seasons:
            raise NotFoundError(endpoint)
        return self.seasons[(show_id, season_number)]

    def genres(self, kind):
        return self.genre_lists[kind]


def make_items(start_id, count, genre_ids=(18,), release_date="2015-06-01", date_field="release_date"):
    return [
        {"id": start_id + i, "title": f"Title {start_id + i}", "genre_ids": list(genre_ids), date_field: release_date}
        for i in range(count)
    ]


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_tmdb():
    return FakeTMDBClient()


@pytest.fixture
def client(db_session, fake_tmdb, monkeypatch):
    """FastAPI test client with the database and TMDB dependencies overridden."""

    def override_get_db():
        test_db = TestingSessionLocal()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tmdb_client] = lambda: fake_tmdb
    monkeypatch.setenv("ENABLE_BACKGROUND_JOBS", "false")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_tmdb_client, None)


@pytest.fixture
def test_user(db_session):
    user = User(
        username="moviefan",
        email="fan@example.com",
        password_hash=hash_password("secret123"),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    token = create_access_token(data={"sub": test_user.email, "user_id": test_user.id})
    return {"Authorization": f"Bearer {token}"}
