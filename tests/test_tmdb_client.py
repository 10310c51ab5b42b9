import pytest
import requests

from cinescope.exceptions import NotFoundError, UpstreamFetchError
from cinescope.services.tmdb_service import TMDBClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self.payload = payload
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


def make_client(session, api_key="abc123"):
    return TMDBClient(api_key=api_key, base_url="https://tmdb.test/3/", timeout=5, session=session)


def test_fetch_sends_page_and_api_key():
    session = FakeSession(FakeResponse(payload={"results": [{"id": 1}], "page": 3, "total_pages": 9, "total_results": 170}))

    page = make_client(session).fetch("/movie/popular", 3, {"sort_by": "popularity.desc"})

    assert page == {"results": [{"id": 1}], "page": 3, "total_pages": 9, "total_results": 170}
    sent = session.requests[0]
    assert sent["url"] == "https://tmdb.test/3/movie/popular"
    assert sent["params"] == {"sort_by": "popularity.desc", "page": 3, "api_key": "abc123"}
    assert sent["timeout"] == 5


def test_fetch_fills_missing_listing_keys():
    session = FakeSession(FakeResponse(payload={"results": None}))

    page = make_client(session).fetch("/tv/popular", 2)

    assert page == {"results": [], "page": 2, "total_pages": 0, "total_results": 0}


def test_fetch_detail_appends_videos_and_credits():
    session = FakeSession(FakeResponse(payload={"id": 550, "title": "Fight Club"}))

    detail = make_client(session).fetch_detail("movie", 550)

    assert detail["title"] == "Fight Club"
    assert session.requests[0]["url"].endswith("/movie/550")
    assert session.requests[0]["params"]["append_to_response"] == "videos,credits"


def test_404_raises_not_found():
    session = FakeSession(FakeResponse(status_code=404, payload={"status_message": "not found"}))

    with pytest.raises(NotFoundError) as exc_info:
        make_client(session).fetch_detail("movie", 999999999)

    assert exc_info.value.status_code == 404
    assert "/movie/999999999" in exc_info.value.message


def test_server_error_raises_upstream_error():
    session = FakeSession(FakeResponse(status_code=503))

    with pytest.raises(UpstreamFetchError) as exc_info:
        make_client(session).fetch("/movie/popular")

    assert not isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.status_code == 503


def test_transport_error_raises_upstream_error():
    session = FakeSession(error=requests.exceptions.ConnectTimeout("connect timed out"))

    with pytest.raises(UpstreamFetchError, match="connect timed out"):
        make_client(session).fetch("/tv/on_the_air")


def test_invalid_json_raises_upstream_error():
    session = FakeSession(FakeResponse(invalid_json=True))

    with pytest.raises(UpstreamFetchError, match="invalid JSON"):
        make_client(session).genres("movie")


def test_missing_api_key_fails_without_calling_tmdb():
    session = FakeSession(FakeResponse(payload={}))

    with pytest.raises(UpstreamFetchError, match="API key not configured"):
        make_client(session, api_key=None).fetch("/movie/popular")

    assert session.requests == []


def test_search_passes_query():
    session = FakeSession(FakeResponse(payload={"results": [], "page": 1, "total_pages": 0, "total_results": 0}))

    make_client(session).search("tv", "severance", 1)

    assert session.requests[0]["url"].endswith("/search/tv")
    assert session.requests[0]["params"]["query"] == "severance"


def test_from_env(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "env-key")
    monkeypatch.setenv("TMDB_BASE_URL", "https://proxy.test/3")
    monkeypatch.setenv("TMDB_TIMEOUT", "2.5")

    client = TMDBClient.from_env()

    assert client.api_key == "env-key"
    assert client.base_url == "https://proxy.test/3"
    assert client.timeout == 2.5
