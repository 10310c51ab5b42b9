from datetime import datetime, timedelta

import pytest

from cinescope.exceptions import UpstreamFetchError
from cinescope.models.movie import Movie
from cinescope.models.show import Show
from cinescope.services.freshness_cache import FreshnessCache, normalize_movie, normalize_show


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class CountingRefresh:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


def movie_payload(movie_id=42, title="The Answer", **extra):
    payload = {
        "id": movie_id,
        "title": title,
        "overview": "A movie about everything.",
        "release_date": "2005-04-28",
        "vote_average": 6.7,
        "vote_count": 4100,
        "popularity": 22.5,
        "genres": [{"id": 35, "name": "Comedy"}, {"id": 878, "name": "Science Fiction"}],
        "runtime": 109,
        "credits": {"cast": [{"id": 1, "name": "Someone"}]},
        "videos": {"results": []},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0))


@pytest.fixture
def cache(clock):
    return FreshnessCache(Movie, "movie_id", normalize_movie, clock=clock)


def test_miss_calls_refresh_once_stores_and_returns_payload(db_session, cache, clock):
    payload = movie_payload()
    refresh = CountingRefresh(payload)

    result = cache.get_or_refresh(db_session, 42, refresh)

    assert refresh.calls == 1
    assert result == payload
    stored = db_session.query(Movie).filter(Movie.movie_id == 42).one()
    assert stored.title == "The Answer"
    assert stored.runtime == 109
    assert stored.genres == payload["genres"]
    assert stored.tmdb_data == payload
    assert stored.last_updated == clock.now


def test_hit_within_window_skips_refresh(db_session, cache, clock):
    cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))
    clock.advance(hours=23, minutes=59, seconds=59)
    refresh = CountingRefresh(movie_payload(title="Changed"))

    result = cache.get_or_refresh(db_session, 42, refresh)

    assert refresh.calls == 0
    assert result["title"] == "The Answer"


def test_hit_returns_full_raw_response(db_session, cache, clock):
    cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))
    clock.advance(hours=1)

    result = cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))

    assert result["credits"] == {"cast": [{"id": 1, "name": "Someone"}]}
    assert "videos" in result


def test_lookup_at_exactly_24_hours_refreshes(db_session, cache, clock):
    cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))
    clock.advance(hours=24)
    refresh = CountingRefresh(movie_payload(title="Remastered"))

    result = cache.get_or_refresh(db_session, 42, refresh)

    assert refresh.calls == 1
    assert result["title"] == "Remastered"
    stored = db_session.query(Movie).filter(Movie.movie_id == 42).one()
    assert stored.title == "Remastered"
    assert stored.last_updated == clock.now


def test_refresh_upserts_a_single_row(db_session, cache, clock):
    cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))
    first_update = db_session.query(Movie).one().last_updated
    clock.advance(days=2)

    cache.get_or_refresh(db_session, 42, CountingRefresh(movie_payload()))

    rows = db_session.query(Movie).all()
    assert len(rows) == 1
    assert rows[0].last_updated > first_update


def test_failed_refresh_leaves_stale_entry_untouched(db_session, cache, clock):
    original = movie_payload()
    cache.get_or_refresh(db_session, 42, CountingRefresh(original))
    stored_at = clock.now
    clock.advance(hours=30)
    refresh = CountingRefresh(error=UpstreamFetchError("/movie/42", "502 Bad Gateway", status_code=502))

    with pytest.raises(UpstreamFetchError):
        cache.get_or_refresh(db_session, 42, refresh)

    db_session.expire_all()
    stored = db_session.query(Movie).filter(Movie.movie_id == 42).one()
    assert stored.tmdb_data == original
    assert stored.last_updated == stored_at


def test_failed_refresh_on_absent_key_stores_nothing(db_session, cache):
    refresh = CountingRefresh(error=UpstreamFetchError("/movie/7", "timed out"))

    with pytest.raises(UpstreamFetchError):
        cache.get_or_refresh(db_session, 7, refresh)

    assert db_session.query(Movie).count() == 0


def test_failure_is_not_cached(db_session, cache):
    with pytest.raises(UpstreamFetchError):
        cache.get_or_refresh(db_session, 7, CountingRefresh(error=UpstreamFetchError("/movie/7", "timed out")))

    refresh = CountingRefresh(movie_payload(movie_id=7))
    cache.get_or_refresh(db_session, 7, refresh)

    assert refresh.calls == 1


def test_show_cache_uses_show_projection(db_session, clock):
    shows = FreshnessCache(Show, "show_id", normalize_show, clock=clock)
    payload = {
        "id": 1399,
        "name": "Game of Thrones",
        "first_air_date": "2011-04-17",
        "number_of_seasons": 8,
        "number_of_episodes": 73,
        "genres": [{"id": 18, "name": "Drama"}],
    }

    shows.get_or_refresh(db_session, 1399, CountingRefresh(payload))

    stored = db_session.query(Show).filter(Show.show_id == 1399).one()
    assert stored.name == "Game of Thrones"
    assert stored.first_air_date == "2011-04-17"
    assert stored.number_of_seasons == 8
    assert stored.tmdb_data == payload


def test_sweep_deletes_only_entries_past_retention(db_session, cache, clock):
    cache.get_or_refresh(db_session, 1, CountingRefresh(movie_payload(movie_id=1)))
    clock.advance(days=20)
    cache.get_or_refresh(db_session, 2, CountingRefresh(movie_payload(movie_id=2)))
    clock.advance(days=15)

    deleted = cache.sweep(db_session, timedelta(days=30))
    db_session.commit()

    assert deleted == 1
    assert [movie.movie_id for movie in db_session.query(Movie).all()] == [2]
