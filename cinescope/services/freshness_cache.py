"""
Freshness Cache
===============
Persists TMDB detail responses so the same movie or show is fetched from
TMDB at most once per freshness window (24 hours).

Each entry holds a normalized projection of the response (queryable columns)
plus the raw response in tmdb_data. Callers always get the raw response back,
on hits and on refreshes alike.

There is no locking: two requests missing on the same key both call TMDB and
the last upsert wins.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Type
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cinescope.database import Base

logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(hours=24)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_movie(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Queryable columns of a TMDB /movie/{id} response."""
    return {
        'title': raw.get('title') or '',
        'overview': raw.get('overview'),
        'poster_path': raw.get('poster_path'),
        'backdrop_path': raw.get('backdrop_path'),
        'release_date': raw.get('release_date'),
        'vote_average': raw.get('vote_average', 0.0),
        'vote_count': raw.get('vote_count', 0),
        'popularity': raw.get('popularity', 0.0),
        'genres': raw.get('genres') or [],
        'runtime': raw.get('runtime'),
    }


def normalize_show(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Queryable columns of a TMDB /tv/{id} response."""
    return {
        'name': raw.get('name') or '',
        'overview': raw.get('overview'),
        'poster_path': raw.get('poster_path'),
        'backdrop_path': raw.get('backdrop_path'),
        'first_air_date': raw.get('first_air_date'),
        'vote_average': raw.get('vote_average', 0.0),
        'vote_count': raw.get('vote_count', 0),
        'popularity': raw.get('popularity', 0.0),
        'genres': raw.get('genres') or [],
        'number_of_seasons': raw.get('number_of_seasons'),
        'number_of_episodes': raw.get('number_of_episodes'),
    }


class FreshnessCache:
    """
    Upsert-by-key cache over one SQLAlchemy model.

    Args:
        model: Mapped class with a unique key column, tmdb_data and last_updated
        key_column: Name of the unique key column (e.g. "movie_id")
        normalize: Extracts the queryable columns from a raw response
        max_age: Freshness window (default 24 hours)
        clock: Returns the current naive UTC time; injectable for tests
    """

    def __init__(
        self,
        model: Type[Base],
        key_column: str,
        normalize: Callable[[Dict[str, Any]], Dict[str, Any]],
        max_age: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = utcnow
    ):
        self.model = model
        self.key_column = key_column
        self.normalize = normalize
        self.max_age = max_age
        self.clock = clock

    def _column(self):
        return getattr(self.model, self.key_column)

    def lookup(self, db: Session, key: int):
        """Stored entry for key, fresh or not (None if absent)."""
        return db.query(self.model).filter(self._column() == key).first()

    def is_fresh(self, entry, now: Optional[datetime] = None) -> bool:
        if entry is None or entry.last_updated is None:
            return False
        now = now or self.clock()
        return now - entry.last_updated < self.max_age

    def get_or_refresh(self, db: Session, key: int, refresh_fn: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        """
        Return the cached raw payload for key if it is younger than max_age,
        otherwise call refresh_fn, upsert the result and return it.

        If refresh_fn raises, the exception propagates and any existing entry
        is left exactly as it was.
        """
        name = self.model.__tablename__
        entry = self.lookup(db, key)
        if self.is_fresh(entry):
            logger.debug(f"Cache hit for {name} {key}")
            return entry.tmdb_data

        logger.debug(f"Cache miss for {name} {key}")
        raw = refresh_fn()

        values = self.normalize(raw)
        values['tmdb_data'] = raw
        values['last_updated'] = self.clock()

        try:
            self._upsert(db, key, entry, values)
        except IntegrityError:
            # A concurrent miss inserted the same key first; overwrite it
            db.rollback()
            self._upsert(db, key, self.lookup(db, key), values)

        return raw

    def _upsert(self, db: Session, key: int, entry, values: Dict[str, Any]) -> None:
        try:
            if entry is None:
                db.add(self.model(**{self.key_column: key}, **values))
            else:
                for column, value in values.items():
                    setattr(entry, column, value)
            db.commit()
        except Exception:
            db.rollback()
            raise

    def sweep(self, db: Session, retention: timedelta) -> int:
        """
        Delete entries last refreshed more than `retention` ago.

        Returns the number of deleted rows. The caller commits.
        """
        cutoff = self.clock() - retention
        return db.query(self.model).filter(
            self.model.last_updated < cutoff
        ).delete(synchronize_session=False)
