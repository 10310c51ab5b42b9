"""
Movie detail cache entry.

One row per TMDB movie id. The queryable columns are a projection of the
TMDB detail response; tmdb_data keeps the full response verbatim and is
what callers get back.
"""
from sqlalchemy import Column, Integer, String, Float, JSON, DateTime, Text
from cinescope.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    movie_id = Column(Integer, unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    overview = Column(Text)
    poster_path = Column(String(200))
    backdrop_path = Column(String(200))
    release_date = Column(String(20))
    vote_average = Column(Float, default=0.0)
    vote_count = Column(Integer, default=0)
    popularity = Column(Float, default=0.0)
    genres = Column(JSON)  # [{id, name}]
    runtime = Column(Integer)
    tmdb_data = Column(JSON)
    last_updated = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Movie(movie_id={self.movie_id}, title='{self.title}')>"
