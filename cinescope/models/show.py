"""
TV show detail cache entry, the TV counterpart of Movie.
"""
from sqlalchemy import Column, Integer, String, Float, JSON, DateTime, Text
from cinescope.database import Base


class Show(Base):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, index=True)
    show_id = Column(Integer, unique=True, nullable=False, index=True)
    name = Column(String(500), nullable=False)
    overview = Column(Text)
    poster_path = Column(String(200))
    backdrop_path = Column(String(200))
    first_air_date = Column(String(20))
    vote_average = Column(Float, default=0.0)
    vote_count = Column(Integer, default=0)
    popularity = Column(Float, default=0.0)
    genres = Column(JSON)
    number_of_seasons = Column(Integer)
    number_of_episodes = Column(Integer)
    tmdb_data = Column(JSON)
    last_updated = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Show(show_id={self.show_id}, name='{self.name}')>"
