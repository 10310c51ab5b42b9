"""
Import all models to ensure they are registered with SQLAlchemy
"""
from cinescope.models.user import User
from cinescope.models.favorite import Favorite
from cinescope.models.movie import Movie
from cinescope.models.show import Show

__all__ = [
    "User",
    "Favorite",
    "Movie",
    "Show",
]
