from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, List
import logging

from cinescope.exceptions import UpstreamFetchError
from cinescope.models.favorite import Favorite
from cinescope.models.user import User
from cinescope.services.catalog_service import MovieService

logger = logging.getLogger(__name__)


class FavoriteService:
    """Service for a user's favorite movies"""

    @staticmethod
    def get_favorites(db: Session, user: User, movies: MovieService) -> List[Dict]:
        """
        Resolve every favorite to its TMDB details.

        A movie whose details cannot be fetched is reported inline with an
        error field instead of failing the whole list.
        """
        favorites = db.query(Favorite).filter(
            Favorite.user_id == user.id
        ).order_by(Favorite.added_at).all()

        details = []
        for favorite in favorites:
            try:
                movie = movies.get_detail(favorite.movie_id)
                details.append({**movie, "added_at": favorite.added_at})
            except UpstreamFetchError as e:
                logger.error(f"Error fetching details for movie ID {favorite.movie_id}: {e.message}")
                details.append({
                    "movie_id": favorite.movie_id,
                    "added_at": favorite.added_at,
                    "error": "Failed to fetch movie details",
                })
        return details

    @staticmethod
    def add_favorite(db: Session, user: User, movie_id: int, movies: MovieService) -> Favorite:
        """Add a movie after confirming TMDB knows it"""
        try:
            movies.get_detail(movie_id)
        except UpstreamFetchError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

        existing = db.query(Favorite).filter(
            Favorite.user_id == user.id,
            Favorite.movie_id == movie_id
        ).first()
        if existing:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Movie already in favorites")

        favorite = Favorite(user_id=user.id, movie_id=movie_id)
        db.add(favorite)
        db.commit()
        db.refresh(favorite)
        return favorite

    @staticmethod
    def remove_favorite(db: Session, user: User, movie_id: int) -> None:
        """Remove a movie; removing one that is not there is not an error"""
        db.query(Favorite).filter(
            Favorite.user_id == user.id,
            Favorite.movie_id == movie_id
        ).delete(synchronize_session=False)
        db.commit()
