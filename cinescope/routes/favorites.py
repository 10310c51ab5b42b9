from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cinescope.database import get_db
from cinescope.models.user import User
from cinescope.services.catalog_service import MovieService
from cinescope.services.favorite_service import FavoriteService
from cinescope.utils.dependencies import get_current_user, get_movie_service

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.get("/")
def get_favorites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    movies: MovieService = Depends(get_movie_service)
):
    """Get the user's favorite movies with full details"""
    return {"success": True, "data": FavoriteService.get_favorites(db, current_user, movies)}


@router.post("/{movie_id}", status_code=status.HTTP_201_CREATED)
def add_favorite(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    movies: MovieService = Depends(get_movie_service)
):
    """Add a movie to favorites"""
    favorite = FavoriteService.add_favorite(db, current_user, movie_id, movies)
    return {
        "success": True,
        "message": "Movie added to favorites",
        "data": {"movie_id": favorite.movie_id, "added_at": favorite.added_at},
    }


@router.delete("/{movie_id}")
def remove_favorite(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a movie from favorites"""
    FavoriteService.remove_favorite(db, current_user, movie_id)
    return {
        "success": True,
        "message": "Movie removed from favorites",
        "data": {"movie_id": movie_id},
    }
