from fastapi import APIRouter, Depends

from cinescope.schemas.catalog import GenreList, GenreListEnvelope
from cinescope.services.catalog_service import MovieService, TVService
from cinescope.utils.dependencies import get_movie_service, get_tv_service

router = APIRouter(prefix="/api/genres", tags=["Genres"])


@router.get("/movie", response_model=GenreListEnvelope)
def get_movie_genres(movies: MovieService = Depends(get_movie_service)):
    return {"success": True, "data": movies.get_genres()}


@router.get("/tv", response_model=GenreList)
def get_tv_genres(shows: TVService = Depends(get_tv_service)):
    return {"genres": shows.get_genres()}
