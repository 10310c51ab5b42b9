from fastapi import APIRouter, Query, Depends
from typing import Optional

from cinescope.schemas.catalog import ListingPage, ListingPageEnvelope
from cinescope.schemas.validation import clean_search_query
from cinescope.services.aggregator import FilterSpec
from cinescope.services.catalog_service import MovieService, TVService
from cinescope.utils.dependencies import get_movie_service, get_tv_service

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get("/movies", response_model=ListingPageEnvelope)
def search_movies(
    query: Optional[str] = Query(None, description="Search query"),
    page: str = Query("1"),
    with_genres: Optional[str] = Query(None),
    primary_release_year: Optional[str] = Query(None),
    movies: MovieService = Depends(get_movie_service)
):
    """Search movies (same as /api/movies/search)"""
    filter_spec = FilterSpec.from_params(with_genres, primary_release_year)
    return {"success": True, "data": movies.search_by_query(clean_search_query(query), page, filter_spec)}


@router.get("/tv", response_model=ListingPage)
def search_tv(
    query: Optional[str] = Query(None, description="Search query"),
    page: str = Query("1"),
    with_genres: Optional[str] = Query(None),
    first_air_date_year: Optional[str] = Query(None),
    shows: TVService = Depends(get_tv_service)
):
    """Search TV shows"""
    filter_spec = FilterSpec.from_params(with_genres, first_air_date_year)
    return shows.search_by_query(clean_search_query(query), page, filter_spec)
