from fastapi import APIRouter, Query, Depends
from typing import Optional, Dict

from cinescope.schemas.catalog import ListingPageEnvelope, GenreListEnvelope
from cinescope.schemas.validation import clean_search_query
from cinescope.services.aggregator import FilterSpec
from cinescope.services.catalog_service import MovieService
from cinescope.utils.dependencies import get_movie_service

router = APIRouter(prefix="/api/movies", tags=["Movies"])

# Page is taken as a raw string and clamped by the service, never rejected
PageQuery = Query("1", description="Page number (clamped to 1-500)")


def _passthrough_params(sort_by: Optional[str], include_adult: Optional[str]) -> Dict:
    """TMDB params forwarded untouched on the native (unfiltered) path."""
    params = {}
    if sort_by:
        params['sort_by'] = sort_by
    if include_adult:
        params['include_adult'] = include_adult
    return params


def _envelope(data):
    return {"success": True, "data": data}


# ============================================
# Listings (filtered aggregation when genre/year are set)
# ============================================

@router.get("/popular", response_model=ListingPageEnvelope)
def get_popular(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    primary_release_year: Optional[str] = Query(None, description="Release year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    movies: MovieService = Depends(get_movie_service)
):
    """Get popular movies"""
    filter_spec = FilterSpec.from_params(with_genres, primary_release_year)
    return _envelope(movies.list_popular(page, filter_spec, _passthrough_params(sort_by, include_adult)))


@router.get("/top-rated", response_model=ListingPageEnvelope)
def get_top_rated(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    primary_release_year: Optional[str] = Query(None, description="Release year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    movies: MovieService = Depends(get_movie_service)
):
    """Get top rated movies"""
    filter_spec = FilterSpec.from_params(with_genres, primary_release_year)
    return _envelope(movies.list_top_rated(page, filter_spec, _passthrough_params(sort_by, include_adult)))


@router.get("/upcoming", response_model=ListingPageEnvelope)
def get_upcoming(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    primary_release_year: Optional[str] = Query(None, description="Release year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    movies: MovieService = Depends(get_movie_service)
):
    """Get upcoming movies"""
    filter_spec = FilterSpec.from_params(with_genres, primary_release_year)
    return _envelope(movies.list_upcoming(page, filter_spec, _passthrough_params(sort_by, include_adult)))


# ============================================
# Search, genres, discover, trending
# ============================================

@router.get("/search", response_model=ListingPageEnvelope)
def search_movies(
    query: Optional[str] = Query(None, description="Search query"),
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    primary_release_year: Optional[str] = Query(None, description="Release year (YYYY)"),
    movies: MovieService = Depends(get_movie_service)
):
    """
    Text search for movies.

    Filters apply to the single TMDB result page returned for `page`.
    """
    filter_spec = FilterSpec.from_params(with_genres, primary_release_year)
    return _envelope(movies.search_by_query(clean_search_query(query), page, filter_spec))


@router.get("/genres", response_model=GenreListEnvelope)
def get_genres(movies: MovieService = Depends(get_movie_service)):
    """Get list of all available movie genres"""
    return _envelope(movies.get_genres())


@router.get("/discover", response_model=ListingPageEnvelope)
def discover_movies(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None),
    primary_release_year: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    movies: MovieService = Depends(get_movie_service)
):
    """Discover movies; TMDB applies every filter natively here"""
    params = _passthrough_params(sort_by, include_adult)
    for name, value in (('with_genres', with_genres), ('primary_release_year', primary_release_year), ('year', year)):
        if value:
            params[name] = value
    return _envelope(movies.discover(page, params))


@router.get("/trending", response_model=ListingPageEnvelope)
def get_trending(
    page: str = PageQuery,
    time_window: str = Query("week", description="day or week"),
    movies: MovieService = Depends(get_movie_service)
):
    """Get trending movies (day/week)"""
    return _envelope(movies.trending(time_window, page))


# ============================================
# Movie Details (MUST be last - dynamic route)
# ============================================

@router.get("/{movie_id}")
def get_movie_details(movie_id: int, movies: MovieService = Depends(get_movie_service)):
    """Get movie details by ID, served from the detail cache while fresh"""
    return _envelope(movies.get_detail(movie_id))
