from fastapi import APIRouter, Query, Depends
from typing import Optional, Dict

from cinescope.schemas.catalog import ListingPage
from cinescope.services.aggregator import FilterSpec
from cinescope.services.catalog_service import TVService
from cinescope.utils.dependencies import get_tv_service

router = APIRouter(prefix="/api/tv", tags=["TV Shows"])

PageQuery = Query("1", description="Page number (clamped to 1-500)")


def _passthrough_params(sort_by: Optional[str], include_adult: Optional[str]) -> Dict:
    params = {}
    if sort_by:
        params['sort_by'] = sort_by
    if include_adult:
        params['include_adult'] = include_adult
    return params


@router.get("/popular", response_model=ListingPage)
def get_popular(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    first_air_date_year: Optional[str] = Query(None, description="First air year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    shows: TVService = Depends(get_tv_service)
):
    """Get popular TV shows"""
    filter_spec = FilterSpec.from_params(with_genres, first_air_date_year)
    return shows.list_popular(page, filter_spec, _passthrough_params(sort_by, include_adult))


@router.get("/top-rated", response_model=ListingPage)
def get_top_rated(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    first_air_date_year: Optional[str] = Query(None, description="First air year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    shows: TVService = Depends(get_tv_service)
):
    """Get top rated TV shows"""
    filter_spec = FilterSpec.from_params(with_genres, first_air_date_year)
    return shows.list_top_rated(page, filter_spec, _passthrough_params(sort_by, include_adult))


@router.get("/on-the-air", response_model=ListingPage)
def get_on_the_air(
    page: str = PageQuery,
    with_genres: Optional[str] = Query(None, description="Genre ID"),
    first_air_date_year: Optional[str] = Query(None, description="First air year (YYYY)"),
    sort_by: Optional[str] = Query(None),
    include_adult: Optional[str] = Query(None),
    shows: TVService = Depends(get_tv_service)
):
    """Get TV shows currently on the air"""
    filter_spec = FilterSpec.from_params(with_genres, first_air_date_year)
    return shows.list_on_the_air(page, filter_spec, _passthrough_params(sort_by, include_adult))


@router.get("/{show_id}/season/{season_number}")
def get_season(show_id: int, season_number: int, shows: TVService = Depends(get_tv_service)):
    """Get one season of a TV show"""
    return shows.get_season(show_id, season_number)


@router.get("/{show_id}")
def get_show_details(show_id: int, shows: TVService = Depends(get_tv_service)):
    """Get TV show details by ID, served from the detail cache while fresh"""
    return shows.get_detail(show_id)
