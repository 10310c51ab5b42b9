"""
Catalog services for movies and TV shows.

Listing endpoints go through the filtered aggregator, search goes to a single
native TMDB page, and details go through the freshness cache. Everything
TMDB-specific is reached through the injected TMDBClient.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from cinescope.exceptions import ValidationError
from cinescope.models.movie import Movie
from cinescope.models.show import Show
from cinescope.services.aggregator import (
    FilterSpec,
    fetch_filtered_page,
    fetch_native_page,
    filter_items,
    validate_page,
)
from cinescope.services.freshness_cache import FreshnessCache, normalize_movie, normalize_show
from cinescope.services.tmdb_service import TMDBClient, MAX_UPSTREAM_PAGES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanPolicy:
    """How far a filtered listing may scan before giving up."""
    max_pages_to_scan: int
    result_cap: Optional[int] = None


class CatalogService:
    """
    Shared behaviour of MovieService and TVService.

    Subclasses set the TMDB resource kind, the date field used by the year
    filter, the cache model and the scan policy of each listing.
    """
    kind: str = ""
    date_field: str = ""
    listing_paths: Dict[str, str] = {}
    scan_policies: Dict[str, ScanPolicy] = {}

    def __init__(self, client: TMDBClient, db: Session, cache: FreshnessCache):
        self.client = client
        self.db = db
        self.cache = cache

    def _list(self, listing: str, page: Any, filter_spec: Optional[FilterSpec], params: Optional[Dict] = None) -> Dict:
        path = self.listing_paths[listing]
        filter_spec = filter_spec or FilterSpec()

        if filter_spec.is_empty:
            # Native pagination; remaining TMDB params (sort_by, ...) pass through
            return fetch_native_page(lambda p: self.client.fetch(path, p, params), page)

        policy = self.scan_policies[listing]
        logger.debug(f"Aggregating {path} with {filter_spec} (policy {policy})")
        return fetch_filtered_page(
            lambda p: self.client.fetch(path, p),
            page,
            filter_spec,
            max_pages_to_scan=policy.max_pages_to_scan,
            result_cap=policy.result_cap,
            date_field=self.date_field,
        )

    def list_popular(self, page: Any = 1, filter_spec: Optional[FilterSpec] = None, params: Optional[Dict] = None) -> Dict:
        return self._list("popular", page, filter_spec, params)

    def list_top_rated(self, page: Any = 1, filter_spec: Optional[FilterSpec] = None, params: Optional[Dict] = None) -> Dict:
        return self._list("top_rated", page, filter_spec, params)

    def search_by_query(self, query: Optional[str], page: Any = 1, filter_spec: Optional[FilterSpec] = None) -> Dict:
        """
        Search one native TMDB page and filter it in place.

        Unlike the listings, search results are not re-paginated across
        upstream pages: with a filter, total_results counts the matches on this
        page only while total_pages stays the native value.
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required")

        filter_spec = filter_spec or FilterSpec()
        valid_page = validate_page(page)
        logger.info(f"TMDB search call: kind={self.kind} query={query!r} page={valid_page}")

        params = {}
        if filter_spec.year:
            # TMDB search understands the year natively; we still filter below
            params['primary_release_year' if self.kind == 'movie' else 'first_air_date_year'] = filter_spec.year
        response = self.client.search(self.kind, query.strip(), valid_page, params)

        results: List[Dict] = response.get('results') or []
        if not filter_spec.is_empty:
            results = filter_items(results, filter_spec, self.date_field)

        return {
            'results': results,
            'page': response.get('page', valid_page),
            'total_pages': min(MAX_UPSTREAM_PAGES, response.get('total_pages') or 0),
            'total_results': len(results) if not filter_spec.is_empty else response.get('total_results') or 0,
        }

    def get_detail(self, item_id: int) -> Dict:
        """Full TMDB detail payload, served from the cache while it is fresh."""
        return self.cache.get_or_refresh(
            self.db,
            item_id,
            lambda: self.client.fetch_detail(self.kind, item_id),
        )

    def get_genres(self) -> List[Dict]:
        return self.client.genres(self.kind)


class MovieService(CatalogService):
    kind = "movie"
    date_field = "release_date"
    listing_paths = {
        "popular": "/movie/popular",
        "top_rated": "/movie/top_rated",
        "upcoming": "/movie/upcoming",
    }
    scan_policies = {
        "popular": ScanPolicy(max_pages_to_scan=25, result_cap=500),
        "top_rated": ScanPolicy(max_pages_to_scan=5),
        "upcoming": ScanPolicy(max_pages_to_scan=5),
    }

    def __init__(self, client: TMDBClient, db: Session, cache: Optional[FreshnessCache] = None):
        super().__init__(client, db, cache or movie_cache())

    def list_upcoming(self, page: Any = 1, filter_spec: Optional[FilterSpec] = None, params: Optional[Dict] = None) -> Dict:
        return self._list("upcoming", page, filter_spec, params)

    def discover(self, page: Any = 1, params: Optional[Dict] = None) -> Dict:
        """TMDB discover supports genre and year natively, so no aggregation."""
        return fetch_native_page(lambda p: self.client.discover(self.kind, p, params), page)

    def trending(self, time_window: str = "week", page: Any = 1) -> Dict:
        if time_window not in ("day", "week"):
            raise ValidationError("time_window must be 'day' or 'week'")
        return fetch_native_page(lambda p: self.client.trending(self.kind, time_window, p), page)


class TVService(CatalogService):
    kind = "tv"
    date_field = "first_air_date"
    listing_paths = {
        "popular": "/tv/popular",
        "top_rated": "/tv/top_rated",
        "on_the_air": "/tv/on_the_air",
    }
    scan_policies = {
        "popular": ScanPolicy(max_pages_to_scan=5, result_cap=100),
        "top_rated": ScanPolicy(max_pages_to_scan=5, result_cap=100),
        "on_the_air": ScanPolicy(max_pages_to_scan=5, result_cap=100),
    }

    def __init__(self, client: TMDBClient, db: Session, cache: Optional[FreshnessCache] = None):
        super().__init__(client, db, cache or show_cache())

    def list_on_the_air(self, page: Any = 1, filter_spec: Optional[FilterSpec] = None, params: Optional[Dict] = None) -> Dict:
        return self._list("on_the_air", page, filter_spec, params)

    def get_season(self, show_id: int, season_number: int) -> Dict:
        return self.client.tv_season(show_id, season_number)


def movie_cache() -> FreshnessCache:
    return FreshnessCache(Movie, "movie_id", normalize_movie)


def show_cache() -> FreshnessCache:
    return FreshnessCache(Show, "show_id", normalize_show)
