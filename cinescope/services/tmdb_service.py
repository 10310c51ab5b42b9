import requests
import os
from typing import Dict, Optional
from cinescope.exceptions import UpstreamFetchError, NotFoundError
import logging

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"

# TMDB never serves pages past 500 even when total_pages says otherwise
MAX_UPSTREAM_PAGES = 500


# TMDB client to interact with The Movie Database API
class TMDBClient:
    """
    Thin wrapper around the TMDB v3 REST API.

    Constructed once and injected into the catalog services, so tests can swap
    it for a fake and nothing reads the API key from module state.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> "TMDBClient":
        return cls(
            api_key=os.getenv("TMDB_API_KEY"),
            base_url=os.getenv("TMDB_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("TMDB_TIMEOUT", "10")),
        )

    # Internal method to make GET requests to TMDB API
    def get(self, endpoint: str, params: Dict = None) -> Dict:
        """
        Make HTTP request to TMDB API.

        Args:
            endpoint: API endpoint (e.g., "/movie/popular")
            params: Query parameters

        Returns:
            JSON response from TMDB

        Raises:
            NotFoundError: TMDB answered 404
            UpstreamFetchError: API key missing, transport error or any other
                non-2xx answer
        """
        if not self.api_key:
            raise UpstreamFetchError(endpoint, "TMDB API key not configured")
        params = dict(params or {})
        params['api_key'] = self.api_key
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"TMDB API error for {endpoint}: {str(e)}")
            raise UpstreamFetchError(endpoint, str(e)) from e

        if response.status_code == 404:
            logger.info(f"TMDB API returned 404 for {endpoint}")
            raise NotFoundError(endpoint)

        try:
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            logger.error(f"TMDB API error for {endpoint}: {str(e)}")
            raise UpstreamFetchError(endpoint, str(e), status_code=response.status_code) from e
        except ValueError as e:
            logger.error(f"TMDB API returned invalid JSON for {endpoint}: {str(e)}")
            raise UpstreamFetchError(endpoint, "invalid JSON response") from e

        logger.debug(f"TMDB API request successful: {endpoint}")
        return data

    # ============================================
    # Listing capability
    # ============================================

    def fetch(self, resource_path: str, page: int = 1, params: Dict = None) -> Dict:
        """
        Fetch one native page of a paged listing, e.g. fetch("/movie/popular", 3).

        Always returns the four ListingPage keys even if TMDB omits some.
        """
        query = dict(params or {})
        query['page'] = page
        data = self.get(resource_path, query)
        return {
            'results': data.get('results') or [],
            'page': data.get('page', page),
            'total_pages': data.get('total_pages', 0),
            'total_results': data.get('total_results', 0),
        }

    def search(self, kind: str, query: str, page: int = 1, params: Dict = None) -> Dict:
        """Search movies or TV shows by title. kind is "movie" or "tv"."""
        search_params = dict(params or {})
        search_params['query'] = query
        return self.fetch(f"/search/{kind}", page, search_params)

    def discover(self, kind: str, page: int = 1, params: Dict = None) -> Dict:
        """TMDB discover endpoint; supports genre/year natively."""
        return self.fetch(f"/discover/{kind}", page, params)

    def trending(self, kind: str, time_window: str = "week", page: int = 1) -> Dict:
        return self.fetch(f"/trending/{kind}/{time_window}", page)

    # ============================================
    # Detail capability
    # ============================================

    def fetch_detail(self, kind: str, item_id: int) -> Dict:
        """
        Get detailed movie/TV information including videos and credits.
        """
        return self.get(f"/{kind}/{item_id}", {'append_to_response': 'videos,credits'})

    def tv_season(self, show_id: int, season_number: int) -> Dict:
        return self.get(f"/tv/{show_id}/season/{season_number}")

    def genres(self, kind: str) -> list:
        """Get the genre list for "movie" or "tv"."""
        return self.get(f"/genre/{kind}/list").get('genres', [])
