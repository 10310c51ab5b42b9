"""
Filtered listing aggregation
============================
TMDB's popular / top rated / upcoming / on-the-air endpoints do not accept
genre or year filters. When a caller asks for them anyway we scan native
pages from page 1, keep the items that match, and re-slice the matches into
fixed-size pages.

Scanning stops as soon as any of these holds:
- the native listing's own total_pages was reached
- result_cap matches were collected
- max_pages_to_scan native pages were fetched

Because of those limits, total_results and total_pages on a filtered page
only count what was scanned. They are not the global number of matches the
way the unfiltered counts are. Keep it that way until TMDB supports the
filters on these endpoints natively.

Usage:
    from cinescope.services.aggregator import FilterSpec, fetch_filtered_page

    page = fetch_filtered_page(
        lambda p: client.fetch("/movie/popular", p),
        requested_page=2,
        filter_spec=FilterSpec(genre_id=28, year="2019"),
        max_pages_to_scan=25,
        result_cap=500,
    )
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging
import math
import re

from cinescope.services.tmdb_service import MAX_UPSTREAM_PAGES

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MIN_PAGE = 1
MAX_PAGE = MAX_UPSTREAM_PAGES
YEAR_PATTERN = re.compile(r"^\d{4}$")

ListingFn = Callable[[int], Dict[str, Any]]


@dataclass(frozen=True)
class FilterSpec:
    """Filters TMDB cannot apply on plain listing endpoints."""
    genre_id: Optional[int] = None
    year: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.genre_id is None and not self.year

    @classmethod
    def from_params(cls, genre: Any = None, year: Any = None) -> "FilterSpec":
        """
        Build a FilterSpec from raw query values.

        Blank values mean "no filter". A genre that is not an integer or a year
        that is not four digits is ignored rather than rejected.
        """
        genre_id = None
        if genre not in (None, ""):
            try:
                genre_id = int(str(genre).split(",")[0].strip())
            except ValueError:
                logger.warning(f"Ignoring non-numeric genre filter: {genre!r}")
        year_value = str(year).strip() if year not in (None, "") else None
        if year_value and not YEAR_PATTERN.match(year_value):
            logger.warning(f"Ignoring malformed year filter: {year!r}")
            year_value = None
        return cls(genre_id=genre_id, year=year_value or None)


def validate_page(page: Any) -> int:
    """
    Clamp a requested page number into [1, 500].

    Anything that does not parse as an integer becomes page 1. Out-of-range
    input is never rejected.
    """
    try:
        requested = int(page)
    except (TypeError, ValueError):
        logger.warning(f"Requested page {page!r} is not a number. Using page {MIN_PAGE} instead.")
        return MIN_PAGE

    validated = max(MIN_PAGE, min(MAX_PAGE, requested))
    if validated != requested:
        logger.warning(f"Requested page {requested} is out of bounds. Using page {validated} instead.")
    return validated


def _item_genre_ids(item: Dict[str, Any]) -> Optional[set]:
    # Only integer ids can match; anything else in the list is ignored
    genre_ids = item.get("genre_ids")
    if isinstance(genre_ids, list):
        return {genre_id for genre_id in genre_ids if isinstance(genre_id, int)}

    genres = item.get("genres")
    if isinstance(genres, list):
        return {
            genre.get("id") for genre in genres
            if isinstance(genre, dict) and isinstance(genre.get("id"), int)
        }

    return None


def matches_filter(item: Any, filter_spec: FilterSpec, date_field: str = "release_date") -> bool:
    """
    True when the item passes every filter that is set.

    Genre matches on membership in genre_ids (listing payloads) or genres[].id
    (detail payloads). Year matches as a prefix of the date string. Malformed
    items never match.
    """
    if not isinstance(item, dict):
        logger.debug(f"Skipping malformed item: {item!r}")
        return False

    if filter_spec.genre_id is not None:
        genre_ids = _item_genre_ids(item)
        if not genre_ids or filter_spec.genre_id not in genre_ids:
            return False

    if filter_spec.year:
        date_value = item.get(date_field)
        if not isinstance(date_value, str) or not date_value.startswith(filter_spec.year):
            return False

    return True


def filter_items(
    items: List[Any],
    filter_spec: FilterSpec,
    date_field: str = "release_date"
) -> List[Dict[str, Any]]:
    """Keep the items of one page that pass the filter."""
    if filter_spec.is_empty:
        return list(items)
    return [item for item in items if matches_filter(item, filter_spec, date_field)]


def fetch_native_page(listing_fn: ListingFn, requested_page: Any) -> Dict[str, Any]:
    """Unfiltered path: one upstream call, native counts, total_pages capped at 500."""
    page = validate_page(requested_page)
    response = listing_fn(page)
    return {
        "results": response.get("results") or [],
        "page": response.get("page", page),
        "total_pages": min(MAX_UPSTREAM_PAGES, response.get("total_pages") or 0),
        "total_results": response.get("total_results") or 0,
    }


def fetch_filtered_page(
    listing_fn: ListingFn,
    requested_page: Any,
    filter_spec: FilterSpec,
    max_pages_to_scan: int,
    target_page_size: int = DEFAULT_PAGE_SIZE,
    result_cap: Optional[int] = None,
    date_field: str = "release_date"
) -> Dict[str, Any]:
    """
    Return page `requested_page` of the listing with `filter_spec` applied.

    Args:
        listing_fn: Fetches one native page (1-indexed) and returns a
            ListingPage dict with results/page/total_pages/total_results
        requested_page: Page the caller wants; clamped into [1, 500]
        filter_spec: Genre/year filters; empty means native pagination
        max_pages_to_scan: Upper bound on native pages fetched
        target_page_size: Size of the re-sliced pages
        result_cap: Stop once this many matches were collected (None = no cap)
        date_field: "release_date" for movies, "first_air_date" for TV

    Any exception raised by listing_fn propagates; nothing partial is returned.
    """
    if filter_spec.is_empty:
        return fetch_native_page(listing_fn, requested_page)

    page = validate_page(requested_page)
    matches: List[Dict[str, Any]] = []
    current_page = 1

    while current_page <= max_pages_to_scan:
        response = listing_fn(current_page)
        matches.extend(filter_items(response.get("results") or [], filter_spec, date_field))
        logger.debug(
            f"Scanned native page {current_page}: {len(matches)} matches so far"
        )

        if result_cap is not None and len(matches) >= result_cap:
            del matches[result_cap:]
            break
        if current_page >= (response.get("total_pages") or 0):
            break
        current_page += 1

    start_index = (page - 1) * target_page_size
    return {
        "results": matches[start_index:start_index + target_page_size],
        "page": page,
        "total_pages": math.ceil(len(matches) / target_page_size),
        "total_results": len(matches),
    }
