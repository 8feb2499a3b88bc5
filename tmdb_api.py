"""
TMDB API client for fetching movie data
"""
import logging
from typing import Any, Dict, List, Optional, TypedDict

import requests

from errors import DecodeError, UpstreamError

logger = logging.getLogger(__name__)


class Movie(TypedDict):
    id: int
    title: str
    overview: str
    release_date: str
    vote_average: float
    vote_count: int
    poster_path: Optional[str]
    backdrop_path: Optional[str]
    popularity: float


class Genre(TypedDict):
    id: int
    name: str


class MovieDetails(Movie):
    genres: List[Genre]
    runtime: int
    budget: int
    revenue: int
    status: str
    tagline: str


class SearchResult(TypedDict):
    page: int
    results: List[Movie]
    total_pages: int
    total_results: int


class TMDBApi:
    def __init__(self, api_key: str, base_url: str = "https://api.themoviedb.org/3",
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def __enter__(self) -> "TMDBApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _make_tmdb_request(self, endpoint: str, params: Dict[str, Any] = None) -> Any:
        """Make a request to TMDB API and return the decoded JSON body.

        Raises UpstreamError for transport failures and non-2xx responses,
        DecodeError when a successful response is not valid JSON.
        """
        params = dict(params or {})
        params['api_key'] = self.api_key

        logger.debug("GET %s%s", self.base_url, endpoint)
        try:
            response = self.session.get(f"{self.base_url}{endpoint}", params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            raise UpstreamError(response.status_code, response.reason or "")

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"TMDB API returned malformed JSON: {e}") from e

    def search_movies(self, query: str, page: int = 1) -> SearchResult:
        """Search for movies by query string"""
        return self._make_tmdb_request("/search/movie", {'query': query, 'page': page})

    def get_movie_details(self, movie_id: int) -> MovieDetails:
        """Get detailed information about a specific movie"""
        return self._make_tmdb_request(f"/movie/{movie_id}")

    def get_popular_movies(self, page: int = 1) -> SearchResult:
        return self._make_tmdb_request("/movie/popular", {'page': page})

    def get_top_rated_movies(self, page: int = 1) -> SearchResult:
        return self._make_tmdb_request("/movie/top_rated", {'page': page})

    def get_now_playing_movies(self, page: int = 1) -> SearchResult:
        """Movies currently in theaters"""
        return self._make_tmdb_request("/movie/now_playing", {'page': page})

    def get_upcoming_movies(self, page: int = 1) -> SearchResult:
        return self._make_tmdb_request("/movie/upcoming", {'page': page})
