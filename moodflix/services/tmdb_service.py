import requests
import os
from typing import Dict, Optional
from fastapi import HTTPException
from moodflix.utils.cache import cache
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"
TMDB_BACKDROP_BASE = "https://image.tmdb.org/t/p/original"
TMDB_PROFILE_BASE = "https://image.tmdb.org/t/p/w185"
TMDB_LOGO_BASE = "https://image.tmdb.org/t/p/w92"


def image_url(path: Optional[str], base: str = TMDB_IMAGE_BASE) -> Optional[str]:
    return f"{base}{path}" if path else None


def release_year(release_date: Optional[str]) -> Optional[int]:
    """'2019-05-30' -> 2019; blank or malformed dates -> None"""
    if not release_date or len(release_date) < 4 or not release_date[:4].isdigit():
        return None
    return int(release_date[:4])


def round_rating(value: Optional[float]) -> float:
    return round((value or 0) * 10) / 10


# TMDB Service to interact with The Movie Database API
class TMDBService:
    BASE_URL = "https://api.themoviedb.org/3"
    API_KEY = os.getenv("TMDB_API_KEY")
    TIMEOUT = 10

    @classmethod
    def _make_request(cls, endpoint: str, params: Dict = None) -> Dict:
        """
        Make HTTP request to TMDB API.

        Args:
            endpoint: API endpoint (e.g., "/movie/popular")
            params: Query parameters

        Returns:
            JSON response from TMDB

        Raises:
            HTTPException: If API key is missing or request fails
        """
        if not cls.API_KEY:
            raise HTTPException(status_code=503, detail="Movie service is not configured. Please contact support.")
        params = dict(params or {})
        params['api_key'] = cls.API_KEY
        params.setdefault('language', 'en-US')
        url = f"{cls.BASE_URL}{endpoint}"

        try:
            response = requests.get(url, params=params, timeout=cls.TIMEOUT)
            response.raise_for_status()
            logger.debug(f"TMDB API request successful: {endpoint}")
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"TMDB API error for {endpoint}: {str(e)}")
            raise HTTPException(status_code=502, detail=f"TMDB API error: {str(e)}")

    @classmethod
    @cache(ttl=300)  # Cache search results for 5 minutes
    def search_movies(cls, query: str, page: int = 1) -> Dict:
        return cls._make_request("/search/movie", {'query': query, 'page': page})

    @classmethod
    @cache(ttl=86400)  # Posters never change for a title/year pair
    def find_poster_path(cls, title: str, year: Optional[int] = None) -> Optional[str]:
        """
        Look up the poster of the best search match for title (and year).
        Returns None when nothing with a poster is found.
        """
        params = {'query': title, 'page': 1}
        if year:
            params['year'] = year
        results = cls._make_request("/search/movie", params).get('results', [])
        for movie in results:
            if movie.get('poster_path'):
                return movie['poster_path']
        return None

    @classmethod
    @cache(ttl=600)  # Cache movie details for 10 minutes
    def get_movie_details(cls, movie_id: int) -> Dict:
        """Movie details with credits, videos, similar titles and watch providers."""
        return cls._make_request(
            f"/movie/{movie_id}",
            {'append_to_response': 'videos,credits,similar,watch/providers'}
        )

    @classmethod
    @cache(ttl=600)
    def get_person_details(cls, person_id: int) -> Dict:
        """Person details with movie credits, external ids and profile images."""
        return cls._make_request(
            f"/person/{person_id}",
            {'append_to_response': 'movie_credits,external_ids,images'}
        )

    @classmethod
    @cache(ttl=600)
    def get_similar(cls, movie_id: int, page: int = 1) -> Dict:
        return cls._make_request(f"/movie/{movie_id}/similar", {'page': page})

    @classmethod
    @cache(ttl=3600)  # Cache trending for 1 hour
    def get_trending(cls, time_window: str = 'week', page: int = 1) -> Dict:
        return cls._make_request(f"/trending/movie/{time_window}", {'page': page})

    @classmethod
    @cache(ttl=3600)
    def get_top_rated(cls, page: int = 1) -> Dict:
        return cls._make_request("/movie/top_rated", {'page': page})

    @classmethod
    @cache(ttl=3600)
    def get_upcoming(cls, page: int = 1) -> Dict:
        return cls._make_request("/movie/upcoming", {'page': page})

    @classmethod
    @cache(ttl=3600)
    def get_popular(cls, page: int = 1) -> Dict:
        return cls._make_request("/movie/popular", {'page': page})

    @classmethod
    @cache(ttl=3600)
    def get_popular_people(cls, page: int = 1) -> Dict:
        return cls._make_request("/person/popular", {'page': page})

    @classmethod
    @cache(ttl=300)  # Cache discover results for 5 minutes
    def discover_movies(cls, params: Dict) -> Dict:
        """
        Discover movies with filters (genres, language, region, runtime, votes).
        """
        return cls._make_request("/discover/movie", params)
