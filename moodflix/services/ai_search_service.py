"""
AI Search Service
Free-text movie lookup ("the one where the kid sees dead people"), quick
summaries and surprise picks.

The language model only turns a description into candidate titles; every
movie returned comes from a TMDB search, so results are always real
titles with TMDB ids and posters.
"""
from datetime import date
from typing import Dict, List, Optional
from fastapi import HTTPException
from moodflix.schemas.movies import AISearchRequest
from moodflix.services import mood_catalog
from moodflix.services.llm_service import LLMService
from moodflix.services.tmdb_service import TMDBService, image_url, release_year, round_rating
import json
import logging
import random
import re

logger = logging.getLogger(__name__)

DESCRIBE_PROMPT_MESSAGE = "Please provide a description of the movie you're looking for."
NO_SUMMARY_MESSAGE = "No summary available for this movie."
NO_SURPRISE_MESSAGE = "Couldn't find a surprise recommendation. Try again!"

CONFIDENCE = ("high", "medium")
SURPRISE_REASONS = [
    "A hidden gem you might love!",
    "Critics loved this one!",
    "Underrated masterpiece",
    "Perfect for your mood",
    "You won't regret this pick",
    "A fan favorite",
]

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def guessed_titles(reply: Optional[str]) -> List[str]:
    """Titles from a {"movies": [...]} reply; [] when the reply has none"""
    match = _JSON_OBJECT.search(reply or "")
    if not match:
        return []
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning(f"Unparseable title guess from AI: {match.group(0)[:200]!r}")
        return []
    titles = parsed.get("movies") if isinstance(parsed, dict) else None
    return [t.strip() for t in titles or [] if isinstance(t, str) and t.strip()]


def _search_card(movie: Dict) -> Dict:
    return {
        "id": movie.get("id"),
        "title": movie.get("title"),
        "year": release_year(movie.get("release_date")),
        "rating": round_rating(movie.get("vote_average")),
        "posterUrl": image_url(movie.get("poster_path")),
        "overview": movie.get("overview"),
    }


class AISearchService:
    MAX_TERMS = 3
    RESULTS_PER_TERM = 5
    MAX_RESULTS = 10
    FIRST_SURPRISE_YEAR = 1990

    DESCRIBE_PROMPT = (
        "You are a movie identification expert. Given a user's description of a movie "
        "(plot details, actor or character names, themes, partial or misspelled titles), "
        "identify the movie(s) they mean. Reply ONLY with a JSON object: "
        '{"movies": ["Title 1", "Title 2"], "confidence": "high" | "medium" | "low"}. '
        "Return 1-5 official English titles, most likely first, no explanation."
    )

    @staticmethod
    def search(request: AISearchRequest) -> Dict:
        logger.info(f"AI search request: type={request.type}")
        if request.type == "describe":
            return AISearchService.describe(request.description)
        if request.type == "summary":
            return AISearchService.summary(request.movie_title, request.movie_overview)
        return AISearchService.surprise(request.mood, request.exclude_ids)

    @staticmethod
    def _guess_titles(description: str) -> List[str]:
        """
        Ask the model which movies the description means. Gateway failures
        degrade to searching the description itself.
        """
        if not LLMService.is_configured():
            return []
        try:
            reply = LLMService.complete(AISearchService.DESCRIBE_PROMPT, f"User's description: {description}")
        except HTTPException as e:
            logger.warning(f"AI title guess unavailable, searching the description instead: {e.detail}")
            return []
        return guessed_titles(reply)

    @staticmethod
    def describe(description: Optional[str]) -> Dict:
        """
        Movies matching a free-text description.

        Returns:
            {"movies": [...], "searchTerms": [...]} with at most 10 movies, or
            {"movies": [], "message": ...} when no description was given
        """
        if not description:
            return {"movies": [], "message": DESCRIBE_PROMPT_MESSAGE}

        terms = AISearchService._guess_titles(description) or [description[:50]]

        movies: List[Dict] = []
        seen = set()
        for index, term in enumerate(terms[:AISearchService.MAX_TERMS]):
            try:
                results = TMDBService.search_movies(term, 1).get("results", [])
            except HTTPException as e:
                if e.status_code == 503:
                    raise
                logger.warning(f"TMDB search failed for {term!r}: {e.detail}")
                continue
            for movie in results[:AISearchService.RESULTS_PER_TERM]:
                if movie.get("id") in seen:
                    continue
                seen.add(movie.get("id"))
                movies.append({
                    **_search_card(movie),
                    "confidence": CONFIDENCE[index] if index < len(CONFIDENCE) else "low",
                    "matchReason": f'Matches: "{term}"',
                })

        logger.info(f"AI search found {len(movies)} movies for {len(terms)} terms")
        return {"movies": movies[:AISearchService.MAX_RESULTS], "searchTerms": terms}

    @staticmethod
    def summary(movie_title: Optional[str], movie_overview: Optional[str]) -> Dict:
        if not movie_title:
            raise HTTPException(status_code=400, detail="Movie title is required for summary")
        return {"summary": movie_overview or NO_SUMMARY_MESSAGE}

    @staticmethod
    def surprise(mood: Optional[str], exclude_ids: List[int]) -> Dict:
        """
        One random well rated movie from a random year and page, skipping
        exclude_ids. Falls back to a random page of popular movies.
        """
        excluded = set(exclude_ids)
        params = {
            "sort_by": "vote_average.desc",
            "vote_count.gte": 200,
            "page": random.randint(1, 50),
            "primary_release_year": random.randint(AISearchService.FIRST_SURPRISE_YEAR, date.today().year - 1),
        }
        genres = mood_catalog.MOOD_GENRES.get((mood or "").lower())
        if genres:
            params["with_genres"] = "|".join(str(g) for g in genres)

        results = [m for m in TMDBService.discover_movies(params).get("results", []) if m.get("id") not in excluded]
        if not results:
            logger.info("No surprise candidates from discover, trying popular movies")
            popular = TMDBService.get_popular(random.randint(1, 10))
            results = [m for m in popular.get("results", []) if m.get("id") not in excluded]

        if not results:
            return {"movie": None, "message": NO_SURPRISE_MESSAGE}

        pick = random.choice(results[:10])
        return {"movie": {**_search_card(pick), "surpriseReason": random.choice(SURPRISE_REASONS)}}
