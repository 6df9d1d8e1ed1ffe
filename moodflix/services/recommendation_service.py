"""
Recommendation Service - Mood Based Suggestions
Asks the configured language model for picks matching a mood and filters,
falling back to TMDB discover with mood -> genre mappings when no model is set.
"""
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote
from sqlalchemy.orm import Session
from fastapi import HTTPException
from moodflix.models.social import MoodSearch
from moodflix.models.user import User
from moodflix.schemas.recommendation import RecommendationRequest
from moodflix.services import mood_catalog
from moodflix.services.llm_service import LLMService, extract_json_array
from moodflix.services.tmdb_service import TMDBService, image_url, release_year, round_rating
import logging
import random
import time

logger = logging.getLogger(__name__)

PLACEHOLDER_POSTER = "https://via.placeholder.com/400x600/1a1a1a/ffffff?text="
NO_RESULTS_MESSAGE = "No movies found. Try different filters."


def placeholder_poster(title: str) -> str:
    return f"{PLACEHOLDER_POSTER}{quote(title)}"


class MoodRecommendationService:
    """
    Produces one page of recommendations per call.

    Titles in previously_recommended are never returned (case-insensitive).
    Ids are derived from the wall clock and only unique within one response,
    callers deduplicate on title.
    """

    MAX_RESULTS = 20
    LLM_BATCH_SIZE = 12
    MIN_DISCOVER_RESULTS = 10
    PROMPT_EXCLUSION_LIMIT = 100

    SYSTEM_PROMPT = (
        "You are a film curator. Recommend real, released movies that fit the "
        "viewer's mood. Reply with a JSON array only, no prose. Each element is an "
        "object with the keys: title (string), year (number), genre (string, at most "
        "two genres), language (string), industry (string, e.g. Hollywood, Bollywood), "
        "rating (number out of 10), moodMatch (one sentence on why it fits the mood)."
    )

    @staticmethod
    def recommend(db: Session, request: RecommendationRequest, user: Optional[User] = None) -> Dict:
        """
        Build a page of recommendations and record the search for analytics.

        Returns:
            {"movies": [...], "message": optional str}

        Raises:
            HTTPException: 429 / 402 from the model gateway, 502 on unusable replies
                or TMDB failures, 503 when TMDB is not configured
        """
        logger.info(
            f"Recommendation request: mood={request.mood!r} languages={request.languages} "
            f"genres={request.genres} industries={request.industries} duration={request.duration.value} "
            f"excluded={len(request.previously_recommended)}"
        )

        if LLMService.is_configured():
            candidates = MoodRecommendationService._from_llm(request)
        else:
            candidates = MoodRecommendationService._from_discover(request)

        movies = MoodRecommendationService._finalize(candidates, request.previously_recommended)
        MoodRecommendationService._record_search(db, request.mood, len(movies), user)

        result: Dict = {"movies": movies}
        if not movies:
            result["message"] = NO_RESULTS_MESSAGE
        logger.info(f"Returning {len(movies)} movies for mood {request.mood!r}")
        return result

    # ---- model path ---------------------------------------------------------

    @staticmethod
    def build_prompt(request: RecommendationRequest) -> str:
        lines = [
            f"Mood: {request.mood}",
            f"Recommend up to {MoodRecommendationService.LLM_BATCH_SIZE} movies.",
        ]
        if request.languages:
            lines.append(f"Languages: {', '.join(request.languages)}")
        if request.genres:
            lines.append(f"Genres: {', '.join(request.genres)}")
        if request.industries:
            lines.append(f"Film industries: {', '.join(request.industries)}")

        low, high = mood_catalog.DURATION_RUNTIME[request.duration.value]
        if low and high:
            lines.append(f"Runtime between {low} and {high} minutes.")
        elif high:
            lines.append(f"Runtime under {high} minutes.")
        elif low:
            lines.append(f"Runtime over {low} minutes.")
        if request.max_runtime < 240:
            lines.append(f"Never longer than {request.max_runtime} minutes.")
        if request.hidden_gems:
            lines.append("Prefer critically acclaimed hidden gems over blockbusters.")

        recent = request.previously_recommended[-MoodRecommendationService.PROMPT_EXCLUSION_LIMIT:]
        if recent:
            lines.append(f"Do NOT include any of these titles: {'; '.join(recent)}")
        return "\n".join(lines)

    @staticmethod
    def _from_llm(request: RecommendationRequest) -> List[Dict]:
        reply = LLMService.complete(
            MoodRecommendationService.SYSTEM_PROMPT,
            MoodRecommendationService.build_prompt(request)
        )
        raw_movies = extract_json_array(reply)
        logger.info(f"Model suggested {len(raw_movies)} movies")

        movies = []
        for raw in raw_movies:
            title = str(raw.get("title") or "").strip()
            if not title:
                continue
            year = MoodRecommendationService._as_year(raw.get("year"))
            movies.append({
                "title": title,
                "rating": MoodRecommendationService._as_rating(raw.get("rating")),
                "year": year,
                "genre": str(raw.get("genre") or "Drama"),
                "language": raw.get("language"),
                "industry": raw.get("industry"),
                "posterUrl": MoodRecommendationService._poster_for(title, year),
                "moodMatch": str(raw.get("moodMatch") or "A great movie matching your current mood"),
                "overview": raw.get("overview"),
            })
        return movies

    @staticmethod
    def _as_year(value) -> Optional[int]:
        try:
            return int(str(value)[:4])
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _as_rating(value) -> float:
        try:
            return round_rating(float(value))
        except (TypeError, ValueError):
            return 0.0

    @staticmethod
    def _poster_for(title: str, year: Optional[int]) -> str:
        try:
            poster_path = TMDBService.find_poster_path(title, year)
        except HTTPException as e:
            logger.warning(f"Poster lookup failed for {title!r}: {e.detail}")
            poster_path = None
        return image_url(poster_path) or placeholder_poster(title)

    # ---- catalog path -------------------------------------------------------

    @staticmethod
    def resolve_filters(request: RecommendationRequest) -> Tuple[Optional[str], Optional[str], Optional[str], List[int]]:
        """
        (language code, region, industry name, genre ids) for a request.
        The first industry wins over languages; explicit genres win over the mood.
        """
        language = region = industry_name = None
        if request.industries:
            config = mood_catalog.industry_config(request.industries[0])
            if config:
                language, region, industry_name = config["language"], config["region"], config["name"]
        if not language and request.languages:
            language = mood_catalog.language_code(request.languages[0])

        genre_ids = [
            mood_catalog.GENRE_IDS[g.lower()]
            for g in request.genres
            if g.lower() in mood_catalog.GENRE_IDS
        ]
        if not genre_ids:
            genre_ids = list(mood_catalog.MOOD_GENRES.get(request.mood.lower(), []))
        return language, region, industry_name, genre_ids

    @staticmethod
    def _from_discover(request: RecommendationRequest) -> List[Dict]:
        language, region, industry_name, genre_ids = MoodRecommendationService.resolve_filters(request)

        params = {"sort_by": "popularity.desc", "page": random.randint(1, 3)}
        if request.hidden_gems:
            params.update({
                "vote_average.gte": 7.0,
                "vote_count.gte": 100,
                "vote_count.lte": 5000,
                "sort_by": "vote_average.desc",
            })
        else:
            params["vote_count.gte"] = 50

        low, high = mood_catalog.DURATION_RUNTIME[request.duration.value]
        if request.max_runtime < 240:
            high = min(high, request.max_runtime) if high else request.max_runtime
        if low:
            params["with_runtime.gte"] = low
        if high:
            params["with_runtime.lte"] = high
        if genre_ids:
            params["with_genres"] = "|".join(str(g) for g in genre_ids)
        if language:
            params["with_original_language"] = language
        if region:
            params["region"] = region

        results = list(TMDBService.discover_movies(params).get("results", []))
        logger.info(f"Discover returned {len(results)} movies")

        if len(results) < MoodRecommendationService.MIN_DISCOVER_RESULTS and language:
            relaxed = {k: v for k, v in params.items() if k != "with_genres"}
            relaxed["page"] = 1
            try:
                extra = TMDBService.discover_movies(relaxed).get("results", [])
            except HTTPException as e:
                logger.warning(f"Relaxed discover query failed: {e.detail}")
                extra = []
            seen_ids = {m.get("id") for m in results}
            for movie in extra:
                if movie.get("id") not in seen_ids:
                    results.append(movie)
                    seen_ids.add(movie.get("id"))
            logger.info(f"Relaxed discover query raised the pool to {len(results)} movies")

        templates = mood_catalog.mood_templates(request.mood)
        movies = []
        for index, movie in enumerate(results):
            title = movie.get("title")
            if not title:
                continue
            original_language = movie.get("original_language") or ""
            movies.append({
                "title": title,
                "rating": round_rating(movie.get("vote_average")),
                "year": release_year(movie.get("release_date")),
                "genre": mood_catalog.genre_label(movie.get("genre_ids") or []),
                "language": mood_catalog.language_name(original_language) if original_language else None,
                "industry": industry_name or mood_catalog.LANGUAGE_INDUSTRY.get(original_language, "International"),
                "posterUrl": image_url(movie.get("poster_path")) or placeholder_poster(title),
                "moodMatch": templates[index % len(templates)],
                "overview": movie.get("overview"),
            })
        return movies

    # ---- shared -------------------------------------------------------------

    @staticmethod
    def _finalize(candidates: List[Dict], excluded: List[str]) -> List[Dict]:
        excluded_titles = {title.lower() for title in excluded}
        kept = []
        seen = set()
        for movie in candidates:
            key = movie["title"].lower()
            if key in excluded_titles or key in seen:
                continue
            seen.add(key)
            kept.append(movie)
            if len(kept) >= MoodRecommendationService.MAX_RESULTS:
                break

        base_id = int(time.time() * 1000)
        for index, movie in enumerate(kept):
            movie["id"] = base_id + index
        return kept

    @staticmethod
    def _record_search(db: Session, mood: str, result_count: int, user: Optional[User]) -> None:
        db.add(MoodSearch(
            user_id=user.id if user else None,
            mood=mood.lower(),
            result_count=result_count,
        ))
        db.commit()
