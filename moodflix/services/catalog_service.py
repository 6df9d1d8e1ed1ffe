"""
Catalog Service - browse functions over TMDB
Shapes raw TMDB payloads into the flat camelCase documents the client renders:
similar titles, movie and person detail panels, homepage rails and search.
"""
from datetime import date, timedelta
from typing import Dict, List, Optional
from fastapi import HTTPException
from moodflix.services import mood_catalog
from moodflix.services.tmdb_service import (
    TMDB_BACKDROP_BASE,
    TMDB_IMAGE_BASE,
    TMDB_LOGO_BASE,
    TMDB_PROFILE_BASE,
    TMDBService,
    image_url,
    release_year,
    round_rating,
)
import logging

logger = logging.getLogger(__name__)

TMDB_THUMB_BASE = "https://image.tmdb.org/t/p/w200"
TMDB_WIDE_BASE = "https://image.tmdb.org/t/p/w1280"

# Official sites of the streaming services TMDB reports, by provider id
PROVIDER_URLS: Dict[int, str] = {
    8: "https://www.netflix.com",
    9: "https://www.amazon.com/gp/video",
    337: "https://www.disneyplus.com",
    384: "https://www.hbomax.com",
    15: "https://www.hulu.com",
    386: "https://www.peacocktv.com",
    531: "https://www.paramountplus.com",
    350: "https://tv.apple.com",
    283: "https://www.crunchyroll.com",
    2: "https://tv.apple.com",
    3: "https://play.google.com/store/movies",
    10: "https://www.amazon.com/gp/video",
    192: "https://www.youtube.com",
    7: "https://www.vudu.com",
    68: "https://www.microsoft.com/en-us/store/movies-and-tv",
}

TRENDING_CATEGORIES = ("trending", "top_rated", "upcoming")


def movie_card(movie: Dict) -> Dict:
    """Compact card used by similar-title grids."""
    return {
        "id": movie.get("id"),
        "title": movie.get("title"),
        "posterUrl": image_url(movie.get("poster_path")),
        "rating": round_rating(movie.get("vote_average")),
        "year": release_year(movie.get("release_date")),
    }


def categorize_job(job: str) -> str:
    lowered = job.lower()
    if "direct" in lowered:
        return "Director"
    if "produc" in lowered:
        return "Producer"
    if "writ" in lowered:
        return "Writer"
    if "cinemat" in lowered or "photography" in lowered:
        return "Cinematography"
    if "music" in lowered or "composer" in lowered:
        return "Music"
    if "edit" in lowered:
        return "Editor"
    return "Other"


def _newest_first(movies: List[Dict]) -> List[Dict]:
    return sorted(movies, key=lambda m: (m.get("year") or 0, m.get("popularity") or 0), reverse=True)


class CatalogService:

    @staticmethod
    def similar_movies(movie_id: int, page: int = 1) -> Dict:
        data = TMDBService.get_similar(movie_id, page)
        movies = [movie_card(m) for m in data.get("results", []) if m.get("poster_path")]
        current_page = data.get("page", page)
        total_pages = data.get("total_pages", 0)
        logger.info(f"Similar movies for {movie_id} page {current_page}/{total_pages}: {len(movies)}")
        return {
            "movies": movies,
            "page": current_page,
            "totalPages": total_pages,
            "hasMore": current_page < total_pages,
        }

    @staticmethod
    def _providers(payload: Dict) -> Dict[str, List[Dict]]:
        results = payload.get("results") or {}
        region = results.get("US") or results.get("GB") or next(iter(results.values()), {})

        def shape(entries: Optional[List[Dict]], limit: int) -> List[Dict]:
            shaped = []
            for p in (entries or [])[:limit]:
                url = PROVIDER_URLS.get(p.get("provider_id"))
                if not url:
                    continue
                shaped.append({
                    "id": p.get("provider_id"),
                    "name": p.get("provider_name"),
                    "logoUrl": image_url(p.get("logo_path"), TMDB_LOGO_BASE),
                    "url": url,
                })
            return shaped

        return {
            "flatrate": shape(region.get("flatrate"), 5),
            "rent": shape(region.get("rent"), 3),
            "buy": shape(region.get("buy"), 3),
        }

    @staticmethod
    def movie_details(movie_id: int) -> Dict:
        """
        Flattened movie document with top billed cast, trailer, up to 20
        similar titles (two TMDB pages) and streaming providers.
        """
        details = TMDBService.get_movie_details(movie_id)

        similar_results = list((details.get("similar") or {}).get("results", []))
        try:
            similar_results += TMDBService.get_similar(movie_id, 2).get("results", [])
        except HTTPException as e:
            logger.warning(f"Second similar page for {movie_id} unavailable: {e.detail}")
        similar = [movie_card(m) for m in similar_results if m.get("poster_path")][:20]

        cast = [
            {
                "id": person.get("id"),
                "name": person.get("name"),
                "character": person.get("character"),
                "profileUrl": image_url(person.get("profile_path"), TMDB_PROFILE_BASE),
            }
            for person in (details.get("credits") or {}).get("cast", [])[:10]
        ]

        videos = (details.get("videos") or {}).get("results", [])
        trailer = next(
            (v for v in videos if v.get("type") == "Trailer" and v.get("site") == "YouTube"),
            next((v for v in videos if v.get("site") == "YouTube"), None)
        )

        return {
            "id": details.get("id"),
            "title": details.get("title"),
            "tagline": details.get("tagline"),
            "overview": details.get("overview"),
            "releaseDate": details.get("release_date"),
            "runtime": details.get("runtime"),
            "rating": round_rating(details.get("vote_average")),
            "voteCount": details.get("vote_count"),
            "posterUrl": image_url(details.get("poster_path")),
            "backdropUrl": image_url(details.get("backdrop_path"), TMDB_WIDE_BASE),
            "genres": [g.get("name") for g in details.get("genres", [])],
            "budget": details.get("budget"),
            "revenue": details.get("revenue"),
            "productionCompanies": [c.get("name") for c in details.get("production_companies", [])],
            "cast": cast,
            "trailerKey": trailer.get("key") if trailer else None,
            "trailerName": trailer.get("name") if trailer else None,
            "similarMovies": similar,
            "watchProviders": CatalogService._providers(details.get("watch/providers") or {}),
        }

    @staticmethod
    def person_details(person_id: int) -> Dict:
        """
        Flattened person document. Crew credits are merged per movie (one
        entry listing every job) and also grouped by job category.
        """
        details = TMDBService.get_person_details(person_id)
        credits = details.get("movie_credits") or {}
        external = details.get("external_ids") or {}

        def base(movie: Dict) -> Dict:
            return {
                "id": movie.get("id"),
                "title": movie.get("title"),
                "posterUrl": image_url(movie.get("poster_path")),
                "backdropUrl": image_url(movie.get("backdrop_path")),
                "rating": round_rating(movie.get("vote_average")),
                "year": release_year(movie.get("release_date")),
                "releaseDate": movie.get("release_date") or None,
                "popularity": movie.get("popularity") or 0,
            }

        acting = []
        seen_roles = set()
        for movie in credits.get("cast", []):
            if not movie.get("poster_path") or movie.get("id") in seen_roles:
                continue
            seen_roles.add(movie.get("id"))
            acting.append({**base(movie), "character": movie.get("character") or None})
        acting = _newest_first(acting)

        crew_by_movie: Dict[int, Dict] = {}
        for movie in credits.get("crew", []):
            if not movie.get("poster_path"):
                continue
            entry = crew_by_movie.setdefault(movie.get("id"), {**base(movie), "jobs": []})
            job = movie.get("job")
            if job and job not in entry["jobs"]:
                entry["jobs"].append(job)
        crew = _newest_first(list(crew_by_movie.values()))

        grouped: Dict[str, List[Dict]] = {}
        for movie in crew:
            for job in movie["jobs"]:
                grouped.setdefault(categorize_job(job), []).append({**movie, "job": job})

        gender = {1: "Female", 2: "Male"}.get(details.get("gender"), "Other")
        photos = [
            image_url(img.get("file_path"), TMDB_PROFILE_BASE)
            for img in (details.get("images") or {}).get("profiles", [])[:6]
        ]

        return {
            "id": details.get("id"),
            "name": details.get("name"),
            "biography": details.get("biography") or None,
            "birthday": details.get("birthday") or None,
            "deathday": details.get("deathday") or None,
            "placeOfBirth": details.get("place_of_birth") or None,
            "profileUrl": image_url(details.get("profile_path"), TMDB_PROFILE_BASE),
            "knownFor": details.get("known_for_department") or "Acting",
            "popularity": round_rating(details.get("popularity")),
            "alsoKnownAs": details.get("also_known_as") or [],
            "gender": gender,
            "homepage": details.get("homepage") or None,
            "externalIds": {
                "imdb": external.get("imdb_id"),
                "instagram": external.get("instagram_id"),
                "twitter": external.get("twitter_id"),
                "facebook": external.get("facebook_id"),
            },
            "additionalPhotos": photos,
            "stats": {
                "totalMovies": len({m["id"] for m in acting} | set(crew_by_movie)),
                "asActor": len(acting),
                "asCrew": len(crew),
            },
            "actingRoles": acting,
            "crewRoles": grouped,
        }

    @staticmethod
    def trending_movies(category: str = "trending", language: Optional[str] = None,
                        movie_type: Optional[str] = None) -> Dict:
        """
        Homepage rail, max 10 movies.
        An industry (movie_type) or language switches to a filtered discover query.
        """
        target_language = region = None
        if movie_type and movie_type != "any":
            config = mood_catalog.industry_config(movie_type)
            if config:
                target_language, region = config["language"], config["region"]
        if not target_language and language and language != "any":
            target_language = mood_catalog.language_code(language)

        if target_language:
            params = {
                "sort_by": "vote_average.desc" if category == "top_rated" else "popularity.desc",
                "vote_count.gte": 100,
                "with_original_language": target_language,
            }
            if region:
                params["region"] = region
            if category == "upcoming":
                today = date.today()
                params["primary_release_date.gte"] = today.isoformat()
                params["primary_release_date.lte"] = (today + timedelta(days=30)).isoformat()
            data = TMDBService.discover_movies(params)
        elif category == "top_rated":
            data = TMDBService.get_top_rated()
        elif category == "upcoming":
            data = TMDBService.get_upcoming()
        else:
            data = TMDBService.get_trending("week")

        movies = [
            {
                "id": m.get("id"),
                "title": m.get("title"),
                "year": release_year(m.get("release_date")),
                "rating": round_rating(m.get("vote_average")),
                "posterUrl": image_url(m.get("poster_path")),
                "backdropUrl": image_url(m.get("backdrop_path"), TMDB_BACKDROP_BASE),
                "overview": m.get("overview"),
                "genre": ", ".join(
                    mood_catalog.GENRE_NAMES[g] for g in (m.get("genre_ids") or [])[:2]
                    if g in mood_catalog.GENRE_NAMES
                ) or "Drama",
            }
            for m in data.get("results", [])[:10]
        ]
        return {"movies": movies}

    @staticmethod
    def popular_actors(page: int = 1) -> Dict:
        data = TMDBService.get_popular_people(page)
        actors = [
            {
                "id": person.get("id"),
                "name": person.get("name"),
                "profileUrl": image_url(person.get("profile_path"), TMDB_IMAGE_BASE),
                "knownFor": person.get("known_for_department") or "Acting",
                "popularity": person.get("popularity"),
                "knownForMovies": [
                    {
                        "id": movie.get("id"),
                        "title": movie.get("title") or movie.get("name"),
                        "posterUrl": image_url(movie.get("poster_path"), TMDB_THUMB_BASE),
                    }
                    for movie in (person.get("known_for") or [])[:3]
                ],
            }
            for person in data.get("results", [])
        ]
        current_page = data.get("page", page)
        total_pages = data.get("total_pages", 0)
        return {
            "actors": actors,
            "page": current_page,
            "totalPages": total_pages,
            "totalResults": data.get("total_results", 0),
            "hasMore": current_page < total_pages,
        }

    @staticmethod
    def search_movies(query: str, page: int = 1) -> Dict:
        data = TMDBService.search_movies(query, page)
        movies = []
        for movie in data.get("results", [])[:12]:
            original_language = movie.get("original_language") or ""
            overview = movie.get("overview") or ""
            movies.append({
                "id": movie.get("id"),
                "title": movie.get("title"),
                "year": release_year(movie.get("release_date")),
                "rating": round_rating(movie.get("vote_average")),
                "genre": mood_catalog.genre_label(movie.get("genre_ids") or []),
                "language": mood_catalog.language_name(original_language) if original_language else "Unknown",
                "industry": mood_catalog.LANGUAGE_INDUSTRY.get(original_language, "International"),
                "posterUrl": image_url(movie.get("poster_path")),
                "moodMatch": overview[:150] or "A great movie to watch.",
                "overview": overview,
            })
        return {
            "movies": movies,
            "page": data.get("page", page),
            "totalPages": data.get("total_pages", 0),
        }
