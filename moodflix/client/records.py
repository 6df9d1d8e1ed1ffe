"""
Helpers for the plain-dict records the client stores keep in memory.
"""
from datetime import datetime, timezone
from typing import Dict, Optional
import uuid


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def temp_id(prefix: str = "temp") -> str:
    """Id of a record not yet confirmed by the server (temp_) or kept only locally (local_)"""
    return f"{prefix}_{uuid.uuid4().hex}"


def _year(movie: Dict) -> Optional[int]:
    year = movie.get("year") or movie.get("release_year")
    if year is None and movie.get("release_date"):
        year = str(movie["release_date"])[:4]
    try:
        return int(year) if year else None
    except (TypeError, ValueError):
        return None


def movie_payload(movie: Dict) -> Dict:
    """Stored movie fields from any movie card (recommendation, catalog or TMDB shape)"""
    return {
        "movie_id": int(movie.get("movie_id") or movie["id"]),
        "title": movie["title"],
        "poster_path": movie.get("poster_path") or movie.get("posterUrl"),
        "rating": movie.get("rating", movie.get("vote_average")),
        "release_year": _year(movie),
        "overview": movie.get("overview"),
    }
