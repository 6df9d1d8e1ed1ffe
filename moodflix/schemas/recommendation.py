from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum
from typing import List, Optional

MAX_EXCLUDED_TITLES = 500


class Duration(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    ANY = "any"


def _clip_strings(values, max_items: int, max_length: int) -> List[str]:
    if not isinstance(values, list):
        return []
    strings = [str(v).strip()[:max_length] for v in values if isinstance(v, str) and v.strip()]
    return strings[:max_items]


class RecommendationRequest(BaseModel):
    """
    Body of the recommend-movies function.

    Oversized inputs are clipped rather than rejected so a long running
    session never fails on its own exclusion list.
    """
    model_config = ConfigDict(populate_by_name=True)

    mood: str = Field(..., min_length=1)
    languages: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    duration: Duration = Duration.ANY
    previously_recommended: List[str] = Field(default_factory=list, alias="previouslyRecommended")
    hidden_gems: bool = Field(False, alias="hiddenGems")
    max_runtime: int = Field(240, alias="maxRuntime")

    @field_validator('mood', mode='before')
    @classmethod
    def clip_mood(cls, v):
        return v.strip()[:50] if isinstance(v, str) else v

    @field_validator('languages', 'genres', mode='before')
    @classmethod
    def clip_filters(cls, v):
        return _clip_strings(v, max_items=5, max_length=50)

    @field_validator('industries', mode='before')
    @classmethod
    def clip_industries(cls, v):
        return _clip_strings(v, max_items=3, max_length=50)

    @field_validator('duration', mode='before')
    @classmethod
    def unknown_duration_is_any(cls, v):
        if isinstance(v, str) and v.lower() in {d.value for d in Duration}:
            return v.lower()
        return Duration.ANY

    @field_validator('previously_recommended', mode='before')
    @classmethod
    def keep_recent_titles(cls, v):
        if not isinstance(v, list):
            return []
        titles = [str(t)[:200] for t in v if isinstance(t, str) and t.strip()]
        return titles[-MAX_EXCLUDED_TITLES:]

    @field_validator('max_runtime', mode='before')
    @classmethod
    def clamp_runtime(cls, v):
        if not isinstance(v, (int, float)):
            return 240
        return int(min(max(v, 60), 300))


class RecommendedMovie(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    rating: float
    year: Optional[int] = None
    genre: str
    language: Optional[str] = None
    industry: Optional[str] = None
    poster_url: str = Field(..., alias="posterUrl")
    mood_match: str = Field(..., alias="moodMatch")
    overview: Optional[str] = None


class RecommendationResponse(BaseModel):
    movies: List[RecommendedMovie]
    message: Optional[str] = None
