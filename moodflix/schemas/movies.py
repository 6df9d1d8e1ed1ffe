from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from moodflix.schemas.validation import SafeStringMixin, validate_pagination


class SimilarMoviesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    movie_id: int = Field(..., gt=0, alias="movieId")
    page: int = 1

    @field_validator('page')
    @classmethod
    def clamp_page(cls, v):
        return validate_pagination(v)


class MovieDetailsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    movie_id: int = Field(..., gt=0, alias="movieId")


class PersonDetailsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    person_id: int = Field(..., gt=0, alias="personId")


class TrendingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: Literal["trending", "top_rated", "upcoming"] = "trending"
    language: Optional[str] = Field(None, max_length=30)
    movie_type: Optional[str] = Field(None, max_length=50, alias="movieType")


class PopularActorsRequest(BaseModel):
    page: int = 1

    @field_validator('page')
    @classmethod
    def clamp_page(cls, v):
        return validate_pagination(v)


class SearchMoviesRequest(BaseModel, SafeStringMixin):
    query: str = Field(..., min_length=1, max_length=200)
    page: int = 1

    @field_validator('query')
    @classmethod
    def clean_query(cls, v):
        v = cls.validate_no_script(v.strip())
        if not v:
            raise ValueError("Search query cannot be empty")
        return v

    @field_validator('page')
    @classmethod
    def clamp_page(cls, v):
        return validate_pagination(v)


def _clip(v, max_length: int):
    if not isinstance(v, str):
        return None
    v = v.strip()[:max_length]
    return v or None


class AISearchRequest(BaseModel):
    """
    Body of the ai-search function.

    describe: find movies from a free-text description
    summary: short summary for one movie
    surprise: one random well rated pick, optionally for a mood

    Text fields are clipped rather than rejected; excludeIds keeps the
    first 100 positive integers and drops everything else.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["describe", "summary", "surprise"]
    description: Optional[str] = None
    movie_title: Optional[str] = Field(None, alias="movieTitle")
    movie_overview: Optional[str] = Field(None, alias="movieOverview")
    mood: Optional[str] = None
    exclude_ids: List[int] = Field(default_factory=list, alias="excludeIds")

    @field_validator('description', mode='before')
    @classmethod
    def clip_description(cls, v):
        return _clip(v, 500)

    @field_validator('movie_title', mode='before')
    @classmethod
    def clip_title(cls, v):
        return _clip(v, 200)

    @field_validator('movie_overview', mode='before')
    @classmethod
    def clip_overview(cls, v):
        return _clip(v, 1000)

    @field_validator('mood', mode='before')
    @classmethod
    def clip_mood(cls, v):
        return _clip(v, 50)

    @field_validator('exclude_ids', mode='before')
    @classmethod
    def positive_ids(cls, v):
        if not isinstance(v, list):
            return []
        ids = [i for i in v if isinstance(i, int) and not isinstance(i, bool) and i > 0]
        return ids[:100]
