from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List
from moodflix.schemas.validation import SafeStringMixin


# ==================== WATCHLIST SCHEMAS ====================

class WatchlistAdd(BaseModel, SafeStringMixin):
    """Payload of add_to_watchlist; movie metadata is stored as sent"""
    movie_id: int = Field(..., gt=0, description="TMDB movie ID")
    title: str = Field(..., min_length=1, max_length=300)
    poster_path: Optional[str] = Field(None, max_length=300)
    rating: Optional[float] = Field(None, ge=0, le=10)
    release_year: Optional[int] = Field(None, ge=1870, le=2100)
    overview: Optional[str] = Field(None, max_length=5000)

    @field_validator('title')
    @classmethod
    def clean_title(cls, v):
        return cls.strip_html(cls.validate_no_script(v))


class WatchlistRemove(BaseModel):
    movie_id: int = Field(..., gt=0)


class WatchlistItemResponse(BaseModel):
    id: int
    movie_id: int
    title: str
    poster_path: Optional[str] = None
    rating: Optional[float] = None
    release_year: Optional[int] = None
    overview: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# ==================== COLLECTION SCHEMAS ====================

class CollectionCreate(BaseModel, SafeStringMixin):
    """Payload of create_collection"""
    name: str = Field(..., min_length=1, max_length=100, description="Collection name")
    description: Optional[str] = Field(None, max_length=500, description="Collection description")
    is_public: bool = Field(False, description="Is collection public?")

    @field_validator('name')
    @classmethod
    def clean_name(cls, v):
        return cls.strip_html(cls.validate_no_script(v))

    @field_validator('description')
    @classmethod
    def clean_description(cls, v):
        return cls.sanitize_html(cls.validate_no_script(v))


class CollectionUpdate(BaseModel, SafeStringMixin):
    """Payload of update_collection; omitted fields are left alone"""
    collection_id: int
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def clean_name(cls, v):
        return cls.strip_html(cls.validate_no_script(v))

    @field_validator('description')
    @classmethod
    def clean_description(cls, v):
        return cls.sanitize_html(cls.validate_no_script(v))


class CollectionRef(BaseModel):
    collection_id: int


class CollectionMovieAdd(BaseModel, SafeStringMixin):
    collection_id: int
    movie_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=300)
    poster_path: Optional[str] = Field(None, max_length=300)

    @field_validator('title')
    @classmethod
    def clean_title(cls, v):
        return cls.strip_html(cls.validate_no_script(v))


class CollectionMovieRemove(BaseModel):
    collection_id: int
    movie_id: int = Field(..., gt=0)


class CollectionMovieResponse(BaseModel):
    id: int
    collection_id: int
    movie_id: int
    title: str
    poster_path: Optional[str] = None
    added_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CollectionResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_public: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    movies: List[CollectionMovieResponse] = []
    model_config = ConfigDict(from_attributes=True)
