from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional
from moodflix.schemas.validation import SafeStringMixin


class ReviewCreate(BaseModel, SafeStringMixin):
    """
    Payload of add_review. A second review of the same movie by the same
    user replaces the first.
    """
    movie_id: int = Field(..., gt=0, description="TMDB movie ID")
    movie_title: str = Field(..., min_length=1, max_length=300)
    movie_poster: Optional[str] = Field(None, max_length=300)
    rating: int = Field(..., ge=1, le=10, description="Rating from 1 to 10")
    review_text: Optional[str] = Field(None, max_length=2000)

    @field_validator('movie_title')
    @classmethod
    def clean_title(cls, v):
        return cls.strip_html(cls.validate_no_script(v))

    @field_validator('review_text')
    @classmethod
    def clean_review_text(cls, v):
        v = cls.validate_no_script(v)
        return cls.sanitize_html(v) or None


class ReviewDelete(BaseModel):
    review_id: int


class MovieReviewsQuery(BaseModel):
    movie_id: int = Field(..., gt=0)


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    movie_id: int
    movie_title: str
    movie_poster: Optional[str] = None
    rating: int
    review_text: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
