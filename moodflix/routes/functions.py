"""
Edge-function style endpoints: every call is a POST with a JSON body,
mirroring how the client invokes remote functions by name.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from moodflix.database import get_db
from moodflix.models.user import User
from moodflix.schemas.movies import (
    AISearchRequest,
    MovieDetailsRequest,
    PersonDetailsRequest,
    PopularActorsRequest,
    SearchMoviesRequest,
    SimilarMoviesRequest,
    TrendingRequest,
)
from moodflix.schemas.recommendation import RecommendationRequest, RecommendationResponse
from moodflix.schemas.user_data import UserDataRequest
from moodflix.services.ai_search_service import AISearchService
from moodflix.services.catalog_service import CatalogService
from moodflix.services.recommendation_service import MoodRecommendationService
from moodflix.services.user_data_service import UserDataService
from moodflix.utils.dependencies import get_optional_user

router = APIRouter(prefix="/functions", tags=["Functions"])


@router.post("/recommend-movies", response_model=RecommendationResponse)
def recommend_movies(
    request: RecommendationRequest,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user)
):
    """
    Mood based recommendations.

    - Titles listed in previouslyRecommended are never returned
    - Movie ids are only unique within one response
    - 429 / 402 when the AI gateway is rate limited or out of credits
    """
    return MoodRecommendationService.recommend(db, request, user)


@router.post("/similar-movies")
def similar_movies(request: SimilarMoviesRequest):
    return CatalogService.similar_movies(request.movie_id, request.page)


@router.post("/movie-details")
def movie_details(request: MovieDetailsRequest):
    return CatalogService.movie_details(request.movie_id)


@router.post("/person-details")
def person_details(request: PersonDetailsRequest):
    return CatalogService.person_details(request.person_id)


@router.post("/trending-movies")
def trending_movies(request: TrendingRequest):
    return CatalogService.trending_movies(request.category, request.language, request.movie_type)


@router.post("/popular-actors")
def popular_actors(request: PopularActorsRequest):
    return CatalogService.popular_actors(request.page)


@router.post("/search-movies")
def search_movies(request: SearchMoviesRequest):
    return CatalogService.search_movies(request.query, request.page)


@router.post("/ai-search")
def ai_search(request: AISearchRequest):
    """describe, summary or surprise; an unknown type is rejected with 422"""
    return AISearchService.search(request)


@router.post("/user-data")
def user_data(request: UserDataRequest, db: Session = Depends(get_db)):
    """Watchlist, collection, review and follow actions for the session in request.token"""
    return UserDataService.handle(db, request)
