"""
User Data Service - the single action-dispatched endpoint behind the
client's watchlist, collection, review and follow stores.
"""
from typing import Any, Callable, Dict, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from moodflix.models.review import Review
from moodflix.models.user import User
from moodflix.schemas.review import MovieReviewsQuery, ReviewCreate, ReviewDelete, ReviewResponse
from moodflix.schemas.social import FollowStatus, FollowTarget
from moodflix.schemas.user_data import UserDataRequest
from moodflix.schemas.watchlist import (
    CollectionCreate,
    CollectionMovieAdd,
    CollectionMovieRemove,
    CollectionMovieResponse,
    CollectionRef,
    CollectionResponse,
    CollectionUpdate,
    WatchlistAdd,
    WatchlistItemResponse,
    WatchlistRemove,
)
from moodflix.services.auth_service import AuthService
from moodflix.services.follow_service import FollowService
from moodflix.services.review_service import ReviewService
from moodflix.services.watchlist_service import CollectionService, WatchlistService
import logging

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(schema: Type[SchemaT], data: Dict[str, Any]) -> SchemaT:
    """Validate an action payload; failures become 422 with the first message"""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message)


def _dump(schema: Type[BaseModel], obj: Any) -> Dict:
    return schema.model_validate(obj).model_dump(mode="json")


def _review_dict(review: Review) -> Dict:
    data = _dump(ReviewResponse, review)
    data["display_name"] = review.user.display_name if review.user else None
    return data


class UserDataService:
    # Readable without a session; a valid token still identifies the viewer
    PUBLIC_ACTIONS = {"get_movie_reviews", "get_follow_status"}

    # ---- watchlist ----------------------------------------------------------

    @staticmethod
    def get_watchlist(db: Session, user: User, data: Dict) -> Dict:
        items = WatchlistService.get_watchlist(db, user.id)
        return {"success": True, "watchlist": [_dump(WatchlistItemResponse, i) for i in items]}

    @staticmethod
    def add_to_watchlist(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(WatchlistAdd, data)
        item, created = WatchlistService.add_to_watchlist(db, user.id, payload)
        if not created:
            return {"success": True, "alreadyExists": True}
        return {"success": True, "item": _dump(WatchlistItemResponse, item)}

    @staticmethod
    def remove_from_watchlist(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(WatchlistRemove, data)
        removed = WatchlistService.remove_from_watchlist(db, user.id, payload.movie_id)
        return {"success": True, "removed": removed}

    # ---- collections --------------------------------------------------------

    @staticmethod
    def get_collections(db: Session, user: User, data: Dict) -> Dict:
        collections = CollectionService.get_collections(db, user.id)
        return {"success": True, "collections": [_dump(CollectionResponse, c) for c in collections]}

    @staticmethod
    def get_collection_movies(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionRef, data)
        collection = CollectionService.get_collection(db, user.id, payload.collection_id)
        return {"success": True, "movies": [_dump(CollectionMovieResponse, m) for m in collection.movies]}

    @staticmethod
    def create_collection(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionCreate, data)
        collection = CollectionService.create_collection(db, user.id, payload)
        return {"success": True, "collection": _dump(CollectionResponse, collection)}

    @staticmethod
    def update_collection(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionUpdate, data)
        collection = CollectionService.update_collection(db, user.id, payload)
        return {"success": True, "collection": _dump(CollectionResponse, collection)}

    @staticmethod
    def delete_collection(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionRef, data)
        CollectionService.delete_collection(db, user.id, payload.collection_id)
        return {"success": True}

    @staticmethod
    def add_to_collection(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionMovieAdd, data)
        entry, created = CollectionService.add_movie(db, user.id, payload)
        if not created:
            return {"success": True, "alreadyExists": True}
        return {"success": True, "movie": _dump(CollectionMovieResponse, entry)}

    @staticmethod
    def remove_from_collection(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(CollectionMovieRemove, data)
        removed = CollectionService.remove_movie(db, user.id, payload.collection_id, payload.movie_id)
        return {"success": True, "removed": removed}

    # ---- reviews ------------------------------------------------------------

    @staticmethod
    def get_movie_reviews(db: Session, user: Optional[User], data: Dict) -> Dict:
        payload = parse_payload(MovieReviewsQuery, data)
        reviews = ReviewService.get_movie_reviews(db, payload.movie_id)
        own = next((r for r in reviews if user and r.user_id == user.id), None)
        return {
            "success": True,
            "reviews": [_review_dict(r) for r in reviews],
            "userReview": _review_dict(own) if own else None,
            "averageRating": ReviewService.average_rating(reviews),
        }

    @staticmethod
    def add_review(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(ReviewCreate, data)
        review, created = ReviewService.upsert_review(db, user.id, payload)
        return {"success": True, "created": created, "review": _review_dict(review)}

    @staticmethod
    def delete_review(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(ReviewDelete, data)
        ReviewService.delete_review(db, user.id, payload.review_id)
        return {"success": True}

    # ---- follows ------------------------------------------------------------

    @staticmethod
    def get_follow_status(db: Session, user: Optional[User], data: Dict) -> Dict:
        payload = parse_payload(FollowTarget, data)
        follow_status = FollowService.follow_status(db, payload.user_id, user.id if user else None)
        return {"success": True, **FollowStatus(**follow_status).model_dump()}

    @staticmethod
    def follow_user(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(FollowTarget, data)
        if not FollowService.follow(db, user.id, payload.user_id):
            return {"success": True, "alreadyExists": True}
        return {"success": True}

    @staticmethod
    def unfollow_user(db: Session, user: User, data: Dict) -> Dict:
        payload = parse_payload(FollowTarget, data)
        removed = FollowService.unfollow(db, user.id, payload.user_id)
        return {"success": True, "removed": removed}

    # ---- dispatch -----------------------------------------------------------

    @staticmethod
    def _resolve_user(db: Session, action: str, token: Optional[str]) -> Optional[User]:
        if action not in UserDataService.PUBLIC_ACTIONS:
            return AuthService.resolve_session(db, token)
        if not token:
            return None
        try:
            return AuthService.resolve_session(db, token)
        except HTTPException as e:
            logger.debug(f"Ignoring unusable token on public action {action}: {e.detail}")
            return None

    @staticmethod
    def handle(db: Session, request: UserDataRequest) -> Dict:
        """
        Run one action for the session behind request.token.

        Raises:
            HTTPException: 400 unknown action, 401 bad or expired session,
                404 foreign or missing records, 422 invalid payload
        """
        handler: Optional[Callable[[Session, Optional[User], Dict], Dict]] = ACTIONS.get(request.action)
        if handler is None:
            logger.warning(f"Unknown user-data action: {request.action!r}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown action")

        user = UserDataService._resolve_user(db, request.action, request.token)
        logger.info(f"user-data {request.action} for user {user.id if user else 'anonymous'}")
        return handler(db, user, request.data)


ACTIONS: Dict[str, Callable[[Session, Optional[User], Dict], Dict]] = {
    name: getattr(UserDataService, name)
    for name in (
        "get_watchlist",
        "add_to_watchlist",
        "remove_from_watchlist",
        "get_collections",
        "get_collection_movies",
        "create_collection",
        "update_collection",
        "delete_collection",
        "add_to_collection",
        "remove_from_collection",
        "get_movie_reviews",
        "add_review",
        "delete_review",
        "get_follow_status",
        "follow_user",
        "unfollow_user",
    )
}
