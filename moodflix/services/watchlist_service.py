from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func
from fastapi import HTTPException, status
from typing import List, Tuple

from moodflix.models.watchlist import WatchlistItem, Collection, CollectionMovie
from moodflix.schemas.watchlist import (
    WatchlistAdd,
    CollectionCreate,
    CollectionUpdate,
    CollectionMovieAdd,
)
import logging

logger = logging.getLogger(__name__)


class WatchlistService:
    """Service for watchlist operations"""

    @staticmethod
    def get_watchlist(db: Session, user_id: int) -> List[WatchlistItem]:
        """Newest first"""
        return (
            db.query(WatchlistItem)
            .filter(WatchlistItem.user_id == user_id)
            .order_by(WatchlistItem.created_at.desc(), WatchlistItem.id.desc())
            .all()
        )

    @staticmethod
    def add_to_watchlist(db: Session, user_id: int, data: WatchlistAdd) -> Tuple[WatchlistItem, bool]:
        """
        Add a movie to the user's watchlist.

        Returns:
            (item, created); created is False when the movie was already listed
        """
        existing = db.query(WatchlistItem).filter(
            WatchlistItem.user_id == user_id,
            WatchlistItem.movie_id == data.movie_id
        ).first()
        if existing:
            return existing, False

        item = WatchlistItem(user_id=user_id, **data.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info(f"User {user_id} added movie {data.movie_id} to watchlist")
        return item, True

    @staticmethod
    def remove_from_watchlist(db: Session, user_id: int, movie_id: int) -> bool:
        """Remove a movie; returns False when it was not listed"""
        deleted = db.query(WatchlistItem).filter(
            WatchlistItem.user_id == user_id,
            WatchlistItem.movie_id == movie_id
        ).delete()
        db.commit()
        return deleted > 0


class CollectionService:
    """Service for user collections"""

    @staticmethod
    def get_collections(db: Session, user_id: int) -> List[Collection]:
        """Most recently updated first, movies eagerly loaded"""
        return (
            db.query(Collection)
            .options(selectinload(Collection.movies))
            .filter(Collection.user_id == user_id)
            .order_by(Collection.updated_at.desc(), Collection.id.desc())
            .all()
        )

    @staticmethod
    def get_collection(db: Session, user_id: int, collection_id: int) -> Collection:
        """Get a collection owned by user_id"""
        collection = db.query(Collection).filter(
            Collection.id == collection_id,
            Collection.user_id == user_id
        ).first()

        if not collection:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Collection not found"
            )
        return collection

    @staticmethod
    def create_collection(db: Session, user_id: int, data: CollectionCreate) -> Collection:
        collection = Collection(
            user_id=user_id,
            name=data.name,
            description=data.description,
            is_public=data.is_public
        )
        db.add(collection)
        db.commit()
        db.refresh(collection)
        logger.info(f"User {user_id} created collection {collection.id}")
        return collection

    @staticmethod
    def update_collection(db: Session, user_id: int, data: CollectionUpdate) -> Collection:
        collection = CollectionService.get_collection(db, user_id, data.collection_id)

        for field, value in data.model_dump(exclude={"collection_id"}, exclude_unset=True).items():
            if field == "name" and not value:
                continue
            setattr(collection, field, value)

        db.commit()
        db.refresh(collection)
        return collection

    @staticmethod
    def delete_collection(db: Session, user_id: int, collection_id: int) -> None:
        collection = CollectionService.get_collection(db, user_id, collection_id)
        db.delete(collection)
        db.commit()
        logger.info(f"User {user_id} deleted collection {collection_id}")

    @staticmethod
    def add_movie(db: Session, user_id: int, data: CollectionMovieAdd) -> Tuple[CollectionMovie, bool]:
        """
        Add a movie to a collection owned by user_id.

        Returns:
            (entry, created); created is False when the movie was already there
        """
        collection = CollectionService.get_collection(db, user_id, data.collection_id)

        existing = db.query(CollectionMovie).filter(
            CollectionMovie.collection_id == collection.id,
            CollectionMovie.movie_id == data.movie_id
        ).first()
        if existing:
            return existing, False

        entry = CollectionMovie(
            collection_id=collection.id,
            movie_id=data.movie_id,
            title=data.title,
            poster_path=data.poster_path
        )
        db.add(entry)
        collection.updated_at = func.now()  # type: ignore
        db.commit()
        db.refresh(entry)
        return entry, True

    @staticmethod
    def remove_movie(db: Session, user_id: int, collection_id: int, movie_id: int) -> bool:
        collection = CollectionService.get_collection(db, user_id, collection_id)
        deleted = db.query(CollectionMovie).filter(
            CollectionMovie.collection_id == collection.id,
            CollectionMovie.movie_id == movie_id
        ).delete()
        db.commit()
        return deleted > 0
