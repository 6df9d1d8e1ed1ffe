from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from typing import Dict, List, Tuple

from moodflix.models.review import Review
from moodflix.schemas.review import ReviewCreate
import logging

logger = logging.getLogger(__name__)


class ReviewService:

    @staticmethod
    def get_movie_reviews(db: Session, movie_id: int) -> List[Review]:
        """All reviews of a movie, newest first, authors eagerly loaded"""
        return (
            db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.movie_id == movie_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    @staticmethod
    def average_rating(reviews: List[Review]) -> float:
        if not reviews:
            return 0.0
        return round(sum(r.rating for r in reviews) / len(reviews), 1)

    @staticmethod
    def upsert_review(db: Session, user_id: int, data: ReviewCreate) -> Tuple[Review, bool]:
        """
        Create or replace the user's review of a movie.

        Returns:
            (review, created)
        """
        review = db.query(Review).filter(
            Review.user_id == user_id,
            Review.movie_id == data.movie_id
        ).first()

        created = review is None
        if created:
            review = Review(user_id=user_id, movie_id=data.movie_id, movie_title=data.movie_title)
            db.add(review)

        review.rating = data.rating  # type: ignore
        review.review_text = data.review_text  # type: ignore
        review.movie_poster = data.movie_poster  # type: ignore

        db.commit()
        db.refresh(review)
        logger.info(f"User {user_id} {'created' if created else 'updated'} review of movie {data.movie_id}")
        return review, created

    @staticmethod
    def delete_review(db: Session, user_id: int, review_id: int) -> None:
        review = db.query(Review).filter(
            Review.id == review_id,
            Review.user_id == user_id
        ).first()

        if not review:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Review not found"
            )

        db.delete(review)
        db.commit()

    @staticmethod
    def rating_distribution(db: Session) -> Dict[int, int]:
        """Review count per rating value, 1 through 10"""
        distribution = {value: 0 for value in range(1, 11)}
        for (rating,) in db.query(Review.rating).all():
            if rating in distribution:
                distribution[rating] += 1
        return distribution
