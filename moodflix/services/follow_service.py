from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, Optional

from moodflix.models.social import Follow
from moodflix.models.user import User
import logging

logger = logging.getLogger(__name__)


class FollowService:

    @staticmethod
    def _ensure_target(db: Session, follower_id: int, target_id: int) -> None:
        if follower_id == target_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot follow yourself"
            )
        if not db.query(User).filter(User.id == target_id).first():
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

    @staticmethod
    def follow_status(db: Session, target_id: int, viewer_id: Optional[int] = None) -> Dict:
        """Follower counts of target_id and whether viewer_id follows them"""
        followers = db.query(Follow).filter(Follow.following_id == target_id).count()
        following = db.query(Follow).filter(Follow.follower_id == target_id).count()

        is_following = False
        if viewer_id and viewer_id != target_id:
            is_following = db.query(Follow).filter(
                Follow.follower_id == viewer_id,
                Follow.following_id == target_id
            ).first() is not None

        return {
            "is_following": is_following,
            "followers_count": followers,
            "following_count": following,
        }

    @staticmethod
    def follow(db: Session, follower_id: int, target_id: int) -> bool:
        """Returns False when the follow already existed"""
        FollowService._ensure_target(db, follower_id, target_id)

        existing = db.query(Follow).filter(
            Follow.follower_id == follower_id,
            Follow.following_id == target_id
        ).first()
        if existing:
            return False

        db.add(Follow(follower_id=follower_id, following_id=target_id))
        db.commit()
        logger.info(f"User {follower_id} followed {target_id}")
        return True

    @staticmethod
    def unfollow(db: Session, follower_id: int, target_id: int) -> bool:
        deleted = db.query(Follow).filter(
            Follow.follower_id == follower_id,
            Follow.following_id == target_id
        ).delete()
        db.commit()
        return deleted > 0
