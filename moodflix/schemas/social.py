from pydantic import BaseModel, Field


class FollowTarget(BaseModel):
    user_id: int = Field(..., gt=0, description="User to follow, unfollow or inspect")


class FollowStatus(BaseModel):
    is_following: bool = False
    followers_count: int = 0
    following_count: int = 0
