"""
Follow relationship schema definitions.
"""

from typing import List

from pydantic import BaseModel

from sample_app.schemas.base import BaseSchema, PageMeta
from sample_app.schemas.user import UserResponse


class FollowRequest(BaseModel):
    followed_id: int


class FollowStatusResponse(BaseSchema):
    """Button state and counters after a follow or unfollow."""

    following: bool
    following_count: int
    followers_count: int


class FollowListResponse(BaseSchema):
    """Following / Followers page."""

    title: str
    user: UserResponse
    users: List[UserResponse]
    page: PageMeta
