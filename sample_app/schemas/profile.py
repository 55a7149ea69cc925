"""
Profile page schema.
"""

from typing import Optional

from sample_app.schemas.base import BaseSchema
from sample_app.schemas.micropost import MicropostPage
from sample_app.schemas.user import UserResponse


class ProfileResponse(BaseSchema):
    user: UserResponse
    micropost_count: int
    following_count: int
    followers_count: int
    # None when viewing your own profile or signed out: no follow button
    is_following: Optional[bool] = None
    microposts: MicropostPage
