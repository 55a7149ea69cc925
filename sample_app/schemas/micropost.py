"""
Micropost schema definitions.
"""

from typing import List

from pydantic import BaseModel

from sample_app.schemas.base import BaseDBSchema, BaseSchema, PageMeta


class MicropostCreate(BaseModel):
    content: str = ""


class MicropostResponse(BaseDBSchema):
    content: str
    user_id: int
    user_name: str = ""
    can_delete: bool = False


class MicropostPage(BaseSchema):
    microposts: List[MicropostResponse]
    page: PageMeta


class FeedResponse(BaseSchema):
    """Home page: the signed-in user's feed and post count."""

    micropost_count: int
    feed: MicropostPage


class MicropostCreateResponse(BaseSchema):
    micropost: MicropostResponse
    micropost_count: int
    flash: str = "Micropost created!"


class MicropostDeleteResponse(BaseSchema):
    micropost_count: int
    flash: str = "Micropost deleted"
