"""
Micropost and home feed endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sample_app.core.database import get_db
from sample_app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from sample_app.models.user import User
from sample_app.routes.deps import http_error, require_user
from sample_app.routes.user import micropost_page
from sample_app.schemas.micropost import (
    FeedResponse, MicropostCreate, MicropostCreateResponse,
    MicropostDeleteResponse, MicropostResponse
)
from sample_app.services import micropost as micropost_service


router = APIRouter(tags=["microposts"])


@router.get("/feed", response_model=FeedResponse)
def get_feed(
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> FeedResponse:
    """Home page for the signed-in user."""
    return FeedResponse(
        micropost_count=micropost_service.count_microposts(db, current_user),
        feed=micropost_page(micropost_service.feed(db, current_user, page=page), current_user),
    )


@router.post("/microposts", response_model=MicropostCreateResponse, status_code=201)
def create_micropost(
    data: MicropostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> MicropostCreateResponse:
    """Post as the signed-in user."""
    try:
        post = micropost_service.create_micropost(db, current_user, data.content)
    except ValidationError as e:
        raise http_error(e)
    return MicropostCreateResponse(
        micropost=MicropostResponse(
            id=post.id,
            created_at=post.created_at,
            content=post.content,
            user_id=post.user_id,
            user_name=current_user.name,
            can_delete=True,
        ),
        micropost_count=micropost_service.count_microposts(db, current_user),
    )


@router.delete("/microposts/{micropost_id}", response_model=MicropostDeleteResponse)
def delete_micropost(
    micropost_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> MicropostDeleteResponse:
    """Delete one of your own microposts."""
    try:
        post = micropost_service.get_micropost_or_404(db, micropost_id)
        micropost_service.delete_micropost(db, current_user, post)
    except (AuthorizationError, NotFoundError) as e:
        raise http_error(e)
    return MicropostDeleteResponse(
        micropost_count=micropost_service.count_microposts(db, current_user),
    )
