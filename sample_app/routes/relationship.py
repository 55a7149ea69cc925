"""
Follow / unfollow endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sample_app.core.database import get_db
from sample_app.core.exceptions import NotFoundError, ValidationError
from sample_app.models.user import User
from sample_app.routes.deps import http_error, require_user
from sample_app.schemas.relationship import FollowRequest, FollowStatusResponse
from sample_app.services import relationship as relationship_service
from sample_app.services import user as user_service


router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.post("", response_model=FollowStatusResponse)
def follow(
    data: FollowRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> FollowStatusResponse:
    """Follow a user; the response flips the button to "Unfollow"."""
    try:
        followed = user_service.get_user_or_404(db, data.followed_id)
        result = relationship_service.follow(db, current_user, followed)
    except (NotFoundError, ValidationError) as e:
        raise http_error(e)
    return FollowStatusResponse.model_validate(result)


@router.delete("/{followed_id}", response_model=FollowStatusResponse)
def unfollow(
    followed_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> FollowStatusResponse:
    """Stop following a user; the response flips the button back to "Follow"."""
    try:
        followed = user_service.get_user_or_404(db, followed_id)
    except NotFoundError as e:
        raise http_error(e)
    return FollowStatusResponse.model_validate(relationship_service.unfollow(db, current_user, followed))
