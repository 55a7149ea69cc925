"""
User API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sample_app.core.database import get_db
from sample_app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from sample_app.core.security import create_access_token
from sample_app.models.user import User
from sample_app.routes.deps import get_current_user, http_error, require_user
from sample_app.schemas.base import MessageResponse, PageMeta
from sample_app.schemas.micropost import MicropostPage, MicropostResponse
from sample_app.schemas.profile import ProfileResponse
from sample_app.schemas.relationship import FollowListResponse
from sample_app.schemas.user import (
    AuthResponse, UserCreate, UserListItem, UserListResponse,
    UserResponse, UserUpdate, UserUpdateResponse
)
from sample_app.services import micropost as micropost_service
from sample_app.services import policy
from sample_app.services import relationship as relationship_service
from sample_app.services import user as user_service


router = APIRouter(prefix="/users", tags=["users"])


def micropost_page(page, actor: Optional[User]) -> MicropostPage:
    """Render a page of microposts with per-post delete permission."""
    return MicropostPage(
        microposts=[
            MicropostResponse(
                id=post.id,
                created_at=post.created_at,
                content=post.content,
                user_id=post.user_id,
                user_name=post.user.name,
                can_delete=policy.can_delete_micropost(actor, post),
            )
            for post in page.items
        ],
        page=PageMeta.from_page(page),
    )


@router.post("", response_model=AuthResponse, status_code=201)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """Sign up and sign in."""
    try:
        user = user_service.create_user(
            db,
            user_data.name,
            user_data.email,
            user_data.password,
            user_data.password_confirmation,
        )
    except ValidationError as e:
        raise http_error(e)
    return AuthResponse(
        access_token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
        flash="Welcome to the Sample App!",
    )


@router.get("", response_model=UserListResponse)
def get_users(
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> UserListResponse:
    """All users, paginated; signed-in users only."""
    users = user_service.list_users(db, page=page)
    return UserListResponse(
        users=[
            UserListItem(
                **UserResponse.model_validate(user).model_dump(exclude={"gravatar_url"}),
                can_delete=policy.can_delete_user(current_user, user),
            )
            for user in users.items
        ],
        page=PageMeta.from_page(users),
    )


@router.get("/{user_id}", response_model=ProfileResponse)
def get_user(
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user)
) -> ProfileResponse:
    """
    Profile page: user, counters, follow state and their microposts.

    The user header comes from the profile cache; only counters, follow
    state and posts are queried by id.
    """
    try:
        profile = user_service.get_user_profile(db, user_id)
    except NotFoundError as e:
        raise http_error(e)

    is_following = None
    if current_user is not None and current_user.id != user_id:
        is_following = relationship_service.is_following(db, current_user, user_id)

    return ProfileResponse(
        user=UserResponse(**profile),
        micropost_count=micropost_service.count_microposts(db, user_id),
        following_count=relationship_service.following_count(db, user_id),
        followers_count=relationship_service.followers_count(db, user_id),
        is_following=is_following,
        microposts=micropost_page(micropost_service.user_microposts(db, user_id, page=page), current_user),
    )


@router.patch("/{user_id}", response_model=UserUpdateResponse)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> UserUpdateResponse:
    """Edit your own profile. Keys other than name, email and password are ignored."""
    try:
        user = user_service.get_user_or_404(db, user_id)
        if not policy.can_edit_user(current_user, user):
            raise AuthorizationError()
        attributes = user_data.model_dump(exclude_unset=True)
        attributes.update(user_data.model_extra or {})
        user = user_service.update_user(db, user, attributes)
    except (ValidationError, AuthorizationError, NotFoundError) as e:
        raise http_error(e)
    return UserUpdateResponse(user=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> MessageResponse:
    """Delete a user; admins only, and not themselves."""
    try:
        user = user_service.get_user_or_404(db, user_id)
        user_service.delete_user(db, current_user, user)
    except (ValidationError, AuthorizationError, NotFoundError) as e:
        raise http_error(e)
    return MessageResponse(flash="User deleted.")


def _follow_list(title: str, user: User, page) -> FollowListResponse:
    return FollowListResponse(
        title=title,
        user=UserResponse.model_validate(user),
        users=[UserResponse.model_validate(u) for u in page.items],
        page=PageMeta.from_page(page),
    )


@router.get("/{user_id}/following", response_model=FollowListResponse)
def get_following(
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> FollowListResponse:
    """Users this user follows."""
    try:
        user = user_service.get_user_or_404(db, user_id)
    except NotFoundError as e:
        raise http_error(e)
    return _follow_list("Following", user, relationship_service.followed_users_page(db, user, page=page))


@router.get("/{user_id}/followers", response_model=FollowListResponse)
def get_followers(
    user_id: int,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_user)
) -> FollowListResponse:
    """Users following this user."""
    try:
        user = user_service.get_user_or_404(db, user_id)
    except NotFoundError as e:
        raise http_error(e)
    return _follow_list("Followers", user, relationship_service.followers_page(db, user, page=page))
