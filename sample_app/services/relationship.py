"""
Follow relationship service.

Both directions are read from the single relationship table: followed_users
looks edges up by follower_id, followers by followed_id.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from sample_app.core.config import settings
from sample_app.core.database import transaction_context, with_transaction_retry
from sample_app.core.exceptions import ValidationError
from sample_app.core.pagination import Page, paginate
from sample_app.models.relationship import Relationship
from sample_app.models.user import User, user_id_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowStatus:
    """State needed to redraw the follow button and both counters."""

    following: bool
    following_count: int  # how many users the follower follows
    followers_count: int  # how many followers the followed user has


def _edge(db: Session, follower: Union[User, int], followed: Union[User, int]) -> Optional[Relationship]:
    return db.query(Relationship).filter(
        Relationship.follower_id == user_id_of(follower),
        Relationship.followed_id == user_id_of(followed)
    ).first()


def _status(db: Session, follower: User, followed: User) -> FollowStatus:
    return FollowStatus(
        following=is_following(db, follower, followed),
        following_count=following_count(db, follower),
        followers_count=followers_count(db, followed),
    )


def _followed_users_query(db: Session, user: User):
    return (
        db.query(User)
        .join(Relationship, Relationship.followed_id == User.id)
        .filter(Relationship.follower_id == user.id)
        .order_by(Relationship.created_at.desc(), Relationship.id.desc())
    )


def _followers_query(db: Session, user: User):
    return (
        db.query(User)
        .join(Relationship, Relationship.follower_id == User.id)
        .filter(Relationship.followed_id == user.id)
        .order_by(Relationship.created_at.desc(), Relationship.id.desc())
    )


# PUBLIC_INTERFACE
@with_transaction_retry
def follow(db: Session, follower: User, followed: User) -> FollowStatus:
    """
    Make follower follow followed. Following twice is a no-op.

    Raises:
        ValidationError: If a user tries to follow themselves
    """
    if follower.id == followed.id:
        raise ValidationError({"base": ["You cannot follow yourself"]})

    if _edge(db, follower, followed) is None:
        try:
            with transaction_context(db):
                db.add(Relationship(follower_id=follower.id, followed_id=followed.id))
                db.flush()
            logger.info(f"User {follower.id} followed user {followed.id}")
        except IntegrityError:
            # A concurrent request created the same edge
            logger.info(f"User {follower.id} already follows user {followed.id}")

    return _status(db, follower, followed)


# PUBLIC_INTERFACE
@with_transaction_retry
def unfollow(db: Session, follower: User, followed: User) -> FollowStatus:
    """Remove the follow edge if present. Unfollowing twice is a no-op."""
    edge = _edge(db, follower, followed)
    if edge is not None:
        with transaction_context(db):
            db.delete(edge)
        logger.info(f"User {follower.id} unfollowed user {followed.id}")
    return _status(db, follower, followed)


# PUBLIC_INTERFACE
def is_following(db: Session, follower: Optional[Union[User, int]], followed: Union[User, int]) -> bool:
    """Users may be given as User objects or ids."""
    if follower is None:
        return False
    return _edge(db, follower, followed) is not None


# PUBLIC_INTERFACE
def followed_users(db: Session, user: User) -> Iterator[User]:
    """
    Users that user follows, most recently followed first.

    The query runs when iteration starts, so each call sees current state.
    """
    yield from _followed_users_query(db, user)


# PUBLIC_INTERFACE
def followers(db: Session, user: User) -> Iterator[User]:
    """Users following user, most recent follower first."""
    yield from _followers_query(db, user)


# PUBLIC_INTERFACE
def following_count(db: Session, user: Union[User, int]) -> int:
    return db.query(func.count(Relationship.id)).filter(
        Relationship.follower_id == user_id_of(user)
    ).scalar()


# PUBLIC_INTERFACE
def followers_count(db: Session, user: Union[User, int]) -> int:
    return db.query(func.count(Relationship.id)).filter(
        Relationship.followed_id == user_id_of(user)
    ).scalar()


# PUBLIC_INTERFACE
def followed_users_page(db: Session, user: User, page: int = 1, per_page: Optional[int] = None) -> Page[User]:
    return paginate(_followed_users_query(db, user), page, per_page or settings.USERS_PER_PAGE)


# PUBLIC_INTERFACE
def followers_page(db: Session, user: User, page: int = 1, per_page: Optional[int] = None) -> Page[User]:
    return paginate(_followers_query(db, user), page, per_page or settings.USERS_PER_PAGE)
