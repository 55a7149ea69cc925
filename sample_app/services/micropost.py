"""
Micropost service: posting, deleting, counting and paginated feeds.
"""

import logging
from typing import Optional, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from sample_app.core.config import settings
from sample_app.core.database import transaction_context, with_transaction_retry
from sample_app.core.exceptions import AuthorizationError, ErrorCollector, NotFoundError
from sample_app.core.pagination import Page, paginate
from sample_app.models.micropost import Micropost
from sample_app.models.relationship import Relationship
from sample_app.models.user import User, user_id_of
from sample_app.services import policy

logger = logging.getLogger(__name__)


def _newest_first(query):
    return query.options(joinedload(Micropost.user)).order_by(
        Micropost.created_at.desc(), Micropost.id.desc()
    )


# PUBLIC_INTERFACE
@with_transaction_retry
def create_micropost(db: Session, user: User, content: str) -> Micropost:
    """
    Publish a micropost as user.

    Raises:
        ValidationError: If content is blank or longer than MICROPOST_MAX_LENGTH
    """
    content = content or ""
    errors = ErrorCollector()
    if not content.strip():
        errors.add("content", "can't be blank")
    elif len(content) > settings.MICROPOST_MAX_LENGTH:
        errors.add("content", f"is too long (maximum is {settings.MICROPOST_MAX_LENGTH} characters)")
    errors.raise_if_any()

    with transaction_context(db):
        post = Micropost(user_id=user.id, content=content)
        db.add(post)
        db.flush()

    logger.info(f"User {user.id} posted micropost {post.id}")
    return post


# PUBLIC_INTERFACE
def get_micropost_or_404(db: Session, micropost_id: int) -> Micropost:
    post = db.get(Micropost, micropost_id)
    if post is None:
        raise NotFoundError("Micropost", micropost_id)
    return post


# PUBLIC_INTERFACE
@with_transaction_retry
def delete_micropost(db: Session, actor: Optional[User], post: Micropost) -> None:
    """
    Delete a micropost.

    Raises:
        AuthorizationError: Unless actor wrote the post
    """
    if not policy.can_delete_micropost(actor, post):
        logger.warning(f"Refused deletion of micropost {post.id}")
        raise AuthorizationError()

    post_id = post.id
    with transaction_context(db):
        db.delete(post)
    logger.info(f"User {actor.id} deleted micropost {post_id}")


# PUBLIC_INTERFACE
def count_microposts(db: Session, user: Union[User, int]) -> int:
    return db.query(func.count(Micropost.id)).filter(Micropost.user_id == user_id_of(user)).scalar()


# PUBLIC_INTERFACE
def user_microposts(db: Session, user: Union[User, int], page: int = 1, per_page: Optional[int] = None) -> Page[Micropost]:
    """One user's microposts, newest first, as shown on their profile."""
    query = _newest_first(db.query(Micropost).filter(Micropost.user_id == user_id_of(user)))
    return paginate(query, page, per_page or settings.MICROPOSTS_PER_PAGE)


# PUBLIC_INTERFACE
def feed(db: Session, user: User, page: int = 1, per_page: Optional[int] = None) -> Page[Micropost]:
    """
    Home feed: user's own microposts plus those of everyone they follow,
    newest first.
    """
    followed_ids = db.query(Relationship.followed_id).filter(
        Relationship.follower_id == user.id
    )
    query = _newest_first(
        db.query(Micropost).filter(
            or_(
                Micropost.user_id == user.id,
                Micropost.user_id.in_(followed_ids.scalar_subquery())
            )
        )
    )
    return paginate(query, page, per_page or settings.MICROPOSTS_PER_PAGE)
