"""
Authorization rules.

Pure functions of the acting user (None when signed out) and the target.
Routes use them to decide which delete links to show; services enforce them.
"""

from typing import Optional

from sample_app.models.micropost import Micropost
from sample_app.models.user import User


# PUBLIC_INTERFACE
def can_delete_user(actor: Optional[User], target: User) -> bool:
    """Admins may delete any user except themselves."""
    return actor is not None and bool(actor.admin) and actor.id != target.id


# PUBLIC_INTERFACE
def can_delete_micropost(actor: Optional[User], post: Micropost) -> bool:
    """Only the author may delete a micropost."""
    return actor is not None and actor.id == post.user_id


# PUBLIC_INTERFACE
def can_edit_user(actor: Optional[User], target: User) -> bool:
    """Users may only edit their own profile."""
    return actor is not None and actor.id == target.id
