"""
User model definition.
"""

from typing import Union

from sqlalchemy import Column, String, Boolean, Integer
from sqlalchemy.orm import relationship

from sample_app.models.base import BaseModel


class User(BaseModel):
    """User model for storing account information."""

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    admin = Column(Boolean, default=False, nullable=False)

    microposts = relationship(
        "Micropost",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # Edges where this user is the follower / the one being followed
    active_relationships = relationship(
        "Relationship",
        foreign_keys="Relationship.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    passive_relationships = relationship(
        "Relationship",
        foreign_keys="Relationship.followed_id",
        back_populates="followed",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


def user_id_of(user: Union[User, int]) -> int:
    """Accept either a User or a bare user id."""
    return user.id if isinstance(user, User) else user
