"""
Follow relationship model definition.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from sample_app.models.base import BaseModel


class Relationship(BaseModel):
    """Directed follow edge: follower follows followed."""

    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_relationship_pair"),
        CheckConstraint("follower_id != followed_id", name="ck_relationship_no_self_follow"),
    )

    id = Column(Integer, primary_key=True)
    follower_id = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    followed_id = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    follower = relationship("User", foreign_keys=[follower_id], back_populates="active_relationships")
    followed = relationship("User", foreign_keys=[followed_id], back_populates="passive_relationships")
