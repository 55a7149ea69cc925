"""
Micropost model definition.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from sample_app.models.base import BaseModel


class Micropost(BaseModel):
    """A short text post owned by one user."""

    __table_args__ = (
        Index("ix_micropost_user_id_created_at", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content = Column(String(140), nullable=False)
    user_id = Column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False
    )

    user = relationship("User", back_populates="microposts")
