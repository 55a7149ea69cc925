"""
Database models. Importing this package registers every table on Base.metadata.
"""

from sample_app.models.user import User
from sample_app.models.micropost import Micropost
from sample_app.models.relationship import Relationship

__all__ = ["User", "Micropost", "Relationship"]
