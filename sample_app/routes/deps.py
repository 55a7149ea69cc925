"""
Shared route dependencies: the signed-in actor and error translation.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from sample_app.core.database import get_db
from sample_app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from sample_app.core.security import decode_access_token
from sample_app.models.user import User
from sample_app.services import user as user_service

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """The signed-in user, or None for anonymous requests."""
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None
    return user_service.get_user(db, user_id)


def require_user(current_user: Optional[User] = Depends(get_current_user)) -> User:
    """Like get_current_user, but rejects anonymous requests."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


def http_error(error: Exception) -> HTTPException:
    """Map a service error onto the HTTP response the client sees."""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=422,
            detail={"errors": error.errors, "messages": error.full_messages},
        )
    if isinstance(error, AuthorizationError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    raise error
