"""
Session endpoints: sign in, current user, sign out.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from sample_app.core.database import get_db
from sample_app.core.security import create_access_token
from sample_app.models.user import User
from sample_app.routes.deps import require_user
from sample_app.schemas.base import MessageResponse
from sample_app.schemas.user import AuthResponse, SignIn, UserResponse
from sample_app.services import user as user_service


router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=AuthResponse)
def sign_in(
    credentials: SignIn,
    db: Session = Depends(get_db)
) -> AuthResponse:
    """Exchange email and password for a session token."""
    user = user_service.authenticate(db, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email/password combination",
        )
    return AuthResponse(
        access_token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(require_user)) -> UserResponse:
    """The signed-in user."""
    return current_user


@router.delete("", response_model=MessageResponse)
def sign_out(current_user: User = Depends(require_user)) -> MessageResponse:
    """Tokens are stateless; the client discards it."""
    return MessageResponse(flash="Signed out")
