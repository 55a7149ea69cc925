"""
User service: signup, authentication, profile edits, admin deletion and listing.

Only the public profile record is cached in Redis; it is invalidated whenever
the user is updated or deleted.
"""

import logging
from typing import Any, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from redis import RedisError

from sample_app.core.cache import (
    USER_PROFILE_KEY, USER_PROFILE_CACHE_EXPIRE,
    cache_get, cache_set, cache_delete
)
from sample_app.core.config import settings
from sample_app.core.database import transaction_context, with_transaction_retry
from sample_app.core.exceptions import (
    AuthorizationError, ErrorCollector, NotFoundError, ValidationError
)
from sample_app.core.pagination import Page, paginate
from sample_app.core.security import get_password_hash, verify_password
from sample_app.models.user import User

logger = logging.getLogger(__name__)

# Attributes a user may change through update_user. Anything else is dropped.
PERMITTED_ATTRIBUTES = ("name", "email", "password", "password_confirmation")

PROFILE_CACHE_VERSION = "1"


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _validate_name(errors: ErrorCollector, name: Optional[str]) -> None:
    if not name or not name.strip():
        errors.add("name", "can't be blank")
    elif len(name.strip()) > settings.NAME_MAX_LENGTH:
        errors.add("name", f"is too long (maximum is {settings.NAME_MAX_LENGTH} characters)")


def _validate_email(
    db: Session,
    errors: ErrorCollector,
    email: str,
    exclude_id: Optional[int] = None
) -> None:
    if not email:
        errors.add("email", "can't be blank")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        logger.debug(f"Rejected email {email!r}: {e}")
        errors.add("email", "is invalid")
        return
    query = db.query(User.id).filter(func.lower(User.email) == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first() is not None:
        errors.add("email", "has already been taken")


def _validate_password(
    errors: ErrorCollector,
    password: Optional[str],
    confirmation: Optional[str]
) -> None:
    password = password or ""
    if not password.strip():
        errors.add("password", "can't be blank")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        errors.add("password", f"is too short (minimum is {settings.PASSWORD_MIN_LENGTH} characters)")
    if confirmation is not None and confirmation != password:
        errors.add("password_confirmation", "doesn't match Password")


def _profile_to_dict(user: User) -> Dict[str, Any]:
    """Public profile payload stored in the cache."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "admin": bool(user.admin),
        "created_at": user.created_at.isoformat(),
        "_cache_version": PROFILE_CACHE_VERSION,
    }


def _invalidate_profile(user_id: int) -> None:
    if not cache_delete(USER_PROFILE_KEY.format(user_id)):
        logger.debug(f"No cached profile to invalidate for user {user_id}")


# PUBLIC_INTERFACE
@with_transaction_retry
def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    password_confirmation: Optional[str] = None,
    admin: bool = False
) -> User:
    """
    Sign up a new user.

    Args:
        db: Database session
        name: Display name
        email: Email address, unique regardless of case
        password: Plaintext password, hashed before storage
        password_confirmation: Must equal password when given
        admin: Admin flag; only provisioning code passes True

    Returns:
        User: Created user

    Raises:
        ValidationError: With one entry per invalid field; nothing is written
    """
    email = _normalize_email(email)
    errors = ErrorCollector()
    _validate_name(errors, name)
    _validate_email(db, errors, email)
    _validate_password(errors, password, password_confirmation)
    if errors:
        logger.info(f"Signup rejected: {sorted(errors.errors)}")
        errors.raise_if_any()

    try:
        with transaction_context(db):
            user = User(
                name=name.strip(),
                email=email,
                hashed_password=get_password_hash(password),
                admin=admin,
            )
            db.add(user)
            db.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same address
        raise ValidationError({"email": ["has already been taken"]})

    logger.info(f"Created user {user.id} ({user.email}){' as admin' if admin else ''}")
    return user


# PUBLIC_INTERFACE
def create_admin(db: Session, name: str, email: str, password: str) -> User:
    """Provision an admin account. The admin flag cannot be set any other way."""
    return create_user(db, name, email, password, password, admin=True)


# PUBLIC_INTERFACE
def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """
    Check a sign-in attempt.

    Returns:
        Optional[User]: The user if email and password match, None otherwise
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Failed sign-in attempt")
        return None
    return user


# PUBLIC_INTERFACE
def get_user(db: Session, user_id: int) -> Optional[User]:
    """Get user by ID."""
    return db.get(User, user_id)


# PUBLIC_INTERFACE
def get_user_or_404(db: Session, user_id: int) -> User:
    """
    Get user by ID.

    Raises:
        NotFoundError: If no such user exists
    """
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


# PUBLIC_INTERFACE
def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email, ignoring case."""
    email = _normalize_email(email)
    if not email:
        return None
    return db.query(User).filter(func.lower(User.email) == email).first()


# PUBLIC_INTERFACE
def get_user_profile(db: Session, user_id: int) -> Dict[str, Any]:
    """
    Public profile record, served from the cache when possible.

    Raises:
        NotFoundError: If no such user exists
    """
    cache_key = USER_PROFILE_KEY.format(user_id)
    try:
        cached = cache_get(cache_key)
    except (RedisError, ValueError) as e:
        logger.error(f"Cache read failed for user {user_id}: {e}")
        cached = None

    if cached and cached.get("_cache_version") == PROFILE_CACHE_VERSION:
        return {k: v for k, v in cached.items() if k != "_cache_version"}

    user = get_user_or_404(db, user_id)
    profile = _profile_to_dict(user)
    cache_set(cache_key, profile, USER_PROFILE_CACHE_EXPIRE)
    return {k: v for k, v in profile.items() if k != "_cache_version"}


# PUBLIC_INTERFACE
def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar()


# PUBLIC_INTERFACE
def list_users(db: Session, page: int = 1, per_page: Optional[int] = None) -> Page[User]:
    """All users ordered by name, one page at a time."""
    query = db.query(User).order_by(User.name, User.id)
    return paginate(query, page, per_page or settings.USERS_PER_PAGE)


# PUBLIC_INTERFACE
@with_transaction_retry
def update_user(db: Session, user: User, attributes: Dict[str, Any]) -> User:
    """
    Apply a profile edit.

    Only PERMITTED_ATTRIBUTES are considered; other keys such as "admin" are
    ignored whatever their value. Keys that are absent or None are left alone.

    Raises:
        ValidationError: If a supplied attribute is invalid; nothing is written
    """
    forbidden = sorted(set(attributes) - set(PERMITTED_ATTRIBUTES))
    if forbidden:
        logger.warning(f"Ignoring unpermitted attributes for user {user.id}: {forbidden}")
    changes = {
        key: attributes[key]
        for key in PERMITTED_ATTRIBUTES
        if attributes.get(key) is not None
    }

    errors = ErrorCollector()
    if "name" in changes:
        _validate_name(errors, changes["name"])
    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"])
        _validate_email(db, errors, changes["email"], exclude_id=user.id)
    if "password" in changes or "password_confirmation" in changes:
        _validate_password(errors, changes.get("password"), changes.get("password_confirmation"))
    errors.raise_if_any()

    with transaction_context(db):
        if "name" in changes:
            user.name = changes["name"].strip()
        if "email" in changes:
            user.email = changes["email"]
        if "password" in changes:
            user.hashed_password = get_password_hash(changes["password"])
        db.flush()

    _invalidate_profile(user.id)
    logger.info(f"Updated user {user.id}: {sorted(k for k in changes if k != 'password_confirmation')}")
    return user


# PUBLIC_INTERFACE
@with_transaction_retry
def delete_user(db: Session, actor: Optional[User], target: User) -> None:
    """
    Delete a user together with their microposts and follow edges.

    Raises:
        AuthorizationError: Unless actor is an admin
        ValidationError: If an admin tries to delete themselves
    """
    if actor is None or not actor.admin:
        logger.warning(f"Refused deletion of user {target.id} by non-admin")
        raise AuthorizationError()
    if actor.id == target.id:
        raise ValidationError({"base": ["Admins cannot delete themselves"]})
    user_id = target.id
    with transaction_context(db):
        db.delete(target)

    _invalidate_profile(user_id)
    logger.info(f"User {user_id} deleted by admin {actor.id}")
