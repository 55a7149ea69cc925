"""
Tests for the user service: signup validation, authentication, profile
edits, admin deletion and listing.
"""

import pytest
from sqlalchemy.orm import Session

from sample_app.core.cache import USER_PROFILE_KEY
from sample_app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from sample_app.models.micropost import Micropost
from sample_app.models.relationship import Relationship
from sample_app.models.user import User
from sample_app.services import micropost as micropost_service
from sample_app.services import relationship as relationship_service
from sample_app.services.user import (
    PERMITTED_ATTRIBUTES, authenticate, count_users, create_admin, create_user,
    delete_user, get_user, get_user_by_email, get_user_or_404, get_user_profile,
    list_users, update_user
)


class TestCreateUser:
    """Signup."""

    def test_valid_signup_adds_one_user(self, db_session: Session):
        before = count_users(db_session)
        user = create_user(db_session, "Example User", "user@example.com", "foobar", "foobar")
        assert count_users(db_session) == before + 1
        assert user.id is not None
        assert user.name == "Example User"
        assert user.admin is False
        assert user.hashed_password != "foobar"

    def test_blank_signup_reports_every_field(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "", "", "", "")

        messages = exc_info.value.full_messages
        assert "Name can't be blank" in messages
        assert "Email can't be blank" in messages
        assert "Email is invalid" in messages
        assert "Password can't be blank" in messages
        assert any(m.startswith("Password is too short") for m in messages)
        assert count_users(db_session) == 0

    def test_errors_are_grouped_by_field(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "", "user@example.com", "foobar", "foobar")
        assert exc_info.value.errors == {"name": ["can't be blank"]}

    @pytest.mark.parametrize("email", [
        "user@foo,com", "user_at_foo.org", "example.user@foo.",
        "foo@bar_baz.com", "foo@bar+baz.com", "a..b@example.com",
        ".user@example.com", "user.@example.com", "user@-bad-.com",
    ])
    def test_invalid_email_formats(self, db_session: Session, email):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "Example User", email, "foobar", "foobar")
        assert exc_info.value.errors["email"] == ["is invalid"]

    @pytest.mark.parametrize("email", [
        "user@foo.COM", "A_US-ER@f.b.org", "frst.lst@foo.jp", "a+b@baz.cn",
    ])
    def test_valid_email_formats(self, db_session: Session, email):
        assert create_user(db_session, "Example User", email, "foobar", "foobar").id is not None

    def test_email_stored_lowercase(self, db_session: Session):
        user = create_user(db_session, "Example User", "Foo@ExAMPle.CoM", "foobar", "foobar")
        assert user.email == "foo@example.com"

    def test_duplicate_email_is_case_insensitive(self, db_session: Session):
        create_user(db_session, "Example User", "user@example.com", "foobar", "foobar")
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "Other User", "USER@EXAMPLE.COM", "foobar", "foobar")
        assert "Email has already been taken" in exc_info.value.full_messages
        assert count_users(db_session) == 1

    def test_short_password(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "Example User", "user@example.com", "a" * 5, "a" * 5)
        assert exc_info.value.errors["password"] == ["is too short (minimum is 6 characters)"]

    def test_mismatched_confirmation(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "Example User", "user@example.com", "foobar", "mismatch")
        assert "Password confirmation doesn't match Password" in exc_info.value.full_messages

    def test_name_too_long(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            create_user(db_session, "a" * 51, "user@example.com", "foobar", "foobar")
        assert "name" in exc_info.value.errors

    def test_surrounding_whitespace_does_not_count_toward_name_length(self, db_session: Session):
        user = create_user(db_session, "  " + "a" * 50 + "  ", "user@example.com", "foobar", "foobar")
        assert user.name == "a" * 50

    def test_create_admin(self, db_session: Session):
        admin = create_admin(db_session, "Admin", "admin@example.com", "foobar")
        assert admin.admin is True


class TestAuthenticate:

    def test_correct_credentials(self, db_session: Session, user: User):
        assert authenticate(db_session, user.email, "foobar") == user

    def test_email_is_case_insensitive(self, db_session: Session, user: User):
        assert authenticate(db_session, user.email.upper(), "foobar") == user

    def test_wrong_password(self, db_session: Session, user: User):
        assert authenticate(db_session, user.email, "invalid") is None

    def test_unknown_email(self, db_session: Session):
        assert authenticate(db_session, "nobody@example.com", "foobar") is None


class TestLookups:

    def test_get_user(self, db_session: Session, user: User):
        assert get_user(db_session, user.id) == user
        assert get_user(db_session, 99999) is None

    def test_get_user_or_404(self, db_session: Session):
        with pytest.raises(NotFoundError):
            get_user_or_404(db_session, 99999)

    def test_get_user_by_email(self, db_session: Session, user: User):
        assert get_user_by_email(db_session, f"  {user.email.upper()} ") == user
        assert get_user_by_email(db_session, "") is None


class TestUpdateUser:

    def test_updates_name_and_email(self, db_session: Session, user: User):
        update_user(db_session, user, {"name": "New Name", "email": "new@example.com"})
        db_session.expire_all()
        reloaded = get_user(db_session, user.id)
        assert reloaded.name == "New Name"
        assert reloaded.email == "new@example.com"

    def test_admin_flag_is_never_mass_assigned(self, db_session: Session, user: User):
        update_user(db_session, user, {
            "admin": True, "password": "foobar", "password_confirmation": "foobar"
        })
        db_session.expire_all()
        assert get_user(db_session, user.id).admin is False

    def test_admin_flag_cannot_be_revoked_either(self, db_session: Session, admin: User):
        update_user(db_session, admin, {"admin": False, "name": "Still Admin"})
        db_session.expire_all()
        assert get_user(db_session, admin.id).admin is True

    def test_allow_list(self):
        assert "admin" not in PERMITTED_ATTRIBUTES
        assert set(PERMITTED_ATTRIBUTES) == {"name", "email", "password", "password_confirmation"}

    def test_password_change(self, db_session: Session, user: User):
        update_user(db_session, user, {"password": "newsecret", "password_confirmation": "newsecret"})
        assert authenticate(db_session, user.email, "newsecret") == user
        assert authenticate(db_session, user.email, "foobar") is None

    def test_blank_password_is_rejected(self, db_session: Session, user: User):
        with pytest.raises(ValidationError) as exc_info:
            update_user(db_session, user, {"password": "", "password_confirmation": ""})
        assert "Password can't be blank" in exc_info.value.full_messages

    def test_invalid_update_writes_nothing(self, db_session: Session, user: User):
        with pytest.raises(ValidationError):
            update_user(db_session, user, {"name": "Changed", "email": "not-an-email"})
        db_session.expire_all()
        assert get_user(db_session, user.id).name != "Changed"

    def test_email_taken_by_someone_else(self, db_session: Session, user: User, other_user: User):
        with pytest.raises(ValidationError) as exc_info:
            update_user(db_session, user, {"email": other_user.email})
        assert exc_info.value.errors["email"] == ["has already been taken"]

    def test_keeping_own_email_is_fine(self, db_session: Session, user: User):
        update_user(db_session, user, {"email": user.email, "name": "Renamed"})
        assert user.name == "Renamed"

    def test_update_invalidates_cached_profile(self, db_session: Session, user: User, redis_client):
        update_user(db_session, user, {"name": "Renamed"})
        redis_client.delete.assert_any_call(USER_PROFILE_KEY.format(user.id))


class TestDeleteUser:

    def test_admin_deletes_other_user(self, db_session: Session, admin: User, user: User):
        before = count_users(db_session)
        delete_user(db_session, admin, user)
        assert count_users(db_session) == before - 1

    def test_non_admin_is_refused(self, db_session: Session, user: User, other_user: User):
        with pytest.raises(AuthorizationError):
            delete_user(db_session, user, other_user)
        assert get_user(db_session, other_user.id) is not None

    def test_anonymous_is_refused(self, db_session: Session, user: User):
        with pytest.raises(AuthorizationError):
            delete_user(db_session, None, user)

    def test_admin_cannot_delete_self(self, db_session: Session, admin: User):
        with pytest.raises(ValidationError):
            delete_user(db_session, admin, admin)
        assert get_user(db_session, admin.id) is not None

    def test_delete_cascades_to_posts_and_follows(
        self, db_session: Session, admin: User, user: User, other_user: User
    ):
        micropost_service.create_micropost(db_session, user, "Foo")
        relationship_service.follow(db_session, user, other_user)
        relationship_service.follow(db_session, other_user, user)

        delete_user(db_session, admin, user)
        db_session.expire_all()

        assert db_session.query(Micropost).filter(Micropost.user_id == user.id).count() == 0
        assert db_session.query(Relationship).count() == 0
        assert relationship_service.followers_count(db_session, other_user) == 0


class TestListUsers:

    def test_ordered_by_name_and_paginated(self, db_session: Session, make_user):
        for name in ["Charlie", "alice", "Bob"] + [f"Zed {i:02d}" for i in range(30)]:
            make_user(name=name)

        first = list_users(db_session, page=1)
        assert len(first.items) == 30
        assert first.total_entries == 33
        assert first.has_next
        second = list_users(db_session, page=2)
        assert len(second.items) == 3
        assert not second.has_next

        names = [u.name for u in first.items + second.items]
        assert names == sorted(names)


class TestProfileCache:

    def test_cache_miss_reads_database_and_fills_cache(self, db_session: Session, user: User, redis_client):
        profile = get_user_profile(db_session, user.id)
        assert profile["name"] == user.name
        assert "_cache_version" not in profile
        redis_client.setex.assert_called_once()
        assert redis_client.setex.call_args[0][0] == USER_PROFILE_KEY.format(user.id)

    def test_cache_hit_skips_database(self, db_session: Session, redis_client):
        redis_client.get.return_value = (
            '{"id": 7, "name": "Cached", "email": "c@example.com", "admin": false, '
            '"created_at": "2024-01-01T00:00:00+00:00", "_cache_version": "1"}'
        )
        profile = get_user_profile(db_session, 7)
        assert profile["name"] == "Cached"

    def test_cache_outage_falls_back_to_database(self, db_session: Session, user: User, redis_client):
        from redis import ConnectionError
        redis_client.get.side_effect = ConnectionError("down")
        assert get_user_profile(db_session, user.id)["id"] == user.id

    def test_missing_user(self, db_session: Session):
        with pytest.raises(NotFoundError):
            get_user_profile(db_session, 99999)
