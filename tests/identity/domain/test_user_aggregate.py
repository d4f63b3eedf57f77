"""Tests for the User aggregate."""

import pytest
from bookshop.errors import InvalidPassword, PasswordMismatch
from bookshop.identity.events import (
    EmailChanged,
    PasswordChanged,
    RolesUpdated,
    UserDeactivated,
    UserReactivated,
    UserRegistered,
)
from bookshop.identity.user import User


def _make_user(**overrides):
    params = {
        "email": "reader@example.com",
        "password": "secret-pw",
        "name": "Ada",
        "surname": "Reader",
        "role_codes": ["USER"],
    }
    params.update(overrides)
    return User.register(**params)


class TestRegistration:
    def test_password_is_hashed(self):
        user = _make_user()
        assert user.password_hash != "secret-pw"
        assert user.check_password("secret-pw")

    def test_defaults(self):
        user = _make_user()
        assert user.active is True
        assert user.role_codes == ["USER"]
        assert user.registered_at is not None

    def test_roles_are_deduplicated(self):
        user = _make_user(role_codes=["USER", "ADMIN", "USER"])
        assert user.role_codes == ["ADMIN", "USER"]

    def test_registration_raises_event(self):
        user = _make_user()
        events = [e for e in user._events if isinstance(e, UserRegistered)]
        assert len(events) == 1
        assert events[0].email == "reader@example.com"


class TestCredentials:
    def test_wrong_password(self):
        user = _make_user()
        assert user.check_password("wrong") is False
        with pytest.raises(InvalidPassword):
            user.authenticate("wrong")

    def test_change_email(self):
        user = _make_user()
        user.change_email("secret-pw", "new@example.com")

        assert user.email == "new@example.com"
        event = next(e for e in user._events if isinstance(e, EmailChanged))
        assert event.previous_email == "reader@example.com"

    def test_change_email_needs_password(self):
        user = _make_user()
        with pytest.raises(InvalidPassword):
            user.change_email("wrong", "new@example.com")
        assert user.email == "reader@example.com"

    def test_change_password(self):
        user = _make_user()
        user.change_password("secret-pw", "better-pw", "better-pw")

        assert user.check_password("better-pw")
        assert not user.check_password("secret-pw")
        assert any(isinstance(e, PasswordChanged) for e in user._events)

    def test_change_password_with_wrong_old_password(self):
        user = _make_user()
        with pytest.raises(InvalidPassword):
            user.change_password("wrong", "better-pw", "better-pw")

    def test_change_password_confirmation_mismatch(self):
        user = _make_user()
        with pytest.raises(PasswordMismatch):
            user.change_password("secret-pw", "better-pw", "other-pw")
        assert user.check_password("secret-pw")

    def test_reset_password(self):
        user = _make_user()
        user.reset_password("generated-1")
        assert user.check_password("generated-1")


class TestProfileAndActivation:
    def test_update_profile(self):
        user = _make_user()
        user.update_profile("Grace", "Hopper")
        assert (user.name, user.surname) == ("Grace", "Hopper")

    def test_replace_roles(self):
        user = _make_user()
        user.replace_roles(["ADMIN"])

        assert user.role_codes == ["ADMIN"]
        assert any(isinstance(e, RolesUpdated) for e in user._events)

    def test_deactivate_and_reactivate(self):
        user = _make_user()
        user.deactivate()
        assert user.active is False
        user.reactivate()
        assert user.active is True

        kinds = {type(e) for e in user._events}
        assert {UserDeactivated, UserReactivated} <= kinds
