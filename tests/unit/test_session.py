"""Unit tests for LocalAuthProvider and SessionContext."""

import pytest

from coloria.core.errors import AuthenticationError, ValidationError
from coloria.core.session import SessionContext


class TestLocalAuthProvider:
    def test_sign_up_then_sign_in(self, auth_provider):
        created = auth_provider.sign_up("Ada@Example.com", "s3cret!", "s3cret!", " Ada ")

        user = auth_provider.sign_in("ada@example.com", "s3cret!")

        assert user == created
        assert user.email == "ada@example.com"
        assert user.full_name == "Ada"

    def test_password_is_hashed(self, auth_provider):
        import sqlite3

        auth_provider.sign_up("ada@example.com", "s3cret!", "s3cret!")
        with sqlite3.connect(auth_provider.db_path) as conn:
            stored = conn.execute("SELECT password_hash FROM users").fetchone()[0]
        assert stored != "s3cret!"
        assert stored.startswith("$2")

    def test_password_mismatch(self, auth_provider):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            auth_provider.sign_up("ada@example.com", "one", "two")

    def test_missing_fields(self, auth_provider):
        with pytest.raises(ValidationError):
            auth_provider.sign_up("", "pw", "pw")

    def test_duplicate_email(self, auth_provider):
        auth_provider.sign_up("ada@example.com", "pw", "pw")
        with pytest.raises(AuthenticationError, match="Failed to create an account"):
            auth_provider.sign_up("ada@example.com", "pw", "pw")

    def test_wrong_password(self, auth_provider):
        auth_provider.sign_up("ada@example.com", "pw", "pw")
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            auth_provider.sign_in("ada@example.com", "nope")

    def test_unknown_email(self, auth_provider):
        with pytest.raises(AuthenticationError):
            auth_provider.sign_in("nobody@example.com", "pw")


class TestSessionContext:
    def test_lifecycle(self, auth_provider):
        session = SessionContext(auth_provider)
        assert session.loading

        assert session.mount() is session
        assert not session.loading
        assert session.current_user is None
        assert session.owner_id is None

        session.unmount()
        assert session.loading

    def test_require_user(self, auth_provider):
        session = SessionContext(auth_provider).mount()
        with pytest.raises(AuthenticationError, match="Please sign in"):
            session.require_user()

    def test_sign_up_signs_in(self, auth_provider):
        session = SessionContext(auth_provider).mount()

        user = session.sign_up("ada@example.com", "pw", "pw", "Ada")

        assert session.current_user == user
        assert session.owner_id == user.id

    def test_sign_in_and_out(self, auth_provider):
        auth_provider.sign_up("ada@example.com", "pw", "pw")
        session = SessionContext(auth_provider).mount()

        session.sign_in("ada@example.com", "pw")
        assert session.require_user().email == "ada@example.com"

        session.sign_out()
        assert session.current_user is None

    def test_failed_sign_in_keeps_previous_user(self, auth_provider):
        auth_provider.sign_up("ada@example.com", "pw", "pw")
        session = SessionContext(auth_provider).mount()
        session.sign_in("ada@example.com", "pw")

        with pytest.raises(AuthenticationError):
            session.sign_in("ada@example.com", "wrong")
        assert session.current_user.email == "ada@example.com"
