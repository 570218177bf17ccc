"""Unit tests for account tab handler functions."""

import asyncio

import pytest

from coloria.ui.handlers.auth import SIGN_IN_FAILED, account_summary, sign_in, sign_out, sign_up
from coloria.ui.handlers.library import load_library
from coloria.ui.state import initialize_ui_state


@pytest.fixture
def state(services, ui_state):
    return initialize_ui_state(ui_state)


class TestSignUp:
    def test_creates_account_and_signs_in(self, state):
        status, account, state = sign_up("Ada Lovelace", "Ada@Example.com", "pw", "pw", state)

        assert status == "*Account created.*"
        assert account == "Signed in as **Ada Lovelace** (ada@example.com)"
        assert state.user.email == "ada@example.com"

    def test_password_mismatch(self, state):
        status, account, state = sign_up("", "ada@example.com", "pw", "other", state)

        assert status == "**Error:** Passwords do not match"
        assert account == "*Not signed in.*"
        assert state.user is None

    def test_duplicate_email(self, state):
        sign_up("", "ada@example.com", "pw", "pw", state)
        sign_out(state)

        status, _, state = sign_up("", "ada@example.com", "pw", "pw", state)

        assert status.startswith("**Error:** Failed to create an account")
        assert state.user is None


class TestSignIn:
    @pytest.fixture(autouse=True)
    def account(self, services):
        services.auth.sign_up("ada@example.com", "secret", "secret", "Ada")

    def test_success(self, state):
        status, account, state = sign_in("ada@example.com", "secret", state)

        assert status == "*Welcome back!*"
        assert account == "Signed in as **Ada** (ada@example.com)"

    def test_wrong_password(self, state):
        status, account, state = sign_in("ada@example.com", "nope", state)

        assert status == f"**Error:** {SIGN_IN_FAILED}"
        assert state.user is None

    def test_validation_message_shown(self, state):
        status, _, _ = sign_in("not-an-email", "secret", state)
        assert status == "**Error:** Please enter a valid email address"

    def test_resets_previous_users_library(self, services, state):
        other = services.auth.sign_up("bob@example.com", "pw", "pw")
        services.library_db.create_record(other.id, "http://testserver/assets/x.png", "bob's", "default")
        sign_in("bob@example.com", "pw", state)
        asyncio.run(load_library(state))
        assert len(state.library.records) == 1

        sign_in("ada@example.com", "secret", state)

        assert state.library.records == []
        assert not state.library.loaded


def test_sign_out_clears_session(state):
    sign_up("", "ada@example.com", "pw", "pw", state)
    state.generated_image_url = "https://fal.test/1.png"

    status, account, state = sign_out(state)

    assert status == "*Signed out.*"
    assert account == "*Not signed in.*"
    assert state.user is None
    assert state.generated_image_url is None


def test_account_summary_falls_back_to_email(state):
    sign_up("", "ada@example.com", "pw", "pw", state)
    assert account_summary(state) == "Signed in as **ada@example.com** (ada@example.com)"
