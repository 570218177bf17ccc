"""Unit tests for UI state lifecycle."""

from coloria.library.controller import LibraryController
from coloria.ui.models import UIState
from coloria.ui.state import cleanup_ui_state, get_services, initialize_ui_state


class TestInitializeUIState:
    def test_creates_state_when_missing(self, services):
        state = initialize_ui_state(None)

        assert isinstance(state, UIState)
        assert state.is_initialized()

    def test_mounts_session_and_builds_controller(self, services, ui_state):
        state = initialize_ui_state(ui_state)

        assert not state.session.loading
        assert state.session.current_user is None
        assert isinstance(state.library, LibraryController)
        assert state.library.gateway is services.library_db
        assert state.library.search.delay == services.config.search_debounce_seconds

    def test_idempotent(self, services, ui_state):
        state = initialize_ui_state(ui_state)
        session, library = state.session, state.library

        state = initialize_ui_state(state)

        assert state.session is session
        assert state.library is library

    def test_explicit_services(self, test_config, ui_state):
        from coloria.core.services import build_services

        services = build_services(test_config)
        state = initialize_ui_state(ui_state, services)
        assert state.library.gateway is services.library_db

    def test_get_services_returns_installed(self, services):
        assert get_services() is services


class TestCleanupUIState:
    def test_unmounts_and_clears(self, services, ui_state):
        state = initialize_ui_state(ui_state)
        session = state.session
        state.generated_image_url = "https://fal.test/1.png"
        state.delete_pending = True

        cleanup_ui_state(state)

        assert session.loading
        assert state.session is None
        assert state.library is None
        assert state.generated_image_url is None
        assert not state.delete_pending

    def test_none_is_ignored(self):
        cleanup_ui_state(None)


def test_repr_without_session():
    assert repr(UIState()) == "UIState(initialized=False, user=None)"
