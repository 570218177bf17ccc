"""State management utilities for the ColorIA UI.

This module handles the lifecycle of per-session UI state: the session
context is mounted when a browser session first touches the app and
unmounted when Gradio drops the session.
"""

import logging

from coloria.core.config import config
from coloria.core.services import AppServices, build_services
from coloria.core.session import SessionContext
from coloria.library.controller import LibraryController

from .models import UIState

logger = logging.getLogger(__name__)

_services: AppServices | None = None


def get_services() -> AppServices:
    """Return the shared services, building them from ``config`` on first use."""
    global _services
    if _services is None:
        _services = build_services(config)
    return _services


def set_services(services: AppServices | None) -> None:
    """Install the shared services (the API lifespan and tests use this)."""
    global _services
    _services = services


def initialize_ui_state(
    state: UIState | None = None, services: AppServices | None = None
) -> UIState:
    """Initialize or ensure UI state is ready.

    Creates and mounts the session context and creates the library
    controller the first time a session is seen.

    Args:
        state: Existing UIState or None
        services: Shared services (default: :func:`get_services`)

    Returns:
        Initialized UIState instance
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        return state

    services = services or get_services()

    if state.session is None:
        state.session = SessionContext(services.auth).mount()

    if state.library is None:
        state.library = LibraryController(
            gateway=services.library_db,
            session=state.session,
            client_factory=services.http_client,
            debounce_delay=services.config.search_debounce_seconds,
            search_mode=services.config.search_mode,
        )

    logger.info(f"UIState initialization complete: {state}")
    return state


def cleanup_ui_state(state: UIState) -> None:
    """Tear down a session's state when the browser session ends.

    Args:
        state: UI state to clean up
    """
    if state is None:
        return

    logger.info("Cleaning up UIState resources")

    if state.library is not None:
        state.library.reset()
    if state.session is not None:
        state.session.unmount()

    state.library = None
    state.session = None
    state.generated_image_url = None
    state.generated_prompt = ""
    state.delete_pending = False
