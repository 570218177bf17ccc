"""Data models for ColorIA UI state."""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Every browser session gets its own UIState. Shared services (database,
    asset store, generation client) are not stored here; only the objects
    that belong to one user session are.

    Attributes
    ----------
    session : Any | None
        SessionContext holding the signed-in user
    library : Any | None
        LibraryController for the library tab
    generated_image_url : str | None
        URL of the last generated image, not yet saved
    generated_prompt : str
        Prompt that produced ``generated_image_url``
    delete_pending : bool
        True while the delete confirmation is showing
    """

    session: Any | None = None  # SessionContext instance
    library: Any | None = None  # LibraryController instance

    # Generate tab
    generated_image_url: str | None = None
    generated_prompt: str = ""

    # Library tab
    delete_pending: bool = False

    def is_initialized(self) -> bool:
        """Check if the session context and library controller exist."""
        return self.session is not None and self.library is not None

    @property
    def user(self):
        return self.session.current_user if self.session is not None else None

    def __repr__(self) -> str:
        """String representation for debugging."""
        user_id = self.user.id if self.user else None
        return f"UIState(initialized={self.is_initialized()}, user={user_id})"


# Constants for UI
SEARCH_PLACEHOLDER = "Search images..."
DELETE_CONFIRMATION = (
    "Are you sure you want to delete the selected images? "
    "They will be permanently deleted after 30 days."
)
