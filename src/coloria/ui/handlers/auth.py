"""Account tab handlers: sign in, sign up, sign out."""

import logging

from coloria.core.errors import AuthenticationError, ColoriaError

from ..models import UIState
from ..state import initialize_ui_state
from ..validation import validate_credentials

logger = logging.getLogger(__name__)

SIGN_IN_FAILED = "Failed to sign in. Please check your credentials."


def account_summary(state: UIState) -> str:
    """Markdown describing who is signed in."""
    user = state.user
    if user is None:
        return "*Not signed in.*"
    name = user.full_name or user.email
    return f"Signed in as **{name}** ({user.email})"


def sign_in(email: str, password: str, state: UIState) -> tuple[str, str, UIState]:
    """Sign in with email and password.

    Args:
        email: Email address
        password: Password
        state: UI state

    Returns:
        Tuple of (status_markdown, account_markdown, updated_state)
    """
    state = initialize_ui_state(state)
    try:
        address = validate_credentials(email, password)
        state.session.sign_in(address, password)
    except AuthenticationError as e:
        logger.info(f"Sign-in failed: {e}")
        return f"**Error:** {SIGN_IN_FAILED}", account_summary(state), state
    except ColoriaError as e:
        return f"**Error:** {e}", account_summary(state), state

    # The library belongs to the previous user, if any.
    state.library.reset()
    return "*Welcome back!*", account_summary(state), state


def sign_up(
    full_name: str, email: str, password: str, confirm_password: str, state: UIState
) -> tuple[str, str, UIState]:
    """Create an account and sign in.

    Returns:
        Tuple of (status_markdown, account_markdown, updated_state)
    """
    state = initialize_ui_state(state)
    try:
        address = validate_credentials(email, password)
        state.session.sign_up(address, password, confirm_password or "", (full_name or "").strip())
    except ColoriaError as e:
        return f"**Error:** {e}", account_summary(state), state

    state.library.reset()
    return "*Account created.*", account_summary(state), state


def sign_out(state: UIState) -> tuple[str, str, UIState]:
    state = initialize_ui_state(state)
    state.session.sign_out()
    state.library.reset()
    state.generated_image_url = None
    state.generated_prompt = ""
    state.delete_pending = False
    return "*Signed out.*", account_summary(state), state
