"""Validation utilities for ColorIA UI inputs."""

import logging

from coloria.core.errors import ValidationError

logger = logging.getLogger(__name__)

__all__ = ["ValidationError", "validate_prompt", "validate_credentials", "parse_viewer_key"]

MAX_PROMPT_LENGTH = 2000


def validate_prompt(prompt: str | None) -> str:
    """Validate a generation prompt.

    Args:
        prompt: Raw prompt text

    Returns:
        The stripped prompt

    Raises:
        ValidationError: If the prompt is empty or too long
    """
    text = (prompt or "").strip()
    if not text:
        raise ValidationError("Prompt is required")
    if len(text) > MAX_PROMPT_LENGTH:
        raise ValidationError(
            f"Prompt is too long ({len(text)} characters, maximum {MAX_PROMPT_LENGTH})"
        )
    return text


def validate_credentials(email: str | None, password: str | None) -> str:
    """Check that an email and password were entered.

    Returns:
        Normalized email

    Raises:
        ValidationError: If either field is missing or the email is malformed
    """
    address = (email or "").strip().lower()
    if not address or not password:
        raise ValidationError("Email and password are required")
    local, _, domain = address.partition("@")
    if not local or "." not in domain:
        raise ValidationError("Please enter a valid email address")
    return address


def parse_viewer_key(event: str | None) -> str:
    """Extract the key name from a ``"<key>|<timestamp>"`` browser event.

    The timestamp only makes repeated presses of one key distinct.
    """
    return (event or "").split("|", 1)[0]
