"""Error taxonomy shared by every ColorIA layer.

Every exception carries a message that can be shown to the user as-is.
The API layer turns these into ``{"error": message}`` responses and the
Gradio handlers render them in the status area.
"""


class ColoriaError(Exception):
    """Base class for all ColorIA errors.

    Subclasses define ``message`` as a class default; passing a message to
    the constructor overrides it.
    """

    message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(ColoriaError):
    """User input failed validation before any network or database call."""

    message = "Invalid input"


class TransportError(ColoriaError):
    """A backend, storage, or network call failed."""

    message = "The request could not be completed. Please try again."


class LoadError(TransportError):
    """The library snapshot could not be fetched."""

    message = "Failed to load images. Please try again later."


class GenerationError(TransportError):
    """The image generation service returned an error."""

    message = "Failed to generate image"

    def __init__(self, message: str | None = None, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class AssetConflictError(TransportError):
    """An asset with the same storage name already exists."""

    message = "The resource already exists"


class AuthenticationError(ColoriaError):
    """Sign-in failed, or an action needs a signed-in user."""

    message = "Please sign in to continue"
