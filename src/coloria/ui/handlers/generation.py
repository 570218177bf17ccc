"""Generate tab handlers: generate, save to library, download."""

import logging
import time

import gradio as gr

from coloria.core.asset_store import fetch_image_bytes, save_generated_image
from coloria.core.errors import AuthenticationError, ColoriaError, TransportError, ValidationError

from ..models import UIState
from ..state import get_services, initialize_ui_state
from ..validation import validate_prompt
from .library import write_download

logger = logging.getLogger(__name__)

GENERATE_FAILED = "Failed to generate image. Please try again."
SAVE_FAILED = "Failed to save image. Please try again."


async def generate_image(prompt: str, state: UIState) -> tuple[str | None, str, dict, UIState]:
    """Generate one image from the prompt.

    Args:
        prompt: Prompt text from the textbox
        state: UI state

    Returns:
        Tuple of (image_url, status_markdown, save_button_update, updated_state)
    """
    state = initialize_ui_state(state)

    try:
        text = validate_prompt(prompt)
    except ValidationError as e:
        return (
            state.generated_image_url,
            f"**Error:** {e}",
            gr.update(interactive=state.generated_image_url is not None),
            state,
        )

    services = get_services()
    try:
        async with services.http_client() as client:
            image_url = await services.generation.generate(text, client=client)
    except ColoriaError as e:
        logger.error(f"Error generating image: {e}")
        return (
            state.generated_image_url,
            f"**Error:** {GENERATE_FAILED}",
            gr.update(interactive=state.generated_image_url is not None),
            state,
        )

    state.generated_image_url = image_url
    state.generated_prompt = text
    return image_url, "*Image generated. Save it to add it to your library.*", gr.update(interactive=True), state


async def save_to_library(state: UIState) -> tuple[str, dict, UIState]:
    """Store the last generated image and add it to the user's library.

    Returns:
        Tuple of (status_markdown, save_button_update, updated_state)
    """
    state = initialize_ui_state(state)

    if not state.generated_image_url:
        return "*Generate an image first.*", gr.update(interactive=False), state

    try:
        owner = state.session.require_user()
    except AuthenticationError as e:
        return f"**Error:** {e}", gr.update(), state

    services = get_services()
    try:
        async with services.http_client() as client:
            record = await save_generated_image(
                client,
                services.asset_store,
                services.library_db,
                owner.id,
                state.generated_image_url,
                state.generated_prompt,
                services.config.default_style,
            )
    except TransportError as e:
        logger.error(f"Error saving image: {e}")
        return f"**Error:** {SAVE_FAILED}", gr.update(), state

    logger.info(f"Saved image {record.id} for {owner.id}")
    # Saved once; a second save would duplicate the record.
    return "*Image saved to your library.*", gr.update(interactive=False), state


async def download_generated(state: UIState) -> tuple[dict, str, UIState]:
    """Fetch the last generated image for local save.

    Returns:
        Tuple of (file_update, status_markdown, updated_state)
    """
    state = initialize_ui_state(state)

    if not state.generated_image_url:
        return gr.update(visible=False), "*Generate an image first.*", state

    services = get_services()
    try:
        async with services.http_client() as client:
            data = await fetch_image_bytes(client, state.generated_image_url)
    except TransportError as e:
        logger.error(f"Error downloading image: {e}")
        return gr.update(visible=False), "**Error:** Failed to download image", state

    filename = f"generated-image-{int(time.time() * 1000)}.png"
    return gr.update(value=write_download(filename, data), visible=True), "", state
