"""Library tab handlers: search, sort, pages, selection, bulk actions, viewer.

Every handler that changes what the library shows returns the tuple built
by :func:`render_library`, in the order of :data:`LIBRARY_OUTPUTS`, so the
Blocks layout can wire them all to one list of components.
"""

import logging
import shutil
import tempfile
import time
from pathlib import Path

import gradio as gr

from coloria.core.errors import ColoriaError, TransportError
from coloria.core.records import SORT_LABELS, SortOption

from ..models import UIState
from ..state import get_services, initialize_ui_state
from ..validation import parse_viewer_key

logger = logging.getLogger(__name__)

# Component order expected by every handler that returns render_library(...)
LIBRARY_OUTPUTS = (
    "gallery",
    "selection",
    "page_label",
    "prev_page_btn",
    "next_page_btn",
    "selection_info",
    "bulk_actions",
    "viewer",
    "viewer_image",
    "viewer_details",
    "viewer_prev_btn",
    "viewer_next_btn",
    "status",
)

SORT_CHOICES = list(SORT_LABELS.values())
SIGNED_OUT_MESSAGE = "*Sign in on the Account tab to see your library.*"
DOWNLOAD_FAILED = "Failed to download images. Please try again."


def _error(message: str) -> str:
    return f"**Error:** {message}"


def _viewer_details(state: UIState) -> str:
    record = state.library.current_record
    if record is None:
        return ""
    created = record.created_at.strftime("%B %d, %Y")
    prompt = record.prompt or "*No prompt*"
    return f"### Image Details\n\nCreated on {created}\n\n**Prompt**\n\n{prompt}"


def render_library(state: UIState, status: str = "") -> tuple:
    """Build the update for every library component from controller state.

    Args:
        state: Initialized UI state
        status: Markdown shown in the status area

    Returns:
        One value per entry of :data:`LIBRARY_OUTPUTS`, followed by ``state``
    """
    library = state.library
    items = library.page_items
    count = len(library.filtered)

    if not status and state.user is None:
        status = SIGNED_OUT_MESSAGE
    elif not status and library.loaded and count == 0:
        status = "*No images found.*" if library.query else "*Your library is empty.*"

    gallery = [(record.image_url, record.display_name) for record in items]
    selection = gr.update(
        choices=[(record.display_name, record.id) for record in items],
        value=[record.id for record in items if record.id in library.selected],
    )

    total = library.total_pages
    page_label = f"Page {library.page} of {total}" if total else ""

    selected = len(library.selected)
    selection_info = f"**{selected} selected**" if selected else ""

    record = library.current_record
    viewer = library.viewer

    return (
        gallery,
        selection,
        page_label,
        gr.update(interactive=library.has_prev_page),
        gr.update(interactive=library.has_next_page),
        selection_info,
        gr.update(visible=bool(selected)),
        gr.update(visible=record is not None),
        record.image_url if record else None,
        _viewer_details(state),
        gr.update(visible=viewer.has_prev(count)),
        gr.update(visible=viewer.has_next(count)),
        status,
        state,
    )


def _unchanged(state: UIState) -> tuple:
    """No-op update for every library component."""
    return tuple(gr.update() for _ in LIBRARY_OUTPUTS) + (state,)


# ---------------------------------------------------------------------------
# Loading, sort, search
# ---------------------------------------------------------------------------


async def load_library(state: UIState) -> tuple:
    """Fetch the signed-in user's images (runs when the tab is opened).

    Args:
        state: UI state

    Returns:
        render_library tuple
    """
    state = initialize_ui_state(state)
    if state.user is None:
        state.library.reset()
        return render_library(state)

    try:
        await state.library.load()
    except ColoriaError as e:
        return render_library(state, _error(str(e)))
    return render_library(state)


async def change_sort(sort_label: str, state: UIState) -> tuple:
    """Apply a new sort option and refetch."""
    state = initialize_ui_state(state)
    try:
        await state.library.set_sort(SortOption.from_label(sort_label))
    except ColoriaError as e:
        return render_library(state, _error(str(e)))
    return render_library(state)


async def search_library(text: str, state: UIState) -> tuple:
    """Feed a keystroke through the search debouncer.

    Superseded keystrokes return no-op updates; only the settled value
    re-renders the grid.
    """
    state = initialize_ui_state(state)
    try:
        settled = await state.library.set_search(text or "")
    except ColoriaError as e:
        return render_library(state, _error(str(e)))
    if not settled:
        return _unchanged(state)
    return render_library(state)


async def clear_search(state: UIState) -> tuple:
    """Clear the search box immediately.

    Returns:
        Tuple of (search_box_value, *render_library tuple)
    """
    state = initialize_ui_state(state)
    try:
        await state.library.clear_search()
    except ColoriaError as e:
        return ("", *render_library(state, _error(str(e))))
    return ("", *render_library(state))


def set_viewport_width(width: str | float | None, state: UIState) -> tuple:
    """Recompute the page size after the browser reported its width."""
    state = initialize_ui_state(state)
    try:
        width = float(width)
    except (TypeError, ValueError):
        return _unchanged(state)
    if width <= 0 or not state.library.set_viewport_width(width):
        return _unchanged(state)
    logger.debug(f"Page size now {state.library.page_size} for width {width}")
    return render_library(state)


# ---------------------------------------------------------------------------
# Pagination and selection
# ---------------------------------------------------------------------------


def previous_page(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.prev_page()
    return render_library(state)


def next_page(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.next_page()
    return render_library(state)


def update_page_selection(selected_ids: list[str] | None, state: UIState) -> tuple:
    """Sync the checkbox group of the current page into the selection set.

    Only ids shown on the current page are toggled; selections on other
    pages are left alone.
    """
    state = initialize_ui_state(state)
    library = state.library
    checked = set(selected_ids or [])
    for record in library.page_items:
        if (record.id in checked) != (record.id in library.selected):
            library.toggle_select(record.id)
    return render_library(state)


def select_all(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.select_all()
    return render_library(state)


def deselect_all(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.deselect_all()
    return render_library(state)


# ---------------------------------------------------------------------------
# Bulk actions
# ---------------------------------------------------------------------------


def prune_downloads(downloads_dir: Path, max_age_seconds: float) -> int:
    """Remove prepared downloads older than ``max_age_seconds``.

    Returns:
        Number of download directories removed
    """
    if not downloads_dir.is_dir():
        return 0
    cutoff = time.time() - max_age_seconds
    removed = 0
    for entry in downloads_dir.iterdir():
        try:
            if not entry.is_dir() or entry.stat().st_mtime >= cutoff:
                continue
            shutil.rmtree(entry)
        except OSError as e:
            logger.warning(f"Could not remove old download {entry}: {e}")
            continue
        removed += 1
    if removed:
        logger.info(f"Removed {removed} old download(s) from {downloads_dir}")
    return removed


def write_download(filename: str, data: bytes) -> str:
    """Write ``data`` under a fresh directory in ``downloads_dir``.

    Downloads older than ``download_retention_minutes`` are pruned first.

    Returns:
        Path of the written file
    """
    cfg = get_services().config
    downloads_dir = cfg.downloads_dir
    prune_downloads(downloads_dir, cfg.download_retention_minutes * 60)
    downloads_dir.mkdir(parents=True, exist_ok=True)
    target = Path(tempfile.mkdtemp(dir=downloads_dir)) / filename
    target.write_bytes(data)
    logger.info(f"Prepared download: {target}")
    return str(target)


async def download_selected(state: UIState) -> tuple:
    """Zip the selected images for local save.

    Returns:
        Tuple of (file_update, *render_library tuple)
    """
    state = initialize_ui_state(state)
    try:
        result = await state.library.download_selected()
    except TransportError as e:
        logger.error(f"Error downloading images: {e}")
        return (gr.update(visible=False), *render_library(state, _error(DOWNLOAD_FAILED)))

    if result is None:
        return (gr.update(visible=False), *render_library(state))

    path = write_download(result.filename, result.archive)
    status = ""
    if result.is_partial:
        status = f"*{len(result.failed)} image(s) could not be downloaded and were skipped.*"
    return (gr.update(value=path, visible=True), *render_library(state, status))


def request_delete(state: UIState) -> tuple:
    """Show the delete confirmation.

    Returns:
        Tuple of (confirm_group_update, *render_library tuple)
    """
    state = initialize_ui_state(state)
    state.delete_pending = bool(state.library.selected)
    return (gr.update(visible=state.delete_pending), *render_library(state))


def cancel_delete(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.delete_pending = False
    return (gr.update(visible=False), *render_library(state))


async def confirm_delete(state: UIState) -> tuple:
    """Soft-delete the selection after the user confirmed.

    On failure the library is unchanged and the error is shown as-is.

    Returns:
        Tuple of (confirm_group_update, *render_library tuple)
    """
    state = initialize_ui_state(state)
    confirmed = state.delete_pending
    state.delete_pending = False

    try:
        result = await state.library.delete_selected(confirmed)
    except TransportError as e:
        return (gr.update(visible=False), *render_library(state, _error(str(e))))

    status = f"*Deleted {result.count} image(s).*" if result else ""
    return (gr.update(visible=False), *render_library(state, status))


# ---------------------------------------------------------------------------
# Viewer
# ---------------------------------------------------------------------------


def open_viewer(evt: gr.SelectData, state: UIState) -> tuple:
    """Open the viewer on the clicked grid image."""
    state = initialize_ui_state(state)
    state.library.open_viewer(evt.index)
    return render_library(state)


def close_viewer(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.close_viewer()
    return render_library(state)


def viewer_previous(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.navigate_prev()
    return render_library(state)


def viewer_next(state: UIState) -> tuple:
    state = initialize_ui_state(state)
    state.library.navigate_next()
    return render_library(state)


def viewer_key(event: str, state: UIState) -> tuple:
    """Apply a key forwarded by the page script (``"<key>|<timestamp>"``)."""
    state = initialize_ui_state(state)
    if not state.library.viewer.is_open:
        return _unchanged(state)
    state.library.handle_key(parse_viewer_key(event))
    return render_library(state)


async def download_viewer_image(state: UIState) -> tuple[dict, str, UIState]:
    """Fetch the image under the viewer cursor for local save.

    Returns:
        Tuple of (file_update, status_markdown, updated_state)
    """
    state = initialize_ui_state(state)
    try:
        download = await state.library.download_current()
    except TransportError as e:
        logger.error(f"Error downloading image: {e}")
        return gr.update(visible=False), _error("Failed to download image"), state

    if download is None:
        return gr.update(visible=False), "", state

    filename, data = download
    return gr.update(value=write_download(filename, data), visible=True), "", state
