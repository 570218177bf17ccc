"""UI event handlers organized by feature area.

This package provides handlers for all Gradio UI events, organized into logical modules:
- auth: Sign in, sign up, sign out
- generation: Image generation, save to library, download
- library: Search, sort, pagination, selection, bulk actions, image viewer
"""

from .auth import account_summary, sign_in, sign_out, sign_up
from .generation import download_generated, generate_image, save_to_library
from .library import (
    LIBRARY_OUTPUTS,
    SORT_CHOICES,
    cancel_delete,
    change_sort,
    clear_search,
    close_viewer,
    confirm_delete,
    deselect_all,
    download_selected,
    download_viewer_image,
    load_library,
    next_page,
    open_viewer,
    previous_page,
    render_library,
    request_delete,
    search_library,
    select_all,
    set_viewport_width,
    update_page_selection,
    viewer_key,
    viewer_next,
    viewer_previous,
)

__all__ = [
    # Auth handlers
    "account_summary",
    "sign_in",
    "sign_out",
    "sign_up",
    # Generation handlers
    "download_generated",
    "generate_image",
    "save_to_library",
    # Library handlers
    "LIBRARY_OUTPUTS",
    "SORT_CHOICES",
    "cancel_delete",
    "change_sort",
    "clear_search",
    "close_viewer",
    "confirm_delete",
    "deselect_all",
    "download_selected",
    "download_viewer_image",
    "load_library",
    "next_page",
    "open_viewer",
    "previous_page",
    "render_library",
    "request_delete",
    "search_library",
    "select_all",
    "set_viewport_width",
    "update_page_selection",
    "viewer_key",
    "viewer_next",
    "viewer_previous",
]
