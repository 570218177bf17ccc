"""Library view logic: debounced search, responsive pagination, selection,
the image viewer, and bulk actions over a user's saved images."""

from .controller import LibraryController
from .debounce import Debouncer
from .paging import clamp_page, filter_records, page_size_for_width, paginate, total_pages
from .viewer import ImageViewer

__all__ = [
    "LibraryController",
    "Debouncer",
    "ImageViewer",
    "page_size_for_width",
    "filter_records",
    "paginate",
    "total_pages",
    "clamp_page",
]
