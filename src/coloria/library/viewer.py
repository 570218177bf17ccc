"""Image viewer carousel over the filtered library sequence.

The viewer does not own the records. Every call receives the length of
the filtered sequence as rendered, plus the grid's page size and current
page, and returns the page the grid should show afterwards so grid and
viewer move in lockstep.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from coloria.core.records import SavedImageRecord

from .paging import total_pages

logger = logging.getLogger(__name__)

KEY_CLOSE = "Escape"
KEY_PREV = "ArrowLeft"
KEY_NEXT = "ArrowRight"


@dataclass
class ImageViewer:
    """Open/closed flag and cursor into the filtered sequence."""

    is_open: bool = False
    cursor: int = 0

    def open(self, index: int, count: int) -> bool:
        """Open on ``index``; ignored when the index is out of range."""
        if not 0 <= index < count:
            logger.debug(f"Ignoring viewer open at {index} (count={count})")
            return False
        self.is_open = True
        self.cursor = index
        return True

    def close(self) -> None:
        self.is_open = False

    def has_prev(self, count: int) -> bool:
        return 0 < self.cursor < count

    def has_next(self, count: int) -> bool:
        return 0 <= self.cursor < count - 1

    def current(self, records: Sequence[SavedImageRecord]) -> SavedImageRecord | None:
        """Record under the cursor, or None when the cursor is out of range."""
        if 0 <= self.cursor < len(records):
            return records[self.cursor]
        return None

    def navigate_prev(self, count: int, page_size: int, page: int) -> int:
        """Step back one image.

        Leaving the first slot of a page moves the grid to the previous page.

        Returns:
            The page the grid should show
        """
        if not self.has_prev(count):
            return page
        crosses_page = self.cursor % page_size == 0
        self.cursor -= 1
        return max(page - 1, 1) if crosses_page else page

    def navigate_next(self, count: int, page_size: int, page: int) -> int:
        """Step forward one image.

        Leaving the last slot of a page moves the grid to the next page.

        Returns:
            The page the grid should show
        """
        if not self.has_next(count):
            return page
        crosses_page = (self.cursor + 1) % page_size == 0
        self.cursor += 1
        return min(page + 1, total_pages(count, page_size)) if crosses_page else page

    def handle_key(self, key: str, count: int, page_size: int, page: int) -> int:
        """Apply a keyboard binding; keys are ignored while closed.

        Returns:
            The page the grid should show
        """
        if not self.is_open:
            return page
        if key == KEY_CLOSE:
            self.close()
        elif key == KEY_PREV:
            return self.navigate_prev(count, page_size, page)
        elif key == KEY_NEXT:
            return self.navigate_next(count, page_size, page)
        return page
