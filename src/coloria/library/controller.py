"""Library state controller.

``LibraryController`` owns the authoritative snapshot of the signed-in
user's active images plus the view parameters layered on top of it: sort
option, debounced search text, page and page size, the selection set and
the image viewer. The filtered sequence, the page slice and the page
count are derived from those on every access.

All mutations happen on one event loop. Awaits only wrap I/O; state is
updated after the awaited call returns, inside a single step, so no
handler ever observes a half-applied change.

Sort is server-side: changing it refetches. Search is client-side by
default: a settled query only re-filters the snapshot. With
``search_mode="server"`` a settled query refetches through
``search_active`` instead.

Overlapping loads are sequenced with a generation counter; a response
that arrives after a newer request was issued is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx

from coloria.core.errors import ColoriaError, LoadError, TransportError
from coloria.core.records import BulkDownloadResult, SavedImageRecord, SoftDeleteResult, SortOption
from coloria.core.session import SessionContext

from .bulk import bulk_download, bulk_soft_delete, download_image
from .debounce import Debouncer
from .paging import (
    clamp_page,
    filter_records,
    page_of_index,
    page_size_for_width,
    paginate,
    total_pages,
)
from .viewer import ImageViewer

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT_WIDTH = 1280


class LibraryController:
    """Fetch, filter, sort, paginate, select and mutate the image library.

    Args:
        gateway: Persistence gateway (``list_active``, ``search_active``,
            ``resolve_urls``, ``soft_delete``)
        session: Session context supplying the owner id
        client_factory: Returns a new ``httpx.AsyncClient`` for asset fetches
        debounce_delay: Search debounce delay in seconds
        search_mode: ``"client"`` or ``"server"``
        viewport_width: Initial viewport width
    """

    def __init__(
        self,
        gateway,
        session: SessionContext,
        client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient,
        debounce_delay: float = 0.5,
        search_mode: str = "client",
        viewport_width: int = DEFAULT_VIEWPORT_WIDTH,
    ):
        self.gateway = gateway
        self.session = session
        self.client_factory = client_factory
        self.search_mode = search_mode

        self.records: list[SavedImageRecord] = []
        self.sort = SortOption.NEWEST
        self.search_input = ""
        self.search = Debouncer(debounce_delay, "")
        self.page = 1
        self.page_size = page_size_for_width(viewport_width)
        self.selected: set[str] = set()
        self.viewer = ImageViewer()

        self.loading = False
        self.loaded = False
        self._generation = 0

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        """The settled (debounced) search text."""
        return self.search.value

    @property
    def filtered(self) -> list[SavedImageRecord]:
        if self.search_mode == "server":
            return list(self.records)
        return filter_records(self.records, self.query)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered), self.page_size)

    @property
    def page_items(self) -> list[SavedImageRecord]:
        filtered = self.filtered
        page = clamp_page(self.page, len(filtered), self.page_size)
        return paginate(filtered, page, self.page_size)

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def current_record(self) -> SavedImageRecord | None:
        if not self.viewer.is_open:
            return None
        return self.viewer.current(self.filtered)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _fetch(self, fetch: Callable[[], list[SavedImageRecord]]) -> bool:
        self._generation += 1
        generation = self._generation
        self.loading = True

        try:
            records = await asyncio.to_thread(fetch)
        except ColoriaError as e:
            if generation != self._generation:
                logger.debug(f"Discarding stale library failure (generation {generation}): {e}")
                return False
            self.loading = False
            logger.error(f"Error fetching images: {e}")
            raise LoadError() from e

        if generation != self._generation:
            logger.debug(f"Discarding stale library response (generation {generation})")
            return False

        self.records = list(records)
        self.page = 1
        self.loading = False
        self.loaded = True
        logger.info(f"Loaded {len(self.records)} image(s)")
        return True

    async def load(self) -> bool:
        """Fetch the owner's active images in the current sort order.

        Replaces the snapshot and resets to page 1.

        Returns:
            True if the snapshot was replaced, False if a newer load won

        Raises:
            AuthenticationError: If no user is signed in
            LoadError: If the gateway call fails (snapshot is kept). A failure
                of a load that a newer one superseded returns False instead
        """
        owner_id = self.session.require_user().id
        sort_field, direction = self.sort.field_and_direction
        return await self._fetch(lambda: self.gateway.list_active(owner_id, sort_field, direction))

    async def set_sort(self, option: SortOption | str) -> bool:
        """Change the sort option and refetch."""
        self.sort = SortOption(option)
        return await self.load()

    async def set_search(self, text: str) -> bool:
        """Feed the search box through the debouncer.

        Returns:
            True when ``text`` settled and was applied, False if a later
            keystroke superseded it
        """
        self.search_input = text
        settled = await self.search.submit(text)
        if not settled:
            return False

        self.page = 1
        if self.search_mode == "server":
            owner_id = self.session.require_user().id
            if text:
                await self._fetch(lambda: self.gateway.search_active(owner_id, text))
            else:
                await self.load()
        return True

    async def clear_search(self) -> None:
        """Empty the search box and apply it without waiting for the debounce."""
        self.search.cancel()
        self.search_input = ""
        had_query = bool(self.search.value)
        self.search.value = ""
        self.page = 1
        if self.search_mode == "server" and had_query:
            await self.load()

    def set_viewport_width(self, width: int | float) -> bool:
        """Recompute page size; a changed size resets to page 1.

        With the viewer open the grid moves to the page holding the
        viewer cursor instead.
        """
        size = page_size_for_width(width)
        if size == self.page_size:
            return False
        self.page_size = size
        self.page = page_of_index(self.viewer.cursor, size) if self.viewer.is_open else 1
        return True

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def go_to_page(self, page: int) -> int:
        """Move the grid to ``page`` (clamped).

        An open viewer follows to the first image of the new page.
        """
        self.page = clamp_page(page, len(self.filtered), self.page_size)
        if self.viewer.is_open and page_of_index(self.viewer.cursor, self.page_size) != self.page:
            self.viewer.cursor = (self.page - 1) * self.page_size
        return self.page

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def prev_page(self) -> int:
        return self.go_to_page(self.page - 1)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_select(self, image_id: str) -> bool:
        """Flip membership of ``image_id``; returns the new membership."""
        if image_id in self.selected:
            self.selected.discard(image_id)
            return False
        self.selected.add(image_id)
        return True

    def select_all(self) -> None:
        """Select every record of the filtered snapshot, not just this page."""
        self.selected = {record.id for record in self.filtered}

    def deselect_all(self) -> None:
        self.selected = set()

    # ------------------------------------------------------------------
    # Viewer
    # ------------------------------------------------------------------

    def open_viewer(self, page_index: int) -> bool:
        """Open the viewer on the ``page_index``-th item of the current page."""
        index = (self.page - 1) * self.page_size + page_index
        return self.viewer.open(index, len(self.filtered))

    def close_viewer(self) -> None:
        self.viewer.close()

    def navigate_prev(self) -> None:
        self.page = self.viewer.navigate_prev(len(self.filtered), self.page_size, self.page)

    def navigate_next(self) -> None:
        self.page = self.viewer.navigate_next(len(self.filtered), self.page_size, self.page)

    def handle_key(self, key: str) -> None:
        self.page = self.viewer.handle_key(key, len(self.filtered), self.page_size, self.page)

    async def download_current(self) -> tuple[str, bytes] | None:
        """Fetch the image under the viewer cursor for local save.

        Raises:
            TransportError: If the fetch fails
        """
        record = self.viewer.current(self.filtered)
        if record is None:
            return None
        async with self.client_factory() as client:
            return await download_image(client, record)

    # ------------------------------------------------------------------
    # Bulk actions
    # ------------------------------------------------------------------

    async def download_selected(self) -> BulkDownloadResult | None:
        """Zip every selected image that can be fetched.

        Raises:
            TransportError: If the selection cannot be resolved
        """
        if not self.selected:
            return None
        async with self.client_factory() as client:
            return await bulk_download(self.gateway, client, sorted(self.selected))

    async def delete_selected(self, confirmed: bool) -> SoftDeleteResult | None:
        """Soft-delete the selection after explicit confirmation.

        On success the ids leave the snapshot and the selection is cleared.
        On failure nothing local changes and the error propagates with its
        message intact.

        Returns:
            The gateway result, or None when unconfirmed or nothing selected

        Raises:
            TransportError: If the gateway call fails
        """
        if not confirmed or not self.selected:
            return None

        doomed = set(self.selected)
        try:
            result = await bulk_soft_delete(self.gateway, doomed, self.session.owner_id)
        except TransportError as e:
            logger.error(f"Error deleting images: {e}")
            raise

        self.records = [record for record in self.records if record.id not in doomed]
        self.selected = set()
        self.page = clamp_page(self.page, len(self.filtered), self.page_size)
        if self.viewer.is_open and self.viewer.cursor >= len(self.filtered):
            self.viewer.close()
        return result

    def reset(self) -> None:
        """Forget everything fetched for the current user."""
        self.search.cancel()
        self._generation += 1
        self.records = []
        self.search_input = ""
        self.search.value = ""
        self.page = 1
        self.selected = set()
        self.viewer = ImageViewer()
        self.loading = False
        self.loaded = False
