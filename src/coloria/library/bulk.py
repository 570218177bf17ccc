"""Bulk download and soft-delete of selected library images.

Bulk download resolves ids through the gateway, fetches every asset
concurrently, and packs whatever arrived into one zip archive. A failed
fetch is logged and skipped; the batch still succeeds with fewer entries.
"""

from __future__ import annotations

import asyncio
import io
import logging
import re
import zipfile
from collections.abc import Collection, Sequence

import httpx

from coloria.core.asset_store import fetch_image_bytes
from coloria.core.errors import TransportError
from coloria.core.records import BulkDownloadResult, ImageDownload, SavedImageRecord, SoftDeleteResult

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "selected_images.zip"
MAX_NAME_LENGTH = 120

# Characters that are unsafe in file names on at least one common platform.
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def safe_filename(name: str | None, fallback: str = "image", extension: str = ".png") -> str:
    """Build a file name from a prompt.

    Args:
        name: Preferred base name (usually the prompt)
        fallback: Base name used when ``name`` is empty after cleaning
        extension: Extension appended to the result

    Returns:
        Cleaned base name plus extension
    """
    cleaned = _UNSAFE_CHARS.sub("_", name or "").strip().strip(".")
    cleaned = cleaned[:MAX_NAME_LENGTH].rstrip()
    return f"{cleaned or fallback}{extension}"


def _unique_name(name: str, used: set[str]) -> str:
    if name not in used:
        used.add(name)
        return name
    stem, dot, ext = name.rpartition(".")
    counter = 2
    while f"{stem} ({counter}){dot}{ext}" in used:
        counter += 1
    unique = f"{stem} ({counter}){dot}{ext}"
    used.add(unique)
    return unique


async def _fetch_or_none(client: httpx.AsyncClient, item: ImageDownload) -> bytes | None:
    try:
        return await fetch_image_bytes(client, item.image_url)
    except TransportError as e:
        logger.error(f"Failed to download image: {item.image_url} ({e})")
        return None


async def bulk_download(
    gateway, client: httpx.AsyncClient, image_ids: Sequence[str]
) -> BulkDownloadResult | None:
    """Fetch the selected images and pack them into one zip archive.

    Args:
        gateway: Object providing ``resolve_urls(ids)``
        client: HTTP client used to fetch the assets
        image_ids: Selected record ids

    Returns:
        The archive, or None when nothing was selected

    Raises:
        TransportError: If the ids cannot be resolved
    """
    if not image_ids:
        return None

    items: list[ImageDownload] = await asyncio.to_thread(gateway.resolve_urls, list(image_ids))

    # Fan out every fetch at once and wait for all of them.
    payloads = await asyncio.gather(*(_fetch_or_none(client, item) for item in items))

    buffer = io.BytesIO()
    entries: list[str] = []
    failed: list[str] = []
    used: set[str] = set()

    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for index, (item, data) in enumerate(zip(items, payloads)):
            if data is None:
                failed.append(item.image_url)
                continue
            name = _unique_name(safe_filename(item.prompt, fallback=f"image_{index}"), used)
            zf.writestr(name, data)
            entries.append(name)

    if failed:
        logger.warning(f"Bulk download skipped {len(failed)} of {len(items)} image(s)")
    logger.info(f"Bulk download archived {len(entries)} image(s)")

    return BulkDownloadResult(
        filename=ARCHIVE_NAME,
        archive=buffer.getvalue(),
        entries=entries,
        failed=failed,
    )


async def download_image(
    client: httpx.AsyncClient, record: SavedImageRecord
) -> tuple[str, bytes]:
    """Fetch one image for local save, named after its prompt.

    Raises:
        TransportError: If the fetch fails
    """
    data = await fetch_image_bytes(client, record.image_url)
    return safe_filename(record.prompt), data


async def bulk_soft_delete(
    gateway, image_ids: Collection[str], owner_id: str | None = None
) -> SoftDeleteResult:
    """Soft-delete the selected ids with one atomic gateway call.

    Raises:
        TransportError: If the gateway call fails
    """
    if not image_ids:
        return SoftDeleteResult(success=True)
    result: SoftDeleteResult = await asyncio.to_thread(
        gateway.soft_delete, list(image_ids), owner_id
    )
    if not result.success:
        raise TransportError("Failed to delete images. Please try again.")
    return result
