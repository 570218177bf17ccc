"""Asset storage for saved images.

Uploaded assets live under ``<assets_dir>/<owner_id>/`` and are exposed at
``<public_base_url>/assets/<owner_id>/<name>``. Storage names are
``<epoch-ms>-<random>.png``; a name that already exists is a conflict, and
an upload retries exactly once with a fresh random part before giving up.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import string
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from .errors import AssetConflictError, TransportError
from .library_db import LibraryDB
from .records import SavedImageRecord

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


def random_suffix(length: int = 13) -> str:
    """Random lowercase base-36 string used to make storage names unique."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


class AssetStore:
    """File-backed public asset storage.

    Args:
        assets_dir: Root directory for stored assets
        public_base_url: Base URL under which ``/assets`` is served
        name_factory: Callable returning the random part of a storage name
            (injectable for tests)
    """

    def __init__(
        self,
        assets_dir: Path,
        public_base_url: str,
        name_factory: Callable[[], str] | None = None,
    ):
        self.assets_dir = Path(assets_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.name_factory = name_factory or random_suffix
        self.assets_dir.mkdir(parents=True, exist_ok=True)

    def public_url(self, owner_id: str, filename: str) -> str:
        return f"{self.public_base_url}/assets/{owner_id}/{filename}"

    def _write(self, owner_id: str, filename: str, data: bytes) -> None:
        owner_dir = self.assets_dir / owner_id
        owner_dir.mkdir(parents=True, exist_ok=True)
        try:
            # "x" mode never overwrites: an existing name is a conflict.
            with open(owner_dir / filename, "xb") as handle:
                handle.write(data)
        except FileExistsError as e:
            raise AssetConflictError() from e
        except OSError as e:
            raise TransportError(str(e)) from e

    def upload_asset(self, owner_id: str, data: bytes) -> str:
        """Store ``data`` for ``owner_id`` and return its public URL.

        Args:
            owner_id: Identifier of the owning user
            data: Image bytes

        Returns:
            Public URL of the stored asset

        Raises:
            TransportError: If the write fails, or the name still collides
                after the single retry
        """
        timestamp = int(time.time() * 1000)
        filename = f"{timestamp}-{self.name_factory()}.png"
        logger.info(f"Uploading to path: {owner_id}/{filename}")

        try:
            try:
                self._write(owner_id, filename, data)
            except AssetConflictError:
                filename = f"{timestamp}-{self.name_factory()}.png"
                logger.warning(f"Name collision, retrying as {owner_id}/{filename}")
                self._write(owner_id, filename, data)
        except TransportError as e:
            logger.error(f"Error saving image to storage: {e}")
            raise TransportError(f"Failed to upload image: {e}") from e

        url = self.public_url(owner_id, filename)
        logger.info(f"Successfully uploaded image to: {url}")
        return url


async def fetch_image_bytes(client: httpx.AsyncClient, url: str) -> bytes:
    """Download an image and return its bytes.

    Raises:
        TransportError: On network failure or a non-2xx response
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise TransportError(f"Failed to fetch image from URL: {e}") from e
    if response.is_error:
        raise TransportError("Failed to fetch image from URL")
    return response.content


async def save_generated_image(
    client: httpx.AsyncClient,
    store: AssetStore,
    db: LibraryDB,
    owner_id: str,
    image_url: str,
    prompt: str,
    style: str = "default",
) -> SavedImageRecord:
    """Copy a generated image into storage and record it in the library.

    Args:
        client: HTTP client used to fetch the generated image
        store: Asset store receiving the bytes
        db: Library database receiving the record
        owner_id: Identifier of the signed-in user
        image_url: Temporary URL returned by the generation service
        prompt: Prompt the image was generated from
        style: Style tag

    Returns:
        The new library record
    """
    data = await fetch_image_bytes(client, image_url)
    public_url = await asyncio.to_thread(store.upload_asset, owner_id, data)
    return await asyncio.to_thread(db.create_record, owner_id, public_url, prompt, style)
