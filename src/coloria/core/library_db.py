"""SQLite persistence gateway for saved images."""

import logging
import sqlite3
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from .errors import TransportError, ValidationError
from .records import SORT_DIRECTIONS, SORT_FIELDS, ImageDownload, SavedImageRecord, SoftDeleteResult

logger = logging.getLogger(__name__)

_COLUMNS = "id, user_id, image_url, prompt, style, created_at, deleted_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row: sqlite3.Row) -> SavedImageRecord:
    deleted_at = row["deleted_at"]
    return SavedImageRecord(
        id=row["id"],
        owner_id=row["user_id"],
        image_url=row["image_url"],
        prompt=row["prompt"] or "",
        style=row["style"] or "",
        created_at=datetime.fromisoformat(row["created_at"]),
        deleted_at=datetime.fromisoformat(deleted_at) if deleted_at else None,
    )


class LibraryDB:
    """Manage the saved-image library using SQLite.

    Every listing, search and URL lookup is restricted to active records
    (``deleted_at IS NULL``). Records are never hard-deleted; ``soft_delete``
    stamps ``deleted_at`` for the whole id set in a single transaction.

    Database failures are logged and re-raised as :class:`TransportError`
    so callers can show the message and keep their last snapshot.
    """

    def __init__(self, db_path: Path):
        """Initialize the library database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized library database at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS saved_images (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    image_url TEXT NOT NULL,
                    prompt TEXT NOT NULL DEFAULT '',
                    style TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    deleted_at TEXT
                )
                """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_saved_images_owner
                ON saved_images(user_id, deleted_at, created_at DESC)
                """)

            conn.commit()

    def create_record(
        self, owner_id: str, image_url: str, prompt: str, style: str
    ) -> SavedImageRecord:
        """Insert a new saved image.

        Args:
            owner_id: Identifier of the owning user
            image_url: Public URL of the stored asset
            prompt: Prompt the image was generated from
            style: Style tag

        Returns:
            The stored record

        Raises:
            TransportError: If the insert fails
        """
        record_id = str(uuid.uuid4())
        created_at = _now()

        try:
            with self._connect() as conn:
                conn.execute(
                    f"INSERT INTO saved_images ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, NULL)",
                    (record_id, owner_id, image_url, prompt, style, created_at),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error saving image to database: {e}")
            raise TransportError(f"Failed to save image: {e}") from e

        logger.info(f"Saved image {record_id} for user {owner_id}")
        return SavedImageRecord(
            id=record_id,
            owner_id=owner_id,
            image_url=image_url,
            prompt=prompt,
            style=style,
            created_at=datetime.fromisoformat(created_at),
        )

    def get_record(self, record_id: str) -> SavedImageRecord | None:
        """Fetch one record by id, including soft-deleted ones."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM saved_images WHERE id = ?", (record_id,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading image {record_id}: {e}")
            raise TransportError(f"Failed to read image: {e}") from e

        return _row_to_record(row) if row else None

    def list_active(
        self, owner_id: str, sort_field: str = "created_at", direction: str = "desc"
    ) -> list[SavedImageRecord]:
        """List the owner's active images in the requested order.

        Args:
            owner_id: Identifier of the owning user
            sort_field: ``created_at`` or ``prompt``
            direction: ``asc`` or ``desc``

        Returns:
            Active records ordered by ``sort_field`` (insertion order breaks ties)

        Raises:
            ValidationError: If the sort field or direction is unknown
            TransportError: If the query fails
        """
        if sort_field not in SORT_FIELDS:
            raise ValidationError(f"Unknown sort field: {sort_field}")
        if direction not in SORT_DIRECTIONS:
            raise ValidationError(f"Unknown sort direction: {direction}")

        # Column and direction are whitelisted above, so formatting is safe.
        order = f"{sort_field} {direction.upper()}, rowid {direction.upper()}"

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM saved_images
                    WHERE user_id = ? AND deleted_at IS NULL
                    ORDER BY {order}
                    """,
                    (owner_id,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error getting sorted images: {e}")
            raise TransportError(f"Failed to load images: {e}") from e

        return [_row_to_record(row) for row in rows]

    def search_active(self, owner_id: str, query: str) -> list[SavedImageRecord]:
        """Case-insensitive substring search over prompts, newest first."""
        pattern = f"%{_escape_like(query)}%"

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM saved_images
                    WHERE user_id = ? AND deleted_at IS NULL
                      AND prompt LIKE ? ESCAPE '\\'
                    ORDER BY created_at DESC, rowid DESC
                    """,
                    (owner_id, pattern),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error searching images: {e}")
            raise TransportError(f"Failed to search images: {e}") from e

        return [_row_to_record(row) for row in rows]

    def resolve_urls(self, image_ids: Sequence[str]) -> list[ImageDownload]:
        """Resolve ids to ``(image_url, prompt)`` pairs for download.

        Soft-deleted and unknown ids are dropped. The result follows the
        order of ``image_ids``.
        """
        ids = list(dict.fromkeys(image_ids))
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"""
                    SELECT id, image_url, prompt FROM saved_images
                    WHERE id IN ({placeholders}) AND deleted_at IS NULL
                    """,
                    ids,
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error getting image URLs: {e}")
            raise TransportError(f"Failed to get image URLs: {e}") from e

        by_id = {row["id"]: ImageDownload(row["image_url"], row["prompt"] or "") for row in rows}
        return [by_id[image_id] for image_id in ids if image_id in by_id]

    def soft_delete(
        self, image_ids: Sequence[str], owner_id: str | None = None
    ) -> SoftDeleteResult:
        """Mark every given image as deleted in one transaction.

        Args:
            image_ids: Ids to delete
            owner_id: When given, only this owner's images are touched

        Returns:
            Result listing the ids that were newly marked deleted

        Raises:
            TransportError: If the transaction fails (nothing is changed)
        """
        ids = list(dict.fromkeys(image_ids))
        if not ids:
            return SoftDeleteResult(success=True)

        placeholders = ", ".join("?" for _ in ids)
        where = f"id IN ({placeholders}) AND deleted_at IS NULL"
        params: list[str] = list(ids)
        if owner_id is not None:
            where += " AND user_id = ?"
            params.append(owner_id)

        conn = self._connect()
        try:
            with conn:
                rows = conn.execute(f"SELECT id FROM saved_images WHERE {where}", params).fetchall()
                conn.execute(
                    f"UPDATE saved_images SET deleted_at = ? WHERE {where}",
                    [_now(), *params],
                )
        except sqlite3.Error as e:
            logger.error(f"Soft delete error details: {e}")
            raise TransportError(f"Failed to soft delete images: {e}") from e
        finally:
            conn.close()

        deleted = tuple(row["id"] for row in rows)
        logger.info(f"Soft deleted {len(deleted)} image(s)")
        return SoftDeleteResult(success=True, deleted_ids=deleted)
