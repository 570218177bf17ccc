"""Record and result types exchanged with the persistence gateway."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

SORT_FIELDS = ("created_at", "prompt")
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class SavedImageRecord:
    """One persisted generated image.

    ``deleted_at`` is ``None`` for active records. Once set it is never
    cleared by this application.
    """

    id: str
    owner_id: str
    image_url: str
    prompt: str
    style: str
    created_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """True when the record has not been soft-deleted."""
        return self.deleted_at is None

    @property
    def display_name(self) -> str:
        """Caption shown under the grid thumbnail."""
        return self.prompt or f"Image {self.id}"


@dataclass(frozen=True)
class ImageDownload:
    """The ``{imageUrl, prompt}`` pair needed to download a saved image."""

    image_url: str
    prompt: str


@dataclass(frozen=True)
class SoftDeleteResult:
    """Outcome of a soft-delete call."""

    success: bool
    deleted_ids: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.deleted_ids)


@dataclass
class BulkDownloadResult:
    """Archive produced by a bulk download.

    ``failed`` lists the image URLs whose fetch failed and were skipped;
    a non-empty list is a partial batch failure, not an error.
    """

    filename: str
    archive: bytes
    entries: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed)


class SortOption(str, Enum):
    """Sort choices offered by the library view."""

    NEWEST = "newest"
    OLDEST = "oldest"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]

    @property
    def field_and_direction(self) -> tuple[str, str]:
        """Gateway ``(sort_field, direction)`` for this option."""
        return SORT_QUERY[self]

    @classmethod
    def from_label(cls, label: str) -> "SortOption":
        for option, option_label in SORT_LABELS.items():
            if option_label == label:
                return option
        return cls(label)


SORT_LABELS = {
    SortOption.NEWEST: "Newest First",
    SortOption.OLDEST: "Oldest First",
    SortOption.NAME_ASC: "Name (A-Z)",
    SortOption.NAME_DESC: "Name (Z-A)",
}

SORT_QUERY = {
    SortOption.NEWEST: ("created_at", "desc"),
    SortOption.OLDEST: ("created_at", "asc"),
    SortOption.NAME_ASC: ("prompt", "asc"),
    SortOption.NAME_DESC: ("prompt", "desc"),
}
