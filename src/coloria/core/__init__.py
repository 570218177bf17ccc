"""Core services for ColorIA.

This package contains the configuration, the error taxonomy, the record
types shared by every layer, and the collaborators the library works
against:

- ``library_db`` - SQLite-backed persistence gateway for saved images
- ``asset_store`` - asset uploads with the name-collision retry
- ``generation`` - HTTP client for the image generation service
- ``session`` - local auth provider and the per-session context
"""

from .config import ColoriaConfig, config
from .errors import (
    AssetConflictError,
    AuthenticationError,
    ColoriaError,
    GenerationError,
    LoadError,
    TransportError,
    ValidationError,
)
from .records import (
    BulkDownloadResult,
    ImageDownload,
    SavedImageRecord,
    SoftDeleteResult,
    SortOption,
)

__all__ = [
    "ColoriaConfig",
    "config",
    "ColoriaError",
    "ValidationError",
    "TransportError",
    "LoadError",
    "GenerationError",
    "AssetConflictError",
    "AuthenticationError",
    "SavedImageRecord",
    "BulkDownloadResult",
    "ImageDownload",
    "SoftDeleteResult",
    "SortOption",
]
