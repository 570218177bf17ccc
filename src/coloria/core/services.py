"""Process-wide collaborators shared by the API and every UI session."""

import logging
from dataclasses import dataclass

import httpx

from .asset_store import AssetStore
from .config import ColoriaConfig
from .generation import GenerationClient
from .library_db import LibraryDB
from .session import LocalAuthProvider

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Shared, session-independent services.

    Attributes:
        config: Configuration the services were built from
        library_db: Persistence gateway for saved images
        asset_store: Public asset storage
        generation: Image generation service client
        auth: Account store behind every session context
    """

    config: ColoriaConfig
    library_db: LibraryDB
    asset_store: AssetStore
    generation: GenerationClient
    auth: LocalAuthProvider

    def http_client(self) -> httpx.AsyncClient:
        """New async HTTP client with the configured timeout."""
        return httpx.AsyncClient(timeout=self.config.http_timeout, follow_redirects=True)


def build_services(cfg: ColoriaConfig) -> AppServices:
    """Create every shared collaborator from ``cfg``."""
    services = AppServices(
        config=cfg,
        library_db=LibraryDB(cfg.db_path),
        asset_store=AssetStore(cfg.assets_dir, cfg.public_base_url),
        generation=GenerationClient(
            endpoint=cfg.fal_endpoint,
            api_key=cfg.fal_key,
            image_size=cfg.fal_image_size,
            num_inference_steps=cfg.fal_num_inference_steps,
            timeout=cfg.http_timeout,
        ),
        auth=LocalAuthProvider(cfg.db_path),
    )
    logger.info(f"Services ready (database: {cfg.db_path}, assets: {cfg.assets_dir})")
    return services
