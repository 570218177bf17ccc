"""Configuration management for ColorIA.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the COLORIA_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (COLORIA_* prefix)
2. .env file in the project root
3. Default values defined in ColoriaConfig

Example .env file:
    COLORIA_FAL_KEY=your-fal-key
    COLORIA_DATA_DIR=data
    COLORIA_PUBLIC_BASE_URL=https://coloria.example.com
    COLORIA_SEARCH_DEBOUNCE_MS=300

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from coloria.core.config import config

    print(config.db_path)
    print(config.assets_dir)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- data_dir: SQLite database and other local state
- assets_dir: Uploaded image assets (served under /assets)
- downloads_dir: Files prepared for the browser to save locally
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FAL_ENDPOINT = "https://110602490-recraft-20b.gateway.alpha.fal.ai/"


class ColoriaConfig(BaseSettings):
    """Main configuration for ColorIA.

    Values are loaded from environment variables with the COLORIA_ prefix,
    with fallback to the defaults defined here. All directory fields are
    created on initialization if they don't exist.

    Attributes
    ----------
    Paths:
        data_dir : Path
            Root directory for local state (database lives here)
        assets_dir : Path
            Directory for uploaded image assets
        downloads_dir : Path
            Directory for prepared downloads (single images and zip archives)
        database_name : str
            SQLite file name inside data_dir

    Generation Service:
        fal_endpoint : str
            URL of the image generation endpoint
        fal_key : str | None
            API key sent as ``Authorization: Key <fal_key>``
        fal_image_size : str
            Image size preset forwarded to the service
        fal_num_inference_steps : int
            Inference steps forwarded to the service

    Library Settings:
        search_debounce_ms : int
            Delay before a search input is applied
        search_mode : Literal["client", "server"]
            Filter the fetched snapshot locally, or query the database
        default_style : str
            Style tag stored with saved images
        download_retention_minutes : int
            Age after which prepared downloads are removed

    Network / Server:
        public_base_url : str
            Base URL used to build public asset URLs
        http_timeout : float | None
            Per-request timeout in seconds; None disables the timeout
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COLORIA_",
        case_sensitive=False,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the database and local state",
    )
    assets_dir: Path = Field(
        default=Path("data/assets"),
        description="Directory for uploaded image assets",
    )
    downloads_dir: Path = Field(
        default=Path("data/downloads"),
        description="Directory for files prepared for local save",
    )
    database_name: str = Field(
        default="coloria.db",
        description="SQLite database file name (inside data_dir)",
    )

    # Generation service
    fal_endpoint: str = Field(
        default=DEFAULT_FAL_ENDPOINT,
        description="Image generation service endpoint",
    )
    fal_key: str | None = Field(
        default=None,
        description="Image generation service API key",
    )
    fal_image_size: str = Field(
        default="square_hd",
        description="Image size preset forwarded to the generation service",
    )
    fal_num_inference_steps: int = Field(
        default=50,
        description="Inference steps forwarded to the generation service",
        ge=1,
        le=100,
    )

    # Library settings
    search_debounce_ms: int = Field(
        default=500,
        description="Delay in milliseconds before a search input is applied",
        ge=0,
        le=10_000,
    )
    search_mode: Literal["client", "server"] = Field(
        default="client",
        description="Filter the fetched snapshot locally, or search in the database",
    )
    default_style: str = Field(
        default="default",
        description="Style tag stored with saved images",
    )
    download_retention_minutes: int = Field(
        default=60,
        description="Minutes a prepared download is kept before it is removed",
        ge=1,
    )

    # Network / server
    public_base_url: str = Field(
        default="http://localhost:7860",
        description="Base URL used to build public asset URLs",
    )
    http_timeout: float | None = Field(
        default=None,
        description="Per-request timeout in seconds (None = no timeout)",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.assets_dir.mkdir(parents=True, exist_ok=True)
        self.downloads_dir.mkdir(parents=True, exist_ok=True)

    @property
    def db_path(self) -> Path:
        """Path to the SQLite database file."""
        return self.data_dir / self.database_name

    @property
    def search_debounce_seconds(self) -> float:
        """Search debounce delay in seconds."""
        return self.search_debounce_ms / 1000


# Global configuration instance
# Loads values from environment variables (COLORIA_* prefix) and .env file.
config = ColoriaConfig()
