"""ColorIA - prompt-to-image generation with a personal image library."""

__version__ = "0.3.0"

from coloria.core.config import ColoriaConfig, config

__all__ = [
    "ColoriaConfig",
    "config",
]
