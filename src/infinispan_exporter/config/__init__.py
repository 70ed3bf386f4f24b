"""
Exporter configuration.
"""

from .loader import load_settings, read_config_file
from .settings import Settings

__all__ = ["Settings", "load_settings", "read_config_file"]
