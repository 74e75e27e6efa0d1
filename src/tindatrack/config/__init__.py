"""Configuration: TOML loading and config models.

Usage:
    >>> from tindatrack.config import load_config, AppConfig, StoreProfile
"""

from tindatrack.config.loader import load_config
from tindatrack.config.models import AppConfig, StoreProfile

__all__ = ["load_config", "AppConfig", "StoreProfile"]
