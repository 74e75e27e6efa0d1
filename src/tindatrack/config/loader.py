"""TOML configuration loader.

Reads ``tindatrack.toml`` and returns a validated ``AppConfig``.  Has no
side effects beyond reading the file -- no environment lookups, no
caching.

Example ``tindatrack.toml``::

    app_name = "TindaTrack"
    backup_dir = "backups"

    [profiles.local]
    url = "sqlite:///tindatrack.db"
    description = "Store database"
"""

import tomllib
from pathlib import Path

from tindatrack.config.models import AppConfig, StoreProfile

DEFAULT_CONFIG_FILE = "tindatrack.toml"


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the config file (default: ``tindatrack.toml``
            in the current working directory).

    Returns:
        ``AppConfig`` with all profiles.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the file is not valid TOML or a profile is invalid.
    """
    path = Path(config_path) if config_path is not None else Path.cwd() / DEFAULT_CONFIG_FILE

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with at least one [profiles.<name>] table."
        )

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    profiles: dict[str, StoreProfile] = {}
    for name, profile_data in data.get("profiles", {}).items():
        try:
            profiles[name] = StoreProfile(**profile_data)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid profile '{name}' in {path}: {e}") from e

    settings = {k: v for k, v in data.items() if k in ("app_name", "backup_dir")}
    return AppConfig(profiles=profiles, **settings)
