"""Store factory.

Resolves which configured profile to use and opens a store for it.  The
configuration is always passed in explicitly; nothing is cached at module
level, so every call returns a new store the caller must close.

Profile resolution order:

1. Explicit ``profile_name`` argument (e.g. ``--profile`` on the CLI)
2. ``{env_prefix}TINDATRACK_PROFILE`` environment variable
3. The only profile, when exactly one is configured
4. Raise ``ProfileNotFoundError``
"""

import logging
import os

from tindatrack.adapters.base import DomainStore
from tindatrack.adapters.memory import InMemoryStore
from tindatrack.adapters.sqlite import AsyncSQLiteStore
from tindatrack.config.models import AppConfig, StoreProfile

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "TINDATRACK_PROFILE"


class ProfileNotFoundError(Exception):
    """Raised when no store profile can be resolved."""

    pass


def resolve_profile(
    config: AppConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> tuple[str, StoreProfile]:
    """Pick the active profile from *config*.

    Args:
        config: Loaded configuration.
        profile_name: Explicit profile name, takes precedence.
        env_prefix: Prefix for the environment variable lookup
            (``APP_`` reads ``APP_TINDATRACK_PROFILE``).

    Returns:
        Tuple of (profile_name, StoreProfile).

    Raises:
        ProfileNotFoundError: If no profile is selected or the selected
            name is not configured.
    """
    name = profile_name or os.environ.get(f"{env_prefix}{PROFILE_ENV_VAR}")

    if name is None and len(config.profiles) == 1:
        name = next(iter(config.profiles))

    if name is None:
        available = ", ".join(config.profiles) or "(none)"
        raise ProfileNotFoundError(
            "No store profile selected.\n"
            f"Pass --profile or set {env_prefix}{PROFILE_ENV_VAR}.\n"
            f"Available profiles: {available}"
        )

    if name not in config.profiles:
        available = ", ".join(config.profiles) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{name}' not found. Available profiles: {available}"
        )

    return name, config.profiles[name]


def create_store(profile: StoreProfile) -> DomainStore:
    """Create the store described by *profile*.

    Raises:
        ValueError: If the profile's provider is not supported.
    """
    if profile.provider == "sqlite":
        return AsyncSQLiteStore(profile.url, foreign_keys=profile.foreign_keys)
    if profile.provider == "memory":
        return InMemoryStore()
    raise ValueError(f"Unsupported store provider: {profile.provider}")


def open_store(
    config: AppConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> tuple[str, DomainStore]:
    """Resolve the active profile and open its store.

    Returns:
        Tuple of (profile_name, store).

    Example:
        name, store = open_store(load_config(), profile_name="local")
        try:
            rows = await store.read_all("products")
        finally:
            await store.close()
    """
    name, profile = resolve_profile(config, profile_name, env_prefix)
    logger.debug("Opening %s store for profile %s", profile.provider, name)
    return name, create_store(profile)
