"""Pydantic models for TindaTrack configuration."""

from pydantic import BaseModel, Field


class StoreProfile(BaseModel):
    """Store connection profile from tindatrack.toml."""

    url: str
    description: str = ""
    provider: str = "sqlite"  # "sqlite", or "memory" for tests and embedding
    foreign_keys: bool = True


class AppConfig(BaseModel):
    """Complete configuration from tindatrack.toml."""

    app_name: str = "TindaTrack"
    backup_dir: str = "backups"
    profiles: dict[str, StoreProfile] = Field(default_factory=dict)
