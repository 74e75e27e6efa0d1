"""Tests for profile resolution and store creation."""

import pytest

from tindatrack.adapters.memory import InMemoryStore
from tindatrack.adapters.sqlite import AsyncSQLiteStore
from tindatrack.config.models import AppConfig, StoreProfile
from tindatrack.factory import (
    PROFILE_ENV_VAR,
    ProfileNotFoundError,
    create_store,
    open_store,
    resolve_profile,
)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        profiles={
            "local": StoreProfile(url="sqlite:///local.db"),
            "scratch": StoreProfile(url="", provider="memory"),
        }
    )


@pytest.fixture(autouse=True)
def _clear_profile_env(monkeypatch):
    monkeypatch.delenv(PROFILE_ENV_VAR, raising=False)
    monkeypatch.delenv(f"APP_{PROFILE_ENV_VAR}", raising=False)


class TestResolveProfile:
    def test_explicit_name_wins(self, config, monkeypatch):
        monkeypatch.setenv(PROFILE_ENV_VAR, "scratch")
        name, profile = resolve_profile(config, "local")
        assert name == "local"
        assert profile.url == "sqlite:///local.db"

    def test_env_var(self, config, monkeypatch):
        monkeypatch.setenv(PROFILE_ENV_VAR, "scratch")
        assert resolve_profile(config)[0] == "scratch"

    def test_env_prefix(self, config, monkeypatch):
        monkeypatch.setenv(f"APP_{PROFILE_ENV_VAR}", "scratch")
        assert resolve_profile(config, env_prefix="APP_")[0] == "scratch"

    def test_single_profile_is_default(self):
        config = AppConfig(profiles={"only": StoreProfile(url="store.db")})
        assert resolve_profile(config)[0] == "only"

    def test_ambiguous_without_selection(self, config):
        with pytest.raises(ProfileNotFoundError, match="local, scratch"):
            resolve_profile(config)

    def test_unknown_name(self, config):
        with pytest.raises(ProfileNotFoundError, match="'cloud' not found"):
            resolve_profile(config, "cloud")

    def test_no_profiles(self):
        with pytest.raises(ProfileNotFoundError, match=r"\(none\)"):
            resolve_profile(AppConfig())


class TestCreateStore:
    async def test_sqlite(self, tmp_path):
        store = create_store(StoreProfile(url=str(tmp_path / "store.db")))
        try:
            assert isinstance(store, AsyncSQLiteStore)
        finally:
            await store.close()

    def test_memory(self):
        assert isinstance(create_store(StoreProfile(url="", provider="memory")), InMemoryStore)

    def test_unsupported_provider(self):
        with pytest.raises(ValueError, match="Unsupported store provider"):
            create_store(StoreProfile(url="postgresql://x", provider="postgres"))


class TestOpenStore:
    async def test_returns_name_and_store(self, config):
        name, store = open_store(config, "scratch")
        assert name == "scratch"
        assert isinstance(store, InMemoryStore)

    async def test_new_store_each_call(self, config):
        _, first = open_store(config, "scratch")
        _, second = open_store(config, "scratch")
        assert first is not second
