"""Pytest fixtures for lume tests."""

from pathlib import Path

import pytest


class MemoryStore:
    """In-memory state store."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FakeClock:
    """Clock returning a settable time in seconds since the epoch."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide a temporary project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def mock_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Provide a mock home directory and set HOME env var."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove lume-related environment variables."""
    env_vars = [
        "LUME_CONFIG_HOME",
        "LUME_STATE_HOME",
        "XDG_CONFIG_HOME",
        "XDG_STATE_HOME",
        "LUME_CONCURRENCY_LIMIT",
        "LUME_UPGRADE_CHECK",
        "LUME_UPGRADE_INTERVAL_HOURS",
        "LUME_VERSIONS_URL",
        "LUME_COMMITS_URL",
        "LUME_HTTP_TIMEOUT",
        "LUME_IMPORT_MAP_FILE",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> Path:
    """Provide a mock LUME_CONFIG_HOME directory.

    Depends on clean_env to ensure env is clean before setting LUME_CONFIG_HOME.
    """
    config = tmp_path / "lume-config"
    config.mkdir()
    monkeypatch.setenv("LUME_CONFIG_HOME", str(config))
    return config


@pytest.fixture
def state_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> Path:
    """Provide a mock LUME_STATE_HOME directory."""
    state = tmp_path / "lume-state"
    monkeypatch.setenv("LUME_STATE_HOME", str(state))
    return state


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
