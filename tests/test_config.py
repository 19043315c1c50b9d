from __future__ import annotations

import pytest

from lifeplanner._storage import FileSessionStorage, MemorySessionStorage
from lifeplanner.client import _default_storage
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import LifePlannerConfigError


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIFEPLANNER_URL", "https://abc.example.co/")
    monkeypatch.setenv("LIFEPLANNER_ANON_KEY", "anon")
    monkeypatch.setenv("LIFEPLANNER_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("LIFEPLANNER_REFRESH_MARGIN", "120")
    monkeypatch.setenv("LIFEPLANNER_PERSIST_SESSION", "no")

    config = LifePlannerConfig.from_env()

    assert config.auth_url == "https://abc.example.co/auth/v1"
    assert config.rest_url == "https://abc.example.co/rest/v1"
    assert config.request_timeout == 5.0
    assert config.refresh_margin == 120.0
    assert config.persist_session is False


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIFEPLANNER_URL", "https://abc.example.co")
    monkeypatch.setenv("LIFEPLANNER_ANON_KEY", "anon")
    monkeypatch.setenv("LIFEPLANNER_REQUEST_TIMEOUT", "5")

    config = LifePlannerConfig.from_env(anon_key="other", request_timeout=1.5)

    assert config.anon_key == "other"
    assert config.request_timeout == 1.5
    assert config.persist_session is True


def test_missing_required_values_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LIFEPLANNER_URL", raising=False)
    monkeypatch.delenv("LIFEPLANNER_ANON_KEY", raising=False)

    with pytest.raises(LifePlannerConfigError, match="url, anon_key"):
        LifePlannerConfig.from_env()


def test_default_storage_follows_persistence_settings(tmp_path) -> None:
    session_file = str(tmp_path / "session.json")

    persisted = _default_storage(LifePlannerConfig(url="u", anon_key="k", session_file=session_file))
    disabled = _default_storage(
        LifePlannerConfig(url="u", anon_key="k", session_file=session_file, persist_session=False)
    )

    assert isinstance(persisted, FileSessionStorage)
    assert isinstance(disabled, MemorySessionStorage)
    assert isinstance(_default_storage(LifePlannerConfig(url="u", anon_key="k")), MemorySessionStorage)
