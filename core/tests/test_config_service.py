"""Typed casting and environment overlays of the layered config."""
from __future__ import annotations

from pathlib import Path

import pytest

from core.config import config_service as cs


def test_cast_handles_string_annotations() -> None:
    assert cs._cast("true", "bool") is True
    assert cs._cast("off", bool) is False
    assert cs._cast("400", "int") == 400
    assert cs._cast("0.7", "float") == 0.7
    assert cs._cast("~/drafts", "Path") == Path("~/drafts").expanduser()
    assert cs._cast(3, "str") == "3"


def test_build_dataclass_uses_defaults_for_missing_keys() -> None:
    cfg = cs._build_dataclass(cs.SignatureConfig, {"max_width": "800"})
    assert cfg.max_width == 800
    assert cfg.max_height == 200
    assert cfg.quality == 0.7


def test_env_overlays(monkeypatch) -> None:
    monkeypatch.setenv("INSTALLER_API__BASE_URL", "https://api.example.test")
    monkeypatch.setenv("INSTALLER_BROKEN", "ignored")
    overlays = cs._env_overlays()
    assert overlays["Api"]["base_url"] == "https://api.example.test"
    assert all("broken" not in keys for keys in overlays.values())


def test_env_overrides_machine_config(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("INSTALLER_SIGNATURE__QUALITY", "0.5")
    monkeypatch.setenv("INSTALLER_SUBMISSION__NOTES_REQUIRED", "yes")
    monkeypatch.setattr(cs, "_user_config_path", lambda: tmp_path / "missing.ini")
    service = cs.ConfigService()
    assert service.signature.quality == 0.5
    assert service.submission.notes_required is True
    assert service.meta_source("Signature", "quality")["layer"] == "env"
    assert service.get("Signature", "quality", cast=float) == 0.5


def test_user_config_wins(monkeypatch, tmp_path) -> None:
    user_ini = tmp_path / "config.ini"
    user_ini.write_text("[Api]\nbase_url = https://user.example.test\n", encoding="utf-8")
    monkeypatch.setenv("INSTALLER_API__BASE_URL", "https://env.example.test")
    monkeypatch.setattr(cs, "_user_config_path", lambda: user_ini)
    service = cs.ConfigService()
    assert service.api.base_url == "https://user.example.test"
    assert service.meta_source("Api", "base_url")["layer"] == "user"


def test_get_unknown_key_is_none() -> None:
    assert cs.config_service.get("Api", "does_not_exist") is None


def test_invalid_values_raise_config_error(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(cs, "_user_config_path", lambda: tmp_path / "missing.ini")
    monkeypatch.setenv("INSTALLER_SIGNATURE__QUALITY", "1.5")
    with pytest.raises(cs.ConfigError):
        cs.ConfigService()
    monkeypatch.setenv("INSTALLER_SIGNATURE__QUALITY", "high")
    with pytest.raises(cs.ConfigError):
        cs.ConfigService()


def test_base_url_must_be_http(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(cs, "_user_config_path", lambda: tmp_path / "missing.ini")
    monkeypatch.setenv("INSTALLER_API__BASE_URL", "ftp://example.test")
    with pytest.raises(cs.ConfigError):
        cs.ConfigService()
