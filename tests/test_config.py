from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bluectl.core.config import build_settings, config_path, load_settings
from bluectl.core.errors import ConfigValidationError
from bluectl.core.model import Settings, SourceKind


def _write_config(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_missing_config_uses_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    loaded = load_settings()
    assert loaded.settings == Settings()
    assert loaded.source is None
    assert loaded.settings.sources == (SourceKind.PROFILER_JSON,)
    assert loaded.settings.use_registry_battery is False


def test_config_path_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    assert config_path() == tmp_path / "cfg" / "bluectl" / "config.yaml"


def test_user_config_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write_config(
        tmp_path / "cfg" / "bluectl" / "config.yaml",
        """
sources: [paired, profiler-text]
merge_duplicates: true
command_timeout_s: 2.5
battery_thresholds:
  healthy: 60
  critical: 15
log_level: DEBUG
""",
    )

    loaded = load_settings()
    settings = loaded.settings
    assert loaded.source == tmp_path / "cfg" / "bluectl" / "config.yaml"
    assert settings.sources == (SourceKind.PAIRED, SourceKind.PROFILER_TEXT)
    assert settings.merge_duplicates is True
    assert settings.command_timeout_s == 2.5
    assert settings.battery_thresholds.healthy == 60
    assert settings.battery_thresholds.critical == 15
    assert settings.log_level == "DEBUG"
    assert settings.use_registry_battery is True


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "")
    assert load_settings(path).settings == Settings()


def test_registry_battery_can_be_forced_off() -> None:
    settings = build_settings({"sources": ["paired"], "registry_battery": False})
    assert settings.use_registry_battery is False


def test_unknown_key_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "interactive: true\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_unknown_source_rejected() -> None:
    with pytest.raises(ConfigValidationError):
        build_settings({"sources": ["bluetoothctl"]})


def test_inverted_thresholds_rejected() -> None:
    with pytest.raises(ConfigValidationError):
        build_settings({"battery_thresholds": {"healthy": 20, "critical": 50}})


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "- paired\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "merge_duplicates: true\nmerge_duplicates: false\n")
    with pytest.raises(ConfigValidationError):
        load_settings(path)


def test_repeated_source_warns(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "sources: [paired, paired]\n")
    loaded = load_settings(path)
    assert any("more than once" in warning for warning in loaded.warnings)


def test_repeated_source_warning_is_not_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "config.yaml"
    _write_config(path, "sources: [paired, paired]\n")
    with caplog.at_level(logging.WARNING, logger="bluectl.core.config"):
        loaded = load_settings(path)
    assert loaded.warnings
    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
