from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from secretsweep.config import (
    DEFAULT_MAX_FILES,
    Settings,
    load_settings,
    resolve_config_path,
    searched_locations,
)
from secretsweep.errors import ConfigError, ConfigNotFoundError


def _write_config(path: Path, data) -> Path:
    path.write_text(yaml.dump(data))
    return path


# --- discovery ---

def test_defaults_when_no_config_found():
    assert resolve_config_path() is None
    assert load_settings() == Settings()
    assert Settings().max_files == DEFAULT_MAX_FILES == 15


def test_explicit_path_must_exist(tmp_path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_settings(tmp_path / "missing.yaml")


def test_env_var_location(tmp_path, monkeypatch):
    config = _write_config(tmp_path / "env.yaml", {"max_files": 3})
    monkeypatch.setenv("SECRETSWEEP_CONFIG", str(config))
    assert resolve_config_path() == config
    assert load_settings().max_files == 3


def test_env_var_pointing_nowhere_falls_through(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRETSWEEP_CONFIG", str(tmp_path / "missing.yaml"))
    _write_config(tmp_path / ".secretsweep.yaml", {"workers": 2})
    assert load_settings().workers == 2


def test_explicit_path_wins_over_env(tmp_path, monkeypatch):
    explicit = _write_config(tmp_path / "explicit.yaml", {"max_files": 4})
    env = _write_config(tmp_path / "env.yaml", {"max_files": 5})
    monkeypatch.setenv("SECRETSWEEP_CONFIG", str(env))
    assert load_settings(explicit).max_files == 4


def test_searched_locations_lists_every_candidate(monkeypatch):
    monkeypatch.setenv("SECRETSWEEP_CONFIG", "/etc/sweep.yaml")
    locations = searched_locations(Path("mine.yaml"))
    assert locations == ["mine.yaml", "$SECRETSWEEP_CONFIG (/etc/sweep.yaml)", ".secretsweep.yaml"]


# --- contents ---

def test_all_keys_loaded(tmp_path):
    (tmp_path / "rules").mkdir()
    config = _write_config(tmp_path / "c.yaml", {
        "max_files": 10,
        "workers": 2,
        "encoding": "latin-1",
        "strict_decoding": True,
        "patterns": "rules/custom.yaml",
    })
    settings = load_settings(config)
    assert settings == Settings(
        max_files=10,
        workers=2,
        encoding="latin-1",
        strict_decoding=True,
        patterns_path=(tmp_path / "rules" / "custom.yaml").resolve(),
    )


def test_empty_file_gives_defaults(tmp_path):
    config = tmp_path / "c.yaml"
    config.write_text("")
    assert load_settings(config) == Settings()


def test_rejects_non_mapping(tmp_path):
    config = tmp_path / "c.yaml"
    config.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="expected a YAML mapping"):
        load_settings(config)


def test_rejects_invalid_yaml(tmp_path):
    config = tmp_path / "c.yaml"
    config.write_text("max_files: [1\n")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_settings(config)


def test_rejects_unknown_key(tmp_path):
    config = _write_config(tmp_path / "c.yaml", {"max_file": 3})
    with pytest.raises(ConfigError, match="unknown key 'max_file'"):
        load_settings(config)


def test_rejects_wrong_types(tmp_path):
    config = _write_config(tmp_path / "c.yaml", {
        "max_files": "ten",
        "strict_decoding": "yes please",
        "workers": True,
    })
    with pytest.raises(ConfigError) as exc:
        load_settings(config)
    message = str(exc.value)
    assert "max_files: expected int, got str" in message
    assert "strict_decoding: expected bool, got str" in message
    assert "workers: expected int or null, got bool" in message


def test_rejects_non_positive_limits(tmp_path):
    config = _write_config(tmp_path / "c.yaml", {"max_files": 0, "workers": -1})
    with pytest.raises(ConfigError) as exc:
        load_settings(config)
    assert "max_files: must be at least 1, got 0" in str(exc.value)
    assert "workers: must be at least 1, got -1" in str(exc.value)


# --- overrides ---

def test_with_overrides_skips_none():
    base = Settings(max_files=5, encoding="latin-1")
    updated = base.with_overrides(max_files=None, workers=3, encoding=None, unrelated=1)
    assert updated == Settings(max_files=5, workers=3, encoding="latin-1")


def test_with_overrides_returns_new_settings():
    base = Settings()
    updated = base.with_overrides(strict_decoding=True)
    assert base.strict_decoding is False
    assert updated.strict_decoding is True


def test_settings_reject_non_positive_limits():
    with pytest.raises(ConfigError, match="workers: must be at least 1, got 0"):
        Settings(workers=0)
    with pytest.raises(ConfigError, match="max_files: must be at least 1, got -2"):
        Settings().with_overrides(max_files=-2)


# --- unreadable files ---

def test_missing_explicit_path_is_not_found_error(tmp_path):
    with pytest.raises(ConfigNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_rejects_non_utf8_file(tmp_path):
    config = tmp_path / "c.yaml"
    config.write_bytes(b"encoding: latin-1\n# caf\xe9\n")
    with pytest.raises(ConfigError, match="cannot decode as utf-8"):
        load_settings(config)


def test_unreadable_file_is_config_error(tmp_path):
    config = _write_config(tmp_path / "c.yaml", {"max_files": 3})
    with patch("secretsweep.config.open", side_effect=PermissionError(13, "Permission denied"), create=True):
        with pytest.raises(ConfigError, match="cannot read config file: Permission denied"):
            load_settings(config)
