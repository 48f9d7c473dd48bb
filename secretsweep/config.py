from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, ConfigNotFoundError

DEFAULT_MAX_FILES = 15

_SEARCH_PATHS = [
    Path(".secretsweep.yaml"),
    Path.home() / ".config" / "secretsweep" / "config.yaml",
]

_EXPECTED_TYPES: dict[str, tuple[type, ...]] = {
    "max_files": (int,),
    "workers": (int, type(None)),
    "encoding": (str,),
    "strict_decoding": (bool,),
    "patterns": (str, type(None)),
}


@dataclass(frozen=True)
class Settings:
    max_files: int = DEFAULT_MAX_FILES
    workers: int | None = None
    encoding: str = "utf-8"
    strict_decoding: bool = False
    patterns_path: Path | None = None

    def __post_init__(self) -> None:
        for name in ("max_files", "workers"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigError(f"{name}: must be at least 1, got {value}")

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        valid = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if v is not None and k in valid}
        return replace(self, **changes)


def searched_locations(explicit: Path | None = None) -> list[str]:
    """Return the config locations that would be checked, in order."""
    locations: list[str] = []
    if explicit:
        locations.append(str(explicit))
    env_path = os.environ.get("SECRETSWEEP_CONFIG")
    if env_path:
        locations.append(f"$SECRETSWEEP_CONFIG ({env_path})")
    locations.extend(str(p) for p in _SEARCH_PATHS)
    return locations


def resolve_config_path(explicit: Path | None = None) -> Path | None:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigNotFoundError(f"config file not found: {explicit}")
        return explicit

    env_path = os.environ.get("SECRETSWEEP_CONFIG")
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p

    for p in _SEARCH_PATHS:
        if p.is_file():
            return p

    return None


def load_settings(explicit: Path | None = None) -> Settings:
    """Load settings from the first config file found, or return defaults."""
    path = resolve_config_path(explicit)
    if path is None:
        return Settings()

    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path}: cannot decode as utf-8: {e.reason}") from e
    except OSError as e:
        raise ConfigError(f"{path}: cannot read config file: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e

    if document is None:
        return Settings()
    if not isinstance(document, dict):
        raise ConfigError(f"{path}: expected a YAML mapping at top level")

    errors = _validate_settings(document)
    if errors:
        joined = "\n  ".join(errors)
        raise ConfigError(f"{path}: config validation failed:\n  {joined}")

    patterns = document.get("patterns")
    patterns_path = None
    if patterns is not None:
        # Relative pattern paths are taken from the config file's directory.
        patterns_path = (path.parent / patterns).resolve()

    return Settings(
        max_files=document.get("max_files", DEFAULT_MAX_FILES),
        workers=document.get("workers"),
        encoding=document.get("encoding", "utf-8"),
        strict_decoding=document.get("strict_decoding", False),
        patterns_path=patterns_path,
    )


def _validate_settings(document: dict) -> list[str]:
    errors: list[str] = []
    for key, value in document.items():
        expected = _EXPECTED_TYPES.get(key)
        if expected is None:
            errors.append(f"unknown key '{key}' (valid: {sorted(_EXPECTED_TYPES)})")
            continue
        # bool is an int subclass; only strict_decoding takes one.
        if isinstance(value, bool) and bool not in expected:
            errors.append(f"{key}: expected {_type_names(expected)}, got bool")
        elif not isinstance(value, expected):
            errors.append(f"{key}: expected {_type_names(expected)}, got {type(value).__name__}")

    for key in ("max_files", "workers"):
        value = document.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value < 1:
            errors.append(f"{key}: must be at least 1, got {value}")
    return errors


def _type_names(types: tuple[type, ...]) -> str:
    return " or ".join("null" if t is type(None) else t.__name__ for t in types)
