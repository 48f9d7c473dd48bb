from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

import yaml

from ..errors import PatternLoadError
from .models import FindingType, PatternRule, RiskLevel

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_PATH = Path(__file__).resolve().parent.parent / "patterns" / "default.yaml"

_REQUIRED_KEYS = {"id", "type", "risk", "regex"}
_OPTIONAL_KEYS = {"flags", "capture"}
_VALID_FLAGS = {"IGNORECASE": re.IGNORECASE}


def load_pattern_table(path: Path) -> tuple[PatternRule, ...]:
    """Load an ordered pattern table from YAML.

    Every entry is validated before anything is compiled into the table;
    all problems are reported together in one PatternLoadError.
    """
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except FileNotFoundError:
        raise PatternLoadError(f"pattern file not found: {path}") from None
    except UnicodeDecodeError as e:
        raise PatternLoadError(f"{path}: cannot decode as utf-8: {e.reason}") from e
    except OSError as e:
        raise PatternLoadError(f"{path}: cannot read pattern file: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise PatternLoadError(f"{path}: invalid YAML: {e}") from e

    if not isinstance(document, dict):
        raise PatternLoadError(f"{path}: expected a YAML mapping at top level")

    entries = document.get("patterns", [])
    if not isinstance(entries, list):
        raise PatternLoadError(f"{path}: 'patterns' must be a list")

    errors = _validate_entries(entries)
    if errors:
        joined = "\n  ".join(errors)
        raise PatternLoadError(f"{path}: pattern validation failed:\n  {joined}")

    table = tuple(_build_rule(entry) for entry in entries)
    logger.debug("loaded %d pattern rules from %s", len(table), path)
    return table


@lru_cache(maxsize=1)
def default_pattern_table() -> tuple[PatternRule, ...]:
    """The bundled pattern table, loaded once per process."""
    return load_pattern_table(DEFAULT_PATTERNS_PATH)


def _build_rule(entry: dict) -> PatternRule:
    return PatternRule(
        id=entry["id"],
        type=FindingType[entry["type"]],
        risk=RiskLevel[entry["risk"]],
        regex=re.compile(entry["regex"], _compile_flags(entry.get("flags", []))),
        capture=entry.get("capture", 0),
    )


def _compile_flags(names: list[str]) -> int:
    flags = 0
    for name in names:
        flags |= _VALID_FLAGS[name]
    return flags


def _validate_entries(entries: list) -> list[str]:
    """Validate that every entry is complete, compiles, and has a unique id."""
    errors: list[str] = []
    seen_ids: set[str] = set()
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors.append(f"patterns[{i}]: expected dict, got {type(entry).__name__}")
            continue

        label = f"patterns[{i}] (id={entry.get('id', '?')})"
        missing = _REQUIRED_KEYS - entry.keys()
        if missing:
            errors.append(f"{label}: missing keys: {sorted(missing)}")
        unknown = entry.keys() - _REQUIRED_KEYS - _OPTIONAL_KEYS
        if unknown:
            errors.append(f"{label}: unknown keys: {sorted(unknown)}")

        rule_id = entry.get("id")
        if rule_id is not None:
            if rule_id in seen_ids:
                errors.append(f"{label}: duplicate id")
            seen_ids.add(rule_id)

        if "type" in entry and entry["type"] not in FindingType.__members__:
            errors.append(f"{label}: unknown finding type '{entry['type']}'")
        if "risk" in entry and entry["risk"] not in RiskLevel.__members__:
            errors.append(f"{label}: unknown risk level '{entry['risk']}'")

        flags = entry.get("flags", [])
        if not isinstance(flags, list):
            errors.append(f"{label}: 'flags' must be a list, got {type(flags).__name__}")
            flags = []
        for flag in flags:
            if flag not in _VALID_FLAGS:
                errors.append(f"{label}: unknown flag '{flag}' (valid: {sorted(_VALID_FLAGS)})")

        if "regex" in entry:
            errors.extend(_validate_regex(entry, label))

    return errors


def _validate_regex(entry: dict, label: str) -> list[str]:
    source = entry["regex"]
    if not isinstance(source, str) or not source:
        return [f"{label}: 'regex' must be a non-empty string"]
    try:
        compiled = re.compile(source)
    except re.error as e:
        return [f"{label}: regex does not compile: {e}"]

    capture = entry.get("capture", 0)
    if not isinstance(capture, int) or isinstance(capture, bool) or capture < 0:
        return [f"{label}: 'capture' must be a non-negative integer"]
    if capture > compiled.groups:
        return [f"{label}: capture group {capture} out of range (regex has {compiled.groups})"]
    return []
