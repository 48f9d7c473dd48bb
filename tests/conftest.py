from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep settings discovery away from the developer's real config files."""
    monkeypatch.delenv("SECRETSWEEP_CONFIG", raising=False)
    monkeypatch.setattr("secretsweep.config._SEARCH_PATHS", [Path(".secretsweep.yaml")])
    monkeypatch.chdir(tmp_path)
