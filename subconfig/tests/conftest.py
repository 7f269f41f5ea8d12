"""Shared fixtures for subconfig tests."""

import json
import os
from pathlib import Path

import pytest
import yaml


def _write_tier(root: Path, *segments: str, data, ext: str = "yaml") -> Path:
    *dirs, name = segments
    path = root.joinpath(*dirs, f"{name}.{ext}")
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(data) if ext == "json" else yaml.safe_dump(data)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def write_tier():
    """Write a tier file ``<root>/<segments...>.<ext>`` and return its path."""
    return _write_tier


@pytest.fixture()
def config_root(tmp_path):
    """Empty configuration root directory."""
    root = tmp_path / "config"
    root.mkdir()
    return root


@pytest.fixture()
def tiered_root(config_root):
    """Configuration root holding all three tiers for the ``api`` subproject."""
    _write_tier(config_root, "env", "common", data={"x": 1, "app": {"name": "base"}})
    _write_tier(config_root, "env", "api", "common", data={"y": 2})
    _write_tier(
        config_root, "env", "api", "prod", data={"x": 3, "merge_config": False}
    )
    return config_root


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host environment variables out of the tests."""
    monkeypatch.delenv("APP_ENV", raising=False)
    for key in list(os.environ):
        if key.startswith("SUBCONFIG_"):
            monkeypatch.delenv(key, raising=False)
