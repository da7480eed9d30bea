"""Shared pytest fixtures for tomlconf tests."""

import appdirs
import pytest


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the Linux config directory lookup at a temp directory."""
    home = tmp_path / "xdg"
    monkeypatch.setattr(appdirs, "system", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def demo_path(config_home):
    """Where the com/Example/Demo config.toml ends up on Linux."""
    return config_home / "demo" / "config.toml"
