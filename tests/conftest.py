"""Shared fixtures for nasher tests."""

from pathlib import Path

import pytest
from helpers import ScriptedPrompter

from nasher.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the real home directory."""
    install = tmp_path / "nwn"
    return Settings(
        global_config=tmp_path / "home" / "nasher.cfg",
        install_dir=install,
        compiler_binary="nwnsc",
    )


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """Prompter accepting every default."""
    return ScriptedPrompter()
