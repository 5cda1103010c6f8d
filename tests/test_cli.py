"""Smoke tests for the CLI.

These tests run commands against a temporary project with the external
tools replaced by a fake toolchain.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from helpers import FakeToolchain, write_file
from typer.testing import CliRunner

from nasher import __version__
from nasher.builds.toolchain import Toolchain
from nasher.cli import AnswerMode, ConsolePrompter, app

runner = CliRunner()


def _flat(output: str) -> str:
    """Collapse console line wrapping."""
    return " ".join(output.split())


BASE = 1_600_000_000.0

GLOBAL_CFG = """\
[User]
name = "Jane"
email = "jane@example.com"

[Compiler]
flags = "-lowqey"
"""

PACKAGE_CFG = """\
[Package]
name = "Demo"

[Target]
name = "default"
file = "demo.mod"
description = "The module"
source = "src/*.nss"

[Target]
name = "haks"
file = "demo.hak"
source = "hak/*"
"""


@pytest.fixture
def env(tmp_path: Path, monkeypatch) -> Path:
    """Isolate settings and tools; returns the home config directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("NASHER_GLOBAL_CONFIG", str(home / "nasher.cfg"))
    monkeypatch.setenv("NASHER_INSTALL_DIR", str(tmp_path / "nwn"))
    write_file(home / "nasher.cfg", GLOBAL_CFG)
    return home


@pytest.fixture
def project(tmp_path: Path, env: Path, monkeypatch) -> Path:
    """A project directory set as the current directory."""
    root = tmp_path / "project"
    write_file(root / "nasher.cfg", PACKAGE_CFG)
    write_file(root / "src" / "main.nss", "void main() {}", mtime=BASE)
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def toolchain():
    """Replace external tools with a fake."""
    fake = FakeToolchain()
    with patch.object(Toolchain, "from_settings", return_value=fake):
        yield fake


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "nasher" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert "Usage:" in result.stdout


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command(self, env) -> None:
        """config shows the effective settings."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Global config" in result.stdout
        assert "Archive tool" in result.stdout

    def test_config_json(self, env) -> None:
        """config --json outputs JSON."""
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        assert '"erf_binary"' in result.stdout


class TestCLIProject:
    """Test commands that need a project."""

    def test_not_a_project(self, tmp_path, env, monkeypatch) -> None:
        """Commands fail outside a project."""
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 1
        assert "not a nasher project" in _flat(result.stdout)

    def test_list(self, project) -> None:
        """list prints target names in order."""
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        lines = result.stdout.split()
        assert lines.index("default") < lines.index("haks")

    def test_list_verbose(self, project) -> None:
        """list --verbose shows target details."""
        result = runner.invoke(app, ["--verbose", "list"])
        assert result.exit_code == 0
        assert "The module" in result.stdout
        assert "src/*.nss" in result.stdout

    def test_list_from_subdirectory(self, project, monkeypatch) -> None:
        """The project is found from a subdirectory."""
        monkeypatch.chdir(project / "src")
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "default" in result.stdout

    def test_dump(self, project) -> None:
        """dump prints the merged config as YAML."""
        result = runner.invoke(app, ["dump"])
        assert result.exit_code == 0
        assert "targets:" in result.stdout
        assert "Jane" in result.stdout

    def test_dump_long_values_stay_valid_yaml(self, project) -> None:
        """Long values are not wrapped, so dump output parses back."""
        pattern = "src/" + "a_very_long_directory_name/" * 5 + "**/*.{nss,json}"
        (project / "nasher.cfg").write_text(
            PACKAGE_CFG + f'source = "{pattern}"\n'
        )

        result = runner.invoke(app, ["--quiet", "dump"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["targets"]["haks"]["sources"] == ["hak/*", pattern]
        assert data["user"]["email"] == "jane@example.com"

    def test_unknown_target(self, project, toolchain) -> None:
        """Unknown targets fail with their name."""
        result = runner.invoke(app, ["compile", "nope"])
        assert result.exit_code == 1
        assert "Unknown target: nope" in _flat(result.stdout)

    def test_compile(self, project, toolchain) -> None:
        """compile runs the compiler in the build directory."""
        result = runner.invoke(app, ["compile"])
        assert result.exit_code == 0
        assert toolchain.compiled == [["nwnsc", "-lowqey", "main.nss"]]
        assert "Compiled target default" in result.stdout

    def test_pack(self, project, toolchain) -> None:
        """pack writes the artifact."""
        result = runner.invoke(app, ["pack"])
        assert result.exit_code == 0
        assert (project / "demo.mod").is_file()

    def test_pack_declined_is_clean_exit(self, project, toolchain) -> None:
        """Declining to overwrite a newer artifact exits 0 without packing."""
        write_file(project / "demo.mod", "keep", mtime=BASE + 5)
        result = runner.invoke(app, ["pack"], input="\n")
        assert result.exit_code == 0
        assert "Aborted" in result.stdout
        assert (project / "demo.mod").read_text() == "keep"
        assert toolchain.packed == []

    def test_pack_yes_overrides_default(self, project, toolchain) -> None:
        """--yes answers the overwrite prompt."""
        write_file(project / "demo.mod", "keep", mtime=BASE + 5)
        result = runner.invoke(app, ["--yes", "pack"])
        assert result.exit_code == 0
        assert (project / "demo.mod").read_text() != "keep"

    def test_install_missing_dir(self, project, toolchain) -> None:
        """install fails when the install directory does not exist."""
        result = runner.invoke(app, ["install"])
        assert result.exit_code == 1
        assert "directory does not exist" in _flat(result.stdout)

    def test_pack_output_dir_blocked(self, project) -> None:
        """A file where the output directory should be is a clean error."""
        (project / "nasher.cfg").write_text(
            '[Target]\nname = "default"\nfile = "out/demo.mod"\nsource = "src/*"\n'
        )
        (project / "out").write_text("not a directory")
        completed = MagicMock(returncode=0)

        with patch("subprocess.run", return_value=completed):
            result = runner.invoke(app, ["pack"])

        assert result.exit_code == 1
        output = _flat(result.stdout)
        assert "Error: Could not create directory" in output
        assert "out" in output


class TestCLIInit:
    """Test init command."""

    def test_init_with_defaults(self, tmp_path, env, toolchain) -> None:
        """init creates a package config and no build directory."""
        target = tmp_path / "newmod"
        with patch(
            "nasher.project.generate.command_output_or_default", return_value=""
        ):
            result = runner.invoke(app, ["--default", "init", str(target)])

        assert result.exit_code == 0
        assert (target / "nasher.cfg").is_file()
        assert not (target / ".nasher").exists()

    def test_init_with_yes_finishes(self, tmp_path, env, toolchain) -> None:
        """--yes answers "add another?" questions with no, so init ends."""
        target = tmp_path / "newmod"
        with patch(
            "nasher.project.generate.command_output_or_default", return_value=""
        ):
            result = runner.invoke(app, ["--yes", "init", str(target)])

        assert result.exit_code == 0
        text = (target / "nasher.cfg").read_text()
        assert text.count("[Target]") == 1
        assert text.count("source = ") == 1
        assert text.count("author = ") == 1

    def test_init_existing_project(self, project) -> None:
        """init refuses an existing project."""
        result = runner.invoke(app, ["init", str(project)])
        assert result.exit_code == 1
        assert "already a nasher project" in _flat(result.stdout)


class TestConsolePrompter:
    """Test ConsolePrompter answer modes."""

    def test_yes_mode(self) -> None:
        """YES answers every confirmation with yes."""
        assert ConsolePrompter(AnswerMode.YES).confirm("?", default=False) is True

    def test_no_mode(self) -> None:
        """NO answers every confirmation with no."""
        assert ConsolePrompter(AnswerMode.NO).confirm("?", default=True) is False

    def test_default_mode(self) -> None:
        """DEFAULT returns the default answers."""
        prompter = ConsolePrompter(AnswerMode.DEFAULT)
        assert prompter.confirm("?", default=True) is True
        assert prompter.ask("Name?", "Jane") == "Jane"

    def test_repeat_questions_take_default_when_auto(self) -> None:
        """Auto-answer modes answer "add another?" questions with the default."""
        for mode in (AnswerMode.YES, AnswerMode.NO, AnswerMode.DEFAULT):
            prompter = ConsolePrompter(mode)
            assert prompter.confirm("Another?", default=False, repeat=True) is False
