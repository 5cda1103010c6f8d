"""Interactive generation of missing config files.

When the cascade reaches a config file that does not exist yet, the user
is walked through the questions needed to write it. Answers are rendered
back into the same text format the parser reads.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from nasher.project.models import User
from nasher.project.parser import format_pair
from nasher.project.paths import FilesystemError
from nasher.types import Prompter

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_PATTERN = "src/*.{nss,json}"
DEFAULT_TARGET_FILE = "demo.mod"
DEFAULT_COMPILER_FLAGS = "-lowqey"


def command_output_or_default(cmd: list[str], default: str = "") -> str:
    """Run a command and return its stripped stdout, or default on failure."""
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=10, check=False
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not run %s: %s", cmd[0], e)
        return default
    if result.returncode != 0:
        return default
    return result.stdout.strip()


def generate_global_config(
    prompter: Prompter,
    install_dir: str,
    compiler_binary: str = "nwnsc",
) -> str:
    """Ask for user and compiler settings and render the global config.

    Args:
        prompter: Source of answers.
        install_dir: Suggested game installation directory.
        compiler_binary: Suggested script compiler command.

    Returns:
        Config file text.
    """
    default_name = command_output_or_default(["git", "config", "--get", "user.name"])
    default_email = command_output_or_default(["git", "config", "--get", "user.email"])

    logger.info("Generating global config file")
    name = prompter.ask("What is your name?", default_name)
    email = prompter.ask("What is your email?", default_email)
    install = prompter.ask(
        "Where is your Neverwinter Nights installation located?", install_dir
    )
    binary = prompter.ask(
        "What is the command to run your script compiler?", compiler_binary
    )
    flags = prompter.ask(
        "What script compiler flags should always be used?", DEFAULT_COMPILER_FLAGS
    )

    lines = [
        "[User]",
        format_pair("name", name),
        format_pair("email", email),
        format_pair("install", install),
        "",
        "[Compiler]",
        format_pair("binary", binary),
    ]
    lines.extend(format_pair("flags", flag) for flag in flags.split())
    return "\n".join(lines) + "\n"


def generate_target(prompter: Prompter, default_name: str) -> str:
    """Ask for one target and render its section."""
    lines = [
        "[Target]",
        format_pair("name", prompter.ask("Target name:", default_name)),
        format_pair("file", prompter.ask("File to generate:", DEFAULT_TARGET_FILE)),
        format_pair("description", prompter.ask("File description:")),
    ]

    default_source = DEFAULT_SOURCE_PATTERN
    while True:
        source = prompter.ask("Source pattern:", default_source, allow_blank=False)
        lines.append(format_pair("source", source))
        default_source = ""
        if not prompter.confirm(
            "Do you wish to add another source pattern?", repeat=True
        ):
            break
    return "\n".join(lines) + "\n"


def generate_package_config(prompter: Prompter, user: User) -> str:
    """Ask for package metadata and targets and render the package config.

    Args:
        prompter: Source of answers.
        user: User settings loaded so far, used as author defaults.

    Returns:
        Config file text.
    """
    logger.info("Generating package config file")
    default_url = command_output_or_default(["git", "remote", "get-url", "origin"])

    lines = [
        "[Package]",
        format_pair("name", prompter.ask("Enter your package name:")),
        format_pair("description", prompter.ask("Package description:")),
        format_pair("version", prompter.ask("Package version:", "0.1.0")),
        format_pair("url", prompter.ask("Package URL:", default_url)),
    ]

    default_author, default_email = user.name, user.email
    while True:
        author = prompter.ask("Author name:", default_author, allow_blank=False)
        email = prompter.ask("Author email:", default_email)
        if email.strip():
            lines.append(format_pair("author", f"{author} <{email}>"))
        else:
            lines.append(format_pair("author", author))
        if not prompter.confirm("Do you wish to add another author?", repeat=True):
            break
        default_author = default_email = ""

    text = "\n".join(lines) + "\n"
    target_name = "default"
    while True:
        text += "\n" + generate_target(prompter, target_name)
        target_name = ""
        if not prompter.confirm("Do you wish to add another target?", repeat=True):
            break
    return text


def write_config_file(path: Path, text: str) -> None:
    """Write generated config text, creating parent directories.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    logger.info("Creating configuration file at %s", path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(
            f"Could not create config file at {path}: {e}", path=path
        ) from e


__all__ = [
    "command_output_or_default",
    "generate_global_config",
    "generate_package_config",
    "generate_target",
    "write_config_file",
]
