"""Shared type definitions for nasher.

This module contains enums, dataclasses and protocols shared across
subpackages to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol


class Command(str, Enum):
    """Operation requested on the command line."""

    INIT = "init"
    LIST = "list"
    UNPACK = "unpack"
    COMPILE = "compile"
    PACK = "pack"
    INSTALL = "install"


class BuildStatus(str, Enum):
    """Final status of a build pipeline run."""

    SUCCEEDED = "succeeded"
    DECLINED = "declined"


class AnswerMode(str, Enum):
    """How prompts are answered."""

    ASK = "ask"
    YES = "yes"
    NO = "no"
    DEFAULT = "default"


class Prompter(Protocol):
    """Interactive question source used by config generation and builds."""

    def ask(self, question: str, default: str = "", allow_blank: bool = True) -> str:
        """Ask a free-form question and return the answer."""
        ...

    def confirm(
        self, question: str, default: bool = False, repeat: bool = False
    ) -> bool:
        """Ask a yes/no question and return the answer.

        repeat marks "add another?" questions that extend a list; auto-answer
        modes give these their default so generation loops terminate.
        """
        ...


@dataclass
class BuildOutcome:
    """Result of running the build pipeline for one target."""

    status: BuildStatus
    target: str
    build_dir: Path
    reference_time: float | None = None
    artifact: Path | None = None
    installed: Path | None = None
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "AnswerMode",
    "BuildOutcome",
    "BuildStatus",
    "Command",
    "Prompter",
]
