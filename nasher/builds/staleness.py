"""Modification-time comparisons that gate overwrites.

Times are POSIX timestamps as returned by ``os.stat().st_mtime``. All
comparisons use whole seconds: copying a file and its timestamp can leave
sub-second differences that must not count as a change.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from nasher.types import Prompter

logger = logging.getLogger(__name__)


def get_mtime(path: Path) -> float:
    """Return a file's modification time."""
    return path.stat().st_mtime


def set_mtime(path: Path, mtime: float) -> None:
    """Set a file's access and modification times to mtime."""
    os.utime(path, (mtime, mtime))


def time_diff(a: float, b: float) -> int:
    """Return a - b in whole seconds, truncated toward zero.

    Positive means a is newer than b; negative means b is newer; zero means
    the two are the same age.
    """
    return int(a - b)


def time_diff_hint(diff: int) -> str:
    """Describe a time_diff result relative to an existing file."""
    if diff > 0:
        return "newer than"
    if diff < 0:
        return "older than"
    return "the same age as"


def default_overwrite_answer(candidate_time: float | None, existing: Path) -> bool:
    """Return the default answer for replacing existing with newer content.

    Only a regression, where the existing file is strictly fresher than
    the content about to replace it, defaults to keeping the existing file.
    """
    if candidate_time is None or not existing.exists():
        return True
    return time_diff(candidate_time, get_mtime(existing)) >= 0


def confirm_overwrite(
    prompter: Prompter, candidate_time: float | None, existing: Path
) -> bool:
    """Ask whether existing may be overwritten.

    Args:
        prompter: Used to ask the question.
        candidate_time: Source time of the replacing content, if known.
        existing: File that would be overwritten.

    Returns:
        True if the overwrite should proceed. Missing files are always
        overwritten without asking.
    """
    if not existing.exists():
        return True

    default = default_overwrite_answer(candidate_time, existing)
    if candidate_time is not None:
        diff = time_diff(candidate_time, get_mtime(existing))
        logger.info("The source file is %s the existing file.", time_diff_hint(diff))
    return prompter.confirm(f"{existing} already exists. Overwrite?", default)


def file_older(path: Path, mtime: float) -> bool:
    """Return True if path is missing or older than mtime by a second or more."""
    if path.exists():
        return time_diff(mtime, get_mtime(path)) > 0
    return True


def file_newer(path: Path, mtime: float) -> bool:
    """Return True if path exists and is newer than mtime by a second or more."""
    if path.exists():
        return time_diff(mtime, get_mtime(path)) < 0
    return False


__all__ = [
    "confirm_overwrite",
    "default_overwrite_answer",
    "file_newer",
    "file_older",
    "get_mtime",
    "set_mtime",
    "time_diff",
    "time_diff_hint",
]
