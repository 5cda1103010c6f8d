"""Source staging for builds.

This module handles:
- Expanding target source patterns (with ``{a,b}`` alternatives)
- Copying matched files into the flat build directory
- Tracking the newest source file, whose time stamps the packed artifact
"""

from __future__ import annotations

import glob
import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nasher.builds.staleness import get_mtime, time_diff
from nasher.project.paths import copy_file

logger = logging.getLogger(__name__)

BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups in a glob pattern.

    Groups are expanded left to right, so ``src/*.{nss,json}`` yields
    ``["src/*.nss", "src/*.json"]`` in that order.
    """
    match = BRACE_RE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def walk_pattern(pattern: str, root: Path) -> Iterator[Path]:
    """Yield files matching pattern relative to root, in sorted order."""
    seen: set[str] = set()
    for expanded in expand_braces(pattern):
        for match in sorted(glob.glob(expanded, root_dir=root, recursive=True)):
            path = root / match
            if match in seen or not path.is_file():
                continue
            seen.add(match)
            yield path


@dataclass
class StagedSources:
    """Result of staging a target's sources.

    Attributes:
        files: Staged copies, in copy order.
        newest: Source file with the latest modification time, if any.
        reference_time: Modification time of newest, if any.
    """

    files: list[Path] = field(default_factory=list)
    newest: Path | None = None
    reference_time: float | None = None


def stage_sources(patterns: Sequence[str], root: Path, build_dir: Path) -> StagedSources:
    """Copy every source matched by patterns into build_dir.

    Files are flattened to their names; a later match with the same name
    replaces the earlier copy. Only a strictly newer file replaces the
    tracked newest source, so ties keep the first file encountered.

    Args:
        patterns: Source glob patterns, relative to root.
        root: Package root.
        build_dir: Existing, empty build directory.

    Returns:
        StagedSources describing what was copied.
    """
    staged = StagedSources()
    for pattern in patterns:
        logger.debug("Copying source files from %s", pattern)
        for source in walk_pattern(pattern, root):
            mtime = get_mtime(source)
            newest_time = staged.reference_time
            if newest_time is None or time_diff(mtime, newest_time) > 0:
                staged.newest = source
                staged.reference_time = mtime

            dest = build_dir / source.name
            logger.debug("Copying %s", source)
            copy_file(source, dest)
            staged.files.append(dest)

    if staged.newest is None:
        logger.warning("No source files matched for %s", ", ".join(patterns))
    else:
        logger.debug("Newest source file: %s", staged.newest)
    return staged


__all__ = [
    "StagedSources",
    "expand_braces",
    "stage_sources",
    "walk_pattern",
]
