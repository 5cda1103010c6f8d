"""Project layout and discovery.

A nasher project is any directory holding a nasher.cfg file. Build and
cache directories live under a hidden .nasher directory at the package
root so they never mix with sources.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

PACKAGE_CONFIG_NAME = "nasher.cfg"
WORK_DIR_NAME = ".nasher"


class FilesystemError(Exception):
    """Raised when a required path is missing or cannot be created."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        code: str = "filesystem_error",
    ) -> None:
        super().__init__(message)
        self.path = path
        self.code = code


def package_config_path(root: Path) -> Path:
    """Return the package config file for a project root."""
    return root / PACKAGE_CONFIG_NAME


def find_package_root(start: Path | None = None) -> Path | None:
    """Find the nearest directory at or above start holding nasher.cfg.

    Args:
        start: Directory to search from (defaults to the current directory).

    Returns:
        The package root, or None if no package config was found.
    """
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if package_config_path(candidate).is_file():
            return candidate
    return None


def require_package_root(start: Path | None = None) -> Path:
    """Like find_package_root, but fail when no project is found.

    Raises:
        FilesystemError: If no package config is discoverable.
    """
    root = find_package_root(start)
    if root is None:
        raise FilesystemError(
            "This is not a nasher project. Please run nasher init.",
            path=start or Path.cwd(),
            code="not_a_project",
        )
    return root


def get_build_dir(root: Path, target_name: str) -> Path:
    """Return the scratch build directory for a target."""
    return root / WORK_DIR_NAME / "build" / target_name


def get_cache_dir(archive: Path, dest_dir: Path) -> Path:
    """Return the extraction cache for an archive unpacked into dest_dir."""
    return dest_dir / WORK_DIR_NAME / "cache" / archive.name


def get_src_dir(root: Path) -> Path:
    """Return the default source directory for a project."""
    return root / "src"


def ensure_dir(path: Path) -> Path:
    """Create a directory (and parents) if needed.

    Raises:
        FilesystemError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create directory {path}: {e}", path=path) from e
    return path


def copy_file(source: Path, dest: Path, preserve_times: bool = True) -> Path:
    """Copy source to dest, optionally keeping its timestamps.

    Raises:
        FilesystemError: If the copy fails.
    """
    copy = shutil.copy2 if preserve_times else shutil.copyfile
    try:
        copy(source, dest)
    except OSError as e:
        raise FilesystemError(
            f"Could not copy {source} to {dest}: {e}", path=dest
        ) from e
    return dest


def recreate_dir(path: Path) -> Path:
    """Remove a directory tree if present and create it empty.

    Raises:
        FilesystemError: If the directory cannot be removed or created.
    """
    if path.exists():
        logger.debug("Removing %s", path)
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(
                f"Could not remove directory {path}: {e}", path=path
            ) from e
    return ensure_dir(path)


__all__ = [
    "PACKAGE_CONFIG_NAME",
    "FilesystemError",
    "copy_file",
    "ensure_dir",
    "find_package_root",
    "get_build_dir",
    "get_cache_dir",
    "get_src_dir",
    "package_config_path",
    "recreate_dir",
    "require_package_root",
]
