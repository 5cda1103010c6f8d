"""Wrappers around the external tools used by the build pipeline.

This module handles:
- Running the script compiler
- Packing and extracting erf/hak/mod archives with the archive tool
- Converting GFF files to and from their JSON representation

Tools always run with an explicit working directory; the process working
directory is never changed.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from nasher.config import Settings
from nasher.project.paths import ensure_dir

logger = logging.getLogger(__name__)

# GFF resource types that are stored in the project as JSON
GFF_EXTENSIONS = (
    "are",
    "bic",
    "dlg",
    "fac",
    "gic",
    "git",
    "gui",
    "ifo",
    "itp",
    "jrl",
    "utc",
    "utd",
    "ute",
    "uti",
    "utm",
    "utp",
    "uts",
    "utt",
    "utw",
)


class ToolExecutionError(Exception):
    """Raised when an external tool cannot run or reports failure."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "tool_error",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code


def run_tool(
    cmd: Sequence[str],
    cwd: Path,
    timeout: int | None = None,
) -> int:
    """Run an external command and return its exit code.

    Output goes straight to the terminal so compiler diagnostics stay
    visible to the user.

    Raises:
        ToolExecutionError: If the command cannot be started or times out.
    """
    cmd_str = shlex.join(cmd)
    logger.debug("Executing: %s (cwd=%s)", cmd_str, cwd)
    try:
        result = subprocess.run(list(cmd), cwd=cwd, timeout=timeout, check=False)
    except subprocess.TimeoutExpired as e:
        raise ToolExecutionError(
            f"{cmd[0]} timed out after {timeout} seconds",
            exit_code=-1,
            code="tool_timeout",
        ) from e
    except OSError as e:
        raise ToolExecutionError(
            f"Failed to execute {cmd[0]}: {e}", code="execution_error"
        ) from e
    return result.returncode


def converted_name(path: Path) -> str:
    """Return the file name a conversion of path produces.

    ``foo.are.json`` converts to ``foo.are`` and ``foo.are`` to
    ``foo.are.json``.
    """
    if path.suffix.lower() == ".json":
        return path.stem
    return path.name + ".json"


@dataclass
class Toolchain:
    """External tool commands used by one run."""

    erf_binary: str = "nwn_erf"
    gff_binary: str = "nwn_gff"
    timeout: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Toolchain:
        return cls(
            erf_binary=settings.erf_binary,
            gff_binary=settings.gff_binary,
            timeout=settings.tool_timeout,
        )

    def run_compiler(self, binary: str, args: Sequence[str], cwd: Path) -> int:
        """Run the script compiler and return its exit code.

        A nonzero exit code is returned to the caller, not raised.
        """
        logger.info("Compiling scripts in %s", cwd)
        return run_tool([binary, *args], cwd=cwd)

    def extract_archive(self, archive: Path, dest_dir: Path) -> None:
        """Extract every resource of archive into dest_dir.

        Raises:
            ToolExecutionError: If extraction fails.
        """
        exit_code = run_tool(
            [self.erf_binary, "-x", "-f", str(archive)],
            cwd=dest_dir,
            timeout=self.timeout,
        )
        if exit_code != 0:
            raise ToolExecutionError(
                f"Could not extract {archive} (exit code {exit_code})",
                exit_code=exit_code,
                code="extract_failed",
            )

    def create_archive(self, out_path: Path, files: Sequence[Path]) -> None:
        """Pack files into out_path.

        Raises:
            FilesystemError: If the output directory cannot be created.
            ToolExecutionError: If packing fails.
        """
        ensure_dir(out_path.parent)
        exit_code = run_tool(
            [self.erf_binary, "-c", "-f", str(out_path), *map(str, files)],
            cwd=out_path.parent,
            timeout=self.timeout,
        )
        if exit_code != 0:
            raise ToolExecutionError(
                f"Could not pack {out_path} (exit code {exit_code})",
                exit_code=exit_code,
                code="pack_failed",
            )

    def convert(self, path: Path, dest_dir: Path | None = None) -> Path:
        """Convert a GFF file to JSON or back.

        Args:
            path: File to convert.
            dest_dir: Output directory; defaults to the file's own directory.

        Returns:
            Path of the converted file.

        Raises:
            ToolExecutionError: If conversion fails.
        """
        out = (dest_dir or path.parent) / converted_name(path)
        exit_code = run_tool(
            [self.gff_binary, "-i", str(path), "-o", str(out)],
            cwd=path.parent,
            timeout=self.timeout,
        )
        if exit_code != 0:
            raise ToolExecutionError(
                f"Could not convert {path} (exit code {exit_code})",
                exit_code=exit_code,
                code="convert_failed",
            )
        return out


__all__ = [
    "GFF_EXTENSIONS",
    "ToolExecutionError",
    "Toolchain",
    "converted_name",
    "run_tool",
]
