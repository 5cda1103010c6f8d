"""Build service module.

This module provides the high-level build API:
- run_target(): stage, compile, convert, pack and install one target
- unpack_archive(): extract an existing archive into a source tree
- init_project(): create a package config and optionally unpack into it

Stages run strictly in order. Overwrites of the packed artifact and of
installed files are gated by nasher.builds.staleness.
"""

from __future__ import annotations

import logging
from pathlib import Path

from nasher.builds.sources import stage_sources
from nasher.builds.staleness import confirm_overwrite, get_mtime, set_mtime
from nasher.builds.toolchain import GFF_EXTENSIONS, Toolchain
from nasher.config import Settings
from nasher.project.loader import load_configs
from nasher.project.models import Compiler, ProjectConfig, Target
from nasher.project.parser import ConfigError
from nasher.project.paths import (
    FilesystemError,
    copy_file,
    ensure_dir,
    get_build_dir,
    get_cache_dir,
    get_src_dir,
    package_config_path,
    recreate_dir,
)
from nasher.types import BuildOutcome, BuildStatus, Command, Prompter

logger = logging.getLogger(__name__)

COMPILE_COMMANDS = frozenset({Command.COMPILE, Command.PACK, Command.INSTALL})
PACK_COMMANDS = frozenset({Command.PACK, Command.INSTALL})

# Artifact extension -> subdirectory of the install root
INSTALL_SUBDIRS = {
    "erf": "erf",
    "hak": "hak",
    "mod": "modules",
}


def compile_scripts(
    build_dir: Path, compiler: Compiler, toolchain: Toolchain
) -> int | None:
    """Compile every script in the build directory.

    Args:
        build_dir: Directory holding staged sources.
        compiler: Compiler binary and flags.
        toolchain: External tool runner.

    Returns:
        The compiler's exit code, or None if there was nothing to compile.
    """
    scripts = sorted(p.name for p in build_dir.glob("*.nss"))
    if not scripts:
        logger.info("Skipping compilation: nothing to compile")
        return None

    exit_code = toolchain.run_compiler(
        compiler.binary, [*compiler.flags, *scripts], cwd=build_dir
    )
    if exit_code != 0:
        logger.warning("Finished with error code %d", exit_code)
    return exit_code


def convert_json_files(build_dir: Path, toolchain: Toolchain) -> list[Path]:
    """Convert every ``*.*.json`` file in place and remove the original.

    Returns:
        Paths of the converted files.
    """
    converted: list[Path] = []
    for path in sorted(build_dir.glob("*.*.json")):
        converted.append(toolchain.convert(path))
        path.unlink()
    logger.debug("Converted %d files in %s", len(converted), build_dir)
    return converted


def pack_artifact(
    build_dir: Path,
    artifact: Path,
    reference_time: float | None,
    prompter: Prompter,
    toolchain: Toolchain,
) -> bool:
    """Pack the build directory into artifact.

    Returns:
        False if the user declined to overwrite an existing artifact.

    Raises:
        FilesystemError: If the artifact directory cannot be created.
        ToolExecutionError: If the archive tool fails.
    """
    if not confirm_overwrite(prompter, reference_time, artifact):
        return False

    files = sorted(p for p in build_dir.iterdir() if p.is_file())
    toolchain.create_archive(artifact, files)
    if reference_time is not None:
        set_mtime(artifact, reference_time)
    logger.info("Packed %s", artifact)
    return True


def get_install_dir(artifact: Path, install_root: Path) -> Path:
    """Return the directory an artifact installs into, based on its extension."""
    subdir = INSTALL_SUBDIRS.get(artifact.suffix.lstrip(".").lower())
    root = install_root.expanduser()
    return root / subdir if subdir else root


def install_artifact(
    artifact: Path, install_root: Path, prompter: Prompter
) -> Path | None:
    """Copy a packed artifact into the game's user directory.

    Returns:
        The installed path, or None if the user declined to overwrite.

    Raises:
        FilesystemError: If the artifact or the install directory is missing,
            or the copy fails.
    """
    install_dir = get_install_dir(artifact, install_root)
    logger.info("Installing %s into %s", artifact.name, install_dir)

    if not artifact.is_file():
        raise FilesystemError(
            f"Cannot install {artifact}: file does not exist", path=artifact
        )
    if not install_dir.is_dir():
        raise FilesystemError(
            f"Cannot install to {install_dir}: directory does not exist",
            path=install_dir,
        )

    mtime = get_mtime(artifact)
    installed = install_dir / artifact.name
    if not confirm_overwrite(prompter, mtime, installed):
        return None

    copy_file(artifact, installed, preserve_times=False)
    set_mtime(installed, mtime)
    logger.info("Installed %s", artifact.name)
    return installed


def run_target(
    command: Command,
    config: ProjectConfig,
    target: Target,
    root: Path,
    prompter: Prompter,
    toolchain: Toolchain,
) -> BuildOutcome:
    """Run the build pipeline for a target up to the requested command.

    Args:
        command: compile, pack or install.
        config: Merged project configuration.
        target: Resolved target.
        root: Package root; source patterns and the artifact path are
            relative to it.
        prompter: Used for overwrite confirmations.
        toolchain: External tool runner.

    Returns:
        BuildOutcome; status is DECLINED if an overwrite was refused.

    Raises:
        FilesystemError: If a directory or input file is missing, or a
            file cannot be copied.
        ToolExecutionError: If packing or conversion fails.
    """
    if command not in COMPILE_COMMANDS:
        raise ValueError(f"Not a build command: {command.value}")
    if command in PACK_COMMANDS and not target.file:
        raise ConfigError(f"Target {target.name} does not declare an output file")

    build_dir = recreate_dir(get_build_dir(root, target.name))
    staged = stage_sources(target.sources, root, build_dir)
    outcome = BuildOutcome(
        status=BuildStatus.SUCCEEDED,
        target=target.name,
        build_dir=build_dir,
        reference_time=staged.reference_time,
    )

    exit_code = compile_scripts(build_dir, config.compiler, toolchain)
    if exit_code:
        outcome.warnings.append(f"Compiler finished with error code {exit_code}")

    if command not in PACK_COMMANDS:
        return outcome

    convert_json_files(build_dir, toolchain)

    artifact = root / target.file
    logger.info("Packing files for target %s into %s", target.name, target.file)
    if not pack_artifact(
        build_dir, artifact, staged.reference_time, prompter, toolchain
    ):
        outcome.status = BuildStatus.DECLINED
        return outcome
    outcome.artifact = artifact

    if command is Command.INSTALL:
        installed = install_artifact(artifact, Path(config.user.install), prompter)
        if installed is None:
            outcome.status = BuildStatus.DECLINED
        outcome.installed = installed

    return outcome


def unpack_archive(
    archive: Path,
    dest_dir: Path,
    toolchain: Toolchain,
    cache_root: Path | None = None,
) -> list[Path]:
    """Extract an archive into a source tree.

    GFF resources are converted to JSON under ``<dest_dir>/<ext>/`` and
    scripts are copied to ``<dest_dir>/nss/``. The raw archive contents are
    extracted into a cache under cache_root (default: dest_dir).

    Returns:
        Paths of the files written into dest_dir.

    Raises:
        FilesystemError: If the archive does not exist.
        ToolExecutionError: If extraction or conversion fails.
    """
    archive = archive.expanduser().resolve()
    if not archive.is_file():
        raise FilesystemError(
            f"Cannot unpack file {archive}: file does not exist", path=archive
        )

    cache_dir = recreate_dir(get_cache_dir(archive, cache_root or dest_dir))
    logger.info("Unpacking %s into %s", archive.name, dest_dir)
    toolchain.extract_archive(archive, cache_dir)

    written: list[Path] = []
    for ext in GFF_EXTENSIONS:
        files = sorted(cache_dir.glob(f"*.{ext}"))
        if not files:
            continue
        out_dir = ensure_dir(dest_dir / ext)
        for path in files:
            written.append(toolchain.convert(path, out_dir))

    scripts = sorted(cache_dir.glob("*.nss"))
    if scripts:
        nss_dir = ensure_dir(dest_dir / "nss")
        for path in scripts:
            dest = nss_dir / path.name
            copy_file(path, dest)
            written.append(dest)

    logger.info("Unpacked %d files from %s", len(written), archive.name)
    return written


def init_project(
    project_dir: Path,
    prompter: Prompter,
    settings: Settings,
    toolchain: Toolchain,
    archive: Path | None = None,
) -> ProjectConfig:
    """Create a new project in project_dir.

    The global config is generated first if missing so that its user
    details can seed the package authors.

    Raises:
        FilesystemError: If project_dir is already a nasher project.
    """
    pkg_config = package_config_path(project_dir)
    if pkg_config.exists():
        raise FilesystemError(
            f"{project_dir} is already a nasher project",
            path=pkg_config,
            code="already_a_project",
        )

    logger.info("Initializing into %s", project_dir)
    config = load_configs([settings.global_config, pkg_config], prompter, settings)
    logger.info("Project initialized")

    if archive is not None:
        unpack_archive(
            archive, get_src_dir(project_dir), toolchain, cache_root=project_dir
        )
    return config


__all__ = [
    "INSTALL_SUBDIRS",
    "compile_scripts",
    "convert_json_files",
    "get_install_dir",
    "init_project",
    "install_artifact",
    "pack_artifact",
    "run_target",
    "unpack_archive",
]
