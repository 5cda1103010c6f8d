"""Configuration cascade loader.

Config files are applied in order, lowest priority first (normally the
global user config, then the package config). Scalars are last-write-wins;
repeatable keys (compiler flags, package authors, target sources)
accumulate across every file. Targets are merged by normalized name.

Parsing a file is a small state machine: either no target is pending, or
a Target section is accumulating. Every section start and the end of each
file flush the pending target into the builder.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nasher.config import Settings, get_settings
from nasher.project.generate import (
    generate_global_config,
    generate_package_config,
    write_config_file,
)
from nasher.project.models import (
    Compiler,
    Package,
    ProjectConfig,
    Target,
    User,
    normalize,
)
from nasher.project.parser import ConfigError, SectionStart, iter_events
from nasher.types import Prompter

logger = logging.getLogger(__name__)


@dataclass
class TargetBuilder:
    """Accumulator for one [Target] section.

    Scalar fields stay None until the section sets them so that merging
    into an existing target only overwrites what this section declared.
    """

    name: str = ""
    file: str | None = None
    description: str | None = None
    sources: list[str] = field(default_factory=list)

    def set(self, key: str, value: str) -> None:
        if key == "name":
            self.name = normalize(value)
        elif key == "description":
            self.description = value
        elif key == "file":
            self.file = value
        elif key == "source":
            self.sources.append(value)
        else:
            raise KeyError(key)


@dataclass
class ConfigBuilder:
    """Mutable state of the cascade; frozen into a ProjectConfig by build()."""

    user_name: str = ""
    user_email: str = ""
    install: str = ""
    compiler_binary: str = "nwnsc"
    compiler_flags: list[str] = field(default_factory=list)
    package_name: str = ""
    package_description: str = ""
    package_version: str = ""
    package_url: str = ""
    package_authors: list[str] = field(default_factory=list)
    targets: dict[str, TargetBuilder] = field(default_factory=dict)

    @classmethod
    def with_defaults(cls, settings: Settings) -> ConfigBuilder:
        """Create a builder seeded with built-in defaults."""
        return cls(
            install=str(settings.install_dir),
            compiler_binary=settings.compiler_binary,
        )

    @property
    def user(self) -> User:
        return User(name=self.user_name, email=self.user_email, install=self.install)

    def set_user(self, key: str, value: str) -> None:
        if key == "name":
            self.user_name = value
        elif key == "email":
            self.user_email = value
        elif key == "install":
            self.install = value
        else:
            raise KeyError(key)

    def set_compiler(self, key: str, value: str) -> None:
        if key == "binary":
            self.compiler_binary = value
        elif key == "flags":
            self.compiler_flags.append(value)
        else:
            raise KeyError(key)

    def set_package(self, key: str, value: str) -> None:
        if key == "name":
            self.package_name = value
        elif key == "description":
            self.package_description = value
        elif key == "version":
            self.package_version = value
        elif key == "author":
            self.package_authors.append(value)
        elif key == "url":
            self.package_url = value
        else:
            raise KeyError(key)

    def add_target(self, pending: TargetBuilder) -> None:
        """Merge a finished target section into the cascade.

        Targets without a name are discarded.
        """
        if not pending.name:
            if pending.file or pending.sources:
                logger.debug("Discarding target section without a name")
            return

        existing = self.targets.get(pending.name)
        if existing is None:
            self.targets[pending.name] = pending
            return

        logger.debug("Merging target %s", pending.name)
        if pending.file is not None:
            existing.file = pending.file
        if pending.description is not None:
            existing.description = pending.description
        existing.sources.extend(pending.sources)

    def build(self) -> ProjectConfig:
        """Freeze the accumulated state."""
        return ProjectConfig(
            user=self.user,
            compiler=Compiler(
                binary=self.compiler_binary, flags=tuple(self.compiler_flags)
            ),
            package=Package(
                name=self.package_name,
                description=self.package_description,
                version=self.package_version,
                url=self.package_url,
                authors=tuple(self.package_authors),
            ),
            targets={
                name: Target(
                    name=name,
                    file=t.file or "",
                    description=t.description or "",
                    sources=tuple(t.sources),
                )
                for name, t in self.targets.items()
            },
        )


def apply_config_text(builder: ConfigBuilder, text: str, path: str) -> None:
    """Apply one config file's contents to the builder.

    Args:
        builder: Cascade state to mutate.
        text: File contents.
        path: File name used in messages.

    Raises:
        ConfigError: On syntax errors or unknown keys in known sections.
    """
    section = ""
    pending: TargetBuilder | None = None

    for event in iter_events(text, path):
        if isinstance(event, SectionStart):
            if pending is not None:
                builder.add_target(pending)
                pending = None
            logger.debug("Section: [%s]", event.section)
            section = normalize(event.section)
            if section == "target":
                pending = TargetBuilder()
            continue

        key = normalize(event.key)
        logger.debug("Option: %s: %s", key, event.value)
        try:
            if section == "user":
                builder.set_user(key, event.value)
            elif section == "compiler":
                builder.set_compiler(key, event.value)
            elif section == "package":
                builder.set_package(key, event.value)
            elif section == "target" and pending is not None:
                pending.set(key, event.value)
            else:
                logger.debug("Ignoring %s outside a known section", key)
        except KeyError:
            raise ConfigError(
                f"Error parsing {path}: unknown key/value pair "
                f"'{event.key}={event.value}' in section [{section}] "
                f"(line {event.line})",
                path=path,
                line=event.line,
            ) from None

    if pending is not None:
        builder.add_target(pending)


def parse_config_file(builder: ConfigBuilder, path: Path) -> None:
    """Read a config file and apply it to the builder.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    logger.debug("File: %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot open config file: {path}", path=str(path)) from e
    apply_config_text(builder, text, str(path))


def dump_config(config: ProjectConfig) -> None:
    """Log the merged configuration at debug level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug("Beginning configuration dump")
    logger.debug("User: %s", config.user.name)
    logger.debug("Email: %s", config.user.email)
    logger.debug("Install: %s", config.user.install)
    logger.debug("Compiler: %s", config.compiler.binary)
    logger.debug("Flags: %s", " ".join(config.compiler.flags))
    logger.debug("Package: %s", config.package.name)
    logger.debug("Description: %s", config.package.description)
    logger.debug("Version: %s", config.package.version)
    logger.debug("URL: %s", config.package.url)
    logger.debug("Authors: %s", ", ".join(config.package.authors))
    for target in config.targets.values():
        logger.debug(
            "Target: %s (file=%s, sources=%s)",
            target.name,
            target.file,
            ", ".join(target.sources),
        )
    logger.debug("Ending configuration dump")


def load_configs(
    paths: Sequence[Path],
    prompter: Prompter,
    settings: Settings | None = None,
) -> ProjectConfig:
    """Load and merge config files, generating any that are missing.

    Args:
        paths: Config files from lowest to highest priority.
        prompter: Used when a missing file has to be generated.
        settings: Runtime settings; defaults to the environment.

    Returns:
        The merged, read-only project configuration.

    Raises:
        ConfigError: If a file cannot be read or contains invalid entries.
        FilesystemError: If a generated file cannot be written.
    """
    if settings is None:
        settings = get_settings()

    builder = ConfigBuilder.with_defaults(settings)
    for path in paths:
        if not path.exists():
            if path == settings.global_config:
                text = generate_global_config(
                    prompter, builder.install, builder.compiler_binary
                )
            else:
                text = generate_package_config(prompter, builder.user)
            write_config_file(path, text)
        parse_config_file(builder, path)

    config = builder.build()
    dump_config(config)
    return config


__all__ = [
    "ConfigBuilder",
    "TargetBuilder",
    "apply_config_text",
    "dump_config",
    "load_configs",
    "parse_config_file",
]
