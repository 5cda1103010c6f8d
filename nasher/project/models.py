"""Pydantic models for the cascaded project configuration.

A ProjectConfig is produced once by the cascade loader and is read-only
for the rest of the run. Mutation during loading happens on the builder
types in nasher.project.loader, never on these models.
"""

from pydantic import BaseModel, ConfigDict, Field


def normalize(value: str) -> str:
    """Normalize an identifier for case- and underscore-insensitive matching.

    Args:
        value: Section, key or target name as written.

    Returns:
        Lowercased value with underscores removed.
    """
    return value.replace("_", "").lower()


class User(BaseModel):
    """Schema for the user section.

    Attributes:
        name: Author name used as a default for new packages.
        email: Author email used as a default for new packages.
        install: Root of the game's user directory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    email: str = ""
    install: str = ""


class Compiler(BaseModel):
    """Schema for the compiler section."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    binary: str = "nwnsc"
    flags: tuple[str, ...] = ()


class Package(BaseModel):
    """Schema for package metadata."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    description: str = ""
    version: str = ""
    url: str = ""
    authors: tuple[str, ...] = ()


class Target(BaseModel):
    """A named build unit mapping source patterns to one output file.

    Attributes:
        name: Normalized target name (the merge key).
        file: Output artifact path, relative to the package root.
        description: Free-form description.
        sources: Glob patterns, in declaration order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    file: str = ""
    description: str = ""
    sources: tuple[str, ...] = ()


class ProjectConfig(BaseModel):
    """Merged configuration for a run.

    ``targets`` keeps the order in which distinct target names were first
    seen across the cascade; the first entry is the default target.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user: User = Field(default_factory=User)
    package: Package = Field(default_factory=Package)
    compiler: Compiler = Field(default_factory=Compiler)
    targets: dict[str, Target] = Field(default_factory=dict)

    def target_names(self) -> list[str]:
        """Return target names in insertion order."""
        return list(self.targets)


__all__ = ["Compiler", "Package", "ProjectConfig", "Target", "User", "normalize"]
