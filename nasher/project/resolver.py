"""Selection of the build target for a command."""

from __future__ import annotations

from nasher.project.models import ProjectConfig, Target, normalize


class TargetResolutionError(Exception):
    """Raised when no target matches the request."""

    def __init__(self, message: str, requested: str | None, code: str) -> None:
        super().__init__(message)
        self.requested = requested
        self.code = code


def resolve_target(config: ProjectConfig, requested: str | None = None) -> Target:
    """Return the requested target, or the first declared one.

    Args:
        config: Merged project configuration.
        requested: Target name as typed by the user; matching ignores case
            and underscores. Empty or None selects the default target.

    Returns:
        The matching Target.

    Raises:
        TargetResolutionError: If the name is unknown or no targets exist.
    """
    if requested:
        try:
            return config.targets[normalize(requested)]
        except KeyError:
            raise TargetResolutionError(
                f"Unknown target: {requested}", requested, code="unknown_target"
            ) from None

    for target in config.targets.values():
        return target
    raise TargetResolutionError(
        "No targets found. Please check your nasher.cfg file.",
        requested,
        code="no_targets",
    )


__all__ = ["TargetResolutionError", "resolve_target"]
