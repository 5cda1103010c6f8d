"""Build orchestration module.

This module handles:
- Staging target sources into the build directory
- Staleness checks that gate overwrites
- Running the script compiler, converter and archive tool
- Packing, installing and unpacking archives
"""

from nasher.types import BuildOutcome, BuildStatus

__all__ = ["BuildOutcome", "BuildStatus"]
