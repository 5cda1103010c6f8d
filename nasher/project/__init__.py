"""Project configuration module.

This module handles:
- Parsing nasher.cfg files
- Cascading global and package configs into one ProjectConfig
- Generating missing config files interactively
- Resolving build targets
"""

from nasher.project.models import ProjectConfig, Target

__all__ = ["ProjectConfig", "Target"]
