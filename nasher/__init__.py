"""nasher - build tool for Neverwinter Nights module projects.

This package cascades project configuration, stages sources into a
per-target build directory, drives the external script compiler and
archive tools, and installs packed modules, haks and erfs.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
