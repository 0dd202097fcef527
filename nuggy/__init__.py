"""
nuggy - NuGet feed browser

A Python-based CLI tool for browsing NuGet v3 package feeds: list and
manage feeds, inspect package metadata and versions, look inside packages
and pull single files out of them.

nuggy provides:
  - A small JSON feed configuration with a default feed
  - Feed validation against the NuGet v3 service index
  - Package metadata and version listings (prerelease aware)
  - Package materialization into the shared NuGet global package folder
  - Single-file extraction without persisting the package

Quick Start
-----------
List configured feeds:

    $ nuggy feeds list

Show the newest version of a package:

    $ nuggy package metadata Newtonsoft.Json

Print a file from inside a package:

    $ nuggy package file Newtonsoft.Json README.md

For full CLI documentation:

    $ nuggy --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    Feed settings store and NuGet global package folder lookup.
feeds : module
    Feed registry (validation, default feed, client construction).
registry : package
    NuGet v3 protocol client and package metadata models.
packages : package
    Version resolution, materialization and file extraction.
versioning : package
    NuGet/SemVer 2.0 version parsing and ordering.
io : package
    HTTP session, JSON and download helpers.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from nuggy.core import get_package_versions, show_package_contents
    from nuggy.config import ConfigStore
    from nuggy.versioning import NuGetVersion, parse_version

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "nuggy - browse NuGet v3 feeds and package contents"

# Re-export commonly used functions for convenience
from nuggy.config import ConfigStore
from nuggy.core import (
    extract_package_file,
    get_package_metadata,
    get_package_versions,
    show_package_contents,
)
from nuggy.versioning import NuGetVersion, parse_version

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "ConfigStore",
    "get_package_metadata",
    "get_package_versions",
    "show_package_contents",
    "extract_package_file",
    "NuGetVersion",
    "parse_version",
]
