"""
NuGet version parsing and ordering for nuggy.

This package provides the version model used to pick a package's latest
version and to match a user-supplied version against a feed's version
list. It implements NuGet's flavour of Semantic Versioning 2.0.

Modules
-------
keys : module
    Version parsing, normalization and precedence rules.

Public API
----------
NuGetVersion : dataclass
    Parsed, comparable version.
parse_version : function
    Parse a version string, raising InvalidVersionError when invalid.
try_parse_version : function
    Parse a version string, returning None when invalid.

Examples
--------
Prerelease handling:

    >>> from nuggy.versioning import parse_version
    >>> parse_version("1.1.0-beta") > parse_version("1.0.5")
    True
    >>> parse_version("1.0.0") > parse_version("1.0.0-rc.1")
    True  # release > prerelease

Normalization:

    >>> from nuggy.versioning import parse_version
    >>> parse_version("1.0").normalized
    '1.0.0'
    >>> parse_version("2.1.0.0+sha.abc").normalized
    '2.1.0'

Notes
-----
- Ordering follows SemVer 2.0 precedence, not string ordering
- Build metadata never affects equality or ordering
"""

from .keys import NuGetVersion, parse_version, try_parse_version

__all__ = ["NuGetVersion", "parse_version", "try_parse_version"]
