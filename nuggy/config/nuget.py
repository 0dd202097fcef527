"""
Global package folder resolution for nuggy.

Packages are materialized into the same per-machine folder the NuGet
tooling uses, so packages restored by ``dotnet restore`` are reused and
packages downloaded by nuggy are visible to other tools.

Resolution Order
----------------
1. ``NUGET_PACKAGES`` environment variable (when set and non-empty)
2. ``globalPackagesFolder`` from the user-level NuGet.Config:
   - Windows: ``%APPDATA%\\NuGet\\NuGet.Config``
   - Elsewhere: ``~/.nuget/NuGet/NuGet.Config``
3. ``<home>/.nuget/packages``

Step 2 is best-effort: a missing, unreadable or malformed NuGet.Config is
logged and resolution falls through to step 3.

Examples
--------
    >>> from nuggy.config.nuget import get_global_packages_folder
    >>> get_global_packages_folder({"NUGET_PACKAGES": "/cache/nuget"})
    PosixPath('/cache/nuget')
"""

from __future__ import annotations

from collections.abc import Mapping
import os
from pathlib import Path
import sys
import xml.etree.ElementTree as ET

from nuggy.logging import get_global_logger

NUGET_PACKAGES_ENV = "NUGET_PACKAGES"


def user_nuget_config_path(
    environ: Mapping[str, str] | None = None, home: Path | None = None
) -> Path:
    """Return the location of the user-level NuGet.Config."""
    environ = os.environ if environ is None else environ
    home = Path.home() if home is None else home
    if sys.platform == "win32" and environ.get("APPDATA"):
        return Path(environ["APPDATA"]) / "NuGet" / "NuGet.Config"
    return home / ".nuget" / "NuGet" / "NuGet.Config"


def read_global_packages_folder(config_path: Path) -> Path | None:
    """Read ``config/globalPackagesFolder`` from a NuGet.Config file.

    Args:
        config_path: NuGet.Config to read.

    Returns:
        The configured folder (relative values resolved against the
            config file's directory), or None if the file does not exist
            or does not set the key.

    Raises:
        OSError: If the file cannot be read.
        xml.etree.ElementTree.ParseError: If the file is not valid XML.

    """
    if not config_path.exists():
        return None

    root = ET.parse(config_path).getroot()
    for add in root.findall("./config/add"):
        if (add.get("key") or "").lower() == "globalpackagesfolder":
            value = os.path.expandvars(add.get("value") or "").strip()
            if not value:
                return None
            folder = Path(value).expanduser()
            if not folder.is_absolute():
                folder = config_path.parent / folder
            return folder
    return None


def get_global_packages_folder(
    environ: Mapping[str, str] | None = None, home: Path | None = None
) -> Path:
    """Resolve the global package folder.

    Args:
        environ: Environment to read. Defaults to os.environ.
        home: Home directory. Defaults to the current user's home.

    Returns:
        Path of the global package folder. It may not exist yet.

    """
    logger = get_global_logger()
    environ = os.environ if environ is None else environ
    home = Path.home() if home is None else home

    env_value = environ.get(NUGET_PACKAGES_ENV)
    if env_value:
        logger.verbose("CONFIG", f"Global packages folder from {NUGET_PACKAGES_ENV}: {env_value}")
        return Path(env_value)

    config_path = user_nuget_config_path(environ, home)
    try:
        configured = read_global_packages_folder(config_path)
    except (OSError, ET.ParseError) as err:
        # Unreadable NuGet config falls back to the default location.
        logger.verbose("CONFIG", f"Ignoring unreadable {config_path}: {err}")
        configured = None

    if configured is not None:
        logger.verbose("CONFIG", f"Global packages folder from {config_path}: {configured}")
        return configured

    default = home / ".nuget" / "packages"
    logger.debug("CONFIG", f"Using default global packages folder: {default}")
    return default
