"""Package resolution and materialization for nuggy.

Modules:

resolver : module
    Pick the target version of a package on a feed.
source : module
    Download a package archive and open it as a zip.
materializer : module
    Extract packages into the global package folder and list their files.
extractor : module
    Read a single file from a package.

Public API:

resolve_versions, resolve_target : functions
    Version listing and target selection.
materialize, list_contents, package_path : functions
    Global package folder handling.
extract_file : function
    Single-file reads.

"""

from .extractor import extract_file
from .materializer import (
    MaterializeState,
    PackageLocation,
    list_contents,
    materialize,
    package_path,
)
from .resolver import resolve_target, resolve_versions

__all__ = [
    "MaterializeState",
    "PackageLocation",
    "extract_file",
    "list_contents",
    "materialize",
    "package_path",
    "resolve_target",
    "resolve_versions",
]
