# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Package materialization for nuggy.

This module makes sure a package's contents exist, uncompressed, in the
NuGet global package folder and lists what is there.

Cache Layout:

    <global packages folder>/<lowercase id>/<normalized version>/

The folder is shared with dotnet/NuGet tooling. An existing version
directory is trusted as complete: no manifest or checksum is checked and
nothing inside it is ever modified or deleted.

States:

Each call walks through a small state machine, logged at verbose level:

    RESOLVING -> CACHE_HIT -> READY
    RESOLVING -> DOWNLOADING -> EXTRACTING -> READY
                                    any step -> FAILED

Example:
    ```python
    from nuggy.packages.materializer import list_contents, materialize

    location = materialize(client, target, Path.home() / ".nuget" / "packages")
    for f in list_contents(location.path):
        print(f.relative_path, f.size)
    ```

Note:
    A failed extraction leaves the files written so far in place. The next
    run will see the directory and treat it as a cache hit.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os
from pathlib import Path, PurePosixPath
import shutil
import zipfile

from nuggy.exceptions import ExtractionError, NuggyError
from nuggy.logging import get_global_logger
from nuggy.packages.source import is_directory_entry, open_package_archive
from nuggy.registry import NuGetClient, PackageIdentity, PackageMetadata
from nuggy.results import PackageFile


class MaterializeState(Enum):
    RESOLVING = "resolving"
    CACHE_HIT = "cache_hit"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class PackageLocation:
    """Where a materialized package lives.

    Attributes:
        path: Package directory.
        cache_hit: True if the directory existed before the call.
        state: Final state (READY on success).
    """

    path: Path
    cache_hit: bool
    state: MaterializeState


def package_path(identity: PackageIdentity, global_folder: Path) -> Path:
    """Return the package directory for an identity inside the global folder."""
    return Path(global_folder) / identity.id.lower() / identity.version.normalized


def entry_parts(name: str) -> tuple[str, ...]:
    """Split an archive entry name into safe relative path parts.

    Both "/" and "\\" count as separators.

    Raises:
        ExtractionError: If the entry is absolute or would escape the
            package directory.
    """
    normalized = name.replace("\\", "/")
    pure = PurePosixPath(normalized)
    if normalized.startswith("/") or (pure.parts and ":" in pure.parts[0]):
        raise ExtractionError(f"Refusing absolute archive entry: {name!r}")
    parts = tuple(p for p in pure.parts if p not in ("", "."))
    if ".." in parts:
        raise ExtractionError(f"Refusing archive entry outside package directory: {name!r}")
    return parts


def extract_archive(archive: zipfile.ZipFile, destination: Path) -> int:
    """Write every file entry of an archive below destination.

    Args:
        archive: Open package archive.
        destination: Package directory (created if missing).

    Returns:
        Number of files written.

    Raises:
        ExtractionError: On unsafe entry names, corrupt entries or I/O
            failures. Files already written are kept.

    """
    logger = get_global_logger()
    written = 0
    try:
        destination.mkdir(parents=True, exist_ok=True)
        for info in archive.infolist():
            if is_directory_entry(info):
                continue
            parts = entry_parts(info.filename)
            if not parts:
                continue
            target = destination.joinpath(*parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("EXTRACT", f"{info.filename} -> {target}")
            with archive.open(info) as src, target.open("wb") as dst:
                shutil.copyfileobj(src, dst)
            written += 1
    except ExtractionError:
        raise
    except (OSError, zipfile.BadZipFile) as err:
        raise ExtractionError(f"Failed to extract package to {destination}: {err}") from err
    return written


def materialize(
    connection: NuGetClient, package: PackageMetadata, global_folder: Path
) -> PackageLocation:
    """Ensure a package is extracted in the global package folder.

    Args:
        connection: Registry client for the feed the package was resolved on.
        package: Resolved package metadata.
        global_folder: Global package folder root.

    Returns:
        PackageLocation with the package directory and whether it was a
            cache hit.

    Raises:
        DownloadError: If the package archive cannot be downloaded.
        ExtractionError: If writing the package contents fails.

    """
    logger = get_global_logger()
    state = MaterializeState.RESOLVING
    path = package_path(package.identity, global_folder)
    logger.verbose("CACHE", f"[{state.value}] {package.identity} -> {path}")

    if path.exists():
        state = MaterializeState.CACHE_HIT
        logger.verbose("CACHE", f"[{state.value}] Package already in global packages folder")
        return PackageLocation(path=path, cache_hit=True, state=MaterializeState.READY)

    try:
        state = MaterializeState.DOWNLOADING
        logger.verbose("CACHE", f"[{state.value}] {package.identity}")
        with open_package_archive(connection, package) as archive:
            state = MaterializeState.EXTRACTING
            logger.verbose("CACHE", f"[{state.value}] {len(archive.infolist())} entries")
            count = extract_archive(archive, path)
    except NuggyError:
        logger.verbose("CACHE", f"[{MaterializeState.FAILED.value}] while {state.value}")
        raise

    state = MaterializeState.READY
    logger.verbose("CACHE", f"[{state.value}] Extracted {count} file(s) to {path}")
    return PackageLocation(path=path, cache_hit=False, state=state)


def list_contents(path: Path) -> list[PackageFile]:
    """List files below a package directory, sorted by full path.

    Args:
        path: Materialized package directory.

    Returns:
        PackageFile entries with paths relative to ``path``.

    """
    files = sorted(
        (p for p in Path(path).rglob("*") if p.is_file()),
        key=lambda p: str(p),
    )
    return [
        PackageFile(relative_path=os.path.relpath(p, path), size=p.stat().st_size)
        for p in files
    ]
