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

"""Single-file extraction for nuggy.

Reads one file out of a package: from the global package folder when the
package is already materialized, otherwise straight from a downloaded
archive. The downloaded archive is not persisted.

Path Matching:

Archive entries may use "/" or "\\" separators. The requested path is tried
as given, with "/" replaced by the platform separator and with "\\"
replaced by the platform separator; entry names are compared as stored and
with both separators mapped to the platform separator. Comparison is
case-insensitive and the first matching entry wins. A path that climbs out
of the package with ".." never matches.
Example:
    ```python
    from nuggy.packages.extractor import extract_file

    text, from_cache = extract_file(client, target, "lib/net8.0/Contoso.xml", global_folder)
    ```
"""

from __future__ import annotations

import os
from pathlib import Path
import zipfile

from nuggy.exceptions import ExtractionError, PackageFileNotFoundError
from nuggy.logging import get_global_logger
from nuggy.packages.materializer import entry_parts, package_path
from nuggy.packages.source import is_directory_entry, open_package_archive
from nuggy.registry import NuGetClient, PackageMetadata


def decode_content(data: bytes) -> str:
    """Decode file bytes as UTF-8, dropping a BOM and replacing bad bytes."""
    return data.decode("utf-8-sig", errors="replace")


def path_forms(file_path: str) -> list[str]:
    """Return the forms a requested path is matched in, casefolded."""
    forms = [
        file_path,
        file_path.replace("/", os.sep),
        file_path.replace("\\", os.sep),
    ]
    unique: list[str] = []
    for form in forms:
        folded = form.casefold()
        if folded not in unique:
            unique.append(folded)
    return unique


def _entry_forms(name: str) -> tuple[str, str]:
    native = name.replace("/", os.sep).replace("\\", os.sep)
    return name.casefold(), native.casefold()


def find_entry(archive: zipfile.ZipFile, file_path: str) -> zipfile.ZipInfo | None:
    """Find the first archive entry matching a requested path."""
    wanted = path_forms(file_path)
    for info in archive.infolist():
        if is_directory_entry(info):
            continue
        if any(form in wanted for form in _entry_forms(info.filename)):
            return info
    return None


def _local_file(directory: Path, file_path: str) -> Path | None:
    try:
        parts = entry_parts(file_path.lstrip("/\\"))
    except ExtractionError:
        return None
    return directory.joinpath(*parts)


def extract_file(
    connection: NuGetClient,
    package: PackageMetadata,
    file_path: str,
    global_folder: Path,
) -> tuple[str, bool]:
    """Read one file from a package.

    Args:
        connection: Registry client for the feed the package was resolved on.
        package: Resolved package metadata.
        file_path: Path of the file inside the package.
        global_folder: Global package folder root.

    Returns:
        A tuple (content, from_cache), where content is the decoded text of
            the file and from_cache is True if it was read from the global
            package folder.

    Raises:
        PackageFileNotFoundError: If the package has no such file.
        DownloadError: If the package must be downloaded and cannot be.
        ExtractionError: If the downloaded archive is unreadable.

    """
    logger = get_global_logger()
    directory = package_path(package.identity, global_folder)
    not_found = PackageFileNotFoundError(
        f"File '{file_path}' not found in package '{package.id}' v{package.version}"
    )

    if directory.exists():
        local = _local_file(directory, file_path)
        if local is None or not local.is_file():
            raise not_found
        logger.verbose("CACHE", f"Reading {local}")
        try:
            return decode_content(local.read_bytes()), True
        except OSError as err:
            raise ExtractionError(f"Failed to read {local}: {err}") from err

    with open_package_archive(connection, package) as archive:
        info = find_entry(archive, file_path)
        if info is None:
            raise not_found
        logger.verbose("EXTRACT", f"Reading entry {info.filename}")
        try:
            data = archive.read(info)
        except (OSError, zipfile.BadZipFile) as err:
            raise ExtractionError(f"Failed to read {info.filename}: {err}") from err

    return decode_content(data), False
