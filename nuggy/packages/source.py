"""
Package content source for nuggy.

Downloads a package archive for an exact identity and opens it as a zip
archive. Both consumers of package contents go through here: the
materializer (persist every entry to the global package folder) and the
file extractor (read a single entry, persist nothing).

Example:
    ```python
    from nuggy.packages.source import open_package_archive

    with open_package_archive(client, target) as archive:
        print(archive.namelist())
    ```
"""

from __future__ import annotations

from io import BytesIO
import zipfile

from nuggy.exceptions import ExtractionError
from nuggy.logging import get_global_logger
from nuggy.registry import NuGetClient, PackageMetadata


def is_directory_entry(info: zipfile.ZipInfo) -> bool:
    """True for pure directory markers (names ending in a separator)."""
    return info.filename.endswith(("/", "\\"))


def open_package_archive(connection: NuGetClient, package: PackageMetadata) -> zipfile.ZipFile:
    """Download a package and open it as an in-memory zip archive.

    Args:
        connection: Registry client for the feed the package was resolved on.
        package: Resolved package metadata.

    Returns:
        An open ZipFile. Close it (or use it as a context manager) when done.

    Raises:
        DownloadError: If the package cannot be downloaded.
        ExtractionError: If the download is not a valid zip archive.

    """
    logger = get_global_logger()
    logger.verbose("HTTP", f"Downloading {package.identity}")

    data = connection.download_package(package.identity, package.package_content_url)

    try:
        return zipfile.ZipFile(BytesIO(data))
    except zipfile.BadZipFile as err:
        raise ExtractionError(
            f"Downloaded package {package.identity} is not a valid archive: {err}"
        ) from err
