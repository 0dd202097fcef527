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

"""Package version resolution for nuggy.

Selects the target version of a package on a feed: the highest listed
version (prereleases included) or an exact user-supplied version.
"""

from __future__ import annotations

from nuggy.exceptions import NotFoundError
from nuggy.logging import get_global_logger
from nuggy.registry import NuGetClient, PackageMetadata
from nuggy.versioning import parse_version


def resolve_versions(connection: NuGetClient, package_id: str) -> list[PackageMetadata]:
    """Return all listed versions of a package, highest precedence first.

    Args:
        connection: Registry client for the feed.
        package_id: Package id (case-insensitive).

    Returns:
        Metadata for every listed version, prereleases included, sorted by
            descending version precedence.

    Raises:
        NotFoundError: If the feed has no listed versions of the package.
        NetworkError: On registry failures.

    """
    packages = connection.get_metadata(
        package_id, include_prerelease=True, include_unlisted=False
    )
    if not packages:
        raise NotFoundError(f"Package '{package_id}' not found")
    return sorted(packages, key=lambda p: p.version, reverse=True)


def resolve_target(
    connection: NuGetClient, package_id: str, version: str | None = None
) -> PackageMetadata:
    """Select the package version to operate on.

    Args:
        connection: Registry client for the feed.
        package_id: Package id (case-insensitive).
        version: Exact version to select. The highest version is used when
            omitted.

    Returns:
        Metadata of the selected version.

    Raises:
        InvalidVersionError: If ``version`` is not a valid version string.
            Raised before any registry query.
        NotFoundError: If the package is unknown, or if it exists but not
            in the requested version.
        NetworkError: On registry failures.

    Example:
        With versions 1.0.0, 1.1.0-beta and 1.0.5 on the feed:
            ```python
            resolve_target(client, "Contoso.Utils").version.normalized   # "1.1.0-beta"
            resolve_target(client, "Contoso.Utils", "1.0.5").version.normalized  # "1.0.5"
            ```

    """
    logger = get_global_logger()
    wanted = parse_version(version) if version else None

    packages = resolve_versions(connection, package_id)

    if wanted is None:
        target = packages[0]
        logger.verbose("RESOLVE", f"Latest version of {package_id}: {target.version.normalized}")
        return target

    for package in packages:
        if package.version == wanted:
            logger.verbose("RESOLVE", f"Resolved {package_id} {package.version.normalized}")
            return package

    raise NotFoundError(f"Version '{version}' of package '{package_id}' not found")
