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

"""NuGet v3 protocol client for nuggy.

This module talks to NuGet v3 feeds (nuget.org, Azure Artifacts, GitHub
Packages, BaGet, ...). It covers the four resources nuggy needs:

- Service index: the feed's discovery document, also used as a
    reachability probe when adding feeds
- RegistrationsBaseUrl: per-package metadata for every version
- SearchQueryService: per-version download counts (best-effort)
- PackageBaseAddress: .nupkg downloads

Resource Selection:

Registration resources are tried in order of preference so that SemVer 2.0
packages are visible where the feed supports them:

    RegistrationsBaseUrl/3.6.0 -> 3.4.0 -> 3.0.0-rc -> 3.0.0-beta -> unversioned

Example:
    Query versions of a package:
        ```python
        from nuggy.registry import NuGetClient

        client = NuGetClient("https://api.nuget.org/v3/index.json")
        for meta in client.get_metadata("Newtonsoft.Json"):
            print(meta.version.normalized, meta.published)
        ```

Note:
    Creating a client performs no I/O. The service index is fetched on
    first use and cached on the instance.

"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

import requests

from nuggy.exceptions import DownloadError, NetworkError
from nuggy.io import download_bytes, get_json, make_session
from nuggy.logging import get_global_logger
from nuggy.registry.models import (
    DependencySet,
    PackageDependency,
    PackageIdentity,
    PackageMetadata,
    short_framework_name,
)
from nuggy.versioning import try_parse_version

REGISTRATION_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl/3.0.0-beta",
    "RegistrationsBaseUrl",
)
PACKAGE_BASE_TYPES = ("PackageBaseAddress/3.0.0",)
SEARCH_TYPES = (
    "SearchQueryService/3.5.0",
    "SearchQueryService/3.0.0-rc",
    "SearchQueryService/3.0.0-beta",
    "SearchQueryService",
)

# Unlisted packages on nuget.org carry this publish year.
_UNLISTED_YEAR = 1900


def _parse_published(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _join_text(value: Any) -> str | None:
    """Registration fields may be a string or a list of strings."""
    if value is None:
        return None
    if isinstance(value, list):
        text = ", ".join(str(v) for v in value if v)
        return text or None
    text = str(value).strip()
    return text or None


def parse_dependency_groups(groups: Any) -> tuple[DependencySet, ...]:
    """Build dependency sets from a catalog entry's ``dependencyGroups``."""
    sets: list[DependencySet] = []
    for group in groups or []:
        if not isinstance(group, dict):
            continue
        packages = tuple(
            PackageDependency(id=dep["id"], range=dep.get("range"))
            for dep in group.get("dependencies") or []
            if isinstance(dep, dict) and dep.get("id")
        )
        sets.append(
            DependencySet(
                target_framework=short_framework_name(group.get("targetFramework")),
                packages=packages,
            )
        )
    return tuple(sets)


def parse_registration_leaf(leaf: dict[str, Any]) -> PackageMetadata | None:
    """Build PackageMetadata from a registration leaf.

    Returns:
        The parsed metadata, or None when the leaf has no usable id/version.
    """
    entry = leaf.get("catalogEntry")
    if not isinstance(entry, dict):
        return None

    version = try_parse_version(entry.get("version"))
    package_id = entry.get("id")
    if version is None or not package_id:
        return None

    published = _parse_published(entry.get("published"))
    listed = entry.get("listed", True) is not False
    if published is not None and published.year == _UNLISTED_YEAR:
        listed = False

    tags = entry.get("tags")
    if isinstance(tags, list):
        tags = " ".join(str(t) for t in tags if t)

    return PackageMetadata(
        identity=PackageIdentity(id=package_id, version=version),
        authors=_join_text(entry.get("authors")),
        description=_join_text(entry.get("description")),
        license=_join_text(entry.get("licenseExpression")),
        license_url=_join_text(entry.get("licenseUrl")),
        project_url=_join_text(entry.get("projectUrl")),
        tags=tags or None,
        published=published,
        listed=listed,
        dependency_sets=parse_dependency_groups(entry.get("dependencyGroups")),
        package_content_url=leaf.get("packageContent") or entry.get("packageContent"),
    )


class NuGetClient:
    """Client for one NuGet v3 feed.

    Attributes:
        source: Service index URL of the feed.
        feed_name: Configured feed name, for messages (optional).

    """

    def __init__(
        self,
        source: str,
        feed_name: str | None = None,
        session: requests.Session | None = None,
    ):
        self.source = source
        self.feed_name = feed_name
        self._session = session
        self._service_index: dict[str, Any] | None = None

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = make_session()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> NuGetClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_service_index(self) -> dict[str, Any]:
        """Fetch (once) and return the feed's service index.

        Raises:
            NetworkError: If the source is unreachable or does not serve a
                service index (a JSON object with a "resources" list).
        """
        if self._service_index is not None:
            return self._service_index

        index = get_json(self.session, self.source)

        if not isinstance(index, dict) or not isinstance(index.get("resources"), list):
            raise NetworkError(
                f"{self.source} did not return a NuGet v3 service index"
            )

        get_global_logger().verbose(
            "FEED", f"Service index {self.source}: {len(index['resources'])} resources"
        )
        self._service_index = index
        return index

    def get_resource_url(self, *resource_types: str) -> str | None:
        """Return the first resource URL matching the preferred types."""
        resources = self.get_service_index()["resources"]
        for wanted in resource_types:
            for resource in resources:
                if not isinstance(resource, dict):
                    continue
                types = resource.get("@type")
                if isinstance(types, str):
                    types = [types]
                if wanted in (types or []) and resource.get("@id"):
                    return resource["@id"]
        return None

    def _require_resource(self, *resource_types: str) -> str:
        url = self.get_resource_url(*resource_types)
        if url is None:
            raise NetworkError(
                f"feed {self.source} does not provide {resource_types[0]}"
            )
        return url if url.endswith("/") else url + "/"

    def _iter_registration_leaves(self, index: dict[str, Any]):
        for page in index.get("items") or []:
            if not isinstance(page, dict):
                continue
            items = page.get("items")
            if items is None and page.get("@id"):
                page_doc = get_json(self.session, page["@id"])
                items = page_doc.get("items") if isinstance(page_doc, dict) else None
            for leaf in items or []:
                if isinstance(leaf, dict):
                    yield leaf

    def get_metadata(
        self,
        package_id: str,
        *,
        include_prerelease: bool = True,
        include_unlisted: bool = False,
    ) -> list[PackageMetadata]:
        """Return metadata for every version of a package, in feed order.

        Args:
            package_id: Package id (case-insensitive).
            include_prerelease: Keep prerelease versions.
            include_unlisted: Keep unlisted versions.

        Returns:
            Metadata list; empty if the feed does not know the package.

        Raises:
            NetworkError: On HTTP failures or a feed without a registration
                resource.
        """
        logger = get_global_logger()
        base = self._require_resource(*REGISTRATION_TYPES)
        url = f"{base}{package_id.lower()}/index.json"
        logger.verbose("RESOLVE", f"Querying registration: {url}")

        index = get_json(self.session, url, allow_missing=True)
        if index is None:
            return []
        if not isinstance(index, dict):
            raise NetworkError(f"invalid registration index from {url}")

        packages: list[PackageMetadata] = []
        for leaf in self._iter_registration_leaves(index):
            meta = parse_registration_leaf(leaf)
            if meta is None:
                continue
            if not include_prerelease and meta.version.is_prerelease:
                continue
            if not include_unlisted and not meta.listed:
                continue
            packages.append(meta)

        logger.verbose("RESOLVE", f"Found {len(packages)} version(s) of {package_id}")
        if packages:
            packages = self._with_download_counts(package_id, packages)
        return packages

    def get_download_counts(self, package_id: str) -> dict[str, int]:
        """Return downloads per normalized version from the search service.

        Returns:
            Mapping of normalized version (lowercase) to download count;
                empty if the feed has no search resource or no match.
        """
        search = self.get_resource_url(*SEARCH_TYPES)
        if search is None:
            return {}
        doc = get_json(
            self.session,
            search,
            params={
                "q": f"packageid:{package_id}",
                "prerelease": "true",
                "semVerLevel": "2.0.0",
            },
        )
        counts: dict[str, int] = {}
        hits = doc.get("data") if isinstance(doc, dict) else None
        for hit in hits or []:
            if not isinstance(hit, dict):
                continue
            if str(hit.get("id", "")).lower() != package_id.lower():
                continue
            for entry in hit.get("versions") or []:
                if not isinstance(entry, dict):
                    continue
                version = try_parse_version(entry.get("version"))
                if version is not None and isinstance(entry.get("downloads"), int):
                    counts[version.normalized.lower()] = entry["downloads"]
        return counts

    def _with_download_counts(
        self, package_id: str, packages: list[PackageMetadata]
    ) -> list[PackageMetadata]:
        try:
            counts = self.get_download_counts(package_id)
        except NetworkError as err:
            # Download counts are informational only.
            get_global_logger().verbose("RESOLVE", f"Download counts unavailable: {err}")
            return packages

        return [
            replace(p, download_count=counts.get(p.version.normalized.lower()))
            for p in packages
        ]

    def package_download_url(self, identity: PackageIdentity) -> str:
        """Return the flat-container .nupkg URL for a package identity."""
        base = self._require_resource(*PACKAGE_BASE_TYPES)
        lower_id = identity.id.lower()
        lower_version = identity.version.normalized.lower()
        return f"{base}{lower_id}/{lower_version}/{lower_id}.{lower_version}.nupkg"

    def download_package(
        self, identity: PackageIdentity, content_url: str | None = None
    ) -> bytes:
        """Download a package archive.

        Args:
            identity: Package id and exact version.
            content_url: Direct .nupkg URL from registration metadata. The
                PackageBaseAddress resource is used when omitted.

        Returns:
            Raw .nupkg bytes.

        Raises:
            DownloadError: If the package is unavailable (404, empty body)
                or the transfer fails.
        """
        try:
            url = content_url or self.package_download_url(identity)
            data = download_bytes(self.session, url)
        except DownloadError:
            raise
        except NetworkError as err:
            raise DownloadError(f"Failed to download package {identity}: {err}") from err

        if not data:
            raise DownloadError(f"Failed to download package {identity}: not available from {url}")
        return data
