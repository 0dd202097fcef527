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

"""Registry data types for nuggy.

These types describe what a feed says about a package. They are built
from NuGet v3 registration leaves and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import re

from nuggy.versioning import NuGetVersion

# Full framework names used in registration metadata -> short folder prefix.
_FRAMEWORK_PREFIXES: dict[str, str] = {
    ".netframework": "net",
    ".netstandard": "netstandard",
    ".netcoreapp": "netcoreapp",
    ".netportable": "portable",
    "xamarin.ios": "xamarinios",
    "xamarin.mac": "xamarinmac",
    "monoandroid": "monoandroid",
    "uap": "uap",
}


@dataclass(frozen=True)
class PackageIdentity:
    """Package id plus exact version.

    Attributes:
        id: Package id as reported by the feed (original casing).
        version: Parsed package version.
    """

    id: str
    version: NuGetVersion

    def __str__(self) -> str:
        return f"{self.id} {self.version.normalized}"


@dataclass(frozen=True)
class PackageDependency:
    """A dependency entry: package id and version range text, e.g. "[1.0.0, )"."""

    id: str
    range: str | None = None

    def __str__(self) -> str:
        return f"{self.id} {self.range}" if self.range else self.id


@dataclass(frozen=True)
class DependencySet:
    """Dependencies for one target framework (None means any framework)."""

    target_framework: str | None
    packages: tuple[PackageDependency, ...] = ()


@dataclass(frozen=True)
class PackageMetadata:
    """Metadata for one version of a package.

    Attributes:
        identity: Package id and version.
        authors: Author list as a display string.
        description: Package description.
        license: License expression, if the package declares one.
        license_url: License URL, if the package declares one.
        project_url: Project URL.
        tags: Tags as a space-separated string.
        download_count: Downloads of this version (None when the feed
            does not report it).
        published: Publish timestamp.
        listed: False for unlisted versions.
        dependency_sets: Dependency groups per target framework.
        package_content_url: Direct .nupkg URL from the registration leaf.
    """

    identity: PackageIdentity
    authors: str | None = None
    description: str | None = None
    license: str | None = None
    license_url: str | None = None
    project_url: str | None = None
    tags: str | None = None
    download_count: int | None = None
    published: datetime | None = None
    listed: bool = True
    dependency_sets: tuple[DependencySet, ...] = field(default_factory=tuple)
    package_content_url: str | None = None

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def version(self) -> NuGetVersion:
        return self.identity.version


def short_framework_name(framework: str | None) -> str | None:
    """Convert a registration target framework to its short folder name.

    Example:
        ```python
        short_framework_name(".NETStandard2.0")   # "netstandard2.0"
        short_framework_name(".NETFramework4.6.2")  # "net462"
        short_framework_name("net8.0")             # "net8.0"
        ```
    """
    if not framework:
        return None
    text = framework.strip()
    lowered = text.lower()
    if lowered in ("any", "agnostic"):
        return None

    for prefix, short in _FRAMEWORK_PREFIXES.items():
        if lowered.startswith(prefix):
            version = lowered[len(prefix) :]
            m = re.match(r"^v?(\d+(?:\.\d+)*)(.*)$", version)
            if not m:
                return short + version
            numbers, rest = m.group(1), m.group(2)
            if short == "net":
                # .NET Framework folders drop the dots: 4.6.2 -> 462.
                parts = numbers.split(".")
                while len(parts) > 2 and parts[-1] == "0":
                    parts.pop()
                return short + "".join(parts) + rest
            return short + numbers + rest

    return lowered
