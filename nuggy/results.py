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

"""Public API return types for nuggy.

This module defines dataclasses for return values from the orchestration
functions in nuggy.core. Each CLI command renders one of these.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from nuggy.config import ConfigStore
        from nuggy.core import show_package_contents
        from nuggy.results import ContentsResult

        result: ContentsResult = show_package_contents(ConfigStore(), "Serilog")
        print(result.package_path, result.total_size)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like PackageMetadata or FeedConfiguration) stay co-located with their
    related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from nuggy.config.store import FeedConfiguration
from nuggy.registry.models import PackageMetadata


@dataclass(frozen=True)
class PackageFile:
    """A file inside a materialized package.

    Attributes:
        relative_path: Path relative to the package directory.
        size: Size in bytes.
    """

    relative_path: str
    size: int


@dataclass(frozen=True)
class FeedListResult:
    """Configured feeds.

    Attributes:
        feeds: Feeds in configuration order.
        default_feed: Name of the default feed, if any.
    """

    feeds: list[FeedConfiguration]
    default_feed: str | None


@dataclass(frozen=True)
class MetadataResult:
    """Metadata of one resolved package version.

    Attributes:
        feed: Name of the feed that was queried.
        package: Resolved package metadata.
    """

    feed: str
    package: PackageMetadata


@dataclass(frozen=True)
class VersionsResult:
    """All listed versions of a package.

    Attributes:
        feed: Name of the feed that was queried.
        package_id: Package id as requested.
        versions: Metadata per version, highest precedence first.
    """

    feed: str
    package_id: str
    versions: list[PackageMetadata]


@dataclass(frozen=True)
class ContentsResult:
    """Contents of a materialized package.

    Attributes:
        package: Resolved package metadata.
        package_path: Package directory in the global package folder.
        files: Files sorted by full path.
        total_size: Sum of file sizes in bytes.
        cache_hit: True if the package was already materialized.
    """

    package: PackageMetadata
    package_path: Path
    files: list[PackageFile]
    total_size: int
    cache_hit: bool


@dataclass(frozen=True)
class FileResult:
    """A single file read from a package.

    Attributes:
        package: Resolved package metadata.
        file_path: Requested path inside the package.
        content: Decoded text content.
        from_cache: True if read from the global package folder.
    """

    package: PackageMetadata
    file_path: str
    content: str
    from_cache: bool
