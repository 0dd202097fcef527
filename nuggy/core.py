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

"""Core orchestration for nuggy.

This module provides one high-level function per CLI command. Each function
takes the settings store explicitly, performs the workflow and returns a
result dataclass; rendering is left to the CLI.

Package Workflow:

    feed name -> registry client -> resolve target version
        -> materialize (cache hit or download + extract) -> list files
        -> or read a single file (cache or one-shot download)

Design Principles:

- Each function has a single, clear responsibility
- Functions return structured data (dataclasses) for easy testing
- Error handling uses exceptions; CLI layer formats for user display
- The ConfigStore is passed in, never created here

Example:
    Programmatic usage:
        ```python
        from nuggy.config import ConfigStore
        from nuggy.core import show_package_contents

        store = ConfigStore()
        result = show_package_contents(store, "Newtonsoft.Json", version="13.0.3")
        for f in result.files:
            print(f.relative_path, f.size)
        ```

"""

from __future__ import annotations

from pathlib import Path

from nuggy.config import ConfigStore, get_global_packages_folder
from nuggy.feeds import FeedRegistry
from nuggy.logging import get_global_logger
from nuggy.packages import (
    extract_file,
    list_contents,
    materialize,
    resolve_target,
    resolve_versions,
)
from nuggy.results import (
    ContentsResult,
    FeedListResult,
    FileResult,
    MetadataResult,
    VersionsResult,
)


def list_feeds(store: ConfigStore) -> FeedListResult:
    """Return configured feeds and the default feed name."""
    registry = FeedRegistry(store)
    default = store.get_default_feed()
    return FeedListResult(
        feeds=registry.list_feeds(),
        default_feed=default.name if default else None,
    )


def add_feed(store: ConfigStore, name: str, source: str, set_default: bool = False) -> FeedListResult:
    """Validate and add a feed, then return the updated feed list.

    Raises:
        FeedValidationError: If the feed's service index cannot be fetched.
        ConfigError: If the settings cannot be saved.
    """
    FeedRegistry(store).add_feed(name, source, set_default=set_default)
    return list_feeds(store)


def set_default_feed(store: ConfigStore, name: str) -> FeedListResult:
    """Make a feed the default.

    Raises:
        NotFoundError: If the feed does not exist.
    """
    FeedRegistry(store).set_default_feed(name)
    return list_feeds(store)


def remove_feed(store: ConfigStore, name: str) -> FeedListResult:
    """Remove a feed.

    Raises:
        NotFoundError: If the feed does not exist.
    """
    FeedRegistry(store).remove_feed(name)
    return list_feeds(store)


def get_package_metadata(
    store: ConfigStore,
    package_id: str,
    feed: str | None = None,
    version: str | None = None,
) -> MetadataResult:
    """Resolve a package version and return its metadata.

    Args:
        store: Settings store.
        package_id: Package id.
        feed: Feed name (default feed when omitted).
        version: Exact version (latest when omitted).

    Returns:
        MetadataResult for the resolved version.

    Raises:
        NotFoundError: Unknown feed, package or version.
        NoDefaultFeedError: No feed given and none configured.
        InvalidVersionError: Malformed version string.
        NetworkError: Registry failures.

    """
    logger = get_global_logger()
    registry = FeedRegistry(store)

    logger.step(1, 1, f"Fetching metadata for {package_id}...")
    with registry.get_connection(feed) as client:
        target = resolve_target(client, package_id, version)

    return MetadataResult(feed=client.feed_name, package=target)


def get_package_versions(
    store: ConfigStore, package_id: str, feed: str | None = None
) -> VersionsResult:
    """List all listed versions of a package, highest first.

    Raises:
        NotFoundError: Unknown feed or package.
        NetworkError: Registry failures.
    """
    logger = get_global_logger()
    registry = FeedRegistry(store)

    logger.step(1, 1, f"Fetching versions of {package_id}...")
    with registry.get_connection(feed) as client:
        versions = resolve_versions(client, package_id)

    return VersionsResult(feed=client.feed_name, package_id=package_id, versions=versions)


def show_package_contents(
    store: ConfigStore,
    package_id: str,
    feed: str | None = None,
    version: str | None = None,
    global_folder: Path | None = None,
) -> ContentsResult:
    """Materialize a package and list its files.

    Args:
        store: Settings store.
        package_id: Package id.
        feed: Feed name (default feed when omitted).
        version: Exact version (latest when omitted).
        global_folder: Global package folder. Resolved from the environment
            and NuGet configuration when omitted.

    Returns:
        ContentsResult with the package directory, its files and whether
            the package was already materialized.

    Raises:
        NotFoundError: Unknown feed, package or version.
        InvalidVersionError: Malformed version string.
        DownloadError: The package could not be downloaded.
        ExtractionError: Writing the package contents failed.

    """
    logger = get_global_logger()
    registry = FeedRegistry(store)
    folder = Path(global_folder) if global_folder else get_global_packages_folder()

    with registry.get_connection(feed) as client:
        logger.step(1, 2, f"Resolving {package_id}...")
        target = resolve_target(client, package_id, version)
        logger.step(2, 2, f"Materializing {target.identity}...")
        location = materialize(client, target, folder)

    files = list_contents(location.path)
    return ContentsResult(
        package=target,
        package_path=location.path,
        files=files,
        total_size=sum(f.size for f in files),
        cache_hit=location.cache_hit,
    )


def extract_package_file(
    store: ConfigStore,
    package_id: str,
    file_path: str,
    feed: str | None = None,
    version: str | None = None,
    global_folder: Path | None = None,
) -> FileResult:
    """Read one file from a package.

    Uses the global package folder when the package is materialized there;
    otherwise downloads the package without persisting it.

    Raises:
        NotFoundError: Unknown feed, package or version.
        InvalidVersionError: Malformed version string.
        PackageFileNotFoundError: The package has no such file.
        DownloadError: The package could not be downloaded.

    """
    registry = FeedRegistry(store)
    folder = Path(global_folder) if global_folder else get_global_packages_folder()

    with registry.get_connection(feed) as client:
        target = resolve_target(client, package_id, version)
        content, from_cache = extract_file(client, target, file_path, folder)

    return FileResult(package=target, file_path=file_path, content=content, from_cache=from_cache)
