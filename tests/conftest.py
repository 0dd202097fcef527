"""
Pytest configuration and shared fixtures for nuggy tests.

This module provides reusable fixtures and test utilities used across
the test suite: throwaway home directories, a settings store, a global
package folder and a fake NuGet v3 feed served through requests-mock.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any
import zipfile

import pytest

from nuggy.config import ConfigStore, FeedConfiguration
from nuggy.logging import SilentLogger, set_global_logger
from nuggy.registry import NuGetClient

FEED_URL = "https://feed.test/v3/index.json"
REGISTRATION_BASE = "https://feed.test/v3/registration/"
FLAT_BASE = "https://feed.test/v3/flat/"
SEARCH_URL = "https://feed.test/v3/query"


def build_nupkg(entries: dict[str, bytes | str]) -> bytes:
    """Build an in-memory .nupkg (zip) archive from name -> content."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            archive.writestr(name, data)
    return buffer.getvalue()


def content_url(package_id: str, version: str) -> str:
    lower_id, lower_version = package_id.lower(), version.lower()
    return f"{FLAT_BASE}{lower_id}/{lower_version}/{lower_id}.{lower_version}.nupkg"


def make_leaf(
    package_id: str,
    version: str,
    *,
    listed: bool = True,
    published: str = "2024-01-02T03:04:05+00:00",
    **entry: Any,
) -> dict[str, Any]:
    """Build a registration leaf as served by a NuGet v3 feed."""
    catalog_entry = {
        "id": package_id,
        "version": version,
        "listed": listed,
        "published": published,
        "authors": "Contoso",
        "description": f"{package_id} test package",
    }
    catalog_entry.update(entry)
    return {
        "@id": f"{REGISTRATION_BASE}{package_id.lower()}/{version.lower()}.json",
        "catalogEntry": catalog_entry,
        "packageContent": content_url(package_id, version),
    }


def make_registration(leaves: list[dict[str, Any]]) -> dict[str, Any]:
    """Wrap leaves in a registration index with a single inlined page."""
    return {"count": 1, "items": [{"count": len(leaves), "items": leaves}]}


class FakeFeed:
    """A NuGet v3 feed backed by a requests-mock Mocker.

    Attributes:
        url: Service index URL.
        mocker: The requests-mock Mocker serving the feed.
    """

    def __init__(self, mocker: Any, service_index: dict[str, Any]):
        self.url = FEED_URL
        self.mocker = mocker
        self._downloads: dict[str, dict[str, int]] = {}
        mocker.get(FEED_URL, json=service_index)
        mocker.get(SEARCH_URL, json=self._search)

    def _search(self, request: Any, context: Any) -> dict[str, Any]:
        query = request.qs.get("q", [""])[0]
        package_id = query.split(":", 1)[-1].lower()
        versions = self._downloads.get(package_id)
        if versions is None:
            return {"totalHits": 0, "data": []}
        return {
            "totalHits": 1,
            "data": [
                {
                    "id": package_id,
                    "versions": [
                        {"version": v, "downloads": n} for v, n in versions.items()
                    ],
                }
            ],
        }

    def add_package(
        self,
        package_id: str,
        versions: list[str],
        *,
        files: dict[str, bytes | str] | None = None,
        unlisted: tuple[str, ...] = (),
        downloads: dict[str, int] | None = None,
    ) -> None:
        """Serve a package's registration index and one archive per version."""
        leaves = [make_leaf(package_id, v, listed=v not in unlisted) for v in versions]
        self.mocker.get(
            f"{REGISTRATION_BASE}{package_id.lower()}/index.json",
            json=make_registration(leaves),
        )
        archive = build_nupkg(files or {f"{package_id}.nuspec": "<package />"})
        for version in versions:
            self.mocker.get(content_url(package_id, version), content=archive)
        if downloads is not None:
            self._downloads[package_id.lower()] = downloads

    def client(self) -> NuGetClient:
        return NuGetClient(self.url, feed_name="test")


@pytest.fixture(autouse=True)
def silent_logger():
    """Reset the global logger so tests never share verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def fake_home(tmp_test_dir: Path) -> Path:
    """Provide an empty home directory."""
    home = tmp_test_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def store(fake_home: Path) -> ConfigStore:
    """Provide a ConfigStore rooted at the fake home directory."""
    return ConfigStore(home_dir=fake_home)


@pytest.fixture
def global_folder(tmp_test_dir: Path) -> Path:
    """Provide a global package folder location (not created)."""
    return tmp_test_dir / "packages"


@pytest.fixture
def service_index() -> dict[str, Any]:
    """Provide a NuGet v3 service index listing the resources nuggy uses."""
    return {
        "version": "3.0.0",
        "resources": [
            {"@id": SEARCH_URL, "@type": "SearchQueryService/3.5.0"},
            {"@id": REGISTRATION_BASE, "@type": "RegistrationsBaseUrl/3.6.0"},
            {"@id": FLAT_BASE, "@type": "PackageBaseAddress/3.0.0"},
        ],
    }


@pytest.fixture
def nuget_feed(requests_mock, service_index: dict[str, Any]) -> FakeFeed:
    """Provide a fake NuGet v3 feed served through requests-mock."""
    return FakeFeed(requests_mock, service_index)


@pytest.fixture
def feed_store(store: ConfigStore, nuget_feed: FakeFeed) -> ConfigStore:
    """Provide a store whose default feed is the fake feed."""
    store.add_feed(FeedConfiguration(name="test", source=nuget_feed.url))
    store.set_default_feed("test")
    return store
