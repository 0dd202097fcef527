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

"""Feed registry for nuggy.

Binds feed names from the settings store to registry connections, and
validates new feeds before they are stored.

Example:
    ```python
    from nuggy.config import ConfigStore
    from nuggy.feeds import FeedRegistry

    registry = FeedRegistry(ConfigStore())
    registry.add_feed("internal", "https://pkgs.example.com/v3/index.json", set_default=True)
    client = registry.get_connection()       # default feed
    client = registry.get_connection("nuget.org")
    ```
"""

from __future__ import annotations

from collections.abc import Callable

from nuggy.config.store import ConfigStore, FeedConfiguration
from nuggy.exceptions import (
    FeedValidationError,
    NetworkError,
    NoDefaultFeedError,
    NotFoundError,
)
from nuggy.logging import get_global_logger
from nuggy.registry import NuGetClient

ClientFactory = Callable[[str, str], NuGetClient]


def _default_client_factory(source: str, name: str) -> NuGetClient:
    return NuGetClient(source, feed_name=name)


class FeedRegistry:
    """Feed lookup and validation on top of a ConfigStore.

    Attributes:
        store: Settings store shared with the caller.

    """

    def __init__(self, store: ConfigStore, client_factory: ClientFactory | None = None):
        self.store = store
        self._client_factory = client_factory or _default_client_factory

    def list_feeds(self) -> list[FeedConfiguration]:
        return self.store.list_feeds()

    def validate_feed_source(self, source: str) -> None:
        """Probe a feed by fetching its service index.

        Raises:
            FeedValidationError: If the index cannot be fetched or is not
                a NuGet v3 service index.

        """
        get_global_logger().verbose("FEED", f"Validating feed source: {source}")
        with self._client_factory(source, source) as client:
            try:
                client.get_service_index()
            except NetworkError as err:
                raise FeedValidationError(
                    f"Failed to validate feed source '{source}': {err}"
                ) from err

    def add_feed(self, name: str, source: str, set_default: bool = False) -> FeedConfiguration:
        """Validate and store a feed (replacing a feed with the same name).

        Args:
            name: Feed name.
            source: Service index URL.
            set_default: Also make this the default feed.

        Returns:
            The stored feed configuration.

        Raises:
            FeedValidationError: If the probe fails. Nothing is stored.
            ConfigError: If the settings cannot be saved.

        """
        self.validate_feed_source(source)

        feed = FeedConfiguration(name=name, source=source, is_default=set_default)
        self.store.add_feed(feed)
        if set_default:
            self.store.set_default_feed(name)

        get_global_logger().verbose("FEED", f"Added feed '{name}' -> {source}")
        return feed

    def set_default_feed(self, name: str) -> None:
        self.store.set_default_feed(name)

    def remove_feed(self, name: str) -> None:
        self.store.remove_feed(name)

    def get_feed(self, feed_name: str | None = None) -> FeedConfiguration:
        """Resolve a feed by name, or the default feed when no name is given.

        Raises:
            NotFoundError: If the named feed does not exist.
            NoDefaultFeedError: If no name is given and no feed is configured.

        """
        if feed_name:
            feed = self.store.get_feed_by_name(feed_name)
            if feed is None:
                raise NotFoundError(f"Feed '{feed_name}' not found.")
            return feed

        feed = self.store.get_default_feed()
        if feed is None:
            raise NoDefaultFeedError("No default feed configured.")
        return feed

    def get_connection(self, feed_name: str | None = None) -> NuGetClient:
        """Return a registry client for a feed. No network I/O happens here.

        Raises:
            NotFoundError: If the named feed does not exist.
            NoDefaultFeedError: If no name is given and no feed is configured.

        """
        feed = self.get_feed(feed_name)
        get_global_logger().verbose("FEED", f"Using feed '{feed.name}' ({feed.source})")
        return self._client_factory(feed.source, feed.name)
