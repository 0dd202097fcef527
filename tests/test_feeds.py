"""
Tests for nuggy.feeds module.

Tests the feed registry including:
- Feed validation before adding
- Default feed selection
- Feed lookup and client construction
"""

from __future__ import annotations

import pytest
import requests

from conftest import FEED_URL
from nuggy.config import NUGET_ORG_NAME, ConfigStore, FeedConfiguration
from nuggy.exceptions import (
    FeedValidationError,
    NetworkError,
    NoDefaultFeedError,
    NotFoundError,
)
from nuggy.feeds import FeedRegistry


class TestAddFeed:
    """Tests for validating and adding feeds."""

    def test_add_valid_feed(self, store: ConfigStore, nuget_feed):
        """Test that a reachable feed is added without changing the default."""
        registry = FeedRegistry(store)

        feed = registry.add_feed("internal", nuget_feed.url)

        assert feed.source == FEED_URL
        assert [f.name for f in registry.list_feeds()] == [NUGET_ORG_NAME, "internal"]
        assert store.get_default_feed().name == NUGET_ORG_NAME

    def test_add_as_default(self, store: ConfigStore, nuget_feed):
        """Test that set_default makes the new feed the only default."""
        FeedRegistry(store).add_feed("internal", nuget_feed.url, set_default=True)

        defaults = [f.name for f in store.list_feeds() if f.is_default]
        assert defaults == ["internal"]
        assert store.load().default_feed == "internal"

    def test_unreachable_feed_not_added(self, store: ConfigStore, requests_mock):
        """Test that a connection failure raises and stores nothing."""
        requests_mock.get(FEED_URL, exc=requests.exceptions.ConnectTimeout)

        with pytest.raises(FeedValidationError, match="Failed to validate feed source") as exc_info:
            FeedRegistry(store).add_feed("internal", FEED_URL)

        assert isinstance(exc_info.value.__cause__, NetworkError)
        assert store.get_feed_by_name("internal") is None

    def test_non_index_response_not_added(self, store: ConfigStore, requests_mock):
        """Test that a URL serving something else than a service index is rejected."""
        requests_mock.get(FEED_URL, json=[1, 2, 3])

        with pytest.raises(FeedValidationError):
            FeedRegistry(store).add_feed("internal", FEED_URL)

        assert [f.name for f in store.list_feeds()] == [NUGET_ORG_NAME]

    def test_validation_error_is_network_error(self):
        """Test that FeedValidationError is a NetworkError."""
        assert issubclass(FeedValidationError, NetworkError)


class TestGetConnection:
    """Tests for feed lookup."""

    def test_default_feed(self, feed_store: ConfigStore):
        """Test that the default feed is used when no name is given."""
        client = FeedRegistry(feed_store).get_connection()

        assert client.source == FEED_URL
        assert client.feed_name == "test"

    def test_named_feed(self, feed_store: ConfigStore):
        """Test that a named feed is looked up case-insensitively."""
        client = FeedRegistry(feed_store).get_connection(NUGET_ORG_NAME.upper())

        assert client.feed_name == NUGET_ORG_NAME

    def test_unknown_feed(self, store: ConfigStore):
        """Test that an unknown feed name raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Feed 'nope' not found"):
            FeedRegistry(store).get_connection("nope")

    def test_no_default_feed(self, store: ConfigStore):
        """Test that NoDefaultFeedError is raised when no feeds exist."""
        store.remove_feed(NUGET_ORG_NAME)

        with pytest.raises(NoDefaultFeedError, match="No default feed configured"):
            FeedRegistry(store).get_connection()

    def test_no_network_on_connect(self, store: ConfigStore, requests_mock):
        """Test that creating a client performs no HTTP requests."""
        FeedRegistry(store).get_connection()

        assert requests_mock.call_count == 0

    def test_custom_client_factory(self, store: ConfigStore):
        """Test that the client factory receives source and name."""
        calls = []

        def factory(source, name):
            calls.append((source, name))
            return object()

        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))
        FeedRegistry(store, client_factory=factory).get_connection("internal")

        assert calls == [("https://pkgs.test/index.json", "internal")]
