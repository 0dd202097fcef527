"""
Tests for nuggy.config.store module.

Tests the feed settings store including:
- Default settings creation
- Settings file format
- Default feed invariant repair on load
- Feed add/set/remove operations
- Error handling for unreadable settings
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nuggy.config import (
    NUGET_ORG_NAME,
    NUGET_ORG_SOURCE,
    AppSettings,
    ConfigStore,
    FeedConfiguration,
    normalize_settings,
)
from nuggy.exceptions import ConfigError, NotFoundError


def _write_settings(store: ConfigStore, data: object) -> None:
    store.settings_file.write_text(json.dumps(data), encoding="utf-8")


def _defaults(feeds: list[FeedConfiguration]) -> list[str]:
    return [f.name for f in feeds if f.is_default]


class TestLoad:
    """Tests for loading settings."""

    def test_creates_config_directory(self, fake_home: Path):
        """Test that the constructor creates ~/.nuggy."""
        store = ConfigStore(home_dir=fake_home)

        assert store.config_directory == fake_home / ".nuggy"
        assert store.config_directory.is_dir()

    def test_missing_file_creates_defaults(self, store: ConfigStore):
        """Test that a missing settings file yields the nuget.org feed."""
        settings = store.load()

        assert settings.default_feed == NUGET_ORG_NAME
        assert len(settings.feeds) == 1
        assert settings.feeds[0].source == NUGET_ORG_SOURCE
        assert settings.feeds[0].is_default
        assert store.settings_file.exists()

    def test_settings_file_format(self, store: ConfigStore):
        """Test camelCase keys, sorted keys, indentation and trailing newline."""
        store.load()

        text = store.settings_file.read_text(encoding="utf-8")
        data = json.loads(text)

        assert text.endswith("\n")
        assert text.startswith('{\n  "configDirectory"')
        assert data["defaultFeed"] == NUGET_ORG_NAME
        assert data["feeds"] == [
            {"isDefault": True, "name": NUGET_ORG_NAME, "source": NUGET_ORG_SOURCE}
        ]
        assert not store.settings_file.with_suffix(".json.tmp").exists()

    def test_load_is_cached(self, store: ConfigStore):
        """Test that settings are read once per store instance."""
        first = store.load()
        store.settings_file.write_text("{ broken", encoding="utf-8")

        assert store.load() is first

    def test_empty_feed_list_is_reseeded(self, store: ConfigStore):
        """Test that an empty feed list is replaced by nuget.org."""
        _write_settings(store, {"defaultFeed": None, "feeds": []})

        settings = store.load()

        assert [f.name for f in settings.feeds] == [NUGET_ORG_NAME]
        assert json.loads(store.settings_file.read_text())["defaultFeed"] == NUGET_ORG_NAME

    def test_stale_default_is_repaired_and_saved(self, store: ConfigStore):
        """Test that a default naming a missing feed is repaired and persisted."""
        _write_settings(
            store,
            {
                "defaultFeed": "gone",
                "feeds": [
                    {"name": "a", "source": "https://a.test/index.json", "isDefault": False},
                    {"name": "b", "source": "https://b.test/index.json", "isDefault": True},
                ],
            },
        )

        settings = store.load()

        assert settings.default_feed == "b"
        assert _defaults(settings.feeds) == ["b"]
        on_disk = json.loads(store.settings_file.read_text())
        assert on_disk["defaultFeed"] == "b"

    def test_consistent_settings_are_not_rewritten(self, store: ConfigStore):
        """Test that a valid settings file is left untouched on load."""
        original = json.dumps(
            {
                "defaultFeed": "a",
                "feeds": [{"name": "a", "source": "https://a.test/index.json", "isDefault": True}],
            }
        )
        store.settings_file.write_text(original, encoding="utf-8")

        store.load()

        assert store.settings_file.read_text(encoding="utf-8") == original

    def test_config_directory_set_at_runtime(self, store: ConfigStore):
        """Test that configDirectory reflects the runtime location."""
        _write_settings(
            store,
            {
                "configDirectory": "/somewhere/else",
                "defaultFeed": "a",
                "feeds": [{"name": "a", "source": "https://a.test/index.json", "isDefault": True}],
            },
        )

        assert store.load().config_directory == str(store.config_directory)

    def test_invalid_json_raises(self, store: ConfigStore):
        """Test that unparsable settings raise ConfigError."""
        store.settings_file.write_text("{ not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Failed to load configuration"):
            store.load()

    def test_invalid_shape_raises(self, store: ConfigStore):
        """Test that a feed entry without a source raises ConfigError."""
        _write_settings(store, {"feeds": [{"name": "a"}]})

        with pytest.raises(ConfigError, match="missing 'source'"):
            store.load()


class TestNormalizeSettings:
    """Tests for the default feed invariant repair."""

    def test_consistent_settings_unchanged(self):
        """Test that consistent settings are reported as not repaired."""
        settings = AppSettings(
            default_feed="a",
            feeds=[FeedConfiguration("a", "https://a.test", True), FeedConfiguration("b", "https://b.test")],
        )

        normalized, repaired = normalize_settings(settings)

        assert repaired is False
        assert normalized.default_feed == "a"

    def test_input_not_mutated(self):
        """Test that normalization does not modify its input."""
        feeds = [FeedConfiguration("a", "https://a.test", True), FeedConfiguration("b", "https://b.test", True)]
        settings = AppSettings(default_feed="b", feeds=feeds)

        normalized, repaired = normalize_settings(settings)

        assert repaired is True
        assert _defaults(normalized.feeds) == ["b"]
        assert feeds[0].is_default is True

    def test_no_flags_uses_first_feed(self):
        """Test that without any default marker the first feed wins."""
        settings = AppSettings(
            feeds=[FeedConfiguration("a", "https://a.test"), FeedConfiguration("b", "https://b.test")]
        )

        normalized, repaired = normalize_settings(settings)

        assert repaired is True
        assert normalized.default_feed == "a"
        assert _defaults(normalized.feeds) == ["a"]

    def test_default_name_matched_case_insensitively(self):
        """Test that the default feed name matches regardless of case."""
        settings = AppSettings(
            default_feed="A",
            feeds=[FeedConfiguration("a", "https://a.test", True)],
        )

        _, repaired = normalize_settings(settings)

        assert repaired is False

    def test_empty_feeds_reseeded(self):
        """Test that empty settings get the nuget.org feed."""
        normalized, repaired = normalize_settings(AppSettings())

        assert repaired is True
        assert normalized.default_feed == NUGET_ORG_NAME


class TestFeedOperations:
    """Tests for add/set/remove on the store."""

    def test_add_feed_appends(self, store: ConfigStore):
        """Test that a new feed is appended and persisted."""
        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))

        reloaded = ConfigStore(home_dir=store.config_directory.parent)
        names = [f.name for f in reloaded.list_feeds()]
        assert names == [NUGET_ORG_NAME, "internal"]
        assert reloaded.get_default_feed().name == NUGET_ORG_NAME

    def test_add_feed_replaces_same_name(self, store: ConfigStore):
        """Test that adding an existing name replaces that feed."""
        store.add_feed(FeedConfiguration("internal", "https://old.test/index.json"))
        store.add_feed(FeedConfiguration("Internal", "https://new.test/index.json"))

        feeds = store.list_feeds()
        assert len(feeds) == 2
        assert store.get_feed_by_name("internal").source == "https://new.test/index.json"

    def test_set_default_feed(self, store: ConfigStore):
        """Test that exactly one feed is default after set_default_feed."""
        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))

        store.set_default_feed("internal")

        settings = ConfigStore(home_dir=store.config_directory.parent).load()
        assert settings.default_feed == "internal"
        assert _defaults(settings.feeds) == ["internal"]

    def test_set_default_unknown_feed(self, store: ConfigStore):
        """Test that an unknown name raises and changes nothing."""
        store.load()
        before = store.settings_file.read_text(encoding="utf-8")

        with pytest.raises(NotFoundError, match="Feed 'missing' not found"):
            store.set_default_feed("missing")

        assert store.settings_file.read_text(encoding="utf-8") == before

    def test_remove_non_default_feed(self, store: ConfigStore):
        """Test removing a feed that is not the default."""
        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))

        store.remove_feed("internal")

        assert [f.name for f in store.list_feeds()] == [NUGET_ORG_NAME]
        assert store.get_default_feed().name == NUGET_ORG_NAME

    def test_remove_default_promotes_first_remaining(self, store: ConfigStore):
        """Test that removing the default feed promotes the first remaining one."""
        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))
        store.add_feed(FeedConfiguration("other", "https://other.test/index.json"))

        store.remove_feed(NUGET_ORG_NAME)

        settings = store.load()
        assert settings.default_feed == "internal"
        assert _defaults(settings.feeds) == ["internal"]

    def test_remove_last_feed_reseeds_on_next_load(self, store: ConfigStore):
        """Test that removing every feed leads to nuget.org on the next load."""
        store.remove_feed(NUGET_ORG_NAME)

        assert store.load().feeds == []
        reloaded = ConfigStore(home_dir=store.config_directory.parent)
        assert [f.name for f in reloaded.list_feeds()] == [NUGET_ORG_NAME]

    def test_remove_unknown_feed(self, store: ConfigStore):
        """Test that removing an unknown feed raises NotFoundError."""
        with pytest.raises(NotFoundError, match="Feed 'missing' not found"):
            store.remove_feed("missing")


class TestFailedSave:
    """Tests for the cache when writing settings fails."""

    @pytest.fixture
    def broken_disk(self, monkeypatch, store: ConfigStore) -> ConfigStore:
        store.add_feed(FeedConfiguration("internal", "https://pkgs.test/index.json"))

        def fail_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail_replace)
        return store

    def test_add_feed_keeps_cache(self, broken_disk: ConfigStore):
        """Test that a feed is not cached when it could not be saved."""
        with pytest.raises(ConfigError, match="Failed to save configuration"):
            broken_disk.add_feed(FeedConfiguration("ghost", "https://ghost.test/index.json"))

        assert [f.name for f in broken_disk.list_feeds()] == [NUGET_ORG_NAME, "internal"]
        assert broken_disk.get_feed_by_name("ghost") is None

    def test_set_default_feed_keeps_cache(self, broken_disk: ConfigStore):
        """Test that the default feed is unchanged when the save fails."""
        with pytest.raises(ConfigError):
            broken_disk.set_default_feed("internal")

        settings = broken_disk.load()
        assert settings.default_feed == NUGET_ORG_NAME
        assert _defaults(settings.feeds) == [NUGET_ORG_NAME]

    def test_remove_feed_keeps_cache(self, broken_disk: ConfigStore):
        """Test that a feed stays listed when its removal cannot be saved."""
        with pytest.raises(ConfigError):
            broken_disk.remove_feed(NUGET_ORG_NAME)

        settings = broken_disk.load()
        assert [f.name for f in settings.feeds] == [NUGET_ORG_NAME, "internal"]
        assert settings.default_feed == NUGET_ORG_NAME
        assert _defaults(settings.feeds) == [NUGET_ORG_NAME]
