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

"""Feed settings persistence for nuggy.

This module implements the settings store: a small JSON file listing the
configured feeds and which one is the default.

Settings File:

The file lives at ``<home>/.nuggy/settings.json``:

    {
      "configDirectory": "/home/me/.nuggy",
      "defaultFeed": "nuget.org",
      "feeds": [
        {
          "isDefault": true,
          "name": "nuget.org",
          "source": "https://api.nuget.org/v3/index.json"
        }
      ]
    }

``configDirectory`` is written for reference only and is replaced with the
runtime path on every load.

Default Feed Invariant:

When the feed list is non-empty exactly one feed has ``isDefault`` set and
it matches ``defaultFeed``. Mutations do not enforce this transactionally;
``normalize_settings`` repairs it after each load and the repaired value is
persisted only when something changed.

Example:
    Basic usage:
        ```python
        from nuggy.config import ConfigStore, FeedConfiguration

        store = ConfigStore()
        settings = store.load()
        store.add_feed(FeedConfiguration("internal", "https://pkgs.example.com/v3/index.json"))
        store.set_default_feed("internal")
        print(store.get_default_feed().source)
        ```

"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import json
from pathlib import Path
from typing import Any

from nuggy.exceptions import ConfigError, NotFoundError
from nuggy.logging import get_global_logger

CONFIG_DIR_NAME = ".nuggy"
SETTINGS_FILE_NAME = "settings.json"

NUGET_ORG_NAME = "nuget.org"
NUGET_ORG_SOURCE = "https://api.nuget.org/v3/index.json"


@dataclass
class FeedConfiguration:
    """A named feed endpoint.

    Attributes:
        name: Feed name, unique within the settings (case-insensitive).
        source: Service index URL of the feed.
        is_default: True for the default feed.
    """

    name: str
    source: str
    is_default: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "source": self.source, "isDefault": self.is_default}

    @classmethod
    def from_dict(cls, data: Any) -> FeedConfiguration:
        if not isinstance(data, dict):
            raise ValueError(f"feed entry must be an object, got {type(data).__name__}")
        name = data.get("name")
        source = data.get("source")
        if not isinstance(name, str) or not name:
            raise ValueError("feed entry is missing 'name'")
        if not isinstance(source, str) or not source:
            raise ValueError(f"feed '{name}' is missing 'source'")
        return cls(name=name, source=source, is_default=bool(data.get("isDefault", False)))


@dataclass
class AppSettings:
    """In-memory settings.

    Attributes:
        default_feed: Name of the default feed. May be stale until the
            settings have been normalized.
        feeds: Configured feeds in insertion order.
        config_directory: Runtime config directory (not meaningful on disk).
    """

    default_feed: str | None = None
    feeds: list[FeedConfiguration] = field(default_factory=list)
    config_directory: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultFeed": self.default_feed,
            "feeds": [feed.to_dict() for feed in self.feeds],
            "configDirectory": self.config_directory,
        }

    @classmethod
    def from_dict(cls, data: Any) -> AppSettings:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(
                f"settings must be a JSON object, got {type(data).__name__}"
            )
        feeds = data.get("feeds") or []
        if not isinstance(feeds, list):
            raise ValueError("'feeds' must be a list")
        default_feed = data.get("defaultFeed")
        if default_feed is not None and not isinstance(default_feed, str):
            raise ValueError("'defaultFeed' must be a string or null")
        return cls(
            default_feed=default_feed,
            feeds=[FeedConfiguration.from_dict(item) for item in feeds],
            config_directory=data.get("configDirectory"),
        )


def nuget_org_feed() -> FeedConfiguration:
    """Return the public nuget.org feed, marked as default."""
    return FeedConfiguration(name=NUGET_ORG_NAME, source=NUGET_ORG_SOURCE, is_default=True)


def create_default_settings(config_directory: str | None = None) -> AppSettings:
    """Create settings holding only the nuget.org feed."""
    return AppSettings(
        default_feed=NUGET_ORG_NAME,
        feeds=[nuget_org_feed()],
        config_directory=config_directory,
    )


def _names_equal(a: str | None, b: str | None) -> bool:
    return a is not None and b is not None and a.casefold() == b.casefold()


def find_feed(settings: AppSettings, name: str) -> FeedConfiguration | None:
    """Find a feed by name (case-insensitive)."""
    return next((f for f in settings.feeds if _names_equal(f.name, name)), None)


def copy_settings(settings: AppSettings) -> AppSettings:
    """Return a copy of settings whose feeds can be changed independently."""
    return replace(settings, feeds=[replace(f) for f in settings.feeds])


def resolve_default_feed(settings: AppSettings) -> FeedConfiguration | None:
    """Resolve the default feed.

    Resolution order: the feed named by ``default_feed``, else the first
    feed flagged ``is_default``, else the first feed, else None.
    """
    if settings.default_feed:
        named = find_feed(settings, settings.default_feed)
        if named is not None:
            return named
    flagged = next((f for f in settings.feeds if f.is_default), None)
    if flagged is not None:
        return flagged
    return settings.feeds[0] if settings.feeds else None


def normalize_settings(settings: AppSettings) -> tuple[AppSettings, bool]:
    """Restore the default feed invariant.

    Pure function: the input is not modified.

    Args:
        settings: Settings as parsed from disk.

    Returns:
        A tuple (normalized, repaired), where repaired is True when the
            normalized settings differ from the input and should be saved.

    Example:
        ```python
        settings = AppSettings(default_feed="gone", feeds=[a, b])
        fixed, repaired = normalize_settings(settings)
        # fixed.default_feed == a.name, only a.is_default, repaired is True
        ```
    """
    if not settings.feeds:
        return create_default_settings(settings.config_directory), True

    candidate = copy_settings(settings)
    feeds = candidate.feeds
    default = resolve_default_feed(candidate) or feeds[0]

    repaired = False
    for feed in feeds:
        should_be_default = feed is default
        if feed.is_default != should_be_default:
            feed.is_default = should_be_default
            repaired = True
    if not _names_equal(candidate.default_feed, default.name):
        candidate.default_feed = default.name
        repaired = True

    return candidate, repaired


class ConfigStore:
    """Loads, caches and persists nuggy settings.

    The settings are read at most once per instance; ``save`` replaces the
    cached value. Feed operations change a copy and hand it to ``save``, so
    a failed write leaves the cache as it was. Pass the instance to collaborators instead of creating
    new ones so they share the cache.

    Attributes:
        config_directory: Directory holding the settings file.
        settings_file: Path to settings.json.

    Example:
        Use a throwaway home directory in tests:
            ```python
            store = ConfigStore(home_dir=tmp_path)
            settings = store.load()
            assert settings.default_feed == "nuget.org"
            ```

    """

    def __init__(self, home_dir: Path | None = None):
        """Initialize the store and create the config directory.

        Args:
            home_dir: Home directory to place ``.nuggy`` under. Defaults
                to the current user's home.

        Raises:
            ConfigError: If the config directory cannot be created.

        """
        home = Path(home_dir) if home_dir is not None else Path.home()
        self.config_directory = home / CONFIG_DIR_NAME
        self.settings_file = self.config_directory / SETTINGS_FILE_NAME
        self._cached: AppSettings | None = None

        try:
            self.config_directory.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise ConfigError(
                f"Failed to create config directory {self.config_directory}: {err}"
            ) from err

    def load(self) -> AppSettings:
        """Load settings, creating or repairing them as needed.

        Returns:
            The cached settings if already loaded, otherwise the settings
            read from disk (normalized), or freshly created defaults when
            no settings file exists.

        Raises:
            ConfigError: If the settings file cannot be read or parsed, or
                if default/repaired settings cannot be written.

        """
        if self._cached is not None:
            return self._cached

        logger = get_global_logger()

        if not self.settings_file.exists():
            logger.verbose("CONFIG", f"No settings at {self.settings_file}, creating defaults")
            settings = create_default_settings(str(self.config_directory))
            self.save(settings)
            return settings

        try:
            raw = self.settings_file.read_text(encoding="utf-8")
            parsed = AppSettings.from_dict(json.loads(raw))
        except (OSError, ValueError) as err:
            raise ConfigError(f"Failed to load configuration: {err}") from err

        settings, repaired = normalize_settings(parsed)
        settings.config_directory = str(self.config_directory)
        logger.verbose("CONFIG", f"Loaded {len(settings.feeds)} feed(s) from {self.settings_file}")

        if repaired:
            logger.verbose("CONFIG", "Repaired default feed settings")
            self.save(settings)
        else:
            self._cached = settings

        return settings

    def save(self, settings: AppSettings) -> None:
        """Write settings to disk and cache them.

        Writes to a temporary sibling file and renames it over the settings
        file, so readers never see a half-written file.

        Args:
            settings: Settings to persist.

        Raises:
            ConfigError: If serialization or writing fails.

        """
        tmp = self.settings_file.with_suffix(".json.tmp")
        try:
            text = json.dumps(settings.to_dict(), indent=2, sort_keys=True) + "\n"
            self.config_directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(self.settings_file)
        except (OSError, TypeError, ValueError) as err:
            raise ConfigError(f"Failed to save configuration: {err}") from err

        get_global_logger().debug("CONFIG", f"Saved settings to {self.settings_file}")
        self._cached = settings

    def list_feeds(self) -> list[FeedConfiguration]:
        return list(self.load().feeds)

    def get_default_feed(self) -> FeedConfiguration | None:
        """Return the default feed, or None when no feeds exist."""
        return resolve_default_feed(self.load())

    def get_feed_by_name(self, name: str) -> FeedConfiguration | None:
        """Return the feed with this name (case-insensitive), or None."""
        return find_feed(self.load(), name)

    def add_feed(self, feed: FeedConfiguration) -> None:
        """Add a feed, replacing any existing feed with the same name."""
        settings = copy_settings(self.load())
        settings.feeds = [f for f in settings.feeds if not _names_equal(f.name, feed.name)]
        settings.feeds.append(feed)
        self.save(settings)

    def set_default_feed(self, name: str) -> None:
        """Make the named feed the only default feed.

        Raises:
            NotFoundError: If no feed has this name. Settings are unchanged.

        """
        settings = copy_settings(self.load())
        if find_feed(settings, name) is None:
            raise NotFoundError(f"Feed '{name}' not found.")

        for feed in settings.feeds:
            feed.is_default = _names_equal(feed.name, name)
        settings.default_feed = name
        self.save(settings)

    def remove_feed(self, name: str) -> None:
        """Remove a feed, promoting the first remaining feed if it was the default.

        Raises:
            NotFoundError: If no feed has this name.

        """
        settings = copy_settings(self.load())
        removed = [f for f in settings.feeds if _names_equal(f.name, name)]
        if not removed:
            raise NotFoundError(f"Feed '{name}' not found.")

        settings.feeds = [f for f in settings.feeds if not _names_equal(f.name, name)]

        was_default = _names_equal(settings.default_feed, name) or any(
            f.is_default for f in removed
        )
        if was_default:
            if settings.feeds:
                new_default = settings.feeds[0]
                for feed in settings.feeds:
                    feed.is_default = feed is new_default
                settings.default_feed = new_default.name
            else:
                settings.default_feed = None

        self.save(settings)
