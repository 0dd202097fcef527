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

"""Configuration loading and management for nuggy.

This package covers the two pieces of local configuration nuggy reads:

  - nuggy's own feed settings (``~/.nuggy/settings.json``)
  - the NuGet global package folder location (``NUGET_PACKAGES`` or the
    user-level NuGet.Config)

Public API:

- ConfigStore: Load, cache and persist feed settings
- FeedConfiguration, AppSettings: Settings data types
- normalize_settings: Restore the default feed invariant
- get_global_packages_folder: Resolve the package cache root

Example:
    Basic usage:

        from nuggy.config import ConfigStore, get_global_packages_folder

        store = ConfigStore()
        print(store.get_default_feed().name)  # "nuget.org"
        print(get_global_packages_folder())   # ~/.nuget/packages

"""

from .nuget import get_global_packages_folder
from .store import (
    NUGET_ORG_NAME,
    NUGET_ORG_SOURCE,
    AppSettings,
    ConfigStore,
    FeedConfiguration,
    normalize_settings,
)

__all__ = [
    "NUGET_ORG_NAME",
    "NUGET_ORG_SOURCE",
    "AppSettings",
    "ConfigStore",
    "FeedConfiguration",
    "normalize_settings",
    "get_global_packages_folder",
]
