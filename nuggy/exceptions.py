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

"""Exception hierarchy for nuggy.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Settings file could not be read, parsed or written
- NotFoundError: A named feed, package or package version does not exist
- InvalidVersionError: A user-supplied version string could not be parsed
- NetworkError: Feed/registry communication failures
- ExtractionError: Writing package contents to disk failed
- PackageFileNotFoundError: A requested file is not part of a package

All exceptions inherit from NuggyError, allowing users to catch all nuggy
errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from nuggy.core import show_package_contents
        from nuggy.exceptions import NotFoundError, NetworkError

        try:
            result = show_package_contents(store, "Newtonsoft.Json")
        except NotFoundError as e:
            print(f"Not found: {e}")
        except NetworkError as e:
            print(f"Network error: {e}")
        ```

    Catching all nuggy errors:
        ```python
        from nuggy.exceptions import NuggyError

        try:
            result = show_package_contents(store, "Newtonsoft.Json")
        except NuggyError as e:
            print(f"nuggy error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "NuggyError",
    "ConfigError",
    "NotFoundError",
    "NoDefaultFeedError",
    "InvalidVersionError",
    "NetworkError",
    "FeedValidationError",
    "DownloadError",
    "ExtractionError",
    "PackageFileNotFoundError",
]


class NuggyError(Exception):
    """Base exception for all nuggy errors.

    All nuggy-specific exceptions inherit from this class, allowing users
    to catch all nuggy errors with a single except clause if needed.
    """

    pass


class ConfigError(NuggyError):
    """Raised for settings-related errors.

    This exception is raised when there are problems with:

    - Reading the settings file (permissions, I/O failures)
    - Parsing the settings file (invalid JSON, unexpected structure,
        feeds missing a name or source)
    - Writing the settings file

    The CLI treats this error as fatal for the invocation.
    """

    pass


class NotFoundError(NuggyError):
    """Raised when a named feed, package or package version does not exist.

    Example:
        Distinguishing missing packages from missing versions:
            ```python
            try:
                target = resolve_target(client, "Serilog", "99.0.0")
            except NotFoundError as e:
                print(e)  # Version '99.0.0' of package 'Serilog' not found
            ```
    """

    pass


class NoDefaultFeedError(NotFoundError):
    """Raised when no feed name is given and no default feed is configured."""

    pass


class InvalidVersionError(NuggyError):
    """Raised when a user-supplied version string is not a valid NuGet version."""

    pass


class NetworkError(NuggyError):
    """Raised for feed/registry communication errors.

    This exception is raised when there are problems with:

    - HTTP failures (connection errors, timeouts, non-2xx responses)
    - Responses that are not valid JSON or miss required fields
    - Feeds that do not advertise a required resource type
    """

    pass


class FeedValidationError(NetworkError):
    """Raised when probing a new feed's service index fails.

    The feed is never persisted when this error is raised.
    """

    pass


class DownloadError(NetworkError):
    """Raised when a package archive cannot be downloaded."""

    pass


class ExtractionError(NuggyError):
    """Raised when package contents cannot be written to the package folder.

    Files written before the failure are left in place.
    """

    pass


class PackageFileNotFoundError(NuggyError, FileNotFoundError):
    """Raised when a requested file is not part of a resolved package."""

    pass
