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

"""Command-line interface for nuggy.

This module provides the main CLI entry point for the nuggy tool, offering
commands for feed management and package inspection.

Commands:

    feeds list: List configured feeds
    feeds add: Validate and add a feed
    feeds set: Set the default feed
    feeds remove: Remove a feed
    package metadata: Show metadata of a package version
    package versions: List all versions of a package
    package show: Materialize a package and list its files
    package file: Print a single file from a package

Example:
    Add a feed and make it the default:
        ```bash
        $ nuggy feeds add --name contoso --source https://nuget.contoso.com/v3/index.json --default
        ```

    List versions of a package:
        ```bash
        $ nuggy package versions Serilog
        ```

    Print a file from a specific version:
        ```bash
        $ nuggy package file Serilog README.md --version 3.1.1
        ```

    Enable verbose output:
        ```bash
        $ nuggy package show Serilog --verbose
        ```

Exit Codes:

- 0: Success, or a reported lookup/download error
- 1: Configuration error, failed feed validation, or any `package file` error

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Commands are registered with nested subparsers ("feeds", "package").
    Each command has its own handler function (cmd_<group>_<command>).
    Verbose mode shows full tracebacks on errors for debugging.
    Log output goes to stderr; `package file` writes only the file content
    to stdout.

"""

from __future__ import annotations

import argparse
import sys
import traceback
from typing import TextIO

from nuggy import __version__
from nuggy.config import ConfigStore
from nuggy.core import (
    add_feed,
    extract_package_file,
    get_package_metadata,
    get_package_versions,
    list_feeds,
    remove_feed,
    set_default_feed,
    show_package_contents,
)
from nuggy.exceptions import ConfigError, FeedValidationError, NuggyError
from nuggy.logging import get_logger, set_global_logger
from nuggy.registry import PackageMetadata
from nuggy.results import FeedListResult

_SIZE_SUFFIXES = ("B", "KB", "MB", "GB")


def format_size(size: int) -> str:
    """Format a byte count for display, e.g. 1536 -> "1.5 KB"."""
    number = float(size)
    index = 0
    while round(number / 1024) >= 1 and index < len(_SIZE_SUFFIXES) - 1:
        number /= 1024
        index += 1
    return f"{number:,.1f} {_SIZE_SUFFIXES[index]}"


def _configure_logger(args: argparse.Namespace) -> None:
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))


def _report_error(
    err: Exception, args: argparse.Namespace, stream: TextIO | None = None
) -> None:
    out = stream or sys.stdout
    print(f"Error: {err}", file=out)
    if args.verbose or args.debug:
        traceback.print_exc()


def _na(value: object) -> str:
    return "N/A" if value in (None, "") else str(value)


def _print_feeds(result: FeedListResult) -> None:
    if not result.feeds:
        print("No feeds configured")
        return

    print("=" * 70)
    print("CONFIGURED FEEDS")
    print("=" * 70)
    for feed in result.feeds:
        marker = "*" if feed.is_default else " "
        print(f" {marker} {feed.name:<20} {feed.source}")
    print("=" * 70)
    print(f"Default feed: {_na(result.default_feed)}")


def _print_metadata(feed: str, package: PackageMetadata) -> None:
    published = (
        package.published.strftime("%Y-%m-%d %H:%M:%S UTC") if package.published else None
    )
    downloads = f"{package.download_count:,}" if package.download_count is not None else None

    print("=" * 70)
    print("PACKAGE METADATA")
    print("=" * 70)
    print(f"Feed:            {feed}")
    print(f"Package:         {package.id}")
    print(f"Version:         {package.version}")
    print(f"Authors:         {_na(package.authors)}")
    print(f"Description:     {_na(package.description)}")
    print(f"License:         {_na(package.license or package.license_url)}")
    print(f"Project URL:     {_na(package.project_url)}")
    print(f"Tags:            {_na(package.tags)}")
    print(f"Download Count:  {_na(downloads)}")
    print(f"Published:       {_na(published)}")
    print("=" * 70)

    if package.dependency_sets:
        print()
        print("Dependencies:")
        for dep_set in package.dependency_sets:
            framework = dep_set.target_framework or "Any"
            deps = ", ".join(str(d) for d in dep_set.packages) or "None"
            print(f"  {framework:<20} {deps}")


def cmd_feeds_list(args: argparse.Namespace) -> int:
    """Handler for 'nuggy feeds list' command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for configuration errors).

    """
    _configure_logger(args)
    try:
        result = list_feeds(ConfigStore())
    except ConfigError as err:
        _report_error(err, args)
        return 1

    _print_feeds(result)
    return 0


def cmd_feeds_add(args: argparse.Namespace) -> int:
    """Handler for 'nuggy feeds add' command.

    The feed's service index is fetched before anything is saved; a feed
    that cannot be reached is not added.

    Args:
        args: Parsed command-line arguments containing name, source and
            the default flag.

    Returns:
        Exit code (0 for success, 1 if validation or saving fails).

    """
    _configure_logger(args)
    print(f"Adding feed '{args.name}': {args.source}")
    print()

    try:
        result = add_feed(ConfigStore(), args.name, args.source, set_default=args.default)
    except (ConfigError, FeedValidationError) as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    print(f"[SUCCESS] Added feed '{args.name}'")
    if args.default:
        print(f"[SUCCESS] Set '{args.name}' as the default feed")
    print()
    _print_feeds(result)
    return 0


def cmd_feeds_set(args: argparse.Namespace) -> int:
    """Handler for 'nuggy feeds set' command."""
    _configure_logger(args)
    try:
        set_default_feed(ConfigStore(), args.name)
    except ConfigError as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    print(f"[SUCCESS] Set '{args.name}' as the default feed")
    return 0


def cmd_feeds_remove(args: argparse.Namespace) -> int:
    """Handler for 'nuggy feeds remove' command."""
    _configure_logger(args)
    try:
        result = remove_feed(ConfigStore(), args.name)
    except ConfigError as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    print(f"[SUCCESS] Removed feed '{args.name}'")
    if result.default_feed:
        print(f"Default feed: {result.default_feed}")
    return 0


def cmd_package_metadata(args: argparse.Namespace) -> int:
    """Handler for 'nuggy package metadata' command.

    Resolves the requested (or newest) version of a package on a feed and
    prints its metadata and dependency groups.

    Args:
        args: Parsed command-line arguments containing the package id,
            feed and version.

    Returns:
        Exit code (0 unless the configuration cannot be loaded).

    """
    _configure_logger(args)
    try:
        result = get_package_metadata(
            ConfigStore(), args.package, feed=args.feed, version=args.version
        )
    except ConfigError as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    _print_metadata(result.feed, result.package)
    return 0


def cmd_package_versions(args: argparse.Namespace) -> int:
    """Handler for 'nuggy package versions' command."""
    _configure_logger(args)
    try:
        result = get_package_versions(ConfigStore(), args.package, feed=args.feed)
    except ConfigError as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    print("=" * 70)
    print(f"{result.package_id.upper()} - ALL VERSIONS ({result.feed})")
    print("=" * 70)
    print(f"{'Version':<28} {'Published':<12} {'Downloads':>14}  Prerelease")
    print("-" * 70)
    for package in result.versions:
        published = package.published.strftime("%Y-%m-%d") if package.published else "N/A"
        downloads = (
            f"{package.download_count:,}" if package.download_count is not None else "N/A"
        )
        prerelease = "Yes" if package.version.is_prerelease else "No"
        print(f"{str(package.version):<28} {published:<12} {downloads:>14}  {prerelease}")
    print("=" * 70)
    print(f"Total versions: {len(result.versions)}")
    return 0


def cmd_package_show(args: argparse.Namespace) -> int:
    """Handler for 'nuggy package show' command.

    Materializes the package in the NuGet global package folder (or reuses
    it when already there) and lists its files with their sizes.

    Args:
        args: Parsed command-line arguments containing the package id,
            feed and version.

    Returns:
        Exit code (0 unless the configuration cannot be loaded).

    """
    _configure_logger(args)
    try:
        result = show_package_contents(
            ConfigStore(), args.package, feed=args.feed, version=args.version
        )
    except ConfigError as err:
        _report_error(err, args)
        return 1
    except NuggyError as err:
        _report_error(err, args)
        return 0

    if result.cache_hit:
        print(f"Package location: {result.package_path}")
    else:
        print(f"Package saved to: {result.package_path}")
    print()

    print("=" * 70)
    print(f"{result.package.id} {result.package.version} - PACKAGE CONTENTS")
    print("=" * 70)
    for entry in result.files:
        print(f"  {entry.relative_path:<56} {format_size(entry.size):>11}")
    print("=" * 70)
    print(f"Total files: {len(result.files)}, Total size: {format_size(result.total_size)}")
    return 0


def cmd_package_file(args: argparse.Namespace) -> int:
    """Handler for 'nuggy package file' command.

    Writes the raw file content to stdout so it can be piped or redirected.
    Errors are written to stderr.

    Args:
        args: Parsed command-line arguments containing the package id,
            file path, feed and version.

    Returns:
        Exit code (0 for success, 1 for any error).

    """
    _configure_logger(args)
    try:
        result = extract_package_file(
            ConfigStore(),
            args.package,
            args.file_path,
            feed=args.feed,
            version=args.version,
        )
    except NuggyError as err:
        _report_error(err, args, stream=sys.stderr)
        return 1

    sys.stdout.write(result.content)
    sys.stdout.flush()
    return 0


def _add_log_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_feed_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--feed",
        default=None,
        help="Name of the feed to use (default: the default feed)",
    )


def _add_version_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--version",
        default=None,
        help="Exact package version (default: latest, prerelease included)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the nuggy CLI."""
    parser = argparse.ArgumentParser(
        prog="nuggy",
        description="nuggy - browse NuGet v3 feeds and package contents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"nuggy {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'feeds' command group
    parser_feeds = subparsers.add_parser(
        "feeds",
        help="Manage NuGet feeds",
        description="List, add, remove and select the default NuGet feed.",
    )
    feeds_sub = parser_feeds.add_subparsers(dest="feeds_command", required=True)

    parser_feeds_list = feeds_sub.add_parser("list", help="List configured feeds")
    _add_log_flags(parser_feeds_list)
    parser_feeds_list.set_defaults(func=cmd_feeds_list)

    parser_feeds_add = feeds_sub.add_parser(
        "add",
        help="Add a new feed",
        description="Validate a feed's service index and add it to the configuration.",
    )
    parser_feeds_add.add_argument(
        "-s",
        "--source",
        required=True,
        help="Service index URL of the feed (e.g. https://api.nuget.org/v3/index.json)",
    )
    parser_feeds_add.add_argument(
        "-n",
        "--name",
        required=True,
        help="Name of the feed",
    )
    parser_feeds_add.add_argument(
        "--default",
        action="store_true",
        help="Make the new feed the default feed",
    )
    _add_log_flags(parser_feeds_add)
    parser_feeds_add.set_defaults(func=cmd_feeds_add)

    parser_feeds_set = feeds_sub.add_parser("set", help="Set the default feed")
    parser_feeds_set.add_argument("name", help="Name of the feed")
    _add_log_flags(parser_feeds_set)
    parser_feeds_set.set_defaults(func=cmd_feeds_set)

    parser_feeds_remove = feeds_sub.add_parser("remove", help="Remove a feed")
    parser_feeds_remove.add_argument("name", help="Name of the feed")
    _add_log_flags(parser_feeds_remove)
    parser_feeds_remove.set_defaults(func=cmd_feeds_remove)

    # 'package' command group
    parser_package = subparsers.add_parser(
        "package",
        help="Interact with NuGet packages",
        description="Inspect package metadata, versions and contents.",
    )
    package_sub = parser_package.add_subparsers(dest="package_command", required=True)

    parser_metadata = package_sub.add_parser(
        "metadata", help="Display metadata for a package"
    )
    parser_metadata.add_argument("package", help="Package id")
    _add_feed_option(parser_metadata)
    _add_version_option(parser_metadata)
    _add_log_flags(parser_metadata)
    parser_metadata.set_defaults(func=cmd_package_metadata)

    parser_versions = package_sub.add_parser(
        "versions", help="List all versions of a package"
    )
    parser_versions.add_argument("package", help="Package id")
    _add_feed_option(parser_versions)
    _add_log_flags(parser_versions)
    parser_versions.set_defaults(func=cmd_package_versions)

    parser_show = package_sub.add_parser(
        "show",
        help="Display the contents of a package",
        description="Extract the package into the NuGet global package folder (if needed) and list its files.",
    )
    parser_show.add_argument("package", help="Package id")
    _add_feed_option(parser_show)
    _add_version_option(parser_show)
    _add_log_flags(parser_show)
    parser_show.set_defaults(func=cmd_package_show)

    parser_file = package_sub.add_parser(
        "file",
        help="Extract a specific file from a package",
        description="Write the content of one file inside a package to stdout.",
    )
    parser_file.add_argument("package", help="Package id")
    parser_file.add_argument("file_path", help="Path of the file within the package")
    _add_feed_option(parser_file)
    _add_version_option(parser_file)
    _add_log_flags(parser_file)
    parser_file.set_defaults(func=cmd_package_file)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the nuggy CLI.

    This function is registered as the 'nuggy' console script in pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Call the appropriate command handler
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
