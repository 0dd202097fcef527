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

"""Core NuGet version parsing and comparison for nuggy.

This module is format-agnostic: it does NOT talk to feeds or read files.
It only parses, normalizes and orders NuGet version strings.

NuGet versions are SemVer 2.0 with two relaxations: one to four numeric
parts are accepted ("1.0" and "1.0.0.0" are valid) and a fourth "revision"
part is kept when non-zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import total_ordering
import re

from nuggy.exceptions import InvalidVersionError

_LABEL = re.compile(r"^[0-9A-Za-z-]+$")
_NUMERIC = re.compile(r"^\d+$")


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """Parsed NuGet version.

    Attributes:
        major: First numeric part.
        minor: Second numeric part (0 when omitted).
        patch: Third numeric part (0 when omitted).
        revision: Fourth numeric part (0 when omitted).
        release_labels: Prerelease labels split on ".", e.g. ("beta", "2").
        metadata: Build metadata after "+", ignored in comparisons.
        original: The string the version was parsed from.

    Equality and ordering ignore metadata and compare release labels
    case-insensitively, so "1.0.0-Beta+abc" == "1.0-beta".
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release_labels: tuple[str, ...] = ()
    metadata: str | None = None
    original: str = field(default="", compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release_labels)

    @property
    def release(self) -> str:
        return ".".join(self.release_labels)

    @property
    def normalized(self) -> str:
        """Normalized string: 3 parts (4 if revision set), labels, no metadata."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release_labels:
            text += f"-{self.release}"
        return text

    def _key(self) -> tuple:
        return (
            (self.major, self.minor, self.patch, self.revision),
            _release_key(self.release_labels),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: NuGetVersion) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.original or self.normalized


def _release_key(labels: tuple[str, ...]) -> tuple:
    """Build a sort key for prerelease labels.

    A release without labels sorts after every prerelease of the same core
    version. Numeric labels sort before alphanumeric ones and compare
    numerically; alphanumeric labels compare case-insensitively. A shorter
    label list that is a prefix of a longer one sorts first.
    """
    if not labels:
        return (1, ())
    parts: list[tuple[int, object]] = []
    for label in labels:
        if _NUMERIC.match(label):
            parts.append((0, int(label)))
        else:
            parts.append((1, label.lower()))
    return (0, tuple(parts))


def try_parse_version(text: str | None) -> NuGetVersion | None:
    """Parse a NuGet version string, returning None when it is invalid.

    Accepts 1 to 4 dot-separated numeric parts, an optional prerelease
    section after "-" and optional metadata after "+". Leading "v" prefixes,
    empty labels and leading zeros in numeric prerelease labels are
    rejected, matching the registry's own validation.

    Example:
        ```python
        try_parse_version("1.1.0-beta")   # NuGetVersion(major=1, minor=1, ...)
        try_parse_version("not-a-version")  # None
        ```
    """
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None

    metadata: str | None = None
    if "+" in s:
        s, metadata = s.split("+", 1)
        if not metadata or not all(
            _LABEL.match(part) for part in metadata.split(".")
        ):
            return None

    labels: tuple[str, ...] = ()
    if "-" in s:
        s, release = s.split("-", 1)
        parts = release.split(".")
        for part in parts:
            if not part or not _LABEL.match(part):
                return None
            if _NUMERIC.match(part) and len(part) > 1 and part.startswith("0"):
                return None
        labels = tuple(parts)

    numbers = s.split(".")
    if not 1 <= len(numbers) <= 4:
        return None
    if not all(_NUMERIC.match(n) for n in numbers):
        return None

    values = [int(n) for n in numbers] + [0] * (4 - len(numbers))
    return NuGetVersion(
        major=values[0],
        minor=values[1],
        patch=values[2],
        revision=values[3],
        release_labels=labels,
        metadata=metadata,
        original=text.strip(),
    )


def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version string.

    Raises:
        InvalidVersionError: If the string is not a valid NuGet version.
    """
    parsed = try_parse_version(text)
    if parsed is None:
        raise InvalidVersionError(f"Invalid version format: '{text}'")
    return parsed

