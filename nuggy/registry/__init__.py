"""
NuGet v3 registry access for nuggy.

Modules
-------
client : module
    NuGetClient: service index, registration metadata, download counts and
    package downloads for one feed.
models : module
    PackageIdentity, PackageMetadata and dependency data types.

Public API
----------
NuGetClient : class
    Client bound to one feed's service index URL.
PackageIdentity, PackageMetadata, DependencySet, PackageDependency : dataclasses
    Package data as reported by a feed.
"""

from .client import NuGetClient
from .models import (
    DependencySet,
    PackageDependency,
    PackageIdentity,
    PackageMetadata,
    short_framework_name,
)

__all__ = [
    "NuGetClient",
    "DependencySet",
    "PackageDependency",
    "PackageIdentity",
    "PackageMetadata",
    "short_framework_name",
]
