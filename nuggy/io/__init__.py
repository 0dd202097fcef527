"""Input/Output operations for nuggy.

This module provides the HTTP session and request helpers shared by the
registry client.

Modules:

http : module
    Session with retries, JSON fetch and archive download helpers.

Public API:

make_session : function
    Create a requests.Session with retry/backoff defaults.
get_json : function
    Fetch and decode a JSON document.
download_bytes : function
    Download a package archive into memory.

Example:
    from nuggy.io import make_session, download_bytes

    with make_session() as session:
        data = download_bytes(session, "https://example.com/pkg.1.0.0.nupkg")

"""

from .http import download_bytes, get_json, make_session

__all__ = ["download_bytes", "get_json", "make_session"]
