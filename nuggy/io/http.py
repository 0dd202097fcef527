"""
HTTP(S) access for nuggy.

This module provides the shared HTTP plumbing used by the registry client:
a configured session plus helpers to fetch JSON documents and download
package archives.

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on transient failures (429, 500, 502, 503, 504) with exponential backoff. Configurable via urllib3.util.Retry.
- **Chained Errors** - Every requests failure is re-raised as NetworkError with the original exception chained.
- **Streamed Downloads** - Package archives are streamed in chunks so progress can be logged for large packages.

Constants:

- DEFAULT_CHUNK (int): Stream chunk size (1 MiB).
- JSON_TIMEOUT (int): Per-request timeout for registry JSON documents.
- DOWNLOAD_TIMEOUT (int): Per-request timeout for package downloads.

Example:
Fetch a service index:

    >>> from nuggy.io import make_session, get_json
    >>> with make_session() as session:
    ...     index = get_json(session, "https://api.nuget.org/v3/index.json")
    >>> print(index["version"])
    3.0.0

Notes:
- Timeouts are per-request, not total download time
- A 404 on a JSON document is reported as None so callers can tell
  "does not exist" apart from transport failures
"""

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nuggy import __version__
from nuggy.exceptions import NetworkError
from nuggy.logging import get_global_logger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024
JSON_TIMEOUT = 30
DOWNLOAD_TIMEOUT = 300


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying nuggy.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": f"nuggy/{__version__}",
            "Accept": "application/json, */*",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def get_json(
    session: requests.Session,
    url: str,
    *,
    params: dict[str, str] | None = None,
    timeout: int = JSON_TIMEOUT,
    allow_missing: bool = False,
) -> Any:
    """GET a URL and decode its JSON body.

    Args:
        session: Session to use.
        url: Document URL.
        params: Optional query parameters.
        timeout: Per-request timeout (seconds).
        allow_missing: If True, HTTP 404 returns None instead of raising.

    Returns:
        The decoded JSON document, or None for a 404 when allow_missing is set.

    Raises:
        NetworkError: On connection failures, non-2xx responses or
            bodies that are not valid JSON.
    """
    logger = get_global_logger()
    logger.debug("HTTP", f"GET {url}")

    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as err:
        raise NetworkError(f"request failed for {url}: {err}") from err

    logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")

    if resp.status_code == 404 and allow_missing:
        return None

    try:
        resp.raise_for_status()
    except requests.HTTPError as err:
        raise NetworkError(f"request failed for {url}: {err}") from err

    try:
        return resp.json()
    except ValueError as err:
        raise NetworkError(f"invalid JSON response from {url}: {err}") from err


def download_bytes(
    session: requests.Session,
    url: str,
    *,
    timeout: int = DOWNLOAD_TIMEOUT,
) -> bytes | None:
    """Download a URL into memory.

    Args:
        session: Session to use.
        url: Archive URL.
        timeout: Per-request timeout (seconds).

    Returns:
        The response body, or None if the server answered HTTP 404.

    Raises:
        NetworkError: On connection failures or other non-2xx responses.
    """
    logger = get_global_logger()
    logger.debug("HTTP", f"GET {url}")

    try:
        resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
    except requests.RequestException as err:
        raise NetworkError(f"download failed for {url}: {err}") from err

    with resp:
        logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")
        if resp.status_code == 404:
            return None
        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            raise NetworkError(f"download failed for {url}: {err}") from err

        total_size = int(resp.headers.get("Content-Length", "0") or 0)
        chunks: list[bytes] = []
        downloaded = 0
        last_percent = -1
        try:
            for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                if not chunk:
                    continue
                chunks.append(chunk)
                downloaded += len(chunk)
                if total_size:
                    pct = int(downloaded * 100 / total_size)
                    if pct != last_percent:
                        logger.debug("HTTP", f"download progress: {pct}%")
                        last_percent = pct
        except requests.RequestException as err:
            raise NetworkError(f"download interrupted for {url}: {err}") from err

    logger.verbose("HTTP", f"Downloaded {downloaded} bytes from {url}")
    return b"".join(chunks)
