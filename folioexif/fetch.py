# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Byte fetching for image files

Gallery images are either files on disk or URLs on the site being served.
Both are read fully into memory; the decoder only ever sees bytes.

Copyright 2025 DNAi inc.
"""

from pathlib import Path
from typing import Optional, Union

import httpx

from folioexif.exceptions import FetchError

DEFAULT_TIMEOUT = 30.0


def is_url(location: Union[str, Path]) -> bool:
    """Check whether a location is an HTTP(S) URL."""
    return isinstance(location, str) and location.lower().startswith(('http://', 'https://'))


def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT, client: Optional[httpx.Client] = None) -> bytes:
    """
    Download an image over HTTP(S).

    Args:
        url: Image URL
        timeout: Request timeout in seconds
        client: Optional client to reuse (tests pass one with a mock transport)

    Returns:
        Response body

    Raises:
        FetchError: On invalid URLs, transport errors, timeouts or non-2xx responses
    """
    try:
        if client is not None:
            resp = client.get(url, follow_redirects=True, timeout=timeout)
        else:
            resp = httpx.get(url, follow_redirects=True, timeout=timeout)
        resp.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(f"Failed to fetch {url}: {e}")
    return resp.content


def fetch_file(path: Union[str, Path]) -> bytes:
    """
    Read an image from the local filesystem.

    Raises:
        FetchError: If the file cannot be read
    """
    try:
        with open(path, 'rb') as f:
            return f.read()
    except (OSError, ValueError) as e:
        raise FetchError(f"Failed to read {path}: {e}")


def fetch_bytes(
    location: Union[str, Path],
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None
) -> bytes:
    """
    Fetch the raw bytes of an image from a URL or a local path.

    Args:
        location: URL or filesystem path
        timeout: Request timeout in seconds for URLs
        client: Optional httpx client for URLs

    Returns:
        File contents

    Raises:
        FetchError: If the bytes cannot be obtained
    """
    if is_url(location):
        return fetch_url(str(location), timeout=timeout, client=client)
    return fetch_file(location)
