"""
Fetching of the source files

Sources can be URLs (fetched with requests) or local paths
(e.g. a clone of the source repository).
A source which does not exist is not an error here,
it is signalled by returning `None`
(for the daily reports, this is how we know there is no more data).
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

LOGGER = logging.getLogger(__name__)

NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "max-age=0, no-cache, no-store",
}
"""
Headers sent with every request, the data is updated throughout the day
"""

DEFAULT_TIMEOUT: float = 60.0
"""
Default timeout for requests, in seconds
"""


def is_url(location: str) -> bool:
    """
    Whether a location is a URL (as opposed to a local path)

    Parameters
    ----------
    location
        Location to check

    Returns
    -------
    :
        `True` if `location` is an HTTP(S) URL

    Examples
    --------
    >>> is_url("https://raw.githubusercontent.com/x.csv")
    True
    >>> is_url("/data/01-22-2020.csv")
    False
    """
    return location.lower().startswith(("http://", "https://"))


def fetch_url(
    url: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str | None:
    """
    Fetch the text at a URL

    Parameters
    ----------
    url
        URL to fetch

    session
        Session to use. If not supplied, a one-off request is made.

    timeout
        Timeout in seconds

    Returns
    -------
    :
        Text at `url` (decoded as UTF-8, ignoring any byte-order mark)
        or `None` if the server reports that there is nothing at `url`

    Raises
    ------
    requests.HTTPError
        The server returned an error other than "not found"
    """
    getter = requests.get if session is None else session.get

    LOGGER.info("Reading from %s", url)
    response = getter(url, headers=NO_CACHE_HEADERS, timeout=timeout)
    if response.status_code == requests.codes.not_found:
        LOGGER.debug("Nothing found at %s", url)
        return None

    response.raise_for_status()

    return response.content.decode("utf-8-sig")


def read_path(path: str | Path) -> str | None:
    """
    Read the text in a local file

    Parameters
    ----------
    path
        Path to read

    Returns
    -------
    :
        Text in `path` (decoded as UTF-8, ignoring any byte-order mark)
        or `None` if `path` does not exist
    """
    LOGGER.info("Reading from %s", path)
    try:
        return Path(path).read_bytes().decode("utf-8-sig")
    except FileNotFoundError:
        LOGGER.debug("Nothing found at %s", path)
        return None


def fetch_text(
    location: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str | None:
    """
    Fetch the text at a location

    Parameters
    ----------
    location
        URL or local path

    session
        Session to use for URLs

    timeout
        Timeout in seconds for URLs

    Returns
    -------
    :
        Text at `location` or `None` if there is nothing at `location`
    """
    if is_url(location):
        return fetch_url(location, session=session, timeout=timeout)

    return read_path(location)
