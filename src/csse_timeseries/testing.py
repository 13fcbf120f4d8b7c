"""
Code to support our tests

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Union

from attrs import define, field

from csse_timeseries.config import DAILY_REPORT_FILENAME_TEMPLATE
from csse_timeseries.constants import TIME_SERIES_ID_COLUMNS, TIME_SERIES_URLS
from csse_timeseries.serialisation import quote

CELL = Union[str, int]


def format_simple_date(date: dt.date) -> str:
    """
    Format a date the way the time series headers do (`M/D/YY`)

    Parameters
    ----------
    date
        Date to format

    Returns
    -------
    :
        Formatted date

    Examples
    --------
    >>> format_simple_date(dt.date(2020, 1, 22))
    '1/22/20'
    """
    return f"{date.month}/{date.day}/{date.year % 100}"


def _format_cell(value: CELL) -> str:
    value = str(value)
    if any(c in value for c in (",", '"', "\n", "\r")):
        return quote(value)

    return value


def make_csv(header: Sequence[str], rows: Iterable[Sequence[CELL]]) -> str:
    """
    Make CSV text

    Parameters
    ----------
    header
        Header row

    rows
        Data rows

    Returns
    -------
    :
        CSV text, with values quoted only where needed
    """
    lines = [",".join(_format_cell(v) for v in header)]
    lines.extend(",".join(_format_cell(v) for v in row) for row in rows)

    return "\n".join(lines) + "\n"


def make_time_series_csv(
    dates: Sequence[dt.date],
    rows: Iterable[tuple[str, str, str, str, Sequence[CELL]]],
) -> str:
    """
    Make the text of a time series file

    Parameters
    ----------
    dates
        Dates of the data columns

    rows
        Province/state, country/region, latitude, longitude
        and the value for each date

    Returns
    -------
    :
        Time series file text
    """
    header = [*TIME_SERIES_ID_COLUMNS, *(format_simple_date(d) for d in dates)]

    return make_csv(header, ([*row[:4], *row[4]] for row in rows))


@define
class DictFetcher:
    """
    Fetcher which looks locations up in a dictionary

    Locations which aren't in the dictionary are treated as not found.
    """

    sources: Mapping[str, str]
    """
    Map from location to text
    """

    requested: list[str] = field(factory=list, init=False)
    """
    Locations which have been requested, in order
    """

    def __call__(self, location: str) -> str | None:
        """
        Fetch the text at a location

        Parameters
        ----------
        location
            Location to fetch

        Returns
        -------
        :
            Text at `location` or `None` if there is nothing there
        """
        self.requested.append(location)

        return self.sources.get(location)


def write_daily_reports(
    directory: Path, reports: Mapping[dt.date, str], encoding: str = "utf-8"
) -> None:
    """
    Write daily reports the way they are laid out in the source repository

    Parameters
    ----------
    directory
        Directory to write into

    reports
        Map from date to report text

    encoding
        Encoding to write with (use "utf-8-sig" to include a byte-order mark)
    """
    for date, text in reports.items():
        path = directory / DAILY_REPORT_FILENAME_TEMPLATE.format(date=date)
        path.write_bytes(text.encode(encoding))


def write_time_series(directory: Path, files: Mapping[str, str]) -> None:
    """
    Write time series files the way they are named in the source repository

    Parameters
    ----------
    directory
        Directory to write into

    files
        Map from measure to file text
    """
    for measure, text in files.items():
        filename = TIME_SERIES_URLS[measure].rsplit("/", 1)[-1]
        (directory / filename).write_bytes(text.encode("utf-8"))
