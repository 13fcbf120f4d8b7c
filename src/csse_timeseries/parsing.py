"""
Parsing of the source files

Two layouts are supported:

- time series files: one file per measure, one row per entity
  and one column per date
  (header `Province/State,Country/Region,Lat,Long,1/22/20,1/23/20,...`)
- daily reports: one file per date, one row per entity.
  The columns changed a number of times,
  so they are looked up by name using a table of synonyms.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
from collections.abc import Iterator, Mapping, Sequence

import pandas as pd
from attrs import define

from csse_timeseries.constants import (
    DAILY_REPORT_COLUMN_SYNONYMS,
    DAILY_REPORT_FIELDS_OPTIONAL,
    DAILY_REPORT_FIELDS_REQUIRED,
    TIME_SERIES_ID_COLUMNS,
)
from csse_timeseries.exceptions import SourceFormatError
from csse_timeseries.normalisation import GeographicNormaliser
from csse_timeseries.records import GeographicKey, Measure, Observation

BYTE_ORDER_MARK: str = "\ufeff"
"""
Unicode byte-order mark, which some of the sources start with
"""


def load_source_table(content: str | bytes) -> pd.DataFrame:
    """
    Load delimited text into a table of raw strings

    Parameters
    ----------
    content
        Text to load. If bytes, it is decoded as UTF-8.
        A leading byte-order mark is ignored.

    Returns
    -------
    :
        Table with one row per line, including the header line.
        All values are left as strings, nothing is converted to NaN.

    Raises
    ------
    SourceFormatError
        `content` is empty or its rows don't all have the same number of fields
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")
    elif content.startswith(BYTE_ORDER_MARK):
        content = content[len(BYTE_ORDER_MARK) :]

    try:
        rows = [r for r in csv.reader(io.StringIO(content, newline="")) if r]
    except csv.Error as exc:
        msg = f"The source could not be read as delimited text. {exc}"
        raise SourceFormatError(msg) from exc

    if not rows:
        msg = "The source contains no data, not even a header"
        raise SourceFormatError(msg)

    n_fields = len(rows[0])
    bad_rows = [i + 1 for i, r in enumerate(rows) if len(r) != n_fields]
    if bad_rows:
        msg = (
            f"Expected every row to have {n_fields} fields (like the header), "
            f"rows with a different number of fields: {bad_rows}"
        )
        raise SourceFormatError(msg)

    return pd.DataFrame(rows, dtype=str)


def parse_simple_date(value: str) -> dt.date:
    """
    Parse a date of the form `M/D/YY`

    Parameters
    ----------
    value
        Value to parse. The year is interpreted as 2000 + YY.

    Returns
    -------
    :
        Parsed date

    Raises
    ------
    SourceFormatError
        `value` is not a date of the form `M/D/YY`

    Examples
    --------
    >>> parse_simple_date("1/22/20")
    datetime.date(2020, 1, 22)
    >>> parse_simple_date("12/3/21")
    datetime.date(2021, 12, 3)
    """
    parts = value.strip().split("/")
    if len(parts) != 3:  # noqa: PLR2004
        msg = f"Unexpected date format: {value!r}"
        raise SourceFormatError(msg)

    try:
        month, day, year = (int(p) for p in parts)
        return dt.date(2000 + year, month, day)
    except ValueError as exc:
        msg = f"Unexpected date format: {value!r}"
        raise SourceFormatError(msg) from exc


def parse_count(value: str) -> int | None:
    """
    Parse a count

    Parameters
    ----------
    value
        Value to parse

    Returns
    -------
    :
        Parsed count or `None` if `value` is not a non-negative integer
        (blank cells are common in the sources).
        Counts are cumulative, so a negative value is treated as invalid
        in the same way as a value which is not an integer.

    Examples
    --------
    >>> parse_count("12")
    12
    >>> parse_count("") is None
    True
    >>> parse_count("-3") is None
    True
    """
    try:
        res = int(value)
    except ValueError:
        return None

    if res < 0:
        return None

    return res


def parse_time_series_header(header: Sequence[str]) -> tuple[dt.date, ...]:
    """
    Parse the header of a time series file

    Parameters
    ----------
    header
        Header row

    Returns
    -------
    :
        Dates of the data columns, in column order

    Raises
    ------
    SourceFormatError
        The header doesn't start with the expected columns
        or one of the date columns can't be parsed
    """
    n_id_columns = len(TIME_SERIES_ID_COLUMNS)
    if tuple(header[:n_id_columns]) != TIME_SERIES_ID_COLUMNS:
        msg = (
            "Unexpected data header format. "
            f"Expected the header to start with {list(TIME_SERIES_ID_COLUMNS)}. "
            f"Received {list(header[:n_id_columns])}"
        )
        raise SourceFormatError(msg)

    return tuple(parse_simple_date(v) for v in header[n_id_columns:])


def parse_time_series(
    content: str | bytes, measure: Measure
) -> Iterator[tuple[dt.date, GeographicKey, Observation]]:
    """
    Parse a time series file

    Parameters
    ----------
    content
        Content of the file

    measure
        Measure which the file reports

    Yields
    ------
    :
        Date, key and observation (with only `measure` set)
        for each cell which holds a count.
        Cells without a valid count are skipped.

    Raises
    ------
    SourceFormatError
        The file doesn't have the time series layout
    """
    table = load_source_table(content)
    dates = parse_time_series_header(table.iloc[0].tolist())
    n_id_columns = len(TIME_SERIES_ID_COLUMNS)

    for row in table.iloc[1:].itertuples(index=False, name=None):
        province_state, country_region, latitude, longitude = (
            v.strip() for v in row[:n_id_columns]
        )
        key = GeographicKey(
            country_region=country_region,
            province_state=province_state,
            latitude=latitude,
            longitude=longitude,
        )
        for date, value in zip(dates, row[n_id_columns:]):
            count = parse_count(value)
            if count is None:
                continue

            yield date, key, Observation(**{measure.value: count})


@define(frozen=True)
class DailyReportColumns:
    """
    Position of each field in a daily report
    """

    state: int
    """Column holding the province or state"""

    country: int
    """Column holding the country or region"""

    confirmed: int
    """Column holding the confirmed cases"""

    deaths: int
    """Column holding the deaths"""

    county: int | None = None
    """Column holding the county or district, if any"""

    latitude: int | None = None
    """Column holding the latitude, if any"""

    longitude: int | None = None
    """Column holding the longitude, if any"""

    recovered: int | None = None
    """Column holding the recoveries, if any"""


def resolve_daily_report_columns(
    header: Sequence[str],
    synonyms: Mapping[str, str] = DAILY_REPORT_COLUMN_SYNONYMS,
) -> DailyReportColumns:
    """
    Find the column of each field in a daily report's header

    Parameters
    ----------
    header
        Header row

    synonyms
        Map from (lower case) column name to the field it holds.
        If more than one column maps to the same field, the first is used.

    Returns
    -------
    :
        Position of each field

    Raises
    ------
    SourceFormatError
        One of the required fields is not in the header

    Examples
    --------
    >>> resolve_daily_report_columns(
    ...     ["Province/State", "Country/Region", "Last Update", "Confirmed", "Deaths"]
    ... )
    DailyReportColumns(state=0, country=1, confirmed=3, deaths=4, county=None, latitude=None, longitude=None, recovered=None)
    """  # noqa: E501
    positions: dict[str, int] = {}
    for i, name in enumerate(header):
        field_name = synonyms.get(name.strip().lower())
        if field_name is not None and field_name not in positions:
            positions[field_name] = i

    missing = [f for f in DAILY_REPORT_FIELDS_REQUIRED if f not in positions]
    if missing:
        msg = (
            f"The daily report is missing required fields: {missing}. "
            f"Header: {list(header)}"
        )
        raise SourceFormatError(msg)

    known_fields = {*DAILY_REPORT_FIELDS_REQUIRED, *DAILY_REPORT_FIELDS_OPTIONAL}
    return DailyReportColumns(
        **{k: v for k, v in positions.items() if k in known_fields}
    )


def _get_field(row: Sequence[str], position: int | None) -> str:
    if position is None:
        return ""

    return row[position].strip()


def parse_daily_report(
    content: str | bytes,
    normaliser: GeographicNormaliser | None = None,
    synonyms: Mapping[str, str] = DAILY_REPORT_COLUMN_SYNONYMS,
) -> Iterator[tuple[GeographicKey, Observation]]:
    """
    Parse a daily report

    Parameters
    ----------
    content
        Content of the report

    normaliser
        Normaliser to apply to the geographic fields of each row.
        If not supplied, we use [GeographicNormaliser][(p).normalisation]
        with its default tables.

    synonyms
        Map from (lower case) column name to the field it holds

    Yields
    ------
    :
        Key and observation for each row.
        Rows where the confirmed cases or deaths are not valid counts
        (including negative values) are skipped.

    Raises
    ------
    SourceFormatError
        The report doesn't have a layout we recognise
    """
    if normaliser is None:
        normaliser = GeographicNormaliser()

    table = load_source_table(content)
    columns = resolve_daily_report_columns(table.iloc[0].tolist(), synonyms=synonyms)
    has_county_column = columns.county is not None

    for row in table.iloc[1:].itertuples(index=False, name=None):
        confirmed = parse_count(row[columns.confirmed])
        deaths = parse_count(row[columns.deaths])
        if confirmed is None or deaths is None:
            continue

        recovered = parse_count(_get_field(row, columns.recovered)) or 0

        county, state, country = normaliser(
            _get_field(row, columns.county),
            _get_field(row, columns.state),
            _get_field(row, columns.country),
            has_county_column=has_county_column,
        )
        key = GeographicKey(
            country_region=country,
            province_state=state,
            county_district=county,
            latitude=_get_field(row, columns.latitude),
            longitude=_get_field(row, columns.longitude),
        )

        yield key, Observation(confirmed=confirmed, deaths=deaths, recovered=recovered)
