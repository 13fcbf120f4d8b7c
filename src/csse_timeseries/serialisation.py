"""
Serialisation of the time series to CSV

The output is consumed by spreadsheet and BI tools,
so the format is fixed regardless of the platform we run on:
UTF-8 without a byte-order mark and `\\n` line endings.
"""

from __future__ import annotations

import datetime as dt
import os
import stat
import sys
import tempfile
from pathlib import Path

import pandas as pd

from csse_timeseries.constants import MONTH_ABBREVIATIONS
from csse_timeseries.records import Measure

if sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from backports.strenum import StrEnum

LINE_TERMINATOR: str = "\n"
"""
Line terminator used in all output
"""

ENCODING: str = "utf-8"
"""
Encoding used for all output (no byte-order mark)
"""


class OutputSchema(StrEnum):
    """Layout of an output CSV file"""

    SIMPLE = "simple"
    """
    Province/state and country level with confirmed, deaths and recovered

    Used for the time series files.
    """

    GRANULAR = "granular"
    """
    County, state and country level with new counts and second-order differences

    Used for the daily reports.
    """

    @property
    def measures(self) -> tuple[Measure, ...]:
        """
        Measures reported in this layout
        """
        if self == OutputSchema.SIMPLE:
            return (Measure.CONFIRMED, Measure.DEATHS, Measure.RECOVERED)

        return (Measure.CONFIRMED, Measure.DEATHS)

    @property
    def second_order(self) -> bool:
        """
        Whether this layout includes second-order differences
        """
        return self == OutputSchema.GRANULAR


SIMPLE_COLUMNS: dict[str, str] = {
    "Date": "date",
    "ProvinceState": "province_state",
    "CountryRegion": "country_region",
    "Lat": "latitude",
    "Long": "longitude",
    "Confirmed": "confirmed",
    "Deaths": "deaths",
    "Recovered": "recovered",
    "NewConfirmed": "new_confirmed",
    "NewDeaths": "new_deaths",
    "NewRecovered": "new_recovered",
}
"""
Map from output column to source column for [OutputSchema.SIMPLE][(m).]
"""

GRANULAR_COLUMNS: dict[str, str] = {
    "Date": "date",
    "CountyDistrict": "county_district",
    "ProvinceState": "province_state",
    "CountryRegion": "country_region",
    "Lat": "latitude",
    "Long": "longitude",
    "TotalConfirmed": "confirmed",
    "TotalDeaths": "deaths",
    "NewConfirmed": "new_confirmed",
    "NewDeaths": "new_deaths",
    "DeltaConfirmed": "delta_confirmed",
    "DeltaDeaths": "delta_deaths",
}
"""
Map from output column to source column for [OutputSchema.GRANULAR][(m).]
"""

QUOTED_COLUMNS: frozenset[str] = frozenset(
    {"county_district", "province_state", "country_region"}
)
"""
Source columns which are always quoted in the output
"""

DESCRIPTIVE_COLUMNS: frozenset[str] = frozenset({"latitude", "longitude"})
"""
Source columns which are written as they appear in the source

They are only quoted if they would otherwise break the CSV.
"""


def get_output_columns(
    schema: OutputSchema, rolling_window: int | None = None
) -> dict[str, str]:
    """
    Get the output columns for a layout

    Parameters
    ----------
    schema
        Layout of the output

    rolling_window
        Rolling window, if rolling averages are included

    Returns
    -------
    :
        Map from output column name to source column name, in output order

    Examples
    --------
    >>> list(get_output_columns(OutputSchema.GRANULAR, rolling_window=7))[-2:]
    ['AvgNewConfirmed7', 'AvgNewDeaths7']
    """
    if schema == OutputSchema.SIMPLE:
        res = dict(SIMPLE_COLUMNS)
    else:
        res = dict(GRANULAR_COLUMNS)

    if rolling_window is not None:
        for measure in schema.measures:
            res[f"AvgNew{measure.value.capitalize()}{rolling_window}"] = (
                f"avg_new_{measure.value}"
            )

    return res


def quote(value: str) -> str:
    """
    Quote a value for CSV output

    Parameters
    ----------
    value
        Value to quote

    Returns
    -------
    :
        `value` in double quotes, with embedded double quotes doubled

    Examples
    --------
    >>> quote('Korea, South')
    '"Korea, South"'
    >>> quote('The "Bahamas" islands')
    '"The ""Bahamas"" islands"'
    """
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def _format_descriptive(value: str) -> str:
    if any(c in value for c in (",", '"', "\n", "\r")):
        return quote(value)

    return value


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))

    return f"{value:.2f}"


def date_from_index(date_index: int, epoch: dt.date) -> dt.date:
    """
    Get the date which corresponds to a date index

    Parameters
    ----------
    date_index
        Date index

    epoch
        Date of date index zero

    Returns
    -------
    :
        Date of `date_index`
    """
    return epoch + dt.timedelta(days=int(date_index))


def render_csv(
    derived: pd.DataFrame,
    schema: OutputSchema,
    epoch: dt.date,
    rolling_window: int | None = None,
) -> str:
    """
    Render records to CSV text

    Parameters
    ----------
    derived
        Records with derived metrics, as returned by
        [calculate_derived_metrics][(p).derived.calculate_derived_metrics]

    schema
        Layout of the output

    epoch
        Date of date index zero

    rolling_window
        Rolling window used when deriving the metrics, if any

    Returns
    -------
    :
        CSV text, one row per date and key,
        sorted by date then by country, state and county
    """
    columns = get_output_columns(schema, rolling_window=rolling_window)

    flat = derived.reset_index()
    flat = flat.sort_values(
        ["date_index", "country_region", "province_state", "county_district"],
        kind="stable",
    )
    flat["date"] = [
        date_from_index(v, epoch).isoformat() for v in flat["date_index"]
    ]

    lines = [",".join(quote(c) for c in columns)]
    source_columns = list(columns.values())
    for row in flat[source_columns].itertuples(index=False, name=None):
        fields = []
        for source_column, value in zip(source_columns, row):
            if source_column in QUOTED_COLUMNS:
                fields.append(quote(value))
            elif source_column in DESCRIPTIVE_COLUMNS:
                fields.append(_format_descriptive(value))
            elif source_column == "date":
                fields.append(value)
            else:
                fields.append(_format_number(value))

        lines.append(",".join(fields))

    return LINE_TERMINATOR.join(lines) + LINE_TERMINATOR


def _get_default_file_mode() -> int:
    # The umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)

    return 0o666 & ~umask


def write_text_atomic(text: str, path: Path) -> None:
    """
    Write text to a file, either completely or not at all

    The text is written to a temporary file in the same directory,
    which is then moved into place.
    If `path` already exists, its permissions are kept.
    Otherwise, the file gets the permissions a newly created file would
    (i.e. the process's umask applies).

    Parameters
    ----------
    text
        Text to write. It is written as UTF-8, without a byte-order mark,
        with no line ending translation.

    path
        Path to write to
    """
    path = Path(path)
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = _get_default_file_mode()

    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(text.encode(ENCODING))

        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def format_updated_marker(date: dt.date) -> str:
    """
    Format the text of the "last updated" marker file

    Parameters
    ----------
    date
        Date of the latest data

    Returns
    -------
    :
        Marker text, e.g. "22 Jan 2020" followed by a new line

    Examples
    --------
    >>> format_updated_marker(dt.date(2020, 3, 9))
    '09 Mar 2020\\n'
    """
    return (
        f"{date.day:02d} {MONTH_ABBREVIATIONS[date.month - 1]} {date.year}"
        f"{LINE_TERMINATOR}"
    )
