"""
Configuration of a conversion

Defaults reproduce the datasets we publish.
A conversion can also be configured from a JSON file,
see [load_conversion_config][(m).].
"""

from __future__ import annotations

import datetime as dt
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from attrs import Attribute, define, field
from attrs.converters import optional

from csse_timeseries.constants import (
    DAILY_REPORT_URL_TEMPLATE,
    EPOCH,
    TIME_SERIES_URLS,
)
from csse_timeseries.derived import SECOND_ORDER_LOOKBACK_STEPS
from csse_timeseries.exceptions import UnrecognisedValueError
from csse_timeseries.rollup import Granularity, RollupPolicy
from csse_timeseries.serialisation import OutputSchema
from csse_timeseries.sources import DEFAULT_TIMEOUT, is_url

UPDATED_MARKER_FILENAME: str = "COVID-19-Updated.txt"
"""
Default filename of the "last updated" marker file
"""

DAILY_REPORT_FILENAME_TEMPLATE: str = "{date:%m-%d-%Y}.csv"
"""
Filename template of the daily reports
"""

POLICY_KEYS: tuple[str, ...] = (
    "country_region",
    "province_state",
    "county_district",
    "granularity",
)
"""
Keys of a dataset's configuration which define its rollup policy
"""


def to_output_schema(value: str | OutputSchema) -> OutputSchema:
    """
    Convert a user-supplied value to an output schema

    Parameters
    ----------
    value
        Value to convert (case-insensitive)

    Returns
    -------
    :
        Matching output schema

    Raises
    ------
    UnrecognisedValueError
        `value` is not a known output schema
    """
    if isinstance(value, OutputSchema):
        return value

    try:
        return OutputSchema(value.strip().lower())
    except ValueError as exc:
        raise UnrecognisedValueError(
            unrecognised_value=value,
            name="schema",
            known_values=[v.value for v in OutputSchema],
        ) from exc


@define(frozen=True)
class DatasetConfig:
    """
    Configuration of one output dataset
    """

    filename: str
    """
    Filename of the output (relative to the output directory)
    """

    policy: RollupPolicy = field(factory=RollupPolicy)
    """
    Filtering and roll up applied to the records of this dataset
    """

    schema: OutputSchema = field(
        default=OutputSchema.GRANULAR, converter=to_output_schema
    )
    """
    Layout of the output
    """

    rolling_window: int | None = field(default=None)
    """
    Number of records over which to average the new counts

    If `None`, no rolling averages are written.
    """

    @rolling_window.validator
    def validate_rolling_window(
        self, attribute: Attribute[Any], value: int | None
    ) -> None:
        """
        Validate the rolling window value

        It must be `None` or a whole number of records, at least one.
        """
        if value is None:
            return

        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            msg = (
                f"`{attribute.name}` must be a whole number of at least 1 "
                f"(or None). Received {value!r}"
            )
            raise ValueError(msg)

    @property
    def first_output_index(self) -> int:
        """
        First date index which is written

        Layouts with second-order differences skip the dates
        which don't have enough history to look back over.
        """
        if self.schema.second_order:
            return SECOND_ORDER_LOOKBACK_STEPS

        return 0

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> DatasetConfig:
        """
        Initialise from a dictionary (e.g. loaded from JSON)

        Parameters
        ----------
        config
            Configuration. The filter and granularity keys
            (`country_region`, `province_state`, `county_district`, `granularity`)
            sit alongside `filename`, `schema` and `rolling_window`.

        Returns
        -------
        :
            Initialised configuration

        Examples
        --------
        >>> DatasetConfig.from_dict(
        ...     {"filename": "us.csv", "country_region": "US", "granularity": "state"}
        ... ).policy.granularity
        <Granularity.STATE: 'state'>
        """
        policy = RollupPolicy(**{k: config[k] for k in POLICY_KEYS if k in config})
        other = {k: v for k, v in config.items() if k not in POLICY_KEYS}

        return cls(policy=policy, **other)


DEFAULT_DAILY_REPORT_DATASETS: tuple[DatasetConfig, ...] = (
    DatasetConfig(
        filename="COVID-19-Global.csv",
        policy=RollupPolicy(granularity=Granularity.COUNTRY),
    ),
    DatasetConfig(
        filename="COVID-19-Global-Detail.csv",
        policy=RollupPolicy(granularity=Granularity.COUNTY),
    ),
    DatasetConfig(
        filename="COVID-19-US-States.csv",
        policy=RollupPolicy(country_region="US", granularity=Granularity.STATE),
    ),
    DatasetConfig(
        filename="COVID-19-US-Counties.csv",
        policy=RollupPolicy(country_region="US", granularity=Granularity.COUNTY),
    ),
)
"""
Datasets written from the daily reports by default
"""

DEFAULT_TIME_SERIES_DATASETS: tuple[DatasetConfig, ...] = (
    DatasetConfig(
        filename="COVID-19-Time-Series-csse.csv",
        schema=OutputSchema.SIMPLE,
    ),
)
"""
Datasets written from the time series files by default
"""


def get_daily_report_location_template(source: str) -> str:
    """
    Get the location template of the daily reports

    Parameters
    ----------
    source
        Either a template (containing `{date...}`),
        or a URL or directory which holds the daily reports

    Returns
    -------
    :
        Template which can be formatted with `date` to get each report's location

    Examples
    --------
    >>> get_daily_report_location_template("/data/daily")
    '/data/daily/{date:%m-%d-%Y}.csv'
    """
    if "{date" in source:
        return source

    if is_url(source):
        return f"{source.rstrip('/')}/{DAILY_REPORT_FILENAME_TEMPLATE}"

    return str(Path(source) / DAILY_REPORT_FILENAME_TEMPLATE)


def get_time_series_locations(source: str | None) -> dict[str, str]:
    """
    Get the locations of the time series files

    Parameters
    ----------
    source
        URL or directory which holds the time series files.
        If `None`, the published locations are used.

    Returns
    -------
    :
        Map from measure to location
    """
    if source is None:
        return dict(TIME_SERIES_URLS)

    filenames = {k: v.rsplit("/", 1)[-1] for k, v in TIME_SERIES_URLS.items()}
    if is_url(source):
        return {k: f"{source.rstrip('/')}/{v}" for k, v in filenames.items()}

    return {k: str(Path(source) / v) for k, v in filenames.items()}


def get_default_output_dir() -> Path:
    """
    Get the directory to write to if none is supplied

    Returns
    -------
    :
        The user's documents directory
    """
    return Path.home() / "Documents"


@define
class ConversionConfig:
    """
    Configuration of a conversion run
    """

    output_dir: Path = field(factory=get_default_output_dir, converter=Path)
    """
    Directory in which to write the datasets
    """

    datasets: tuple[DatasetConfig, ...] = field(
        default=DEFAULT_DAILY_REPORT_DATASETS, converter=tuple
    )
    """
    Datasets to write
    """

    updated_path: Path | None = field(default=None, converter=optional(Path))
    """
    Path of the "last updated" marker file

    If `None`, no marker is written.
    """

    source: str | None = None
    """
    Where to read the sources from

    If `None`, the published locations are used.
    See [get_daily_report_location_template][(m).]
    and [get_time_series_locations][(m).] for what can be supplied.
    """

    epoch: dt.date = EPOCH
    """
    Date of date index zero (and of the first daily report)
    """

    max_days: int | None = None
    """
    Maximum number of daily reports to read

    If `None`, reports are read until one can't be found.
    """

    timeout: float = DEFAULT_TIMEOUT
    """
    Timeout in seconds for each request
    """

    @property
    def daily_report_location_template(self) -> str:
        """
        Location template of the daily reports
        """
        if self.source is None:
            return DAILY_REPORT_URL_TEMPLATE

        return get_daily_report_location_template(self.source)

    @property
    def time_series_locations(self) -> dict[str, str]:
        """
        Locations of the time series files
        """
        return get_time_series_locations(self.source)

    def get_output_path(self, dataset: DatasetConfig) -> Path:
        """
        Get the path to which to write a dataset

        Parameters
        ----------
        dataset
            Dataset of interest

        Returns
        -------
        :
            Path to write `dataset` to
        """
        return self.output_dir / dataset.filename


def load_conversion_config(path: Path, **overrides: Any) -> ConversionConfig:
    """
    Load conversion configuration from a JSON file

    Parameters
    ----------
    path
        Path to the JSON file.
        `datasets` is a list of dictionaries,
        see [DatasetConfig.from_dict][(m).].
        `epoch` is an ISO 8601 date.
        Everything else maps directly onto [ConversionConfig][(m).].

    **overrides
        Values which override the values in the file
        (`None` values are ignored)

    Returns
    -------
    :
        Loaded configuration
    """
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)

    if "datasets" in raw:
        raw["datasets"] = tuple(DatasetConfig.from_dict(d) for d in raw["datasets"])

    if "epoch" in raw:
        raw["epoch"] = dt.date.fromisoformat(raw["epoch"])

    raw.update({k: v for k, v in overrides.items() if v is not None})

    return ConversionConfig(**raw)
