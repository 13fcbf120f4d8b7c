"""
End to end conversion: ingest, derive, render and write
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Callable

import pandas as pd
from attrs import define

from csse_timeseries.aggregation import AggregationStore
from csse_timeseries.config import ConversionConfig, DatasetConfig
from csse_timeseries.derived import calculate_derived_metrics
from csse_timeseries.ingestion import ingest_daily_reports, ingest_time_series
from csse_timeseries.serialisation import (
    date_from_index,
    format_updated_marker,
    render_csv,
    write_text_atomic,
)
from csse_timeseries.typing import Fetcher

LOGGER = logging.getLogger(__name__)


@define
class ConversionResult:
    """
    Result of a conversion
    """

    max_date_index: int
    """
    Highest date index for which there was data (-1 if there was none)
    """

    latest_date: dt.date | None
    """
    Date of the latest data (`None` if there was none)
    """

    written: dict[Path, int]
    """
    Map from each written dataset's path to the number of rows written
    """


def derive_dataset(store: AggregationStore, dataset: DatasetConfig) -> pd.DataFrame:
    """
    Calculate the rows of a dataset

    Parameters
    ----------
    store
        Store which holds the dataset's records

    dataset
        Configuration of the dataset

    Returns
    -------
    :
        Records with derived metrics, one row per output row
    """
    return calculate_derived_metrics(
        store.to_frame(),
        measures=dataset.schema.measures,
        second_order=dataset.schema.second_order,
        first_output_index=dataset.first_output_index,
        rolling_window=dataset.rolling_window,
    )


def write_outputs(
    config: ConversionConfig,
    stores: list[AggregationStore],
    max_date_index: int,
) -> ConversionResult:
    """
    Write each dataset and the "last updated" marker

    Each dataset is written atomically,
    so a failure part way through never leaves a partial file behind.

    Parameters
    ----------
    config
        Configuration of the conversion

    stores
        Store for each of `config.datasets` (in the same order)

    max_date_index
        Highest date index for which there was data

    Returns
    -------
    :
        Result of the conversion
    """
    written = {}
    for dataset, store in zip(config.datasets, stores):
        out_path = config.get_output_path(dataset)
        LOGGER.info("Writing %s to %s", dataset.filename, out_path)
        derived = derive_dataset(store, dataset)
        text = render_csv(
            derived,
            dataset.schema,
            epoch=config.epoch,
            rolling_window=dataset.rolling_window,
        )
        write_text_atomic(text, out_path)
        written[out_path] = len(derived)

    latest_date = None
    if max_date_index >= 0:
        latest_date = date_from_index(max_date_index, config.epoch)

    if config.updated_path is not None and latest_date is not None:
        LOGGER.info("Writing updated date to %s", config.updated_path)
        write_text_atomic(format_updated_marker(latest_date), config.updated_path)

    return ConversionResult(
        max_date_index=max_date_index, latest_date=latest_date, written=written
    )


def convert_daily_reports(
    config: ConversionConfig, fetch: Fetcher
) -> ConversionResult:
    """
    Convert the daily reports into the configured datasets

    Parameters
    ----------
    config
        Configuration of the conversion

    fetch
        Callable used to fetch each report

    Returns
    -------
    :
        Result of the conversion
    """
    stores = [AggregationStore(policy=d.policy) for d in config.datasets]
    max_date_index = ingest_daily_reports(
        stores,
        fetch=fetch,
        location_template=config.daily_report_location_template,
        epoch=config.epoch,
        max_days=config.max_days,
    )

    return write_outputs(config, stores, max_date_index)


def convert_time_series(config: ConversionConfig, fetch: Fetcher) -> ConversionResult:
    """
    Convert the time series files into the configured datasets

    Parameters
    ----------
    config
        Configuration of the conversion

    fetch
        Callable used to fetch each file

    Returns
    -------
    :
        Result of the conversion
    """
    stores = [AggregationStore(policy=d.policy) for d in config.datasets]
    max_date_index = ingest_time_series(
        stores,
        fetch=fetch,
        locations=config.time_series_locations,
        epoch=config.epoch,
    )

    return write_outputs(config, stores, max_date_index)


CONVERTERS: dict[str, Callable[[ConversionConfig, Fetcher], ConversionResult]] = {
    "daily": convert_daily_reports,
    "time-series": convert_time_series,
}
"""
Map from the name of each source layout to the function which converts it
"""
