"""
Ingestion of the sources into aggregation stores

Each source is fetched and parsed completely before the next one is fetched.
Every parsed record is offered to every store,
each store applies its own policy
(so one pass over the sources feeds all the output datasets).
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping, Sequence

from csse_timeseries.aggregation import AggregationStore
from csse_timeseries.constants import (
    DAILY_REPORT_URL_TEMPLATE,
    EPOCH,
    TIME_SERIES_URLS,
)
from csse_timeseries.exceptions import SourceFormatError, SourceNotFoundError
from csse_timeseries.normalisation import GeographicNormaliser
from csse_timeseries.parsing import parse_daily_report, parse_time_series
from csse_timeseries.records import GeographicKey, Measure, Observation
from csse_timeseries.typing import Fetcher

LOGGER = logging.getLogger(__name__)


def add_to_stores(
    stores: Sequence[AggregationStore],
    date_index: int,
    key: GeographicKey,
    observation: Observation,
) -> int:
    """
    Add an observation to each store

    Parameters
    ----------
    stores
        Stores to add to

    date_index
        Date index of the observation

    key
        Key of the observation

    observation
        Counts to add

    Returns
    -------
    :
        Number of stores which kept the observation
    """
    return sum(
        store.add_observation(
            date_index,
            key,
            confirmed=observation.confirmed,
            deaths=observation.deaths,
            recovered=observation.recovered,
        )
        for store in stores
    )


def ingest_time_series(
    stores: Sequence[AggregationStore],
    fetch: Fetcher,
    locations: Mapping[str, str] = TIME_SERIES_URLS,
    epoch: dt.date = EPOCH,
) -> int:
    """
    Ingest the time series files

    There is one file per measure.
    Each file provides one measure for every entity and date,
    the measures are combined in the stores.

    Parameters
    ----------
    stores
        Stores to ingest into

    fetch
        Callable used to fetch each file

    locations
        Map from measure to the location of its file

    epoch
        Date of date index zero

    Returns
    -------
    :
        Highest date index ingested (-1 if there was no data)

    Raises
    ------
    SourceNotFoundError
        One of the files could not be found

    SourceFormatError
        One of the files does not have the time series layout
        or has data from before `epoch`
    """
    max_date_index = -1
    for measure_name, location in locations.items():
        measure = Measure(measure_name)
        content = fetch(location)
        if content is None:
            raise SourceNotFoundError(location)

        n_records = 0
        for date, key, observation in parse_time_series(content, measure):
            date_index = (date - epoch).days
            if date_index < 0:
                msg = f"{location} has data for {date}, which is before {epoch=}"
                raise SourceFormatError(msg)

            add_to_stores(stores, date_index, key, observation)
            max_date_index = max(max_date_index, date_index)
            n_records += 1

        LOGGER.debug("Read %d %s records from %s", n_records, measure, location)

    return max_date_index


def ingest_daily_reports(  # noqa: PLR0913
    stores: Sequence[AggregationStore],
    fetch: Fetcher,
    location_template: str = DAILY_REPORT_URL_TEMPLATE,
    epoch: dt.date = EPOCH,
    normaliser: GeographicNormaliser | None = None,
    max_days: int | None = None,
) -> int:
    """
    Ingest the daily reports

    Reports are read for each day from `epoch` onwards,
    until a report can't be found (i.e. `fetch` returns `None`).
    That is the normal way for ingestion to finish, it is not an error.

    Parameters
    ----------
    stores
        Stores to ingest into

    fetch
        Callable used to fetch each report

    location_template
        Template of the location of each report, formatted with `date`

    epoch
        Date of the first report, which becomes date index zero

    normaliser
        Normaliser to apply to each report's geographic fields

    max_days
        Maximum number of reports to read. If `None`, there is no maximum.

    Returns
    -------
    :
        Highest date index ingested (-1 if there was no data)
    """
    if normaliser is None:
        normaliser = GeographicNormaliser()

    date_index = 0
    while max_days is None or date_index < max_days:
        date = epoch + dt.timedelta(days=date_index)
        location = location_template.format(date=date)
        content = fetch(location)
        if content is None:
            LOGGER.info("No report for %s, assuming there is no more data", date)
            break

        for store in stores:
            store.ensure_date_index(date_index)

        n_records = 0
        for key, observation in parse_daily_report(content, normaliser=normaliser):
            add_to_stores(stores, date_index, key, observation)
            n_records += 1

        LOGGER.debug("Read %d records for %s", n_records, date)
        date_index += 1

    return date_index - 1
