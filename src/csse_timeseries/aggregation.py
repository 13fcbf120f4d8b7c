"""
Storage and aggregation of observations

The store is a list of mappings, one per date index,
from geographic key to cumulative counts.
Additions are summed, which is how records from different sources
(or records which only differ in fields cleared by the rollup policy)
are merged.
"""

from __future__ import annotations

import pandas as pd
from attrs import define, field

from csse_timeseries.constants import DATE_INDEX_LEVEL, GEOGRAPHIC_LEVELS
from csse_timeseries.records import GeographicKey, Observation
from csse_timeseries.rollup import RollupPolicy
from csse_timeseries.typing import COUNT, RecordsDataFrame

RECORD_COLUMNS: tuple[str, ...] = (
    "latitude",
    "longitude",
    "confirmed",
    "deaths",
    "recovered",
)
"""
Columns of the frame returned by [AggregationStore.to_frame][(m).]
"""


@define
class AggregationStore:
    """
    Time series of observations, indexed by date index and geographic key

    Within one date index, each key appears at most once.
    Across date indices, keys may come and go
    (regions report intermittently).
    """

    policy: RollupPolicy = field(factory=RollupPolicy)
    """
    Policy applied to every key before it is stored
    """

    _dates: list[dict[GeographicKey, Observation]] = field(factory=list, init=False)

    @property
    def max_date_index(self) -> int:
        """
        Highest date index in the store (-1 if the store is empty)
        """
        return len(self._dates) - 1

    @property
    def n_records(self) -> int:
        """
        Number of (date index, key) records in the store
        """
        return sum(len(v) for v in self._dates)

    def ensure_date_index(self, date_index: int) -> None:
        """
        Grow the date dimension so that it includes `date_index`

        Gaps are filled with empty mappings.

        Parameters
        ----------
        date_index
            Date index which should exist after this call

        Raises
        ------
        ValueError
            `date_index` is negative
        """
        if date_index < 0:
            msg = f"Date indices must be non-negative. Received {date_index=}"
            raise ValueError(msg)

        while len(self._dates) <= date_index:
            self._dates.append({})

    def records_at(self, date_index: int) -> dict[GeographicKey, Observation]:
        """
        Get the records for a date index

        Parameters
        ----------
        date_index
            Date index of interest

        Returns
        -------
        :
            Records for `date_index` (empty if there is no data at `date_index`)
        """
        if 0 <= date_index < len(self._dates):
            return dict(self._dates[date_index])

        return {}

    def add_observation(  # noqa: PLR0913
        self,
        date_index: int,
        key: GeographicKey,
        confirmed: COUNT = 0,
        deaths: COUNT = 0,
        recovered: COUNT = 0,
    ) -> bool:
        """
        Add counts for a key at a date index

        The key is passed through [policy][(c).] first.
        The counts are added to whatever is already stored
        (starting from zero).
        There is no de-duplication,
        adding the same row twice counts it twice.
        The stored key is replaced by `key`,
        so the last written latitude and longitude win.

        Parameters
        ----------
        date_index
            Date index of the counts

        key
            Key of the entity the counts belong to

        confirmed
            Confirmed cases to add

        deaths
            Deaths to add

        recovered
            Recoveries to add

        Returns
        -------
        :
            `True` if the counts were stored,
            `False` if the policy filtered them out
        """
        key_stored = self.policy.apply(key)
        if key_stored is None:
            return False

        self.ensure_date_index(date_index)
        records = self._dates[date_index]

        observation = records.pop(key_stored, None)
        if observation is None:
            observation = Observation()

        observation.add(confirmed=confirmed, deaths=deaths, recovered=recovered)
        records[key_stored] = observation

        return True

    def to_frame(self) -> RecordsDataFrame:
        """
        Convert to a [pd.DataFrame][pandas.DataFrame]

        Returns
        -------
        :
            One row per date index and key,
            sorted by date index then country, state and county.
        """
        index_names = [DATE_INDEX_LEVEL, *GEOGRAPHIC_LEVELS]
        rows = [
            (
                date_index,
                key.country_region,
                key.province_state,
                key.county_district,
                key.latitude,
                key.longitude,
                observation.confirmed,
                observation.deaths,
                observation.recovered,
            )
            for date_index, records in enumerate(self._dates)
            for key, observation in records.items()
        ]

        res = pd.DataFrame(rows, columns=[*index_names, *RECORD_COLUMNS]).astype(
            {"confirmed": "int64", "deaths": "int64", "recovered": "int64"}
        )
        res = res.set_index(index_names).sort_index()

        return res
