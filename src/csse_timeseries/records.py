"""
The records we build the time series out of
"""

from __future__ import annotations

import sys

from attrs import define, field

from csse_timeseries.typing import COUNT

if sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from backports.strenum import StrEnum


class Measure(StrEnum):
    """Quantity reported in the source data"""

    CONFIRMED = "confirmed"
    """Cumulative confirmed cases"""

    DEATHS = "deaths"
    """Cumulative deaths"""

    RECOVERED = "recovered"
    """Cumulative recoveries (only reported in the early data)"""


@define(frozen=True, order=True)
class GeographicKey:
    """
    Key which identifies a reporting entity

    Equality, hashing and ordering only consider
    `country_region`, `province_state` and `county_district`
    (ordered by country first, then state, then county).
    The latitude and longitude are descriptive only.
    As a result, two entities which only differ in their latitude and longitude
    are treated as the same entity.
    This is a known limitation, it mirrors how the data is published.

    Examples
    --------
    >>> a = GeographicKey("US", "Illinois", "Cook", latitude="41.8")
    >>> b = GeographicKey("US", "Illinois", "Cook", latitude="41.9")
    >>> a == b
    True
    >>> GeographicKey("Canada") < GeographicKey("US")
    True
    """

    country_region: str
    """Country or region"""

    province_state: str = ""
    """Province or state (empty if not reported or rolled up)"""

    county_district: str = ""
    """County or district (empty if not reported or rolled up)"""

    latitude: str = field(default="", eq=False, order=False)
    """Latitude, as it appears in the source (empty in the early data)"""

    longitude: str = field(default="", eq=False, order=False)
    """Longitude, as it appears in the source (empty in the early data)"""


@define
class Observation:
    """
    Cumulative counts for one entity on one date
    """

    confirmed: int = 0
    """Cumulative confirmed cases"""

    deaths: int = 0
    """Cumulative deaths"""

    recovered: int = 0
    """Cumulative recoveries"""

    def add(
        self, confirmed: COUNT = 0, deaths: COUNT = 0, recovered: COUNT = 0
    ) -> None:
        """
        Add counts to this observation in place

        Parameters
        ----------
        confirmed
            Confirmed cases to add

        deaths
            Deaths to add

        recovered
            Recoveries to add

        Raises
        ------
        ValueError
            Any of the counts is negative. Merging never decrements.
        """
        if confirmed < 0 or deaths < 0 or recovered < 0:
            msg = (
                "Counts can only be added, not removed. "
                f"Received {confirmed=}, {deaths=}, {recovered=}"
            )
            raise ValueError(msg)

        self.confirmed += int(confirmed)
        self.deaths += int(deaths)
        self.recovered += int(recovered)

    def merge(self, other: Observation) -> None:
        """
        Merge another observation into this one by summing the counts

        Parameters
        ----------
        other
            Observation to merge in
        """
        self.add(
            confirmed=other.confirmed, deaths=other.deaths, recovered=other.recovered
        )
