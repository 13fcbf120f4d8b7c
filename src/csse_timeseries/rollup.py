"""
Filtering and rolling up of records before they are stored

Each output dataset has its own policy.
The policy decides whether a record is kept
and which geographic fields are cleared before the record is stored.
Records which only differ in the cleared fields end up with the same key,
so their counts are summed by the store.
"""

from __future__ import annotations

import sys

from attrs import define, evolve, field

from csse_timeseries.exceptions import UnrecognisedValueError
from csse_timeseries.records import GeographicKey

if sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from backports.strenum import StrEnum


class Granularity(StrEnum):
    """
    Finest geographic level which is kept distinct in the output
    """

    COUNTY = "county"
    """Keep counties distinct"""

    STATE = "state"
    """Sum counties up to the state level"""

    COUNTRY = "country"
    """Sum counties and states up to the country level"""

    @property
    def coarseness(self) -> int:
        """
        Coarseness of the granularity (higher is coarser)
        """
        return list(Granularity).index(self)

    def is_coarser_than(self, other: Granularity) -> bool:
        """
        Whether this granularity is coarser than `other`

        Parameters
        ----------
        other
            Granularity to compare to

        Returns
        -------
        :
            `True` if this granularity is coarser than `other`

        Examples
        --------
        >>> Granularity.COUNTRY.is_coarser_than(Granularity.STATE)
        True
        >>> Granularity.COUNTY.is_coarser_than(Granularity.COUNTY)
        False
        """
        return self.coarseness > other.coarseness

    @classmethod
    def from_user_facing(cls, value: str | Granularity) -> Granularity:
        """
        Get the granularity from a user-supplied value

        Parameters
        ----------
        value
            Value to convert (case-insensitive)

        Returns
        -------
        :
            Matching granularity

        Raises
        ------
        UnrecognisedValueError
            `value` is not a known granularity
        """
        if isinstance(value, Granularity):
            return value

        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise UnrecognisedValueError(
                unrecognised_value=value,
                name="granularity",
                known_values=[v.value for v in cls],
            ) from exc


def _matches(value: str, wanted: str | None) -> bool:
    if wanted is None:
        return True

    return value.casefold() == wanted.casefold()


@define(frozen=True)
class RollupPolicy:
    """
    Policy for filtering records and rolling them up to a granularity

    Filters are exact, case-insensitive matches.
    A filter of `None` means that the field is not filtered.
    """

    country_region: str | None = None
    """Only keep records for this country or region"""

    province_state: str | None = None
    """Only keep records for this province or state"""

    county_district: str | None = None
    """Only keep records for this county or district"""

    granularity: Granularity = field(
        default=Granularity.COUNTY, converter=Granularity.from_user_facing
    )
    """Finest geographic level which is kept distinct"""

    def matches(self, key: GeographicKey) -> bool:
        """
        Whether a key passes all of the filters

        Parameters
        ----------
        key
            Key to check

        Returns
        -------
        :
            `True` if `key` matches every filter which is set
        """
        return (
            _matches(key.country_region, self.country_region)
            and _matches(key.province_state, self.province_state)
            and _matches(key.county_district, self.county_district)
        )

    def apply(self, key: GeographicKey) -> GeographicKey | None:
        """
        Apply the policy to a key

        Parameters
        ----------
        key
            Key to apply the policy to

        Returns
        -------
        :
            `None` if the key is filtered out,
            otherwise the key with the fields finer than the granularity cleared

        Examples
        --------
        >>> policy = RollupPolicy(country_region="us", granularity="state")
        >>> policy.apply(GeographicKey("US", "Illinois", "Cook"))
        GeographicKey(country_region='US', province_state='Illinois', county_district='', latitude='', longitude='')
        >>> policy.apply(GeographicKey("Canada", "Ontario")) is None
        True
        """  # noqa: E501
        if not self.matches(key):
            return None

        if self.granularity.is_coarser_than(Granularity.STATE):
            return evolve(key, county_district="", province_state="")

        if self.granularity.is_coarser_than(Granularity.COUNTY):
            return evolve(key, county_district="")

        return key
