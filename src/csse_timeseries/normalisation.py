"""
Normalisation of geographic names

Over time, the daily reports changed how they named places.
For example, early reports put US counties in the state column
("Cook County, IL") while later reports have a separate county column.
The normaliser rewrites the early naming into the later naming
so that the same entity gets the same key throughout the time series.
"""

from __future__ import annotations

from collections.abc import Mapping

from attrs import define

from csse_timeseries.constants import COUNTRY_ALIASES, US_COUNTRY, US_STATE_NAMES

COUNTY_SUFFIX: str = " county"
"""
Suffix (lower case) that is stripped from county names split out of the state
"""

VIRGIN_ISLANDS: str = "Virgin Islands"
"""
Name of the US Virgin Islands
"""


def strip_county_suffix(county: str) -> str:
    """
    Strip a trailing " County" (any case) from a county name

    Parameters
    ----------
    county
        County name

    Returns
    -------
    :
        `county` without any trailing " County"

    Examples
    --------
    >>> strip_county_suffix("Cook County")
    'Cook'
    >>> strip_county_suffix("Kings COUNTY")
    'Kings'
    >>> strip_county_suffix("Orange")
    'Orange'
    """
    if county.lower().endswith(COUNTY_SUFFIX):
        return county[: -len(COUNTY_SUFFIX)]

    return county


@define(frozen=True)
class GeographicNormaliser:
    """
    Rewrites historical naming variations into a consistent naming

    The rewrites are applied in a fixed order,
    because later steps rely on the output of earlier steps:

    1. country aliases are rewritten (e.g. "Mainland China" becomes "China")
    1. for the US, if there is no county column,
       "County, ST" in the state field is split into a county and a state,
       with the state abbreviation expanded
    1. "Virgin Islands" in the US county field is moved to the state field

    Examples
    --------
    >>> normaliser = GeographicNormaliser()
    >>> normaliser("", "Cook, IL", "US", has_county_column=False)
    ('Cook', 'Illinois', 'US')
    >>> normaliser("", "Hubei", "Mainland China", has_county_column=False)
    ('', 'Hubei', 'China')
    >>> normaliser("", "Virgin Islands, U.S.", "US", has_county_column=False)
    ('', 'Virgin Islands', 'US')
    """

    country_aliases: Mapping[str, str] = COUNTRY_ALIASES
    """
    Map from (lower case) historical country name to the name to use
    """

    state_names: Mapping[str, str] = US_STATE_NAMES
    """
    Map from (upper case) US state abbreviation to the state name
    """

    def normalise_country(self, country: str) -> str:
        """
        Rewrite a country alias

        Parameters
        ----------
        country
            Country name

        Returns
        -------
        :
            Name to use for `country` (`country` itself if it isn't an alias)
        """
        return self.country_aliases.get(country.lower(), country)

    def expand_state_abbreviation(self, state: str) -> str:
        """
        Expand a US state abbreviation

        Parameters
        ----------
        state
            Abbreviation to expand

        Returns
        -------
        :
            Name of the state (`state` itself if it isn't a known abbreviation)
        """
        return self.state_names.get(state.upper(), state)

    def __call__(
        self,
        county: str,
        state: str,
        country: str,
        has_county_column: bool,
    ) -> tuple[str, str, str]:
        """
        Normalise the geographic fields of a row

        Parameters
        ----------
        county
            County field (empty if there is no county column)

        state
            State field, as it appears in the source

        country
            Country field

        has_county_column
            Whether the source had an explicit county column

        Returns
        -------
        :
            Normalised county, state and country
        """
        country = self.normalise_country(country)
        is_us = country.lower() == US_COUNTRY.lower()

        if is_us and not has_county_column and "," in state:
            county_raw, state_raw = state.split(",", 1)
            county = strip_county_suffix(county_raw.strip())
            state = self.expand_state_abbreviation(state_raw.strip())

        if is_us and county.lower() == VIRGIN_ISLANDS.lower():
            state = VIRGIN_ISLANDS
            county = ""

        return county, state, country
