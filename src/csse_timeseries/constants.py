"""
Constants used throughout

Lookup tables are exposed as read-only mappings.
Pass them (or your own versions) into the parser and normaliser
rather than mutating them.
"""

from __future__ import annotations

import datetime as dt
from types import MappingProxyType

EPOCH: dt.date = dt.date(2020, 1, 22)
"""
Date of the first published data, used as date index zero
"""

SOURCE_REPOSITORY_URL: str = "https://github.com/CSSEGISandData/COVID-19"
"""
Repository in which the source data is published
"""

_RAW_DATA_ROOT = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/csse_covid_19_data"
)

TIME_SERIES_URLS: MappingProxyType[str, str] = MappingProxyType(
    {
        "confirmed": f"{_RAW_DATA_ROOT}/csse_covid_19_time_series/time_series_19-covid-Confirmed.csv",  # noqa: E501
        "deaths": f"{_RAW_DATA_ROOT}/csse_covid_19_time_series/time_series_19-covid-Deaths.csv",  # noqa: E501
        "recovered": f"{_RAW_DATA_ROOT}/csse_covid_19_time_series/time_series_19-covid-Recovered.csv",  # noqa: E501
    }
)
"""
Locations of the time series files, one per measure
"""

DAILY_REPORT_URL_TEMPLATE: str = (
    f"{_RAW_DATA_ROOT}/csse_covid_19_daily_reports/{{date:%m-%d-%Y}}.csv"
)
"""
Template for the location of each daily report

Formatted with `date`, a [datetime.date][].
"""

TIME_SERIES_ID_COLUMNS: tuple[str, ...] = (
    "Province/State",
    "Country/Region",
    "Lat",
    "Long",
)
"""
Columns that must start the header of the time series files (in this order)
"""

GEOGRAPHIC_LEVELS: tuple[str, ...] = (
    "country_region",
    "province_state",
    "county_district",
)
"""
Index levels which identify a geographic entity, in sort priority order
"""

DATE_INDEX_LEVEL: str = "date_index"
"""
Name of the index level which holds the date index
"""

DAILY_REPORT_FIELDS_REQUIRED: tuple[str, ...] = (
    "state",
    "country",
    "confirmed",
    "deaths",
)
"""
Fields which every daily report layout must provide
"""

DAILY_REPORT_FIELDS_OPTIONAL: tuple[str, ...] = (
    "county",
    "latitude",
    "longitude",
    "recovered",
)
"""
Fields which only some daily report layouts provide
"""

DAILY_REPORT_COLUMN_SYNONYMS: MappingProxyType[str, str] = MappingProxyType(
    {
        "admin2": "county",
        "county": "county",
        "province_state": "state",
        "province/state": "state",
        "country_region": "country",
        "country/region": "country",
        "lat": "latitude",
        "latitude": "latitude",
        "long": "longitude",
        "long_": "longitude",
        "longitude": "longitude",
        "confirmed": "confirmed",
        "deaths": "deaths",
        "recovered": "recovered",
    }
)
"""
Map from (lower case) column name in the daily reports to the field it holds
"""

COUNTRY_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "mainland china": "China",
        "south korea": "Korea, South",
    }
)
"""
Map from (lower case) historical country name to the name used in later data
"""

US_COUNTRY: str = "US"
"""
Name of the United States in the source data
"""

US_STATE_NAMES: MappingProxyType[str, str] = MappingProxyType(
    {
        "AL": "Alabama",
        "AK": "Alaska",
        "AZ": "Arizona",
        "AR": "Arkansas",
        "CA": "California",
        "CO": "Colorado",
        "CT": "Connecticut",
        "DE": "Delaware",
        "FL": "Florida",
        "GA": "Georgia",
        "HI": "Hawaii",
        "ID": "Idaho",
        "IL": "Illinois",
        "IN": "Indiana",
        "IA": "Iowa",
        "KS": "Kansas",
        "KY": "Kentucky",
        "LA": "Louisiana",
        "ME": "Maine",
        "MD": "Maryland",
        "MA": "Massachusetts",
        "MI": "Michigan",
        "MN": "Minnesota",
        "MS": "Mississippi",
        "MO": "Missouri",
        "MT": "Montana",
        "NE": "Nebraska",
        "NV": "Nevada",
        "NH": "New Hampshire",
        "NJ": "New Jersey",
        "NM": "New Mexico",
        "NY": "New York",
        "NC": "North Carolina",
        "ND": "North Dakota",
        "OH": "Ohio",
        "OK": "Oklahoma",
        "OR": "Oregon",
        "PA": "Pennsylvania",
        "RI": "Rhode Island",
        "SC": "South Carolina",
        "SD": "South Dakota",
        "TN": "Tennessee",
        "TX": "Texas",
        "UT": "Utah",
        "VT": "Vermont",
        "VA": "Virginia",
        "WA": "Washington",
        "WV": "West Virginia",
        "WI": "Wisconsin",
        "WY": "Wyoming",
        "DC": "District of Columbia",
        "AS": "American Samoa",
        "GU": "Guam",
        "MP": "Northern Mariana Islands",
        "PR": "Puerto Rico",
        "VI": "Virgin Islands",
    }
)
"""
Map from US postal abbreviation to state or territory name
"""

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
"""
English month abbreviations (independent of the host's locale)
"""
