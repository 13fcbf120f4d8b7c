# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.6
#   kernelspec:
#     display_name: Python 3 (ipykernel)
#     language: python
#     name: python3
# ---

# %% [markdown]
# # How to configure the datasets you write
#
# By default, the daily reports are converted into four datasets
# (global by country, global in full detail, US states and US counties).
# Here we show how to write your own datasets instead,
# e.g. one dataset per country of interest at a coarser granularity.
#
# To keep this guide self-contained, we don't fetch the published data.
# Instead, we use a fetcher which reads from a dictionary.
# In practice you would use `csse_timeseries.sources.fetch_text`
# (which is what the command line does).

# %% [markdown]
# ## Imports

# %%
import datetime as dt
import tempfile
from pathlib import Path

from csse_timeseries.config import ConversionConfig, DatasetConfig
from csse_timeseries.constants import EPOCH
from csse_timeseries.conversion import convert_daily_reports
from csse_timeseries.rollup import Granularity, RollupPolicy
from csse_timeseries.testing import DictFetcher, make_csv

# %% [markdown]
# ## Source data
#
# Three days of reports in the earliest layout.
# Note that US counties are reported in the state column,
# these are split out when the reports are parsed.

# %%
header = ["Province/State", "Country/Region", "Last Update", "Confirmed", "Deaths"]
reports = [
    [["Cook, IL", "US", "", 1, 0], ["Ontario", "Canada", "", 1, 0]],
    [["Cook, IL", "US", "", 3, 0], ["Kane, IL", "US", "", 1, 0]],
    [["Cook, IL", "US", "", 7, 1], ["Ontario", "Canada", "", 2, 0]],
]
location_template = "daily/{date:%m-%d-%Y}.csv"
fetch = DictFetcher(
    {
        location_template.format(date=EPOCH + dt.timedelta(days=i)): make_csv(
            header, rows
        )
        for i, rows in enumerate(reports)
    }
)

# %% [markdown]
# ## Datasets
#
# Each dataset has a rollup policy.
# The policy filters the records (exact, case-insensitive matches)
# and sets the finest level which is kept distinct.
# Records which end up with the same key are summed.

# %%
datasets = (
    DatasetConfig(
        filename="illinois.csv",
        policy=RollupPolicy(
            country_region="US",
            province_state="Illinois",
            granularity=Granularity.STATE,
        ),
        rolling_window=2,
    ),
    DatasetConfig(
        filename="countries.csv",
        policy=RollupPolicy(granularity="country"),
        schema="simple",
    ),
)

# %% [markdown]
# ## Conversion

# %%
out_dir = Path(tempfile.mkdtemp())
config = ConversionConfig(
    output_dir=out_dir,
    datasets=datasets,
    source=location_template,
    updated_path=out_dir / "updated.txt",
)
result = convert_daily_reports(config, fetch=fetch)
result

# %% [markdown]
# The granular layout only starts once there is enough history
# to calculate the second-order differences.

# %%
print((out_dir / "illinois.csv").read_text())

# %% [markdown]
# The simple layout starts from the first date.

# %%
print((out_dir / "countries.csv").read_text())

# %%
print((out_dir / "updated.txt").read_text())

# %% [markdown]
# The same configuration can be written as JSON
# and passed to the command line with `--config`.
#
# ```json
# {
#   "datasets": [
#     {
#       "filename": "illinois.csv",
#       "country_region": "US",
#       "province_state": "Illinois",
#       "granularity": "state",
#       "rolling_window": 2
#     },
#     {"filename": "countries.csv", "granularity": "country", "schema": "simple"}
#   ]
# }
# ```
