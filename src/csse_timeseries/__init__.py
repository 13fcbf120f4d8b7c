"""
Conversion of the Johns Hopkins CSSE COVID-19 data into denormalised time series CSV files.
"""

import importlib.metadata

__version__ = importlib.metadata.version("csse-timeseries")
