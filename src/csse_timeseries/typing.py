"""
Type hints that are used throughout
"""

from __future__ import annotations

from typing import Callable, Optional, Union

import numpy as np
import pandas as pd
from typing_extensions import TypeAlias

COUNT: TypeAlias = Union[int, np.integer]
"""
Type alias for a value that can be used as a case count
"""

Fetcher: TypeAlias = Callable[[str], Optional[str]]
"""
Type alias for a callable that returns the text at a location

The callable returns `None` if there is nothing at the location.
This is how "no more data" is signalled, so it must not raise in that case.
"""

RecordsDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for the [pandas.DataFrame][pd.DataFrame] shape we use throughout

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect one row per date index and geographic key.
The index holds the date index and the identifying geographic fields.
The columns hold the descriptive fields (latitude and longitude, as raw text)
and the cumulative counts.

An example of this kind of data is given below.

```python
                                                  latitude longitude  confirmed  deaths  recovered
date_index country_region province_state county_district
0          US             Washington     King                47.5    -121.8          1       0          0
1          US             Washington     King                47.5    -121.8          3       1          0
```
"""
