"""
Calculation of metrics derived from the cumulative counts

Entities report intermittently,
so the previous record of an entity is not necessarily on the previous date.
All the calculations here work with the previous *reported* record,
i.e. absent dates are skipped rather than treated as zero.
We get this for free by only shifting within each entity's own rows.

The calculations are vectorised over all entities at once.
For much bigger data, an alternative is to keep the last two records
of each entity while ingesting, rather than calculating after the fact.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
from pandas_openscm.grouping import groupby_except

from csse_timeseries.constants import DATE_INDEX_LEVEL, GEOGRAPHIC_LEVELS
from csse_timeseries.records import Measure
from csse_timeseries.typing import RecordsDataFrame

SECOND_ORDER_LOOKBACK_STEPS: int = 2
"""
Number of earlier records the second-order difference looks back over
"""


def get_derived_column_names(
    measures: Sequence[Measure],
    second_order: bool = False,
    rolling_window: int | None = None,
) -> list[str]:
    """
    Get the names of the columns added by [calculate_derived_metrics][(m).]

    Parameters
    ----------
    measures
        Measures for which metrics are derived

    second_order
        Whether second-order differences are included

    rolling_window
        Rolling window, if rolling averages are included

    Returns
    -------
    :
        Column names, in the order they are added

    Examples
    --------
    >>> get_derived_column_names([Measure.CONFIRMED], second_order=True)
    ['new_confirmed', 'delta_confirmed']
    """
    res = [f"new_{m.value}" for m in measures]
    if second_order:
        res.extend(f"delta_{m.value}" for m in measures)

    if rolling_window is not None:
        res.extend(f"avg_new_{m.value}" for m in measures)

    return res


def _shift_within_entity(indf: pd.DataFrame) -> pd.DataFrame:
    # Previous reported record of the same entity, zero if there isn't one
    return groupby_except(indf, DATE_INDEX_LEVEL).shift(1, fill_value=0)


def calculate_derived_metrics(  # noqa: PLR0913
    records: RecordsDataFrame,
    measures: Sequence[Measure] = (Measure.CONFIRMED, Measure.DEATHS),
    second_order: bool = False,
    first_output_index: int = 0,
    rolling_window: int | None = None,
) -> pd.DataFrame:
    """
    Calculate metrics derived from the cumulative counts

    For each measure `m`, the following columns can be added:

    - `new_m`: `m(t) - m(t_prev)`, where `t_prev` is the most recent earlier
      date index at which the entity has a record (zero if there is none)
    - `delta_m` (if `second_order`): `new_m(t) - new_m(t_prev)`
      (zero if there is no earlier record)
    - `avg_new_m` (if `rolling_window` is given):
      mean of `new_m` over the entity's last `rolling_window` records

    Parameters
    ----------
    records
        Records, as returned by
        [AggregationStore.to_frame][(p).aggregation.AggregationStore.to_frame]

    measures
        Measures for which to derive metrics

    second_order
        Should second-order differences be calculated?

    first_output_index
        Rows with a date index before this are dropped from the output.
        They are still used when looking back from later rows.

    rolling_window
        Number of records over which to average the new counts.
        If `None`, rolling averages are not calculated.

    Returns
    -------
    :
        `records` with the derived columns added,
        sorted by date index then country, state and county

    Raises
    ------
    ValueError
        `rolling_window` is less than one
    """
    if rolling_window is not None and rolling_window < 1:
        msg = f"rolling_window must be at least one. Received {rolling_window=}"
        raise ValueError(msg)

    derived_columns = get_derived_column_names(
        measures, second_order=second_order, rolling_window=rolling_window
    )
    sorted_records = records.sort_index(level=[DATE_INDEX_LEVEL, *GEOGRAPHIC_LEVELS])
    if sorted_records.empty:
        return sorted_records.reindex(
            columns=[*sorted_records.columns, *derived_columns]
        )

    cumulative = sorted_records[[m.value for m in measures]]

    new = (cumulative - _shift_within_entity(cumulative)).astype("int64")
    derived = [new.add_prefix("new_")]

    if second_order:
        delta = (new - _shift_within_entity(new)).astype("int64")
        derived.append(delta.add_prefix("delta_"))

    if rolling_window is not None:
        avg = groupby_except(new, DATE_INDEX_LEVEL).transform(
            lambda s: s.rolling(rolling_window, min_periods=1).mean()
        )
        derived.append(avg.add_prefix("avg_new_"))

    res = pd.concat([sorted_records, *derived], axis="columns")
    res = res.loc[res.index.get_level_values(DATE_INDEX_LEVEL) >= first_output_index]

    return res
